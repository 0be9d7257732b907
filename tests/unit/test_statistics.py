from __future__ import annotations

import math

import pytest

from procmon_stats.analytics.statistics import describe, mean, percentile, std_dev, z_score


def test_mean_and_empty():
    assert mean([1, 2, 3, 4]) == 2.5
    assert mean([]) == 0.0


def test_std_dev_is_population():
    # 分母は N
    assert std_dev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)
    assert std_dev([5]) == 0.0
    assert std_dev([]) == 0.0


def test_z_score_zero_when_no_variance():
    assert z_score(10, 10, 0) == 0.0
    assert z_score(12, 10, 2) == 1.0


@pytest.mark.parametrize(
    "p,expected",
    [(0, 15), (5, 15), (30, 20), (40, 20), (50, 35), (100, 50)],
)
def test_percentile_nearest_rank(p, expected):
    assert percentile([50, 15, 40, 35, 20], p) == expected


def test_percentile_edge_cases():
    assert percentile([], 50) == 0.0
    with pytest.raises(ValueError):
        percentile([1], 101)


def test_describe():
    d = describe([1, 1, 1, 100])
    assert d.count == 4
    assert (d.minimum, d.maximum) == (1.0, 100.0)
    assert d.mean == pytest.approx(25.75)
    assert d.p50 == 1.0
    assert d.p99 == 100.0
    assert math.isclose(d.std_dev, std_dev([1, 1, 1, 100]))

    empty = describe([])
    assert empty.count == 0 and empty.p95 == 0.0
