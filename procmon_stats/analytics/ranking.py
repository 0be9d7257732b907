from __future__ import annotations

from collections.abc import Mapping

import pandas as pd

"""Top-N rankings over category counters."""

__all__ = [
    "top_items",
]

DEFAULT_TOP_N = 15


def top_items(counts: Mapping[str, int], n: int = DEFAULT_TOP_N) -> list[tuple[str, int]]:
    """Return the ``n`` largest entries as (key, count) pairs.

    Ties are broken by key (ascending) so the ranking is stable across runs.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    if not counts or n == 0:
        return []
    series = pd.Series(dict(counts.items()), dtype="int64")
    # key 昇順 -> count 降順 (mergesort は安定)
    series = series.sort_index().sort_values(ascending=False, kind="mergesort")
    return [(str(k), int(v)) for k, v in series.head(n).items()]
