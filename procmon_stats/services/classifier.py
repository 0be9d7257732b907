from __future__ import annotations

from collections.abc import Iterable

from ..models.config_models import DEFAULT_BENIGN_RESULTS
from ..models.counters import CategoryCounter
from ..models.record import Header, Record

"""Benign result classification.

A result is benign when it equals, or contains, one of the configured
indicators (case-insensitive). BUFFER OVERFLOW and FAST IO DISALLOWED are in
the defaults because Windows returns them routinely for successful I/O.
"""

__all__ = [
    "ResultClassifier",
]


class ResultClassifier:
    def __init__(
        self,
        indicators: Iterable[str] = DEFAULT_BENIGN_RESULTS,
        *,
        result_field: str = "Result",
        header: Header | None = None,
        filtered_counter: CategoryCounter | None = None,
    ) -> None:
        self.indicators = tuple(i.strip().upper() for i in indicators if i.strip())
        self.result_field = result_field
        self.header = header
        self.filtered_by_result = (
            filtered_counter if filtered_counter is not None else CategoryCounter()
        )

    def is_benign_value(self, value: str) -> bool:
        """Pure check on a result string (no counters touched)."""
        upper = value.strip().upper()
        if not upper:
            return False
        # 完全一致も部分一致に含まれる
        return any(ind in upper for ind in self.indicators)

    def is_benign(self, record: Record) -> bool:
        """Classify a record; benign results are tallied per result type."""
        value = record.get_field(self.result_field, self.header)
        if self.is_benign_value(value):
            self.filtered_by_result.increment(value.strip())
            return True
        return False

    def reset(self) -> None:
        self.filtered_by_result.reset()
