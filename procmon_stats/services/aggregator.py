from __future__ import annotations

import gc
import logging
import time

from ..csvlog.reader import ColumnMap
from ..models.counters import Counters
from ..models.processing_result import BatchStatsAccumulator
from ..models.record import Record

"""Batch aggregation of retained records into the three counters.

Memory policy: the aggregator holds at most ``batch_size`` records. A full
batch is folded into the counters and cleared; after ``gc_interval`` records
have been folded since the last reclamation, gc.collect() is hinted.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "BatchAggregator",
]


class BatchAggregator:
    """Accumulate records into fixed-size batches and fold them into Counters.

    Not thread-safe: one aggregator per processor, single owner.
    """

    def __init__(
        self,
        counters: Counters,
        columns: ColumnMap,
        *,
        batch_size: int = 50_000,
        gc_interval: int = 50_000,
        batch_stats: BatchStatsAccumulator | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if gc_interval < 1:
            raise ValueError("gc_interval must be >= 1")
        self.counters = counters
        self.columns = columns
        self.batch_size = batch_size
        self.gc_interval = gc_interval
        self.batch_stats = batch_stats if batch_stats is not None else BatchStatsAccumulator()
        self._batch: list[Record] = []
        self._since_gc = 0
        self.records_folded = 0
        self.batches_folded = 0
        self.gc_collections = 0

    @property
    def pending(self) -> int:
        """Records queued but not yet folded."""
        return len(self._batch)

    def add(self, record: Record) -> None:
        self._batch.append(record)
        if len(self._batch) >= self.batch_size:
            self.flush()

    def flush(self) -> int:
        """Fold the current batch into the counters (also used at end of stream).

        Returns:
            Number of records folded by this call
        """
        if not self._batch:
            return 0
        # 先に batch を切り離す (途中で例外が出ても同じレコードを二重に数えない)
        batch, self._batch = self._batch, []
        start = time.perf_counter()
        process_col = self.columns.process
        operation_col = self.columns.operation
        result_col = self.columns.result
        processes = self.counters.process_types
        operations = self.counters.operation_types
        results = self.counters.result_types
        for record in batch:
            # 空値はカウントしない
            if process_col is not None:
                value = record.get(process_col, "")
                if value:
                    processes.increment(value)
            if operation_col is not None:
                value = record.get(operation_col, "")
                if value:
                    operations.increment(value)
            if result_col is not None:
                value = record.get(result_col, "")
                if value:
                    results.increment(value)
        folded = len(batch)
        self.records_folded += folded
        self.batches_folded += 1
        self._since_gc += folded
        self.batch_stats.add_batch_time(time.perf_counter() - start)
        if self._since_gc >= self.gc_interval:
            self._reclaim()
        return folded

    def _reclaim(self) -> None:
        collected = gc.collect()
        self.gc_collections += 1
        self._since_gc = 0
        logger.debug(
            "gc after %d folded records: collected=%d", self.records_folded, collected
        )
