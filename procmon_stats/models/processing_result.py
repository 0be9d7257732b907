from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from .counters import CategoryCounter, Counters
from .error_record import ErrorRecord

"""Processing result models for the Procmon statistics pipeline.

PostProcessingStats and BatchStatsAccumulator are mutable accumulators owned
by a single LogProcessor; everything handed back to callers (FileResult,
ProcessingResult, PostProcessingSummary, PerformanceStats, ProgressEvent) is
frozen.
"""


class FileStatus(Enum):
    """Final outcome of one input file."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ProgressEvent:
    """Snapshot of a running file, yielded by LogProcessor.run() and status().

    percent_complete is an estimate (characters consumed / file size).
    """
    file_name: str
    lines_processed: int
    records_processed: int
    percent_complete: float


@dataclass(frozen=True)
class PerformanceStats:
    """Per-file performance block."""
    duration_seconds: float
    records_per_second: float
    mb_per_second: float
    memory_used_mb: float
    total_batches: int = 0
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0


@dataclass(frozen=True)
class PostProcessingSummary:
    """Finalized post-processing counters plus derived rates."""
    records_seen: int
    records_retained: int
    success_filtered: int
    duplicates_removed: int
    invalid_records_skipped: int
    records_sanitized: int
    filtered_by_result: dict[str, int]
    start_time: datetime
    end_time: datetime
    duration_seconds: float
    retention_rate: float
    duplicate_rate: float
    success_filter_rate: float
    records_per_second: float


class PostProcessingStats:
    """Running post-processing counters for one file.

    Created at pipeline start; ``finalize()`` stamps the end time and returns
    the immutable summary.
    """

    def __init__(self) -> None:
        self.records_seen = 0
        self.records_retained = 0
        self.success_filtered = 0
        self.duplicates_removed = 0
        self.invalid_records_skipped = 0
        self.records_sanitized = 0
        self.filtered_by_result = CategoryCounter()
        self.start_time: datetime = datetime.now(UTC)
        self.end_time: datetime | None = None

    def finalize(self) -> PostProcessingSummary:
        self.end_time = datetime.now(UTC)
        duration = (self.end_time - self.start_time).total_seconds()
        seen = self.records_seen

        def _rate(n: int) -> float:
            return round(n / seen, 4) if seen else 0.0

        return PostProcessingSummary(
            records_seen=seen,
            records_retained=self.records_retained,
            success_filtered=self.success_filtered,
            duplicates_removed=self.duplicates_removed,
            invalid_records_skipped=self.invalid_records_skipped,
            records_sanitized=self.records_sanitized,
            filtered_by_result=self.filtered_by_result.to_dict(),
            start_time=self.start_time,
            end_time=self.end_time,
            duration_seconds=duration,
            retention_rate=_rate(self.records_retained),
            duplicate_rate=_rate(self.duplicates_removed),
            success_filter_rate=_rate(self.success_filtered),
            records_per_second=(seen / duration) if duration > 0 else 0.0,
        )


@dataclass(frozen=True)
class FileResult:
    """Outcome of processing a single input file.

    success=False never discards what was counted before the failure;
    ``incomplete`` marks such partial statistics.
    """
    file_name: str
    status: FileStatus
    success: bool
    total_records: int  # records folded into counters
    lines_processed: int
    records_seen: int
    process_types: dict[str, int]
    operation_types: dict[str, int]
    result_types: dict[str, int]
    performance: PerformanceStats
    start_time: datetime
    end_time: datetime
    errors: list[ErrorRecord] = field(default_factory=list)
    errors_dropped: int = 0
    post_processing: PostProcessingSummary | None = None
    error: str | None = None
    incomplete: bool = False

    def counters(self) -> Counters:
        """Rebuild case-insensitive Counters from the stored dicts."""
        return Counters(
            process_types=CategoryCounter(self.process_types),
            operation_types=CategoryCounter(self.operation_types),
            result_types=CategoryCounter(self.result_types),
        )


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for a run over one or more files."""
    success_files: int
    failed_files: int
    total_records: int
    lines_processed: int
    records_seen: int
    records_retained: int
    duplicates_removed: int
    success_filtered: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_records_per_sec: float
    counters: Counters = field(default_factory=Counters)
    file_results: list[FileResult] | None = None


class BatchStatsAccumulator:
    """Helper class to accumulate batch fold timings for PerformanceStats."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        """Add a batch timing measurement."""
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate batch statistics.

        Returns:
            tuple: (total_batches, avg_batch_seconds, p95_batch_seconds)
        """
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method='inclusive'
            )[18]  # 95th percentile (19th out of 20 quantiles, 0-indexed)

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
