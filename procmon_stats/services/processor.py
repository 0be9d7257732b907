from __future__ import annotations

import logging
import time
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path

import psutil

from ..csvlog.parser import parse_line
from ..csvlog.reader import (
    ColumnMap,
    HeaderError,
    column_aliases,
    detect_columns,
    iter_raw_lines,
    normalize_record,
    read_header,
    resolve_fields,
)
from ..csvlog.writer import SideChannelWriter
from ..logging.error_log import LineErrorLog
from ..models.config_models import AppConfig
from ..models.counters import Counters
from ..models.processing_result import (
    BatchStatsAccumulator,
    FileResult,
    FileStatus,
    PerformanceStats,
    PostProcessingStats,
    ProgressEvent,
)
from ..models.record import Header, MissingFieldError, RawLine
from .aggregator import BatchAggregator
from .classifier import ResultClassifier
from .dedup import Deduplicator

"""Single-file streaming pipeline.

raw line -> parse -> normalize (validate, sanitize) -> dedup -> benign check
-> aggregate (retained) / archive (benign)

One LogProcessor owns its Counters, seen-hash set and post-processing stats.
Each file gets a fresh processor (or an explicit reset()); nothing is shared
across files. Progress is exposed as a generator of ProgressEvent from run()
plus the polling method status(); no caller code runs inside the line loop.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "LogProcessor",
]

_BYTES_PER_MB = 1024 * 1024


def _memory_used_mb() -> float:
    return psutil.Process().memory_info().rss / _BYTES_PER_MB


class LogProcessor:
    """Stream one Procmon CSV file into aggregate counters.

    Usage::

        processor = LogProcessor(config)
        for event in processor.run(path):
            ...  # progress display
        result = processor.result

    or simply ``processor.process_file(path)``.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        self.counters = Counters()
        self.stats = PostProcessingStats()
        self._batch_stats = BatchStatsAccumulator()
        self._result: FileResult | None = None
        self._aggregator: BatchAggregator | None = None
        self._file_name = ""
        self._file_size = 0
        self._lines = 0
        self._chars = 0
        self._required_fields: tuple[str, ...] = ()
        self._done = False

    # ------------------------------------------------------------------ state
    def reset(self) -> None:
        """Drop all per-file state (counters, seen hashes, stats)."""
        self.counters = Counters()
        self.stats = PostProcessingStats()
        self._batch_stats = BatchStatsAccumulator()
        self._result = None
        self._aggregator = None
        self._file_name = ""
        self._file_size = 0
        self._lines = 0
        self._chars = 0
        self._required_fields = ()
        self._done = False

    @property
    def result(self) -> FileResult:
        if self._result is None:
            raise RuntimeError("no file has been processed yet")
        return self._result

    def status(self) -> ProgressEvent:
        """Polling snapshot of the file currently (or last) processed."""
        if self._done:
            percent = 100.0
        elif self._file_size > 0:
            percent = round(min(100.0, self._chars * 100.0 / self._file_size), 1)
        else:
            percent = 0.0
        return ProgressEvent(
            file_name=self._file_name,
            lines_processed=self._lines,
            records_processed=self.stats.records_seen,
            percent_complete=percent,
        )

    # ------------------------------------------------------------- processing
    def process_file(self, path: Path) -> FileResult:
        """Run the pipeline to completion and return the FileResult."""
        for _ in self.run(path):
            pass
        return self.result

    def run(self, path: Path) -> Generator[ProgressEvent, None, FileResult]:
        """Process ``path``, yielding ProgressEvent every progress_interval lines.

        The final FileResult is both the generator's return value and
        ``self.result``. File-level failures never raise; they produce a
        FileResult with success=False.
        """
        self.reset()
        path = Path(path)
        self._file_name = path.name
        cfg = self.config
        errors = LineErrorLog(path.name, cap=cfg.processing.error_cap)
        start_time = datetime.now(UTC)
        started = time.perf_counter()
        logger.info("file=%s start", path.name)

        if not path.is_file():
            errors.add(-1, "FILE_NOT_FOUND", f"Input file not found: {path}")
            return self._finish(path, errors, start_time, started, error=f"Input file not found: {path}")
        self._file_size = path.stat().st_size
        if self._file_size == 0:
            errors.add(-1, "EMPTY_FILE", f"Input file is empty: {path}")
            return self._finish(path, errors, start_time, started, error=f"Input file is empty: {path}")

        aggregator: BatchAggregator | None = None
        writer: SideChannelWriter | None = None
        lines: Generator[RawLine, None, None] | None = None
        try:
            lines = iter_raw_lines(path)
            try:
                header, header_raw = read_header(lines)
            except HeaderError as e:
                errors.add(-1, "HEADER_ERROR", str(e))
                return self._finish(path, errors, start_time, started, error=f"Unable to read header: {e}")
            self._chars += len(header_raw.text)

            columns = detect_columns(
                header,
                process=cfg.columns.process,
                operation=cfg.columns.operation,
                result=cfg.columns.result,
            )
            logger.debug("file=%s columns=%d resolved=%s", path.name, len(header), columns)

            pp = cfg.post_processing
            # 設定上の列名 (Process Name 等) を実際に検出した列へ読み替える
            aliases = column_aliases(
                columns,
                process=cfg.columns.process,
                operation=cfg.columns.operation,
                result=cfg.columns.result,
            )
            self._required_fields = resolve_fields(pp.required_fields, header, aliases)
            dedup = Deduplicator(
                resolve_fields(pp.dedup_fields, header, aliases),
                enabled=pp.enabled and pp.deduplicate,
                header=header,
            )
            classifier = ResultClassifier(
                pp.benign_results,
                result_field=columns.result or cfg.columns.result,
                header=header,
                filtered_counter=self.stats.filtered_by_result,
            )
            aggregator = BatchAggregator(
                self.counters,
                columns,
                batch_size=cfg.processing.batch_size,
                gc_interval=cfg.processing.gc_interval,
                batch_stats=self._batch_stats,
            )
            self._aggregator = aggregator
            if pp.enabled and pp.output_directory:
                writer = SideChannelWriter(Path(pp.output_directory), path, header, header_raw.text)

            interval = cfg.processing.progress_interval
            next_progress = interval
            for raw in lines:
                # lines_processed は物理行数 (改行入りレコードは line_count 行分)
                self._lines += raw.line_count
                self._chars += len(raw.text)
                if raw.text.strip():
                    self._handle_line(raw, header, columns, dedup, classifier, aggregator, writer, errors)
                if self._lines >= next_progress:
                    yield self.status()
                    next_progress = (self._lines // interval + 1) * interval

            aggregator.flush()
        except Exception as e:
            # 途中失敗でも集計済みの値は捨てない (incomplete として返す)
            logger.exception("file=%s failed after %d lines", path.name, self._lines)
            if aggregator is not None:
                aggregator.flush()
            errors.add(-1, "PROCESSING_ERROR", str(e))
            return self._finish(path, errors, start_time, started, error=str(e), incomplete=True)
        finally:
            if writer is not None:
                writer.close()
            if lines is not None:
                lines.close()

        result = self._finish(path, errors, start_time, started)
        yield self.status()
        return result

    def _handle_line(
        self,
        raw: RawLine,
        header: Header,
        columns: ColumnMap,
        dedup: Deduplicator,
        classifier: ResultClassifier,
        aggregator: BatchAggregator,
        writer: SideChannelWriter | None,
        errors: LineErrorLog,
    ) -> None:
        cfg = self.config
        pp = cfg.post_processing
        stats = self.stats
        try:
            fields = parse_line(raw.text)
            if cfg.processing.strict_field_count and len(fields) != len(header):
                errors.add(
                    raw.line_number,
                    "FIELD_COUNT_MISMATCH",
                    f"expected {len(header)} fields, got {len(fields)}",
                    raw.text.rstrip("\r\n"),
                )
                return
            stats.records_seen += 1
            record, modified = normalize_record(
                fields,
                header,
                line_number=raw.line_number,
                required_fields=self._required_fields,
                sanitize=pp.enabled and pp.sanitize,
            )
        except MissingFieldError:
            stats.invalid_records_skipped += 1
            return
        except Exception as e:
            errors.add(raw.line_number, "PARSE_ERROR", str(e), raw.text.rstrip("\r\n"))
            return

        if not pp.enabled:
            stats.records_retained += 1
            aggregator.add(record)
            return

        if modified:
            stats.records_sanitized += 1
        if dedup.is_duplicate(record):
            stats.duplicates_removed += 1
            return
        if pp.filter_benign and classifier.is_benign(record):
            stats.success_filtered += 1
            if writer is not None:
                writer.write_archived(record)
            return
        stats.records_retained += 1
        aggregator.add(record)
        if writer is not None:
            writer.write_retained(record)

    def _finish(
        self,
        path: Path,
        errors: LineErrorLog,
        start_time: datetime,
        started: float,
        *,
        error: str | None = None,
        incomplete: bool = False,
    ) -> FileResult:
        duration = time.perf_counter() - started
        summary = self.stats.finalize() if self.config.post_processing.enabled else None
        total_records = self._aggregator.records_folded if self._aggregator is not None else 0
        total_batches, avg_batch, p95_batch = self._batch_stats.get_stats()
        performance = PerformanceStats(
            duration_seconds=duration,
            records_per_second=(total_records / duration) if duration > 0 else 0.0,
            mb_per_second=(self._file_size / _BYTES_PER_MB / duration) if duration > 0 else 0.0,
            memory_used_mb=round(_memory_used_mb(), 2),
            total_batches=total_batches,
            avg_batch_seconds=avg_batch,
            p95_batch_seconds=p95_batch,
        )
        success = error is None
        self._done = success
        result = FileResult(
            file_name=path.name,
            status=FileStatus.SUCCESS if success else FileStatus.FAILED,
            success=success,
            total_records=total_records,
            lines_processed=self._lines,
            records_seen=self.stats.records_seen,
            process_types=self.counters.process_types.to_dict(),
            operation_types=self.counters.operation_types.to_dict(),
            result_types=self.counters.result_types.to_dict(),
            performance=performance,
            start_time=start_time,
            end_time=datetime.now(UTC),
            errors=errors.records,
            errors_dropped=errors.dropped,
            post_processing=summary,
            error=error,
            incomplete=incomplete,
        )
        self._result = result
        if success:
            logger.info(
                "file=%s records=%d lines=%d line_errors=%d elapsed_sec=%.3f",
                path.name,
                total_records,
                self._lines,
                errors.total,
                duration,
            )
        else:
            logger.warning("file=%s failed: %s", path.name, error)
        return result
