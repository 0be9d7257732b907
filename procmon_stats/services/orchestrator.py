from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import AppConfig
from ..models.counters import Counters
from ..models.processing_result import FileResult, ProcessingResult
from .processor import LogProcessor
from .progress import ProgressTracker

"""Run-level orchestration over one or more Procmon CSV files.

Files are processed sequentially. Each file gets its own LogProcessor, so no
seen-hash set or counter is shared between files; after a file completes its
counters are merged into the run totals owned here. Line errors from every
file are buffered and flushed once at the end of the run.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ProcessingError",
    "collect_input_files",
    "process_all",
]

CSV_SUFFIX = ".csv"


class ProcessingError(Exception):
    """Fatal errors that prevent processing from starting."""


def collect_input_files(paths: Iterable[Path | str]) -> list[Path]:
    """Expand the given paths into the ordered list of files to process.

    Directories contribute their ``*.csv`` files (non-recursive, sorted by
    name); plain paths are kept as given even when missing so that the file
    fails on its own without aborting the run.

    Raises:
        ProcessingError: If a directory can't be read
    """
    files: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            try:
                found = sorted(
                    p for p in path.iterdir() if p.is_file() and p.suffix.lower() == CSV_SUFFIX
                )
            except OSError as e:
                raise ProcessingError(f"Error reading directory {path}: {e}") from e
            if not found:
                logger.warning("no %s files in directory: %s", CSV_SUFFIX, path)
            files.extend(found)
        else:
            files.append(path)
    return files


def process_all(
    paths: Iterable[Path | str],
    config: AppConfig | None = None,
    *,
    logs_dir: Path | None = None,
) -> ProcessingResult:
    """Process every input file and aggregate the run.

    Args:
        paths: files and/or directories of CSV exports
        config: pipeline configuration (defaults when None)
        logs_dir: where the JSON Lines error log goes (default ./logs)

    Returns:
        ProcessingResult with merged counters and per-file results

    Raises:
        ProcessingError: no input files were given
    """
    cfg = config or AppConfig()
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(logs_dir)

    file_paths = collect_input_files(paths)
    if not file_paths:
        raise ProcessingError("no input files")

    totals = Counters()
    file_results: list[FileResult] = []
    success_count = 0
    failed_count = 0
    total_records = 0
    lines_processed = 0
    records_seen = 0
    records_retained = 0
    duplicates_removed = 0
    success_filtered = 0

    with ProgressTracker(len(file_paths), description="Processing files") as progress:
        for file_path in file_paths:
            progress.start_file(file_path)

            processor = LogProcessor(cfg)
            for event in processor.run(file_path):
                progress.update(event)
            fr = processor.result

            if fr.success:
                success_count += 1
            else:
                failed_count += 1
            # 失敗ファイルの途中集計も捨てない
            totals.merge(fr.counters())
            total_records += fr.total_records
            lines_processed += fr.lines_processed
            records_seen += fr.records_seen
            if fr.post_processing is not None:
                records_retained += fr.post_processing.records_retained
                duplicates_removed += fr.post_processing.duplicates_removed
                success_filtered += fr.post_processing.success_filtered
            else:
                records_retained += fr.total_records
            error_log.extend(fr.errors)
            file_results.append(fr)

            progress.set_postfix(success=success_count, failed=failed_count, records=total_records)
            progress.finish_file(success=fr.success)

    try:
        log_path = error_log.flush()
    except OSError as e:
        # エラーログ書き込み失敗で run 全体は落とさない
        logger.warning("failed to write error log: %s", e)
    else:
        if log_path is not None:
            logger.info("line errors written to %s", log_path)

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput_rps = total_records / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_records=total_records,
        lines_processed=lines_processed,
        records_seen=records_seen,
        records_retained=records_retained,
        duplicates_removed=duplicates_removed,
        success_filtered=success_filtered,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_records_per_sec=throughput_rps,
        counters=totals,
        file_results=file_results,
    )
