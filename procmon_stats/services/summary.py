from __future__ import annotations

from typing import Any

from ..models.analytics_result import AnalyticsResult
from ..models.processing_result import FileResult, ProcessingResult

"""SUMMARY line rendering and JSON report conversion.

SUMMARY line format (single line, space separated key=value):

    SUMMARY files={total}/{total} success={success} failed={failed}
    records={records} retained={retained} duplicates={duplicates}
    elapsed_sec={elapsed} throughput_rps={throughput} health={health}
    risk={level}

health / risk are "n/a" when no analytics were computed.
"""

__all__ = [
    "format_number",
    "render_summary_line",
    "report_to_dict",
]


def format_number(value: float) -> str:
    """Render a metric without scientific notation or trailing zeros."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(
    total_files: int,
    result: ProcessingResult,
    analytics: AnalyticsResult | None = None,
) -> str:
    """Render the SUMMARY line.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, failed_files=0, total_records=1000,
        ...     lines_processed=1200, records_seen=1200, records_retained=1000,
        ...     duplicates_removed=50, success_filtered=150, start_time=t,
        ...     end_time=t, elapsed_seconds=2.0, throughput_records_per_sec=500.0,
        ... )
        >>> render_summary_line(1, result)
        'SUMMARY files=1/1 success=1 failed=0 records=1000 retained=1000 duplicates=50 elapsed_sec=2 throughput_rps=500 health=n/a risk=n/a'
    """
    health = format_number(analytics.health_score) if analytics is not None else "n/a"
    risk = analytics.risk.level.value if analytics is not None else "n/a"
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"records={result.total_records} "
        f"retained={result.records_retained} "
        f"duplicates={result.duplicates_removed} "
        f"elapsed_sec={format_number(result.elapsed_seconds)} "
        f"throughput_rps={format_number(result.throughput_records_per_sec)} "
        f"health={health} "
        f"risk={risk}"
    )


def _file_to_dict(fr: FileResult) -> dict[str, Any]:
    pp = fr.post_processing
    return {
        "file_name": fr.file_name,
        "status": fr.status.value,
        "success": fr.success,
        "incomplete": fr.incomplete,
        "error": fr.error,
        "total_records": fr.total_records,
        "records_seen": fr.records_seen,
        "lines_processed": fr.lines_processed,
        "process_types": fr.process_types,
        "operation_types": fr.operation_types,
        "result_types": fr.result_types,
        "performance": {
            "duration_seconds": fr.performance.duration_seconds,
            "records_per_second": fr.performance.records_per_second,
            "mb_per_second": fr.performance.mb_per_second,
            "memory_used_mb": fr.performance.memory_used_mb,
            "total_batches": fr.performance.total_batches,
            "avg_batch_seconds": fr.performance.avg_batch_seconds,
            "p95_batch_seconds": fr.performance.p95_batch_seconds,
        },
        "errors": [e.to_dict() for e in fr.errors],
        "errors_dropped": fr.errors_dropped,
        "post_processing": None if pp is None else {
            "records_seen": pp.records_seen,
            "records_retained": pp.records_retained,
            "success_filtered": pp.success_filtered,
            "duplicates_removed": pp.duplicates_removed,
            "invalid_records_skipped": pp.invalid_records_skipped,
            "records_sanitized": pp.records_sanitized,
            "filtered_by_result": pp.filtered_by_result,
            "duration_seconds": pp.duration_seconds,
            "retention_rate": pp.retention_rate,
            "duplicate_rate": pp.duplicate_rate,
            "success_filter_rate": pp.success_filter_rate,
            "records_per_second": pp.records_per_second,
        },
    }


def _analytics_to_dict(a: AnalyticsResult) -> dict[str, Any]:
    m = a.metrics
    d = m.process_distribution
    return {
        "metrics": {
            "total_events": m.total_events,
            "error_count": m.error_count,
            "error_rate": m.error_rate,
            "events_per_second": m.events_per_second,
            "unique_error_count": m.unique_error_count,
            "access_denied_count": m.access_denied_count,
            "distinct_processes": m.distinct_processes,
            "distinct_operations": m.distinct_operations,
            "distinct_results": m.distinct_results,
            "process_distribution": {
                "count": d.count,
                "min": d.minimum,
                "max": d.maximum,
                "mean": d.mean,
                "std_dev": d.std_dev,
                "p50": d.p50,
                "p90": d.p90,
                "p95": d.p95,
                "p99": d.p99,
            },
        },
        "anomalies": {
            "count": a.anomalies.count,
            "threshold": a.anomalies.threshold,
            "items": [
                {
                    "key": x.key,
                    "value": x.value,
                    "z_score": x.z_score,
                    "severity": x.severity.value,
                    "category": x.category,
                }
                for x in a.anomalies.anomalies
            ],
        },
        "risk": {
            "total": a.risk.total,
            "level": a.risk.level.value,
            "components": {
                "error": a.risk.components.error_score,
                "frequency": a.risk.components.frequency_score,
                "impact": a.risk.components.impact_score,
                "security": a.risk.components.security_score,
            },
        },
        "health_score": a.health_score,
        "top_processes": [list(p) for p in a.top_processes],
        "top_operations": [list(p) for p in a.top_operations],
        "top_results": [list(p) for p in a.top_results],
        "insights": list(a.insights),
        "recommendations": list(a.recommendations),
    }


def report_to_dict(result: ProcessingResult, analytics: AnalyticsResult | None = None) -> dict[str, Any]:
    """JSON-ready view of a run (plain dicts / lists / scalars only)."""
    return {
        "summary": {
            "success_files": result.success_files,
            "failed_files": result.failed_files,
            "total_records": result.total_records,
            "lines_processed": result.lines_processed,
            "records_seen": result.records_seen,
            "records_retained": result.records_retained,
            "duplicates_removed": result.duplicates_removed,
            "success_filtered": result.success_filtered,
            "start_time": result.start_time.isoformat(),
            "end_time": result.end_time.isoformat(),
            "elapsed_seconds": result.elapsed_seconds,
            "throughput_records_per_sec": result.throughput_records_per_sec,
        },
        "counters": result.counters.to_dict(),
        "files": [_file_to_dict(fr) for fr in (result.file_results or [])],
        "analytics": None if analytics is None else _analytics_to_dict(analytics),
    }
