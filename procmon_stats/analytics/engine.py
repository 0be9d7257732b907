from __future__ import annotations

import logging

from ..models.analytics_result import (
    AnalyticsResult,
    AnomalyReport,
    Metrics,
    RiskAssessment,
    RiskLevel,
)
from ..models.config_models import DEFAULT_BENIGN_RESULTS, AnalyticsConfig
from ..models.counters import Counters
from ..services.classifier import ResultClassifier
from .anomaly import detect_anomalies
from .health import health_score
from .ranking import top_items
from .risk import assess_risk
from .statistics import describe

"""Analytics facade: counters -> metrics, anomalies, risk, health, rankings.

analyze() is a pure function of its inputs; identical counters produce an
identical AnalyticsResult.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ACCESS_DENIED",
    "analyze",
    "compute_metrics",
]

ACCESS_DENIED = "ACCESS DENIED"

# insight / recommendation rule thresholds
_HIGH_ERROR_RATE = 0.10
_HIGH_ACCESS_DENIED = 10
_DOMINANT_PROCESS_SHARE = 0.5
_HEALTH_WARNING = 70.0


def compute_metrics(
    counters: Counters,
    *,
    total_events: int,
    duration_seconds: float,
    benign_results: tuple[str, ...] = DEFAULT_BENIGN_RESULTS,
) -> Metrics:
    """Derive error and throughput metrics from aggregated counters.

    Args:
        counters: aggregated process / operation / result counters
        total_events: events the rates are relative to (records seen)
        duration_seconds: wall time used for events_per_second
        benign_results: result indicators that are not errors
    """
    classifier = ResultClassifier(benign_results)
    error_count = 0
    unique_errors = 0
    access_denied = 0
    for result, count in counters.result_types.items():
        if classifier.is_benign_value(result):
            continue
        error_count += count
        unique_errors += 1
        if ACCESS_DENIED in result.upper():
            access_denied += count

    return Metrics(
        total_events=total_events,
        error_count=error_count,
        error_rate=(min(1.0, error_count / total_events) if total_events > 0 else 0.0),
        events_per_second=(total_events / duration_seconds if duration_seconds > 0 else 0.0),
        unique_error_count=unique_errors,
        access_denied_count=access_denied,
        distinct_processes=len(counters.process_types),
        distinct_operations=len(counters.operation_types),
        distinct_results=len(counters.result_types),
        process_distribution=describe(counters.process_types.values()),
    )


def _merge_reports(*reports: AnomalyReport) -> AnomalyReport:
    anomalies = [a for r in reports for a in r.anomalies]
    anomalies.sort(key=lambda a: (-abs(a.z_score), a.category, a.key))
    # mean/std は先頭 (process) のものを代表値として残す
    head = reports[0]
    return AnomalyReport(
        count=len(anomalies),
        anomalies=anomalies,
        mean=head.mean,
        std_dev=head.std_dev,
        threshold=head.threshold,
    )


def _insights(
    metrics: Metrics,
    anomalies: AnomalyReport,
    risk: RiskAssessment,
    top_processes: list[tuple[str, int]],
) -> list[str]:
    out: list[str] = []
    if metrics.total_events == 0:
        return ["No events were processed."]
    out.append(
        f"{metrics.total_events} events across {metrics.distinct_processes} processes "
        f"and {metrics.distinct_operations} operations."
    )
    if metrics.error_count:
        out.append(
            f"{metrics.error_count} error events ({metrics.error_rate:.1%}) "
            f"with {metrics.unique_error_count} distinct result codes."
        )
    if top_processes:
        name, count = top_processes[0]
        share = count / metrics.total_events
        if share >= _DOMINANT_PROCESS_SHARE:
            out.append(f"{name} accounts for {share:.0%} of all events.")
    for anomaly in anomalies.anomalies[:3]:
        out.append(
            f"Unusual {anomaly.category or 'entry'} volume: {anomaly.key} "
            f"({int(anomaly.value)} events, z={anomaly.z_score}, {anomaly.severity.value})."
        )
    out.append(f"Overall risk is {risk.level.value} ({risk.total}).")
    return out


def _recommendations(metrics: Metrics, risk: RiskAssessment, health: float) -> list[str]:
    out: list[str] = []
    if metrics.access_denied_count >= _HIGH_ACCESS_DENIED:
        out.append("Review permissions for processes hitting ACCESS DENIED.")
    if metrics.error_rate >= _HIGH_ERROR_RATE:
        out.append("Investigate the most frequent error result codes.")
    if risk.level in (RiskLevel.HIGH, RiskLevel.CRITICAL):
        out.append("Capture a narrower trace around the high-risk processes.")
    if health < _HEALTH_WARNING and not out:
        out.append("System health is degraded; compare against a baseline capture.")
    return out


def analyze(
    counters: Counters,
    *,
    total_events: int,
    duration_seconds: float,
    config: AnalyticsConfig | None = None,
    benign_results: tuple[str, ...] = DEFAULT_BENIGN_RESULTS,
) -> AnalyticsResult:
    """Run the full analytics chain over aggregated counters.

    Args:
        counters: aggregated counters (one file or a merged run)
        total_events: events the rates are relative to
        duration_seconds: processing wall time
        config: thresholds, top-N and risk model (defaults when None)
        benign_results: result indicators that do not count as errors

    Returns:
        AnalyticsResult
    """
    cfg = config or AnalyticsConfig()
    metrics = compute_metrics(
        counters,
        total_events=total_events,
        duration_seconds=duration_seconds,
        benign_results=benign_results,
    )
    anomalies = _merge_reports(
        detect_anomalies(counters.process_types.to_dict(), cfg.zscore_threshold, "process"),
        detect_anomalies(counters.operation_types.to_dict(), cfg.zscore_threshold, "operation"),
    )
    risk = assess_risk(
        metrics.error_rate,
        metrics.events_per_second,
        metrics.unique_error_count,
        metrics.access_denied_count,
        cfg.risk,
    )
    health = health_score(metrics.error_rate, anomalies.count, risk.total)
    top_processes = top_items(counters.process_types, cfg.top_n)
    logger.debug(
        "analytics events=%d errors=%d anomalies=%d risk=%.2f health=%.2f",
        metrics.total_events,
        metrics.error_count,
        anomalies.count,
        risk.total,
        health,
    )
    return AnalyticsResult(
        metrics=metrics,
        anomalies=anomalies,
        risk=risk,
        health_score=health,
        top_processes=top_processes,
        top_operations=top_items(counters.operation_types, cfg.top_n),
        top_results=top_items(counters.result_types, cfg.top_n),
        insights=_insights(metrics, anomalies, risk, top_processes),
        recommendations=_recommendations(metrics, risk, health),
    )
