from __future__ import annotations

from collections.abc import Mapping

from ..models.analytics_result import Anomaly, AnomalyReport, Severity
from .statistics import mean, std_dev, z_score

"""Z-score outlier detection over category -> count mappings."""

__all__ = [
    "classify_severity",
    "detect_anomalies",
]

DEFAULT_THRESHOLD = 3.0


def classify_severity(abs_z: float) -> Severity:
    if abs_z > 4:
        return Severity.CRITICAL
    if abs_z > 3:
        return Severity.HIGH
    return Severity.MEDIUM


def detect_anomalies(
    counts: Mapping[str, float],
    threshold: float = DEFAULT_THRESHOLD,
    category: str = "",
) -> AnomalyReport:
    """Flag entries whose |z| exceeds ``threshold``.

    Args:
        counts: category -> count (e.g. process name -> events)
        threshold: strict lower bound on |z| for an entry to be flagged
        category: label copied onto each Anomaly (e.g. "process")

    Returns:
        AnomalyReport with anomalies ordered by descending |z|, then key.
        Identical input always yields an identical report.
    """
    if threshold < 0:
        raise ValueError("threshold must be >= 0")
    values = [float(v) for v in counts.values()]
    avg = mean(values)
    std = std_dev(values)

    flagged: list[Anomaly] = []
    for key, value in counts.items():
        z = z_score(float(value), avg, std)
        if abs(z) > threshold:
            flagged.append(
                Anomaly(
                    key=key,
                    value=float(value),
                    z_score=round(z, 2),
                    severity=classify_severity(abs(z)),
                    category=category,
                )
            )
    flagged.sort(key=lambda a: (-abs(a.z_score), a.key))
    return AnomalyReport(
        count=len(flagged),
        anomalies=flagged,
        mean=avg,
        std_dev=std,
        threshold=threshold,
    )
