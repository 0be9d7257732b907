from __future__ import annotations

__all__ = [
    "health_score",
]

_ANOMALY_PENALTY_CAP = 20.0


def health_score(error_rate: float, anomaly_count: int, risk_total: float) -> float:
    """0-100 health figure; higher is healthier.

    100 - error_rate*100*0.4 - min(20, anomalies*2) - risk_total*0.3,
    clamped to [0, 100] and rounded to 2 places.
    """
    score = 100.0
    score -= error_rate * 100 * 0.4
    score -= min(_ANOMALY_PENALTY_CAP, anomaly_count * 2)
    score -= risk_total * 0.3
    return round(min(100.0, max(0.0, score)), 2)
