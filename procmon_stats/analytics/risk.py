from __future__ import annotations

from ..models.analytics_result import RiskAssessment, RiskComponents, RiskLevel
from ..models.config_models import RiskConfig, RiskThresholds

"""Weighted risk model.

Four sub-scores, each capped at 100:

    error     = min(100, error_rate * 100)
    frequency = min(100, events_per_second / 1000 * 100)
    impact    = min(100, unique_error_count / 10 * 100)
    security  = min(100, access_denied_count / 100 * 100)

total = round(0.4*error + 0.3*frequency + 0.2*impact + 0.1*security, 2)
level: >= 70 Critical, >= 50 High, >= 30 Medium, else Low.
Weights, scale divisors and thresholds come from RiskConfig.
"""

__all__ = [
    "assess_risk",
    "risk_level",
]

_CAP = 100.0


def _capped(value: float, scale: float) -> float:
    # scale は 100 点に相当する生値
    return min(_CAP, max(0.0, value / scale * 100))


def risk_level(total: float, thresholds: RiskThresholds | None = None) -> RiskLevel:
    t = thresholds or RiskThresholds()
    if total >= t.critical:
        return RiskLevel.CRITICAL
    if total >= t.high:
        return RiskLevel.HIGH
    if total >= t.medium:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def assess_risk(
    error_rate: float,
    events_per_second: float,
    unique_error_count: int,
    access_denied_count: int,
    config: RiskConfig | None = None,
) -> RiskAssessment:
    cfg = config or RiskConfig()
    components = RiskComponents(
        error_score=min(_CAP, max(0.0, error_rate * 100)),
        frequency_score=_capped(events_per_second, cfg.events_per_second_scale),
        impact_score=_capped(unique_error_count, cfg.unique_errors_scale),
        security_score=_capped(access_denied_count, cfg.access_denied_scale),
    )
    w = cfg.weights
    total = round(
        w.error * components.error_score
        + w.frequency * components.frequency_score
        + w.impact * components.impact_score
        + w.security * components.security_score,
        2,
    )
    return RiskAssessment(total=total, level=risk_level(total, cfg.thresholds), components=components)
