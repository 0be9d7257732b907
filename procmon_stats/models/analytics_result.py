from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Analytics result models: metrics, anomalies, risk, health.

AnalyticsResult is a read-only snapshot created once per analyze() call.
"""


class Severity(Enum):
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class RiskLevel(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


@dataclass(frozen=True)
class Distribution:
    """Summary statistics over a numeric sequence."""
    count: int
    minimum: float
    maximum: float
    mean: float
    std_dev: float
    p50: float
    p90: float
    p95: float
    p99: float


@dataclass(frozen=True)
class Anomaly:
    key: str
    value: float
    z_score: float  # rounded to 2 places, signed
    severity: Severity
    category: str = ""


@dataclass(frozen=True)
class AnomalyReport:
    count: int
    anomalies: list[Anomaly]
    mean: float
    std_dev: float
    threshold: float


@dataclass(frozen=True)
class RiskComponents:
    error_score: float
    frequency_score: float
    impact_score: float
    security_score: float


@dataclass(frozen=True)
class RiskAssessment:
    total: float
    level: RiskLevel
    components: RiskComponents


@dataclass(frozen=True)
class Metrics:
    """Derived performance / error counters feeding risk and health."""
    total_events: int
    error_count: int
    error_rate: float
    events_per_second: float
    unique_error_count: int
    access_denied_count: int
    distinct_processes: int
    distinct_operations: int
    distinct_results: int
    process_distribution: Distribution


@dataclass(frozen=True)
class AnalyticsResult:
    metrics: Metrics
    anomalies: AnomalyReport
    risk: RiskAssessment
    health_score: float
    top_processes: list[tuple[str, int]] = field(default_factory=list)
    top_operations: list[tuple[str, int]] = field(default_factory=list)
    top_results: list[tuple[str, int]] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
