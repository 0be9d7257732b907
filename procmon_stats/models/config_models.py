from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the Procmon statistics pipeline.

These are the typed, defaulted form of config/procmon_stats.yml. The loader in
procmon_stats/config/loader.py validates raw YAML and builds these; code that
runs without a config file simply uses the defaults below.
"""

DEFAULT_BENIGN_RESULTS: tuple[str, ...] = ("SUCCESS", "BUFFER OVERFLOW", "FAST IO DISALLOWED")
DEFAULT_DEDUP_FIELDS: tuple[str, ...] = ("Time of Day", "Process Name", "PID", "Operation", "Path")
DEFAULT_REQUIRED_FIELDS: tuple[str, ...] = ("Process Name", "Operation")


@dataclass(frozen=True)
class ProcessingConfig:
    """Reader / batch settings.

    batch_size and gc_interval bound peak memory: at most one batch of
    records is alive, and gc.collect() runs after gc_interval folded records.
    """
    batch_size: int = 50_000
    gc_interval: int = 50_000  # records folded between gc.collect() hints
    progress_interval: int = 10_000  # lines between progress events
    strict_field_count: bool = False
    error_cap: int = 100  # line errors kept per file

    def __post_init__(self) -> None:
        for name in ("batch_size", "gc_interval", "progress_interval", "error_cap"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")


@dataclass(frozen=True)
class PostProcessingConfig:
    """Dedup / benign filtering / sanitization and side-channel output."""
    enabled: bool = True
    sanitize: bool = True
    deduplicate: bool = True
    filter_benign: bool = True
    benign_results: tuple[str, ...] = DEFAULT_BENIGN_RESULTS
    # Result / Detail は既定で含めない (リトライは同一イベント扱い)
    dedup_fields: tuple[str, ...] = DEFAULT_DEDUP_FIELDS
    required_fields: tuple[str, ...] = DEFAULT_REQUIRED_FIELDS
    output_directory: str | None = None


@dataclass(frozen=True)
class ColumnConfig:
    """Preferred header names for the three aggregated columns."""
    process: str = "Process Name"
    operation: str = "Operation"
    result: str = "Result"


@dataclass(frozen=True)
class RiskWeights:
    error: float = 0.4
    frequency: float = 0.3
    impact: float = 0.2
    security: float = 0.1

    def __post_init__(self) -> None:
        for name in ("error", "frequency", "impact", "security"):
            if getattr(self, name) < 0:
                raise ValueError(f"risk weight '{name}' must be >= 0")


@dataclass(frozen=True)
class RiskThresholds:
    critical: float = 70.0
    high: float = 50.0
    medium: float = 30.0


@dataclass(frozen=True)
class RiskConfig:
    """Weighted risk model. Scale divisors map raw metrics onto 0-100."""
    weights: RiskWeights = field(default_factory=RiskWeights)
    thresholds: RiskThresholds = field(default_factory=RiskThresholds)
    events_per_second_scale: float = 1000.0
    unique_errors_scale: float = 10.0
    access_denied_scale: float = 100.0


@dataclass(frozen=True)
class AnalyticsConfig:
    zscore_threshold: float = 3.0
    top_n: int = 15
    risk: RiskConfig = field(default_factory=RiskConfig)


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    post_processing: PostProcessingConfig = field(default_factory=PostProcessingConfig)
    columns: ColumnConfig = field(default_factory=ColumnConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
