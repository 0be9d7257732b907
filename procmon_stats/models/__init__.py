"""Domain models for the Procmon statistics pipeline.

This package contains the record, counter, configuration, result and
analytics model classes used throughout the application.
"""

from .analytics_result import AnalyticsResult, RiskLevel, Severity
from .config_models import AppConfig
from .counters import CategoryCounter, Counters
from .error_record import ErrorRecord
from .processing_result import FileResult, FileStatus, ProcessingResult, ProgressEvent
from .record import Header, MissingFieldError, Record

__all__ = [
    # Configuration models
    "AppConfig",
    # Record / counter models
    "Header",
    "Record",
    "MissingFieldError",
    "CategoryCounter",
    "Counters",
    # Processing models
    "ErrorRecord",
    "FileResult",
    "FileStatus",
    "ProcessingResult",
    "ProgressEvent",
    # Analytics models
    "AnalyticsResult",
    "RiskLevel",
    "Severity",
]
