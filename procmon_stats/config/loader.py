from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    AnalyticsConfig,
    AppConfig,
    ColumnConfig,
    PostProcessingConfig,
    ProcessingConfig,
    RiskConfig,
    RiskThresholds,
    RiskWeights,
)

"""Config loader.

Responsibilities:
- Load YAML (config/procmon_stats.yml or an explicit path)
- Validate against the packaged config_schema.json
- Apply defaults for every omitted section / key
- Build the frozen AppConfig
"""

__all__ = [
    "ConfigError",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "resolve_config",
    "config_from_dict",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/procmon_stats.yml")
CONFIG_ENV_VAR = "PROCMON_STATS_CONFIG"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the config data
            fails validation (unknown keys, wrong types, out-of-range values)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"config validation failed at {location}: {e.message}") from e


def _tuple(raw: dict[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = raw.get(key)
    return default if value is None else tuple(value)


def config_from_dict(data: dict[str, Any]) -> AppConfig:
    """Build AppConfig from already-validated mapping data."""
    proc_raw = data.get("processing") or {}
    pp_raw = data.get("post_processing") or {}
    col_raw = data.get("columns") or {}
    an_raw = data.get("analytics") or {}
    risk_raw = an_raw.get("risk") or {}

    pp_default = PostProcessingConfig()
    risk_default = RiskConfig()
    try:
        processing = ProcessingConfig(**proc_raw)
        post_processing = PostProcessingConfig(
            enabled=pp_raw.get("enabled", pp_default.enabled),
            sanitize=pp_raw.get("sanitize", pp_default.sanitize),
            deduplicate=pp_raw.get("deduplicate", pp_default.deduplicate),
            filter_benign=pp_raw.get("filter_benign", pp_default.filter_benign),
            benign_results=_tuple(pp_raw, "benign_results", pp_default.benign_results),
            dedup_fields=_tuple(pp_raw, "dedup_fields", pp_default.dedup_fields),
            required_fields=_tuple(pp_raw, "required_fields", pp_default.required_fields),
            output_directory=pp_raw.get("output_directory"),
        )
        risk = RiskConfig(
            weights=RiskWeights(**(risk_raw.get("weights") or {})),
            thresholds=RiskThresholds(**(risk_raw.get("thresholds") or {})),
            events_per_second_scale=risk_raw.get(
                "events_per_second_scale", risk_default.events_per_second_scale
            ),
            unique_errors_scale=risk_raw.get("unique_errors_scale", risk_default.unique_errors_scale),
            access_denied_scale=risk_raw.get("access_denied_scale", risk_default.access_denied_scale),
        )
        analytics = AnalyticsConfig(
            zscore_threshold=an_raw.get("zscore_threshold", AnalyticsConfig.zscore_threshold),
            top_n=an_raw.get("top_n", AnalyticsConfig.top_n),
            risk=risk,
        )
        columns = ColumnConfig(**col_raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid configuration: {e}") from e

    return AppConfig(
        processing=processing,
        post_processing=post_processing,
        columns=columns,
        analytics=analytics,
    )


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)
    return config_from_dict(data)


def resolve_config(path: Path | None = None) -> AppConfig:
    """Load the config the CLI should use.

    Order: explicit ``path`` -> $PROCMON_STATS_CONFIG -> config/procmon_stats.yml
    -> built-in defaults. Only an explicitly named file (argument or env var)
    must exist; the default location is optional.
    """
    if path is not None:
        return load_config(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return load_config(Path(env_path))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return AppConfig()
