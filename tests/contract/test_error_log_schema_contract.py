from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest
from jsonschema.exceptions import ValidationError

from procmon_stats.models.config_models import AppConfig, ProcessingConfig
from procmon_stats.services.orchestrator import process_all

"""Error log JSON Lines contract: fixed key set, one object per line."""

ERROR_LOG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "required": ["timestamp", "file", "line", "error_type", "message", "content"],
    "properties": {
        "timestamp": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}T.*Z$"},
        "file": {"type": "string", "minLength": 1},
        "line": {"type": "integer", "minimum": -1},
        "error_type": {"type": "string", "pattern": "^[A-Z][A-Z_]*$"},
        "message": {"type": "string"},
        "content": {"type": "string", "maxLength": 203},
    },
}


def test_error_log_schema_valid_example():
    record = {
        "timestamp": "2025-09-26T10:12:33.123456Z",
        "file": "trace.csv",
        "line": 42,
        "error_type": "FIELD_COUNT_MISMATCH",
        "message": "expected 7 fields, got 3",
        "content": '"a","b","c"',
    }
    jsonschema.validate(record, ERROR_LOG_SCHEMA)


def test_error_log_schema_rejects_extra_key():
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "file": "trace.csv",
        "line": 2,
        "error_type": "PARSE_ERROR",
        "message": "x",
        "content": "",
        "extra": "not allowed",
    }
    with pytest.raises(ValidationError):
        jsonschema.validate(record, ERROR_LOG_SCHEMA)


def test_written_error_log_matches_schema(temp_workdir: Path, write_csv):
    rows = [["short"], ["x" * 400]]
    path = write_csv("bad.csv", rows)
    missing = temp_workdir / "data" / "missing.csv"
    cfg = AppConfig(processing=ProcessingConfig(strict_field_count=True))
    process_all([path, missing], cfg)

    logs = list(Path("logs").glob("errors-*.log"))
    assert len(logs) == 1
    entries = [json.loads(l) for l in logs[0].read_text(encoding="utf-8").splitlines()]
    assert [e["error_type"] for e in entries] == [
        "FIELD_COUNT_MISMATCH",
        "FIELD_COUNT_MISMATCH",
        "FILE_NOT_FOUND",
    ]
    for entry in entries:
        jsonschema.validate(entry, ERROR_LOG_SCHEMA)
    assert entries[1]["content"].endswith("...")
    assert entries[2]["line"] == -1
