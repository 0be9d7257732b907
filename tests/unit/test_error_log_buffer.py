from __future__ import annotations
import json
from pathlib import Path

import pytest

from procmon_stats.logging.error_log import ErrorLogBuffer, ErrorRecord, LineErrorLog
from procmon_stats.models.error_record import MAX_CONTENT_LENGTH

KEYS = {"timestamp", "file", "line", "error_type", "message", "content"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        file="trace.csv",
        line=10,
        error_type="PARSE_ERROR",
        message="bad quote",
        content='"a","b',
    )
    data = json.loads(rec.to_json_line())
    assert data["file"] == "trace.csv"
    assert data["line"] == 10
    assert data["error_type"] == "PARSE_ERROR"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == KEYS
    assert rec.to_dict() == data


def test_error_record_truncates_content():
    rec = ErrorRecord.create("f.csv", 2, "PARSE_ERROR", "long", "x" * 500)
    assert rec.content == "x" * MAX_CONTENT_LENGTH + "..."


def test_line_error_log_cap():
    log = LineErrorLog("f.csv", cap=3)
    results = [log.add(i, "PARSE_ERROR", "m") for i in range(5)]
    assert results == [True, True, True, False, False]
    assert len(log) == 3
    assert log.dropped == 2
    assert log.total == 5
    assert [r.line for r in log.records] == [0, 1, 2]
    log.clear()
    assert log.total == 0


def test_line_error_log_rejects_negative_cap():
    with pytest.raises(ValueError):
        LineErrorLog("f.csv", cap=-1)


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("f1.csv", 1, "PARSE_ERROR", "bad"))
    buf.extend([ErrorRecord.create("f1.csv", 2, "FIELD_COUNT_MISMATCH", "expected 7 fields, got 3")])
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent == Path("logs")
    assert path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    # flush 後バッファクリア
    assert len(buf) == 0


def test_error_log_buffer_multiple_flushes(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("f.csv", 1, "PARSE_ERROR", "a"))
    path = buf.flush()
    size1 = path.stat().st_size
    buf.append(ErrorRecord.create("f.csv", 2, "PARSE_ERROR", "b"))
    path2 = buf.flush()
    assert path == path2
    assert path2.stat().st_size > size1


def test_error_log_buffer_empty_flush_creates_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()
