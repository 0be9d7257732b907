from __future__ import annotations

import pytest

from procmon_stats.models.record import Header, MissingFieldError, Record

HEADER = Header.from_fields(["Time of Day", "Process Name", "PID", "Operation", "Result"])


def test_header_lookup_is_case_insensitive():
    assert "process name" in HEADER
    assert HEADER.resolve("OPERATION") == "Operation"
    assert HEADER.resolve("Detail") is None
    assert len(HEADER) == 5


def test_header_strips_names_and_first_duplicate_wins():
    h = Header.from_fields([" A ", "b", "a"])
    assert h.columns == ("A", "b", "a")
    assert h.resolve("a") == "A"


def test_record_is_read_only_mapping():
    rec = Record.from_fields(HEADER, ["t", "chrome.exe", "1", "ReadFile", "SUCCESS"], line_number=2)
    assert rec["Process Name"] == "chrome.exe"
    assert dict(rec)["Result"] == "SUCCESS"
    with pytest.raises(TypeError):
        rec.values["Result"] = "x"  # type: ignore[index]


def test_record_short_row_omits_trailing_columns():
    rec = Record.from_fields(HEADER, ["t", "chrome.exe"], line_number=3)
    assert set(rec) == {"Time of Day", "Process Name"}
    assert rec.get_field("Operation") == ""


def test_record_long_row_drops_extras():
    rec = Record.from_fields(HEADER, ["t", "p", "1", "op", "r", "extra"], line_number=3)
    assert len(rec) == 5


def test_missing_required_field_raises_at_construction():
    with pytest.raises(MissingFieldError) as exc:
        Record.from_fields(
            HEADER, ["t", "", "1", "ReadFile"], line_number=7, required_fields=["Process Name"]
        )
    assert exc.value.field_name == "Process Name"
    assert exc.value.line_number == 7


def test_required_field_absent_from_header():
    with pytest.raises(MissingFieldError):
        Record.from_fields(HEADER, ["t", "p"], line_number=1, required_fields=["Path"])


def test_get_field_case_insensitive_with_and_without_header():
    rec = Record.from_fields(HEADER, ["t", "p", "1", "op", "r"], line_number=1)
    assert rec.get_field("result") == "r"
    assert rec.get_field("RESULT", HEADER) == "r"
    assert rec.get_field("Detail", HEADER, default="-") == "-"


def test_replace_values_keeps_line_number():
    rec = Record.from_fields(HEADER, ["t", "p"], line_number=9)
    new = rec.replace_values({"Time of Day": "x"})
    assert new.line_number == 9
    assert dict(new) == {"Time of Day": "x"}
