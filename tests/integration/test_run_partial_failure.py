from __future__ import annotations

import json
from pathlib import Path

from procmon_stats.cli.__main__ import main as cli_main
from tests.conftest import event

"""A run with good, empty, header-only-blank and missing inputs."""


def test_partial_failure_keeps_good_results(temp_workdir: Path, write_csv, sample_rows, capsys):
    good = write_csv("good.csv", sample_rows)
    empty = temp_workdir / "data" / "empty.csv"
    empty.write_text("", encoding="utf-8")
    blank = temp_workdir / "data" / "blank.csv"
    blank.write_text("\n\n", encoding="utf-8")
    missing = temp_workdir / "data" / "missing.csv"
    report_path = temp_workdir / "r.json"

    code = cli_main([str(good), str(empty), str(blank), str(missing), "--json", str(report_path)])
    assert code == 2

    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["summary"]["success_files"] == 1
    assert report["summary"]["failed_files"] == 3
    assert report["summary"]["total_records"] == 3
    statuses = {f["file_name"]: (f["status"], f["error"]) for f in report["files"]}
    assert statuses["good.csv"] == ("success", None)
    assert statuses["empty.csv"][0] == "failed"
    assert statuses["blank.csv"][1].startswith("Unable to read header")
    assert "not found" in statuses["missing.csv"][1]

    # ファイルレベルのエラーもエラーログへ
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    types = [json.loads(l)["error_type"] for l in logs[0].read_text(encoding="utf-8").splitlines()]
    assert sorted(types) == ["EMPTY_FILE", "FILE_NOT_FOUND", "HEADER_ERROR"]

    out = capsys.readouterr().out
    assert "SUMMARY files=4/4 success=1 failed=3" in out


def test_line_errors_do_not_fail_the_file(temp_workdir: Path, write_csv):
    rows = [event("1", "a.exe", "ReadFile", "NAME NOT FOUND")] + [["bad"]] * 120
    path = write_csv("noisy.csv", rows)
    cfg = temp_workdir / "strict.yml"
    cfg.write_text("processing:\n  strict_field_count: true\n", encoding="utf-8")
    report_path = temp_workdir / "r.json"

    assert cli_main(["--config", str(cfg), str(path), "--json", str(report_path)]) == 0
    f = json.loads(report_path.read_text(encoding="utf-8"))["files"][0]
    assert f["success"] is True
    assert len(f["errors"]) == 100
    assert f["errors_dropped"] == 20
    assert f["total_records"] == 1
