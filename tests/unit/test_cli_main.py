from __future__ import annotations

import json
from pathlib import Path

from procmon_stats.cli.__main__ import main as cli_main


def test_cli_writes_json_report(temp_workdir: Path, write_csv, sample_rows, capsys):
    path = write_csv("trace.csv", sample_rows)
    report = temp_workdir / "out" / "report.json"
    code = cli_main([str(path), "--json", str(report)])
    assert code == 0
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["summary"]["success_files"] == 1
    assert data["analytics"]["metrics"]["total_events"] == 10
    assert "report written to" in capsys.readouterr().out


def test_cli_output_dir_override(temp_workdir: Path, write_csv, sample_rows):
    path = write_csv("trace.csv", sample_rows)
    out = temp_workdir / "clean"
    assert cli_main([str(path), "--output-dir", str(out)]) == 0
    assert (out / "trace_cleaned.csv").exists()
    assert (out / "trace_success_archive.csv").exists()


def test_cli_accepts_directory(temp_workdir: Path, write_csv, sample_rows, capsys):
    write_csv("one.csv", sample_rows)
    write_csv("two.csv", sample_rows)
    assert cli_main([str(temp_workdir / "data")]) == 0
    assert "files=2/2" in capsys.readouterr().out


def test_cli_debug_mode(temp_workdir: Path, write_csv, sample_rows, capsys):
    path = write_csv("trace.csv", sample_rows)
    assert cli_main(["--debug", str(path)]) == 0
    out = capsys.readouterr().out
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG file=trace.csv columns=7" in out


def test_cli_env_file_points_at_config(temp_workdir: Path, write_csv, sample_rows, monkeypatch, capsys):
    cfg = temp_workdir / "custom.yml"
    cfg.write_text("post_processing:\n  enabled: false\n", encoding="utf-8")
    (temp_workdir / ".env").write_text(f"PROCMON_STATS_CONFIG={cfg}\n", encoding="utf-8")
    report = temp_workdir / "r.json"
    path = write_csv("trace.csv", sample_rows)
    try:
        assert cli_main([str(path), "--json", str(report)]) == 0
    finally:
        monkeypatch.delenv("PROCMON_STATS_CONFIG", raising=False)
    data = json.loads(report.read_text(encoding="utf-8"))
    # 後処理無効 -> 10 件すべて集計
    assert data["summary"]["total_records"] == 10
    assert data["files"][0]["post_processing"] is None
