from __future__ import annotations

from pathlib import Path

from procmon_stats.cli.__main__ import main as cli_main

"""Exit code contract: 0 all success, 2 any file failed, 1 fatal."""


def test_exit_code_fatal_without_inputs(temp_workdir: Path, capsys):
    code = cli_main([])
    assert code == 1
    assert "ERROR no input files given" in capsys.readouterr().out


def test_exit_code_fatal_on_bad_config(temp_workdir: Path, write_csv, sample_rows, capsys):
    bad = temp_workdir / "config" / "bad.yml"
    bad.write_text("unknown_section: 1\n", encoding="utf-8")
    code = cli_main(["--config", str(bad), str(write_csv("x.csv", sample_rows))])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_fatal_on_missing_explicit_config(temp_workdir: Path, write_csv, sample_rows):
    code = cli_main(["--config", "nope.yml", str(write_csv("x.csv", sample_rows))])
    assert code == 1


def test_exit_code_fatal_on_empty_directory(temp_workdir: Path, capsys):
    assert cli_main([str(temp_workdir / "data")]) == 1
    assert "ERROR processing: no input files" in capsys.readouterr().out


def test_exit_code_all_success(temp_workdir: Path, write_config, write_csv, sample_rows, capsys):
    a = write_csv("a.csv", sample_rows)
    b = write_csv("b.csv", sample_rows)
    code = cli_main([str(a), str(b)])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=2/2 success=2 failed=0" in out


def test_exit_code_partial_failure(temp_workdir: Path, write_csv, sample_rows, capsys):
    good = write_csv("good.csv", sample_rows)
    empty = temp_workdir / "data" / "empty.csv"
    empty.write_text("", encoding="utf-8")
    code = cli_main([str(good), str(empty)])
    out = capsys.readouterr().out
    assert code == 2
    assert "SUMMARY files=2/2 success=1 failed=1" in out
    assert "ERROR file=empty.csv" in out


def test_exit_code_all_failed(temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data" / "missing.csv")])
    assert code == 2
    assert "failed=1" in capsys.readouterr().out
