from __future__ import annotations

import re
from pathlib import Path

from procmon_stats.cli.__main__ import main as cli_main

"""SUMMARY line format contract."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+files=([0-9]+)/(\1)\s+success=([0-9]+)\s+failed=([0-9]+)\s+"
    r"records=([0-9]+)\s+retained=([0-9]+)\s+duplicates=([0-9]+)\s+"
    r"elapsed_sec=([0-9]+\.?[0-9]*)\s+throughput_rps=([0-9]+\.?[0-9]*)\s+"
    r"health=([0-9]+\.?[0-9]*|n/a)\s+risk=(Low|Medium|High|Critical|n/a)$"
)


def test_summary_pattern_example_line():
    line = (
        "SUMMARY files=1/1 success=1 failed=0 records=4 retained=4 duplicates=0 "
        "elapsed_sec=0.84 throughput_rps=4761.905 health=81.7 risk=Low"
    )
    assert SUMMARY_PATTERN.match(line), "SUMMARY line should match contract regex"


def test_cli_summary_line_matches_contract(temp_workdir: Path, write_csv, sample_rows, capsys):
    path = write_csv("trace.csv", sample_rows)
    assert cli_main([str(path)]) == 0
    lines = [l for l in capsys.readouterr().out.splitlines() if l.startswith("SUMMARY")]
    assert len(lines) == 1
    m = SUMMARY_PATTERN.match(lines[0])
    assert m, lines[0]
    assert m.group(1) == "1"
    assert m.group(5) == "3"  # records
    assert m.group(7) == "2"  # duplicates
