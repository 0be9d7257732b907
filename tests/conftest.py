# Shared pytest fixtures
from __future__ import annotations
import csv
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from procmon_stats.logging.init import reset_logging

PROCMON_HEADER = ["Time of Day", "Process Name", "PID", "Operation", "Path", "Result", "Detail"]


def event(
    time: str,
    process: str,
    op: str = "ReadFile",
    result: str = "SUCCESS",
    *,
    pid: str = "1234",
    path: str = r"C:\Windows\System32\kernel32.dll",
    detail: str = "",
) -> list[str]:
    """One Procmon row in PROCMON_HEADER order."""
    return [time, process, pid, op, path, result, detail]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("PROCMON_STATS_CONFIG", raising=False)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """processing:
  batch_size: 2
  gc_interval: 4
  progress_interval: 2
post_processing:
  enabled: true
  benign_results: [SUCCESS]
  dedup_fields: [Time of Day, Process Name, PID, Operation, Path]
analytics:
  zscore_threshold: 2.5
  top_n: 5
  risk:
    weights: {error: 0.5, frequency: 0.2, impact: 0.2, security: 0.1}
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "procmon_stats.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_csv(temp_workdir: Path) -> Callable[..., Path]:
    """Factory writing a Procmon-style CSV (all fields quoted) under data/."""

    def _write(
        name: str,
        rows: Sequence[Sequence[str]],
        header: Sequence[str] = PROCMON_HEADER,
    ) -> Path:
        path = temp_workdir / "data" / name
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, quoting=csv.QUOTE_ALL, lineterminator="\n")
            writer.writerow(header)
            writer.writerows(rows)
        return path

    return _write


@pytest.fixture()
def sample_rows() -> list[list[str]]:
    """Scenario B: 5 SUCCESS, 1 error + 2 exact duplicates, 2 more unique errors."""
    error = event("10:00:05.0000000", "svchost.exe", "RegOpenKey", "NAME NOT FOUND")
    return [
        event("10:00:00.0000000", "chrome.exe", "ReadFile", "SUCCESS"),
        event("10:00:01.0000000", "chrome.exe", "WriteFile", "SUCCESS"),
        event("10:00:02.0000000", "explorer.exe", "ReadFile", "SUCCESS"),
        event("10:00:03.0000000", "explorer.exe", "CreateFile", "SUCCESS"),
        event("10:00:04.0000000", "svchost.exe", "CloseFile", "SUCCESS"),
        error,
        list(error),
        list(error),
        event("10:00:06.0000000", "chrome.exe", "CreateFile", "ACCESS DENIED"),
        event("10:00:07.0000000", "lsass.exe", "RegQueryValue", "PATH NOT FOUND"),
    ]
