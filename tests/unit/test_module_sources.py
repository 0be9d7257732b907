from __future__ import annotations

import doctest
from pathlib import Path

import pytest

from procmon_stats.csvlog import parser
from procmon_stats.models import counters
from procmon_stats.services import summary

"""Every shipped module must compile, and its docstring examples must hold."""

ROOT = Path(__file__).resolve().parents[2]
SOURCES = sorted(
    p for d in ("procmon_stats", "scripts") for p in (ROOT / d).rglob("*.py")
)


@pytest.mark.parametrize("path", SOURCES, ids=lambda p: str(p.relative_to(ROOT)))
def test_module_compiles(path: Path):
    compile(path.read_text(encoding="utf-8"), str(path), "exec")


@pytest.mark.parametrize("module", [parser, counters, summary], ids=lambda m: m.__name__)
def test_docstring_examples(module):
    failed, attempted = doctest.testmod(module)
    assert attempted > 0
    assert failed == 0
