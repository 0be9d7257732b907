from __future__ import annotations

import csv
import re
from collections.abc import Generator, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from ..models.record import Header, RawLine, Record
from .parser import parse_line

"""Procmon CSV reader and record normalizer.

The first non-empty line is the header; every following record is one event.
A record is usually one physical line but spans more when a quoted field
contains a newline.
Reading is strictly sequential through a buffered text stream so memory use
does not depend on file size.

Sanitization (optional):
1. drop characters outside printable ASCII / Latin-1 (tab, CR, LF kept)
2. collapse whitespace runs to a single space
3. trim
"""

__all__ = [
    "HeaderError",
    "ColumnMap",
    "iter_raw_lines",
    "read_header",
    "sanitize_value",
    "normalize_record",
    "detect_columns",
    "resolve_fields",
    "column_aliases",
]

# 許可: TAB/CR/LF, 印字可能 ASCII, 印字可能 Latin-1
_DISALLOWED_CHARS = re.compile(r"[^\t\r\n\x20-\x7e\xa0-\xff]")
_WHITESPACE_RUN = re.compile(r"\s+")

# Header name fragments used when the configured column name is not present
PROCESS_PATTERNS: tuple[str, ...] = ("process name", "processname", "process", "proc")
OPERATION_PATTERNS: tuple[str, ...] = ("operation", "operationtype", "operation type", "op")
RESULT_PATTERNS: tuple[str, ...] = ("result", "status")

# quoted field (改行入り) が開いたままでよい最大行数
MAX_RECORD_LINES = 100


class HeaderError(Exception):
    """Raised when the header line is missing or contains no column names."""


@dataclass(frozen=True)
class ColumnMap:
    """Header columns that feed the three counters (None = not present)."""
    process: str | None
    operation: str | None
    result: str | None


class _RecordTooLong(Exception):
    """A quoted field stayed open for more than MAX_RECORD_LINES lines."""


class _LineTap:
    """Physical-line iterator that remembers what csv.reader consumed."""

    def __init__(self, lines: Iterator[str], max_lines: int) -> None:
        self._lines = lines
        self._max_lines = max_lines
        self.pending: list[str] = []
        self.consumed = 0

    def __iter__(self) -> _LineTap:
        return self

    def __next__(self) -> str:
        if len(self.pending) >= self._max_lines:
            raise _RecordTooLong
        text = next(self._lines)
        self.consumed += 1
        self.pending.append(text)
        return text

    def take(self) -> RawLine:
        count = len(self.pending)
        raw = RawLine(
            line_number=self.consumed - count + 1,
            text="".join(self.pending),
            line_count=count,
        )
        self.pending.clear()
        return raw

    def take_each(self) -> list[RawLine]:
        first = self.consumed - len(self.pending) + 1
        raws = [RawLine(line_number=first + i, text=t) for i, t in enumerate(self.pending)]
        self.pending.clear()
        return raws


def iter_raw_lines(
    path: Path,
    *,
    encoding: str = "utf-8-sig",
    max_record_lines: int = MAX_RECORD_LINES,
) -> Generator[RawLine, None, None]:
    """Yield the raw text of every record in ``path``.

    Record boundaries come from csv.reader over the stream, so a quoted field
    containing a newline stays in one RawLine (line_number = first line).
    A quote left open for more than ``max_record_lines`` lines, or a csv error,
    falls back to one RawLine per physical line for the lines involved.

    utf-8-sig で BOM 付きエクスポートにも対応。デコード不能バイトは置換する。
    """
    with path.open("r", encoding=encoding, errors="replace", newline="") as f:
        tap = _LineTap(iter(f), max_record_lines)
        reader = csv.reader(tap)
        while True:
            try:
                next(reader)
            except StopIteration:
                break
            except (csv.Error, _RecordTooLong):
                # 行単位の best-effort 解析に戻す
                yield from tap.take_each()
                continue
            yield tap.take()
        # 末尾の空行などで csv が消費だけした行
        if tap.pending:
            yield from tap.take_each()


def read_header(lines: Iterator[RawLine]) -> tuple[Header, RawLine]:
    """Consume lines up to and including the header.

    Returns:
        (Header, the raw header line) - the raw line is re-emitted verbatim
        at the top of side-channel files.

    Raises:
        HeaderError: no non-empty line, or the header has no column names
    """
    for raw in lines:
        if not raw.text.strip():
            continue
        header = Header.from_fields(parse_line(raw.text))
        if not any(header.columns):
            raise HeaderError(f"unreadable header at line {raw.line_number}")
        return header, raw
    raise HeaderError("file is empty")


def sanitize_value(value: str) -> str:
    cleaned = _DISALLOWED_CHARS.sub("", value)
    cleaned = _WHITESPACE_RUN.sub(" ", cleaned)
    return cleaned.strip()


def normalize_record(
    fields: Sequence[str],
    header: Header,
    *,
    line_number: int,
    required_fields: Iterable[str] = (),
    sanitize: bool = True,
) -> tuple[Record, bool]:
    """Map a parsed row onto the header and optionally sanitize it.

    Required fields are checked before sanitization, matching the pipeline
    order validate -> sanitize.

    Returns:
        (record, modified) where modified is True when sanitization changed
        at least one value.

    Raises:
        MissingFieldError: propagated from Record.from_fields
    """
    record = Record.from_fields(
        header, fields, line_number=line_number, required_fields=required_fields
    )
    if not sanitize:
        return record, False
    cleaned = {k: sanitize_value(v) for k, v in record.items()}
    if cleaned == dict(record.values):
        return record, False
    return record.replace_values(cleaned), True


def _match_column(header: Header, preferred: str | None, patterns: Sequence[str]) -> str | None:
    if preferred:
        column = header.resolve(preferred)
        if column is not None:
            return column
    # パターン優先順で探索 (先に書いたパターンほど強い一致)
    lowered = [(c, c.lower()) for c in header.columns]
    for pattern in patterns:
        for column, name in lowered:
            if pattern in name:
                return column
    return None


def detect_columns(
    header: Header,
    *,
    process: str | None = "Process Name",
    operation: str | None = "Operation",
    result: str | None = "Result",
) -> ColumnMap:
    """Resolve the process / operation / result columns of ``header``.

    The configured name wins when present (case-insensitive); otherwise the
    first column whose lowercased name contains a known pattern is used.
    """
    return ColumnMap(
        process=_match_column(header, process, PROCESS_PATTERNS),
        operation=_match_column(header, operation, OPERATION_PATTERNS),
        result=_match_column(header, result, RESULT_PATTERNS),
    )


def resolve_fields(
    names: Iterable[str],
    header: Header,
    aliases: Mapping[str, str | None] | None = None,
) -> tuple[str, ...]:
    """Map configured column names onto the columns ``header`` actually has.

    A name present in the header resolves to the header's own spelling.
    Otherwise ``aliases`` (keyed by casefolded configured name) supplies the
    column detect_columns picked for it, e.g. "Process Name" -> "Process".
    Names with neither are returned unchanged.
    """
    aliases = aliases or {}
    resolved: list[str] = []
    for name in names:
        column = header.resolve(name) or aliases.get(name.casefold())
        resolved.append(column or name)
    return tuple(resolved)


def column_aliases(
    columns: ColumnMap,
    *,
    process: str | None,
    operation: str | None,
    result: str | None,
) -> dict[str, str | None]:
    """Configured counter column names -> the columns detect_columns resolved."""
    pairs = ((process, columns.process), (operation, columns.operation), (result, columns.result))
    return {name.casefold(): column for name, column in pairs if name}
