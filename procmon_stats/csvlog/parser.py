from __future__ import annotations

import csv
import io
from collections.abc import Sequence

"""Quoted CSV record parsing for Procmon exports.

Decoding is done by the stdlib csv module with its default (excel) dialect:
a quoted field may contain commas and newlines, and "" inside quotes stands
for one literal quote. The reader is non-strict, so an unterminated quote
closes at the end of the text instead of raising.
"""

__all__ = [
    "parse_line",
    "format_line",
]

_QUOTE = '"'
_DELIMITER = ","
_NEEDS_QUOTING = (_QUOTE, _DELIMITER, "\r", "\n")


def parse_line(line: str) -> list[str]:
    """Split the raw text of one record into field values.

    Args:
        line: Raw record text; a trailing CR/LF is ignored. It may span several
            physical lines when a quoted field contains a newline.

    Returns:
        Field values in order. An empty line yields ``[""]``.

    Raises:
        csv.Error: a field exceeds ``csv.field_size_limit()``

    Examples:
        >>> parse_line('"a,b","q ""x"" y",c')
        ['a,b', 'q "x" y', 'c']
        >>> parse_line('"open,ended')
        ['open,ended']
        >>> parse_line('"two\\nlines",x')
        ['two\\nlines', 'x']
    """
    # 1 レコード分のテキストなので先頭行だけを返す
    for row in csv.reader(io.StringIO(line)):
        return row or [""]
    return [""]


def _quote(value: str) -> str:
    return _QUOTE + value.replace(_QUOTE, _QUOTE * 2) + _QUOTE


def format_line(fields: Sequence[str], *, quote_all: bool = True) -> str:
    """Serialize field values into one CSV record (no trailing terminator).

    quote_all=True mirrors Procmon's own export (every field quoted);
    otherwise only fields that need it are quoted, including values with
    leading or trailing whitespace.
    """
    out: list[str] = []
    for value in fields:
        if quote_all or any(c in value for c in _NEEDS_QUOTING) or value != value.strip():
            out.append(_quote(value))
        else:
            out.append(value)
    return _DELIMITER.join(out)
