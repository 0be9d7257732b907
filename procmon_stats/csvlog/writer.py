from __future__ import annotations

from pathlib import Path
from typing import Any, TextIO

from ..models.record import Header, Record
from .parser import format_line

"""Side-channel CSV output for post-processing.

When post-processing writes output, two files accompany each input:
- <stem>_cleaned.csv          retained records
- <stem>_success_archive.csv  records filtered as benign

Both start with the input's original header line and use the same quoted
CSV format as the input.
"""

__all__ = [
    "SideChannelWriter",
    "cleaned_path",
    "archive_path",
]


def cleaned_path(output_dir: Path, input_path: Path) -> Path:
    return output_dir / f"{input_path.stem}_cleaned.csv"


def archive_path(output_dir: Path, input_path: Path) -> Path:
    return output_dir / f"{input_path.stem}_success_archive.csv"


class SideChannelWriter:
    """Write retained / archived records next to the main pipeline.

    Files are opened on construction (header written immediately) and closed
    by ``close()`` or the context manager exit.
    """

    def __init__(self, output_dir: Path, input_path: Path, header: Header, header_line: str) -> None:
        output_dir.mkdir(parents=True, exist_ok=True)
        self.header = header
        self.cleaned_path = cleaned_path(output_dir, input_path)
        self.archive_path = archive_path(output_dir, input_path)
        self._cleaned: TextIO | None = self.cleaned_path.open("w", encoding="utf-8", newline="\n")
        self._archive: TextIO | None = self.archive_path.open("w", encoding="utf-8", newline="\n")
        first = header_line.rstrip("\r\n") + "\n"
        self._cleaned.write(first)
        self._archive.write(first)
        self.cleaned_count = 0
        self.archived_count = 0

    def _row(self, record: Record) -> str:
        # 欠落列は空文字で埋めて列位置を保つ
        return format_line([record.get(col, "") for col in self.header.columns]) + "\n"

    def write_retained(self, record: Record) -> None:
        if self._cleaned is None:
            raise ValueError("writer is closed")
        self._cleaned.write(self._row(record))
        self.cleaned_count += 1

    def write_archived(self, record: Record) -> None:
        if self._archive is None:
            raise ValueError("writer is closed")
        self._archive.write(self._row(record))
        self.archived_count += 1

    def close(self) -> None:
        for f in (self._cleaned, self._archive):
            if f is not None:
                f.close()
        self._cleaned = None
        self._archive = None

    def __enter__(self) -> SideChannelWriter:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
