from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Error log buffering.

- LineErrorLog: per-file bounded list of line-level errors (cap 既定 100)。
  上限を超えた分は dropped として件数のみ保持し、メモリは増えない。
- ErrorLogBuffer: run 全体のエラーを JSON Lines で
  `logs/errors-YYYYMMDD-HHMMSS.log` (UTC) に一括追記する。
"""

__all__ = [
    "ErrorRecord",
    "LineErrorLog",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"
DEFAULT_ERROR_CAP = 100


class LineErrorLog:
    """Bounded in-memory list of ErrorRecord for one file."""

    def __init__(self, file_name: str, cap: int = DEFAULT_ERROR_CAP) -> None:
        if cap < 0:
            raise ValueError("cap must be >= 0")
        self.file_name = file_name
        self.cap = cap
        self._records: list[ErrorRecord] = []
        self.dropped = 0

    def add(self, line: int, error_type: str, message: str, content: str = "") -> bool:
        """Record a line error. Returns False once the cap has been reached."""
        if len(self._records) >= self.cap:
            self.dropped += 1
            return False
        self._records.append(
            ErrorRecord.create(self.file_name, line, error_type, message, content)
        )
        return True

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    @property
    def total(self) -> int:
        """Errors seen including dropped ones."""
        return len(self._records) + self.dropped

    def __len__(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()
        self.dropped = 0


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    - flush() 呼び出し時にファイル (なければ生成) へ一括追記
    - ファイルパスは初回アクセスで決定
    - スレッド安全性不要 (シリアル実行)
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def extend(self, records: Iterable[ErrorRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file.

        Returns:
            The log file path, or None when nothing was buffered (no file is
            created for a clean run).
        """
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
