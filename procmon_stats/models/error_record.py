from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for line-level error logging.

Line-level problems (unparseable line, field-count mismatch) are kept as
ErrorRecord entries in a bounded per-file list and optionally flushed to a
JSON Lines file. line=-1 is the sentinel for file-level errors where no
specific line applies (missing file, unreadable header).
"""

__all__ = [
    "ErrorRecord",
    "MAX_CONTENT_LENGTH",
]

MAX_CONTENT_LENGTH = 200


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Input filename being processed
        line: Line number (1-based). Use -1 for file-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human-readable description
        content: Offending line, truncated to MAX_CONTENT_LENGTH characters
    """
    timestamp: str  # ISO8601 UTC
    file: str
    line: int  # 行番号。不明な場合 -1 許容
    error_type: str  # UPPER_SNAKE
    message: str
    content: str = ""

    @staticmethod
    def create(
        file: str, line: int, error_type: str, message: str, content: str = ""
    ) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp.

        Parameters:
            file: Input filename being processed
            line: Line number (1-based). Use -1 for file-level errors
            error_type: Error classification in UPPER_SNAKE_CASE format
            message: Error description
            content: Raw line content; truncated here so callers never hold long lines

        Returns:
            New ErrorRecord instance with current UTC timestamp
        """
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        if len(content) > MAX_CONTENT_LENGTH:
            content = content[:MAX_CONTENT_LENGTH] + "..."
        return ErrorRecord(
            timestamp=ts,
            file=file,
            line=line,
            error_type=error_type,
            message=message,
            content=content,
        )

    def to_dict(self) -> dict[str, object]:
        return asdict(self)

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format.

        Returns:
            JSON string representation without extra keys
        """
        return json.dumps(asdict(self), ensure_ascii=False)
