from __future__ import annotations

import hashlib
from collections.abc import Iterable

from ..models.config_models import DEFAULT_DEDUP_FIELDS
from ..models.record import Header, Record

"""Content-hash duplicate detection for one file's processing run.

The hash covers a fixed, ordered field subset (default: time, process name,
PID, operation, path). Result and Detail are left out by default, so a
retried operation with a different outcome collapses into its first
occurrence. That may hide retry-then-succeed sequences; pass a different
``fields`` tuple to change it.

SHA-256 is used for collision avoidance only, not security.
"""

__all__ = [
    "Deduplicator",
    "record_hash",
]

_SEPARATOR = "|"


def record_hash(record: Record, fields: Iterable[str], header: Header | None = None) -> bytes:
    """Digest of the pipe-joined values of ``fields`` (missing fields -> "")."""
    joined = _SEPARATOR.join(record.get_field(name, header) for name in fields)
    return hashlib.sha256(joined.encode("utf-8")).digest()


class Deduplicator:
    """Reject records whose content hash was already seen.

    The seen set only grows until ``reset()``; one instance per file.
    """

    def __init__(
        self,
        fields: Iterable[str] = DEFAULT_DEDUP_FIELDS,
        *,
        enabled: bool = True,
        header: Header | None = None,
    ) -> None:
        self.fields = tuple(fields)
        if enabled and not self.fields:
            raise ValueError("dedup fields must not be empty")
        self.enabled = enabled
        self.header = header
        self._seen: set[bytes] = set()

    @property
    def seen_count(self) -> int:
        return len(self._seen)

    def is_duplicate(self, record: Record) -> bool:
        """Return True if seen before; otherwise remember it and return False."""
        if not self.enabled:
            return False
        digest = record_hash(record, self.fields, self.header)
        if digest in self._seen:
            return True
        self._seen.add(digest)
        return False

    def reset(self) -> None:
        self._seen.clear()
