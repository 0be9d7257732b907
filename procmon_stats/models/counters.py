from __future__ import annotations

from collections import Counter
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

"""Case-insensitive categorical counters (process / operation / result).

Counters are only ever incremented; ``reset()`` is the single way back to zero.
Keys are folded with ``str.casefold`` and reported with the first spelling seen.
"""

__all__ = [
    "CategoryCounter",
    "Counters",
]


class CategoryCounter:
    """Monotonic frequency map keyed case-insensitively.

    >>> c = CategoryCounter()
    >>> c.increment("Chrome.exe"); c.increment("chrome.EXE")
    >>> c["CHROME.EXE"]
    2
    >>> c.to_dict()
    {'Chrome.exe': 2}
    """

    def __init__(self, initial: Mapping[str, int] | None = None) -> None:
        self._counts: Counter[str] = Counter()
        self._display: dict[str, str] = {}
        if initial:
            for key, count in initial.items():
                self.increment(key, count)

    def increment(self, key: str, amount: int = 1) -> None:
        if amount < 0:
            raise ValueError("counters are monotonic; amount must be >= 0")
        folded = key.casefold()
        self._display.setdefault(folded, key)
        self._counts[folded] += amount

    def merge(self, other: CategoryCounter | Mapping[str, int]) -> None:
        """Fold another counter (or plain mapping) into this one."""
        items = other.items()
        for key, count in items:
            self.increment(key, count)

    def reset(self) -> None:
        self._counts.clear()
        self._display.clear()

    def __getitem__(self, key: str) -> int:
        return self._counts.get(key.casefold(), 0)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def __iter__(self) -> Iterator[str]:
        return (self._display[k] for k in self._counts)

    def items(self) -> Iterator[tuple[str, int]]:
        return ((self._display[k], v) for k, v in self._counts.items())

    def values(self) -> list[int]:
        return list(self._counts.values())

    def total(self) -> int:
        return sum(self._counts.values())

    def most_common(self, n: int | None = None) -> list[tuple[str, int]]:
        return [(self._display[k], v) for k, v in self._counts.most_common(n)]

    def to_dict(self) -> dict[str, int]:
        return dict(self.items())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CategoryCounter):
            return self._counts == other._counts
        if isinstance(other, Mapping):
            return self._counts == Counter({str(k).casefold(): v for k, v in other.items()})
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CategoryCounter({self.to_dict()!r})"


@dataclass
class Counters:
    """The three aggregate maps owned by one processor instance."""
    process_types: CategoryCounter = field(default_factory=CategoryCounter)
    operation_types: CategoryCounter = field(default_factory=CategoryCounter)
    result_types: CategoryCounter = field(default_factory=CategoryCounter)

    def merge(self, other: Counters) -> None:
        self.process_types.merge(other.process_types)
        self.operation_types.merge(other.operation_types)
        self.result_types.merge(other.result_types)

    def reset(self) -> None:
        self.process_types.reset()
        self.operation_types.reset()
        self.result_types.reset()

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            "process_types": self.process_types.to_dict(),
            "operation_types": self.operation_types.to_dict(),
            "result_types": self.result_types.to_dict(),
        }
