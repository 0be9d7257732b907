from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

"""Record-level models for the Procmon CSV pipeline.

RawLine (1 レコード分の生テキスト) -> FieldRow (list[str]) -> Record の順で上位に流れる。
Record は header に含まれる列名だけをキーに持つ読み取り専用 mapping で、
必須列チェックは構築時 (Record.from_fields) に行う。
"""

__all__ = [
    "RawLine",
    "Header",
    "Record",
    "MissingFieldError",
]


class MissingFieldError(Exception):
    """Raised when a row lacks a required column (or the value is blank)."""

    def __init__(self, field_name: str, line_number: int) -> None:
        super().__init__(f"line {line_number}: required field '{field_name}' missing")
        self.field_name = field_name
        self.line_number = line_number


@dataclass(frozen=True)
class RawLine:
    """Raw text of one record from the input file.

    line_number is the 1-based first physical line; line_count is more than 1
    only when a quoted field contains a newline.
    """
    line_number: int
    text: str
    line_count: int = 1


@dataclass(frozen=True)
class Header:
    """Ordered column names captured from the first line of a file.

    Lookup by name is case-insensitive; the original spelling is kept for
    output (cleaned file header, record keys).
    """
    columns: tuple[str, ...]
    _index: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, int] = {}
        for pos, name in enumerate(self.columns):
            # 重複列名は先勝ち
            index.setdefault(name.casefold(), pos)
        object.__setattr__(self, "_index", MappingProxyType(index))

    @classmethod
    def from_fields(cls, fields: Sequence[str]) -> Header:
        return cls(tuple(f.strip() for f in fields))

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[str]:
        return iter(self.columns)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.casefold() in self._index

    def resolve(self, name: str) -> str | None:
        """Return the header's own spelling of ``name`` or None if absent."""
        pos = self._index.get(name.casefold())
        return None if pos is None else self.columns[pos]


@dataclass(frozen=True)
class Record(Mapping[str, str]):
    """A single normalized event keyed by header column name.

    Attributes:
        line_number: Source line number (1-based)
        values: Column name -> sanitized value; keys are a subset of the header
    """
    line_number: int
    values: Mapping[str, str]

    @classmethod
    def from_fields(
        cls,
        header: Header,
        fields: Sequence[str],
        *,
        line_number: int,
        required_fields: Iterable[str] = (),
    ) -> Record:
        """Build a Record positionally aligned to ``header``.

        Fewer fields than columns: trailing columns are omitted (no padding).
        More fields than columns: extras are dropped.

        Raises:
            MissingFieldError: a required column is absent or blank
        """
        values = dict(zip(header.columns, fields))
        for name in required_fields:
            column = header.resolve(name)
            if column is None or not values.get(column, "").strip():
                raise MissingFieldError(name, line_number)
        return cls(line_number=line_number, values=MappingProxyType(values))

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def get_field(self, name: str, header: Header | None = None, default: str = "") -> str:
        """Case-insensitive value lookup (via header when given)."""
        if name in self.values:
            return self.values[name]
        if header is not None:
            column = header.resolve(name)
            if column is not None:
                return self.values.get(column, default)
            return default
        folded = name.casefold()
        for key, value in self.values.items():
            if key.casefold() == folded:
                return value
        return default

    def replace_values(self, values: Mapping[str, str]) -> Record:
        return Record(line_number=self.line_number, values=MappingProxyType(dict(values)))
