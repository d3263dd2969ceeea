"""Row containers returned by the metadata views.

A Row is a plain dict; its insertion order is the column order callers
see. Each result also carries a RowShape describing its own columns,
taken from the first row. Empty results get an empty shape so callers
can still probe the structure before iterating.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

Row = dict[str, Any]


def value_kind(value: Any) -> str:
    """Relational scalar kind of a row value: string, int, boolean or null."""
    if value is None:
        return "null"
    # bool before int: bool is a subclass of int
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "int"
    return "string"


@dataclass(frozen=True)
class ColumnShape:
    """Name and value kind of one result column."""

    name: str
    kind: str


@dataclass(frozen=True)
class RowShape:
    """Column layout of a result."""

    columns: tuple[ColumnShape, ...] = ()

    @classmethod
    def from_row(cls, row: Row | None) -> RowShape:
        if not row:
            return EMPTY_SHAPE
        return cls(tuple(ColumnShape(name, value_kind(value)) for name, value in row.items()))

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.columns]

    def __len__(self) -> int:
        return len(self.columns)


EMPTY_SHAPE = RowShape()


@dataclass(frozen=True)
class MetadataResult:
    """Rows of one metadata view plus their shape."""

    rows: list[Row] = field(default_factory=list)
    shape: RowShape = EMPTY_SHAPE

    @classmethod
    def from_rows(cls, rows: list[Row]) -> MetadataResult:
        """Build a result whose shape comes from the first row."""
        return cls(rows=rows, shape=RowShape.from_row(rows[0] if rows else None))

    @classmethod
    def empty(cls) -> MetadataResult:
        """No rows, no shape. Returned by views that are not modelled."""
        return cls()

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def column(self, name: str) -> list[Any]:
        """All values of one column, in row order."""
        return [row[name] for row in self.rows]
