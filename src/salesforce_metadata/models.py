"""Core domain models for Salesforce object metadata.

A Table is one sObject type, a Column one of its fields. Both are
immutable once built and free of HTTP/describe payload details.

Relationships are kept as a (table name, column name) pair rather than
an object reference: the referenced object may not be described yet,
or may not be visible to the current user at all.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Column:
    """One field of a Salesforce object."""

    name: str
    type: str
    table_name: str
    length: int = 0
    nillable: bool = True
    comment: str | None = None
    referenced_table: str | None = None
    referenced_column: str | None = None

    @property
    def is_reference(self) -> bool:
        """True when both halves of the reference name pair are present."""
        return bool(self.referenced_table) and bool(self.referenced_column)


@dataclass(frozen=True)
class Table:
    """One Salesforce object type, with its fields in describe order."""

    name: str
    comment: str | None = None
    columns: tuple[Column, ...] = ()

    def find_column(self, name: str) -> Column | None:
        """Case-insensitive column lookup."""
        wanted = name.lower()
        for column in self.columns:
            if column.name.lower() == wanted:
                return column
        return None
