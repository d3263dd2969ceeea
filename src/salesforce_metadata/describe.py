"""Parse Salesforce REST describe payloads into Table/Column models.

Inputs are the JSON bodies of:
  GET /services/data/vXX.X/sobjects/                 (describeGlobal)
  GET /services/data/vXX.X/sobjects/{name}/describe/ (describeSObject)

Field mapping:
  name        -> Column.name
  type        -> Column.type (key into the type catalog)
  length      -> Column.length (falls back to precision, then 0)
  nillable    -> Column.nillable
  label       -> Column.comment
  referenceTo -> Column.referenced_table (first entry) + "Id"

Polymorphic lookups (referenceTo with several objects, e.g. Task.WhoId)
are reported against the first object only.
"""

import logging
from typing import Any

from salesforce_metadata.models import Column, Table

logger = logging.getLogger(__name__)

# Every sObject is keyed by its "Id" field, so references point there
REFERENCED_COLUMN = "Id"


def queryable_object_names(describe_global: dict[str, Any]) -> list[str]:
    """Names of the sObjects that can be queried, in describeGlobal order.

    Args:
        describe_global: Body of the describeGlobal response.
    """
    names: list[str] = []
    for sobject in describe_global.get("sobjects", []):
        name = sobject.get("name")
        if not name:
            continue
        # Missing flag means queryable; only an explicit False excludes
        if sobject.get("queryable", True) is False:
            logger.debug("Skipping non-queryable object %s", name)
            continue
        names.append(name)
    return names


def _field_length(field: dict[str, Any]) -> int:
    length = field.get("length") or field.get("precision") or 0
    try:
        return int(length)
    except (TypeError, ValueError):
        return 0


def parse_field(field: dict[str, Any], table_name: str) -> Column | None:
    """Convert one describe field dict to a Column.

    Returns:
        The Column, or None if the field has no name.
    """
    name = field.get("name")
    if not name:
        return None

    referenced_table: str | None = None
    referenced_column: str | None = None
    reference_to = field.get("referenceTo") or []
    if reference_to:
        referenced_table = reference_to[0]
        referenced_column = REFERENCED_COLUMN
        if len(reference_to) > 1:
            logger.debug(
                "%s.%s references %d objects, reporting %s",
                table_name,
                name,
                len(reference_to),
                referenced_table,
            )

    return Column(
        name=name,
        type=field.get("type") or "",
        table_name=table_name,
        length=_field_length(field),
        nillable=bool(field.get("nillable", True)),
        comment=field.get("label"),
        referenced_table=referenced_table,
        referenced_column=referenced_column,
    )


def parse_sobject_describe(describe: dict[str, Any]) -> Table:
    """Convert a describeSObject response body to a Table.

    Raises:
        ValueError: If the payload has no object name.
    """
    name = describe.get("name")
    if not name:
        raise ValueError("Describe payload has no object name")

    columns: list[Column] = []
    for field in describe.get("fields", []):
        column = parse_field(field, name)
        if column is not None:
            columns.append(column)

    return Table(name=name, comment=describe.get("label"), columns=tuple(columns))
