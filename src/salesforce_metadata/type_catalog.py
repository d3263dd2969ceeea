"""Salesforce field type -> relational type mapping.

Every describe field type resolves to a TypeDescriptor carrying the
JDBC type code, display precision, scale bounds and numeric radix.
These values are what SQL tools see in getColumns/getTypeInfo, so the
table below is kept exactly as generic clients expect it.

Resolution never fails: unknown types (new Salesforce releases add
them) resolve to OTHER_TYPE so schema enumeration can finish.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class SqlType(IntEnum):
    """JDBC java.sql.Types codes used by the catalog."""

    LONGVARCHAR = -1
    VARBINARY = -3
    DECIMAL = 3
    INTEGER = 4
    DOUBLE = 8
    VARCHAR = 12
    BOOLEAN = 16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    OTHER = 1111
    ARRAY = 2003
    BLOB = 2004


# Largest 32-bit signed int; "unbounded" precision.
MAX_PRECISION = 0x7FFFFFFF


@dataclass(frozen=True)
class TypeDescriptor:
    """Relational description of one Salesforce field type."""

    type_name: str
    sql_type: SqlType
    precision: int
    min_scale: int = 0
    max_scale: int = 0
    radix: int = 0


OTHER_TYPE = TypeDescriptor("other", SqlType.OTHER, MAX_PRECISION)

TYPE_CATALOG: tuple[TypeDescriptor, ...] = (
    TypeDescriptor("id", SqlType.VARCHAR, MAX_PRECISION),
    TypeDescriptor("masterrecord", SqlType.VARCHAR, MAX_PRECISION),
    TypeDescriptor("reference", SqlType.VARCHAR, MAX_PRECISION),
    TypeDescriptor("string", SqlType.VARCHAR, MAX_PRECISION),
    TypeDescriptor("encryptedstring", SqlType.VARCHAR, MAX_PRECISION),
    TypeDescriptor("email", SqlType.VARCHAR, MAX_PRECISION),
    TypeDescriptor("phone", SqlType.VARCHAR, MAX_PRECISION),
    TypeDescriptor("url", SqlType.VARCHAR, MAX_PRECISION),
    TypeDescriptor("textarea", SqlType.LONGVARCHAR, MAX_PRECISION),
    TypeDescriptor("base64", SqlType.BLOB, MAX_PRECISION),
    TypeDescriptor("boolean", SqlType.BOOLEAN, 1),
    TypeDescriptor("_boolean", SqlType.BOOLEAN, 1),
    TypeDescriptor("byte", SqlType.VARBINARY, 10, 0, 0, 10),
    TypeDescriptor("_byte", SqlType.VARBINARY, 10, 0, 0, 10),
    TypeDescriptor("int", SqlType.INTEGER, 10, 0, 0, 10),
    TypeDescriptor("_int", SqlType.INTEGER, 10, 0, 0, 10),
    TypeDescriptor("decimal", SqlType.DECIMAL, 17, -324, 306, 10),
    TypeDescriptor("double", SqlType.DOUBLE, 17, -324, 306, 10),
    TypeDescriptor("_double", SqlType.DOUBLE, 17, -324, 306, 10),
    TypeDescriptor("percent", SqlType.DOUBLE, 17, -324, 306, 10),
    TypeDescriptor("currency", SqlType.DOUBLE, 17, -324, 306, 10),
    TypeDescriptor("date", SqlType.DATE, 10),
    TypeDescriptor("time", SqlType.TIME, 10),
    TypeDescriptor("datetime", SqlType.TIMESTAMP, 10),
    TypeDescriptor("picklist", SqlType.ARRAY, 0),
    TypeDescriptor("multipicklist", SqlType.ARRAY, 0),
    TypeDescriptor("combobox", SqlType.ARRAY, 0),
    TypeDescriptor("anyType", SqlType.OTHER, 0),
)

# First entry wins, as in a linear scan of TYPE_CATALOG
_BY_NAME: dict[str, TypeDescriptor] = {}
for _descriptor in TYPE_CATALOG:
    _BY_NAME.setdefault(_descriptor.type_name, _descriptor)
del _descriptor

# Python host type spellings -> catalog key
_HOST_TYPE_ALIASES = {
    "bool": "boolean",
    "builtins.bool": "boolean",
    "str": "string",
    "builtins.str": "string",
}


def resolve(remote_type_name: str | None) -> TypeDescriptor:
    """Resolve a Salesforce field type name to its TypeDescriptor.

    Leading underscores are stripped first ("_int" and "int" are the
    same type); the lookup itself is exact and case-sensitive.

    Returns:
        The matching descriptor, or OTHER_TYPE for unknown names.
    """
    if not remote_type_name:
        return OTHER_TYPE
    return _BY_NAME.get(remote_type_name.lstrip("_"), OTHER_TYPE)


def resolve_from_host_type(host_type: Any = None) -> TypeDescriptor:
    """Resolve a Python value type to a TypeDescriptor.

    Used by callers that only know the Python type of a value, not the
    Salesforce field type. ``None`` means string.

    Args:
        host_type: A type name ("bool", "builtins.str", "int", ...) or a
            type object (bool, str, ...).
    """
    if host_type is None:
        host_type = "string"
    elif isinstance(host_type, type):
        host_type = host_type.__name__
    name = _HOST_TYPE_ALIASES.get(host_type, host_type)
    return _BY_NAME.get(name, OTHER_TYPE)
