"""Relational metadata views over the cached Salesforce schema.

Each list_* method mirrors one relational metadata call (getTables,
getColumns, getPrimaryKeys, ...) and returns a MetadataResult whose
rows use the standard column names in the standard order.

Name patterns:
  None or "%"   -> match every name
  anything else -> case-insensitive exact match
No other LIKE wildcards are interpreted ("Acc%" matches nothing).

Salesforce declares no primary keys, foreign keys or indexes, so they
are synthesised:
  - every field named "Id" is reported as a primary key and an index
  - every reference field is reported as an imported (foreign) key
Synthetic names come from a per-instance counter and never repeat.
"""

import logging
import threading
from typing import Any

from salesforce_metadata.capabilities import capability, supports
from salesforce_metadata.results import MetadataResult, Row
from salesforce_metadata.schema_cache import SchemaCache
from salesforce_metadata.type_catalog import TYPE_CATALOG, resolve

logger = logging.getLogger(__name__)

DEFAULT_CATALOG = "database"
DEFAULT_SCHEMA = "Salesforce"
DEFAULT_TABLE_TYPE = "TABLE"

ID_COLUMN = "Id"

# Relational nullability codes
COLUMN_NO_NULLS = 0
COLUMN_NULLABLE = 1

# Index type code for anything that is not clustered/hashed/statistic
TABLE_INDEX_OTHER = 3

# Searchable with any WHERE operator
TYPE_SEARCHABLE = 3

PK_NAME_PREFIX = "FakePK"
FK_NAME_PREFIX = "FakeFK"
INDEX_NAME_PREFIX = "FakeIndex"


def matches_pattern(pattern: str | None, name: str) -> bool:
    """Return True if *name* passes a metadata name pattern."""
    if pattern is None or pattern.strip() == "%":
        return True
    return name.lower() == pattern.lower()


class SyntheticCounter:
    """Thread-safe counter for synthetic key and index names.

    Starts at 0; each next() returns a value never returned before by
    this instance.
    """

    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._value
            self._value += 1
            return value

    @property
    def value(self) -> int:
        """The value the next call to next() will return."""
        return self._value


class DatabaseMetadata:
    """Projects a SchemaCache into relational metadata result sets.

    Args:
        cache: Schema cache for one connection.
        counter: Synthetic name counter. A fresh one is created when
            omitted; pass one in to share it between instances.
    """

    def __init__(self, cache: SchemaCache, counter: SyntheticCounter | None = None) -> None:
        self.cache = cache
        self.counter = counter if counter is not None else SyntheticCounter()

    # --- Catalogs and schemas ---

    def list_catalogs(self) -> MetadataResult:
        return MetadataResult.from_rows([{"TABLE_CAT": DEFAULT_CATALOG}])

    def list_schemas(
        self, catalog: str | None = None, schema_pattern: str | None = None
    ) -> MetadataResult:
        """The single schema every Salesforce object lives in.

        Arguments are accepted for signature compatibility and ignored.
        """
        row: Row = {
            "TABLE_SCHEM": DEFAULT_SCHEMA,
            "TABLE_CATALOG": DEFAULT_CATALOG,
            "IS_DEFAULT": True,
        }
        return MetadataResult.from_rows([row])

    def list_table_types(self) -> MetadataResult:
        return MetadataResult.from_rows([{"TABLE_TYPE": DEFAULT_TABLE_TYPE}])

    # --- Tables and columns ---

    def list_tables(
        self,
        table_name_pattern: str | None = None,
        catalog: str | None = None,
        schema_pattern: str | None = None,
        types: list[str] | None = None,
    ) -> MetadataResult:
        """One row per object whose name passes *table_name_pattern*.

        Catalog, schema and type filters are ignored: there is only one
        of each.
        """
        logger.info(
            "list_tables catalog=%s schema=%s table=%s", catalog, schema_pattern, table_name_pattern
        )
        rows: list[Row] = []
        for table in self.cache.get_tables():
            if not matches_pattern(table_name_pattern, table.name):
                continue
            rows.append(
                {
                    "TABLE_CAT": DEFAULT_CATALOG,
                    "TABLE_SCHEM": DEFAULT_SCHEMA,
                    "TABLE_NAME": table.name,
                    "TABLE_TYPE": DEFAULT_TABLE_TYPE,
                    "REMARKS": table.comment,
                    "TYPE_CAT": None,
                    "TYPE_SCHEM": None,
                    "TYPE_NAME": None,
                    "SELF_REFERENCING_COL_NAME": None,
                    "REF_GENERATION": None,
                }
            )
        logger.info("list_tables table=%s -> %d tables", table_name_pattern, len(rows))
        return MetadataResult.from_rows(rows)

    def list_columns(
        self,
        table_name_pattern: str | None = None,
        column_name_pattern: str | None = None,
        catalog: str | None = None,
        schema_pattern: str | None = None,
    ) -> MetadataResult:
        """One row per matching field of every matching object.

        ORDINAL_POSITION starts at 1 and keeps counting across tables;
        it is not reset per table.
        """
        logger.info(
            "list_columns table=%s column=%s", table_name_pattern, column_name_pattern
        )
        rows: list[Row] = []
        ordinal = 1
        for table in self.cache.get_tables():
            if not matches_pattern(table_name_pattern, table.name):
                continue
            for column in table.columns:
                if not matches_pattern(column_name_pattern, column.name):
                    continue
                type_info = resolve(column.type)
                nullable = COLUMN_NULLABLE if column.nillable else COLUMN_NO_NULLS
                rows.append(
                    {
                        "TABLE_CAT": DEFAULT_CATALOG,
                        "TABLE_SCHEM": DEFAULT_SCHEMA,
                        "TABLE_NAME": table.name,
                        "COLUMN_NAME": column.name,
                        "DATA_TYPE": int(type_info.sql_type),
                        "TYPE_NAME": column.type,
                        "COLUMN_SIZE": column.length,
                        "BUFFER_LENGTH": 0,
                        "DECIMAL_DIGITS": 0,
                        "NUM_PREC_RADIX": type_info.radix,
                        "NULLABLE": nullable,
                        "REMARKS": column.comment,
                        "COLUMN_DEF": None,
                        "SQL_DATA_TYPE": None,
                        "SQL_DATETIME_SUB": None,
                        "CHAR_OCTET_LENGTH": 0,
                        "ORDINAL_POSITION": ordinal,
                        "IS_NULLABLE": "YES" if column.nillable else "NO",
                        "SCOPE_CATALOG": None,
                        "SCOPE_SCHEMA": None,
                        "SCOPE_TABLE": None,
                        "SOURCE_DATA_TYPE": column.type,
                        "CASE_SENSITIVE": 0,
                    }
                )
                ordinal += 1
        logger.info("list_columns table=%s -> %d columns", table_name_pattern, len(rows))
        return MetadataResult.from_rows(rows)

    # --- Synthetic keys and indexes ---

    def list_primary_keys(
        self,
        table_name_pattern: str | None = None,
        catalog: str | None = None,
        schema: str | None = None,
    ) -> MetadataResult:
        """The "Id" field of every matching object, as its primary key."""
        rows: list[Row] = []
        for table in self.cache.get_tables():
            if not matches_pattern(table_name_pattern, table.name):
                continue
            for column in table.columns:
                if column.name.lower() != ID_COLUMN.lower():
                    continue
                rows.append(
                    {
                        "TABLE_CAT": DEFAULT_CATALOG,
                        "TABLE_SCHEM": DEFAULT_SCHEMA,
                        "TABLE_NAME": table.name,
                        "COLUMN_NAME": column.name,
                        "KEY_SEQ": 0,
                        "PK_NAME": f"{PK_NAME_PREFIX}{self.counter.next()}",
                    }
                )
        logger.info("list_primary_keys table=%s -> %d keys", table_name_pattern, len(rows))
        return MetadataResult.from_rows(rows)

    def list_imported_keys(
        self,
        table_name_pattern: str | None = None,
        catalog: str | None = None,
        schema: str | None = None,
    ) -> MetadataResult:
        """Reference fields of every matching object, as foreign keys.

        The referenced object name is looked up in the cache to report
        its canonical spelling; if it is not described (e.g. not visible
        to this user) the name from the field description is used as is.
        """
        rows: list[Row] = []
        for table in self.cache.get_tables():
            if not matches_pattern(table_name_pattern, table.name):
                continue
            for column in table.columns:
                referenced_name = column.referenced_table
                if referenced_name is None or not column.is_reference:
                    continue
                referenced = self.cache.find_table(referenced_name)
                pk_table = referenced.name if referenced else referenced_name
                seq = self.counter.next()
                rows.append(
                    {
                        "PKTABLE_CAT": None,
                        "PKTABLE_SCHEM": None,
                        "PKTABLE_NAME": pk_table,
                        "PKCOLUMN_NAME": column.referenced_column,
                        "FKTABLE_CAT": None,
                        "FKTABLE_SCHEM": None,
                        "FKTABLE_NAME": table.name,
                        "FKCOLUMN_NAME": column.name,
                        "KEY_SEQ": seq,
                        "UPDATE_RULE": 0,
                        "DELETE_RULE": 0,
                        "FK_NAME": f"{FK_NAME_PREFIX}{seq}",
                        "PK_NAME": f"{PK_NAME_PREFIX}{seq}",
                        "DEFERRABILITY": 0,
                    }
                )
        logger.info("list_imported_keys table=%s -> %d keys", table_name_pattern, len(rows))
        return MetadataResult.from_rows(rows)

    def list_index_info(
        self,
        table_name_pattern: str | None = None,
        unique: bool = False,
        approximate: bool = False,
        catalog: str | None = None,
        schema: str | None = None,
    ) -> MetadataResult:
        """A non-unique index on the "Id" field of every matching object.

        CARDINALITY and PAGES are placeholders, not measurements.
        """
        rows: list[Row] = []
        for table in self.cache.get_tables():
            if not matches_pattern(table_name_pattern, table.name):
                continue
            for column in table.columns:
                if column.name.lower() != ID_COLUMN.lower():
                    continue
                seq = self.counter.next()
                rows.append(
                    {
                        "TABLE_CAT": DEFAULT_CATALOG,
                        "TABLE_SCHEM": DEFAULT_SCHEMA,
                        "TABLE_NAME": table.name,
                        "NON_UNIQUE": True,
                        "INDEX_QUALIFIER": None,
                        "INDEX_NAME": f"{INDEX_NAME_PREFIX}{seq}",
                        "TYPE": TABLE_INDEX_OTHER,
                        "ORDINAL_POSITION": seq + 1,
                        "COLUMN_NAME": ID_COLUMN,
                        "ASC_OR_DESC": "A",
                        "CARDINALITY": 1,
                        "PAGES": 1,
                        "FILTER_CONDITION": None,
                    }
                )
        return MetadataResult.from_rows(rows)

    # --- Types ---

    def list_type_info(self) -> MetadataResult:
        """One row per entry of the type catalog.

        The standard columns are followed by a driver-specific TYPE_SUB
        column, always 1.
        """
        rows: list[Row] = []
        for type_info in TYPE_CATALOG:
            rows.append(
                {
                    "TYPE_NAME": type_info.type_name,
                    "DATA_TYPE": int(type_info.sql_type),
                    "PRECISION": type_info.precision,
                    "LITERAL_PREFIX": None,
                    "LITERAL_SUFFIX": None,
                    "CREATE_PARAMS": None,
                    "NULLABLE": COLUMN_NULLABLE,
                    "CASE_SENSITIVE": False,
                    "SEARCHABLE": TYPE_SEARCHABLE,
                    "UNSIGNED_ATTRIBUTE": False,
                    "FIXED_PREC_SCALE": False,
                    "AUTO_INCREMENT": False,
                    "LOCAL_TYPE_NAME": type_info.type_name,
                    "MINIMUM_SCALE": type_info.min_scale,
                    "MAXIMUM_SCALE": type_info.max_scale,
                    "SQL_DATA_TYPE": int(type_info.sql_type),
                    "SQL_DATETIME_SUB": None,
                    "NUM_PREC_RADIX": type_info.radix,
                    "TYPE_SUB": 1,
                }
            )
        return MetadataResult.from_rows(rows)

    # --- Capabilities ---

    def capability(self, name: str) -> Any:
        """Fixed answer for one capability, e.g. "supports_outer_joins"."""
        return capability(name)

    def supports(self, name: str) -> bool:
        return supports(name)

    # --- Views with no Salesforce counterpart ---

    def _not_modelled(self, view: str) -> MetadataResult:
        logger.info("%s requested - not modelled, returning empty result", view)
        return MetadataResult.empty()

    def list_procedures(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_procedures")

    def list_procedure_columns(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_procedure_columns")

    def list_udts(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_udts")

    def list_super_types(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_super_types")

    def list_super_tables(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_super_tables")

    def list_attributes(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_attributes")

    def list_functions(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_functions")

    def list_function_columns(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_function_columns")

    def list_column_privileges(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_column_privileges")

    def list_table_privileges(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_table_privileges")

    def list_version_columns(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_version_columns")

    def list_best_row_identifier(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_best_row_identifier")

    def list_exported_keys(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_exported_keys")

    def list_cross_reference(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_cross_reference")

    def list_pseudo_columns(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_pseudo_columns")

    def list_client_info_properties(self, *args: Any, **kwargs: Any) -> MetadataResult:
        return self._not_modelled("list_client_info_properties")


# Views that always return MetadataResult.empty()
UNSUPPORTED_VIEWS: tuple[str, ...] = (
    "list_procedures",
    "list_procedure_columns",
    "list_udts",
    "list_super_types",
    "list_super_tables",
    "list_attributes",
    "list_functions",
    "list_function_columns",
    "list_column_privileges",
    "list_table_privileges",
    "list_version_columns",
    "list_best_row_identifier",
    "list_exported_keys",
    "list_cross_reference",
    "list_pseudo_columns",
    "list_client_info_properties",
)
