"""Metadata browsing tools over the active Salesforce connection.

These functions back the MCP tools and the CLI. They return formatted
text rather than raising, so a client always gets a readable answer.

Connection state is module-level: one client, one SchemaCache, one
DatabaseMetadata. reconnect() replaces all three; nothing else clears
the schema cache.

Empty-string arguments mean "all" (the "%" pattern).
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from salesforce_metadata.auth import SalesforceRestClient
from salesforce_metadata.config import ConnectionConfig, parse_connection_url
from salesforce_metadata.projector import DatabaseMetadata
from salesforce_metadata.results import MetadataResult
from salesforce_metadata.schema_cache import MetadataUnavailable, SchemaCache

logger = logging.getLogger(__name__)

# Module-level connection state
_client: SalesforceRestClient | None = None
_metadata: DatabaseMetadata | None = None

# Columns shown per view; the full row layout is available via the projector
DISPLAY_COLUMNS: dict[str, tuple[str, ...]] = {
    "catalogs": ("TABLE_CAT",),
    "schemas": ("TABLE_SCHEM", "TABLE_CATALOG", "IS_DEFAULT"),
    "tables": ("TABLE_NAME", "TABLE_TYPE", "REMARKS"),
    "columns": (
        "ORDINAL_POSITION",
        "TABLE_NAME",
        "COLUMN_NAME",
        "TYPE_NAME",
        "DATA_TYPE",
        "COLUMN_SIZE",
        "IS_NULLABLE",
    ),
    "primary_keys": ("TABLE_NAME", "COLUMN_NAME", "PK_NAME"),
    "imported_keys": ("FKTABLE_NAME", "FKCOLUMN_NAME", "PKTABLE_NAME", "PKCOLUMN_NAME", "FK_NAME"),
    "index_info": ("TABLE_NAME", "INDEX_NAME", "COLUMN_NAME", "NON_UNIQUE"),
    "type_info": (
        "TYPE_NAME",
        "DATA_TYPE",
        "PRECISION",
        "MINIMUM_SCALE",
        "MAXIMUM_SCALE",
        "NUM_PREC_RADIX",
    ),
}


def connect(
    config: ConnectionConfig | None = None,
    client: SalesforceRestClient | None = None,
) -> DatabaseMetadata:
    """Open a new connection, replacing the current one.

    Nothing is fetched yet: the schema is described on the first
    metadata call.

    Args:
        config: Connection settings. Defaults to the env settings.
        client: Pre-built client (tests inject a fake here).

    Raises:
        ValueError: If no config is given and the env settings lack a
            session id or instance URL.
    """
    global _client, _metadata
    new_client = client if client is not None else SalesforceRestClient(config)
    disconnect()
    _client = new_client
    _metadata = DatabaseMetadata(SchemaCache(_client.fetch_tables))
    logger.info("Connected to %s", _client.config.base_url)
    return _metadata


def disconnect() -> None:
    """Close the current connection and drop its schema cache."""
    global _client, _metadata
    if _client is not None:
        _client.close()
    _client = None
    _metadata = None


def get_metadata() -> DatabaseMetadata:
    """Return the active DatabaseMetadata, connecting from settings if needed."""
    if _metadata is None:
        return connect()
    return _metadata


def _pattern(value: str) -> str | None:
    return value or None


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def format_result(title: str, result: MetadataResult, columns: tuple[str, ...]) -> str:
    """Format a metadata result as a pipe-separated text table.

    Args:
        title: Heading, e.g. "Tables".
        result: Rows to show.
        columns: Which row columns to include, in order.

    Returns:
        Text with a header, one line per row, and a row count.
    """
    if not result.rows:
        return f"{title}: no rows."

    lines: list[str] = []
    header = f"{title} ({len(result.rows)} rows)"
    lines.append(header)
    lines.append("-" * len(header))
    lines.append(" | ".join(columns))
    for row in result.rows:
        lines.append(" | ".join(_format_value(row.get(c)) for c in columns))
    return "\n".join(lines)


async def _run_view(
    title: str, view: str, call: Callable[[DatabaseMetadata], MetadataResult]
) -> str:
    """Run one projector call in a worker thread and format its result."""
    try:
        metadata = get_metadata()
    except ValueError as e:
        return f"Configuration error: {e}"
    try:
        result = await asyncio.to_thread(call, metadata)
        return format_result(title, result, DISPLAY_COLUMNS[view])
    except MetadataUnavailable as e:
        cause = e.__cause__
        if isinstance(cause, PermissionError):
            return f"Authentication error: {cause}"
        if isinstance(cause, ConnectionError):
            return f"Connection error: {cause}"
        return f"Metadata unavailable: {e}"
    except Exception as e:
        logger.exception("Error listing %s", view)
        return f"Error listing {view}: {type(e).__name__}: {e}"


async def list_catalogs() -> str:
    """List the catalogs (there is exactly one)."""
    return await _run_view("Catalogs", "catalogs", lambda m: m.list_catalogs())


async def list_schemas() -> str:
    """List the schemas (there is exactly one, and it is the default)."""
    return await _run_view("Schemas", "schemas", lambda m: m.list_schemas())


async def list_tables(table: str = "") -> str:
    """List Salesforce objects as tables.

    Args:
        table: Exact object name (case-insensitive), or empty for all.
    """
    return await _run_view("Tables", "tables", lambda m: m.list_tables(_pattern(table)))


async def list_columns(table: str = "", column: str = "") -> str:
    """List fields as columns, with relational types.

    Args:
        table: Exact object name, or empty for all objects.
        column: Exact field name, or empty for all fields.
    """
    return await _run_view(
        "Columns",
        "columns",
        lambda m: m.list_columns(_pattern(table), _pattern(column)),
    )


async def list_primary_keys(table: str = "") -> str:
    """List the synthetic primary keys (the Id field of each object)."""
    return await _run_view(
        "Primary keys", "primary_keys", lambda m: m.list_primary_keys(_pattern(table))
    )


async def list_imported_keys(table: str = "") -> str:
    """List the synthetic foreign keys (reference fields) of an object."""
    return await _run_view(
        "Imported keys", "imported_keys", lambda m: m.list_imported_keys(_pattern(table))
    )


async def list_index_info(table: str = "") -> str:
    """List the synthetic indexes (one per Id field)."""
    return await _run_view("Indexes", "index_info", lambda m: m.list_index_info(_pattern(table)))


async def list_type_info() -> str:
    """List every Salesforce field type with its relational mapping."""
    return await _run_view("Types", "type_info", lambda m: m.list_type_info())


async def reconnect(url: str = "") -> str:
    """Drop the cached schema and reconnect.

    Args:
        url: Optional ``salesforce://...`` connection URL. Empty reuses
            the env settings.

    Returns:
        Status message.
    """
    try:
        client = SalesforceRestClient(parse_connection_url(url) if url else None)
    except ValueError as e:
        return f"Invalid connection settings: {e}"
    metadata = connect(client=client)
    return (
        f"Reconnected to {client.config.base_url} "
        f"(API v{client.config.api_version}). Schema cache is empty; "
        f"it will be described on the next call.\n"
        f"  Cache state: {metadata.cache.state.value}"
    )
