"""Salesforce metadata MCP server entry point.

Registers the metadata browsing tools with FastMCP and handles lifecycle.
Run via: uv run sf-metadata serve
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from salesforce_metadata.config import settings
from salesforce_metadata.tools import metadata as metadata_tools

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastMCP) -> AsyncIterator[None]:
    """Server lifecycle: open the connection lazily, close it on shutdown."""
    try:
        metadata_tools.connect()
    except ValueError as e:
        # Tools report the problem; sf_reconnect can supply a URL later
        logger.warning("Not connected: %s", e)
    try:
        yield
    finally:
        metadata_tools.disconnect()


# --- Initialize FastMCP Server ---
mcp = FastMCP(
    "Salesforce Metadata",
    lifespan=lifespan,
    instructions=(
        "You are connected to a Salesforce org presented as a relational database. "
        "Every Salesforce object is a table in catalog 'database', schema 'Salesforce'.\n"
        "\n"
        "WORKFLOW:\n"
        "1. sf_list_tables to find object names\n"
        "2. sf_list_columns(table='X') for exact field names and SQL types\n"
        "3. sf_list_imported_keys(table='X') to see which fields reference other objects\n"
        "\n"
        "NAME MATCHING: table/column arguments match exact names (case-insensitive). "
        "Empty or '%' means all. Partial names and wildcards like 'Acc%' match nothing.\n"
        "\n"
        "Keys and indexes are synthetic: the 'Id' field of each object is reported as "
        "its primary key, and reference fields as foreign keys to the referenced 'Id'.\n"
    ),
)


# --- Register Tools ---
# Each function's docstring becomes the tool description the client sees.


@mcp.tool()
async def sf_list_catalogs() -> str:
    """List the catalogs of the Salesforce database (always exactly one)."""
    return await metadata_tools.list_catalogs()


@mcp.tool()
async def sf_list_schemas() -> str:
    """List the schemas of the Salesforce database (always exactly one)."""
    return await metadata_tools.list_schemas()


@mcp.tool()
async def sf_list_tables(table: str = "") -> str:
    """List Salesforce objects as tables.

    The first call describes the whole org, which can take a while on
    large orgs; later calls are served from memory.

    Args:
        table: Exact object name (case-insensitive), e.g. "Account".
            Leave empty to list every queryable object.

    Returns:
        Table names, types, and labels.
    """
    return await metadata_tools.list_tables(table=table)


@mcp.tool()
async def sf_list_columns(table: str = "", column: str = "") -> str:
    """List object fields as columns with their SQL types.

    Args:
        table: Exact object name, e.g. "Contact". Empty for all objects.
        column: Exact field name, e.g. "AccountId". Empty for all fields.

    Returns:
        One line per field: position, table, name, Salesforce type,
        SQL type code, size, and whether it accepts nulls.
    """
    return await metadata_tools.list_columns(table=table, column=column)


@mcp.tool()
async def sf_list_primary_keys(table: str = "") -> str:
    """List primary keys (the Id field of each object).

    Args:
        table: Exact object name, or empty for all objects.
    """
    return await metadata_tools.list_primary_keys(table=table)


@mcp.tool()
async def sf_list_imported_keys(table: str = "") -> str:
    """List foreign keys: reference fields and the object they point to.

    Args:
        table: Exact object name whose reference fields to list,
            or empty for all objects.
    """
    return await metadata_tools.list_imported_keys(table=table)


@mcp.tool()
async def sf_list_index_info(table: str = "") -> str:
    """List indexes (one non-unique index on each object's Id field).

    Args:
        table: Exact object name, or empty for all objects.
    """
    return await metadata_tools.list_index_info(table=table)


@mcp.tool()
async def sf_list_type_info() -> str:
    """List Salesforce field types and the SQL types they map to."""
    return await metadata_tools.list_type_info()


@mcp.tool()
async def sf_reconnect(url: str = "") -> str:
    """Reconnect and drop the cached schema.

    Use after objects or fields were changed in Salesforce setup, or to
    switch orgs.

    Args:
        url: Optional connection URL,
            e.g. "salesforce://sessionId=...;instanceUrl=https://x.my.salesforce.com".
            Empty reuses the configured connection.
    """
    return await metadata_tools.reconnect(url=url)


def main() -> None:
    """Entry point for the MCP server."""
    logger.info("Starting Salesforce Metadata MCP Server")
    logger.info("Salesforce URL: %s", settings.sf_instance_url or "(from SF_URL or unset)")
    logger.info("API version: %s", settings.sf_api_version)
    mcp.run()


if __name__ == "__main__":
    main()
