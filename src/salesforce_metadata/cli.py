"""Salesforce metadata CLI: quick lookups and the MCP server.

Usage:
    sf-metadata --help             # list all commands
    sf-metadata serve              # start MCP server
    sf-metadata tables [TABLE]     # list tables
    sf-metadata columns [TABLE]    # list columns
    sf-metadata keys [TABLE]       # list primary and imported keys
    sf-metadata types              # list the type mapping
"""

from __future__ import annotations

import asyncio
import logging
import sys

from salesforce_metadata.config import settings

# Commands: name -> description
COMMANDS: dict[str, str] = {
    "tables": "List objects as tables (optional exact TABLE name)",
    "columns": "List fields as columns (optional exact TABLE name)",
    "keys": "List synthetic primary and imported keys (optional TABLE)",
    "types": "List Salesforce field types and their SQL mapping",
}


def _print_help() -> None:
    print("Salesforce metadata CLI: lookups and server\n")
    print("Usage: sf-metadata <command> [TABLE]\n")
    print("Commands:")
    print(f"  {'serve':<20} Start the MCP server (stdio)")
    for name, desc in sorted(COMMANDS.items()):
        print(f"  {name:<20} {desc}")
    print()
    print("Connection comes from SF_* environment variables or .env")
    print("(SF_URL, or SF_SESSION_ID + SF_INSTANCE_URL).")
    print()
    print("Examples:")
    print("  sf-metadata tables")
    print("  sf-metadata columns Account")
    print("  sf-metadata keys Contact")


async def _run(command: str, table: str) -> str:
    from salesforce_metadata.tools import metadata as metadata_tools

    try:
        if command == "tables":
            return await metadata_tools.list_tables(table=table)
        if command == "columns":
            return await metadata_tools.list_columns(table=table)
        if command == "keys":
            pks = await metadata_tools.list_primary_keys(table=table)
            fks = await metadata_tools.list_imported_keys(table=table)
            return f"{pks}\n\n{fks}"
        return await metadata_tools.list_type_info()
    finally:
        metadata_tools.disconnect()


def main() -> None:
    """Entry point for the sf-metadata CLI."""
    args = sys.argv[1:]

    if not args or args[0] in ("--help", "-h"):
        _print_help()
        sys.exit(0)

    command = args[0]

    # Built-in: serve
    if command == "serve":
        from salesforce_metadata.server import main as server_main

        server_main()
        return

    if command not in COMMANDS:
        print(f"Unknown command: {command}\n", file=sys.stderr)
        _print_help()
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    table = args[1] if len(args) > 1 else ""
    print(asyncio.run(_run(command, table)))


if __name__ == "__main__":
    main()
