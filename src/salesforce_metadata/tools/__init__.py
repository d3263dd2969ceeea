"""Tool functions exposed by the MCP server and CLI."""
