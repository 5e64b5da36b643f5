"""MCP tool registration, one module per tool group."""
