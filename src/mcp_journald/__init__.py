"""MCP Journald - query the systemd journal as a filterable entry stream."""

__version__ = "0.1.0"
