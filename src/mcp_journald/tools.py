"""MCP tool definitions wrapping the query engine."""

from __future__ import annotations

from typing import Any

from .engine import JournalEngine, JournalError
from .models import QueryFilter, format_text_output
from .timeline import generate_frequency_timeline

# Properties shared by every tool that takes a query filter
FILTER_PROPERTIES = {
    "since": {
        "type": "string",
        "description": "Start time, relative (-15m, -2h, -1d) or absolute",
    },
    "until": {
        "type": "string",
        "description": "End time, relative or absolute",
    },
    "units": {
        "type": "string",
        "description": "Space-separated systemd units (any of them matches)",
    },
    "tags": {
        "type": "string",
        "description": "Space-separated syslog identifiers; prefix with '-' to exclude",
    },
    "query": {
        "type": "string",
        "description": "FIELD=value journal match, or free text to grep for",
    },
    "priority": {
        "type": "string",
        "description": "Most verbose priority to include (0-7 or emerg..debug)",
    },
    "hostname": {
        "type": "string",
        "description": "Exact hostname of the originating machine",
    },
    "line_limit": {
        "type": "integer",
        "description": "Maximum entries to fetch (capped by server config)",
    },
}


def make_tools(engine: JournalEngine) -> dict[str, dict]:
    """Create MCP tool definitions for the query engine.

    Returns:
        Dict mapping tool names to their definitions.
    """

    tools = {}

    # ========== query_logs ==========
    tools["query_logs"] = {
        "name": "query_logs",
        "description": "Query the systemd journal. Newest entries first unless sort_by is given.",
        "inputSchema": {
            "type": "object",
            "properties": {
                **FILTER_PROPERTIES,
                "sort_by": {
                    "type": "string",
                    "enum": ["timestamp", "priority", "message", "unit"],
                    "description": "Field to sort by",
                },
                "sort_order": {
                    "type": "string",
                    "enum": ["asc", "desc"],
                    "description": "Sort direction (default: asc)",
                },
                "format": {
                    "type": "string",
                    "enum": ["json", "text"],
                    "description": "Result format (default: json)",
                },
            },
        },
    }

    # ========== get_entry ==========
    tools["get_entry"] = {
        "name": "get_entry",
        "description": "Fetch one journal entry with all of its fields by cursor.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "cursor": {
                    "type": "string",
                    "description": "Cursor of the entry (from a previous query)",
                },
            },
            "required": ["cursor"],
        },
    }

    # ========== entry_context ==========
    tools["entry_context"] = {
        "name": "entry_context",
        "description": "Entries logged just before and after a given entry, oldest first.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "cursor": {
                    "type": "string",
                    "description": "Cursor of the entry to center on",
                },
                "count": {
                    "type": "integer",
                    "description": "Entries to include on each side (default: 5)",
                },
            },
            "required": ["cursor"],
        },
    }

    # ========== list_units ==========
    tools["list_units"] = {
        "name": "list_units",
        "description": "List known systemd service units.",
        "inputSchema": {
            "type": "object",
            "properties": {},
        },
    }

    # ========== log_timeline ==========
    tools["log_timeline"] = {
        "name": "log_timeline",
        "description": "Count matching journal entries per hour.",
        "inputSchema": {
            "type": "object",
            "properties": dict(FILTER_PROPERTIES),
        },
    }

    return tools


async def execute_tool(engine: JournalEngine, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Execute a journal tool and return the result.

    Args:
        engine: JournalEngine instance
        name: Tool name
        arguments: Tool arguments

    Returns:
        Result dict with success status and data or error
    """
    tz = engine.config.get_tzinfo()

    try:
        if name == "query_logs":
            entries = engine.query(QueryFilter.from_dict(arguments))
            if entries is None:
                return {
                    "success": False,
                    "error": "Failed to retrieve logs",
                    "error_type": "query_failed",
                }
            if arguments.get("format", "json") == "text":
                return {
                    "success": True,
                    "count": len(entries),
                    "text": format_text_output(entries, tz),
                }
            return {
                "success": True,
                "count": len(entries),
                "entries": [entry.to_dict(tz) for entry in entries],
            }

        elif name == "get_entry":
            entry = engine.get_by_cursor(arguments["cursor"])
            if entry is None:
                return {
                    "success": False,
                    "error": f"No entry found for cursor: {arguments['cursor']}",
                    "error_type": "not_found",
                }
            return {
                "success": True,
                "entry": entry.to_dict(tz),
            }

        elif name == "entry_context":
            count = int(arguments.get("count", 5))
            entries = engine.context(arguments["cursor"], count)
            if entries is None:
                return {
                    "success": False,
                    "error": f"No context available for cursor: {arguments['cursor']}",
                    "error_type": "not_found",
                }
            return {
                "success": True,
                "cursor": arguments["cursor"],
                "count": len(entries),
                "entries": [entry.to_dict(tz) for entry in entries],
            }

        elif name == "list_units":
            units = engine.list_units()
            if units is None:
                return {
                    "success": False,
                    "error": "Failed to list service units",
                    "error_type": "units_failed",
                }
            return {
                "success": True,
                "count": len(units),
                "units": units,
            }

        elif name == "log_timeline":
            entries = engine.query(QueryFilter.from_dict(arguments))
            if entries is None:
                return {
                    "success": False,
                    "error": "Failed to retrieve logs",
                    "error_type": "query_failed",
                }
            points = generate_frequency_timeline(entries)
            return {
                "success": True,
                "total": len(entries),
                "timeline": [point.to_dict() for point in points],
            }

        else:
            return {
                "success": False,
                "error": f"Unknown tool: {name}",
            }

    except (KeyError, ValueError, TypeError) as e:
        return {
            "success": False,
            "error": str(e),
            "error_type": "invalid_arguments",
        }

    except JournalError as e:
        return {
            "success": False,
            "error": str(e),
            "error_type": "journal_error",
        }

    except Exception as e:
        return {
            "success": False,
            "error": str(e),
            "error_type": "unexpected_error",
        }
