"""Build journalctl/systemctl argument vectors from query filters."""

from __future__ import annotations

import re
from typing import Optional

from .models import DEFAULT_LINE_LIMIT, QueryFilter

# Queries naming a journal field (``_SYSTEMD_UNIT=foo``) are match
# expressions; anything else is a grep pattern.
FIELD_MATCH_PATTERN = re.compile(r"^_?[A-Z0-9_]+=")


def is_field_match(query: str) -> bool:
    """Check whether a query is a verbatim ``FIELD=value`` match."""
    return FIELD_MATCH_PATTERN.match(query) is not None


def _words(value: Optional[str]) -> list[str]:
    if value is None:
        return []
    return value.split()


def base_command(journalctl: str = "journalctl") -> list[str]:
    """Merged journals, JSON-lines output."""
    return [journalctl, "-m", "-o", "json"]


def build_query_command(query_filter: QueryFilter, journalctl: str = "journalctl") -> list[str]:
    """Translate a QueryFilter into a journalctl invocation.

    ``since``, ``query`` and ``priority`` are forwarded whenever they are
    not None, even if blank; callers normalize blanks beforehand. Units,
    tags, until and hostname are dropped when blank.
    """
    f = query_filter
    line_limit = f.line_limit if f.line_limit is not None else DEFAULT_LINE_LIMIT
    command = base_command(journalctl) + ["-n", str(line_limit)]

    # Without an explicit sort, rely on journalctl for newest-first order
    if not (f.sort_by and f.sort_by.strip()):
        command.append("-r")

    if f.since is not None:
        command += ["-S", f.since]

    if f.until is not None and f.until.strip():
        command += ["--until", f.until]

    for unit in _words(f.units):
        command += ["-u", unit]

    for tag in _words(f.tags):
        if tag.startswith("-"):
            if len(tag) > 1:
                command += ["-T", tag[1:]]
        else:
            command += ["-t", tag]

    if f.query is not None:
        if is_field_match(f.query):
            command.append(f.query)
        else:
            command += ["-g", f.query]

    if f.priority is not None:
        command += ["-p", f.priority]

    if f.hostname is not None and f.hostname.strip():
        command.append(f"_HOSTNAME={f.hostname.strip()}")

    return command


def build_cursor_command(cursor: str, journalctl: str = "journalctl") -> list[str]:
    """Fetch exactly the entry at ``cursor``."""
    return base_command(journalctl) + ["--cursor", cursor, "-n", "1"]


def build_context_before_command(cursor: str, count: int, journalctl: str = "journalctl") -> list[str]:
    """Scan backwards from ``cursor``: the entry itself plus ``count`` predecessors."""
    return base_command(journalctl) + ["--cursor", cursor, "-r", "-n", str(count + 1)]


def build_context_after_command(cursor: str, count: int, journalctl: str = "journalctl") -> list[str]:
    """Scan forwards: ``count`` entries strictly after ``cursor``."""
    return base_command(journalctl) + ["--after-cursor", cursor, "-n", str(count)]


def build_list_units_command(systemctl: str = "systemctl") -> list[str]:
    """List every loaded service unit, one per line, without decoration."""
    return [systemctl, "list-units", "--type=service", "--all", "--no-legend", "--plain"]
