"""Unit allow-list enforcement.

Runs on parsed entries, after journalctl has applied whatever filters the
caller asked for, so a crafted query cannot widen what is returned.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .models import LogEntry


def is_unit_allowed(entry: LogEntry, allowed_units: Sequence[str]) -> bool:
    """Check an entry's unit against the allow-list.

    Matches the raw unit name or the ``.service``-stripped name exactly, or
    either one containing the other, case-insensitively. Entries without a
    unit never match.
    """
    raw = entry.internal_unit_name
    if raw is None:
        return False
    unit = entry.unit
    unit_lower = unit.lower()

    for allowed in allowed_units:
        if not allowed:
            continue
        if allowed == raw or allowed == unit:
            return True
        allowed_lower = allowed.lower()
        if allowed_lower in unit_lower or unit_lower in allowed_lower:
            return True
    return False


def filter_allowed(
    entries: Iterable[LogEntry], allowed_units: Optional[Sequence[str]] = None
) -> list[LogEntry]:
    """Keep only entries whose unit is allowed; None means open access."""
    if allowed_units is None:
        return list(entries)
    return [entry for entry in entries if is_unit_allowed(entry, allowed_units)]
