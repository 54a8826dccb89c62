"""In-memory ordering of log entries."""

from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Any, Callable, Optional, Sequence

from .models import LogEntry

logger = logging.getLogger(__name__)

SORT_KEYS: dict[str, Callable[[LogEntry], Any]] = {
    "timestamp": lambda e: e.timestamp,
    "priority": lambda e: e.priority,
    "message": lambda e: e.message.lower(),
    "unit": lambda e: e.unit.lower(),
}


def _compare(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def sort_entries(
    entries: Sequence[LogEntry],
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
) -> list[LogEntry]:
    """Sort entries by ``sort_by``, ascending unless ``sort_order`` is "desc".

    Without ``sort_by`` the incoming order is kept. Ties on any key other
    than timestamp are broken by timestamp, and "desc" reverses the whole
    comparison including that tie-break. An unknown key leaves the order
    unchanged.
    """
    if not sort_by:
        logger.debug("No sort requested, keeping journal order")
        return list(entries)

    key = SORT_KEYS.get(sort_by)
    if key is None:
        logger.warning("Unknown sort_by key: %s", sort_by)
        return list(entries)

    descending = sort_order is not None and sort_order.lower() == "desc"
    logger.debug("Sorting by %r, order: %s", sort_by, "DESC" if descending else "ASC")

    def compare(a: LogEntry, b: LogEntry) -> int:
        cmp = _compare(key(a), key(b))
        if cmp == 0 and sort_by != "timestamp":
            cmp = _compare(a.timestamp, b.timestamp)
        return -cmp if descending else cmp

    return sorted(entries, key=cmp_to_key(compare))
