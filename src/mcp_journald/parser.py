"""Turn journalctl JSON-lines output into LogEntry objects."""

from __future__ import annotations

import logging
from typing import Optional

from .models import TIMESTAMP_FIELD, LogEntry, parse_realtime_timestamp

logger = logging.getLogger(__name__)


def parse_line(line: str) -> Optional[LogEntry]:
    """Parse one output line.

    Returns None for blank lines and for lines that are not a JSON
    object; the latter are logged.
    """
    if not line.strip():
        return None

    try:
        entry = LogEntry.from_json(line)
    except ValueError as e:
        logger.warning("Failed to parse log line %r: %s", line[:100], e)
        return None

    if parse_realtime_timestamp(entry.data.get(TIMESTAMP_FIELD)) is None:
        logger.warning(
            "Invalid or missing timestamp %r, using the epoch",
            entry.data.get(TIMESTAMP_FIELD),
        )
    return entry


def parse_output(output: str) -> list[LogEntry]:
    """Parse every line of captured output, skipping the unusable ones."""
    entries = []
    # Records end at "\n" only; messages may contain raw U+2028 or NEL
    for line in output.split("\n"):
        entry = parse_line(line)
        if entry is not None:
            entries.append(entry)
    return entries
