"""Entry frequency over time."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from .models import LogEntry


@dataclass
class TimelinePoint:
    """Number of entries in the hour starting at ``start_time``."""
    start_time: datetime
    count: int

    def to_dict(self) -> dict:
        return {"start_time": self.start_time.isoformat(), "count": self.count}


def generate_frequency_timeline(entries: Iterable[LogEntry]) -> list[TimelinePoint]:
    """Count entries per UTC hour, oldest bucket first."""
    counts = Counter(
        entry.timestamp.replace(minute=0, second=0, microsecond=0) for entry in entries
    )
    return [TimelinePoint(start, counts[start]) for start in sorted(counts)]
