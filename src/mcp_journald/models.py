"""Data models for journal entries and query filters."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, fields, replace
from datetime import datetime, timedelta, timezone, tzinfo
from functools import cached_property
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
DEFAULT_LINE_LIMIT = 5000
DEFAULT_PRIORITY = 7
NOT_APPLICABLE = "N/A"

# Journal field names
TIMESTAMP_FIELD = "__REALTIME_TIMESTAMP"
CURSOR_FIELD = "__CURSOR"
MESSAGE_FIELD = "MESSAGE"
PRIORITY_FIELD = "PRIORITY"
UNIT_FIELD = "_SYSTEMD_UNIT"
HOSTNAME_FIELD = "_HOSTNAME"
CONTAINER_FIELD = "CONTAINER_NAME"
IDENTIFIER_FIELD = "SYSLOG_IDENTIFIER"

PRIORITY_NAMES = (
    "Emergency",
    "Alert",
    "Critical",
    "Error",
    "Warning",
    "Notice",
    "Informational",
    "Debug",
)

# Keywords journalctl -p accepts in place of numbers
PRIORITY_KEYWORDS = {
    "emerg": 0,
    "alert": 1,
    "crit": 2,
    "err": 3,
    "warning": 4,
    "notice": 5,
    "info": 6,
    "debug": 7,
}

GMT_OFFSET_PATTERN = re.compile(r"(?:GMT|UTC)([+-])([0-9]{1,2})(?::([0-9]{2}))?", re.IGNORECASE)


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def stringify_value(value: Any) -> str:
    """Render a decoded JSON value the way it appears in the raw field map."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"))


def parse_realtime_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Convert a microseconds-since-epoch string to an aware UTC datetime.

    Returns None when the value is missing or not an integer.
    """
    if value is None:
        return None
    try:
        return EPOCH + timedelta(microseconds=int(value.strip()))
    except (ValueError, OverflowError):
        return None


def format_realtime_timestamp(dt: datetime) -> str:
    """Inverse of parse_realtime_timestamp."""
    return str((dt - EPOCH) // timedelta(microseconds=1))


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Resolve a display timezone name.

    Accepts ``local``, ``utc``, ``GMT+5``, ``GMT-3``, ``GMT+5:30`` and IANA
    names such as ``Europe/Madrid``. None means local time; unknown names
    fall back to local time with a warning.
    """
    if name is None:
        return None
    key = name.strip()
    if not key or key.lower() == "local":
        return None
    if key.lower() in ("utc", "gmt", "z"):
        return timezone.utc

    match = GMT_OFFSET_PATTERN.fullmatch(key)
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
        if offset < timedelta(hours=24):
            return timezone(-offset if sign == "-" else offset)
    else:
        try:
            return ZoneInfo(key)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            pass

    logger.warning("Unknown timezone %r, falling back to local time", name)
    return None


@dataclass(frozen=True)
class LogEntry:
    """A single journal record.

    ``data`` maps every field of the original record to its text form and
    is read-only. All other attributes are derived from it, so they can
    never disagree with the raw record.
    """
    data: Mapping[str, str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> LogEntry:
        """Build an entry from decoded JSON, stringifying every value."""
        return cls({str(k): stringify_value(v) for k, v in data.items()})

    @classmethod
    def from_json(cls, line: str) -> LogEntry:
        """Parse one ``journalctl -o json`` line.

        Raises:
            ValueError: If the line is not a JSON object
        """
        decoded = json.loads(line)
        if not isinstance(decoded, dict):
            raise ValueError(f"Expected a JSON object, got {type(decoded).__name__}")
        return cls.from_data(decoded)

    @cached_property
    def timestamp(self) -> datetime:
        return parse_realtime_timestamp(self.data.get(TIMESTAMP_FIELD)) or EPOCH

    @property
    def message_raw(self) -> str:
        return self.data.get(MESSAGE_FIELD, "")

    @property
    def message(self) -> str:
        """Message text, prefixed with ``[container]: `` for container logs."""
        text = self.message_raw.strip()
        container = self.data.get(CONTAINER_FIELD, "").strip()
        if container:
            return f"[{container}]: {text}"
        return text

    @property
    def raw_priority(self) -> Optional[str]:
        return self.data.get(PRIORITY_FIELD)

    @cached_property
    def priority(self) -> int:
        """Syslog priority, always within 0..7 (7 when missing or invalid)."""
        try:
            value = int((self.raw_priority or "").strip())
        except ValueError:
            return DEFAULT_PRIORITY
        return min(max(value, 0), 7)

    @property
    def internal_unit_name(self) -> Optional[str]:
        """Unit name as recorded by the journal, e.g. ``nginx.service``."""
        value = self.data.get(UNIT_FIELD, "").strip()
        return value or None

    @property
    def unit(self) -> str:
        name = self.internal_unit_name
        if name is None:
            return NOT_APPLICABLE
        return name.removesuffix(".service")

    @property
    def hostname(self) -> str:
        return self.data.get(HOSTNAME_FIELD, "").strip() or NOT_APPLICABLE

    @property
    def syslog_identifier(self) -> Optional[str]:
        return self.data.get(IDENTIFIER_FIELD) or None

    @property
    def cursor(self) -> Optional[str]:
        return self.data.get(CURSOR_FIELD) or None

    @property
    def formatted_priority(self) -> str:
        return PRIORITY_NAMES[self.priority]

    def formatted_timestamp(self, fmt: str = "%b %d %H:%M:%S") -> str:
        """Format the timestamp in UTC."""
        return self.timestamp.strftime(fmt)

    def formatted_timestamp_with_timezone(
        self, tz: Optional[tzinfo] = None, fmt: str = "%m-%d %H:%M:%S"
    ) -> str:
        """Format the timestamp in ``tz`` (local time when None)."""
        return self.timestamp.astimezone(tz).strftime(fmt)

    def __str__(self) -> str:
        ts = self.timestamp
        return (
            f"{ts.strftime('%Y-%m-%d %H:%M:%S')}.{ts.microsecond // 1000:03d} "
            f"[{self.unit}] [Prio: {self.priority}] - {self.message}"
        )

    def to_dict(self, tz: Optional[tzinfo] = None) -> dict:
        """Convert entry to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "display_time": self.formatted_timestamp_with_timezone(tz),
            "message": self.message,
            "priority": self.priority,
            "priority_name": self.formatted_priority,
            "unit": self.unit,
            "hostname": self.hostname,
            "cursor": self.cursor,
            "data": dict(self.data),
        }


def format_text_output(entries: Iterable[LogEntry], tz: Optional[tzinfo] = None) -> str:
    """Render entries as plain text, one line per entry."""
    lines = [
        f"{entry.formatted_timestamp_with_timezone(tz)} [{entry.unit}] "
        f"({entry.formatted_priority}) {entry.message}"
        for entry in entries
    ]
    if not lines:
        return "No log entries found.\n"
    return "\n".join(lines) + "\n"


@dataclass
class QueryFilter:
    """One logical log query, as requested by a caller."""
    since: Optional[str] = None
    until: Optional[str] = None
    units: Optional[str] = None      # Whitespace-separated, OR'd
    tags: Optional[str] = None       # Whitespace-separated, "-tag" excludes
    query: Optional[str] = None      # FIELD=value match or free text
    priority: Optional[str] = None   # Ceiling, number or keyword
    hostname: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    line_limit: Optional[int] = None

    def normalized(self) -> QueryFilter:
        """Copy with blank string fields replaced by None."""
        changes = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, str) and not value.strip():
                changes[f.name] = None
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> QueryFilter:
        """Build a filter from loosely typed request arguments.

        Raises:
            ValueError: If line_limit is not a positive integer
        """
        def text(key: str) -> Optional[str]:
            value = data.get(key)
            return None if value is None else str(value)

        line_limit = data.get("line_limit")
        if line_limit is not None:
            line_limit = int(line_limit)
            if line_limit <= 0:
                raise ValueError(f"line_limit must be positive, got {line_limit}")

        return cls(
            since=text("since"),
            until=text("until"),
            units=text("units"),
            tags=text("tags"),
            query=text("query"),
            priority=text("priority"),
            hostname=text("hostname"),
            sort_by=text("sort_by"),
            sort_order=text("sort_order"),
            line_limit=line_limit,
        )
