"""Synthetic journal backend for demos and tests without a system journal."""

from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from .backends import JournalBackend
from .commands import FIELD_MATCH_PATTERN
from .models import PRIORITY_KEYWORDS, LogEntry, format_realtime_timestamp, utc_now
from .timeparse import parse_offset

logger = logging.getLogger(__name__)

SAMPLE_UNIT_NAMES = [
    "sshd.service", "nginx.service", "systemd-journald.service",
    "cron.service", "myapp.service", "postgresql.service",
    "redis-server.service", "docker.service", None,  # None: entries without a unit
]

SAMPLE_CONTAINER_NAMES = [
    "webapp_prod_1", "api_gateway_alpha", "worker_beta_3", None,  # None: not containerized
]

SAMPLE_HOSTNAMES = ["server-alpha", "server-beta", "server-gamma"]

SAMPLE_MESSAGES = [
    "Accepted publickey for deploy from 10.0.0.12 port 52214",
    "Connection reset by peer while reading response header",
    "Started Daily apt download activities",
    "Worker process exited on signal 9",
    "Reloading configuration after SIGHUP",
    "Checkpoint complete: wrote 412 buffers",
    "Failed password for invalid user admin",
    "Disk usage on /var above 85 percent",
    "Cache miss for session token, fetching from upstream",
    "Container health check passed",
    "Upstream timed out while connecting to backend",
    "Rotating journal files",
    "Background save terminated with success",
    "Out of memory: killed process 4242",
    "Listening on 0.0.0.0 port 22",
]

TRANSPORTS = ["journal", "stdout", "kernel"]

DEFAULT_TARGET_ENTRIES = 200
DEFAULT_WINDOW = timedelta(hours=2)

# Cursors the fake backend issues carry the entry timestamp in microseconds
CURSOR_PREFIX = "fakecursor_"
FAKE_CURSOR_PATTERN = re.compile(CURSOR_PREFIX + r"([0-9]+)")

# Largest gap between neighbouring entries in a cursor scan
MAX_STEP_US = 90 * 1_000_000

# Flags that consume the following argument
VALUE_FLAGS = {
    "-p", "--priority", "-u", "--unit", "-n", "--lines",
    "-t", "--identifier", "-T", "--exclude-identifier",
    "--cursor", "--after-cursor", "-S", "--since", "-U", "--until",
    "-g", "--grep", "-o", "--output",
}


@dataclass
class FakeQuery:
    """The parts of a journalctl argument vector the fake backend honors."""
    line_limit: Optional[int] = None
    reverse: bool = False
    priority: Optional[tuple[int, int]] = None
    units: list[str] = field(default_factory=list)
    include_tags: list[str] = field(default_factory=list)
    exclude_tags: list[str] = field(default_factory=list)
    cursor: Optional[str] = None
    after_cursor: bool = False
    since: Optional[str] = None
    until: Optional[str] = None
    grep: Optional[str] = None
    hostname: Optional[str] = None
    field_matches: dict[str, str] = field(default_factory=dict)


def _priority_level(value: str) -> Optional[int]:
    value = value.strip()
    if value.isdigit():
        level = int(value)
        return level if 0 <= level <= 7 else None
    return PRIORITY_KEYWORDS.get(value.lower())


def parse_priority_arg(value: str) -> Optional[tuple[int, int]]:
    """Parse ``-p`` as journalctl does: ``3``, ``err`` or ``2..5``."""
    if ".." in value:
        low_text, high_text = value.split("..", 1)
        low, high = _priority_level(low_text), _priority_level(high_text)
        if low is None or high is None:
            return None
        return (min(low, high), max(low, high))
    level = _priority_level(value)
    if level is None:
        return None
    return (0, level)


def _service_name(unit: str) -> str:
    return unit if "." in unit else f"{unit}.service"


def parse_journalctl_args(argv: Sequence[str]) -> FakeQuery:
    """Extract the filters from a journalctl argument vector.

    ``argv[0]`` is the executable and is skipped. Unknown flags are ignored.
    """
    q = FakeQuery()
    args = list(argv[1:])
    i = 0
    while i < len(args):
        arg = args[i]
        value = args[i + 1] if i + 1 < len(args) else None

        if arg in VALUE_FLAGS:
            i += 2
            if value is None:
                continue
            if arg in ("-p", "--priority"):
                q.priority = parse_priority_arg(value)
            elif arg in ("-u", "--unit"):
                q.units.append(_service_name(value))
            elif arg in ("-n", "--lines"):
                try:
                    q.line_limit = int(value)
                except ValueError:
                    logger.debug("Ignoring non-numeric line count %r", value)
            elif arg in ("-t", "--identifier"):
                q.include_tags.append(value)
            elif arg in ("-T", "--exclude-identifier"):
                q.exclude_tags.append(value)
            elif arg in ("--cursor", "--after-cursor"):
                q.cursor = value
                q.after_cursor = arg == "--after-cursor"
            elif arg in ("-S", "--since"):
                q.since = value
            elif arg in ("-U", "--until"):
                q.until = value
            elif arg in ("-g", "--grep"):
                q.grep = value
            continue

        if arg in ("-r", "--reverse"):
            q.reverse = True
        elif FIELD_MATCH_PATTERN.match(arg):
            name, match_value = arg.split("=", 1)
            if name == "_HOSTNAME":
                if match_value:
                    q.hostname = match_value
            else:
                q.field_matches[name] = match_value
        i += 1

    return q


def make_fake_cursor(timestamp_us: int) -> str:
    """Cursor for the fake entry at ``timestamp_us`` (microseconds since the epoch)."""
    return f"{CURSOR_PREFIX}{timestamp_us}"


def parse_fake_cursor(cursor: str) -> Optional[int]:
    """Timestamp encoded in a fake cursor, or None if it is not one."""
    match = FAKE_CURSOR_PATTERN.fullmatch(cursor)
    if match is None:
        return None
    return int(match.group(1))


class FakeJournalBackend(JournalBackend):
    """Generates plausible journal entries that honor the query's filters.

    Each entry is a function of its timestamp, the seed and the query's
    generation filters, and its cursor encodes the timestamp. Cursor
    lookups therefore resolve to the same instant every time, and scans
    from a cursor walk strictly away from it.
    """

    def __init__(self, seed: Optional[int] = None, now: Optional[Callable[[], datetime]] = None):
        self._seed = seed
        self._random = random.Random(seed)
        self._now = now or utc_now

    def list_units(self) -> Optional[list[str]]:
        return sorted(u for u in SAMPLE_UNIT_NAMES if u)

    def run(self, argv: Sequence[str]) -> Optional[list[LogEntry]]:
        q = parse_journalctl_args(argv)
        if q.cursor is not None:
            return self._scan_from_cursor(q)
        return self._generate_window(q)

    def _record(self, timestamp_us: int, q: FakeQuery) -> dict[str, str]:
        rng = random.Random(f"{self._seed}:{timestamp_us}")

        hostname = q.hostname or rng.choice(SAMPLE_HOSTNAMES)
        low, high = q.priority or (0, 7)
        priority = rng.randint(low, high)
        unit = rng.choice(q.units) if q.units else rng.choice(SAMPLE_UNIT_NAMES)
        identifier = unit.removesuffix(".service") if unit else "system"
        container = rng.choice(SAMPLE_CONTAINER_NAMES)

        data = {
            "__REALTIME_TIMESTAMP": str(timestamp_us),
            "__MONOTONIC_TIMESTAMP": str(rng.randint(1_000_000, 1_000_000_000)),
            "__CURSOR": make_fake_cursor(timestamp_us),
            "_BOOT_ID": "fakebootid1234567890abcdef12345678",
            "_TRANSPORT": rng.choice(TRANSPORTS),
            "_MACHINE_ID": f"fake_machine_id_for_{hostname}",
            "_HOSTNAME": hostname,
            "PRIORITY": str(priority),
            "SYSLOG_FACILITY": str(rng.randint(0, 23)),
            "SYSLOG_IDENTIFIER": identifier,
            "_PID": str(rng.randint(100, 65535)),
            "_UID": str(rng.randint(0, 1000)),
            "_GID": str(rng.randint(0, 1000)),
            "_COMM": identifier,
            "_EXE": f"/usr/bin/{identifier}",
            "_CMDLINE": f"/usr/bin/{identifier} --fake-option",
            "MESSAGE": rng.choice(SAMPLE_MESSAGES),
        }
        if unit:
            data["_SYSTEMD_UNIT"] = unit
            data["_SYSTEMD_CGROUP"] = f"/system.slice/{unit}"
            data["_SYSTEMD_SLICE"] = "system.slice"
        if container:
            data["CONTAINER_NAME"] = container
            data["CONTAINER_ID_FULL"] = f"fakecontainerid{rng.randint(100000, 999999)}"
            data["CONTAINER_TAG"] = ""
        return data

    @staticmethod
    def _matches(data: dict[str, str], q: FakeQuery) -> bool:
        """Apply the filters that cannot be satisfied by construction."""
        identifier = data["SYSLOG_IDENTIFIER"]
        if q.include_tags and identifier not in q.include_tags:
            return False
        if identifier in q.exclude_tags:
            return False
        if q.grep is not None and q.grep.lower() not in data["MESSAGE"].lower():
            return False
        return all(data.get(name) == value for name, value in q.field_matches.items())

    def _generate_window(self, q: FakeQuery) -> list[LogEntry]:
        rng = self._random
        current_time = self._now()

        end_time = (parse_offset(q.until, current_time) if q.until else None) or current_time
        default_start = end_time - DEFAULT_WINDOW
        start_time = (parse_offset(q.since, current_time) if q.since else None) or default_start

        if start_time > end_time:
            logger.warning(
                "Since time %r is after until time %r. Using until time as both start and end.",
                q.since, q.until,
            )
            start_time = end_time

        target = DEFAULT_TARGET_ENTRIES
        if q.line_limit is not None:
            target = max(0, min(rng.randint(50, 250), q.line_limit))

        start_us = int(format_realtime_timestamp(start_time))
        end_us = int(format_realtime_timestamp(end_time))

        # Bounded so restrictive filters cannot loop forever
        max_attempts = target * 10 + 50
        attempts = 0
        entries: list[LogEntry] = []

        while len(entries) < target and attempts < max_attempts:
            attempts += 1
            data = self._record(rng.randint(start_us, end_us), q)
            if self._matches(data, q):
                entries.append(LogEntry.from_data(data))

        if len(entries) < target:
            logger.warning(
                "Fake data generation: reached max attempts (%d) but only generated %d/%d "
                "entries due to restrictive filters",
                max_attempts, len(entries), target,
            )

        entries.sort(key=lambda e: e.timestamp, reverse=q.reverse)
        logger.debug(
            "Generated %d fake log entries. Time window: %s to %s. Order: %s",
            len(entries), start_time, end_time,
            "reverse chronological" if q.reverse else "chronological",
        )
        return entries

    def _scan_from_cursor(self, q: FakeQuery) -> list[LogEntry]:
        """Entries from a cursor onwards, or backwards with ``-r``.

        ``--cursor`` includes the entry at the cursor, ``--after-cursor``
        starts strictly after it. Scans stop at the start of the epoch and,
        going forwards, at the current time.
        """
        anchor_us = parse_fake_cursor(q.cursor)
        if anchor_us is None:
            logger.debug("Cursor %r does not resolve to a fake entry", q.cursor)
            return []

        limit = DEFAULT_TARGET_ENTRIES if q.line_limit is None else max(0, q.line_limit)
        now_us = int(format_realtime_timestamp(self._now()))
        entries: list[LogEntry] = []

        if not q.after_cursor and limit > 0:
            anchor = self._record(anchor_us, q)
            anchor["__CURSOR"] = q.cursor
            entries.append(LogEntry.from_data(anchor))

        step = -1 if q.reverse else 1
        current = anchor_us
        max_attempts = limit * 10 + 50
        attempts = 0

        while len(entries) < limit and attempts < max_attempts:
            attempts += 1
            current += step * self._random.randint(1, MAX_STEP_US)
            if current < 0 or (step > 0 and current > now_us):
                break
            data = self._record(current, q)
            if self._matches(data, q):
                entries.append(LogEntry.from_data(data))

        logger.debug(
            "Generated %d fake log entries %s cursor %r",
            len(entries), "before" if q.reverse else "after", q.cursor,
        )
        return entries
