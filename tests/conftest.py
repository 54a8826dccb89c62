"""Shared pytest fixtures for mcp-journald tests."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from mcp_journald.backends import JournalctlBackend
from mcp_journald.config import EngineConfig
from mcp_journald.engine import JournalEngine
from mcp_journald.models import LogEntry, format_realtime_timestamp
from mcp_journald.process import CommandResult

BASE_TIME = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_data(
    timestamp=None,
    message="test message",
    priority="6",
    unit="test.service",
    hostname="host-a",
    cursor=None,
    **extra,
):
    """Build a raw journal record; None leaves a field out."""
    data = {}
    if timestamp is not None:
        data["__REALTIME_TIMESTAMP"] = format_realtime_timestamp(timestamp)
    if message is not None:
        data["MESSAGE"] = message
    if priority is not None:
        data["PRIORITY"] = priority
    if unit is not None:
        data["_SYSTEMD_UNIT"] = unit
    if hostname is not None:
        data["_HOSTNAME"] = hostname
    if cursor is not None:
        data["__CURSOR"] = cursor
    data.update(extra)
    return data


def make_entry(**kwargs):
    """Build a LogEntry from make_data keyword arguments."""
    kwargs.setdefault("timestamp", BASE_TIME)
    return LogEntry.from_data(make_data(**kwargs))


class ScriptedJournal:
    """Stands in for journalctl/systemctl over a fixed, chronological timeline.

    Understands the flags the engine emits for cursor and context
    lookups: --cursor, --after-cursor, -r and -n. Records every argv.
    """

    def __init__(self, records, units=None, fail=False):
        self.records = list(records)
        self.units = units or []
        self.fail = fail
        self.calls = []

    def __call__(self, argv, timeout=None):
        self.calls.append(list(argv))
        if self.fail:
            return CommandResult(stdout="", success=False)

        if argv[0] == "systemctl":
            lines = [f"{u} loaded active running {u} daemon" for u in self.units]
            return CommandResult(stdout="\n".join(lines) + "\n", success=True, returncode=0)

        args = list(argv)
        limit = int(args[args.index("-n") + 1]) if "-n" in args else len(self.records)
        reverse = "-r" in args
        cursors = [r.get("__CURSOR") for r in self.records]

        if "--cursor" in args or "--after-cursor" in args:
            flag = "--cursor" if "--cursor" in args else "--after-cursor"
            cursor = args[args.index(flag) + 1]
            if cursor not in cursors:
                return CommandResult(stdout="", success=True, returncode=1)
            position = cursors.index(cursor)
            if flag == "--after-cursor":
                selected = self.records[position + 1:]
            elif reverse:
                selected = list(reversed(self.records[:position + 1]))
            else:
                selected = self.records[position:]
        else:
            selected = list(reversed(self.records)) if reverse else list(self.records)

        stdout = "".join(json.dumps(r) + "\n" for r in selected[:limit])
        return CommandResult(stdout=stdout, success=True, returncode=0)


def timeline_records(count=20):
    """``count`` records one minute apart, cursors c00, c01, ..."""
    units = ["nginx.service", "sshd.service", "cron.service", "docker.service"]
    return [
        make_data(
            timestamp=BASE_TIME + timedelta(minutes=i),
            message=f"event {i:02d}",
            priority=str(i % 8),
            unit=units[i % len(units)],
            cursor=f"c{i:02d}",
        )
        for i in range(count)
    ]


@pytest.fixture
def config():
    """Create a test configuration."""
    return EngineConfig()


@pytest.fixture
def journal():
    """Scripted journal with a 20-entry timeline."""
    return ScriptedJournal(
        timeline_records(),
        units=["cron.service", "nginx.service", "sshd.service"],
    )


@pytest.fixture
def engine(config, journal):
    """Engine backed by the scripted journal."""
    return JournalEngine(config, backend=JournalctlBackend(runner=journal))


@pytest.fixture
def engine_factory(journal):
    """Factory fixture for engines with custom configuration.

    Usage:
        def test_example(engine_factory):
            engine = engine_factory(EngineConfig(allowed_units=["nginx"]))
    """
    def _create(config, runner=None):
        return JournalEngine(config, backend=JournalctlBackend(runner=runner or journal))

    return _create
