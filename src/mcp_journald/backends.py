"""Journal backends: where entries and unit names come from."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

from .commands import build_list_units_command
from .models import LogEntry
from .parser import parse_output
from .process import CommandResult, run_command

logger = logging.getLogger(__name__)

Runner = Callable[..., CommandResult]


class JournalBackend(ABC):
    """Source of journal entries for a JournalEngine.

    ``run`` receives a full journalctl argument vector, as produced by
    the builders in ``commands``, and returns the entries it selects in
    the order journalctl would print them. Both methods return None on
    failure instead of raising.
    """

    @abstractmethod
    def run(self, argv: Sequence[str]) -> Optional[list[LogEntry]]:
        """Execute a journalctl-style query."""
        pass

    @abstractmethod
    def list_units(self) -> Optional[list[str]]:
        """Known service unit names, sorted and unique."""
        pass


class JournalctlBackend(JournalBackend):
    """Runs the real journalctl and systemctl."""

    def __init__(
        self,
        systemctl_path: str = "systemctl",
        timeout: Optional[float] = None,
        runner: Runner = run_command,
    ):
        self.systemctl_path = systemctl_path
        self.timeout = timeout
        self._runner = runner

    def run(self, argv: Sequence[str]) -> Optional[list[LogEntry]]:
        result = self._runner(argv, timeout=self.timeout)
        if not result.success:
            logger.debug("Returning no entries due to command failure")
            return None
        entries = parse_output(result.stdout)
        logger.debug("Parsed %d log entries", len(entries))
        return entries

    def list_units(self) -> Optional[list[str]]:
        command = build_list_units_command(self.systemctl_path)
        result = self._runner(command, timeout=self.timeout)
        if not result.success:
            return None

        units = set()
        for line in result.stdout.splitlines():
            # The unit name is the first word on each line
            words = line.split()
            if words:
                units.add(words[0])
        logger.debug("Found %d unique service units", len(units))
        return sorted(units)
