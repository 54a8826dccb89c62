"""Core query engine - filters, cursors, and context over a journal backend."""

from __future__ import annotations

import logging
from typing import Optional

from .access import filter_allowed, is_unit_allowed
from .backends import JournalBackend, JournalctlBackend
from .commands import (
    build_context_after_command,
    build_context_before_command,
    build_cursor_command,
    build_query_command,
)
from .config import ConfigError, EngineConfig, JournalError
from .fake import FakeJournalBackend
from .models import UNIT_FIELD, LogEntry, QueryFilter
from .sorting import sort_entries

__all__ = ["ConfigError", "JournalEngine", "JournalError", "create_backend"]

logger = logging.getLogger(__name__)


def create_backend(config: EngineConfig) -> JournalBackend:
    """Build the backend selected by ``config.backend``."""
    if config.backend == "fake":
        return FakeJournalBackend(seed=config.fake_seed)
    if config.backend == "journalctl":
        return JournalctlBackend(
            systemctl_path=config.systemctl_path,
            timeout=config.command_timeout,
        )
    raise ConfigError(f"Unknown backend '{config.backend}'")


class JournalEngine:
    """Answers log queries against a journal backend.

    Every public method returns None when the backend fails; failures are
    logged, never raised. The unit allow-list from the config is applied
    to everything returned.
    """

    def __init__(self, config: EngineConfig, backend: Optional[JournalBackend] = None):
        self.config = config
        self.backend = backend if backend is not None else create_backend(config)

    def _allowed(self, entries: list[LogEntry]) -> list[LogEntry]:
        kept = filter_allowed(entries, self.config.allowed_units)
        if len(kept) != len(entries):
            logger.debug("Access filter removed %d entries", len(entries) - len(kept))
        return kept

    # ========== Query Operations ==========

    def query(self, query_filter: QueryFilter) -> Optional[list[LogEntry]]:
        """Run a filtered query.

        Returns:
            Matching entries, newest first unless a sort was requested, or
            None if the backend failed.
        """
        f = query_filter.normalized()
        limit = self.config.line_limit
        if f.line_limit is not None and f.line_limit > 0:
            limit = min(f.line_limit, limit)
        elif f.line_limit is not None:
            logger.warning("Ignoring non-positive line_limit %d, using %d", f.line_limit, limit)
        f.line_limit = limit

        logger.debug("Executing query with filter: %s", f)
        command = build_query_command(f, self.config.journalctl_path)
        logger.debug("Generated journalctl command: %s", command)

        entries = self.backend.run(command)
        if entries is None:
            logger.debug("Returning no log entries due to backend failure")
            return None

        entries = sort_entries(self._allowed(entries), f.sort_by, f.sort_order)
        logger.debug("Returning %d log entries", len(entries))
        return entries

    def get_by_cursor(self, cursor: str) -> Optional[LogEntry]:
        """Fetch the single entry at ``cursor``, if it exists and is allowed."""
        if not cursor or not cursor.strip():
            return None

        entries = self.backend.run(build_cursor_command(cursor, self.config.journalctl_path))
        if not entries:
            logger.debug("No entry found for cursor %r", cursor)
            return None

        allowed = self._allowed(entries[:1])
        return allowed[0] if allowed else None

    def context(self, cursor: str, count: int) -> Optional[list[LogEntry]]:
        """Entries surrounding ``cursor``, in chronological order.

        Returns up to ``count`` entries before the target, the target
        itself, and up to ``count`` entries after it. None if ``count`` is
        not positive, the cursor does not resolve, or the backend fails.
        """
        if count <= 0:
            logger.debug("Context requested with non-positive count %d", count)
            return None

        target = self.get_by_cursor(cursor)
        if target is None:
            return None

        journalctl = self.config.journalctl_path
        # Reverse scan yields the target first, then its predecessors newest-first
        before = self.backend.run(build_context_before_command(cursor, count, journalctl))
        after = self.backend.run(build_context_after_command(cursor, count, journalctl))
        if before is None or after is None:
            logger.debug("Context retrieval failed for cursor %r", cursor)
            return None

        before = list(reversed(before[1:]))
        return self._allowed(before) + [target] + self._allowed(after)

    def list_units(self) -> Optional[list[str]]:
        """Known service units, restricted to the allow-list when one is set."""
        units = self.backend.list_units()
        if units is None:
            return None
        allowed = self.config.allowed_units
        if allowed is None:
            return units
        return [u for u in units if is_unit_allowed(LogEntry({UNIT_FIELD: u}), allowed)]
