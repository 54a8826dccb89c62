"""Run external commands and classify how they ended."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

# How much captured output to include in failure logs
LOG_EXCERPT_CHARS = 100


@dataclass
class CommandResult:
    """Captured stdout and whether the process ended normally."""
    stdout: str
    success: bool
    returncode: Optional[int] = None


def run_command(argv: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
    """Run ``argv`` and capture its standard output.

    A process that exits on its own counts as a success, whatever its
    exit status; journalctl exits 1 when a grep matches nothing. Spawn
    errors, death by signal and timeout expiry are failures. Failures are
    logged, never raised.

    Args:
        argv: Command and arguments
        timeout: Seconds before the process is killed (None waits forever)

    Returns:
        CommandResult with the decoded stdout
    """
    logger.debug("Running command: %s", list(argv))
    try:
        completed = subprocess.run(
            list(argv),
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        excerpt = _decode(e.stdout)[:LOG_EXCERPT_CHARS]
        logger.error("Command timed out after %ss: %s. Stdout: %r", timeout, argv[0], excerpt)
        return CommandResult(stdout="", success=False)
    except OSError as e:
        logger.error("Failed to start %s: %s", argv[0], e)
        return CommandResult(stdout="", success=False)

    stdout = _decode(completed.stdout)
    if completed.returncode < 0:
        logger.error(
            "Command %s killed by signal %d. Stdout: %r",
            argv[0], -completed.returncode, stdout[:LOG_EXCERPT_CHARS],
        )
        return CommandResult(stdout=stdout, success=False, returncode=completed.returncode)

    if completed.returncode != 0:
        logger.warning("Command %s exited with status %d", argv[0], completed.returncode)

    return CommandResult(stdout=stdout, success=True, returncode=completed.returncode)


def _decode(output: Optional[bytes]) -> str:
    if not output:
        return ""
    return output.decode("utf-8", errors="replace")
