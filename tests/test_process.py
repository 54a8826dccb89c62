"""Tests for external command execution."""

import subprocess
from unittest.mock import patch

from mcp_journald.process import CommandResult, run_command


def completed(returncode, stdout=b""):
    return subprocess.CompletedProcess(args=["journalctl"], returncode=returncode, stdout=stdout)


class TestRunCommand:
    """Tests for run_command outcome classification."""

    def test_success(self):
        with patch("subprocess.run", return_value=completed(0, b'{"MESSAGE": "hi"}\n')) as run:
            result = run_command(["journalctl", "-o", "json"])

        assert result == CommandResult(stdout='{"MESSAGE": "hi"}\n', success=True, returncode=0)
        args, kwargs = run.call_args
        assert args[0] == ["journalctl", "-o", "json"]
        assert kwargs["stderr"] == subprocess.DEVNULL
        assert kwargs["timeout"] is None

    def test_nonzero_exit_is_success(self, caplog):
        """journalctl exits 1 when nothing matches; output is still usable."""
        with patch("subprocess.run", return_value=completed(1, b"partial\n")):
            result = run_command(["journalctl"])

        assert result.success
        assert result.stdout == "partial\n"
        assert result.returncode == 1
        assert "exited with status 1" in caplog.text

    def test_killed_by_signal_is_failure(self, caplog):
        with patch("subprocess.run", return_value=completed(-9, b"half")):
            result = run_command(["journalctl"])

        assert not result.success
        assert result.returncode == -9
        assert "killed by signal 9" in caplog.text

    def test_timeout_is_failure(self, caplog):
        error = subprocess.TimeoutExpired(cmd=["journalctl"], timeout=5, output=b"x" * 500)
        with patch("subprocess.run", side_effect=error):
            result = run_command(["journalctl"], timeout=5)

        assert result == CommandResult(stdout="", success=False)
        assert "timed out" in caplog.text
        assert "x" * 101 not in caplog.text

    def test_spawn_error_is_failure(self, caplog):
        with patch("subprocess.run", side_effect=FileNotFoundError("no such file")):
            result = run_command(["/nonexistent/journalctl"])

        assert result == CommandResult(stdout="", success=False)
        assert "Failed to start" in caplog.text

    def test_timeout_passed_through(self):
        with patch("subprocess.run", return_value=completed(0)) as run:
            run_command(["journalctl"], timeout=2.5)
        assert run.call_args.kwargs["timeout"] == 2.5

    def test_invalid_utf8_replaced(self):
        with patch("subprocess.run", return_value=completed(0, b"caf\xe9\n")):
            result = run_command(["journalctl"])
        assert result.stdout == "caf\ufffd\n"

    def test_empty_output(self):
        with patch("subprocess.run", return_value=completed(0, None)):
            result = run_command(["journalctl"])
        assert result.stdout == ""
        assert result.success
