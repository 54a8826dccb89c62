"""Tests for relative time offset parsing."""

from datetime import datetime, timedelta, timezone

import pytest

from mcp_journald.timeparse import parse_offset

BASE = datetime(2023, 10, 26, 12, 0, 0, tzinfo=timezone.utc)


class TestNegativeOffsets:
    """Offsets into the past."""

    def test_minutes(self):
        assert parse_offset("-30m", BASE) == BASE - timedelta(minutes=30)

    def test_hours(self):
        assert parse_offset("-2h", BASE) == BASE - timedelta(hours=2)

    def test_days(self):
        assert parse_offset("-3d", BASE) == BASE - timedelta(days=3)

    def test_months_are_thirty_days(self):
        assert parse_offset("-1M", BASE) == BASE - timedelta(days=30)
        assert parse_offset("-2M", BASE) == BASE - timedelta(days=60)

    def test_years_are_365_days(self):
        assert parse_offset("-1y", BASE) == BASE - timedelta(days=365)


class TestPositiveOffsets:
    """Offsets into the future, with explicit or implicit sign."""

    def test_explicit_plus(self):
        assert parse_offset("+15m", BASE) == BASE + timedelta(minutes=15)
        assert parse_offset("+7d", BASE) == BASE + timedelta(days=7)

    def test_implicit_sign(self):
        assert parse_offset("10m", BASE) == BASE + timedelta(minutes=10)
        assert parse_offset("1d", BASE) == BASE + timedelta(days=1)

    def test_zero_returns_reference(self):
        for expr in ("-0m", "+0d", "0h", "0M", "0y"):
            assert parse_offset(expr, BASE) == BASE

    def test_relative_to_other_reference(self):
        other = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert parse_offset("-1h", other) == other - timedelta(hours=1)


class TestInvalidOffsets:
    """Unparseable expressions return None rather than raising."""

    @pytest.mark.parametrize("expr", ["-1w", "-1s"])
    def test_unsupported_units(self, expr):
        assert parse_offset(expr, BASE) is None

    @pytest.mark.parametrize("expr", ["-1H", "-1D"])
    def test_unit_case_matters(self, expr):
        assert parse_offset(expr, BASE) is None

    @pytest.mark.parametrize(
        "expr",
        ["invalid-string", "-m", "h", "10", "-", "1.5h", "  -1h  ", "", "-1h\n"],
    )
    def test_malformed(self, expr):
        assert parse_offset(expr, BASE) is None

    def test_out_of_range(self):
        assert parse_offset("-99999999y", BASE) is None
        assert parse_offset("+99999999999999999999m", BASE) is None
