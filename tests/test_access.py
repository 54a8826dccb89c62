"""Tests for the unit allow-list."""

import pytest

from mcp_journald.access import filter_allowed, is_unit_allowed

from conftest import make_entry


class TestIsUnitAllowed:
    """Tests for is_unit_allowed matching rules."""

    def test_short_name(self):
        assert is_unit_allowed(make_entry(unit="nginx.service"), ["nginx"])
        assert not is_unit_allowed(make_entry(unit="sshd.service"), ["nginx"])

    def test_full_name(self):
        assert is_unit_allowed(make_entry(unit="nginx.service"), ["nginx.service"])

    def test_substring_either_way(self):
        assert is_unit_allowed(make_entry(unit="nginx-proxy.service"), ["nginx"])
        assert is_unit_allowed(make_entry(unit="ssh.service"), ["openssh"])

    def test_case_insensitive(self):
        assert is_unit_allowed(make_entry(unit="NGINX.service"), ["nginx"])

    def test_no_unit_rejected(self):
        assert not is_unit_allowed(make_entry(unit=None), ["nginx"])
        assert not is_unit_allowed(make_entry(unit="   "), ["nginx"])

    def test_empty_allowed_names_skipped(self):
        assert not is_unit_allowed(make_entry(unit="sshd.service"), ["", "nginx"])

    def test_empty_list_rejects_everything(self):
        assert not is_unit_allowed(make_entry(unit="nginx.service"), [])


class TestFilterAllowed:
    """Tests for filter_allowed."""

    @pytest.fixture
    def entries(self):
        return [
            make_entry(unit="nginx.service", message="a"),
            make_entry(unit="sshd.service", message="b"),
            make_entry(unit=None, message="c"),
            make_entry(unit="cron.service", message="d"),
        ]

    def test_none_is_open_access(self, entries):
        assert filter_allowed(entries, None) == entries

    def test_keeps_allowed_in_order(self, entries):
        result = filter_allowed(entries, ["cron", "nginx"])
        assert [e.message for e in result] == ["a", "d"]

    def test_accepts_iterables(self, entries):
        assert len(filter_allowed(iter(entries), ["sshd"])) == 1
