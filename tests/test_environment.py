"""Tests for child process environment construction."""

import os
from unittest.mock import patch

import pytest

from runbook.environment import build_environment, parse_env_assignment


class TestParseEnvAssignment:
    """Tests for parse_env_assignment()."""

    def test_splits_on_first_equals(self):
        assert parse_env_assignment("QUERY=a=b=c") == ("QUERY", "a=b=c")

    def test_empty_value_allowed(self):
        assert parse_env_assignment("EMPTY=") == ("EMPTY", "")

    def test_value_with_spaces(self):
        assert parse_env_assignment("TESTENVVAR=test env var") == ("TESTENVVAR", "test env var")

    def test_missing_equals_raises(self):
        with pytest.raises(ValueError, match="NAME=value"):
            parse_env_assignment("NOVALUE")

    def test_empty_name_raises(self):
        with pytest.raises(ValueError, match="empty name"):
            parse_env_assignment("=value")

    def test_non_string_raises(self):
        with pytest.raises(TypeError):
            parse_env_assignment(("A", "B"))


class TestBuildEnvironment:
    """Tests for build_environment()."""

    def test_inherits_parent_environment_verbatim(self):
        assert build_environment() == dict(os.environ)
        assert build_environment({}) == dict(os.environ)
        assert build_environment([]) == dict(os.environ)

    def test_returns_copy(self):
        base = {"A": "1"}
        env = build_environment({"B": "2"}, base=base)
        assert env == {"A": "1", "B": "2"}
        assert base == {"A": "1"}

    def test_does_not_modify_os_environ(self):
        name = "RUNBOOK_TEST_NOT_IN_PARENT"
        assert name not in os.environ
        env = build_environment({name: "x"})
        assert env[name] == "x"
        assert name not in os.environ

    def test_override_wins_on_conflict(self):
        env = build_environment({"A": "new"}, base={"A": "old", "B": "kept"})
        assert env == {"A": "new", "B": "kept"}

    def test_accepts_name_value_strings(self):
        env = build_environment(
            ["TESTENVVAR=test env var", "ANOTHERVAR=another"],
            base={"PATH": "/bin"},
        )
        assert env == {
            "PATH": "/bin",
            "TESTENVVAR": "test env var",
            "ANOTHERVAR": "another",
        }

    def test_accepts_single_name_value_string(self):
        env = build_environment("ONLY=one", base={})
        assert env == {"ONLY": "one"}

    def test_later_entries_win(self):
        env = build_environment(["A=1", "A=2"], base={})
        assert env == {"A": "2"}

    def test_rejects_non_string_values(self):
        with pytest.raises(TypeError):
            build_environment({"PORT": 8080}, base={})

    def test_rejects_empty_name(self):
        with pytest.raises(ValueError):
            build_environment({"": "x"}, base={})

    def test_windows_names_are_case_insensitive(self):
        with patch("runbook.environment.is_windows", return_value=True):
            env = build_environment({"PATH": "C:\\tools"}, base={"Path": "C:\\Windows", "Other": "1"})
        assert env == {"PATH": "C:\\tools", "Other": "1"}

    def test_unix_names_are_case_sensitive(self):
        with patch("runbook.environment.is_windows", return_value=False):
            env = build_environment({"PATH": "/opt/bin"}, base={"Path": "/bin"})
        assert env == {"Path": "/bin", "PATH": "/opt/bin"}

    @pytest.mark.parametrize("overrides", [
        {"BAD=NAME": "x"},
        {"NUL\0NAME": "x"},
        {"NAME": "nul\0value"},
        ["NAME=nul\0value"],
    ])
    def test_rejects_names_and_values_the_os_cannot_hold(self, overrides):
        with pytest.raises(ValueError, match="Environment variable"):
            build_environment(overrides, base={})
