"""Tests for the shell environment."""

import pytest

from termkit.config import ShellConfig
from termkit.env import Environment


def _env() -> Environment:
    return Environment(initial=ShellConfig().initial_environment())


class TestVariables:
    """Verify plain variable storage."""

    def test_empty_environment(self) -> None:
        """A bare environment has no variables."""
        env = Environment()
        assert len(env) == 0
        assert env.get("USER") is None

    def test_get_default(self) -> None:
        """get() falls back to the given default."""
        assert Environment().get("X", "fallback") == "fallback"

    def test_set_and_delete(self) -> None:
        """Variables can be created, overwritten, and removed."""
        env = Environment()
        env.set("A", "1")
        env.set("A", "2")
        assert env.get("A") == "2"
        env.delete("A")
        assert env.get("A") is None

    def test_delete_missing(self) -> None:
        """Deleting an unknown key raises KeyError."""
        with pytest.raises(KeyError):
            Environment().delete("MISSING")

    def test_initial_is_copied(self) -> None:
        """Mutating the source dict does not affect the environment."""
        source = {"A": "1"}
        env = Environment(initial=source)
        source["A"] = "changed"
        assert env.get("A") == "1"

    def test_copy_is_independent(self) -> None:
        """Changes to a copy stay in the copy."""
        env = _env()
        clone = env.copy()
        clone.set("EXTRA", "yes")
        assert env.get("EXTRA") is None


class TestTypedAccessors:
    """Verify the variables the shell core relies on."""

    def test_identity(self) -> None:
        """USER, HOSTNAME, and HOME come from the initial block."""
        env = _env()
        assert env.user == "user"
        assert env.hostname == "termkit"
        assert env.home == "/home/user"

    def test_cwd_starts_at_home(self) -> None:
        """The working directory starts at HOME and there is no OLDPWD."""
        env = _env()
        assert env.cwd == "/home/user"
        assert env.oldpwd is None

    def test_move_to_records_oldpwd(self) -> None:
        """Moving keeps the previous directory in OLDPWD."""
        env = _env()
        assert env.move_to("/tmp") == "/home/user"
        assert env.cwd == "/tmp"
        assert env.oldpwd == "/home/user"

    def test_privilege(self) -> None:
        """The privilege flag is separate from the variables."""
        env = _env()
        assert not env.privileged
        env.privileged = True
        assert env.privileged
        assert "PRIVILEGED" not in dict(env.items())

    def test_root_user_is_privileged(self) -> None:
        """USER=root always counts as privileged."""
        env = Environment(initial={"USER": "root"})
        assert env.privileged


class TestReset:
    """Verify restoring the initial block."""

    def test_reset_drops_changes(self) -> None:
        """Exports, moves, and privilege are all undone."""
        env = _env()
        env.set("EDITOR", "vi")
        env.move_to("/tmp")
        env.privileged = True
        env.reset()
        assert env.get("EDITOR") is None
        assert env.cwd == "/home/user"
        assert env.oldpwd is None
        assert not env.privileged
