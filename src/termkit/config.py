"""Shell configuration — who you are, where you live, what the disk holds.

A ``ShellConfig`` is the start-up image of the shell: the identity shown
in the prompt, the home directory, the seed file tree built on every
reset, and a few behavioural knobs.  Defaults are built in; a JSON file
can override any of them::

    {
        "user": "neo",
        "hostname": "nebuchadnezzar",
        "home": "/home/neo",
        "tree": {"home": {"neo": {"notes.txt": "follow the white rabbit"}}}
    }

Loading is strict: an unreadable or malformed file raises
``ConfigError`` at start-up rather than silently falling back.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

from termkit.errors import ConfigError

if TYPE_CHECKING:
    from pathlib import Path


def _default_tree() -> dict[str, Any]:
    return {
        "bin": {},
        "etc": {
            "hostname": "termkit\n",
            "motd": "Curiosity is not a crime.\n",
        },
        "home": {
            "user": {
                "readme.txt": (
                    "Welcome to termkit.\n"
                    "Type 'help' for the list of commands.\n"
                    "Tab completes commands and paths; up/down walk the history.\n"
                ),
                "projects": {},
            },
        },
        "tmp": {},
        "var": {"log": {}},
    }


@dataclass(frozen=True)
class ShellConfig:
    """Start-up settings for a shell core.

    Attributes:
        user: Initial ``USER``.
        hostname: Initial ``HOSTNAME``.
        home: ``HOME`` and the starting working directory.
        privilege_prefixes: Words that run the rest of the line with
            elevated privilege (their second word completes as a command).
        history_key: Store key under which sessions persist history.
        page_size: Lines per page for the ``more`` pager.
        log_limit: Maximum entries kept in the shell log.
        welcome: Lines front ends print before the first prompt.
        tree: Seed file tree (dicts are directories, strings are files).

    """

    user: str = "user"
    hostname: str = "termkit"
    home: str = "/home/user"
    privilege_prefixes: tuple[str, ...] = ("sudo",)
    history_key: str = "termkit-history"
    page_size: int = 20
    log_limit: int = 500
    welcome: tuple[str, ...] = (
        "termkit v0.1.0",
        'Type "help" for available commands.',
        "",
    )
    tree: dict[str, Any] = field(default_factory=_default_tree)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ShellConfig:
        """Build a config from a mapping, ignoring unknown keys.

        Raises:
            ConfigError: If a known key has a value of the wrong type.

        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            if key in ("privilege_prefixes", "welcome"):
                if not isinstance(value, list | tuple):
                    msg = f"'{key}' must be a list of strings"
                    raise ConfigError(msg)
                value = tuple(str(v) for v in value)  # pyright: ignore[reportUnknownVariableType, reportUnknownArgumentType]
            elif key == "tree":
                if not isinstance(value, dict):
                    msg = "'tree' must be an object"
                    raise ConfigError(msg)
            elif key in ("page_size", "log_limit"):
                if not isinstance(value, int) or value <= 0:
                    msg = f"'{key}' must be a positive integer"
                    raise ConfigError(msg)
            elif not isinstance(value, str):
                msg = f"'{key}' must be a string"
                raise ConfigError(msg)
            values[key] = value
        config = cls(**values)
        if not config.home.startswith("/"):
            msg = f"'home' must be an absolute path, got {config.home!r}"
            raise ConfigError(msg)
        return config

    def initial_environment(self) -> dict[str, str]:
        """Return the variable block a fresh environment starts with."""
        return {
            "USER": self.user,
            "HOSTNAME": self.hostname,
            "HOME": self.home,
            "CWD": self.home,
            "SHELL": "/bin/termkit",
        }


def load_config(path: Path | None) -> ShellConfig:
    """Load a config from a JSON file, or return the defaults.

    Args:
        path: JSON file to read.  ``None`` means built-in defaults.

    Raises:
        ConfigError: If the file cannot be read or parsed.

    """
    if path is None:
        return ShellConfig()
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load config: {e}"
        raise ConfigError(msg) from e
    if not isinstance(data, dict):
        msg = "Cannot load config: top level must be an object"
        raise ConfigError(msg)
    return ShellConfig.from_dict(data)  # pyright: ignore[reportUnknownArgumentType]
