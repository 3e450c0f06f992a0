"""The shell core — state shared by every front end.

A ``Shell`` owns what all sessions see in common:

    - the **file system**, built from the configured seed tree;
    - the **environment** (user, host, home, working directory);
    - the **command registry** and the **dispatcher** that routes to it;
    - the **log**.

Front ends never talk to the ``Shell`` directly to run commands.  They
open a ``Session`` (``open_session()``), which adds per-front-end state
(history, in-flight gate, interrupt channel) on top of this core.  A
desktop view and a mobile view of the same machine are two sessions on
one shell: they share the tree and the working directory but keep
separate histories.

Design choices:
    - **No globals.**  Everything a command touches is reachable from
      the ``Shell`` through its ``ExecutionContext``.
    - **Reset rebuilds, it does not patch.**  ``reset()`` throws the
      file system away and re-seeds it, and restores the initial
      environment.  Session histories are untouched.
    - **Cross-session writes are not serialized.**  Two sessions may
      mutate the tree between each other's awaits; that is accepted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from termkit.builtins import default_registry
from termkit.config import ShellConfig
from termkit.dispatcher import Dispatcher
from termkit.env import Environment
from termkit.fs import ROOT_PATH, FileSystem
from termkit.logging import Logger, LogLevel
from termkit.session import Frontend, Session

if TYPE_CHECKING:
    from termkit.registry import CommandRegistry
    from termkit.storage import StateStore

_SOURCE = "shell"


class Shell:
    """Shared file system, environment, and command table."""

    def __init__(
        self,
        *,
        config: ShellConfig | None = None,
        registry: CommandRegistry | None = None,
    ) -> None:
        """Create a shell and build its initial file system.

        Args:
            config: Start-up settings (defaults when omitted).
            registry: Command table (the built-in commands when omitted).

        """
        self._config = config if config is not None else ShellConfig()
        self._logger = Logger(max_entries=self._config.log_limit)
        self._registry = registry if registry is not None else default_registry()
        self._dispatcher = Dispatcher(self._registry, logger=self._logger)
        self._env = Environment(initial=self._config.initial_environment())
        self._fs = FileSystem()
        self._sessions: list[Session] = []
        self.reset()

    @property
    def config(self) -> ShellConfig:
        """Return the start-up configuration."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the shell log."""
        return self._logger

    @property
    def registry(self) -> CommandRegistry:
        """Return the command registry."""
        return self._registry

    @property
    def dispatcher(self) -> Dispatcher:
        """Return the dispatcher."""
        return self._dispatcher

    @property
    def env(self) -> Environment:
        """Return the shared environment."""
        return self._env

    @property
    def fs(self) -> FileSystem:
        """Return the shared file system."""
        return self._fs

    @property
    def sessions(self) -> list[Session]:
        """Return the open sessions."""
        return list(self._sessions)

    # -- lifecycle ---------------------------------------------------------

    def reset(self) -> None:
        """Rebuild the file system and restore the initial environment.

        Open sessions are told about the working-directory change.
        """
        old_cwd = self._env.cwd
        fs = FileSystem()
        fs.populate(self._config.tree)
        _make_dirs(fs, self._config.home)
        self._fs = fs
        self._env.reset()
        self._logger.log(LogLevel.INFO, "file system and environment reset", source=_SOURCE)
        if self._sessions and old_cwd != self._env.cwd:
            self.notify_directory_change(self._env.cwd, old_cwd)

    def open_session(
        self,
        *,
        name: str = "main",
        frontend: Frontend | None = None,
        store: StateStore | None = None,
    ) -> Session:
        """Attach a new front end to this shell.

        Args:
            name: Label used in log entries (e.g. ``"desktop"``).
            frontend: Callbacks for output, prompts, and directory changes.
            store: Where the session persists its history.

        """
        session = Session(self, name=name, frontend=frontend, store=store)
        self._sessions.append(session)
        self._logger.log(LogLevel.INFO, f"session opened: {name}", source=_SOURCE)
        return session

    def close_session(self, session: Session) -> None:
        """Detach *session*; unknown sessions are ignored."""
        if session in self._sessions:
            self._sessions.remove(session)
            self._logger.log(LogLevel.INFO, f"session closed: {session.name}", source=_SOURCE)

    def notify_directory_change(self, new_dir: str, old_dir: str) -> None:
        """Tell every open session's front end that ``CWD`` moved."""
        self._logger.log(
            LogLevel.DEBUG, f"cwd: {old_dir} -> {new_dir}", source=_SOURCE, user=self._env.user
        )
        for session in list(self._sessions):
            session.frontend.directory_changed(new_dir, old_dir)

    # -- presentation helpers ----------------------------------------------

    def display_path(self) -> str:
        """Return ``CWD`` with the home directory abbreviated to ``~``."""
        cwd = self._env.cwd
        home = self._env.home
        if home != ROOT_PATH and (cwd == home or cwd.startswith(home + "/")):
            return "~" + cwd[len(home) :]
        return cwd

    def prompt_text(self) -> str:
        """Return a prompt like ``user@termkit:~/projects$ ``."""
        symbol = "#" if self._env.privileged else "$"
        return f"{self._env.user}@{self._env.hostname}:{self.display_path()}{symbol} "

    def title(self) -> str:
        """Return the window title a front end should show."""
        return f"{self._env.user}@{self._env.hostname}:{self.display_path()}"


def _make_dirs(fs: FileSystem, path: str) -> None:
    """Create *path* and any missing parents (like ``mkdir -p``)."""
    current = ""
    for part in path.strip("/").split("/"):
        if not part:
            continue
        current += "/" + part
        if not fs.exists(current):
            fs.create_dir(current)
