"""Execution context — everything a command may touch, for one run.

A fresh ``ExecutionContext`` is built for every dispatched line and
closed when the command finishes.  It is the handler's only window onto
the shell:

    - **State** — the shared environment and file system, the registry
      (for ``help``), and the shell log.
    - **Snapshots** — the history as it was when the line was entered,
      and the raw line itself.
    - **Output** — ``write()`` streams intermediate results to the
      session's front end.  Once an interrupt is requested, writes are
      dropped, so an interrupted command goes quiet immediately.
    - **Directory changes** — ``change_directory()`` validates the
      target, updates ``CWD``/``OLDPWD``, and notifies the front end.
    - **Cooperation** — ``interrupted`` and ``wait_key()`` expose the
      session's interrupt channel.

Using a context after it is closed is a bug and raises ``RuntimeError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from termkit.fs import resolve_path
from termkit.results import CommandResult, as_result

if TYPE_CHECKING:
    from termkit.config import ShellConfig
    from termkit.dispatcher import ParsedCommand
    from termkit.env import Environment
    from termkit.fs import FileSystem
    from termkit.logging import Logger
    from termkit.registry import CommandRegistry
    from termkit.session import Session


class ExecutionContext:
    """Per-invocation capability bundle handed to command handlers."""

    def __init__(self, session: Session, *, line: str, history: tuple[str, ...]) -> None:
        """Create a context for one command run.

        Args:
            session: The session the command runs in.
            line: The raw input line, as entered.
            history: Snapshot of the session history at dispatch time.

        """
        self._session = session
        self._line = line
        self._history = history
        self._closed = False

    # -- state -------------------------------------------------------------

    @property
    def session(self) -> Session:
        """Return the session this command runs in."""
        return self._session

    @property
    def env(self) -> Environment:
        """Return the shared environment."""
        return self._session.shell.env

    @property
    def fs(self) -> FileSystem:
        """Return the shared file system."""
        return self._session.shell.fs

    @property
    def registry(self) -> CommandRegistry:
        """Return the command registry."""
        return self._session.shell.registry

    @property
    def logger(self) -> Logger:
        """Return the shell log."""
        return self._session.shell.logger

    @property
    def config(self) -> ShellConfig:
        """Return the shell configuration."""
        return self._session.shell.config

    @property
    def line(self) -> str:
        """Return the raw line that started this command."""
        return self._line

    @property
    def history(self) -> tuple[str, ...]:
        """Return the history snapshot taken when the command started."""
        return self._history

    @property
    def username(self) -> str:
        """Return the current user name."""
        return self.env.user

    @property
    def closed(self) -> bool:
        """Return whether the command has finished."""
        return self._closed

    # -- helpers -----------------------------------------------------------

    def resolve(self, path: str) -> str:
        """Resolve *path* against the working directory and ``~``."""
        return resolve_path(path, self.env.cwd, home=self.env.home)

    def display_path(self) -> str:
        """Return the working directory with ``~`` abbreviation."""
        return self._session.shell.display_path()

    def prompt_text(self) -> str:
        """Return the prompt a front end would show right now."""
        return self._session.shell.prompt_text()

    # -- output ------------------------------------------------------------

    def write(self, value: CommandResult | str) -> None:
        """Stream *value* to the front end.

        Empty results are skipped.  After an interrupt, writes are dropped.

        Raises:
            RuntimeError: If the context is closed.

        """
        self._check_open()
        result = as_result(value)
        if result.is_empty or self.interrupted:
            return
        self._session.emit(result)

    # -- directory changes -------------------------------------------------

    def change_directory(self, path: str) -> str:
        """Move to *path* and notify the front end.

        Returns:
            The new absolute working directory.

        Raises:
            FileNotFoundError: If the target does not exist.
            NotADirectoryError: If the target is not a directory.

        """
        self._check_open()
        target = self.resolve(path)
        if not self.fs.is_dir(target):
            self.fs.list_dir(target)  # raises the precise error
        old = self.env.move_to(target)
        self._session.notify_directory_change(target, old)
        return target

    # -- cooperation -------------------------------------------------------

    @property
    def interrupted(self) -> bool:
        """Return whether the user has asked this command to stop."""
        return self._session.interrupts.interrupted

    async def wait_key(self) -> str:
        """Wait for one key press (or ``INTERRUPT``).

        Raises:
            RuntimeError: If the context is closed.
            KeyWaitPendingError: If another wait is already pending.

        """
        self._check_open()
        return await self._session.interrupts.wait_key()

    async def invoke(self, parsed: ParsedCommand) -> CommandResult:
        """Run another command inside this one (used by ``sudo``)."""
        self._check_open()
        return await self._session.shell.dispatcher.dispatch(parsed, self)

    # -- lifecycle ---------------------------------------------------------

    def close(self) -> None:
        """Mark the command as finished."""
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            msg = "Execution context used after its command finished"
            raise RuntimeError(msg)
