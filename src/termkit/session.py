"""Sessions — one front end's view of a shell.

A ``Session`` is what a front end (terminal window, phone overlay,
browser tab) drives.  It wraps the shared ``Shell`` with state that
belongs to that one front end:

    - **History** — entered lines, arrow-key navigation, persistence
      through an optional ``StateStore``.
    - **In-flight gate** — at most one command runs at a time.
    - **Interrupt channel** — Ctrl+C flag and the ``wait_key`` slot.
    - **Completion state** — so a candidate list is shown only once.

The entry point is ``process_command(raw)``:

    1. The completion marker and the history cursor are reset, so the
       next prompt starts fresh.  This includes blank lines.
    2. Blank line → nothing recorded, nothing dispatched, no output.
    3. Otherwise the line is added to history and dispatched with a
       fresh ``ExecutionContext``.
    4. The final result goes to the front end's output sink — unless
       the command was interrupted, in which case it is discarded.
    5. Exactly one prompt is requested, however the command ended.

Overlapping calls are **rejected**: a ``process_command`` issued while
another is still running (e.g. suspended in ``wait_key``) returns a
"busy" text result at once.  It is not recorded, not dispatched, and
does not request a prompt — the running command still owes that.

``clear`` is not a command.  Wiping the screen is the front end's job, so
adapters test lines with ``is_clear()`` and hand them to
``clear_screen()``, which records the line and prompts without dispatch.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from termkit.completer import Completer, Completion
from termkit.context import ExecutionContext
from termkit.dispatcher import parse
from termkit.history import CommandHistory, decode_history, encode_history
from termkit.interrupt import InterruptChannel
from termkit.logging import LogLevel
from termkit.results import EMPTY, CommandResult

if TYPE_CHECKING:
    from termkit.shell import Shell
    from termkit.storage import StateStore


CLEAR_COMMAND = "clear"


def is_clear(raw: str) -> bool:
    """Return True if *raw* is a bare ``clear`` (any case)."""
    parsed = parse(raw)
    return parsed is not None and parsed.name == CLEAR_COMMAND and not parsed.args


def _ignore_output(_result: CommandResult) -> None:
    pass


def _ignore_prompt(_prompt: str) -> None:
    pass


def _ignore_directory_change(_new_dir: str, _old_dir: str) -> None:
    pass


@dataclass(frozen=True)
class Frontend:
    """Callbacks a front end gives its session.

    Attributes:
        output: Receives every result to render (0..N per command).
        prompt: Called once per command with the fresh prompt text.
        directory_changed: Called with ``(new_dir, old_dir)`` on ``cd``.

    """

    output: Callable[[CommandResult], None] = _ignore_output
    prompt: Callable[[str], None] = _ignore_prompt
    directory_changed: Callable[[str, str], None] = _ignore_directory_change


class Session:
    """Per-front-end history, gate, and interrupt channel."""

    def __init__(
        self,
        shell: Shell,
        *,
        name: str = "main",
        frontend: Frontend | None = None,
        store: StateStore | None = None,
    ) -> None:
        """Create a session on *shell* and load its history.

        Use ``Shell.open_session()`` rather than calling this directly,
        so the shell can broadcast directory changes to the session.
        """
        self._shell = shell
        self._name = name
        self._frontend = frontend if frontend is not None else Frontend()
        self._store = store
        self._history = CommandHistory()
        self._interrupts = InterruptChannel()
        self._completer = Completer(self)
        self._busy = False
        self._exit_requested = False
        self.load_history()

    # -- accessors ---------------------------------------------------------

    @property
    def shell(self) -> Shell:
        """Return the shared shell core."""
        return self._shell

    @property
    def name(self) -> str:
        """Return the session label."""
        return self._name

    @property
    def frontend(self) -> Frontend:
        """Return the front-end callbacks."""
        return self._frontend

    @property
    def history(self) -> CommandHistory:
        """Return this session's history."""
        return self._history

    @property
    def interrupts(self) -> InterruptChannel:
        """Return this session's interrupt channel."""
        return self._interrupts

    @property
    def completer(self) -> Completer:
        """Return this session's completer."""
        return self._completer

    @property
    def busy(self) -> bool:
        """Return whether a command is currently running."""
        return self._busy

    @property
    def exit_requested(self) -> bool:
        """Return whether a command asked the front end to close."""
        return self._exit_requested

    def request_exit(self) -> None:
        """Ask the front end to close this session."""
        self._exit_requested = True

    def prompt_text(self) -> str:
        """Return the prompt for the next input line."""
        return self._shell.prompt_text()

    def display_path(self) -> str:
        """Return the working directory with ``~`` abbreviation."""
        return self._shell.display_path()

    # -- command processing ------------------------------------------------

    async def process_command(self, raw: str) -> CommandResult:
        """Parse, record, and run one input line.

        Returns:
            The command's result (EMPTY for blank or interrupted lines).

        """
        parsed = parse(raw)
        if self._busy:
            return self._reject(parsed.name if parsed else "")

        self._busy = True
        self._start_line()
        context: ExecutionContext | None = None
        try:
            if parsed is None:
                return EMPTY

            self._record(raw)
            self._interrupts.clear()
            context = ExecutionContext(self, line=raw, history=tuple(self._history.entries))
            result = await self._shell.dispatcher.dispatch(parsed, context)

            if self._interrupts.interrupted:
                self._log(LogLevel.DEBUG, f"{parsed.name} interrupted; result discarded")
                return EMPTY
            if not result.is_empty:
                self.emit(result)
            return result
        finally:
            if context is not None:
                context.close()
            self._interrupts.clear()
            self._busy = False
            self._frontend.prompt(self.prompt_text())

    def clear_screen(self, raw: str) -> bool:
        """Accept a ``clear`` line that the front end handles itself.

        The line is recorded like any other and one prompt is requested;
        wiping the screen is up to the caller.

        Returns:
            True if the front end should clear, False while a command runs.

        """
        if self._busy:
            return False
        self._start_line()
        self._record(raw)
        self._frontend.prompt(self.prompt_text())
        return True

    def _start_line(self) -> None:
        """Forget per-line navigation state; every prompt starts fresh."""
        self._completer.reset()
        self._history.reset_cursor()

    def _record(self, raw: str) -> None:
        self._history.append(raw)
        self.save_history()

    def _reject(self, name: str) -> CommandResult:
        """Refuse a line that arrived while another command was running."""
        if not name:
            return EMPTY
        self._log(LogLevel.WARNING, f"rejected '{name}': a command is already running")
        result = CommandResult.text(f"{name}: busy: another command is still running")
        self.emit(result)
        return result

    def emit(self, result: CommandResult) -> None:
        """Send *result* to the front end's output sink."""
        self._frontend.output(result)

    def notify_directory_change(self, new_dir: str, old_dir: str) -> None:
        """Broadcast a ``CWD`` change to every session on the shell."""
        self._shell.notify_directory_change(new_dir, old_dir)

    # -- adapter key events ------------------------------------------------

    def complete(self, line: str) -> Completion:
        """Handle a Tab press on *line*."""
        return self._completer.complete(line)

    def history_older(self) -> str | None:
        """Handle an up-arrow press."""
        return self._history.older()

    def history_newer(self) -> str | None:
        """Handle a down-arrow press."""
        return self._history.newer()

    def interrupt(self) -> None:
        """Handle Ctrl+C: ask the running command (if any) to stop."""
        if self._busy:
            self._log(LogLevel.INFO, "interrupt requested")
        self._interrupts.request()
        self._completer.reset()
        self._history.reset_cursor()

    def press_key(self, key: str) -> bool:
        """Deliver a key press to a command waiting in ``wait_key``."""
        return self._interrupts.press_key(key)

    # -- persistence -------------------------------------------------------

    def load_history(self) -> None:
        """Replace the history with what the store holds.

        A missing blob leaves the history as it is.  An unreadable store
        or corrupt blob is logged and replaced by an empty history.
        """
        if self._store is None:
            return
        key = self._shell.config.history_key
        try:
            blob = self._store.load(key)
        except OSError as e:
            self._log(LogLevel.WARNING, f"cannot read history: {e}")
            self._history.clear()
            return
        if blob is None:
            return
        try:
            entries = decode_history(blob)
        except ValueError as e:
            self._log(LogLevel.WARNING, f"discarding corrupt history: {e}")
            self._history.clear()
            return
        self._history.load(entries)

    def save_history(self) -> None:
        """Write the history to the store (if there is one)."""
        if self._store is None:
            return
        try:
            self._store.save(self._shell.config.history_key, encode_history(self._history.entries))
        except OSError as e:
            self._log(LogLevel.WARNING, f"cannot save history: {e}")

    def reset(self) -> None:
        """Reset the shell core and reload history from the store."""
        self._shell.reset()
        self.load_history()

    def close(self) -> None:
        """Detach this session from its shell."""
        self._shell.close_session(self)

    def _log(self, level: LogLevel, message: str) -> None:
        self._shell.logger.log(
            level, message, source=f"session:{self._name}", user=self._shell.env.user
        )
