"""Interactive REPL (Read-Eval-Print Loop) for the terminal.

The REPL is the stdin/stdout front end.  It builds a shell, opens a
session on it, and enters the classic loop:

    1. **Read** — display the prompt and read a line.
    2. **Eval** — pass the line to ``session.process_command()``.
    3. **Print** — the session pushes results through the front-end
       callbacks, which render them with ANSI colours.
    4. **Loop** — repeat until ``exit`` or Ctrl+D.

While a command runs, Ctrl+C is routed to ``session.interrupt()`` (a
cooperative request, not a kill) and a typed line is delivered to any
``wait_key`` as its first character (``Enter`` for an empty line).

``clear`` (and Ctrl+L at the prompt) wipes the terminal here; the session
only records the line and prompts.

The helper functions (``format_welcome``, ``render_result``) are pure
and testable.  The ``run()`` function is the I/O entrypoint.
"""

from __future__ import annotations

import argparse
import asyncio
import re
import readline
import signal
import sys
from pathlib import Path

from termkit.config import load_config
from termkit.interrupt import ENTER
from termkit.results import CommandResult, ResultKind, lolcat_spans
from termkit.session import Frontend, Session, is_clear
from termkit.shell import Shell
from termkit.storage import JsonFileStore

_RESET = "\033[0m"
CLEAR_SCREEN = "\033[2J\033[H"
_TAG = re.compile(r"<[^>]+>")

_DEFAULT_STATE_DIR = Path.home() / ".termkit"


def format_welcome(lines: tuple[str, ...]) -> str:
    """Join the configured welcome lines into one banner string."""
    return "\n".join(lines)


def _ansi(colour: str) -> str:
    """Return the 24-bit ANSI escape for a ``#rrggbb`` colour."""
    red, green, blue = (int(colour[i : i + 2], 16) for i in (1, 3, 5))
    return f"\033[38;2;{red};{green};{blue}m"


def render_result(result: CommandResult) -> str:
    """Render a result for a colour terminal.

    Styled markup is reduced to its text; lolcat text is coloured per
    character.
    """
    match result.kind:
        case ResultKind.EMPTY:
            return ""
        case ResultKind.STYLED:
            return _TAG.sub("", result.payload)
        case ResultKind.LOLCAT:
            return "\n".join(
                "".join(f"{_ansi(colour)}{char}" for char, colour in line) + _RESET
                for line in lolcat_spans(result.payload)
            )
        case _:
            return result.payload


def _print_result(result: CommandResult) -> None:
    text = render_result(result)
    if text:
        print(text)  # noqa: T201


def _key_from_line(line: str) -> str:
    """Map a line typed during ``wait_key`` to a key token."""
    stripped = line.rstrip("\n")
    return stripped[0] if stripped else ENTER


async def _run_line(session: Session, line: str) -> None:
    """Run one line with Ctrl+C and stdin wired to the session."""
    loop = asyncio.get_running_loop()

    def _on_stdin() -> None:
        typed = sys.stdin.readline()
        if not typed:
            session.interrupt()
        elif session.interrupts.waiting:
            session.press_key(_key_from_line(typed))

    loop.add_signal_handler(signal.SIGINT, session.interrupt)
    loop.add_reader(sys.stdin, _on_stdin)
    try:
        await session.process_command(line)
    finally:
        loop.remove_reader(sys.stdin)
        loop.remove_signal_handler(signal.SIGINT)


def _install_completion(session: Session) -> None:
    """Wire Tab completion to the session's completer via readline."""
    completer = session.completer

    def _complete(text: str, state: int) -> str | None:
        line = readline.get_line_buffer()[: readline.get_endidx()]
        return completer.readline_complete(text, state, line)

    readline.set_completer(_complete)
    readline.set_completer_delims(" \t")
    readline.parse_and_bind("tab: complete")
    readline.parse_and_bind(r'"\C-l": clear-screen')
    for entry in session.history.entries:
        readline.add_history(entry)


def run(argv: list[str] | None = None) -> None:
    """Start a shell and run the interactive REPL.

    This is the ``termkit`` console entry point.  It handles:
    - Loading an optional JSON config (``--config``).
    - History persistence under ``--state-dir``.
    - The read-eval-print loop.
    - Ctrl+C at the prompt (discard the line) and Ctrl+D (quit).
    """
    parser = argparse.ArgumentParser(prog="termkit", description="A simulated shell.")
    parser.add_argument("--config", type=Path, default=None, help="JSON config file")
    parser.add_argument(
        "--state-dir", type=Path, default=_DEFAULT_STATE_DIR, help="where history is kept"
    )
    args = parser.parse_args(argv)

    shell = Shell(config=load_config(args.config))
    frontend = Frontend(output=_print_result)
    session = shell.open_session(name="tty", frontend=frontend, store=JsonFileStore(args.state_dir))
    _install_completion(session)

    print(format_welcome(shell.config.welcome))  # noqa: T201

    try:
        while not session.exit_requested:
            try:
                line = input(session.prompt_text())
            except EOFError:
                # Ctrl+D quits
                print()  # noqa: T201
                break
            except KeyboardInterrupt:
                # Ctrl+C at the prompt discards the line
                print("^C")  # noqa: T201
                continue
            if is_clear(line):
                if session.clear_screen(line):
                    print(CLEAR_SCREEN, end="")  # noqa: T201
                continue
            asyncio.run(_run_line(session, line))
    finally:
        session.save_history()
        session.close()
