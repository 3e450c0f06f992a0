"""Parsing and dispatch — from a raw line to a ``CommandResult``.

``parse()`` tokenizes the line:

    - Tokens are separated by whitespace.
    - A double-quoted span is part of one token; the quotes are removed
      (``echo "a b"`` → ``["a b"]``).  An unterminated quote runs to the
      end of the line.
    - The first token, lower-cased, is the command name.
    - A blank line parses to ``None`` — nothing to dispatch.

``Dispatcher.dispatch()`` looks the name up and runs the handler:

    - Unknown names produce an ordinary text result
      (``"frobnicate: command not found"``), never an exception.
    - Coroutine handlers are awaited; plain handlers are called.
    - Legacy return values (``str``/``None``) are normalised.
    - An exception that escapes a handler is a bug in that handler.  It
      is logged at ERROR and shown as text so the session survives.
      Cancellation is not an error and is never caught.
"""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from termkit.logging import Logger, LogLevel
from termkit.results import CommandResult, as_result

if TYPE_CHECKING:
    from termkit.context import ExecutionContext
    from termkit.registry import CommandRegistry

_TOKEN = re.compile(r'(?:[^\s"]+|"[^"]*"?)+')

_SOURCE = "dispatcher"


@dataclass(frozen=True)
class ParsedCommand:
    """A tokenized command line."""

    name: str
    args: list[str] = field(default_factory=lambda: [])  # noqa: PIE807

    @property
    def line(self) -> str:
        """Rebuild a printable line from the tokens."""
        return " ".join([self.name, *self.args])


def tokenize(raw: str) -> list[str]:
    """Split *raw* into tokens, honouring double quotes."""
    return [token.replace('"', "") for token in _TOKEN.findall(raw)]


def parse(raw: str) -> ParsedCommand | None:
    """Parse a raw input line.

    Returns:
        The parsed command, or None for a blank line.

    """
    tokens = tokenize(raw)
    if not tokens:
        return None
    return ParsedCommand(name=tokens[0].lower(), args=tokens[1:])


def not_found(name: str) -> CommandResult:
    """Return the standard result for an unknown command."""
    return CommandResult.text(f"{name}: command not found")


class Dispatcher:
    """Route parsed commands to registry handlers."""

    def __init__(self, registry: CommandRegistry, *, logger: Logger) -> None:
        """Create a dispatcher over *registry*, logging to *logger*."""
        self._registry = registry
        self._logger = logger

    @property
    def registry(self) -> CommandRegistry:
        """Return the registry this dispatcher routes through."""
        return self._registry

    async def dispatch(self, parsed: ParsedCommand, context: ExecutionContext) -> CommandResult:
        """Run *parsed* and return its normalised result."""
        user = context.env.user
        descriptor = self._registry.get(parsed.name)
        if descriptor is None:
            self._logger.log(
                LogLevel.INFO, f"unknown command: {parsed.name}", source=_SOURCE, user=user
            )
            return not_found(parsed.name)

        self._logger.log(LogLevel.DEBUG, f"dispatch: {parsed.line}", source=_SOURCE, user=user)
        try:
            value = descriptor.execute(list(parsed.args), context)
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:  # noqa: BLE001
            self._logger.log(
                LogLevel.ERROR,
                f"{parsed.name} failed: {type(e).__name__}: {e}",
                source=_SOURCE,
                user=user,
            )
            return CommandResult.text(f"{parsed.name}: error: {e}")
        return as_result(value)
