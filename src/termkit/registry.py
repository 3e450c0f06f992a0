"""Command registry — the shell's dispatch table.

Maps command names to ``CommandDescriptor`` records.  A descriptor
bundles the handler with its help text, so ``help`` and tab completion
read from the same table the dispatcher routes through.

Registration rules:
    - Names are **case-sensitive** keys, non-empty and free of
      whitespace.  The parser lower-cases what the user types, so
      commands are registered in lower case.
    - **Duplicates are rejected** with ``DuplicateCommandError``.  To
      replace a command, ``unregister()`` it first.  Silently
      overwriting would let one module shadow another's command.
    - Iteration order is registration order.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from termkit.errors import DuplicateCommandError

if TYPE_CHECKING:
    from termkit.context import ExecutionContext
    from termkit.results import CommandResult

# What a handler may hand back: a tagged result, or a legacy str / None.
HandlerReturn: TypeAlias = "CommandResult | str | None"

# A handler takes the argument list and a context; it may be a coroutine.
Handler: TypeAlias = "Callable[[list[str], ExecutionContext], HandlerReturn | Awaitable[HandlerReturn]]"


@dataclass(frozen=True)
class CommandDescriptor:
    """One entry in the dispatch table."""

    name: str
    execute: Handler
    help_text: str
    usage: str = ""


class CommandRegistry:
    """Name → descriptor table with duplicate rejection."""

    def __init__(self) -> None:
        """Create an empty registry."""
        self._commands: dict[str, CommandDescriptor] = {}

    def register(
        self,
        name: str,
        handler: Handler,
        help_text: str,
        *,
        usage: str = "",
    ) -> CommandDescriptor:
        """Add a command.

        Args:
            name: The command name (case-sensitive, no whitespace).
            handler: Sync or async callable ``(args, context) -> result``.
            help_text: One-line description shown by ``help``.
            usage: Optional usage line, e.g. ``"cd [path]"``.

        Raises:
            ValueError: If *name* is empty or contains whitespace.
            DuplicateCommandError: If *name* is already registered.

        """
        if not name or any(ch.isspace() for ch in name):
            msg = f"Invalid command name: {name!r}"
            raise ValueError(msg)
        if name in self._commands:
            msg = f"Command already registered: {name}"
            raise DuplicateCommandError(msg)
        descriptor = CommandDescriptor(name=name, execute=handler, help_text=help_text, usage=usage)
        self._commands[name] = descriptor
        return descriptor

    def command(self, name: str, help_text: str, *, usage: str = "") -> Callable[[Handler], Handler]:
        """Register the decorated function under *name*."""

        def decorator(handler: Handler) -> Handler:
            self.register(name, handler, help_text, usage=usage)
            return handler

        return decorator

    def unregister(self, name: str) -> None:
        """Remove a command.

        Raises:
            KeyError: If *name* is not registered.

        """
        del self._commands[name]

    def get(self, name: str) -> CommandDescriptor | None:
        """Return the descriptor for *name*, or None."""
        return self._commands.get(name)

    @property
    def names(self) -> list[str]:
        """Return all command names in registration order."""
        return list(self._commands)

    def __contains__(self, name: object) -> bool:
        """Return True if *name* is registered."""
        return name in self._commands

    def __iter__(self) -> Iterator[CommandDescriptor]:
        """Iterate over descriptors in registration order."""
        return iter(list(self._commands.values()))

    def __len__(self) -> int:
        """Return the number of registered commands."""
        return len(self._commands)
