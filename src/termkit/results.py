"""Command results — a closed tagged variant.

Handlers never print.  They return a ``CommandResult`` whose ``kind``
tells the front end how to render the ``payload``:

- **TEXT** — plain text, rendered verbatim and escaped.
- **STYLED** — markup the front end may inject as-is.
- **LOLCAT** — plain text the front end colours per character.
- **EMPTY** — nothing to render.

Front ends switch on ``kind``; they never inspect the payload's shape.
Older handlers that return a bare ``str`` (or ``None``) are accepted
and normalised by ``as_result()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

LOLCAT_COLOURS: tuple[str, ...] = (
    "#ff0000",
    "#ff7f00",
    "#ffff00",
    "#00ff00",
    "#0000ff",
    "#8b00ff",
)


class ResultKind(StrEnum):
    """How a result payload should be rendered."""

    TEXT = "text"
    STYLED = "styled"
    LOLCAT = "lolcat"
    EMPTY = "empty"


@dataclass(frozen=True)
class CommandResult:
    """The output of one command invocation."""

    kind: ResultKind
    payload: str = ""

    @classmethod
    def text(cls, payload: str) -> CommandResult:
        """Build a plain-text result."""
        return cls(ResultKind.TEXT, payload)

    @classmethod
    def styled(cls, payload: str) -> CommandResult:
        """Build a result carrying pre-rendered markup."""
        return cls(ResultKind.STYLED, payload)

    @classmethod
    def lolcat(cls, payload: str) -> CommandResult:
        """Build a rainbow-coloured text result."""
        return cls(ResultKind.LOLCAT, payload)

    @classmethod
    def empty(cls) -> CommandResult:
        """Build a result that produces no output."""
        return cls(ResultKind.EMPTY, "")

    @property
    def is_empty(self) -> bool:
        """Return True if there is nothing to render."""
        return self.kind is ResultKind.EMPTY

    def to_dict(self) -> dict[str, str]:
        """Return the wire shape ``{"kind": ..., "payload": ...}``."""
        return {"kind": self.kind.value, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommandResult:
        """Rebuild a result from its wire shape."""
        return cls(ResultKind(data["kind"]), str(data.get("payload", "")))


EMPTY = CommandResult.empty()


def as_result(value: CommandResult | str | None) -> CommandResult:
    """Normalise a handler's return value into a ``CommandResult``.

    ``None`` and ``""`` become EMPTY; any other string becomes TEXT.
    """
    if isinstance(value, CommandResult):
        return value
    if not value:
        return EMPTY
    return CommandResult.text(value)


def lolcat_spans(text: str) -> list[list[tuple[str, str]]]:
    """Split *text* into per-line ``(char, colour)`` spans.

    Colours cycle through ``LOLCAT_COLOURS``, restarting on each line.
    Spaces keep the current colour without advancing the cycle.
    """
    lines: list[list[tuple[str, str]]] = []
    for line in text.split("\n"):
        spans: list[tuple[str, str]] = []
        index = 0
        for char in line:
            spans.append((char, LOLCAT_COLOURS[index % len(LOLCAT_COLOURS)]))
            if char != " ":
                index += 1
        lines.append(spans)
    return lines
