"""Command history with up/down navigation.

Every non-blank line the user enters is appended to the history.  The
arrow keys then walk it:

    - **older** (up) — from the live input line to the most recent
      entry, then to strictly older entries.  At the oldest entry it
      stays put.
    - **newer** (down) — back toward the live input line.  Leaving the
      most recent entry clears the input; on the live line it does
      nothing.

The position is a *cursor* counted back from the newest entry
(0 = most recent).  ``None`` means "no selection": the user is typing
a fresh line.

Persistence happens elsewhere.  ``encode_history``/``decode_history``
turn the entries into a JSON blob and back so a ``StateStore`` can keep
them; a blob that does not decode raises ``ValueError``.
"""

from __future__ import annotations

import json


class CommandHistory:
    """An append-only list of entered lines plus a navigation cursor."""

    def __init__(self, entries: list[str] | None = None) -> None:
        """Create a history, optionally pre-loaded with *entries*."""
        self._entries: list[str] = [e for e in entries or [] if e.strip()]
        self._cursor: int | None = None

    @property
    def entries(self) -> list[str]:
        """Return all entries, oldest first."""
        return list(self._entries)

    @property
    def cursor(self) -> int | None:
        """Return the cursor (0 = most recent), or None for no selection."""
        return self._cursor

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self._entries)

    def append(self, line: str) -> None:
        """Record *line* and return to the live input line.

        Blank (or whitespace-only) lines are ignored.
        """
        stripped = line.strip()
        if stripped:
            self._entries.append(stripped)
        self._cursor = None

    def older(self) -> str | None:
        """Step toward older entries.

        Returns:
            The selected entry, or None if the history is empty.

        """
        if not self._entries:
            return None
        if self._cursor is None:
            self._cursor = 0
        elif self._cursor < len(self._entries) - 1:
            self._cursor += 1
        return self._entries[-1 - self._cursor]

    def newer(self) -> str | None:
        """Step toward the live input line.

        Returns:
            The selected entry, ``""`` when stepping off the most recent
            entry, or None when there is no selection (no-op).

        """
        if self._cursor is None:
            return None
        if self._cursor == 0:
            self._cursor = None
            return ""
        self._cursor -= 1
        return self._entries[-1 - self._cursor]

    def reset_cursor(self) -> None:
        """Drop the selection without changing the entries."""
        self._cursor = None

    def load(self, entries: list[str]) -> None:
        """Replace the entries (e.g. after reading them from a store)."""
        self._entries = [e for e in entries if e.strip()]
        self._cursor = None

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()
        self._cursor = None


def encode_history(entries: list[str]) -> str:
    """Serialize history entries into a storable blob."""
    return json.dumps({"version": 1, "entries": entries})


def decode_history(blob: str) -> list[str]:
    """Parse a blob produced by ``encode_history``.

    A bare JSON list of strings is accepted too.

    Raises:
        ValueError: If the blob is not valid history.

    """
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        msg = f"history blob is not JSON: {e}"
        raise ValueError(msg) from e

    entries = data.get("entries") if isinstance(data, dict) else data  # pyright: ignore[reportUnknownMemberType]
    if not isinstance(entries, list) or not all(isinstance(e, str) for e in entries):  # pyright: ignore[reportUnknownVariableType]
        msg = "history blob must hold a list of strings"
        raise ValueError(msg)
    return list(entries)  # pyright: ignore[reportUnknownArgumentType]
