"""State storage — where sessions keep blobs between runs.

The shell core never decides *where* persisted state lives.  It only
hands opaque string blobs to a ``StateStore``:

    - ``load(key)`` — return the blob saved under *key*, or ``None``.
    - ``save(key, blob)`` — replace the blob saved under *key*.

Two stores ship with the package:

    - ``MemoryStore`` — a dict; used by tests and the web adapter.
    - ``JsonFileStore`` — one ``<key>.json`` file per key in a directory;
      used by the terminal REPL so history survives restarts.

Blob contents are the caller's business.  A store never parses them, so
a corrupted blob is detected (and discarded) by whoever decodes it.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class StateStore(Protocol):
    """Anything that can load and save string blobs by key."""

    def load(self, key: str) -> str | None:
        """Return the blob stored under *key*, or None if absent."""
        ...

    def save(self, key: str, blob: str) -> None:
        """Store *blob* under *key*, replacing any previous value."""
        ...


class MemoryStore:
    """A ``StateStore`` backed by a plain dict."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        """Create a store, optionally pre-populated with blobs."""
        self._blobs: dict[str, str] = dict(initial) if initial else {}

    def load(self, key: str) -> str | None:
        """Return the blob stored under *key*, or None if absent."""
        return self._blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        """Store *blob* under *key*."""
        self._blobs[key] = blob


class JsonFileStore:
    """A ``StateStore`` that keeps each key in its own file.

    Keys are sanitised into file names, so ``"termkit-history"`` is
    stored as ``<directory>/termkit-history.json``.
    """

    def __init__(self, directory: Path) -> None:
        """Create a store rooted at *directory* (created on first save)."""
        self._directory = directory

    def path_for(self, key: str) -> Path:
        """Return the file that backs *key*."""
        return self._directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def load(self, key: str) -> str | None:
        """Read the blob for *key*, or None if the file does not exist.

        Raises:
            OSError: If the file exists but cannot be read.

        """
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text()

    def save(self, key: str, blob: str) -> None:
        """Write the blob for *key*, creating the directory if needed."""
        self._directory.mkdir(parents=True, exist_ok=True)
        self.path_for(key).write_text(blob)
