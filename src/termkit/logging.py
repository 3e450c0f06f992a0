"""The shell log — an in-memory audit trail of what the shell did.

Nothing here touches files or the standard ``logging`` machinery.  The
shell keeps a bounded list of records, much like the kernel ring buffer
that ``dmesg`` prints, and the ``log`` built-in reads it back.

What gets recorded:

    - the dispatcher notes every dispatch (DEBUG), every unknown command
      (INFO), and every handler that blew up (ERROR);
    - sessions note refused overlapping lines and history they had to
      throw away (WARNING), and Ctrl+C during a command (INFO);
    - the shell notes sessions opening and closing, resets, and moves of
      the working directory.

Records are ordered oldest first.  When the buffer is full the oldest
record falls off the front.
"""

from collections import deque
from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """How serious a record is; higher is worse."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One line of the shell log.

    Attributes:
        level: How serious the event was.
        message: What happened, in words.
        source: Who reported it (``"dispatcher"``, ``"session:desktop"``).
        user: ``USER`` at the time, if the reporter knew it.

    """

    level: LogLevel
    message: str
    source: str
    user: str = ""

    def __str__(self) -> str:
        """Render as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Bounded buffer of ``LogEntry`` records."""

    def __init__(self, *, max_entries: int | None = None) -> None:
        """Create an empty log.

        Args:
            max_entries: Keep at most this many records (unbounded if None).

        """
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of every record, oldest first."""
        return list(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str, user: str = "") -> None:
        """Record one event."""
        self._entries.append(LogEntry(level=level, message=message, source=source, user=user))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return the records at or above *min_level* from *source*.

        Either criterion may be omitted.
        """
        return [
            entry
            for entry in self._entries
            if (min_level is None or entry.level >= min_level)
            and (source is None or entry.source == source)
        ]

    def clear(self) -> None:
        """Forget every record."""
        self._entries.clear()

    def __len__(self) -> int:
        """Return the number of records held."""
        return len(self._entries)
