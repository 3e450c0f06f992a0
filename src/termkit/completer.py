"""Context-aware tab completer for the termkit shell.

The completer separates **what to complete** (pure logic, fully
testable) from **how to show it** (the front end).

Completion works on the last token of the line:

    - **Command mode** — the token is the first word, or the second
      word after a privilege prefix such as ``sudo``.  Candidates are
      registered command names starting with the token.
    - **Path mode** — anything else.  The token is split at its last
      ``/``: the left part names a directory (resolved against ``CWD``
      and ``~`` if needed), the right part is a name prefix.
      Candidates keep the left part as typed and end in ``/`` when
      they are directories.

``complete(line)`` applies the result to the line:

    - One candidate → the token is replaced (plus a space in command
      mode).
    - Several → the token grows to their longest common prefix, and the
      list is offered for display — but only once for the same
      unresolved line, so hammering Tab does not repeat it.

The ``complete(text, state)`` style used by readline is available as
``readline_complete``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from termkit.fs import resolve_path

if TYPE_CHECKING:
    from termkit.session import Session


@dataclass(frozen=True)
class Completion:
    """The outcome of one Tab press.

    Attributes:
        line: The input line after completion (unchanged if nothing fit).
        candidates: Every candidate for the token, in listing order.
        show: Whether the front end should display ``candidates`` now.

    """

    line: str
    candidates: tuple[str, ...] = ()
    show: bool = False


def common_prefix(candidates: list[str]) -> str:
    """Return the longest prefix shared by every candidate.

    Start from the first candidate and trim its last character until
    it is a prefix of all the others.
    """
    if not candidates:
        return ""
    prefix = candidates[0]
    for other in candidates[1:]:
        while not other.startswith(prefix):
            prefix = prefix[:-1]
    return prefix


class Completer:
    """Prefix completion over command names and file system entries."""

    def __init__(self, session: Session) -> None:
        """Create a completer for *session*.

        Args:
            session: Supplies the registry, file system, environment,
                     and privilege prefixes.

        """
        self._session = session
        self._shown_for: str | None = None

    def reset(self) -> None:
        """Forget that a candidate list was shown (the line changed)."""
        self._shown_for = None

    def is_command_position(self, line: str) -> bool:
        """Return True if the last token of *line* is a command name."""
        parts = line.split(" ")
        prefixes = self._session.shell.config.privilege_prefixes
        return len(parts) == 1 or (len(parts) == 2 and parts[0] in prefixes)  # noqa: PLR2004

    def candidates(self, line: str) -> list[str]:
        """Return completion candidates for the last token of *line*."""
        token = line.split(" ")[-1]
        if self.is_command_position(line):
            return self._complete_commands(token)
        return self._complete_paths(token)

    def complete(self, line: str) -> Completion:
        """Apply completion to *line* and report what to display."""
        parts = line.split(" ")
        token = parts[-1]
        command_mode = self.is_command_position(line)
        found = self._complete_commands(token) if command_mode else self._complete_paths(token)

        if not found:
            self._shown_for = None
            return Completion(line=line)

        if len(found) == 1:
            self._shown_for = None
            parts[-1] = found[0]
            completed = " ".join(parts)
            if command_mode:
                completed += " "
            return Completion(line=completed, candidates=tuple(found))

        prefix = common_prefix(found)
        if len(prefix) > len(token):
            parts[-1] = prefix
        extended = " ".join(parts)
        show = self._shown_for != extended
        self._shown_for = extended
        return Completion(line=extended, candidates=tuple(found), show=show)

    def readline_complete(self, text: str, state: int, line: str) -> str | None:
        """Readline-style callback — return the *state*-th candidate.

        Readline hands over the word being completed (*text*) and the
        whole buffer (*line*); candidates are trimmed to the part that
        replaces *text*.
        """
        token = line.split(" ")[-1]
        lead = token[: len(token) - len(text)]
        options = [c[len(lead) :] for c in self.candidates(line) if c.startswith(lead)]
        if state < len(options):
            return options[state]
        return None

    # -- private completers ------------------------------------------------

    def _complete_commands(self, token: str) -> list[str]:
        """Complete command names from the registry."""
        return [name for name in self._session.shell.registry.names if name.startswith(token)]

    def _complete_paths(self, token: str) -> list[str]:
        """Complete file system entries for a (partial) path token."""
        env = self._session.shell.env
        if "/" in token:
            last_slash = token.rfind("/")
            lead = token[: last_slash + 1]
            directory = token[:last_slash] or "/"
            prefix = token[last_slash + 1 :]
        else:
            lead = ""
            directory = ""
            prefix = token

        target = resolve_path(directory, env.cwd, home=env.home)
        try:
            entries = self._session.shell.fs.list_dir(target)
        except (FileNotFoundError, NotADirectoryError):
            return []

        return [
            lead + entry.name + ("/" if entry.is_dir else "")
            for entry in entries
            if entry.name.startswith(prefix)
        ]
