"""Tests for command history and its navigation cursor.

The history is an append-only list of entered lines.  Up walks toward
older entries and saturates at the oldest; down walks back toward the
live input line, which it clears on arrival.
"""

import pytest

from termkit.history import CommandHistory, decode_history, encode_history


def _history(*lines: str) -> CommandHistory:
    history = CommandHistory()
    for line in lines:
        history.append(line)
    return history


class TestAppend:
    """Verify what gets recorded."""

    def test_lines_are_recorded_in_order(self) -> None:
        """Entries keep chronological order."""
        history = _history("ls", "pwd")
        assert history.entries == ["ls", "pwd"]

    def test_blank_lines_are_ignored(self) -> None:
        """Whitespace-only input never reaches the history."""
        history = _history("", "   ", "\t")
        assert len(history) == 0

    def test_append_strips_whitespace(self) -> None:
        """Surrounding whitespace is not stored."""
        history = _history("  ls -a  ")
        assert history.entries == ["ls -a"]

    def test_append_resets_cursor(self) -> None:
        """Entering a line returns to the live input line."""
        history = _history("ls")
        history.older()
        history.append("pwd")
        assert history.cursor is None


class TestNavigation:
    """Verify the older/newer cursor contract."""

    def test_full_walk(self) -> None:
        """ls, pwd: up, up, up, down, down."""
        history = _history("ls", "pwd")
        assert history.older() == "pwd"
        assert history.older() == "ls"
        assert history.older() == "ls"
        assert history.newer() == "pwd"
        assert history.newer() == ""

    def test_newer_without_selection_is_noop(self) -> None:
        """Down on the live line does nothing."""
        history = _history("ls")
        assert history.newer() is None
        assert history.cursor is None

    def test_older_on_empty_history_is_noop(self) -> None:
        """Up with no history does nothing."""
        history = CommandHistory()
        assert history.older() is None
        assert history.cursor is None

    def test_cursor_positions(self) -> None:
        """The cursor counts back from the newest entry."""
        history = _history("a", "b", "c")
        history.older()
        assert history.cursor == 0
        history.older()
        assert history.cursor == 1
        history.newer()
        history.newer()
        assert history.cursor is None

    def test_reset_cursor_keeps_entries(self) -> None:
        """Dropping the selection leaves the entries alone."""
        history = _history("a", "b")
        history.older()
        history.reset_cursor()
        assert history.cursor is None
        assert history.entries == ["a", "b"]


class TestLoad:
    """Verify reloading and clearing."""

    def test_load_replaces_entries(self) -> None:
        """load() swaps in a new list without reordering it."""
        history = _history("old")
        history.load(["x", "y"])
        assert history.entries == ["x", "y"]
        assert history.older() == "y"

    def test_clear(self) -> None:
        """clear() empties the history."""
        history = _history("a")
        history.clear()
        assert history.entries == []


class TestBlobs:
    """Verify the persistence blob format."""

    def test_encoded_blob_decodes(self) -> None:
        """decode_history reads what encode_history writes."""
        assert decode_history(encode_history(["ls", "cd /"])) == ["ls", "cd /"]

    def test_plain_list_is_accepted(self) -> None:
        """A bare JSON list of strings is valid history."""
        assert decode_history('["a", "b"]') == ["a", "b"]

    @pytest.mark.parametrize("blob", ["not json", '{"entries": 5}', "[1, 2]", '"ls"'])
    def test_corrupt_blob_raises(self, blob: str) -> None:
        """Anything else is rejected with ValueError."""
        with pytest.raises(ValueError, match="history"):
            decode_history(blob)
