"""Tests for line parsing and command dispatch."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from termkit.dispatcher import ParsedCommand, parse, tokenize
from termkit.logging import LogLevel
from termkit.registry import CommandRegistry
from termkit.results import EMPTY, CommandResult
from termkit.shell import Shell

if TYPE_CHECKING:
    from termkit.context import ExecutionContext
    from termkit.session import Session


def _session(registry: CommandRegistry) -> tuple[Shell, Session]:
    shell = Shell(registry=registry)
    return shell, shell.open_session()


class TestTokenize:
    """Verify splitting a line into words."""

    def test_whitespace_separates(self) -> None:
        """Runs of spaces and tabs separate tokens."""
        assert tokenize("ls   -a\t/tmp") == ["ls", "-a", "/tmp"]

    def test_double_quotes_group(self) -> None:
        """A quoted span is one token without its quotes."""
        assert tokenize('echo "hello world" !') == ["echo", "hello world", "!"]

    def test_quotes_inside_a_word(self) -> None:
        """Quotes may start in the middle of a word."""
        assert tokenize('write a"b c"d') == ["write", "ab cd"]

    def test_unterminated_quote_runs_to_end(self) -> None:
        """A missing closing quote takes the rest of the line."""
        assert tokenize('echo "a b') == ["echo", "a b"]

    def test_empty_quotes(self) -> None:
        """A pair of quotes alone is an empty token."""
        assert tokenize('echo ""') == ["echo", ""]


class TestParse:
    """Verify building a ParsedCommand."""

    def test_blank_line(self) -> None:
        """Whitespace-only input has nothing to dispatch."""
        assert parse("") is None
        assert parse("   \t ") is None

    def test_name_is_lower_cased(self) -> None:
        """Command names are case-insensitive to the user."""
        parsed = parse("LS -A")
        assert parsed == ParsedCommand(name="ls", args=["-A"])

    def test_line_rebuilds(self) -> None:
        """line joins name and arguments."""
        parsed = parse("cd   /tmp")
        assert parsed is not None
        assert parsed.line == "cd /tmp"


class TestDispatch:
    """Verify routing through the dispatcher."""

    @pytest.mark.asyncio
    async def test_unknown_command(self) -> None:
        """Unknown names produce text, not an exception."""
        _shell, session = _session(CommandRegistry())
        result = await session.process_command("frobnicate")
        assert result == CommandResult.text("frobnicate: command not found")

    @pytest.mark.asyncio
    async def test_handler_receives_arguments(self) -> None:
        """Handlers see the arguments after the name."""
        registry = CommandRegistry()
        seen: list[list[str]] = []

        def record(args: list[str], _ctx: ExecutionContext) -> None:
            seen.append(args)

        registry.register("record", record, "Record arguments")
        _shell, session = _session(registry)
        await session.process_command('RECORD one "two three"')
        assert seen == [["one", "two three"]]

    @pytest.mark.asyncio
    async def test_legacy_return_values(self) -> None:
        """Bare strings become text and None becomes empty."""
        registry = CommandRegistry()
        registry.register("say", lambda _a, _c: "said", "Return a string")
        registry.register("quiet", lambda _a, _c: None, "Return nothing")
        _shell, session = _session(registry)
        assert await session.process_command("say") == CommandResult.text("said")
        assert await session.process_command("quiet") is EMPTY

    @pytest.mark.asyncio
    async def test_async_handler(self) -> None:
        """Coroutine handlers are awaited."""
        registry = CommandRegistry()

        async def later(_args: list[str], _ctx: ExecutionContext) -> CommandResult:
            return CommandResult.styled("<b>done</b>")

        registry.register("later", later, "Async command")
        _shell, session = _session(registry)
        assert await session.process_command("later") == CommandResult.styled("<b>done</b>")

    @pytest.mark.asyncio
    async def test_handler_fault_is_contained(self) -> None:
        """An escaping exception becomes text and an ERROR log entry."""
        registry = CommandRegistry()

        def explode(_args: list[str], _ctx: ExecutionContext) -> str:
            msg = "disk on fire"
            raise RuntimeError(msg)

        registry.register("explode", explode, "Always fails")
        shell, session = _session(registry)
        result = await session.process_command("explode")
        assert result == CommandResult.text("explode: error: disk on fire")
        errors = shell.logger.filter(min_level=LogLevel.ERROR, source="dispatcher")
        assert len(errors) == 1
        assert "RuntimeError" in errors[0].message

    @pytest.mark.asyncio
    async def test_unknown_command_is_logged(self) -> None:
        """Unknown names are noted at INFO."""
        shell, session = _session(CommandRegistry())
        await session.process_command("frobnicate")
        infos = shell.logger.filter(min_level=LogLevel.INFO, source="dispatcher")
        assert [e.message for e in infos] == ["unknown command: frobnicate"]
