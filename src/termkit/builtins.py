"""Built-in commands.

Every handler has the signature ``(args, context) -> result`` and is
registered in ``default_registry()``.  Handlers never print; they
return a ``CommandResult`` (or a plain string, which means text) and
use ``context.write()`` only to stream output before they finish.

Expected failures stay inside the handler layer: ``_recovers`` turns
file system errors and ``InvalidArgumentsError`` into a text result
such as ``cat: Path not found: /nope``.  Anything else escaping a
handler is a bug and is left to the dispatcher's guard.

Interactive commands (``more``, ``sleep``) cooperate with Ctrl+C by
checking ``context.interrupted`` or the ``INTERRUPT`` key from
``context.wait_key()``, and return quietly when asked to stop.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
from typing import TYPE_CHECKING

from termkit.dispatcher import ParsedCommand
from termkit.errors import InvalidArgumentsError
from termkit.interrupt import INTERRUPT
from termkit.logging import LogLevel
from termkit.registry import CommandRegistry
from termkit.results import EMPTY, CommandResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from termkit.context import ExecutionContext
    from termkit.registry import Handler, HandlerReturn

# Tick length for cooperative waits: how quickly ``sleep`` notices Ctrl+C.
_SLEEP_TICK = 0.05

_MAX_SLEEP_SECONDS = 3600.0

_MOTD = (
    '<span class="tk-motd-title">termkit</span>\n'
    '<span class="tk-motd-body">A simulated shell. Curiosity is not a crime.</span>'
)

# File system faults (the OSError family) and bad arguments.
_RECOVERABLE = (OSError, InvalidArgumentsError)


def _recovers(name: str) -> Callable[[Handler], Handler]:
    """Turn expected handler failures into ``"<name>: <message>"`` text."""

    def decorator(handler: Handler) -> Handler:
        if inspect.iscoroutinefunction(handler):

            @functools.wraps(handler)
            async def async_wrapper(args: list[str], ctx: ExecutionContext) -> HandlerReturn:
                try:
                    return await handler(args, ctx)  # pyright: ignore[reportGeneralTypeIssues]
                except _RECOVERABLE as e:
                    return CommandResult.text(f"{name}: {e}")

            return async_wrapper

        @functools.wraps(handler)
        def wrapper(args: list[str], ctx: ExecutionContext) -> HandlerReturn | Awaitable[HandlerReturn]:
            try:
                return handler(args, ctx)
            except _RECOVERABLE as e:
                return CommandResult.text(f"{name}: {e}")

        return wrapper

    return decorator


def _require(args: list[str], count: int, usage: str) -> None:
    """Raise InvalidArgumentsError unless at least *count* args were given."""
    if len(args) < count:
        msg = f"usage: {usage}"
        raise InvalidArgumentsError(msg)


# -- help & identity ---------------------------------------------------------


def _cmd_help(args: list[str], ctx: ExecutionContext) -> str:
    """List commands, or describe one."""
    if args:
        descriptor = ctx.registry.get(args[0])
        if descriptor is None:
            msg = f"no help for '{args[0]}'"
            raise InvalidArgumentsError(msg)
        usage = descriptor.usage or descriptor.name
        return f"{usage}\n    {descriptor.help_text}"
    width = max((len(name) for name in ctx.registry.names), default=0)
    lines = ["Available commands:"]
    lines.extend(f"  {d.name:<{width}}  {d.help_text}" for d in ctx.registry)
    return "\n".join(lines)


def _cmd_whoami(_args: list[str], ctx: ExecutionContext) -> str:
    """Show the current user."""
    return "root" if ctx.env.privileged else ctx.env.user


def _cmd_hostname(_args: list[str], ctx: ExecutionContext) -> str:
    """Show the host name."""
    return ctx.env.hostname


def _cmd_motd(_args: list[str], _ctx: ExecutionContext) -> CommandResult:
    """Show the styled message of the day."""
    return CommandResult.styled(_MOTD)


def _cmd_lolcat(args: list[str], ctx: ExecutionContext) -> CommandResult:
    """Print text (or a file, with -f) in rainbow colours."""
    _require(args, 1, "lolcat <text...> | lolcat -f <path>")
    if args[0] == "-f":
        _require(args, 2, "lolcat -f <path>")
        return CommandResult.lolcat(ctx.fs.read(ctx.resolve(args[1])).rstrip("\n"))
    return CommandResult.lolcat(" ".join(args))


# -- navigation ---------------------------------------------------------------


def _cmd_pwd(_args: list[str], ctx: ExecutionContext) -> str:
    """Print the working directory."""
    return ctx.env.cwd


def _cmd_cd(args: list[str], ctx: ExecutionContext) -> CommandResult:
    """Change the working directory (``cd -`` goes back)."""
    if not args:
        target = ctx.env.home
    elif args[0] == "-":
        if ctx.env.oldpwd is None:
            msg = "OLDPWD not set"
            raise InvalidArgumentsError(msg)
        target = ctx.env.oldpwd
    else:
        target = args[0]
    ctx.change_directory(target)
    if args and args[0] == "-":
        return CommandResult.text(ctx.env.cwd)
    return EMPTY


def _cmd_ls(args: list[str], ctx: ExecutionContext) -> str:
    """List directory contents (directories end in ``/``)."""
    show_hidden = "-a" in args
    paths = [a for a in args if a != "-a"]
    path = ctx.resolve(paths[0] if paths else "")
    if not ctx.fs.is_dir(path):
        # ``ls file`` echoes the name, like Unix
        ctx.fs.lookup(path)
        return paths[0] if paths else path
    names = [
        entry.name + ("/" if entry.is_dir else "")
        for entry in ctx.fs.list_dir(path)
        if show_hidden or not entry.name.startswith(".")
    ]
    return "  ".join(names)


# -- files ----------------------------------------------------------------------


def _cmd_cat(args: list[str], ctx: ExecutionContext) -> str:
    """Print file contents."""
    _require(args, 1, "cat <path...>")
    return "".join(ctx.fs.read(ctx.resolve(path)) for path in args).rstrip("\n")


def _cmd_echo(args: list[str], _ctx: ExecutionContext) -> str:
    """Print the arguments."""
    return " ".join(args)


def _cmd_mkdir(args: list[str], ctx: ExecutionContext) -> CommandResult:
    """Create directories."""
    _require(args, 1, "mkdir <path...>")
    for path in args:
        ctx.fs.create_dir(ctx.resolve(path))
    return EMPTY


def _cmd_touch(args: list[str], ctx: ExecutionContext) -> CommandResult:
    """Create empty files (existing files are left alone)."""
    _require(args, 1, "touch <path...>")
    for path in args:
        absolute = ctx.resolve(path)
        if not ctx.fs.exists(absolute):
            ctx.fs.create_file(absolute)
    return EMPTY


def _cmd_rm(args: list[str], ctx: ExecutionContext) -> CommandResult:
    """Remove files or (with -r) directories."""
    recursive = "-r" in args or "-rf" in args
    paths = [a for a in args if a not in ("-r", "-rf")]
    _require(paths, 1, "rm [-r] <path...>")
    for path in paths:
        absolute = ctx.resolve(path)
        if ctx.fs.is_dir(absolute) and not recursive:
            msg = f"{path}: is a directory (use -r)"
            raise InvalidArgumentsError(msg)
        ctx.fs.remove(absolute, recursive=recursive)
    if not ctx.fs.is_dir(ctx.env.cwd):
        # The working directory was inside what we just removed.
        ctx.change_directory(ctx.env.home if ctx.fs.is_dir(ctx.env.home) else "/")
    return EMPTY


def _cmd_write(args: list[str], ctx: ExecutionContext) -> CommandResult:
    """Write text to a file (``-a`` appends)."""
    append = bool(args) and args[0] == "-a"
    rest = args[1:] if append else args
    _require(rest, 2, "write [-a] <path> <text...>")
    ctx.fs.write(ctx.resolve(rest[0]), " ".join(rest[1:]) + "\n", append=append)
    return EMPTY


async def _cmd_more(args: list[str], ctx: ExecutionContext) -> CommandResult:
    """Page through a file; any key continues, ``q`` or Ctrl+C quits."""
    _require(args, 1, "more <path>")
    lines = ctx.fs.read(ctx.resolve(args[0])).rstrip("\n").split("\n")
    page = ctx.config.page_size
    for start in range(0, len(lines), page):
        ctx.write("\n".join(lines[start : start + page]))
        if start + page >= len(lines):
            break
        ctx.write(CommandResult.styled('<span class="tk-more">--More--</span>'))
        key = await ctx.wait_key()
        if key in (INTERRUPT, "q"):
            break
    return EMPTY


# -- environment -----------------------------------------------------------------


def _cmd_env(_args: list[str], ctx: ExecutionContext) -> str:
    """List environment variables."""
    return "\n".join(f"{k}={v}" for k, v in sorted(ctx.env.items()))


def _cmd_export(args: list[str], ctx: ExecutionContext) -> CommandResult:
    """Set environment variables (KEY=VALUE)."""
    _require(args, 1, "export KEY=VALUE")
    for pair in args:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = "usage: export KEY=VALUE"
            raise InvalidArgumentsError(msg)
        if key in ("CWD", "OLDPWD"):
            msg = f"{key} is read-only; use cd"
            raise InvalidArgumentsError(msg)
        ctx.env.set(key, value)
    return EMPTY


def _cmd_unset(args: list[str], ctx: ExecutionContext) -> CommandResult:
    """Remove environment variables."""
    _require(args, 1, "unset KEY")
    for key in args:
        if key in ("CWD", "HOME", "USER", "HOSTNAME"):
            msg = f"{key} cannot be unset"
            raise InvalidArgumentsError(msg)
        if ctx.env.get(key) is not None:
            ctx.env.delete(key)
    return EMPTY


async def _cmd_sudo(args: list[str], ctx: ExecutionContext) -> CommandResult:
    """Run one command with elevated privilege."""
    _require(args, 1, "sudo <command> [args...]")
    if args[0] == "sudo":
        msg = "nested sudo is not allowed"
        raise InvalidArgumentsError(msg)
    was_privileged = ctx.env.privileged
    ctx.env.privileged = True
    ctx.logger.log(LogLevel.INFO, f"sudo {' '.join(args)}", source="sudo", user=ctx.env.user)
    try:
        return await ctx.invoke(ParsedCommand(name=args[0].lower(), args=args[1:]))
    finally:
        ctx.env.privileged = was_privileged


# -- session -----------------------------------------------------------------------


def _cmd_history(_args: list[str], ctx: ExecutionContext) -> str:
    """Show command history."""
    if not ctx.history:
        return "No history."
    return "\n".join(f"  {i + 1}  {cmd}" for i, cmd in enumerate(ctx.history))


def _cmd_log(args: list[str], ctx: ExecutionContext) -> str:
    """Show shell log entries (optionally at or above LEVEL)."""
    min_level = None
    if args:
        try:
            min_level = LogLevel[args[0].upper()]
        except KeyError:
            levels = ", ".join(level.name for level in LogLevel)
            msg = f"unknown level '{args[0]}' (choose from {levels})"
            raise InvalidArgumentsError(msg) from None
    entries = ctx.logger.filter(min_level=min_level)
    return "\n".join(str(e) for e in entries) if entries else "No log entries."


async def _cmd_sleep(args: list[str], ctx: ExecutionContext) -> CommandResult:
    """Wait for SECONDS, stopping early on Ctrl+C."""
    _require(args, 1, "sleep <seconds>")
    try:
        seconds = float(args[0])
    except ValueError:
        msg = f"invalid time interval '{args[0]}'"
        raise InvalidArgumentsError(msg) from None
    if not 0 <= seconds <= _MAX_SLEEP_SECONDS:
        msg = f"interval must be between 0 and {_MAX_SLEEP_SECONDS:g} seconds"
        raise InvalidArgumentsError(msg)

    loop = asyncio.get_running_loop()
    deadline = loop.time() + seconds
    while not ctx.interrupted:
        remaining = deadline - loop.time()
        if remaining <= 0:
            break
        await asyncio.sleep(min(_SLEEP_TICK, remaining))
    return EMPTY


def _cmd_reset(_args: list[str], ctx: ExecutionContext) -> str:
    """Rebuild the file system and environment; reload history."""
    ctx.session.reset()
    return "Shell reset."


def _cmd_exit(_args: list[str], ctx: ExecutionContext) -> str:
    """Close this session."""
    ctx.session.request_exit()
    return "logout"


_BUILTINS: tuple[tuple[str, Handler, str, str], ...] = (
    ("help", _cmd_help, "List commands or describe one", "help [command]"),
    ("ls", _cmd_ls, "List directory contents", "ls [-a] [path]"),
    ("cd", _cmd_cd, "Change the working directory", "cd [path|-]"),
    ("pwd", _cmd_pwd, "Print the working directory", "pwd"),
    ("cat", _cmd_cat, "Print file contents", "cat <path...>"),
    ("echo", _cmd_echo, "Print the arguments", "echo [text...]"),
    ("mkdir", _cmd_mkdir, "Create directories", "mkdir <path...>"),
    ("touch", _cmd_touch, "Create empty files", "touch <path...>"),
    ("rm", _cmd_rm, "Remove files or directories", "rm [-r] <path...>"),
    ("write", _cmd_write, "Write text to a file", "write [-a] <path> <text...>"),
    ("more", _cmd_more, "Page through a file", "more <path>"),
    ("whoami", _cmd_whoami, "Show the current user", "whoami"),
    ("hostname", _cmd_hostname, "Show the host name", "hostname"),
    ("history", _cmd_history, "Show command history", "history"),
    ("env", _cmd_env, "List environment variables", "env"),
    ("export", _cmd_export, "Set environment variables", "export KEY=VALUE"),
    ("unset", _cmd_unset, "Remove environment variables", "unset KEY"),
    ("sudo", _cmd_sudo, "Run a command with elevated privilege", "sudo <command> [args...]"),
    ("lolcat", _cmd_lolcat, "Print text in rainbow colours", "lolcat <text...>"),
    ("motd", _cmd_motd, "Show the message of the day", "motd"),
    ("sleep", _cmd_sleep, "Wait for a number of seconds", "sleep <seconds>"),
    ("log", _cmd_log, "Show the shell log", "log [LEVEL]"),
    ("reset", _cmd_reset, "Reset the file system and environment", "reset"),
    ("exit", _cmd_exit, "Close this session", "exit"),
)


def register_builtins(registry: CommandRegistry) -> None:
    """Add every built-in command to *registry*.

    Raises:
        DuplicateCommandError: If a built-in name is already registered.

    """
    for name, handler, help_text, usage in _BUILTINS:
        registry.register(name, _recovers(name)(handler), help_text, usage=usage)


def default_registry() -> CommandRegistry:
    """Return a new registry holding the built-in commands."""
    registry = CommandRegistry()
    register_builtins(registry)
    return registry
