"""Flask application factory for the termkit web terminal.

The ``create_app`` function builds a shell, opens two sessions on it
(``desktop`` and ``mobile``, sharing the file system and working
directory but keeping separate histories), and returns a Flask app.

Commands are coroutines, so the app runs one asyncio event loop in a
background thread and submits work to it.  A request that starts a
command waits a moment for it to finish; if it is still running (for
example a pager waiting for a key), the response says ``pending`` and
the page keeps polling.

Endpoints (``<name>`` is a session name):

- ``GET /`` — render the terminal HTML page.
- ``POST /api/<name>/execute`` — run a line: ``{"command": "..."}``.
- ``POST /api/<name>/key`` — deliver a key to ``wait_key``: ``{"key": "q"}``.
- ``POST /api/<name>/interrupt`` — Ctrl+C.
- ``GET /api/<name>/poll`` — drain pending events.
- ``POST /api/<name>/complete`` — Tab: ``{"line": "ca"}``.
- ``POST /api/<name>/history`` — arrows: ``{"direction": "older"}``.

Every command response carries ``events``: rendered results
(``{"type": "result", "kind": ..., "payload": ...}``), prompt requests
(``{"type": "prompt", ...}``), and directory changes (``{"type": "cwd", ...}``).
"""

from __future__ import annotations

import asyncio
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TYPE_CHECKING, Any

from flask import Flask, Response, abort, jsonify, render_template, request

from termkit.results import CommandResult
from termkit.session import Frontend, Session, is_clear
from termkit.shell import Shell
from termkit.storage import MemoryStore

if TYPE_CHECKING:
    from collections.abc import Coroutine

    from termkit.storage import StateStore

_HTTP_BAD_REQUEST = 400
_HTTP_NOT_FOUND = 404

# How long a request waits for a command before answering "pending".
_SETTLE_SECONDS = 0.5

SESSION_NAMES: tuple[str, ...] = ("desktop", "mobile")


class _LoopThread:
    """An asyncio event loop running in a daemon thread."""

    def __init__(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._thread.start()

    def submit(self, coro: Coroutine[Any, Any, Any]) -> Any:
        """Schedule *coro* on the loop; return a concurrent future."""
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def call(self, fn: Any, *args: Any, timeout: float = _SETTLE_SECONDS) -> Any:
        """Run a plain callable on the loop thread and return its value."""

        async def _invoke() -> Any:
            return fn(*args)

        return self.submit(_invoke()).result(timeout=timeout)


class _EventBuffer:
    """Thread-safe queue of front-end events for one session."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[dict[str, Any]] = []

    def push(self, event: dict[str, Any]) -> None:
        with self._lock:
            self._events.append(event)

    def drain(self) -> list[dict[str, Any]]:
        with self._lock:
            events, self._events = self._events, []
        return events

    def frontend(self, shell: Shell) -> Frontend:
        """Return callbacks that record events into this buffer."""

        def output(result: CommandResult) -> None:
            self.push({"type": "result", **result.to_dict()})

        def prompt(text: str) -> None:
            self.push({"type": "prompt", "prompt": text, "title": shell.title()})

        def directory_changed(new_dir: str, old_dir: str) -> None:
            self.push({"type": "cwd", "cwd": new_dir, "oldpwd": old_dir, "title": shell.title()})

        return Frontend(output=output, prompt=prompt, directory_changed=directory_changed)


def create_app(shell: Shell | None = None, *, store: StateStore | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        shell: The shell to serve (a default one when omitted).
        store: Where sessions persist history (in memory when omitted).

    Returns:
        A configured Flask application ready to serve.

    """
    shell = shell if shell is not None else Shell()
    store = store if store is not None else MemoryStore()
    loop = _LoopThread()

    buffers: dict[str, _EventBuffer] = {}
    sessions: dict[str, Session] = {}
    for name in SESSION_NAMES:
        buffers[name] = _EventBuffer()
        sessions[name] = shell.open_session(
            name=name, frontend=buffers[name].frontend(shell), store=store
        )

    app = Flask(__name__)
    app.config["TERMKIT_SHELL"] = shell

    def _session(name: str) -> Session:
        session = sessions.get(name)
        if session is None:
            abort(_HTTP_NOT_FOUND)
        return session

    def _reply(name: str, **extra: Any) -> Response:
        session = sessions[name]
        return jsonify(
            {
                "events": buffers[name].drain(),
                "pending": session.busy,
                "prompt": session.prompt_text(),
                "exit": session.exit_requested,
                **extra,
            }
        )

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the terminal HTML page."""
        return render_template(
            "index.html",
            welcome="\n".join(shell.config.welcome),
            prompt=shell.prompt_text(),
            title=shell.title(),
        )

    @app.route("/api/<name>/execute", methods=["POST"])
    def execute(name: str) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run a command line.

        Expects JSON body: ``{"command": "..."}``

        A bare ``clear`` is not dispatched; the reply carries ``clear`` and
        the page wipes its output.
        """
        session = _session(name)
        data = request.get_json(silent=True)
        if data is None or "command" not in data:
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        command = str(data["command"])
        if is_clear(command):
            return _reply(name, clear=loop.call(session.clear_screen, command))

        future = loop.submit(session.process_command(command))
        try:
            result: CommandResult = future.result(timeout=_SETTLE_SECONDS)
        except FutureTimeoutError:
            return _reply(name)
        return _reply(name, result=result.to_dict())

    @app.route("/api/<name>/key", methods=["POST"])
    def key(name: str) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Deliver a key press to a command waiting for one."""
        session = _session(name)
        data = request.get_json(silent=True)
        if data is None or "key" not in data:
            return jsonify({"error": "Missing 'key' field"}), _HTTP_BAD_REQUEST
        accepted = loop.call(session.press_key, str(data["key"]))
        loop.call(lambda: None)  # let the woken handler run one step
        return _reply(name, accepted=accepted)

    @app.route("/api/<name>/interrupt", methods=["POST"])
    def interrupt(name: str) -> Response:  # pyright: ignore[reportUnusedFunction]
        """Ask the running command to stop (Ctrl+C)."""
        session = _session(name)
        loop.call(session.interrupt)
        loop.call(lambda: None)
        return _reply(name)

    @app.route("/api/<name>/poll")
    def poll(name: str) -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return events produced since the last request."""
        _session(name)
        return _reply(name)

    @app.route("/api/<name>/complete", methods=["POST"])
    def complete(name: str) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Complete the last token of a line."""
        session = _session(name)
        data = request.get_json(silent=True)
        if data is None or "line" not in data:
            return jsonify({"error": "Missing 'line' field"}), _HTTP_BAD_REQUEST
        completion = loop.call(session.complete, str(data["line"]))
        return jsonify(
            {
                "line": completion.line,
                "candidates": list(completion.candidates),
                "show": completion.show,
            }
        )

    @app.route("/api/<name>/history", methods=["POST"])
    def history(name: str) -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Step through history: ``{"direction": "older" | "newer"}``."""
        session = _session(name)
        data = request.get_json(silent=True) or {}
        direction = data.get("direction")
        if direction == "older":
            line = loop.call(session.history_older)
        elif direction == "newer":
            line = loop.call(session.history_newer)
        else:
            return jsonify({"error": "direction must be 'older' or 'newer'"}), _HTTP_BAD_REQUEST
        return jsonify({"line": line, "changed": line is not None})

    return app


def main() -> None:
    """Run the web terminal development server.

    This is the ``termkit-web`` console entry point.
    """
    app = create_app()
    app.run(debug=False, port=8080, threaded=True)
