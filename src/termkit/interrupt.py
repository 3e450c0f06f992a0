"""Interrupt channel — cooperative Ctrl+C and single-key waits.

Commands run as coroutines on the session's event loop.  Nothing ever
kills them from the outside; instead the front end *asks* them to stop:

    1. The user presses Ctrl+C.
    2. The front end calls ``request()``, which raises the session's
       interrupt flag and wakes a pending ``wait_key()`` with
       ``INTERRUPT``.
    3. The running command notices (by checking the flag, or by getting
       ``INTERRUPT`` back from ``wait_key()``) and returns early.

A command that never looks at the flag simply runs to completion.

``wait_key()`` is a **single slot**: one outstanding wait per session.
It is backed by one asyncio future that the front end resolves with
``press_key()``.  A second ``wait_key()`` while the first is pending is
a bug in the caller and raises ``KeyWaitPendingError``.
"""

from __future__ import annotations

import asyncio

from termkit.errors import KeyWaitPendingError

INTERRUPT = "CTRL_C"
"""Key token delivered to ``wait_key()`` when the wait was interrupted."""

ENTER = "Enter"


class InterruptChannel:
    """Session-wide interrupt flag plus a one-shot key wait."""

    def __init__(self) -> None:
        """Create a channel with the flag lowered and no pending wait."""
        self._interrupted = False
        self._pending: asyncio.Future[str] | None = None

    @property
    def interrupted(self) -> bool:
        """Return whether an interrupt has been requested."""
        return self._interrupted

    @property
    def waiting(self) -> bool:
        """Return whether a ``wait_key()`` call is currently pending."""
        return self._pending is not None and not self._pending.done()

    def request(self) -> None:
        """Raise the flag and wake any pending key wait with ``INTERRUPT``."""
        self._interrupted = True
        if self._pending is not None and not self._pending.done():
            self._pending.set_result(INTERRUPT)

    def clear(self) -> None:
        """Lower the flag (done before each new command)."""
        self._interrupted = False

    def press_key(self, key: str) -> bool:
        """Deliver *key* to the pending wait.

        Returns:
            True if a wait consumed the key, False if nobody was waiting.

        """
        if self._pending is None or self._pending.done():
            return False
        self._pending.set_result(key)
        return True

    async def wait_key(self) -> str:
        """Suspend until a key is pressed or an interrupt is requested.

        Returns:
            The key token, or ``INTERRUPT``.

        Raises:
            KeyWaitPendingError: If another wait is already pending.

        """
        if self.waiting:
            msg = "wait_key() is already pending for this session"
            raise KeyWaitPendingError(msg)
        if self._interrupted:
            return INTERRUPT

        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._pending = future
        try:
            return await future
        finally:
            if self._pending is future:
                self._pending = None
