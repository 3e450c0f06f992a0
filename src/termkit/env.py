"""Shell environment — identity, location, and free-form variables.

A Unix shell keeps its state in ``KEY=VALUE`` string pairs: ``USER``
(who is logged in), ``HOME`` (where ``~`` points), ``PWD``/``OLDPWD``
(where you are and where you were).  Our ``Environment`` stores the
same pairs in a plain dict and adds typed accessors for the handful of
variables the shell core relies on.

Key design properties:
    - **Strings only** — both keys and values are strings, except the
      privilege flag, which lives outside the variable table.
    - **CWD is guarded elsewhere** — the environment stores whatever it
      is told; the session validates a directory before moving there.
    - **Reset restores the initial block** — ``reset()`` throws away
      everything exported since start-up.
"""

from __future__ import annotations

USER = "USER"
HOSTNAME = "HOSTNAME"
HOME = "HOME"
CWD = "CWD"
OLDPWD = "OLDPWD"


class Environment:
    """A key-value store for shell variables plus a privilege flag."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        """Create an environment, optionally pre-populated.

        Args:
            initial: Starting variables (copied, not referenced).

        """
        self._initial: dict[str, str] = dict(initial) if initial else {}
        self._vars: dict[str, str] = dict(self._initial)
        self._privileged = False

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the value for *key*, or *default* if not set."""
        return self._vars.get(key, default)

    def set(self, key: str, value: str) -> None:
        """Set *key* to *value* (creates or overwrites)."""
        self._vars[key] = value

    def delete(self, key: str) -> None:
        """Remove *key* from the environment.

        Raises:
            KeyError: If *key* does not exist.

        """
        del self._vars[key]

    def items(self) -> list[tuple[str, str]]:
        """Return all (key, value) pairs."""
        return list(self._vars.items())

    def copy(self) -> Environment:
        """Return an independent copy of this environment."""
        clone = Environment(initial=self._initial)
        clone._vars = dict(self._vars)
        clone._privileged = self._privileged
        return clone

    def reset(self) -> None:
        """Restore the variables this environment was created with."""
        self._vars = dict(self._initial)
        self._privileged = False

    def __len__(self) -> int:
        """Return the number of variables."""
        return len(self._vars)

    # -- typed accessors ---------------------------------------------------

    @property
    def user(self) -> str:
        """Return the current user name."""
        return self._vars.get(USER, "")

    @property
    def hostname(self) -> str:
        """Return the host name shown in the prompt."""
        return self._vars.get(HOSTNAME, "")

    @property
    def home(self) -> str:
        """Return the home directory (``~``)."""
        return self._vars.get(HOME, "/")

    @property
    def cwd(self) -> str:
        """Return the current working directory."""
        return self._vars.get(CWD, self.home)

    @property
    def oldpwd(self) -> str | None:
        """Return the previous working directory, if there is one."""
        return self._vars.get(OLDPWD)

    @property
    def privileged(self) -> bool:
        """Return whether commands currently run with elevated privilege."""
        return self._privileged or self.user == "root"

    @privileged.setter
    def privileged(self, value: bool) -> None:
        self._privileged = value

    def move_to(self, new_dir: str) -> str:
        """Record a directory change and return the directory left behind."""
        old_dir = self.cwd
        self._vars[OLDPWD] = old_dir
        self._vars[CWD] = new_dir
        return old_dir
