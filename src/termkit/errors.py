"""Shell-specific exceptions.

Filesystem faults use Python's built-in ``OSError`` family (see
``termkit.fs``).  The classes here cover the rest of the shell:
argument validation, the command registry, the interrupt channel,
and configuration loading.
"""


class InvalidArgumentsError(ValueError):
    """Raised when a command is invoked with unusable arguments.

    The message is shown to the user verbatim, so it usually carries
    the command's usage line.
    """


class DuplicateCommandError(ValueError):
    """Raised when a command name is registered twice."""


class KeyWaitPendingError(RuntimeError):
    """Raised when ``wait_key`` is called while another wait is pending."""


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be loaded.

    Examples: missing file, invalid JSON, wrong value types.
    """
