"""Domain-level exception hierarchy.

Purpose
-------
Expose the small error taxonomy shared by the logger value object, the sink
adapters, and the configuration loader.

Contents
--------
* :class:`KvlogError` – umbrella base class for all library failures.
* :class:`SinkWriteError` – raised when a sink rejects a rendered line.
* :class:`InvalidSetting` – raised when environment configuration cannot be
  interpreted.

System Role
-----------
Formatting mistakes are *not* part of this hierarchy: they are embedded in the
rendered line so logging never aborts because of a bad template. Missing
carrier bindings are not errors either; :func:`lib_kvlog.from_context` degrades
to a discard logger.
"""

from __future__ import annotations


class KvlogError(Exception):
    """Base type for all exceptions emitted by ``lib_kvlog``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class SinkWriteError(KvlogError):
    """Raised when the output sink fails to accept a rendered line.

    Why
    ----
    Logging failures (disk full, closed pipe, broken connection) are
    operationally significant, so they reach the caller of the emitting method
    instead of being discarded.

    What
    ----
    Always chained (``raise ... from exc``) to the original sink exception and
    carries the line that could not be written.
    """

    def __init__(self, message: str, *, line: str) -> None:
        super().__init__(message)
        self.line = line


class InvalidSetting(KvlogError):
    """Signifies that an environment variable holds an unsupported value."""

    def __init__(self, name: str, value: str, allowed: tuple[str, ...]) -> None:
        super().__init__(f"{name}={value!r} is not one of: {', '.join(allowed)}")
        self.name = name
        self.value = value
        self.allowed = allowed
