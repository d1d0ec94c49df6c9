"""Internal diagnostics for the library itself.

Purpose
    Report template mistakes and sink failures through the standard
    :mod:`logging` package without writing anything by default, so host
    applications decide whether ``lib_kvlog`` internals are visible.

Contents
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``log_debug`` / ``log_error``: emit structured entries via a single
      private emitter.

System Integration
    Used by :class:`lib_kvlog.domain.logger.Logger` when a template needed a
    diagnostic marker and when a sink rejected a line. The lines produced for
    callers never pass through here.
"""

from __future__ import annotations

import logging
from typing import Any, Final, Mapping

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_kvlog")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers.

    Why
        Leaves the library silent by default while giving host applications full
        control over handler and formatter configuration.
    """

    return _LOGGER


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug entry."""

    _emit(logging.DEBUG, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error entry."""

    _emit(logging.ERROR, message, fields)


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    _LOGGER.log(level, message, extra={"context": dict(fields)})
