"""Carrier lookup for loggers threaded through :mod:`contextvars`.

Purpose
    Retrieve the logger that :meth:`Logger.with_context` or
    :meth:`Logger.bind` associated with a context, degrading to a logger that
    silently discards its lines when nothing was bound.

Contents
    - ``DISCARD_LOGGER``: shared no-op logger returned on a miss.
    - ``from_context``: the lookup itself.
"""

from __future__ import annotations

import contextvars
from typing import Final

from .adapters.sinks import DiscardSink
from .domain.logger import CURRENT_LOGGER, Logger

DISCARD_LOGGER: Final[Logger] = Logger("", DiscardSink())


def from_context(carrier: contextvars.Context | None = None) -> Logger:
    """Return the logger bound in *carrier* (or the current context).

    Examples
    --------
    >>> import contextvars
    >>> from_context(contextvars.Context()) is DISCARD_LOGGER
    True
    >>> log = Logger("ns=demo", DiscardSink())
    >>> from_context(log.with_context()) is log
    True
    """

    if carrier is None:
        bound = CURRENT_LOGGER.get()
    else:
        bound = carrier.get(CURRENT_LOGGER)
    return bound if bound is not None else DISCARD_LOGGER
