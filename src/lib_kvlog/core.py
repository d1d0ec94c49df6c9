"""Composition root for ``lib_kvlog``.

Purpose
-------
Provide the constructors consumers call to obtain a root
:class:`~lib_kvlog.domain.logger.Logger`, wiring the environment-driven
default sink for :func:`new` and accepting an explicit sink for
:func:`new_writer`.

Contents
--------
* :func:`new` – root logger bound to the configured default sink.
* :func:`new_writer` – root logger bound to an explicit sink.
* :func:`default_sink` – resolves :class:`Settings` into a sink.
"""

from __future__ import annotations

from .adapters.env import Settings, load_settings
from .adapters.sinks import open_sink
from .application.ports import Sink
from .domain.logger import Logger


def new(namespace: str) -> Logger:
    """Return a root logger writing to the process default sink.

    Why
    ----
    Services usually log to standard output; the destination can be switched
    with ``LIB_KVLOG_OUTPUT`` without touching code.

    Side Effects
    ------------
    Reads the environment once to pick the sink (see :func:`default_sink`).
    """

    return new_writer(namespace, default_sink())


def new_writer(namespace: str, sink: Sink) -> Logger:
    """Return a root logger writing to *sink*.

    Examples
    --------
    >>> import io
    >>> buffer = io.StringIO()
    >>> new_writer("ns=test", buffer).log("fred=barney")
    >>> buffer.getvalue()
    'ns=test fred=barney\\n'
    """

    return Logger(namespace, sink)


def default_sink(settings: Settings | None = None) -> Sink:
    """Return the sink selected by *settings* (loaded from the environment if omitted)."""

    resolved = settings if settings is not None else load_settings()
    return open_sink(resolved.output, flush=resolved.flush)


__all__ = ["new", "new_writer", "default_sink"]
