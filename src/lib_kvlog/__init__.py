"""Public package surface for ``lib_kvlog``.

Root loggers come from :func:`new` (configured default sink) or
:func:`new_writer` (explicit sink); everything else is a method on the
returned :class:`Logger` or one of the helpers re-exported here.
"""

from __future__ import annotations

from .adapters.env import Settings, load_settings
from .adapters.sinks import DiscardSink, LockedSink, MemorySink
from .application.ports import Sink
from .context import DISCARD_LOGGER, from_context
from .core import default_sink, new, new_writer
from .domain.errors import InvalidSetting, KvlogError, SinkWriteError
from .domain.formatting import format_pair, quote, sprintf
from .domain.logger import Logger
from .observability import get_logger

__all__ = [
    "DISCARD_LOGGER",
    "DiscardSink",
    "InvalidSetting",
    "KvlogError",
    "LockedSink",
    "Logger",
    "MemorySink",
    "Settings",
    "Sink",
    "SinkWriteError",
    "default_sink",
    "format_pair",
    "from_context",
    "get_logger",
    "load_settings",
    "new",
    "new_writer",
    "quote",
    "sprintf",
]
