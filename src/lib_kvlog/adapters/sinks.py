"""Sink adapters.

Purpose
-------
Provide the concrete line destinations used by the composition root and by
tests: a lock-guarded stream wrapper, a discard sink, and an in-memory
collector.

Key behaviours
--------------
* :class:`LockedSink` turns every line into one atomic ``write`` (plus an
  optional ``flush``) so concurrent loggers sharing a stream never interleave
  bytes within a line.
* :class:`DiscardSink` accepts and drops everything; it backs the logger
  returned by :func:`lib_kvlog.from_context` when no logger was bound.
* :class:`MemorySink` keeps lines in order for inspection.
* :func:`open_sink` maps an output name (``stdout``, ``stderr``, ``discard``)
  to a sink, resolving the process streams at call time.
"""

from __future__ import annotations

import sys
import threading
import weakref
from typing import Final

from ..application.ports import Sink
from ..domain.errors import InvalidSetting

OUTPUT_CHOICES: Final[tuple[str, ...]] = ("stdout", "stderr", "discard")

_REGISTRY_LOCK: Final[threading.Lock] = threading.Lock()
_STREAM_LOCKS: weakref.WeakKeyDictionary[object, threading.Lock] = weakref.WeakKeyDictionary()
_PINNED_LOCKS: dict[int, tuple[object, threading.Lock]] = {}


class LockedSink:
    """Serialise whole-line writes to a shared stream.

    Examples
    --------
    >>> import io
    >>> buffer = io.StringIO()
    >>> sink = LockedSink(buffer)
    >>> _ = sink.write('ns=demo ready\\n')
    >>> buffer.getvalue()
    'ns=demo ready\\n'
    """

    def __init__(self, stream: Sink, *, flush: bool = True, lock: threading.Lock | None = None) -> None:
        self._stream = stream
        self._flush = flush
        self._lock = lock if lock is not None else threading.Lock()

    @property
    def stream(self) -> Sink:
        return self._stream

    @property
    def lock(self) -> threading.Lock:
        return self._lock

    def write(self, text: str) -> object:
        with self._lock:
            written = self._stream.write(text)
            if self._flush:
                flush = getattr(self._stream, "flush", None)
                if flush is not None:
                    flush()
        return written


class DiscardSink:
    """Accept and drop every line."""

    def write(self, text: str) -> int:
        return len(text)


class MemorySink:
    """Collect rendered lines in memory, safe for concurrent writers.

    Examples
    --------
    >>> sink = MemorySink()
    >>> _ = sink.write('ns=demo a=1\\n')
    >>> sink.lines
    ('ns=demo a=1',)
    """

    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._lock = threading.Lock()

    def write(self, text: str) -> int:
        with self._lock:
            self._chunks.append(text)
        return len(text)

    def getvalue(self) -> str:
        with self._lock:
            return "".join(self._chunks)

    @property
    def lines(self) -> tuple[str, ...]:
        """Return the written lines without their trailing newlines."""

        return tuple(self.getvalue().splitlines())


def open_sink(output: str, *, flush: bool = True) -> Sink:
    """Return the sink registered under *output*.

    ``stdout`` and ``stderr`` are looked up on :mod:`sys` when this function
    runs, so redirected streams (pytest capture, ``CliRunner``) are honoured.
    Every sink opened on the same stream shares one lock, so independent root
    loggers writing to it never interleave their lines.

    Examples
    --------
    >>> isinstance(open_sink('discard'), DiscardSink)
    True
    >>> open_sink('stdout').stream is sys.stdout
    True
    >>> open_sink('stdout').lock is open_sink('stdout').lock
    True
    """

    name = output.strip().lower()
    if name == "stdout":
        return LockedSink(sys.stdout, flush=flush, lock=stream_lock(sys.stdout))
    if name == "stderr":
        return LockedSink(sys.stderr, flush=flush, lock=stream_lock(sys.stderr))
    if name == "discard":
        return DiscardSink()
    raise InvalidSetting("output", output, OUTPUT_CHOICES)


def stream_lock(stream: object) -> threading.Lock:
    """Return the lock shared by every :class:`LockedSink` writing to *stream*.

    Examples
    --------
    >>> import io
    >>> buffer = io.StringIO()
    >>> stream_lock(buffer) is stream_lock(buffer)
    True
    >>> stream_lock(buffer) is stream_lock(io.StringIO())
    False
    """

    with _REGISTRY_LOCK:
        try:
            lock = _STREAM_LOCKS.get(stream)
            if lock is None:
                lock = _STREAM_LOCKS[stream] = threading.Lock()
            return lock
        except TypeError:
            # streams without weakref support stay pinned for the process lifetime
            pinned = _PINNED_LOCKS.get(id(stream))
            if pinned is None or pinned[0] is not stream:
                pinned = _PINNED_LOCKS[id(stream)] = (stream, threading.Lock())
            return pinned[1]
