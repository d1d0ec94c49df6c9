"""Application-layer ports describing collaborator responsibilities.

Purpose
-------
Define the structural contract a line destination must satisfy so the
:class:`~lib_kvlog.domain.logger.Logger` can write to files, in-memory buffers,
or network streams without depending on concrete implementations.

Contents
--------
* :class:`Sink` – accepts one rendered line per call.

System Role
-----------
Any text stream (``sys.stdout``, ``io.StringIO``, an opened file) already
satisfies :class:`Sink`. The adapters in :mod:`lib_kvlog.adapters.sinks` add
locking and discard behaviour on top of this protocol.
"""

from __future__ import annotations

from typing import Protocol


class Sink(Protocol):
    """Destination for rendered log lines.

    Why
    ----
    Keep the logger agnostic of where lines end up while fixing the only
    guarantee it relies on.

    What
    ----
    ``write`` receives a complete line including its trailing newline and must
    preserve the exact text without added framing. Implementations shared
    across threads are responsible for making each call atomic.
    """

    def write(self, text: str) -> object:
        """Accept *text* (one full line) and return anything, typically a count."""
