"""Immutable line logger value object.

Purpose
-------
Anchor the :class:`Logger` value that accumulates ``key=value`` attributes
under a fixed namespace and renders them, together with a per-call message,
as exactly one line per emission.

Contents
--------
* :class:`Logger` – frozen value with derivation methods (``with_namespace``,
  ``append``, ``replace``, ``at``, ``step``, ``start``) and emission methods
  (``log``, ``success``, ``error``).
* :data:`CURRENT_LOGGER` – context variable used to carry a logger through
  call chains.

System Role
-----------
Derivations never write and never mutate the receiver; emissions render
``<namespace> <attr>... <final-segment>\\n`` and hand it to the sink in a
single ``write`` call. Sink failures surface as
:class:`~lib_kvlog.domain.errors.SinkWriteError`.
"""

from __future__ import annotations

import contextvars
import dataclasses
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Sequence

from ..application.ports import Sink
from ..observability import log_debug, log_error
from .errors import SinkWriteError
from .formatting import quote, render_template, set_token, split_tokens

CURRENT_LOGGER: ContextVar[Logger | None] = ContextVar("lib_kvlog_logger", default=None)
"""Logger bound to the active context, read by :func:`lib_kvlog.from_context`."""

AT_KEY = "at"
STEP_KEY = "step"


@dataclass(frozen=True, slots=True)
class Logger:
    """Chainable structured logger.

    Why
    ----
    Call sites nest scopes repeatedly and capture loggers across threads;
    a value that can only be derived, never changed, removes aliasing between
    call chains.

    Parameters
    ----------
    namespace:
        Leading text of every line, usually ``key=value`` tokens such as
        ``"ns=worker"``. Stored verbatim.
    sink:
        Shared destination for rendered lines.
    attributes:
        Ordered attribute tokens. Converted to a tuple on construction.
    started_at:
        Reading of ``clock`` taken by :meth:`start`, ``None`` otherwise.
    clock:
        Monotonic time source in seconds.

    Examples
    --------
    >>> import io
    >>> buffer = io.StringIO()
    >>> log = Logger("ns=test", buffer)
    >>> log.with_namespace("foo=bar").at("load").log("count=%d", 3)
    >>> buffer.getvalue()
    'ns=test foo=bar at=load count=3\\n'
    """

    namespace: str
    sink: Sink
    attributes: Sequence[str] = ()
    started_at: float | None = None
    clock: Callable[[], float] = field(default=time.monotonic, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", tuple(self.attributes))

    def with_namespace(self, kv: str) -> Logger:
        """Append the whitespace-separated tokens of *kv*, in order.

        Repeated keys coexist; only :meth:`replace`, :meth:`at` and
        :meth:`step` enforce a single token per key.

        Examples
        --------
        >>> from lib_kvlog.adapters.sinks import DiscardSink
        >>> Logger("ns=a", DiscardSink()).with_namespace("k1=v1 k2=v2").attributes
        ('k1=v1', 'k2=v2')
        """

        return self._derive(attributes=(*self.attributes, *split_tokens(kv)))

    def append(self, fragment: str) -> Logger:
        """Append *fragment* unchanged as one opaque token without parsing it.

        Blank fragments are skipped so the rendered line keeps single spaces.

        Examples
        --------
        >>> from lib_kvlog.adapters.sinks import DiscardSink
        >>> Logger("ns=a", DiscardSink()).append("raw  text").attributes
        ('raw  text',)
        """

        if not fragment.strip():
            return self
        return self._derive(attributes=(*self.attributes, fragment))

    def replace(self, key: str, value: object) -> Logger:
        """Replace the value of the first ``key=`` token in place.

        When no token carries *key* a new ``key=value`` token is appended.

        Examples
        --------
        >>> from lib_kvlog.adapters.sinks import DiscardSink
        >>> Logger("ns=a", DiscardSink()).with_namespace("baz=qux1").replace("baz", "qux2").attributes
        ('baz=qux2',)
        >>> Logger("ns=a", DiscardSink()).replace("baz", "new").attributes
        ('baz=new',)
        """

        return self._derive(attributes=set_token(self.attributes, key, value))

    def at(self, target: object) -> Logger:
        """Set or replace the single ``at=`` token."""

        return self.replace(AT_KEY, target)

    def step(self, target: object) -> Logger:
        """Set or replace the single ``step=`` token."""

        return self.replace(STEP_KEY, target)

    def start(self) -> Logger:
        """Return a copy that remembers the current instant for ``elapsed=``."""

        return self._derive(started_at=self.clock())

    def log(self, template: str, *args: Any) -> None:
        """Write ``<namespace> <attrs> <template % args>`` as one line."""

        self._write(self._message(template, args))

    logf = log

    def success(self, template: str = "", *args: Any) -> None:
        """Write a ``state=success`` line, with ``elapsed=`` after :meth:`start`."""

        segments = ["state=success"]
        if self.started_at is not None:
            segments.append(f"elapsed={self.clock() - self.started_at:.3f}s")
        segments.append(self._message(template, args))
        self._write(*segments)

    successf = success

    def error(self, err: BaseException | str) -> None:
        """Write a ``state=error error="<message>"`` line for *err*.

        Exceptions with an empty message are reported by class name.

        Examples
        --------
        >>> import io
        >>> buffer = io.StringIO()
        >>> Logger("ns=test", buffer).error(ValueError('bad "input"'))
        >>> buffer.getvalue()
        'ns=test state=error error="bad \\\\"input\\\\""\\n'
        """

        message = str(err)
        if not message and isinstance(err, BaseException):
            message = type(err).__name__
        self._write(f"state=error error={quote(message)}")

    def render(self, *segments: str) -> str:
        """Return the line the emission methods would write for *segments*.

        Empty parts are skipped so no doubled or trailing spaces appear.
        """

        parts = (self.namespace, *self.attributes, *segments)
        return " ".join(part for part in parts if part) + "\n"

    def with_context(self, carrier: contextvars.Context | None = None) -> contextvars.Context:
        """Return a copy of *carrier* in which this logger is bound.

        *carrier* defaults to the current context. The input is left untouched.
        """

        base = carrier if carrier is not None else contextvars.copy_context()
        derived = base.copy()
        derived.run(CURRENT_LOGGER.set, self)
        return derived

    @contextmanager
    def bind(self) -> Iterator[Logger]:
        """Bind this logger in the current context for the ``with`` block."""

        token = CURRENT_LOGGER.set(self)
        try:
            yield self
        finally:
            CURRENT_LOGGER.reset(token)

    def _derive(self, **changes: Any) -> Logger:
        return dataclasses.replace(self, **changes)

    def _message(self, template: str, args: Sequence[Any]) -> str:
        rendered, problems = render_template(template, args)
        if problems:
            log_debug("template_problem", namespace=self.namespace, template=template, problems=problems)
        return rendered

    def _write(self, *segments: str) -> None:
        line = self.render(*segments)
        try:
            self.sink.write(line)
        except (OSError, ValueError) as exc:
            log_error("sink_write_failed", namespace=self.namespace, error=str(exc))
            raise SinkWriteError(f"failed to write log line: {exc}", line=line) from exc
