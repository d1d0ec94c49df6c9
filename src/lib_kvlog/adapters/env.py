"""Environment variable adapter.

Purpose
-------
Translate process environment variables into the :class:`Settings` that
select the process-wide default sink used by :func:`lib_kvlog.new`.

Key behaviours
--------------
* Enforces a prefix (``default_env_prefix("lib-kvlog")`` → ``LIB_KVLOG``) so
  only relevant keys are captured.
* ``LIB_KVLOG_OUTPUT`` chooses ``stdout`` (default), ``stderr`` or
  ``discard``.
* ``LIB_KVLOG_FLUSH`` accepts the usual boolean spellings; defaults to true.
* Unsupported values raise :class:`~lib_kvlog.domain.errors.InvalidSetting`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final, Mapping

from ..domain.errors import InvalidSetting
from ..observability import log_debug
from .sinks import OUTPUT_CHOICES

_TRUE_VALUES: Final[tuple[str, ...]] = ("1", "true", "yes", "on")
_FALSE_VALUES: Final[tuple[str, ...]] = ("0", "false", "no", "off")


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-kvlog')
    'LIB_KVLOG'
    """

    return slug.replace("-", "_").upper()


ENV_PREFIX: Final[str] = default_env_prefix("lib-kvlog")


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved default-sink configuration.

    Attributes
    ----------
    output:
        One of :data:`~lib_kvlog.adapters.sinks.OUTPUT_CHOICES`.
    flush:
        Whether the default sink flushes after every line.
    """

    output: str = "stdout"
    flush: bool = True


class DefaultEnvLoader:
    """Load environment variables that belong to the library namespace."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise the loader with a specific ``environ`` mapping for testability."""

        self._environ = environ if environ is not None else os.environ

    def load(self, prefix: str) -> dict[str, str]:
        """Return variables starting with *prefix*, keyed by their lowercase suffix.

        Examples
        --------
        >>> loader = DefaultEnvLoader(environ={'LIB_KVLOG_OUTPUT': 'stderr', 'OTHER': 'x'})
        >>> loader.load('LIB_KVLOG')
        {'output': 'stderr'}
        """

        prefix = f"{prefix}_" if prefix and not prefix.endswith("_") else prefix
        collected: dict[str, str] = {}
        for key, value in self._environ.items():
            if not key.startswith(prefix):
                continue
            stripped = key[len(prefix) :]
            if stripped:
                collected[stripped.lower()] = value
        return collected


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read :class:`Settings` from *environ* (defaults to :data:`os.environ`).

    Examples
    --------
    >>> load_settings({})
    Settings(output='stdout', flush=True)
    >>> load_settings({'LIB_KVLOG_OUTPUT': 'Discard', 'LIB_KVLOG_FLUSH': 'no'})
    Settings(output='discard', flush=False)
    """

    values = DefaultEnvLoader(environ=environ).load(ENV_PREFIX)
    output = _choice(f"{ENV_PREFIX}_OUTPUT", values.get("output", "stdout"), OUTPUT_CHOICES)
    flush = _boolean(f"{ENV_PREFIX}_FLUSH", values.get("flush", "true"))
    log_debug("settings_loaded", output=output, flush=flush)
    return Settings(output=output, flush=flush)


def _choice(name: str, raw: str, allowed: tuple[str, ...]) -> str:
    value = raw.strip().lower()
    if value not in allowed:
        raise InvalidSetting(name, raw, allowed)
    return value


def _boolean(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidSetting(name, raw, _TRUE_VALUES + _FALSE_VALUES)
