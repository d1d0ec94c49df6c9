"""Token and message formatting primitives.

Purpose
-------
Hold the pure text helpers the :class:`~lib_kvlog.domain.logger.Logger` relies
on: quoting values, building and splitting ``key=value`` tokens, and the
printf-style template renderer used by every emission call.

Contents
--------
* :func:`quote` – double-quote a string with backslash escapes.
* :func:`needs_quoting` / :func:`format_pair` – build a single token.
* :func:`split_tokens` / :func:`token_key` – read tokens back.
* :func:`set_token` – set-or-replace the first token for a key.
* :func:`render_template` / :func:`sprintf` – printf-style substitution.

System Role
-----------
Everything here is side-effect free. Template problems (missing or surplus
arguments, mismatched types, unknown verbs) are embedded in the output using
printf diagnostic markers such as ``%!d(MISSING)``; they never raise.
"""

from __future__ import annotations

import re
from typing import Any, Final, Sequence

_ESCAPES: Final[dict[str, str]] = {
    '"': '\\"',
    "\\": "\\\\",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}

_TOKEN: Final[re.Pattern[str]] = re.compile(r'(?:"(?:\\.|[^"\\])*"|[^\s"]|")+')

_DIRECTIVE: Final[re.Pattern[str]] = re.compile(
    r"%(?P<flags>[-+ #0]*)(?P<width>\d+)?(?:\.(?P<precision>\d*))?(?P<verb>.)?",
    re.DOTALL,
)

_FLOAT_VERBS: Final[str] = "feEgG"


def quote(text: str) -> str:
    """Return *text* wrapped in double quotes with escapes applied.

    Examples
    --------
    >>> quote('broken')
    '"broken"'
    >>> print(quote('say "hi"\\n'))
    "say \\"hi\\"\\n"
    """

    return '"' + "".join(_escape_char(char) for char in text) + '"'


def _escape_char(char: str) -> str:
    escaped = _ESCAPES.get(char)
    if escaped is not None:
        return escaped
    if char.isprintable():
        return char
    code = ord(char)
    if code < 0x80:
        return f"\\x{code:02x}"
    if code <= 0xFFFF:
        return f"\\u{code:04x}"
    return f"\\U{code:08x}"


def needs_quoting(value: str) -> bool:
    """Return ``True`` when *value* cannot appear bare on the right of ``=``.

    Examples
    --------
    >>> needs_quoting('target')
    False
    >>> needs_quoting('two words')
    True
    >>> needs_quoting('')
    True
    """

    if not value:
        return True
    return any(char.isspace() or char in '"=' or not char.isprintable() for char in value)


def format_pair(key: str, value: object) -> str:
    """Build a ``key=value`` token, quoting the value when required.

    Examples
    --------
    >>> format_pair('at', 'target')
    'at=target'
    >>> format_pair('at', 'load config')
    'at="load config"'
    """

    text = str(value)
    return f"{key}={quote(text) if needs_quoting(text) else text}"


def split_tokens(kv: str) -> tuple[str, ...]:
    """Split *kv* on whitespace while keeping double-quoted values intact.

    Examples
    --------
    >>> split_tokens('foo=bar  msg="a b" baz=qux')
    ('foo=bar', 'msg="a b"', 'baz=qux')
    >>> split_tokens('   ')
    ()
    """

    return tuple(_TOKEN.findall(kv))


def token_key(token: str) -> str | None:
    """Return the key part of *token* or ``None`` for opaque fragments.

    Examples
    --------
    >>> token_key('baz=qux')
    'baz'
    >>> token_key('opaque') is None
    True
    """

    key, sep, _ = token.partition("=")
    return key if sep else None


def set_token(tokens: Sequence[str], key: str, value: object) -> tuple[str, ...]:
    """Return a copy of *tokens* with the first ``key=`` token replaced in place.

    A new token is appended when no token carries *key*. The input sequence is
    never modified.

    Examples
    --------
    >>> set_token(('foo=bar', 'baz=qux'), 'foo', 'zap')
    ('foo=zap', 'baz=qux')
    >>> set_token(('foo=bar',), 'at', 'x')
    ('foo=bar', 'at=x')
    """

    token = format_pair(key, value)
    for index, existing in enumerate(tokens):
        if token_key(existing) == key:
            return (*tokens[:index], token, *tokens[index + 1 :])
    return (*tokens, token)


def sprintf(template: str, *args: Any) -> str:
    """Substitute *args* into *template* using printf-style verbs.

    Examples
    --------
    >>> sprintf('string=%q int=%d float=%0.2f', 'foo', 42, 3.14159)
    'string="foo" int=42 float=3.14'
    >>> sprintf('num=%d')
    'num=%!d(MISSING)'
    """

    rendered, _ = render_template(template, args)
    return rendered


def render_template(template: str, args: Sequence[Any]) -> tuple[str, list[str]]:
    """Render *template* and report the problems found along the way.

    Returns
    -------
    tuple[str, list[str]]
        The rendered text plus one human-readable entry per diagnostic marker
        that was embedded in it (empty when the template matched its
        arguments).

    Examples
    --------
    >>> render_template('%d%%', [7])
    ('7%', [])
    >>> render_template('%d', ['x'])
    ('%!d(str=x)', ['verb %d cannot format str'])
    >>> sprintf('ok=%v', True)
    'ok=true'
    """

    pieces: list[str] = []
    problems: list[str] = []
    position = 0
    consumed = 0
    for match in _DIRECTIVE.finditer(template):
        pieces.append(template[position : match.start()])
        position = match.end()
        verb = match.group("verb")
        if verb == "%":
            pieces.append("%")
            continue
        if verb is None:
            pieces.append("%!(NOVERB)")
            problems.append("template ends with a lone %")
            continue
        if consumed >= len(args):
            pieces.append(f"%!{verb}(MISSING)")
            problems.append(f"missing argument for %{verb}")
            continue
        value = args[consumed]
        consumed += 1
        spec = _spec(match)
        formatted = _format_value(spec, verb, value)
        if formatted is None:
            pieces.append(f"%!{verb}({_describe(value)})")
            problems.append(f"verb %{verb} cannot format {type(value).__name__}")
            continue
        pieces.append(formatted)
    pieces.append(template[position:])
    if consumed < len(args):
        surplus = args[consumed:]
        pieces.append(f"%!(EXTRA {', '.join(_describe(value) for value in surplus)})")
        problems.append(f"{len(surplus)} unused argument(s)")
    return "".join(pieces), problems


def _spec(match: re.Match[str]) -> str:
    precision = match.group("precision")
    return "%{flags}{width}{precision}".format(
        flags=match.group("flags"),
        width=match.group("width") or "",
        precision="" if precision is None else f".{precision or 0}",
    )


def _format_value(spec: str, verb: str, value: Any) -> str | None:
    """Format one argument or return ``None`` when *verb* cannot render it."""

    try:
        if verb in "sv":
            return (spec + "s") % (_plain(value),)
        if verb == "q":
            return (spec + "s") % (quote(str(_plain(value))),)
        if verb == "t":
            if not isinstance(value, bool):
                return None
            return (spec + "s") % (_plain(value),)
        if verb == "d":
            if not _is_integer(value):
                return None
            return (spec + "d") % value
        if verb in _FLOAT_VERBS:
            if not (_is_integer(value) or isinstance(value, float)):
                return None
            return (spec + verb) % value
        if verb in "xX" and isinstance(value, (str, bytes)):
            data = value.encode("utf-8") if isinstance(value, str) else value
            digits = data.hex()
            return (spec + "s") % (digits.upper() if verb == "X" else digits,)
        if verb in "xXo":
            if not _is_integer(value):
                return None
            return (spec + verb) % value
    except (TypeError, ValueError):
        return None
    return None


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _plain(value: Any) -> Any:
    """Return *value* with booleans spelled as lowercase ``true``/``false``."""

    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _describe(value: Any) -> str:
    return f"{type(value).__name__}={_plain(value)}"
