"""Quoting, escaping and scalar token rules.

Escaping and unescaping walk the text once, so a literal backslash followed
by a letter (``C:\\new``) never collides with the ``\\n`` escape.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal

from tooncodec.model.values import Bool, Float, Integer, Null, Scalar, String, Value
from tooncodec.toon.errors import QuoteMismatchError

QUOTE = '"'
BACKSLASH = "\\"
NULL_LITERAL = "null"
TRUE_LITERAL = "true"
FALSE_LITERAL = "false"
RESERVED_WORDS = frozenset({NULL_LITERAL, TRUE_LITERAL, FALSE_LITERAL})
STRUCTURAL_CHARS = frozenset(":{}[]")

_ESCAPES = {
    BACKSLASH: "\\\\",
    QUOTE: '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_UNESCAPES = {
    BACKSLASH: BACKSLASH,
    QUOTE: QUOTE,
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_NUMBER_LIKE_RE = re.compile(r"^-?\d+(\.\d+)?$", re.ASCII)
_INTEGER_RE = re.compile(r"^-?\d+$", re.ASCII)
_FLOAT_RE = re.compile(r"^-?\d+\.\d+$", re.ASCII)
_BARE_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\-]*$")


def escape(text: str) -> str:
    return "".join(_ESCAPES.get(char, char) for char in text)


def unescape(text: str) -> str:
    """Reverse :func:`escape`. Unknown escapes are kept verbatim."""

    result: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == BACKSLASH and index + 1 < len(text):
            following = text[index + 1]
            replacement = _UNESCAPES.get(following)
            if replacement is not None:
                result.append(replacement)
            else:
                result.append(char + following)
            index += 2
            continue
        result.append(char)
        index += 1
    return "".join(result)


def quote(text: str) -> str:
    return f"{QUOTE}{escape(text)}{QUOTE}"


def find_closing_quote(text: str, start: int) -> int | None:
    """Return the index of the quote closing the one at ``start``."""

    index = start + 1
    while index < len(text):
        char = text[index]
        if char == BACKSLASH:
            index += 2
            continue
        if char == QUOTE:
            return index
        index += 1
    return None


def unquote(token: str) -> str:
    """Return the string a quoted token stands for.

    Raises:
        QuoteMismatchError: If ``token`` is not exactly one quoted string.
    """

    if not token.startswith(QUOTE):
        raise QuoteMismatchError(f"expected a quoted string, got {token!r}")
    closing = find_closing_quote(token, 0)
    if closing is None:
        raise QuoteMismatchError(f"unterminated quoted string {token!r}")
    if closing != len(token) - 1:
        raise QuoteMismatchError(f"unexpected text after closing quote in {token!r}")
    return unescape(token[1:closing])


def needs_quoting(text: str, delimiter: str = ",") -> bool:
    """Return True when ``text`` cannot be written as a bare token."""

    if text == "" or text != text.strip():
        return True
    if delimiter in text:
        return True
    if any(char in STRUCTURAL_CHARS for char in text):
        return True
    if any(char in _ESCAPES for char in text):
        return True
    if _NUMBER_LIKE_RE.match(text):
        return True
    return text in RESERVED_WORDS


def format_string(text: str, delimiter: str = ",") -> str:
    return quote(text) if needs_quoting(text, delimiter) else text


def format_key(key: str) -> str:
    return key if _BARE_KEY_RE.match(key) else quote(key)


def parse_key(token: str) -> str:
    token = token.strip()
    if token.startswith(QUOTE):
        return unquote(token)
    return token


def format_float(number: float) -> str | None:
    """Plain decimal text for ``number``; None for NaN and infinities."""

    if not math.isfinite(number):
        return None
    text = repr(number)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if "." not in text:
        text = f"{text}.0"
    return text


def format_scalar(value: Value, delimiter: str = ",") -> str:
    """Render a null or scalar value as a single token."""

    if isinstance(value, Null):
        return NULL_LITERAL
    if isinstance(value, Bool):
        return TRUE_LITERAL if value.value else FALSE_LITERAL
    if isinstance(value, Integer):
        return str(value.value)
    if isinstance(value, Float):
        return format_float(value.value) or NULL_LITERAL
    if isinstance(value, Scalar):
        return format_string(str(value.value), delimiter)
    raise TypeError(f"{type(value).__name__} is not a scalar value")


def parse_scalar(token: str) -> Value:
    """Read a single token back into a value.

    Raises:
        QuoteMismatchError: If the token opens a quote it never closes.
    """

    token = token.strip()
    if token == "" or token == NULL_LITERAL:
        return Null()
    if token == TRUE_LITERAL:
        return Bool(True)
    if token == FALSE_LITERAL:
        return Bool(False)
    if _INTEGER_RE.match(token):
        return Integer(int(token))
    if _FLOAT_RE.match(token):
        return Float(float(token))
    if token.startswith(QUOTE):
        return String(unquote(token))
    return String(token)


__all__ = [
    "escape",
    "find_closing_quote",
    "format_float",
    "format_key",
    "format_scalar",
    "format_string",
    "needs_quoting",
    "parse_key",
    "parse_scalar",
    "quote",
    "unescape",
    "unquote",
]
