"""Line classification for TOON documents.

Each stripped line is matched against :data:`LINE_RULES` in order and the
first rule that accepts it decides its kind. Keeping the rules in one tuple
makes their priority explicit: a table header is also a line that ends in a
colon, so it must be tried before the object-key rule.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, ClassVar

from tooncodec.toon.errors import QuoteMismatchError
from tooncodec.toon.options import ALLOWED_DELIMITERS
from tooncodec.toon.quoting import BACKSLASH, QUOTE, find_closing_quote, parse_key, unquote

_BARE_KEY_PREFIX_RE = re.compile(r"^[^:\[]*")
_COUNT_RE = re.compile(r"^\[(?P<marker>[^\d\]]*)(?P<count>\d+)\]", re.ASCII)


@dataclass(frozen=True)
class KeyToken:
    """A line split into its leading key and the text after it."""

    key: str | None
    rest: str
    text: str
    quoted: bool = False


@dataclass(frozen=True)
class TableHeader:
    """``key[count]{f1,f2}:`` announcing ``count`` delimited rows."""

    key: str | None
    count: int
    fields: tuple[str, ...]
    marker: str = ""
    raw_fields: str = field(default="", compare=False)
    rule: ClassVar[str] = "table-header"


@dataclass(frozen=True)
class ArrayHeader:
    """``key[count]:`` with inline values, or with one value per deeper line."""

    key: str | None
    count: int
    inline: str = ""
    marker: str = ""
    rule: ClassVar[str] = "array-header"


@dataclass(frozen=True)
class ObjectKey:
    """``key:`` opening a nested object (or null when nothing is nested)."""

    key: str
    rule: ClassVar[str] = "object-key"


@dataclass(frozen=True)
class KeyValue:
    """``key: value`` holding a single scalar token."""

    key: str
    raw_value: str
    rule: ClassVar[str] = "key-value"


@dataclass(frozen=True)
class Unrecognized:
    """Line matching no rule."""

    text: str
    reason: str = "line matches no grammar rule"
    rule: ClassVar[str] = "unrecognized"


LineKind = TableHeader | ArrayHeader | ObjectKey | KeyValue | Unrecognized


@dataclass(frozen=True)
class LineRule:
    """Named grammar rule; ``match`` returns None when the rule does not apply."""

    name: str
    match: Callable[[KeyToken, str], LineKind | None]


@dataclass(frozen=True)
class _Header:
    marker: str
    count: int
    fields: tuple[str, ...] | None
    tail: str
    raw_fields: str = ""


def split_delimited(text: str, delimiter: str = ",") -> list[str]:
    """Split on ``delimiter`` outside of quoted sections.

    Backslash escapes inside quotes are honoured, so ``"a\\",b"`` stays one
    token. An unterminated quote swallows the rest of the line into the last
    token, which the scalar reader then reports.
    """

    if not text.strip():
        return []
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False
    index = 0
    while index < len(text):
        char = text[index]
        if in_quotes and char == BACKSLASH and index + 1 < len(text):
            current.append(text[index : index + 2])
            index += 2
            continue
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            tokens.append("".join(current).strip())
            current = []
            index += 1
            continue
        current.append(char)
        index += 1
    tokens.append("".join(current).strip())
    return tokens


def find_unquoted(text: str, target: str, start: int = 0) -> int | None:
    index = start
    while index < len(text):
        char = text[index]
        if char == QUOTE:
            closing = find_closing_quote(text, index)
            if closing is None:
                return None
            index = closing + 1
            continue
        if char == target:
            return index
        index += 1
    return None


def foreign_delimiter(text: str, delimiter: str) -> str | None:
    """Return another allowed delimiter that splits ``text`` when ``delimiter`` does not."""

    if not text or find_unquoted(text, delimiter) is not None:
        return None
    for candidate in ALLOWED_DELIMITERS:
        if candidate != delimiter and find_unquoted(text, candidate) is not None:
            return candidate
    return None


def split_key(text: str) -> KeyToken | None:
    """Separate the leading key of a stripped line.

    Returns:
        KeyToken | None: None when a quoted key is never closed.
    """

    if text.startswith(QUOTE):
        closing = find_closing_quote(text, 0)
        if closing is None:
            return None
        return KeyToken(
            key=unquote(text[: closing + 1]),
            rest=text[closing + 1 :],
            text=text,
            quoted=True,
        )
    match = _BARE_KEY_PREFIX_RE.match(text)
    prefix = match.group(0) if match else ""
    key = prefix.strip()
    return KeyToken(key=key or None, rest=text[len(prefix) :], text=text)


def _parse_header(rest: str, delimiter: str) -> _Header | None:
    match = _COUNT_RE.match(rest)
    if not match:
        return None
    position = match.end()
    fields: tuple[str, ...] | None = None
    raw_fields = ""
    if rest[position : position + 1] == "{":
        closing = find_unquoted(rest, "}", position + 1)
        if closing is None:
            return None
        raw_fields = rest[position + 1 : closing]
        try:
            fields = tuple(parse_key(token) for token in split_delimited(raw_fields, delimiter))
        except QuoteMismatchError:
            return None
        position = closing + 1
    if rest[position : position + 1] != ":":
        return None
    return _Header(
        marker=match.group("marker"),
        count=int(match.group("count")),
        fields=fields,
        tail=rest[position + 1 :].strip(),
        raw_fields=raw_fields,
    )


def _match_table_header(token: KeyToken, delimiter: str) -> LineKind | None:
    header = _parse_header(token.rest, delimiter)
    if header is None or header.fields is None or header.tail:
        return None
    return TableHeader(
        key=token.key,
        count=header.count,
        fields=header.fields,
        marker=header.marker,
        raw_fields=header.raw_fields,
    )


def _match_array_header(token: KeyToken, delimiter: str) -> LineKind | None:
    header = _parse_header(token.rest, delimiter)
    if header is None or header.fields is not None:
        return None
    return ArrayHeader(
        key=token.key, count=header.count, inline=header.tail, marker=header.marker
    )


def _match_object_key(token: KeyToken, delimiter: str) -> LineKind | None:
    if token.key is None and not token.quoted:
        return None
    if token.rest.strip() != ":":
        return None
    return ObjectKey(key=token.key or "")


def _match_key_value(token: KeyToken, delimiter: str) -> LineKind | None:
    rest = token.rest.lstrip()
    if rest.startswith(":") and (token.key is not None or token.quoted):
        value = rest[1:].strip()
        if value:
            return KeyValue(key=token.key or "", raw_value=value)
        return None
    if token.quoted or ":" not in token.text:
        return None
    key, _, value = token.text.partition(":")
    if not key.strip() or not value.strip():
        return None
    return KeyValue(key=key.strip(), raw_value=value.strip())


LINE_RULES: tuple[LineRule, ...] = (
    LineRule("table-header", _match_table_header),
    LineRule("array-header", _match_array_header),
    LineRule("object-key", _match_object_key),
    LineRule("key-value", _match_key_value),
)


def classify_line(text: str, delimiter: str = ",") -> LineKind:
    """Classify one line of TOON text.

    Args:
        text: The line; surrounding whitespace is ignored.
        delimiter: Active field delimiter, used for table header fields.

    Returns:
        LineKind: The first matching rule's result, or ``Unrecognized``.
    """

    stripped = text.strip()
    token = split_key(stripped)
    if token is None:
        return Unrecognized(stripped, reason="unterminated quoted key")
    for rule in LINE_RULES:
        kind = rule.match(token, delimiter)
        if kind is not None:
            return kind
    return Unrecognized(stripped)


__all__ = [
    "ArrayHeader",
    "KeyToken",
    "KeyValue",
    "LINE_RULES",
    "LineKind",
    "LineRule",
    "ObjectKey",
    "TableHeader",
    "Unrecognized",
    "classify_line",
    "find_unquoted",
    "foreign_delimiter",
    "split_delimited",
    "split_key",
]
