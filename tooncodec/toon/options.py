"""Encoder and parser configuration."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

ALLOWED_DELIMITERS = (",", "|", "\t", ";")
DEFAULT_DELIMITER = ","
DEFAULT_INDENT_WIDTH = 2
DEFAULT_LENGTH_MARKER = "#"

_LENGTH_MARKER_RE = re.compile(r"^[^\d\s\[\]{}:\"\\]*$", re.ASCII)

# Accepted spellings when options arrive as a plain mapping.
_ALIASES = {
    "indent": "indent_width",
    "indentWidth": "indent_width",
    "lengthMarker": "length_marker",
}


def _normalize_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {_ALIASES.get(key, key): value for key, value in raw.items()}


def _check_delimiter(delimiter: str) -> None:
    if delimiter not in ALLOWED_DELIMITERS:
        allowed = ", ".join(repr(item) for item in ALLOWED_DELIMITERS)
        raise ValueError(f"Unsupported delimiter {delimiter!r}; expected one of {allowed}")


@dataclass(frozen=True)
class EncodeOptions:
    """Settings that control how values are written.

    Attributes:
        delimiter: Separator used in inline arrays, table headers and rows.
        indent_width: Spaces per nesting level.
        length_marker: Prefix written inside the brackets of counts that
            belong to nested objects, e.g. ``tags[#3]``.
        strict: Raise instead of falling back when a value cannot be
            written faithfully.
    """

    delimiter: str = DEFAULT_DELIMITER
    indent_width: int = DEFAULT_INDENT_WIDTH
    length_marker: str = DEFAULT_LENGTH_MARKER
    strict: bool = False

    def __post_init__(self) -> None:
        _check_delimiter(self.delimiter)
        if self.indent_width < 1:
            raise ValueError("indent_width must be at least 1")
        if not _LENGTH_MARKER_RE.match(self.length_marker):
            raise ValueError(f"Invalid length marker {self.length_marker!r}")

    @classmethod
    def coerce(cls, options: "EncodeOptions | Mapping[str, Any] | None") -> "EncodeOptions":
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        known = {item.name for item in fields(cls)}
        values = _normalize_keys(options)
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown encode option(s): {', '.join(unknown)}")
        return cls(**values)


@dataclass(frozen=True)
class ParseOptions:
    """Settings for reading TOON text."""

    delimiter: str = DEFAULT_DELIMITER
    strict: bool = False

    def __post_init__(self) -> None:
        _check_delimiter(self.delimiter)

    @classmethod
    def coerce(cls, options: "ParseOptions | Mapping[str, Any] | None") -> "ParseOptions":
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        known = {item.name for item in fields(cls)}
        values = _normalize_keys(options)
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown parse option(s): {', '.join(unknown)}")
        return cls(**values)


__all__ = [
    "ALLOWED_DELIMITERS",
    "DEFAULT_DELIMITER",
    "DEFAULT_INDENT_WIDTH",
    "DEFAULT_LENGTH_MARKER",
    "EncodeOptions",
    "ParseOptions",
]
