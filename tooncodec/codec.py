"""Public entry points of the TOON codec.

Collaborators only need :func:`encode` and :func:`parse`; both accept plain
Python data and are pure, synchronous and safe to call from any thread.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tooncodec.model.values import Value, from_python
from tooncodec.toon.encoder import encode_value
from tooncodec.toon.options import EncodeOptions, ParseOptions
from tooncodec.toon.parser import parse_value as _parse_value
from tooncodec.toon.schema import SchemaValidationResult, check_schema, validate
from tooncodec.utils.logging import WarningLogger
from tooncodec.utils.savings import estimate_savings


def encode(
    value: Any,
    options: EncodeOptions | Mapping[str, Any] | None = None,
    *,
    logger: WarningLogger | None = None,
    source_file: str = "",
) -> str:
    """Encode plain Python data (or a tagged ``Value``) as TOON text.

    Arrays that mix element shapes are written with a lossy fallback and a
    warning on ``logger``; pass ``{"strict": True}`` to raise instead.
    """

    return encode_value(
        from_python(value),
        EncodeOptions.coerce(options),
        logger=logger,
        source_file=source_file,
    )


def parse_value(
    text: str,
    options: ParseOptions | Mapping[str, Any] | None = None,
    *,
    source_file: str = "",
    logger: WarningLogger | None = None,
) -> Value:
    """Parse TOON text into the tagged value model."""

    if not isinstance(text, str):
        raise TypeError(f"expected TOON text, got {type(text).__name__}")
    return _parse_value(
        text, ParseOptions.coerce(options), source_file=source_file, logger=logger
    )


def parse(
    text: str,
    options: ParseOptions | Mapping[str, Any] | None = None,
    *,
    source_file: str = "",
    logger: WarningLogger | None = None,
) -> Any:
    """Parse TOON text into plain Python data.

    Recoverable problems (bad indentation, row-count mismatches, unterminated
    quotes) are logged and the affected node becomes ``None``.

    The delimiter is not stored in the text: pass the one used to encode.
    A table header split by a different allowed delimiter is reported.
    """

    return parse_value(text, options, source_file=source_file, logger=logger).to_python()


def validate_text(
    text: str,
    schema: Mapping[str, Any],
    options: ParseOptions | Mapping[str, Any] | None = None,
) -> SchemaValidationResult:
    """Parse ``text`` and check the result against ``schema``."""

    return check_schema(parse_value(text, options), schema)


def normalize(
    text: str,
    options: EncodeOptions | Mapping[str, Any] | None = None,
    *,
    logger: WarningLogger | None = None,
    source_file: str = "",
) -> str:
    """Re-encode TOON text with consistent indentation and quoting."""

    encode_options = EncodeOptions.coerce(options)
    value = parse_value(
        text,
        ParseOptions(delimiter=encode_options.delimiter, strict=encode_options.strict),
        source_file=source_file,
        logger=logger,
    )
    return encode_value(value, encode_options, logger=logger, source_file=source_file)


__all__ = [
    "check_schema",
    "encode",
    "estimate_savings",
    "normalize",
    "parse",
    "parse_value",
    "validate",
    "validate_text",
]
