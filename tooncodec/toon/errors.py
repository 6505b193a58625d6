"""Exceptions raised by the TOON codec."""

from __future__ import annotations


class ToonError(ValueError):
    """Base error for TOON encoding and parsing problems.

    Attributes:
        line: 1-based source line the problem was found on, when known.
        code: Key into ``WARN_CODES`` used when the error is logged instead
            of raised.
    """

    code = "structural-error"

    def __init__(self, message: str, *, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


class StructuralError(ToonError):
    """Indentation skipped a level or a declared count did not match."""


class UnrecognizedLineError(StructuralError):
    """A line matched none of the grammar rules."""

    code = "unrecognized-line"


class QuoteMismatchError(ToonError):
    """A quoted token has no matching closing quote."""

    code = "quote-mismatch"


class UnrepresentableShapeError(ToonError):
    """A value has no faithful TOON form, such as a mixed array or a NaN."""

    code = "unrepresentable-shape"


__all__ = [
    "QuoteMismatchError",
    "StructuralError",
    "ToonError",
    "UnrecognizedLineError",
    "UnrepresentableShapeError",
]
