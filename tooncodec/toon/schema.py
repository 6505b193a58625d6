"""Minimal structural schema checks for decoded values.

Only two schema keys are understood: ``required`` (top-level keys that must
be present) and ``properties`` (``{key: {"type": name}}`` for present keys).
This is advisory and nowhere near JSON Schema.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from tooncodec.model.values import Value


@dataclass(frozen=True)
class SchemaValidationError:
    """One field that failed the schema check."""

    field: str
    reason: str

    def format(self) -> str:
        return f"{self.field}: {self.reason}"


@dataclass(frozen=True)
class SchemaValidationResult:
    """Outcome of :func:`check_schema`; falsy when any check failed."""

    errors: tuple[SchemaValidationError, ...] = ()

    def __bool__(self) -> bool:
        return not self.errors

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def fields(self) -> list[str]:
        return [error.field for error in self.errors]


def type_name(value: Any) -> str:
    """Runtime type name used when comparing against ``properties``."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def _matches(expected: str, value: Any) -> bool:
    actual = type_name(value)
    if expected == "integer":
        return actual == "number" and isinstance(value, int)
    return actual == expected


def check_schema(value: Any, schema: Mapping[str, Any]) -> SchemaValidationResult:
    """Check ``value`` against a minimal schema.

    Args:
        value: Decoded data (plain Python or a tagged ``Value``).
        schema: Mapping with optional ``required`` and ``properties`` keys.

    Returns:
        SchemaValidationResult: Falsy with the offending field names when the
        value does not conform. Nothing is raised.
    """

    data = value.to_python() if isinstance(value, Value) else value
    errors: list[SchemaValidationError] = []
    required = list(schema.get("required") or [])
    properties = schema.get("properties") or {}

    if not isinstance(data, Mapping):
        if required or properties:
            errors.append(
                SchemaValidationError(field="$", reason=f"expected object, got {type_name(data)}")
            )
        return SchemaValidationResult(tuple(errors))

    for key in required:
        if key not in data:
            errors.append(SchemaValidationError(field=key, reason="required key is missing"))

    for key, rule in properties.items():
        if key not in data or not isinstance(rule, Mapping):
            continue
        expected = rule.get("type")
        if expected is None:
            continue
        if not _matches(expected, data[key]):
            errors.append(
                SchemaValidationError(
                    field=key,
                    reason=f"expected {expected}, got {type_name(data[key])}",
                )
            )
    return SchemaValidationResult(tuple(errors))


def validate(value: Any, schema: Mapping[str, Any]) -> bool:
    return bool(check_schema(value, schema))


__all__ = [
    "SchemaValidationError",
    "SchemaValidationResult",
    "check_schema",
    "type_name",
    "validate",
]
