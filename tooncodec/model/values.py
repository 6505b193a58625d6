"""Tagged value model shared by the TOON encoder and parser.

Every piece of data the codec touches is one of the classes below. Arrays
carry a :class:`ArrayShape` so the encoder can match scalar arrays, tables and
unrepresentable mixtures exhaustively instead of probing element types while
it writes.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


class ArrayShape(Enum):
    """How an array can be written without ambiguity."""

    SCALAR = "scalar"
    TABLE = "table"
    UNREPRESENTABLE = "unrepresentable"


@dataclass(frozen=True)
class Value(ABC):
    """Base node of the value model."""

    kind: ClassVar[str]

    @abstractmethod
    def to_python(self) -> Any:
        """Return the plain Python equivalent of this value."""


@dataclass(frozen=True)
class Null(Value):
    """Absence of a value."""

    kind: ClassVar[str] = "null"

    def to_python(self) -> None:
        return None


@dataclass(frozen=True)
class Scalar(Value):
    """Marker base for single-token values."""

    value: Any

    def to_python(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Bool(Scalar):
    value: bool
    kind: ClassVar[str] = "boolean"


@dataclass(frozen=True)
class Integer(Scalar):
    value: int
    kind: ClassVar[str] = "integer"


@dataclass(frozen=True)
class Float(Scalar):
    value: float
    kind: ClassVar[str] = "float"

    @property
    def finite(self) -> bool:
        return math.isfinite(self.value)


@dataclass(frozen=True)
class String(Scalar):
    value: str
    kind: ClassVar[str] = "string"


@dataclass(frozen=True)
class Object(Value):
    """Ordered mapping of keys to values; insertion order is emission order."""

    fields: dict[str, Value] = field(default_factory=dict)
    kind: ClassVar[str] = "object"

    def to_python(self) -> dict[str, Any]:
        return {key: value.to_python() for key, value in self.fields.items()}


@dataclass(frozen=True)
class Array(Value):
    """Ordered sequence of values."""

    items: tuple[Value, ...] = field(default_factory=tuple)
    kind: ClassVar[str] = "array"

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self.items]

    @property
    def shape(self) -> ArrayShape:
        if all(isinstance(item, (Null, Scalar)) for item in self.items):
            return ArrayShape.SCALAR
        if not all(isinstance(item, Object) for item in self.items):
            return ArrayShape.UNREPRESENTABLE
        first_keys = set(self.items[0].fields)  # type: ignore[attr-defined]
        if not first_keys:
            return ArrayShape.UNREPRESENTABLE
        for item in self.items[1:]:
            if set(item.fields) != first_keys:  # type: ignore[attr-defined]
                return ArrayShape.UNREPRESENTABLE
        return ArrayShape.TABLE

    @property
    def columns(self) -> tuple[str, ...]:
        """Header columns for a table: the first row's key order."""

        if not self.items or not isinstance(self.items[0], Object):
            return ()
        return tuple(self.items[0].fields)


def from_python(data: Any) -> Value:
    """Convert plain Python data into the tagged value model.

    Args:
        data: JSON-like data built from dicts, lists, tuples and scalars.

    Returns:
        Value: The equivalent tagged value. Unknown objects are kept as their
        ``str()`` form.
    """

    if isinstance(data, Value):
        return data
    if data is None:
        return Null()
    if isinstance(data, bool):
        return Bool(data)
    if isinstance(data, int):
        return Integer(data)
    if isinstance(data, float):
        return Float(data)
    if isinstance(data, str):
        return String(data)
    if isinstance(data, Mapping):
        return Object({str(key): from_python(value) for key, value in data.items()})
    if isinstance(data, (list, tuple)):
        return Array(tuple(from_python(item) for item in data))
    return String(str(data))


def to_python(value: Value) -> Any:
    """Convert a tagged value back into plain Python data."""

    return value.to_python()


__all__ = [
    "Array",
    "ArrayShape",
    "Bool",
    "Float",
    "Integer",
    "Null",
    "Object",
    "Scalar",
    "String",
    "Value",
    "from_python",
    "to_python",
]
