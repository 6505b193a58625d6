"""Utilities for converting tagged values into TOON text."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import List

from tooncodec.model.values import Array, ArrayShape, Float, Null, Object, Scalar, String, Value
from tooncodec.toon.errors import UnrepresentableShapeError
from tooncodec.toon.options import EncodeOptions
from tooncodec.toon.quoting import format_key, format_scalar
from tooncodec.utils.logging import NullLogger, WarningLogger


def encode_value(
    value: Value,
    options: EncodeOptions | None = None,
    *,
    logger: WarningLogger | None = None,
    source_file: str = "",
) -> str:
    """Render a tagged value as TOON text.

    Args:
        value: Root value to encode.
        options: Delimiter, indentation and length-marker settings.
        logger: Receives a warning for every lossy fallback.
        source_file: Name reported alongside warnings.

    Returns:
        str: TOON text without a trailing newline.

    Raises:
        UnrepresentableShapeError: In strict mode, when an array mixes
            element shapes or a table cell holds a nested value.
    """

    emitter = _Emitter(
        options=options or EncodeOptions(),
        logger=logger or NullLogger(),
        source_file=source_file,
    )
    emitter.emit_root(value)
    return "\n".join(emitter.lines)


@dataclass
class _Emitter:
    options: EncodeOptions
    logger: WarningLogger
    source_file: str
    lines: List[str] = field(default_factory=list)

    def emit_root(self, value: Value) -> None:
        if isinstance(value, Object):
            self._emit_object(value, 0)
            return
        if isinstance(value, Array):
            self._emit_array("", value, 0, path="$")
            return
        self.lines.append(self._scalar_token(value, "$"))

    def _indent(self, depth: int) -> str:
        return " " * (self.options.indent_width * depth)

    def _count(self, size: int, *, nested: bool) -> str:
        marker = self.options.length_marker if nested else ""
        return f"[{marker}{size}]"

    def _emit_object(self, obj: Object, depth: int, path: str = "$") -> None:
        prefix = self._indent(depth)
        for key, value in obj.fields.items():
            label = f"{prefix}{format_key(key)}"
            child_path = f"{path}.{key}"
            if isinstance(value, Null):
                self.lines.append(f"{label}:")
            elif isinstance(value, Object):
                if not value.fields:
                    self.lines.append(f"{label}: {{}}")
                    continue
                self.lines.append(f"{label}:")
                self._emit_object(value, depth + 1, child_path)
            elif isinstance(value, Array):
                self._emit_array(label, value, depth, path=child_path, nested=depth > 0)
            else:
                self.lines.append(f"{label}: {self._scalar_token(value, child_path)}")

    def _emit_array(
        self,
        label: str,
        array: Array,
        depth: int,
        *,
        path: str,
        nested: bool = False,
    ) -> None:
        count = self._count(len(array.items), nested=nested)
        shape = array.shape
        if shape is ArrayShape.TABLE:
            self._emit_table(label, array, depth, count, path)
            return
        if shape is ArrayShape.UNREPRESENTABLE:
            self._report(f"array at {path} mixes element shapes; elements written as strings")
        tokens = [
            self._scalar_token(item, f"{path}[{index}]")
            for index, item in enumerate(array.items)
        ]
        header = f"{label}{count}:"
        if tokens:
            header = f"{header} {self.options.delimiter.join(tokens)}"
        self.lines.append(header)

    def _emit_table(self, label: str, array: Array, depth: int, count: str, path: str) -> None:
        delimiter = self.options.delimiter
        columns = array.columns
        header_fields = delimiter.join(format_key(column) for column in columns)
        self.lines.append(f"{label}{count}{{{header_fields}}}:")
        row_prefix = self._indent(depth + 1)
        for index, row in enumerate(array.items):
            cells = []
            for column in columns:
                cell = row.fields.get(column, Null())
                if not isinstance(cell, (Null, Scalar)):
                    self._report(
                        f"table cell {path}[{index}].{column} is not a scalar; written as a string"
                    )
                cells.append(self._scalar_token(cell, f"{path}[{index}].{column}"))
            self.lines.append(f"{row_prefix}{delimiter.join(cells)}")

    def _scalar_token(self, value: Value, path: str) -> str:
        if isinstance(value, Float) and not value.finite:
            self._report(f"float at {path} is not finite; written as null", "Scalar")
        if isinstance(value, (Null, Scalar)):
            return format_scalar(value, self.options.delimiter)
        return format_scalar(_stringify(value), self.options.delimiter)

    def _report(self, message: str, element_type: str = "Array") -> None:
        if self.options.strict:
            raise UnrepresentableShapeError(message)
        self.logger.warn(
            filename=self.source_file,
            line=None,
            element_type=element_type,
            message=message,
            code=UnrepresentableShapeError.code,
        )


def _stringify(value: Value) -> String:
    return String(json.dumps(value.to_python(), separators=(",", ":"), ensure_ascii=False))


__all__ = ["encode_value"]
