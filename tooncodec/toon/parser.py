"""Indentation-driven TOON parser.

The parser walks significant (non-blank) lines with an explicit stack of
:class:`Frame` objects. Each frame remembers the indentation of the line that
opened it and the indentation its children settled on, which is how a line
that skips a level is detected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from tooncodec.model.values import Array, Null, Object, String, Value
from tooncodec.toon.errors import (
    QuoteMismatchError,
    StructuralError,
    ToonError,
    UnrecognizedLineError,
)
from tooncodec.toon.grammar import (
    ArrayHeader,
    KeyValue,
    ObjectKey,
    TableHeader,
    Unrecognized,
    classify_line,
    foreign_delimiter,
    split_delimited,
)
from tooncodec.toon.options import ParseOptions
from tooncodec.toon.quoting import parse_scalar
from tooncodec.utils.logging import NullLogger, WarningLogger

EMPTY_OBJECT_TOKEN = "{}"


@dataclass(frozen=True)
class SourceLine:
    """A significant line with its 1-based number and indentation width."""

    number: int
    indent: int
    content: str


@dataclass
class Frame:
    """Container currently receiving keys, and the indentation it owns."""

    container: Object
    indent: int
    key: str | None = None
    line: int | None = None
    child_indent: int | None = None


@dataclass
class ParserState:
    """Stack of open frames; depths strictly increase from the root up."""

    frames: List[Frame] = field(default_factory=list)

    @classmethod
    def with_root(cls, root: Object) -> "ParserState":
        return cls(frames=[Frame(container=root, indent=-1)])

    @property
    def top(self) -> Frame:
        return self.frames[-1]

    def unwind(self, indent: int) -> list[Frame]:
        """Close every frame opened at ``indent`` or deeper."""

        closed: list[Frame] = []
        while len(self.frames) > 1 and self.top.indent >= indent:
            closed.append(self.frames.pop())
        return closed

    def push(self, frame: Frame) -> None:
        if frame.indent <= self.top.indent:
            raise StructuralError(
                f"frame at indent {frame.indent} cannot nest under indent {self.top.indent}",
                line=frame.line,
            )
        self.frames.append(frame)

    def depths(self) -> list[int]:
        return [frame.indent for frame in self.frames]


def read_lines(text: str) -> list[SourceLine]:
    """Split on ``\\n`` only; other Unicode line breaks are string content."""

    lines: list[SourceLine] = []
    for number, raw in enumerate(text.split("\n"), start=1):
        raw = raw.removesuffix("\r")
        content = raw.strip()
        if not content:
            continue
        lines.append(SourceLine(number=number, indent=len(raw) - len(raw.lstrip()), content=content))
    return lines


class ToonParser:
    """Reconstruct a value from TOON text.

    Problems are reported through ``logger`` and the affected node becomes
    ``Null`` while its siblings carry on; with ``strict`` options the first
    problem is raised instead.
    """

    def __init__(
        self,
        text: str,
        options: ParseOptions | None = None,
        *,
        source_file: str = "",
        logger: WarningLogger | None = None,
    ) -> None:
        self.options = options or ParseOptions()
        self.source_file = source_file
        self.logger = logger or NullLogger()
        self.lines: Sequence[SourceLine] = read_lines(text)
        self.root = Object()
        self.state = ParserState.with_root(self.root)

    def parse(self) -> Value:
        if not self.lines:
            return self.root

        first = self.lines[0]
        kind = classify_line(first.content, self.options.delimiter)
        if isinstance(kind, (TableHeader, ArrayHeader)) and kind.key is None:
            return self._parse_root_array(kind, first)
        if isinstance(kind, Unrecognized) and len(self.lines) == 1:
            return self._scalar(first.content, first)

        index = 0
        while index < len(self.lines):
            index = self._step(index)
        return self.root

    def _parse_root_array(self, kind: TableHeader | ArrayHeader, line: SourceLine) -> Value:
        value, index = self._read_block(kind, line, 0)
        if index < len(self.lines):
            trailing = self.lines[index]
            self._report(
                UnrecognizedLineError(
                    "content after the root array is ignored", line=trailing.number
                ),
                "Document",
            )
        return value

    def _step(self, index: int) -> int:
        line = self.lines[index]
        self.state.unwind(line.indent)
        frame = self.state.top
        if frame.child_indent is None:
            frame.child_indent = line.indent
        elif line.indent != frame.child_indent:
            return self._recover_indentation(line, index, frame)

        kind = classify_line(line.content, self.options.delimiter)
        if isinstance(kind, (TableHeader, ArrayHeader)):
            if kind.key is None:
                self._report(
                    UnrecognizedLineError("array header without a key", line=line.number),
                    "Array",
                )
                return self._skip_block(index + 1, line.indent)
            value, next_index = self._read_block(kind, line, index)
            frame.container.fields[kind.key] = value
            return next_index

        if isinstance(kind, ObjectKey):
            if self._has_children(index):
                child = Object()
                frame.container.fields[kind.key] = child
                self.state.push(
                    Frame(container=child, indent=line.indent, key=kind.key, line=line.number)
                )
            else:
                frame.container.fields[kind.key] = Null()
            return index + 1

        if isinstance(kind, KeyValue):
            if kind.raw_value == EMPTY_OBJECT_TOKEN:
                frame.container.fields[kind.key] = Object()
            else:
                frame.container.fields[kind.key] = self._scalar(kind.raw_value, line)
            return index + 1

        self._report(
            UnrecognizedLineError(f"{kind.reason}: {kind.text!r}", line=line.number),
            "Line",
        )
        return self._skip_block(index + 1, line.indent)

    def _recover_indentation(self, line: SourceLine, index: int, frame: Frame) -> int:
        self._report(
            StructuralError(
                f"unexpected indentation {line.indent}; expected {frame.child_indent}",
                line=line.number,
            ),
            "Indentation",
        )
        kind = classify_line(line.content, self.options.delimiter)
        key = getattr(kind, "key", None)
        if key is not None:
            frame.container.fields[key] = Null()
        return self._skip_block(index + 1, line.indent)

    def _read_block(
        self, kind: TableHeader | ArrayHeader, line: SourceLine, index: int
    ) -> Tuple[Value, int]:
        if isinstance(kind, TableHeader):
            self._check_header_delimiter(kind, line)
            items, cursor = self._read_rows(kind, line, index + 1)
            element_type = "Table"
        elif kind.inline:
            items = [
                self._scalar(token, line)
                for token in split_delimited(kind.inline, self.options.delimiter)
            ]
            cursor = index + 1
            element_type = "Array"
        else:
            items, cursor = self._read_items(kind, line, index + 1)
            element_type = "Array"

        extra = 0
        while cursor < len(self.lines) and self.lines[cursor].indent > line.indent:
            extra += 1
            cursor += 1
        if len(items) != kind.count or extra:
            label = kind.key if kind.key is not None else "root array"
            unit = "rows" if isinstance(kind, TableHeader) else "items"
            self._report(
                StructuralError(
                    f"{label} declares {kind.count} {unit} but {len(items) + extra} found",
                    line=line.number,
                ),
                element_type,
            )
            return Null(), cursor
        return Array(tuple(items)), cursor

    def _check_header_delimiter(self, header: TableHeader, line: SourceLine) -> None:
        candidate = foreign_delimiter(header.raw_fields, self.options.delimiter)
        if candidate is None:
            return
        self._report(
            StructuralError(
                f"table header {{{header.raw_fields}}} is split by {candidate!r}, not "
                f"{self.options.delimiter!r}; parse with delimiter={candidate!r}",
                line=line.number,
            ),
            "Table",
        )

    def _read_rows(
        self, header: TableHeader, line: SourceLine, cursor: int
    ) -> Tuple[List[Value], int]:
        rows: List[Value] = []
        while (
            cursor < len(self.lines)
            and len(rows) < header.count
            and self.lines[cursor].indent > line.indent
        ):
            rows.append(self._read_row(header, self.lines[cursor]))
            cursor += 1
        return rows, cursor

    def _read_row(self, header: TableHeader, line: SourceLine) -> Object:
        tokens = split_delimited(line.content, self.options.delimiter)
        if len(tokens) != len(header.fields):
            self._report(
                StructuralError(
                    f"row has {len(tokens)} fields; header declares {len(header.fields)}",
                    line=line.number,
                ),
                "Table",
            )
        row = Object()
        for position, name in enumerate(header.fields):
            token = tokens[position] if position < len(tokens) else ""
            row.fields[name] = self._scalar(token, line)
        return row

    def _read_items(
        self, header: ArrayHeader, line: SourceLine, cursor: int
    ) -> Tuple[List[Value], int]:
        items: List[Value] = []
        while (
            cursor < len(self.lines)
            and len(items) < header.count
            and self.lines[cursor].indent > line.indent
        ):
            items.append(self._scalar(self.lines[cursor].content, self.lines[cursor]))
            cursor += 1
        return items, cursor

    def _has_children(self, index: int) -> bool:
        following = index + 1
        return following < len(self.lines) and self.lines[following].indent > self.lines[index].indent

    def _skip_block(self, cursor: int, indent: int) -> int:
        while cursor < len(self.lines) and self.lines[cursor].indent > indent:
            cursor += 1
        return cursor

    def _scalar(self, token: str, line: SourceLine) -> Value:
        try:
            return parse_scalar(token)
        except QuoteMismatchError as exc:
            exc.line = line.number
            self._report(exc, "Scalar")
            return String(token.strip())

    def _report(self, error: ToonError, element_type: str) -> None:
        if self.options.strict:
            raise error
        self.logger.warn(
            filename=self.source_file,
            line=error.line,
            element_type=element_type,
            message=error.message,
            code=error.code,
        )


def parse_value(
    text: str,
    options: ParseOptions | None = None,
    *,
    source_file: str = "",
    logger: WarningLogger | None = None,
) -> Value:
    """Parse TOON text into the tagged value model."""

    return ToonParser(text, options, source_file=source_file, logger=logger).parse()


__all__ = ["Frame", "ParserState", "SourceLine", "ToonParser", "parse_value", "read_lines"]
