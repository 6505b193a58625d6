from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .runner import ConversionProgress, run_decode, run_encode, run_format, run_validate
from .toon.options import (
    DEFAULT_DELIMITER,
    DEFAULT_INDENT_WIDTH,
    DEFAULT_LENGTH_MARKER,
    EncodeOptions,
    ParseOptions,
)
from .utils.logging import render_summary

if TYPE_CHECKING:
    from .loaders.directory import SourceDocument

app = typer.Typer(
    name="tooncodec",
    help="Convert between JSON and TOON (Token-Oriented Object Notation).",
    add_completion=True,
)

console = Console(stderr=True)

DELIMITER_NAMES = {"comma": ",", "tab": "\t", "pipe": "|", "semicolon": ";"}


class RichConversionProgress(ConversionProgress):
    """Render an animated progress bar while converting a directory."""

    def __init__(self, console: Console) -> None:
        """Initialize the progress renderer.

        Args:
            console: Console used to display progress output.
        """
        self.console = console
        self._progress: Optional[Progress] = None
        self._task_id: Optional[TaskID] = None

    def start(self, total: int) -> None:
        """Start the animated progress bar.

        Args:
            total: Total number of documents to convert.
        """
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total} files"),
            TimeElapsedColumn(),
            console=self.console,
            transient=False,
        )
        self._progress.start()
        self._task_id = self._progress.add_task("Converting", total=total)

    def advance(self, document: "SourceDocument") -> None:
        """Advance the bar for a converted document.

        Args:
            document: Document that has just been converted.
        """
        if not self._progress or self._task_id is None:
            return

        self._progress.update(
            self._task_id, description=f"Converting {document.relative_path}"
        )
        self._progress.advance(self._task_id)

    def finish(self) -> None:
        """Stop rendering the progress bar."""
        if not self._progress:
            return

        self._progress.stop()
        self._progress = None
        self._task_id = None


def _resolve_delimiter(value: str) -> str:
    return DELIMITER_NAMES.get(value.lower(), value)


def _encode_options(delimiter: str, indent: int, length_marker: str) -> EncodeOptions:
    try:
        return EncodeOptions(
            delimiter=_resolve_delimiter(delimiter),
            indent_width=indent,
            length_marker=length_marker,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _parse_options(delimiter: str) -> ParseOptions:
    try:
        return ParseOptions(delimiter=_resolve_delimiter(delimiter))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _progress_for(path: Path) -> RichConversionProgress | None:
    return RichConversionProgress(console) if path.is_dir() else None


def _delimiter_option() -> Any:
    return typer.Option(
        DEFAULT_DELIMITER,
        "--delimiter",
        "-d",
        envvar="TOON_DELIMITER",
        help="Field delimiter: ',', '|', ';', a tab, or one of comma/pipe/semicolon/tab.",
    )


@app.command("encode")
def encode_command(
    input_path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=True,
        help="JSON file, or a directory containing *.json files.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write to this file (or directory) instead of stdout / alongside sources.",
    ),
    delimiter: str = _delimiter_option(),
    indent: int = typer.Option(
        DEFAULT_INDENT_WIDTH,
        "--indent",
        "-i",
        envvar="TOON_INDENT",
        help="Spaces per indentation level.",
    ),
    length_marker: str = typer.Option(
        DEFAULT_LENGTH_MARKER,
        "--length-marker",
        envvar="TOON_LENGTH_MARKER",
        help="Prefix for counts of arrays nested inside objects ('' to disable).",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Fail without writing when any value cannot be encoded faithfully.",
    ),
) -> None:
    """
    Encode JSON into TOON.

    Examples:
        tooncodec encode data.json
        tooncodec encode data.json -o data.toon
        tooncodec encode fixtures/ --delimiter pipe
    """
    options = _encode_options(delimiter, indent, length_marker)
    run_encode(
        input_path,
        output,
        options,
        strict=strict,
        progress=_progress_for(input_path),
    )


@app.command("decode")
def decode_command(
    input_path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=True,
        help="TOON file, or a directory containing *.toon files.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write to this file (or directory) instead of stdout / alongside sources.",
    ),
    delimiter: str = _delimiter_option(),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Fail without writing when parse warnings are encountered.",
    ),
) -> None:
    """
    Decode TOON into pretty-printed JSON.

    Example:
        tooncodec decode data.toon
    """
    run_decode(
        input_path,
        output,
        _parse_options(delimiter),
        strict=strict,
        progress=_progress_for(input_path),
    )


@app.command("validate")
def validate_command(
    input_path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="TOON file to check.",
    ),
    schema: Path = typer.Option(
        ...,
        "--schema",
        "-s",
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="JSON file with 'required' and 'properties' entries.",
    ),
    delimiter: str = _delimiter_option(),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with code 1 when parse warnings are present.",
    ),
) -> None:
    """
    Check a TOON document against a minimal schema.

    Checks (fails with code 1 on any schema error, or on parse warnings
    when ``--strict`` is set):
    - required top-level keys are present
    - present keys have the declared type
    """
    exit_code = run_validate(input_path, schema, _parse_options(delimiter), strict=strict)
    if exit_code:
        raise typer.Exit(code=exit_code)


@app.command("format")
def format_command(
    input_path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="TOON file to normalize.",
    ),
    write: bool = typer.Option(
        False,
        "--write",
        "-w",
        help="Rewrite the file in place instead of printing it.",
    ),
    delimiter: str = _delimiter_option(),
    indent: int = typer.Option(
        DEFAULT_INDENT_WIDTH,
        "--indent",
        "-i",
        envvar="TOON_INDENT",
        help="Spaces per indentation level.",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit non-zero when warnings occur while reading the file.",
    ),
) -> None:
    """
    Re-indent and re-quote a TOON document.

    Example:
        tooncodec format data.toon --write
    """
    logger = run_format(
        input_path,
        _encode_options(delimiter, indent, DEFAULT_LENGTH_MARKER),
        write=write,
    )
    if logger.has_warnings():
        console.print(render_summary(logger), markup=False)
    if strict and logger.has_warnings():
        raise typer.Exit(code=1)


def main() -> None:
    """Entry point for Python -m execution."""
    app()


if __name__ == "__main__":
    main()
