"""Entry points for running tooncodec file operations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from .codec import encode, estimate_savings, normalize, parse
from .loaders.directory import SourceDocument, SourceTree, load_directory, load_file
from .toon.options import EncodeOptions, ParseOptions
from .toon.schema import check_schema
from .utils.logging import WarningLogger

JSON_SUFFIX = ".json"
TOON_SUFFIX = ".toon"


class ConversionProgress(Protocol):
    """Reporting hook for directory conversions."""

    def start(self, total: int) -> None:
        """Begin tracking conversion progress.

        Args:
            total: Total number of documents that will be converted.
        """

    def advance(self, document: SourceDocument) -> None:
        """Advance the progress tracker when a document is converted.

        Args:
            document: Document that has just been converted.
        """

    def finish(self) -> None:
        """Finalize progress tracking."""


@dataclass
class ConversionResult:
    """Converted text for one source document."""

    document: SourceDocument
    output: str
    savings: int | None = None


def run_encode(
    input_path: Path,
    output_path: Optional[Path] = None,
    options: EncodeOptions | None = None,
    *,
    strict: bool = False,
    progress: ConversionProgress | None = None,
    logger: WarningLogger | None = None,
) -> WarningLogger:
    """Convert JSON files to TOON.

    Args:
        input_path: A JSON file, or a directory scanned for ``*.json`` files.
        output_path: Destination file (or directory when converting a
            directory). A single file is printed when omitted; directory
            conversions write ``*.toon`` files next to their sources.
        options: Encoder settings.
        strict: When True, abort before writing anything if warnings were
            collected.
        progress: Optional reporter for directory conversions.
        logger: Optional warning logger to reuse.

    Raises:
        SystemExit: If ``strict`` is True and warnings were collected.

    Returns:
        WarningLogger: Warnings gathered while converting.
    """

    encode_options = options or EncodeOptions()

    def _encode(document: SourceDocument, active_logger: WarningLogger) -> ConversionResult | None:
        try:
            data = json.loads(document.content)
        except json.JSONDecodeError as exc:
            active_logger.warn(
                filename=document.relative_path,
                line=exc.lineno,
                element_type="Document",
                message=f"Invalid JSON: {exc.msg}",
                code="file-io-warning",
            )
            return None
        text = encode(
            data,
            encode_options,
            logger=active_logger,
            source_file=document.relative_path,
        )
        return ConversionResult(
            document=document, output=text, savings=estimate_savings(text, data)
        )

    return _run_conversion(
        input_path,
        output_path,
        source_suffix=JSON_SUFFIX,
        target_suffix=TOON_SUFFIX,
        convert=_encode,
        strict=strict,
        progress=progress,
        logger=logger,
    )


def run_decode(
    input_path: Path,
    output_path: Optional[Path] = None,
    options: ParseOptions | None = None,
    *,
    strict: bool = False,
    progress: ConversionProgress | None = None,
    logger: WarningLogger | None = None,
) -> WarningLogger:
    """Convert TOON files to pretty-printed JSON.

    Mirrors :func:`run_encode`, scanning for ``*.toon`` files and writing
    ``*.json`` files.
    """

    parse_options = options or ParseOptions()

    def _decode(document: SourceDocument, active_logger: WarningLogger) -> ConversionResult:
        data = parse(
            document.content,
            parse_options,
            source_file=document.relative_path,
            logger=active_logger,
        )
        return ConversionResult(
            document=document, output=json.dumps(data, indent=2, ensure_ascii=False)
        )

    return _run_conversion(
        input_path,
        output_path,
        source_suffix=TOON_SUFFIX,
        target_suffix=JSON_SUFFIX,
        convert=_decode,
        strict=strict,
        progress=progress,
        logger=logger,
    )


def run_validate(
    input_path: Path,
    schema_path: Path,
    options: ParseOptions | None = None,
    *,
    strict: bool = False,
) -> int:
    """Parse a TOON file and check it against a JSON schema file.

    Args:
        input_path: TOON document to check.
        schema_path: JSON file holding ``required`` and ``properties``.
        options: Parser settings.
        strict: When True, parse warnings also fail validation.

    Returns:
        int: 0 when all checks pass; 1 when schema errors or strict warnings occur.
    """

    print(f"🔧 Validating {input_path.name}…")
    if strict:
        print("Strict mode enabled: parse warnings will block validation.")
    logger = WarningLogger(input_path.stem, source_root=input_path.parent)

    try:
        schema: Any = json.loads(schema_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        print(f"❌ Schema is not valid JSON: {exc.msg} (line {exc.lineno})")
        return 1
    if not isinstance(schema, dict):
        print("❌ Schema must be a JSON object.")
        return 1

    data = parse(
        input_path.read_text(encoding="utf-8"),
        options,
        source_file=input_path.name,
        logger=logger,
    )
    result = check_schema(data, schema)
    for error in result.errors:
        logger.warn(
            filename=input_path.name,
            line=None,
            element_type="Schema",
            message=error.format(),
            code="schema-mismatch",
        )

    if not result:
        print("❌ Validation errors:")
        for error in result.errors:
            print(f" - {error.format()}")
        print(f"Found {len(result.errors)} validation error(s).")
        return 1

    if logger.has_warnings():
        print("⚠️ Parse warnings:")
        for warning in logger.warnings:
            print(f" - {warning.format()}")
        print(logger.summary())
        if strict:
            return 1

    print("✅ All checks passed.")
    return 0


def run_format(
    input_path: Path,
    options: EncodeOptions | None = None,
    *,
    write: bool = False,
    logger: WarningLogger | None = None,
) -> WarningLogger:
    """Rewrite a TOON file with consistent indentation and quoting.

    Args:
        input_path: TOON document to normalize.
        options: Encoder settings used for the rewritten text.
        write: Replace the file in place instead of printing the result.
        logger: Optional warning logger to reuse.

    Returns:
        WarningLogger: Warnings gathered while reading the document.
    """

    active_logger = logger or WarningLogger(input_path.stem, source_root=input_path.parent)
    text = normalize(
        input_path.read_text(encoding="utf-8"),
        options,
        logger=active_logger,
        source_file=input_path.name,
    )
    if write:
        input_path.write_text(f"{text}\n", encoding="utf-8")
        print(f"✏️  Formatted {input_path.name}")
    else:
        print(text)
    return active_logger


def _run_conversion(
    input_path: Path,
    output_path: Optional[Path],
    *,
    source_suffix: str,
    target_suffix: str,
    convert: Callable[[SourceDocument, WarningLogger], ConversionResult | None],
    strict: bool,
    progress: ConversionProgress | None,
    logger: WarningLogger | None,
) -> WarningLogger:
    single_file = input_path.is_file()
    tree: SourceTree = load_file(input_path) if single_file else load_directory(
        input_path, source_suffix
    )
    active_logger = logger or WarningLogger(tree.root.name, source_root=tree.root)

    if not single_file:
        print(f"📁 Converting {len(tree.documents)} file(s) under {tree.root}")

    results: list[ConversionResult] = []
    if progress:
        progress.start(len(tree.documents))
    try:
        for document in tree.documents:
            if document.read_error:
                active_logger.warn(
                    filename=document.relative_path,
                    line=None,
                    element_type="Document",
                    message="Unreadable file",
                    code="file-io-warning",
                )
            else:
                result = convert(document, active_logger)
                if result is not None:
                    results.append(result)
            if progress:
                progress.advance(document)
    finally:
        if progress:
            progress.finish()

    if strict and active_logger.has_warnings():
        print(active_logger.summary())
        raise SystemExit(1)

    for result in results:
        destination = _destination(
            result.document, output_path, target_suffix, single_file=single_file
        )
        if destination is None:
            print(result.output)
            continue
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(f"{result.output}\n", encoding="utf-8")
        message = f"📝 Wrote {destination}"
        if result.savings is not None:
            message = f"{message} (≈{result.savings}% fewer tokens than JSON)"
        print(message)

    if active_logger.has_warnings():
        print(active_logger.summary())
    return active_logger


def _destination(
    document: SourceDocument,
    output_path: Optional[Path],
    target_suffix: str,
    *,
    single_file: bool,
) -> Path | None:
    if single_file:
        return output_path
    if output_path is None:
        return document.output_path(target_suffix)
    return (output_path / document.relative_path).with_suffix(target_suffix)


__all__ = [
    "ConversionProgress",
    "ConversionResult",
    "run_decode",
    "run_encode",
    "run_format",
    "run_validate",
]
