"""Directory scanning utilities for JSON and TOON sources."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

HIDDEN_PREFIX = "."


@dataclass
class SourceDocument:
    """A single input file discovered on disk."""

    path: Path
    relative_path: str
    content: str
    read_error: bool = False

    def output_path(self, suffix: str) -> Path:
        return self.path.with_suffix(suffix)


@dataclass
class SourceTree:
    """In-memory representation of a directory of source files."""

    root: Path
    documents: list[SourceDocument]

    def paths(self) -> set[str]:
        """Return a set of all document relative paths."""

        return {doc.relative_path for doc in self.documents}


def load_directory(root_path: Path, suffix: str) -> SourceTree:
    """Recursively load files ending in ``suffix`` below a root directory.

    Hidden files and directories are skipped. Unreadable files are kept with
    ``read_error`` set so callers can report them.

    Args:
        root_path: Base directory to scan.
        suffix: File extension to collect, e.g. ``".json"``.

    Returns:
        SourceTree: Documents sorted by relative path.
    """

    documents: list[SourceDocument] = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames[:] = [d for d in dirnames if not d.startswith(HIDDEN_PREFIX)]
        for filename in filenames:
            if filename.startswith(HIDDEN_PREFIX) or not filename.endswith(suffix):
                continue
            full_path = Path(dirpath) / filename
            documents.append(_load_document(full_path, full_path.relative_to(root_path)))

    documents.sort(key=lambda d: d.relative_path)
    return SourceTree(root=root_path, documents=documents)


def load_file(path: Path) -> SourceTree:
    """Wrap a single file in a one-document tree rooted at its directory."""

    return SourceTree(root=path.parent, documents=[_load_document(path, Path(path.name))])


def _load_document(full_path: Path, relative: Path) -> SourceDocument:
    content = ""
    read_error = False
    try:
        content = full_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        read_error = True
    return SourceDocument(
        path=full_path,
        relative_path=_normalize_path(relative),
        content=content,
        read_error=read_error,
    )


def _normalize_path(path: Path | str) -> str:
    return PurePosixPath(path).as_posix()


__all__ = ["SourceDocument", "SourceTree", "load_directory", "load_file"]
