"""Lightweight logging utilities for compiler-style codec diagnostics."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List

WARN_CODES = {
    "structural-error": "W001",
    "quote-mismatch": "W002",
    "unrepresentable-shape": "W003",
    "unrecognized-line": "W004",
    "file-io-warning": "W005",
    "schema-mismatch": "W006",
}


@dataclass(frozen=True)
class WarningEntry:
    """Captured warning with minimal metadata."""

    filename: str
    line: int | None
    element_type: str
    message: str
    code: str

    def format(self) -> str:
        location = f"{self.filename}:{self.line}" if self.line is not None else self.filename
        return f"{location} [{self.code}][{self.element_type}] {self.message}"


class WarningLogger:
    """Collect warnings and append them to a timestamped log file.

    The log directory is only created once the first warning arrives, so a
    clean run leaves nothing behind on disk.
    """

    def __init__(
        self,
        root_name: str,
        *,
        source_root: Path | None = None,
        log_dir: Path = Path("logs"),
    ) -> None:
        sanitized = re.sub(r"[^A-Za-z0-9_-]", "_", root_name) or "toon"
        timestamp = datetime.now().strftime("%Y-%m-%d-%H%M")
        self.log_path: Path | None = log_dir / f"{sanitized}_{timestamp}.log"
        self._source_root = source_root.resolve() if source_root else None
        self._warnings: List[WarningEntry] = []

    @property
    def warnings(self) -> list[WarningEntry]:
        return list(self._warnings)

    def warn(
        self,
        *,
        filename: str,
        line: int | None,
        element_type: str,
        message: str,
        code: str,
    ) -> None:
        entry = self._record(
            filename=filename,
            line=line,
            element_type=element_type,
            message=message,
            code=code,
        )
        if self.log_path is None:
            return
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with self.log_path.open("a", encoding="utf-8") as handle:
            handle.write(f"{entry.format()}\n")

    def summary(self) -> str:
        if self.log_path is None:
            return f"Found {len(self._warnings)} warnings."
        return f"Found {len(self._warnings)} warnings. See {self.log_path.name}"

    def has_warnings(self) -> bool:
        return bool(self._warnings)

    def _record(
        self,
        *,
        filename: str,
        line: int | None,
        element_type: str,
        message: str,
        code: str,
    ) -> WarningEntry:
        entry = WarningEntry(
            filename=self._format_filename(filename),
            line=line,
            element_type=element_type,
            message=message,
            code=WARN_CODES.get(code, code),
        )
        self._warnings.append(entry)
        return entry

    def _format_filename(self, filename: str) -> str:
        if not filename:
            return "<string>"
        path = Path(filename)
        if self._source_root:
            candidate = path if path.is_absolute() else (self._source_root / path).resolve()
            try:
                relative = candidate.relative_to(self._source_root)
                return (Path(self._source_root.name) / relative).as_posix()
            except ValueError:
                return candidate.as_posix()
        return path.as_posix()


class NullLogger(WarningLogger):
    """Logger that keeps warnings in memory and never touches the disk."""

    def __init__(self, source_root: Path | None = None) -> None:
        self.log_path = None
        self._source_root = source_root.resolve() if source_root else None
        self._warnings: list[WarningEntry] = []


def render_summary(logger: WarningLogger) -> str:
    """Return a human-readable summary of captured warnings."""

    return logger.summary()


__all__ = ["WarningLogger", "WarningEntry", "render_summary", "NullLogger", "WARN_CODES"]
