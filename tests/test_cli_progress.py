from io import StringIO
from pathlib import Path

from rich.console import Console

from tooncodec.cli import RichConversionProgress
from tooncodec.loaders.directory import SourceDocument


def test_rich_progress_keeps_final_status_visible() -> None:
    console_file = StringIO()
    console = Console(
        file=console_file,
        force_terminal=True,
        color_system=None,
        width=80,
    )
    progress = RichConversionProgress(console)
    document = SourceDocument(
        path=Path("data/users.json"),
        relative_path="users.json",
        content="{}",
    )

    progress.start(1)
    assert progress._progress is not None
    assert progress._progress.live.transient is False

    progress.advance(document)
    progress.finish()

    output = console_file.getvalue()
    assert "1/1 files" in output
    assert progress._progress is None


def test_advance_before_start_is_ignored() -> None:
    progress = RichConversionProgress(Console(file=StringIO()))

    progress.advance(
        SourceDocument(path=Path("a.json"), relative_path="a.json", content="")
    )
    progress.finish()
