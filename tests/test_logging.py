from pathlib import Path

from tooncodec.codec import parse
from tooncodec.utils.logging import NullLogger, WarningLogger, render_summary


def test_logger_reports_paths_from_source_root(tmp_path: Path) -> None:
    data_dir = tmp_path / "data_source"
    data_dir.mkdir()
    file_path = data_dir / "nested" / "doc.toon"
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text("rows[2]{a}:\n  1\n", encoding="utf-8")

    logger = WarningLogger("data_source", source_root=data_dir, log_dir=tmp_path / "logs")
    parse(file_path.read_text(), source_file="nested/doc.toon", logger=logger)

    assert logger.warnings
    entry = logger.warnings[0]
    assert entry.filename == "data_source/nested/doc.toon"
    assert entry.format().startswith(
        "data_source/nested/doc.toon:1 [W001][Table] rows declares 2 rows but 1 found"
    )


def test_log_file_is_created_on_first_warning(tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"
    logger = WarningLogger("my data!", log_dir=log_dir)

    assert not log_dir.exists()
    assert logger.log_path is not None
    assert logger.log_path.name.startswith("my_data__")

    logger.warn(
        filename="a.toon",
        line=3,
        element_type="Line",
        message="bad line",
        code="unrecognized-line",
    )

    assert logger.log_path.read_text(encoding="utf-8") == "a.toon:3 [W004][Line] bad line\n"
    assert logger.summary().endswith(logger.log_path.name)


def test_null_logger_keeps_warnings_in_memory(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    logger = NullLogger()

    logger.warn(filename="", line=None, element_type="Array", message="m", code="custom")

    assert not (tmp_path / "logs").exists()
    assert logger.warnings[0].format() == "<string> [custom][Array] m"
    assert render_summary(logger) == "Found 1 warnings."
