import json
import shutil
from pathlib import Path

import pytest

from tooncodec.loaders.directory import SourceDocument
from tooncodec.runner import run_decode, run_encode, run_format, run_validate
from tooncodec.toon.options import EncodeOptions


class RecordingProgress:
    def __init__(self) -> None:
        self.total: int | None = None
        self.advanced: list[str] = []
        self.finished = False

    def start(self, total: int) -> None:
        self.total = total

    def advance(self, document: SourceDocument) -> None:
        self.advanced.append(document.relative_path)

    def finish(self) -> None:
        self.finished = True


@pytest.fixture(autouse=True)
def _isolated_logs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def data_dir(tmp_path: Path, sample_data_path: Path) -> Path:
    target = tmp_path / "data"
    shutil.copytree(sample_data_path, target)
    return target


def test_encode_single_file_prints_toon(data_dir: Path, capsys) -> None:
    logger = run_encode(data_dir / "users.json")

    out = capsys.readouterr().out
    assert "users[2]{id,name}:\n  1,Alice\n  2,Bob" in out
    assert not logger.has_warnings()
    assert not (data_dir / "users.toon").exists()


def test_encode_single_file_to_output(data_dir: Path, tmp_path: Path, capsys) -> None:
    destination = tmp_path / "out" / "users.toon"

    run_encode(data_dir / "users.json", destination)

    assert destination.read_text(encoding="utf-8").startswith("users[2]{id,name}:")
    out = capsys.readouterr().out
    assert f"Wrote {destination}" in out
    assert "fewer tokens than JSON" in out


def test_encode_directory_writes_siblings(data_dir: Path, capsys) -> None:
    progress = RecordingProgress()

    run_encode(data_dir, progress=progress, options=EncodeOptions(delimiter="|"))

    assert (data_dir / "users.toon").read_text(encoding="utf-8").startswith(
        "users[2]{id|name}:"
    )
    assert (data_dir / "settings.toon").exists()
    assert (data_dir / "nested" / "config.toon").exists()
    assert not (data_dir / ".hidden" / "secret.toon").exists()
    assert progress.total == 3
    assert progress.advanced == ["nested/config.json", "settings.json", "users.json"]
    assert progress.finished
    assert "Converting 3 file(s)" in capsys.readouterr().out


def test_encode_directory_mirrors_into_output(data_dir: Path, tmp_path: Path) -> None:
    output = tmp_path / "mirror"

    run_encode(data_dir, output)

    assert (output / "nested" / "config.toon").read_text(encoding="utf-8") == (
        "config:\n  db:\n    host: localhost\n    port: 5432\n"
    )
    assert not (data_dir / "users.toon").exists()


def test_invalid_json_is_reported(tmp_path: Path) -> None:
    source = tmp_path / "broken.json"
    source.write_text("{not json", encoding="utf-8")
    destination = tmp_path / "broken.toon"

    logger = run_encode(source, destination)

    assert not destination.exists()
    entry = logger.warnings[0]
    assert entry.code == "W005"
    assert "Invalid JSON" in entry.message


def test_strict_encode_aborts_before_writing(tmp_path: Path) -> None:
    source = tmp_path / "mixed.json"
    source.write_text(json.dumps({"m": [1, {"a": 1}]}), encoding="utf-8")
    destination = tmp_path / "mixed.toon"

    with pytest.raises(SystemExit) as excinfo:
        run_encode(source, destination, strict=True)

    assert excinfo.value.code == 1
    assert not destination.exists()


def test_decode_writes_pretty_json(fixtures_path: Path, tmp_path: Path) -> None:
    destination = tmp_path / "orders.json"

    run_decode(fixtures_path / "orders.toon", destination)

    assert json.loads(destination.read_text(encoding="utf-8")) == {
        "customer": "Ada",
        "total": 19.5,
        "items": [
            {"sku": "A1", "qty": 2, "price": 4.5},
            {"sku": "B,2", "qty": 1, "price": 10.5},
        ],
        "shipping": {"method": "ground", "tags": ["fragile", "gift"]},
    }


def test_validate_success(fixtures_path: Path, capsys) -> None:
    code = run_validate(fixtures_path / "orders.toon", fixtures_path / "schema.json")

    assert code == 0
    assert "All checks passed." in capsys.readouterr().out


def test_validate_reports_schema_errors(fixtures_path: Path, tmp_path: Path, capsys) -> None:
    document = tmp_path / "partial.toon"
    document.write_text("total: cheap\n", encoding="utf-8")

    code = run_validate(document, fixtures_path / "schema.json")

    out = capsys.readouterr().out
    assert code == 1
    assert " - customer: required key is missing" in out
    assert " - total: expected number, got string" in out
    assert "Found 3 validation error(s)." in out


def test_validate_parse_warnings_only_fail_in_strict_mode(
    fixtures_path: Path, tmp_path: Path, capsys
) -> None:
    document = tmp_path / "warn.toon"
    document.write_text('customer: Ada\nitems[1]: x\nnote: "open\n', encoding="utf-8")
    schema = fixtures_path / "schema.json"

    assert run_validate(document, schema) == 0
    assert "Parse warnings" in capsys.readouterr().out
    assert run_validate(document, schema, strict=True) == 1


def test_validate_rejects_bad_schema(fixtures_path: Path, tmp_path: Path, capsys) -> None:
    schema = tmp_path / "schema.json"
    schema.write_text("[1, 2]", encoding="utf-8")

    assert run_validate(fixtures_path / "orders.toon", schema) == 1
    assert "Schema must be a JSON object." in capsys.readouterr().out


def test_format_rewrites_in_place(tmp_path: Path, capsys) -> None:
    document = tmp_path / "messy.toon"
    document.write_text('a:\n      b: "x"\n\n\nc[3]: 1,2,3\n', encoding="utf-8")

    run_format(document, write=True)

    assert document.read_text(encoding="utf-8") == "a:\n  b: x\nc[3]: 1,2,3\n"
    assert "Formatted messy.toon" in capsys.readouterr().out
