import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from tooncodec.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_logs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


def test_encode_command_prints_toon(tmp_path: Path) -> None:
    source = tmp_path / "data.json"
    source.write_text(json.dumps({"name": "Ada", "age": 30}), encoding="utf-8")

    result = runner.invoke(app, ["encode", str(source)])

    assert result.exit_code == 0
    assert "name: Ada\nage: 30" in result.output


def test_encode_command_accepts_named_delimiter(tmp_path: Path) -> None:
    source = tmp_path / "data.json"
    source.write_text(json.dumps({"tags": ["a", "b"]}), encoding="utf-8")

    result = runner.invoke(app, ["encode", str(source), "--delimiter", "pipe"])

    assert result.exit_code == 0
    assert "tags[2]: a|b" in result.output


def test_encode_command_reads_environment(tmp_path: Path) -> None:
    source = tmp_path / "data.json"
    source.write_text(json.dumps({"o": {"k": 1}}), encoding="utf-8")

    result = runner.invoke(app, ["encode", str(source)], env={"TOON_INDENT": "4"})

    assert result.exit_code == 0
    assert "o:\n    k: 1" in result.output


def test_encode_command_rejects_bad_delimiter(tmp_path: Path) -> None:
    source = tmp_path / "data.json"
    source.write_text("{}", encoding="utf-8")

    result = runner.invoke(app, ["encode", str(source), "-d", "/"])

    assert result.exit_code != 0


def test_encode_command_strict_failure(tmp_path: Path) -> None:
    source = tmp_path / "mixed.json"
    source.write_text(json.dumps({"m": [1, [2]]}), encoding="utf-8")

    result = runner.invoke(app, ["encode", str(source), "-o", str(tmp_path / "m.toon"), "--strict"])

    assert result.exit_code == 1
    assert not (tmp_path / "m.toon").exists()


def test_decode_command_writes_json(tmp_path: Path) -> None:
    source = tmp_path / "data.toon"
    source.write_text("users[1]{id,name}:\n  1,Alice\n", encoding="utf-8")
    destination = tmp_path / "data.json"

    result = runner.invoke(app, ["decode", str(source), "--output", str(destination)])

    assert result.exit_code == 0
    assert json.loads(destination.read_text(encoding="utf-8")) == {
        "users": [{"id": 1, "name": "Alice"}]
    }


def test_validate_command_success(fixtures_path: Path) -> None:
    result = runner.invoke(
        app,
        ["validate", str(fixtures_path / "orders.toon"), "--schema", str(fixtures_path / "schema.json")],
    )

    assert result.exit_code == 0
    assert "All checks passed." in result.output


def test_validate_command_reports_errors(fixtures_path: Path, tmp_path: Path) -> None:
    document = tmp_path / "empty.toon"
    document.write_text("note: nothing here\n", encoding="utf-8")

    result = runner.invoke(
        app, ["validate", str(document), "--schema", str(fixtures_path / "schema.json")]
    )

    assert result.exit_code == 1
    assert "required key is missing" in result.output
    assert "validation error(s)" in result.output


def test_format_command_prints_normalized_text(tmp_path: Path) -> None:
    document = tmp_path / "messy.toon"
    document.write_text("a:\n     b: 1\n", encoding="utf-8")

    result = runner.invoke(app, ["format", str(document)])

    assert result.exit_code == 0
    assert "a:\n  b: 1" in result.output
    assert document.read_text(encoding="utf-8") == "a:\n     b: 1\n"


def test_format_command_strict_fails_on_warnings(tmp_path: Path) -> None:
    document = tmp_path / "broken.toon"
    document.write_text("rows[3]{a}:\n  1\n", encoding="utf-8")

    result = runner.invoke(app, ["format", str(document), "--strict"])

    assert result.exit_code == 1
