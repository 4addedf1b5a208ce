"""
Tests for the command line interface.
"""
import json
import pytest
from typer.testing import CliRunner

from ..app import app

runner = CliRunner()


@pytest.fixture
def statement_file(tmp_path, english_statement):
    path = tmp_path / "statement.txt"
    path.write_text(english_statement, encoding="utf-8")
    return path


class TestParseCommand:

    def test_parse_to_stdout(self, statement_file):
        result = runner.invoke(app, ["parse", str(statement_file)])
        assert result.exit_code == 0
        assert "MARKET XYZ" in result.output
        assert "4000.00" in result.output

    def test_parse_to_file_then_validate(self, statement_file, tmp_path):
        out = tmp_path / "statement.json"
        result = runner.invoke(app, ["parse", str(statement_file), "--out", str(out)])
        assert result.exit_code == 0

        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["opening_balance"] == "1120.50"
        assert [t["kind"] for t in data["transactions"]] == ["DEBIT", "CREDIT"]

        result = runner.invoke(app, ["validate", str(out)])
        assert result.exit_code == 0
        assert "JSON is valid" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["parse", str(tmp_path / "missing.txt")])
        assert result.exit_code == 1
        assert "file not found" in result.output

    def test_unknown_layout(self, statement_file):
        result = runner.invoke(app, ["parse", str(statement_file), "--layout", "no_such_layout"])
        assert result.exit_code == 1


class TestOtherCommands:

    def test_detect(self, tmp_path, english_statement):
        path = tmp_path / "statement.txt"
        path.write_text(english_statement + "Previous balance 1.120,50\n", encoding="utf-8")
        result = runner.invoke(app, ["detect", str(path)])
        assert result.exit_code == 0
        assert "itau_checking_v1" in result.output

    def test_detect_unknown(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("Grocery list: apples, bread, milk", encoding="utf-8")
        result = runner.invoke(app, ["detect", str(path)])
        assert result.exit_code == 1

    def test_trace(self, statement_file):
        result = runner.invoke(app, ["trace", str(statement_file)])
        assert result.exit_code == 0
        assert "2/3 lines matched a grammar" in result.output

    def test_validate_rejects_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"statement_date": "not a date"}), encoding="utf-8")
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Validation failed" in result.output
