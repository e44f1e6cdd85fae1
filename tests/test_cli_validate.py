import json

from typer.testing import CliRunner

from partial_plan.cli import app

runner = CliRunner()


def test_cli_validate_success():
    r = runner.invoke(app, ["validate", "examples/basic.plan"])
    assert r.exit_code == 0
    assert r.stdout.strip() == "Valid"


def test_cli_validate_quiet():
    r = runner.invoke(app, ["validate", "examples/basic.plan", "--quiet"])
    assert r.exit_code == 0
    assert r.stdout == ""


def test_cli_validate_schema_error():
    r = runner.invoke(app, ["validate", "examples/invalid-schema.plan"])
    assert r.exit_code == 1
    assert "tasks.0.id" in r.output
    assert "expected string" in r.output


def test_cli_validate_syntax_error_json():
    r = runner.invoke(app, ["validate", "examples/invalid-syntax.plan", "--json"])
    assert r.exit_code == 1
    payload = json.loads(r.stdout)
    assert payload["valid"] is False
    assert payload["code"] == "E_YAML_PARSE"
    assert isinstance(payload["line"], int)


def test_cli_validate_missing_file():
    r = runner.invoke(app, ["validate", "examples/nope.plan"])
    assert r.exit_code == 2
    assert "E_FILE_NOT_FOUND" in r.output


def test_cli_validate_missing_file_json():
    r = runner.invoke(app, ["validate", "examples/nope.plan", "--json"])
    assert r.exit_code == 2
    payload = json.loads(r.stdout)
    assert payload["valid"] is False
    assert "file not found" in payload["error"]


def test_cli_validate_stdin():
    r = runner.invoke(app, ["validate", "--json"], input="project: piped\ntasks: []\n")
    assert r.exit_code == 0
    assert json.loads(r.stdout) == {"valid": True}


def test_cli_version():
    r = runner.invoke(app, ["--version"])
    assert r.exit_code == 0
    assert r.stdout.strip() == "0.1.0"
