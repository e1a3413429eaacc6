"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from sadl.cli import app


@pytest.fixture
def cli_runner():
    """Return a CLI test runner."""
    return CliRunner()


@pytest.fixture
def test_project(tmp_path: Path, crudl_source: str):
    """Create a temporary project with a manifest and two sources."""
    api_dir = tmp_path / "api"
    api_dir.mkdir()
    (api_dir / "crudl.sadl").write_text(crudl_source)
    (api_dir / "ping.sadl").write_text('http GET "/ping" (operation=ping) { }\n')

    (tmp_path / "sadl.toml").write_text(
        """
[project]
name = "demo"
version = "0.1.0"
sources = ["api"]
"""
    )
    return tmp_path


class TestVersion:
    def test_version_flag(self, cli_runner):
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "SADL version" in result.output
        assert "graphql" in result.output


class TestParseCommand:
    def test_summary(self, cli_runner, sadl_file: Path):
        result = cli_runner.invoke(app, ["parse", str(sadl_file)])
        assert result.exit_code == 0
        assert "crudl v1" in result.output
        assert "ItemId" in result.output
        assert "getItem" in result.output

    def test_json_output(self, cli_runner, sadl_file: Path):
        result = cli_runner.invoke(app, ["parse", str(sadl_file), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["name"] == "crudl"
        assert [t["name"] for t in data["types"]][:2] == ["ItemId", "Currency"]

    def test_yaml_output(self, cli_runner, sadl_file: Path):
        result = cli_runner.invoke(app, ["parse", str(sadl_file), "--yaml"])
        assert result.exit_code == 0
        data = yaml.safe_load(result.stdout)
        assert data["namespace"] == "example.crudl"

    def test_parse_error(self, cli_runner, tmp_path: Path):
        path = tmp_path / "bad.sadl"
        path.write_text("type Foo String (blah=1)\n")
        result = cli_runner.invoke(app, ["parse", str(path)])
        assert result.exit_code == 1
        assert "Unrecognized option for String: blah" in result.output
        assert "bad.sadl:1:18" in result.output

    def test_no_validate(self, cli_runner, tmp_path: Path):
        path = tmp_path / "loose.sadl"
        path.write_text("type Foo Struct { b Bar }\n")
        assert cli_runner.invoke(app, ["parse", str(path)]).exit_code == 1
        result = cli_runner.invoke(app, ["parse", str(path), "--no-validate"])
        assert result.exit_code == 0

    def test_extension_option(self, cli_runner, tmp_path: Path):
        path = tmp_path / "gql.sadl"
        path.write_text(
            'type Item String\naction get() Item\ngraphql "/g" {\n    item Item (action=get)\n}\n'
        )
        result = cli_runner.invoke(app, ["parse", str(path), "-x", "graphql", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["extensions"]["graphql"]["path"] == "/g"

    def test_unknown_extension(self, cli_runner, sadl_file: Path):
        result = cli_runner.invoke(app, ["parse", str(sadl_file), "-x", "rest"])
        assert result.exit_code == 1
        assert "Unknown extension: rest" in result.output


class TestValidateCommand:
    def test_valid_file(self, cli_runner, sadl_file: Path):
        result = cli_runner.invoke(app, ["validate", str(sadl_file)])
        assert result.exit_code == 0
        assert "OK: spec is valid." in result.output

    def test_project_with_warnings(self, cli_runner, test_project: Path):
        result = cli_runner.invoke(app, ["validate", str(test_project)])
        assert result.exit_code == 0
        assert "WARNING:" in result.output
        assert "HTTP 'ping' has no expected response" in result.output

    def test_example_project(self, cli_runner):
        project = Path(__file__).parents[2] / "examples" / "crudl"
        result = cli_runner.invoke(app, ["validate", str(project)])
        assert result.exit_code == 0
        assert "OK: spec is valid." in result.output

    def test_invalid_file(self, cli_runner, tmp_path: Path):
        path = tmp_path / "broken.sadl"
        path.write_text("type Foo Struct { b Bar }\naction go(Missing)\n")
        result = cli_runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Validation failed:" in result.output
        assert "Undefined type 'Bar' in struct field 'Foo.b'" in result.output
        assert "Undefined type 'Missing' in input of action 'go'" in result.output

    def test_directory_without_sources(self, cli_runner, tmp_path: Path):
        result = cli_runner.invoke(app, ["validate", str(tmp_path)])
        assert result.exit_code == 1
        assert "No SADL sources found" in result.output

    def test_missing_path(self, cli_runner, tmp_path: Path):
        result = cli_runner.invoke(app, ["validate", str(tmp_path / "nope")])
        assert result.exit_code == 1
        assert "No such file or directory" in result.output


class TestDecompileCommand:
    def test_decompile(self, cli_runner, sadl_file: Path):
        result = cli_runner.invoke(app, ["decompile", str(sadl_file)])
        assert result.exit_code == 0
        assert result.stdout.startswith("// A simple CRUDL service\nname crudl\n")
        assert "type Item Struct {" in result.stdout

    def test_inline_enums(self, cli_runner, tmp_path: Path):
        path = tmp_path / "shirt.sadl"
        path.write_text("type Shirt Struct { size Enum { S; M } }\n")
        result = cli_runner.invoke(app, ["decompile", str(path), "--inline-enums"])
        assert result.exit_code == 0
        assert "    size Size\n" in result.stdout
        assert "type Size Enum {" in result.stdout


class TestTokensCommand:
    def test_tokens(self, cli_runner, tmp_path: Path):
        path = tmp_path / "t.sadl"
        path.write_text("// hi\ntype Foo String\n")
        result = cli_runner.invoke(app, ["tokens", str(path)])
        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[0] == "1:1\tLINE_COMMENT\t'hi'"
        assert "2:6\tSYMBOL\t'Foo'" in lines
        assert lines[-1].endswith("\tEOF\t''")

    def test_tokens_without_comments(self, cli_runner, tmp_path: Path):
        path = tmp_path / "t.sadl"
        path.write_text("// hi\ntype Foo String\n")
        result = cli_runner.invoke(app, ["tokens", str(path), "--no-comments"])
        assert "LINE_COMMENT" not in result.stdout
