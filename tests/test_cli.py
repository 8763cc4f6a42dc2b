"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from linear_opencode import __version__, main
from linear_opencode.main import cli


@pytest.fixture
def runner(monkeypatch, tmp_path):
    for name in ("LINEAR_API_KEY", "LINEAR_OPENCODE_LINEAR__API_KEY", "LINEAR_OPENCODE_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LINEAR_OPENCODE_CONFIG_DIR", str(tmp_path))
    monkeypatch.setattr(main, "setup_logging", lambda **kwargs: None)
    return CliRunner()


class TestCli:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_tools_lists_every_tool(self, runner):
        result = runner.invoke(cli, ["tools"])
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert len(lines) == 30
        assert any(line.startswith("linear_create_issue") for line in lines)

    def test_tools_json(self, runner):
        result = runner.invoke(cli, ["tools", "--json"])
        schemas = json.loads(result.output)
        assert {s["name"] for s in schemas} >= {"linear_auth", "linear_webhook_status"}
        assert all(s["parameters"]["type"] == "object" for s in schemas)

    def test_check_auth_without_key(self, runner):
        result = runner.invoke(cli, ["check-auth"])
        assert result.exit_code == 1
        assert "LINEAR_API_KEY is not configured" in result.output
