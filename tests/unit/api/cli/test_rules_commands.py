"""Tests for the rules CLI commands.

Covers ``list``, ``validate`` and ``match`` against the packaged catalog
and temporary YAML files.
"""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from approvalflow.api.cli.main import app
from approvalflow.core.utils.paths import get_configs_dir

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("APPROVALFLOW_CONFIG", raising=False)
    monkeypatch.delenv("APPROVALFLOW_RULES", raising=False)


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "1.0.0" in result.output


class TestListCommand:
    def test_lists_default_rules(self):
        result = runner.invoke(app, ["rules", "list"])

        assert result.exit_code == 0
        for rule_id in ("rule-1", "rule-2", "rule-3"):
            assert rule_id in result.output
        assert "active" in result.output

    def test_missing_rules_file(self, tmp_path):
        result = runner.invoke(app, ["rules", "list", "--rules", str(tmp_path / "x.yaml")])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestValidateCommand:
    def test_valid_catalog(self):
        result = runner.invoke(
            app, ["rules", "validate", str(get_configs_dir() / "default_rules.yaml")]
        )
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_invalid_catalog(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(
            "hierarchies:\n"
            "  - hierarchy_id: h\n"
            "    rules:\n"
            "      - rule_id: r\n"
            "        condition: {field: colour, operator: equals, value: red}\n"
            "        approvers: [{type: manager}]\n"
        )
        result = runner.invoke(app, ["rules", "validate", str(path)])
        assert result.exit_code == 1
        assert "Invalid catalog" in result.output


class TestMatchCommand:
    def test_critical_priority(self):
        result = runner.invoke(app, ["rules", "match", "--priority", "critical"])

        assert result.exit_code == 0
        assert "rule-1" in result.output
        assert "sequential" in result.output

    def test_value_threshold(self):
        result = runner.invoke(app, ["rules", "match", "--value", "20000"])
        assert result.exit_code == 0
        assert "rule-3" in result.output

    def test_no_match(self):
        result = runner.invoke(app, ["rules", "match", "--priority", "low"])
        assert result.exit_code == 0
        assert "No rule matched" in result.output

    def test_resolves_approvers_with_directory(self):
        result = runner.invoke(
            app,
            [
                "rules",
                "match",
                "--priority",
                "critical",
                "--requester",
                "user-3",
                "--directory",
                str(get_configs_dir() / "example_directory.yaml"),
            ],
        )
        assert result.exit_code == 0
        assert "user-2, user-1" in result.output
        assert "user-2 -> user-1" in result.output

    def test_unresolvable_approvers(self):
        result = runner.invoke(
            app,
            [
                "rules",
                "match",
                "--priority",
                "high",
                "--requester",
                "user-4",
                "--directory",
                str(get_configs_dir() / "example_directory.yaml"),
            ],
        )
        assert result.exit_code == 1
        assert "No approvers" in result.output
