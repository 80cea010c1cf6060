"""Integration tests for the HawkAI CLI."""

import json
from pathlib import Path

from typer.testing import CliRunner

from hawkai import __version__
from hawkai.cli import app

runner = CliRunner()
FIXTURES = Path(__file__).parent / "fixtures"
AGENT_APP = FIXTURES / "agent_app"
FINDINGS = AGENT_APP / "findings.json"


class TestAnalyze:
    def test_console_summary(self):
        result = runner.invoke(app, ["analyze", str(FINDINGS)])
        assert result.exit_code == 0
        assert "Finding Groups" in result.stdout

    def test_json_output(self):
        result = runner.invoke(app, ["analyze", str(FINDINGS), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["hawkaiVersion"] == __version__
        assert data["findingCount"] == 4
        assert len(data["groups"]) == 2
        assert data["graph"]["stats"]["nodeCount"] == 3
        assert data["riskyPaths"] == []

    def test_json_output_is_canonical(self):
        result = runner.invoke(app, ["analyze", str(FINDINGS), "--json"])
        assert result.stdout.endswith("}\n")
        assert "\r" not in result.stdout
        data = json.loads(result.stdout)
        assert list(data) == sorted(data)

    def test_root_enables_call_edges(self):
        result = runner.invoke(app, ["analyze", str(FINDINGS), "--root", str(AGENT_APP), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        kinds = {e["kind"] for e in data["graph"]["edges"]}
        assert {"related", "uses_model", "uses_tool"} <= kinds

    def test_output_file(self, tmp_path):
        out = tmp_path / "reports" / "hawkai_report.json"
        result = runner.invoke(app, ["analyze", str(FINDINGS), "--quiet", "--output", str(out)])
        assert result.exit_code == 0
        assert result.stdout == ""
        assert json.loads(out.read_text(encoding="utf-8"))["findingCount"] == 4

    def test_config_file(self, tmp_path):
        config = tmp_path / "scoring.yaml"
        config.write_text("caps:\n  perFileFindings: 1\n", encoding="utf-8")
        result = runner.invoke(app, ["analyze", str(FINDINGS), "--config", str(config), "--json"])
        assert result.exit_code == 0
        assert len(json.loads(result.stdout)["groups"]) == 1

    def test_bare_list_input(self, tmp_path):
        findings = json.loads(FINDINGS.read_text(encoding="utf-8"))["findings"]
        path = tmp_path / "list.json"
        path.write_text(json.dumps(findings), encoding="utf-8")
        result = runner.invoke(app, ["analyze", str(path), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["findingCount"] == 4


class TestErrors:
    def test_missing_findings_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "none.json")])
        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1
        assert "Invalid findings file" in result.stdout

    def test_invalid_finding(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([{"id": "x", "ruleId": "R"}]), encoding="utf-8")
        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1

    def test_invalid_config(self, tmp_path):
        config = tmp_path / "scoring.yaml"
        config.write_text("caps:\n  perFileFindings: 0\n", encoding="utf-8")
        result = runner.invoke(app, ["analyze", str(FINDINGS), "--config", str(config)])
        assert result.exit_code == 1
        assert "Invalid config" in result.stdout

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(FINDINGS), "--config", str(tmp_path / "absent.yaml")])
        assert result.exit_code == 1
        assert "Invalid config" in result.stdout

    def test_root_must_be_directory(self):
        result = runner.invoke(app, ["analyze", str(FINDINGS), "--root", str(FINDINGS)])
        assert result.exit_code == 1


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout
