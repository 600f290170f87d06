"""Integration tests for the CLI.

These run the Typer app end to end against snapshot files on disk.
"""

import json

import pytest
from typer.testing import CliRunner

from learnguard.cli.main import app

from tests.conftest import AT_RISK_STATS, HEALTHY_STATS

runner = CliRunner()


@pytest.fixture
def at_risk_file(tmp_path):
    path = tmp_path / "at_risk.json"
    path.write_text(json.dumps(AT_RISK_STATS))
    return path


@pytest.fixture
def healthy_file(tmp_path):
    path = tmp_path / "healthy.json"
    path.write_text(json.dumps(HEALTHY_STATS))
    return path


class TestTopLevelCommands:
    """Tests for version, config and help."""

    def test_help_available(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "insights" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "LearnGuard CLI" in result.stdout

    def test_config_lists_feature_flags(self):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "enable_predictive_alerts" in result.stdout


class TestInsightCommands:
    """Tests for the insights command group."""

    def test_risks_json(self, at_risk_file):
        result = runner.invoke(app, ["insights", "risks", str(at_risk_file), "--json"])

        assert result.exit_code == 0
        assert "attention_decline" in result.stdout
        assert "Memory reinforcement" in result.stdout

    def test_risks_table(self, at_risk_file):
        result = runner.invoke(app, ["insights", "risks", str(at_risk_file)])
        assert result.exit_code == 0

    def test_healthy_learner_has_no_risks(self, healthy_file):
        result = runner.invoke(app, ["insights", "risks", str(healthy_file), "--json"])

        assert result.exit_code == 0
        assert "attention_decline" not in result.stdout

    def test_profile_with_user_id(self, healthy_file, sample_user_id):
        result = runner.invoke(
            app,
            ["insights", "profile", str(healthy_file), "-u", str(sample_user_id), "--json"],
        )

        assert result.exit_code == 0
        assert str(sample_user_id) in result.stdout
        assert "auditory" in result.stdout

    def test_path(self, healthy_file):
        result = runner.invoke(app, ["insights", "path", str(healthy_file), "--json"])

        assert result.exit_code == 0
        assert "mastery" in result.stdout

    def test_report(self, healthy_file):
        result = runner.invoke(app, ["insights", "report", str(healthy_file), "--days", "7", "--json"])

        assert result.exit_code == 0
        assert "7_days" in result.stdout

    def test_alerts(self, at_risk_file):
        result = runner.invoke(app, ["insights", "alerts", str(at_risk_file), "--json"])

        assert result.exit_code == 0
        assert "warning" in result.stdout

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["insights", "risks", str(tmp_path / "missing.json")])
        assert result.exit_code != 0

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        result = runner.invoke(app, ["insights", "risks", str(path)])

        assert result.exit_code == 1
        assert "Could not read stats file" in result.stdout


class TestJobCommands:
    """Tests for the jobs command group."""

    def test_list_jobs(self):
        result = runner.invoke(app, ["jobs", "list"])

        assert result.exit_code == 0
        assert "risk-analysis" in result.stdout
        assert "alert-sweep" in result.stdout

    def test_analyze(self, at_risk_file, healthy_file):
        result = runner.invoke(app, ["jobs", "analyze", str(at_risk_file), str(healthy_file)])

        assert result.exit_code == 0
        assert "Learners analyzed: 2" in result.stdout
        assert "Risks detected: 4" in result.stdout
