"""Tests for the starz command line."""

import json
import tempfile
from pathlib import Path

import pytest
from click.testing import CliRunner

from starz_lead_engine.cli.main import cli

NOW = "2026-03-02T12:00:00+00:00"

CONTACTS = [
    {"id": 1, "firstName": "Low", "lastName": "Lead"},
    {
        "id": 2,
        "firstName": "Dana",
        "lastName": "Reyes",
        "position": "CEO",
        "phone": "555-0100",
        "email": "dana@example.com",
        "notes": "Medical clinic",
        "companySize": "enterprise",
        "budget": 1200000,
        "timeline": "immediate",
        "leadSource": "referral",
        "leadStatus": "qualified",
        "pipelineStage": "negotiation",
        "lastContactedAt": "2026-03-02T10:00:00Z",
    },
    {"id": 3, "companySize": "enterprise"},
]


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def contacts_file(temp_data_dir):
    path = temp_data_dir / "contacts.json"
    path.write_text(json.dumps(CONTACTS))
    return path


@pytest.fixture
def run(temp_data_dir):
    """Invoke the CLI with a temporary config file."""
    runner = CliRunner()
    config_path = temp_data_dir / "scoring_config.json"

    def invoke(*args, **kwargs):
        return runner.invoke(cli, ["--config", str(config_path), *args], **kwargs)

    return invoke


class TestScoreCommand:
    """Tests for 'starz score'."""

    def test_json_output_ranked(self, run, contacts_file):
        result = run("score", str(contacts_file), "--format", "json", "--now", NOW)

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [row["id"] for row in data] == [2, 3, 1]
        assert data[0]["calculated_score"]["ai_score"] == 100
        assert data[0]["calculated_score"]["urgency_level"] == "critical"
        assert data[2]["calculated_score"]["ai_score"] == 30

    def test_priority_filter_and_limit(self, run, contacts_file):
        result = run("score", str(contacts_file), "-f", "json", "-p", "low", "-n", "1", "--now", NOW)

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [row["id"] for row in data] == [3]

    def test_table_output(self, run, contacts_file):
        result = run("score", str(contacts_file), "--now", NOW)
        assert result.exit_code == 0, result.output
        assert "Leads (3)" in result.output

    def test_invalid_now(self, run, contacts_file):
        result = run("score", str(contacts_file), "--now", "yesterday")
        assert result.exit_code != 0
        assert "ISO-8601" in result.output

    def test_unsupported_file(self, run, temp_data_dir):
        path = temp_data_dir / "contacts.xlsx"
        path.write_text("")
        result = run("score", str(path))
        assert result.exit_code != 0
        assert "Unknown source" in result.output

    def test_broken_file(self, run, temp_data_dir):
        path = temp_data_dir / "contacts.json"
        path.write_text("[{")
        result = run("score", str(path))
        assert result.exit_code != 0
        assert "Error reading JSON" in result.output

    def test_uses_saved_config(self, run, contacts_file):
        result = run("config", "set-priority", "20", "10", "5")
        assert result.exit_code == 0, result.output

        result = run("score", str(contacts_file), "-f", "json", "-p", "urgent", "--now", NOW)
        data = json.loads(result.stdout)
        assert len(data) == 3


class TestExplainCommand:
    """Tests for 'starz explain'."""

    def test_explain(self, run, contacts_file):
        result = run("explain", str(contacts_file), "2", "--now", NOW)
        assert result.exit_code == 0, result.output
        assert "Dana Reyes" in result.output
        assert "AI Score: 100" in result.output

    def test_missing_lead(self, run, contacts_file):
        result = run("explain", str(contacts_file), "99")
        assert result.exit_code != 0
        assert "not found" in result.output


class TestSummaryCommand:
    """Tests for 'starz summary'."""

    def test_summary(self, run, contacts_file):
        result = run("summary", str(contacts_file), "--now", NOW)
        assert result.exit_code == 0, result.output
        assert "Total Leads:" in result.output
        assert "Max: 100" in result.output


class TestConfigCommands:
    """Tests for 'starz config'."""

    def test_show_defaults(self, run):
        result = run("config", "show")
        assert result.exit_code == 0, result.output
        assert "industry" in result.output
        assert "0.20" in result.output

    def test_set_weight_warns_on_sum(self, run, temp_data_dir):
        result = run("config", "set-weight", "budget", "0.3")
        assert result.exit_code == 0, result.output
        assert "sum" in result.output

        saved = json.loads((temp_data_dir / "scoring_config.json").read_text())
        assert saved["weights"]["budget"] == 0.3

    def test_set_weight_unknown_factor(self, run):
        result = run("config", "set-weight", "vibes", "0.3")
        assert result.exit_code != 0

    def test_set_priority_out_of_order(self, run):
        result = run("config", "set-priority", "10", "20", "30")
        assert result.exit_code != 0
        assert "ordered" in result.output

    def test_reset(self, run, temp_data_dir):
        run("config", "set-weight", "budget", "0.3")
        result = run("config", "reset", "--yes")
        assert result.exit_code == 0, result.output

        saved = json.loads((temp_data_dir / "scoring_config.json").read_text())
        assert saved["weights"]["budget"] == 0.20
