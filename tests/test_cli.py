"""
Tests for CLI module - commands, output modes and exit codes.

Commands:
    - analyze: Analyze one response file against a config
    - validate: Config validation and catalog lint
    - eval: Evaluation suite
    - main callback: Version flag and help output

Output Modes:
    - Human mode (--format text): Rich output with spinners and tables
    - Agent mode (--format json): Valid JSON on stdout

Exit Codes:
    - 0: Success
    - 1: Configuration error
    - 2: Input error
    - 3: Evaluation failures
"""

import json
import logging
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from brand_visibility.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_EVAL_FAILURE,
    EXIT_INPUT_ERROR,
    EXIT_SUCCESS,
    app,
)

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"
EXAMPLE_CONFIG = EXAMPLES_DIR / "engine.config.yaml"
SAMPLE_ANSWER = EXAMPLES_DIR / "sample_answer.txt"

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def cli_runner():
    """Return CliRunner for testing Typer apps."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_output_mode():
    """Reset global output_mode and root log handlers after each test."""
    from brand_visibility.utils.console import output_mode

    original_format = output_mode.format
    original_quiet = output_mode.quiet
    original_level = logging.getLogger().level
    output_mode._json_buffer.clear()

    yield

    output_mode.format = original_format
    output_mode.quiet = original_quiet
    output_mode._json_buffer.clear()
    logging.getLogger().handlers.clear()
    logging.getLogger().setLevel(original_level)


@pytest.fixture
def config_yaml(tmp_path):
    """Create a small valid config file."""
    config_data = {
        "org_name": "Acme Corp",
        "brand_catalog": [
            {"name": "Acme Corp", "is_org_brand": True},
            {"name": "Zendesk"},
        ],
    }
    config_file = tmp_path / "engine.config.yaml"
    config_file.write_text(yaml.dump(config_data), encoding="utf-8")
    return config_file


@pytest.fixture
def answer_file(tmp_path):
    """Create a response file."""
    path = tmp_path / "answer.txt"
    path.write_text("Acme Corp and Zendesk are both solid.", encoding="utf-8")
    return path


def _json_output(output: str) -> dict:
    """Extract the pretty-printed JSON document, skipping JSON log lines."""
    start = output.index("{\n")
    end = output.rindex("\n}") + 2
    return json.loads(output[start:end])


# ============================================================================
# analyze
# ============================================================================


class TestAnalyzeCommand:
    """Test suite for the analyze command."""

    def test_example_text_mode(self, cli_runner):
        """Test human output for the bundled example."""
        result = cli_runner.invoke(
            app,
            [
                "analyze",
                "--config", str(EXAMPLE_CONFIG),
                "--response", str(SAMPLE_ANSWER),
                "--prompt", "best help desk software for startups",
            ],
        )

        assert result.exit_code == EXIT_SUCCESS
        assert "Visibility score" in result.output
        assert "Zendesk" in result.output

    def test_example_json_mode(self, cli_runner):
        """Test JSON output for the bundled example."""
        result = cli_runner.invoke(
            app,
            [
                "analyze",
                "-c", str(EXAMPLE_CONFIG),
                "-r", str(SAMPLE_ANSWER),
                "-p", "best help desk software for startups",
                "--format", "json",
            ],
        )

        assert result.exit_code == EXIT_SUCCESS
        data = _json_output(result.output)
        analysis = data["result"]

        assert data["status"] == "success"
        assert analysis["org_brand_present"] is True
        assert analysis["org_brand_position"] == 1
        assert analysis["competitor_count"] == 4
        assert analysis["score"] == 6
        assert analysis["new_names"] == ["Intercom"]
        assert analysis["metadata"]["method"] == "deterministic"

    def test_empty_response_file(self, cli_runner, config_yaml, tmp_path):
        """Test an empty response exits with the input error code."""
        empty = tmp_path / "empty.txt"
        empty.write_text("   \n", encoding="utf-8")

        result = cli_runner.invoke(
            app,
            ["analyze", "-c", str(config_yaml), "-r", str(empty), "-p", "best crm", "--format", "json"],
        )

        assert result.exit_code == EXIT_INPUT_ERROR
        data = _json_output(result.output)
        assert data["error_type"] == "input_error"
        assert "response_text cannot be empty" in data["error"]

    def test_empty_prompt(self, cli_runner, config_yaml, answer_file):
        """Test an empty prompt exits with the input error code."""
        result = cli_runner.invoke(
            app, ["analyze", "-c", str(config_yaml), "-r", str(answer_file), "-p", " "]
        )

        assert result.exit_code == EXIT_INPUT_ERROR

    def test_invalid_config(self, cli_runner, answer_file, tmp_path):
        """Test an invalid config exits with the config error code."""
        bad = tmp_path / "bad.yaml"
        bad.write_text("org_name: ''\n", encoding="utf-8")

        result = cli_runner.invoke(
            app, ["analyze", "-c", str(bad), "-r", str(answer_file), "-p", "best crm"]
        )

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_invalid_strategy(self, cli_runner, config_yaml, answer_file):
        """Test an unknown strategy override is a config error."""
        result = cli_runner.invoke(
            app,
            ["analyze", "-c", str(config_yaml), "-r", str(answer_file), "-p", "q", "-s", "neural"],
        )

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_assisted_without_assist_model(self, cli_runner, config_yaml, answer_file):
        """Test forcing assisted mode without an assist model is a config error."""
        result = cli_runner.invoke(
            app,
            ["analyze", "-c", str(config_yaml), "-r", str(answer_file), "-p", "q", "-s", "assisted"],
        )

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_assisted_without_api_key(self, cli_runner, answer_file, monkeypatch):
        """Test assisted mode with a missing API key is a config error."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        result = cli_runner.invoke(
            app,
            [
                "analyze",
                "-c", str(EXAMPLE_CONFIG),
                "-r", str(answer_file),
                "-p", "q",
                "-s", "assisted",
                "--format", "json",
            ],
        )

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "OPENAI_API_KEY" in _json_output(result.output)["error"]

    def test_missing_response_file(self, cli_runner, config_yaml, tmp_path):
        """Test a missing response file is a usage error."""
        result = cli_runner.invoke(
            app,
            ["analyze", "-c", str(config_yaml), "-r", str(tmp_path / "nope.txt"), "-p", "q"],
        )

        assert result.exit_code != EXIT_SUCCESS


# ============================================================================
# validate
# ============================================================================


class TestValidateCommand:
    """Test suite for the validate command."""

    def test_valid_example(self, cli_runner):
        """Test the bundled example config validates."""
        result = cli_runner.invoke(app, ["validate", "--config", str(EXAMPLE_CONFIG)])

        assert result.exit_code == EXIT_SUCCESS
        assert "Configuration is valid" in result.output

    def test_json_mode(self, cli_runner, config_yaml):
        """Test JSON output for a valid config."""
        result = cli_runner.invoke(
            app, ["validate", "--config", str(config_yaml), "--format", "json"]
        )

        assert result.exit_code == EXIT_SUCCESS
        data = _json_output(result.output)
        assert data["valid"] is True
        assert data["catalog_entries"] == 2
        assert data["catalog_findings"] == []

    def test_reports_catalog_findings(self, cli_runner, tmp_path):
        """Test collisions and near-duplicates are reported without failing."""
        config_file = tmp_path / "engine.config.yaml"
        config_file.write_text(
            yaml.dump(
                {
                    "org_name": "Acme Corp",
                    "brand_catalog": [
                        {"name": "Acme Corp", "is_org_brand": True, "variants": ["Acme"]},
                        {"name": "Acme"},
                        {"name": "HubSpot"},
                        {"name": "Hubspott"},
                    ],
                }
            ),
            encoding="utf-8",
        )

        result = cli_runner.invoke(
            app, ["validate", "--config", str(config_file), "--format", "json"]
        )

        assert result.exit_code == EXIT_SUCCESS
        kinds = sorted(f["kind"] for f in _json_output(result.output)["catalog_findings"])
        assert kinds == ["collision", "near_duplicate"]

    def test_invalid_config(self, cli_runner, tmp_path):
        """Test invalid YAML exits with the config error code."""
        bad = tmp_path / "bad.yaml"
        bad.write_text("invalid: yaml: syntax: [", encoding="utf-8")

        result = cli_runner.invoke(app, ["validate", "--config", str(bad), "--format", "json"])

        assert result.exit_code == EXIT_CONFIG_ERROR
        data = _json_output(result.output)
        assert data["valid"] is False
        assert data["error_type"] == "validation_error"


# ============================================================================
# eval
# ============================================================================


class TestEvalCommand:
    """Test suite for the eval command."""

    def test_bundled_suite_passes(self, cli_runner):
        """Test the bundled fixtures pass."""
        result = cli_runner.invoke(app, ["eval"])

        assert result.exit_code == EXIT_SUCCESS
        assert "10/10 passed" in result.output

    def test_json_summary(self, cli_runner):
        """Test JSON output carries results and summary."""
        result = cli_runner.invoke(app, ["eval", "--format", "json"])

        assert result.exit_code == EXIT_SUCCESS
        data = _json_output(result.output)
        assert data["summary"]["pass_rate"] == 1.0
        assert len(data["results"]) == 10

    def test_failures_exit_code(self, cli_runner, tmp_path):
        """Test a failing case exits with the eval failure code."""
        fixtures = tmp_path / "cases.yaml"
        fixtures.write_text(
            yaml.dump(
                {
                    "test_cases": [
                        {
                            "description": "Wrong expectation",
                            "response_text": "Acme Corp only.",
                            "org_name": "Acme Corp",
                            "expected_org_present": False,
                        }
                    ]
                }
            ),
            encoding="utf-8",
        )

        result = cli_runner.invoke(app, ["eval", "--fixtures", str(fixtures)])

        assert result.exit_code == EXIT_EVAL_FAILURE

    def test_invalid_fixtures(self, cli_runner, tmp_path):
        """Test malformed fixtures exit with the config error code."""
        fixtures = tmp_path / "cases.yaml"
        fixtures.write_text("cases: []\n", encoding="utf-8")

        result = cli_runner.invoke(app, ["eval", "--fixtures", str(fixtures)])

        assert result.exit_code == EXIT_CONFIG_ERROR


# ============================================================================
# main callback
# ============================================================================


class TestMainCallback:
    """Test suite for the main callback."""

    def test_version(self, cli_runner):
        """Test --version prints the version."""
        result = cli_runner.invoke(app, ["--version"])

        assert result.exit_code == EXIT_SUCCESS
        assert "brand-visibility" in result.output

    def test_no_command(self, cli_runner):
        """Test invoking without a command lists commands."""
        result = cli_runner.invoke(app, [])

        assert result.exit_code == EXIT_SUCCESS
        assert "analyze" in result.output
        assert "validate" in result.output
