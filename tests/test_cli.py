"""
Tests for CLI interface.
"""

import json

import pytest
from click.testing import CliRunner

from logship.cli.main import cli


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


class TestCLI:
    """Tests for CLI commands."""

    def test_cli_version(self, runner):
        """Test --version flag."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_cli_help(self, runner):
        """Test --help flag."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "logship" in result.output
        assert "run" in result.output
        assert "check" in result.output

    def test_run_help(self, runner):
        """Test run --help."""
        result = runner.invoke(cli, ["run", "--help"])
        assert result.exit_code == 0
        assert "--config" in result.output
        assert "--log-level" in result.output
        assert "--log-dir" in result.output

    def test_formats_command(self, runner):
        """Test formats command."""
        result = runner.invoke(cli, ["formats"])
        assert result.exit_code == 0
        assert "w3c" in result.output
        assert "generic" in result.output
        assert "Inputs: json_logs, iis_logs, os_events, logs, tcp, stdin" in result.output
        assert "Outputs: redis, elasticsearch, stdout" in result.output


class TestCheckCommand:
    """Tests for check command."""

    def test_valid_configuration(self, runner, write_config):
        """Test a valid document is listed."""
        path = write_config({
            "redis": [{"host": "cache"}],
            "stdout": [{}],
            "tcp": [{"port": 5140}],
        })

        result = runner.invoke(cli, ["check", "--config", str(path)])
        assert result.exit_code == 0
        assert "redis" in result.output
        assert "tcp" in result.output
        assert "2 outputs x 1 inputs = 2 connections" in result.output

    def test_missing_configuration(self, runner, tmp_path):
        """Test a missing path exits with 1."""
        result = runner.invoke(cli, ["check", "-c", str(tmp_path / "nope.json")])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_invalid_configuration(self, runner, write_config):
        """Test an invalid document exits with 1."""
        path = write_config({"kafka": [{}]})
        result = runner.invoke(cli, ["check", "-c", str(path)])
        assert result.exit_code == 1

    def test_non_string_format_reported(self, runner, tmp_path):
        """Test a list where a format name belongs is an error, not a crash."""
        path = tmp_path / "agent.yaml"
        path.write_text("logs:\n  - {location: a.log, format: [a]}\n")

        result = runner.invoke(cli, ["check", "-c", str(path)])
        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "must be a string" in result.output


class TestRunCommand:
    """Tests for run command."""

    def test_missing_configuration(self, runner, tmp_path):
        """Test run fails fast when the configuration does not exist."""
        result = runner.invoke(cli, [
            "run", "-c", str(tmp_path / "nope"), "--log-dir", str(tmp_path / "logs"),
        ])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_invalid_log_level(self, runner, write_config, tmp_path):
        result = runner.invoke(cli, [
            "run", "-c", str(write_config({})), "--log-level", "loud",
        ])
        assert result.exit_code != 0

    def test_stdin_to_stdout(self, runner, write_config, tmp_path):
        """Test piped input is shipped to stdout and run ends at EOF."""
        path = write_config({"stdin": [{}], "stdout": [{}]})

        result = runner.invoke(
            cli,
            ["run", "-c", str(path), "--log-dir", str(tmp_path / "logs"), "--log-level", "warning"],
            input='first line\n{"message": "second line", "level": "error"}\n',
        )

        assert result.exit_code == 0, result.output
        documents = [
            json.loads(line) for line in result.output.splitlines() if line.startswith("{")
        ]
        assert [d["message"] for d in documents] == ["first line", "second line"]
        assert documents[1]["level"] == "ERROR"
        assert (tmp_path / "logs" / "logship" / "logship.log").is_file()
