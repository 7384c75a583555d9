"""CLI smoke tests."""

from click.testing import CliRunner
from genai_test_assistant.cli import cli


def test_cli_displays_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("generate", "synthesize-data", "triage", "test", "run", "generate-config"):
        assert command in result.output


def test_test_command_help_lists_runner_options() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["test", "--help"])

    assert result.exit_code == 0
    assert "--dir" in result.output
    assert "--headless / --headed" in result.output
    assert "--setup" in result.output
