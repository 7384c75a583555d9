"""Command line interface entry point."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click
from dotenv import load_dotenv

from genai_test_assistant.artifact_generation import GenerationRequest, GenerationValidationError
from genai_test_assistant.artifact_writing import ArtifactSet, FileSystemError
from genai_test_assistant.backend_client import (
    BackendError,
    CompletionClient,
    create_completion_client,
)
from genai_test_assistant.configuration import (
    DEFAULT_CONFIG_FILENAME,
    SUPPORTED_BROWSERS,
    SUPPORTED_PROVIDERS,
    BackendSettings,
    Configuration,
    ConfigurationError,
    load_configuration,
    write_placeholder_configuration,
)
from genai_test_assistant.data_synthesis import (
    DEFAULT_RECORD_COUNT,
    DataSynthesisError,
    synthesize_records,
)
from genai_test_assistant.environment_scaffolding import scaffold_environment
from genai_test_assistant.failure_triage import FailureTriageError, summarize_failures
from genai_test_assistant.run_execution import (
    ExecutionResult,
    RunExecutionError,
    generate_and_run_tests,
    generate_artifacts,
    run_tests,
)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class CliError(Exception):
    """Custom CLI error."""


def _configuration(ctx: click.Context) -> Configuration:
    return ctx.ensure_object(dict)["configuration"]


def _backend_settings(
    ctx: click.Context, provider: str | None, model: str | None
) -> BackendSettings:
    backend = _configuration(ctx).backend
    if provider:
        backend = replace(backend, provider=provider)
    if model:
        backend = replace(backend, model=model)
    return backend


def _completion_client(backend: BackendSettings) -> CompletionClient:
    try:
        return create_completion_client(backend)
    except BackendError as exc:
        raise CliError(str(exc)) from exc


def _read_text(path: str, label: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise CliError(f"Could not read {label} {path}: {exc}") from exc


def _echo_artifact_set(artifact_set: ArtifactSet) -> None:
    test_type = artifact_set.directory.parent.name
    click.echo(f"Classified as: {test_type.upper()}")
    for logical_name in artifact_set.files:
        click.echo(f"  {logical_name}: {artifact_set.path_of(logical_name)}")


def _echo_execution_result(result: ExecutionResult) -> None:
    click.echo(
        f"{'PASSED' if result.success else 'FAILED'}: "
        f"{result.tests_passed} passed, {result.tests_failed} failed "
        f"(exit code {result.exit_code}, {result.duration_ms}ms)"
    )


def _require_success(result: ExecutionResult) -> None:
    _echo_execution_result(result)
    if not result.success:
        raise CliError("Test run failed.")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="genai-test-assistant")
@click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Optional YAML/JSON configuration file",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Generate, scaffold and run BDD tests from user stories."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_LOG_FORMAT,
        stream=sys.stderr,
    )
    load_dotenv()
    try:
        configuration = load_configuration(config_path)
    except ConfigurationError as exc:
        raise CliError(str(exc)) from exc
    ctx.ensure_object(dict)["configuration"] = configuration


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a YAML configuration template with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="generate")
@click.option(
    "--story",
    "story_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the user story and acceptance criteria (Markdown or text)",
)
@click.option(
    "--out",
    "output_dir",
    required=True,
    type=click.Path(path_type=str),
    help="Base directory for generated artifacts",
)
@click.option("--provider", type=click.Choice(SUPPORTED_PROVIDERS), help="Generative backend")
@click.option("--model", help="Model name for the generative backend")
@click.pass_context
def generate(
    ctx: click.Context, story_path: str, output_dir: str, provider: str | None, model: str | None
) -> None:
    """Generate and classify test artifacts for a user story."""
    story_text = _read_text(story_path, "story")
    backend = _backend_settings(ctx, provider, model)
    request = GenerationRequest(
        story_text=story_text, output_base_dir=Path(output_dir), backend=backend
    )
    try:
        artifact_set = asyncio.run(generate_artifacts(request, _completion_client(backend)))
    except (GenerationValidationError, BackendError, FileSystemError) as exc:
        raise CliError(str(exc)) from exc
    _echo_artifact_set(artifact_set)


@cli.command(name="synthesize-data")
@click.option(
    "--schema",
    "schema_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the JSON Schema describing one record",
)
@click.option(
    "--out",
    "output_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the JSON file receiving the valid records",
)
@click.option(
    "--n",
    "count",
    default=DEFAULT_RECORD_COUNT,
    show_default=True,
    type=click.IntRange(min=1),
    help="Number of records to request",
)
@click.pass_context
def synthesize_data(ctx: click.Context, schema_path: str, output_path: str, count: int) -> None:
    """Synthesize schema-valid test data records."""
    backend = _backend_settings(ctx, None, None)
    try:
        summary = asyncio.run(
            synthesize_records(schema_path, count, output_path, _completion_client(backend))
        )
    except (DataSynthesisError, BackendError, FileSystemError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(
        f"Data synthesis: requested {summary.requested}, generated {summary.generated}, "
        f"valid {summary.valid} -> {summary.output_path}"
    )


@cli.command(name="triage")
@click.option(
    "--log",
    "log_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the failure log",
)
@click.option(
    "--out",
    "output_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the Markdown summary to write",
)
@click.option("--provider", type=click.Choice(SUPPORTED_PROVIDERS), help="Generative backend")
@click.option("--model", help="Model name for the generative backend")
@click.pass_context
def triage(
    ctx: click.Context, log_path: str, output_path: str, provider: str | None, model: str | None
) -> None:
    """Summarize a failure log into a Markdown triage report."""
    backend = _backend_settings(ctx, provider, model)
    try:
        summary = asyncio.run(
            summarize_failures(log_path, output_path, _completion_client(backend))
        )
    except (FailureTriageError, BackendError, FileSystemError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(f"Triage summary written: {summary.output_path} ({summary.bytes_written} bytes)")


@cli.command(name="test")
@click.option(
    "--dir",
    "directory",
    required=True,
    type=click.Path(path_type=str),
    help="Artifact directory holding generated.feature and steps.generated.ts",
)
@click.option("--browser", type=click.Choice(SUPPORTED_BROWSERS), help="Browser engine")
@click.option(
    "--headless/--headed",
    "headless",
    default=None,
    help="Run the browser headless (default) or headed",
)
@click.option(
    "--setup", is_flag=True, default=False, help="Scaffold the runner environment first"
)
@click.pass_context
def test_command(
    ctx: click.Context, directory: str, browser: str | None, headless: bool | None, setup: bool
) -> None:
    """Run an existing artifact directory through the cucumber runner."""
    execution = _configuration(ctx).execution
    try:
        if setup:
            bundle = scaffold_environment(directory)
            click.echo(f"Test environment ready: {bundle.directory}")
        result = asyncio.run(
            run_tests(
                directory,
                browser or execution.browser,
                execution.headless if headless is None else headless,
                runner_command=execution.runner_command,
                project_name=execution.project_name,
            )
        )
    except (RunExecutionError, FileSystemError) as exc:
        raise CliError(str(exc)) from exc
    _require_success(result)


@cli.command(name="run")
@click.option(
    "--story",
    "story_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the user story and acceptance criteria (Markdown or text)",
)
@click.option("--browser", type=click.Choice(SUPPORTED_BROWSERS), help="Browser engine")
@click.option(
    "--headless/--headed",
    "headless",
    default=None,
    help="Run the browser headless (default) or headed",
)
@click.option(
    "--out",
    "output_dir",
    required=False,
    type=click.Path(path_type=str),
    help="Base directory for generated artifacts (defaults to the configured one)",
)
@click.pass_context
def run_command(
    ctx: click.Context,
    story_path: str,
    browser: str | None,
    headless: bool | None,
    output_dir: str | None,
) -> None:
    """Generate tests for a story, then run them."""
    configuration = _configuration(ctx)
    story_text = _read_text(story_path, "story")
    execution = configuration.execution
    if browser:
        execution = replace(execution, browser=browser)
    if headless is not None:
        execution = replace(execution, headless=headless)
    try:
        artifact_set, result = asyncio.run(
            generate_and_run_tests(
                story_text,
                _completion_client(configuration.backend),
                backend=configuration.backend,
                execution=execution,
                output_base_dir=Path(output_dir) if output_dir else None,
            )
        )
    except (
        GenerationValidationError,
        BackendError,
        FileSystemError,
        RunExecutionError,
    ) as exc:
        raise CliError(str(exc)) from exc
    _echo_artifact_set(artifact_set)
    _require_success(result)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
