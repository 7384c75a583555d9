"""Test execution use-case service."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from genai_test_assistant.artifact_generation.artifact_models import TestType
from genai_test_assistant.artifact_writing.artifact_set import (
    FEATURE_FILENAME,
    PAGES_FILENAME,
    STEPS_FILENAME,
)
from genai_test_assistant.configuration.runtime_settings import (
    DEFAULT_BROWSER,
    DEFAULT_PROJECT_NAME,
    DEFAULT_RUNNER_COMMAND,
)
from genai_test_assistant.environment_scaffolding import (
    JSON_REPORT_FILENAME,
    REPORTS_DIRNAME,
    RUNNER_FORMATS,
    RUNNER_IMPORT_MODULE,
    scaffold_environment,
)
from genai_test_assistant.results_writing import ReportCollectionError, collect_reports
from genai_test_assistant.runner_results import ScenarioCounts, parse_result_file

from .run_contracts import (
    DirectoryNotFoundError,
    ExecutionResult,
    MissingArtifactError,
    RunStage,
)
from .runner_process import (
    CancellationToken,
    OutputSink,
    ProcessLauncher,
    RunnerCompletion,
    RunnerProcessTask,
)

logger = logging.getLogger(__name__)

ReportCollector = Callable[[Path, str, str, str], None]

_STDERR_SEPARATOR = "\n--- ERRORS ---\n"


def verify_execution_directory(directory: Path) -> TestType:
    """Check run preconditions and label the run by the presence of the page file.

    Raises:
      DirectoryNotFoundError: If the directory does not exist.
      MissingArtifactError: If the feature or step file is missing.
    """
    if not directory.is_dir():
        message = f"Test directory not found: {directory}"
        logger.error(message)
        raise DirectoryNotFoundError(message)

    missing = tuple(
        filename
        for filename in (FEATURE_FILENAME, STEPS_FILENAME)
        if not (directory / filename).is_file()
    )
    if missing:
        error = MissingArtifactError(missing)
        logger.error("%s (in %s)", error, directory)
        raise error

    # The page file is advisory: it only labels the run.
    return TestType.UI if (directory / PAGES_FILENAME).is_file() else TestType.API


def build_runner_command(
    directory: Path, runner_command: Sequence[str] = DEFAULT_RUNNER_COMMAND
) -> tuple[str, ...]:
    arguments: list[str] = [
        *runner_command,
        str(directory / FEATURE_FILENAME),
        "--import",
        RUNNER_IMPORT_MODULE,
        "--require",
        str(directory / STEPS_FILENAME),
    ]
    for runner_format in RUNNER_FORMATS:
        arguments.extend(("--format", runner_format))
    return tuple(arguments)


def build_runner_environment(
    browser: str, headless: bool, base_environment: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Copy the current environment and add the runner's browser settings."""
    environment = dict(os.environ if base_environment is None else base_environment)
    environment.update(
        {
            "BROWSER": browser,
            "HEADLESS": "true" if headless else "false",
            "NODE_OPTIONS": f"--import {RUNNER_IMPORT_MODULE}",
        }
    )
    return environment


async def run_tests(
    directory: Path | str,
    browser: str = DEFAULT_BROWSER,
    headless: bool = True,
    *,
    runner_command: Sequence[str] = DEFAULT_RUNNER_COMMAND,
    project_name: str = DEFAULT_PROJECT_NAME,
    launcher: ProcessLauncher | None = None,
    output_sink: OutputSink | None = None,
    cancellation: CancellationToken | None = None,
    report_collector: ReportCollector | None = None,
) -> ExecutionResult:
    """Scaffold the directory, run the cucumber runner in it and summarize the outcome.

    Precondition failures are raised before anything is written or spawned. Once
    the runner is started every outcome, including a failed spawn, is returned as
    an ``ExecutionResult``.

    Raises:
      DirectoryNotFoundError: If ``directory`` does not exist.
      MissingArtifactError: If the feature or step file is missing.
      FileSystemError: If the scaffold cannot be written.
    """
    root = Path(directory).resolve()
    stage = RunStage.NOT_STARTED
    test_type = verify_execution_directory(root)
    logger.info(
        "Test type: %s (%s page objects)",
        test_type.value.upper(),
        "with" if test_type is TestType.UI else "without",
    )
    logger.info("Test directory: %s, browser: %s, headless: %s", root, browser, headless)

    stage = _advance(stage, RunStage.SCAFFOLDING)
    bundle = scaffold_environment(root)
    _discard_previous_result(bundle.reports_dir / JSON_REPORT_FILENAME)

    command = build_runner_command(root, runner_command)
    logger.info("Running command: %s", " ".join(command))
    task = RunnerProcessTask(
        command,
        cwd=root,
        env=build_runner_environment(browser, headless),
        launcher=launcher,
        output_sink=output_sink,
        cancellation=cancellation,
    )
    stage = _advance(stage, RunStage.SPAWNED)
    task.start()
    stage = _advance(stage, RunStage.STREAMING)
    completion = await task.wait()

    if completion.spawn_error is not None:
        _advance(stage, RunStage.DONE)
        return ExecutionResult(
            success=False,
            duration_ms=completion.duration_ms,
            tests_passed=0,
            tests_failed=1,
            raw_output=(
                f"Process error: {completion.spawn_error}\n"
                f"{completion.stdout}\n{completion.stderr}"
            ),
            exit_code=None,
        )

    stage = _advance(stage, RunStage.EXITED)
    counts = parse_result_file(bundle.reports_dir / JSON_REPORT_FILENAME)
    stage = _advance(stage, RunStage.RESULT_PARSED)
    result = _assemble_result(completion, counts)
    _log_summary(result)

    _collect_reports_best_effort(
        report_collector or collect_reports, root, project_name, browser, test_type
    )
    stage = _advance(stage, RunStage.REPORT_ATTEMPTED)
    _advance(stage, RunStage.DONE)
    return result


def _assemble_result(completion: RunnerCompletion, counts: ScenarioCounts) -> ExecutionResult:
    raw_output = completion.stdout
    if completion.stderr:
        raw_output += f"{_STDERR_SEPARATOR}{completion.stderr}"
    return ExecutionResult(
        success=completion.exit_code == 0 and not completion.cancelled,
        duration_ms=completion.duration_ms,
        tests_passed=counts.passed,
        tests_failed=counts.failed,
        raw_output=raw_output,
        exit_code=completion.exit_code,
    )


def _collect_reports_best_effort(
    report_collector: ReportCollector,
    directory: Path,
    project_name: str,
    browser: str,
    test_type: TestType,
) -> None:
    try:
        report_collector(directory, project_name, browser, test_type.value)
    except ReportCollectionError as exc:
        logger.warning("Report generation failed: %s", exc)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.warning("Report generation failed unexpectedly: %s", exc, exc_info=True)


def _discard_previous_result(result_path: Path) -> None:
    # A stale report from an earlier run must not be counted for this one.
    try:
        result_path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove previous result file %s: %s", result_path, exc)


def _log_summary(result: ExecutionResult) -> None:
    logger.info(
        "%s exit code: %s, duration: %dms, passed: %d, failed: %d",
        "Tests completed successfully." if result.success else "Tests failed.",
        result.exit_code,
        result.duration_ms,
        result.tests_passed,
        result.tests_failed,
    )


def _advance(current: RunStage, following: RunStage) -> RunStage:
    logger.debug("Run stage %s -> %s", current.value, following.value)
    return following
