"""Run execution domain exports."""

from .execution_use_case import (
    build_runner_command,
    build_runner_environment,
    run_tests,
    verify_execution_directory,
)
from .pipeline_use_case import generate_and_run_tests, generate_artifacts
from .run_contracts import (
    DirectoryNotFoundError,
    ExecutionResult,
    MissingArtifactError,
    ProcessSpawnError,
    RunExecutionError,
    RunStage,
)
from .runner_process import CancellationToken, RunnerCompletion, RunnerProcessTask

__all__ = [
    "CancellationToken",
    "DirectoryNotFoundError",
    "ExecutionResult",
    "MissingArtifactError",
    "ProcessSpawnError",
    "RunExecutionError",
    "RunStage",
    "RunnerCompletion",
    "RunnerProcessTask",
    "build_runner_command",
    "build_runner_environment",
    "generate_and_run_tests",
    "generate_artifacts",
    "run_tests",
    "verify_execution_directory",
]
