"""Run execution entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RunExecutionError(Exception):
    """Base class for failures that stop a run before the runner is spawned."""


class DirectoryNotFoundError(RunExecutionError):
    """Raised when the execution directory does not exist."""


class MissingArtifactError(RunExecutionError):
    """Raised when required artifact files are missing from the execution directory."""

    def __init__(self, missing_files: tuple[str, ...]) -> None:
        super().__init__(f"Missing required files: {', '.join(missing_files)}")
        self.missing_files = missing_files


class ProcessSpawnError(Exception):
    """The runner process could not be started; folded into ExecutionResult."""


class RunStage(str, Enum):
    """Per-run orchestration stages, in order."""

    NOT_STARTED = "NotStarted"
    SCAFFOLDING = "Scaffolding"
    SPAWNED = "Spawned"
    STREAMING = "Streaming"
    EXITED = "Exited"
    RESULT_PARSED = "ResultParsed"
    REPORT_ATTEMPTED = "ReportAttempted"
    DONE = "Done"


@dataclass(frozen=True)
class ExecutionResult:
    """Output contract for one runner execution.

    ``success`` follows the runner exit code only and is false for a cancelled
    run; the counts come from the parsed result file and are zero when it is
    absent or unreadable.
    """

    success: bool
    duration_ms: int
    tests_passed: int
    tests_failed: int
    raw_output: str
    exit_code: int | None = None
