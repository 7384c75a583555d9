"""Results writing entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ScenarioStatus(str, Enum):
    """Rendered scenario status in consolidated reports."""

    PASSED = "PASSED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ScenarioOutcome:
    """One scenario row flattened from the runner result file."""

    feature: str
    scenario: str
    status: ScenarioStatus
    duration_ms: int
    failed_step: str | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata rendered into the RunInfo sheet and Markdown header."""

    project_name: str
    browser: str
    test_type: str
    generated_at: datetime
    source_path: str
