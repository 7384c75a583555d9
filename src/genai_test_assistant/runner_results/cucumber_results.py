"""Cucumber JSON result file parsing."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

PASSED_STATUS = "passed"


class RunnerResultParseError(Exception):
    """Raised when the runner result file is missing or malformed."""


@dataclass(frozen=True)
class ScenarioCounts:
    """Pass/fail scenario counts parsed from the runner result file."""

    passed: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.passed + self.failed


def load_result_document(result_path: Path) -> list[Mapping[str, Any]]:
    """Read the cucumber JSON report as a list of feature entries."""
    if not result_path.exists():
        raise RunnerResultParseError(f"Result file not found: {result_path}")
    try:
        document = json.loads(result_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise RunnerResultParseError(f"Could not parse result file {result_path}: {exc}") from exc
    if not isinstance(document, list):
        raise RunnerResultParseError(
            f"Result file {result_path} must hold a list of features, "
            f"got {type(document).__name__}."
        )
    return [feature for feature in document if isinstance(feature, Mapping)]


def entries_of(container: Mapping[str, Any], key: str) -> list[Any]:
    """Return the list under ``key``; a missing or null value is an empty list.

    Raises:
      RunnerResultParseError: If the value is present but not a JSON array.
    """
    value = container.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise RunnerResultParseError(
            f"Result entry field '{key}' must be a list, got {type(value).__name__}."
        )
    return value


def is_scenario_passed(scenario: Mapping[str, Any]) -> bool:
    """A scenario passes iff every one of its steps reports the 'passed' status."""
    steps = entries_of(scenario, "steps")
    return all(_step_status(step) == PASSED_STATUS for step in steps)


def count_scenarios(features: Sequence[Mapping[str, Any]]) -> ScenarioCounts:
    passed = 0
    failed = 0
    for feature in features:
        for scenario in entries_of(feature, "elements"):
            if not isinstance(scenario, Mapping):
                continue
            if is_scenario_passed(scenario):
                passed += 1
            else:
                failed += 1
    return ScenarioCounts(passed=passed, failed=failed)


def parse_result_file(result_path: Path) -> ScenarioCounts:
    """Count scenarios in the result file, degrading to zero counts on any parse failure."""
    try:
        return count_scenarios(load_result_document(result_path))
    except RunnerResultParseError as exc:
        logger.warning("Could not parse test results: %s", exc)
        return ScenarioCounts()


def _step_status(step: Any) -> str | None:
    if not isinstance(step, Mapping):
        return None
    result = step.get("result")
    if not isinstance(result, Mapping):
        return None
    status = result.get("status")
    return status if isinstance(status, str) else None
