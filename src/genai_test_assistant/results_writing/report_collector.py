"""Consolidated report writer service."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import IllegalCharacterError

from genai_test_assistant.environment_scaffolding.scaffold_templates import (
    JSON_REPORT_FILENAME,
    REPORTS_DIRNAME,
)
from genai_test_assistant.runner_results import (
    RunnerResultParseError,
    entries_of,
    is_scenario_passed,
    load_result_document,
)

from .report_models import ReportMetadata, ScenarioOutcome, ScenarioStatus

logger = logging.getLogger(__name__)

WORKBOOK_FILENAME = "consolidated-report.xlsx"
MARKDOWN_FILENAME = "consolidated-report.md"
SCENARIOS_SHEET_NAME = "Scenarios"
RUN_INFO_SHEET_NAME = "RunInfo"
SCENARIO_COLUMNS = ("Feature", "Scenario", "Status", "Duration (ms)", "Failed step", "Error")

_NANOSECONDS_PER_MILLISECOND = 1_000_000
_MAX_ERROR_CHARS = 2000
_ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


class ReportCollectionError(Exception):
    """Raised when consolidated reports cannot be produced."""


def collect_reports(
    directory: Path | str, project_name: str, browser: str, test_type: str
) -> None:
    """Write the consolidated workbook and Markdown summary next to the raw runner reports.

    Raises:
      ReportCollectionError: If the raw JSON report is unusable or a report cannot be written.
    """
    reports_dir = Path(directory) / REPORTS_DIRNAME
    source_path = reports_dir / JSON_REPORT_FILENAME
    try:
        outcomes = flatten_scenarios(load_result_document(source_path))
    except RunnerResultParseError as exc:
        raise ReportCollectionError(str(exc)) from exc

    metadata = ReportMetadata(
        project_name=project_name,
        browser=browser,
        test_type=test_type,
        generated_at=datetime.now(UTC),
        source_path=str(source_path),
    )
    workbook_path = reports_dir / WORKBOOK_FILENAME
    markdown_path = reports_dir / MARKDOWN_FILENAME
    try:
        write_report_workbook(workbook_path, outcomes, metadata)
        markdown_path.write_text(render_markdown_summary(outcomes, metadata), encoding="utf-8")
    except (OSError, IllegalCharacterError) as exc:
        raise ReportCollectionError(f"Could not write consolidated reports: {exc}") from exc
    logger.info("Consolidated reports written to %s and %s", workbook_path, markdown_path)


def flatten_scenarios(features: Sequence[Mapping[str, Any]]) -> list[ScenarioOutcome]:
    outcomes: list[ScenarioOutcome] = []
    for feature in features:
        feature_name = str(feature.get("name") or feature.get("uri") or "")
        for scenario in entries_of(feature, "elements"):
            if not isinstance(scenario, Mapping):
                continue
            steps = [step for step in entries_of(scenario, "steps") if isinstance(step, Mapping)]
            failed_step = next((step for step in steps if _status_of(step) != "passed"), None)
            outcomes.append(
                ScenarioOutcome(
                    feature=feature_name,
                    scenario=str(scenario.get("name") or ""),
                    status=(
                        ScenarioStatus.PASSED
                        if is_scenario_passed(scenario)
                        else ScenarioStatus.FAILED
                    ),
                    duration_ms=sum(_duration_ms(step) for step in steps),
                    failed_step=_describe_step(failed_step) if failed_step else None,
                    error_message=_error_of(failed_step) if failed_step else None,
                )
            )
    return outcomes


def write_report_workbook(
    output_path: Path,
    outcomes: Sequence[ScenarioOutcome],
    metadata: ReportMetadata,
) -> None:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SCENARIOS_SHEET_NAME
    for column, header in enumerate(SCENARIO_COLUMNS, start=1):
        sheet.cell(row=1, column=column, value=header)
        sheet.cell(row=1, column=column).style = "Headline 1"
    for row, outcome in enumerate(outcomes, start=2):
        values = (
            outcome.feature,
            outcome.scenario,
            outcome.status.value,
            outcome.duration_ms,
            outcome.failed_step,
            outcome.error_message,
        )
        for column, value in enumerate(values, start=1):
            sheet.cell(row=row, column=column, value=_cell_value(value))
    for column, width in enumerate((30, 40, 10, 14, 40, 60), start=1):
        sheet.column_dimensions[get_column_letter(column)].width = width

    _write_run_info_sheet(workbook, outcomes, metadata)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output_path)


def render_markdown_summary(
    outcomes: Sequence[ScenarioOutcome], metadata: ReportMetadata
) -> str:
    passed = sum(1 for outcome in outcomes if outcome.status is ScenarioStatus.PASSED)
    failed = len(outcomes) - passed
    lines = [
        f"# {metadata.project_name} test report",
        "",
        f"- Test type: {metadata.test_type.upper()}",
        f"- Browser: {metadata.browser}",
        f"- Generated at: {metadata.generated_at.isoformat()}",
        f"- Scenarios: {len(outcomes)} (passed {passed}, failed {failed})",
        "",
    ]
    failures = [outcome for outcome in outcomes if outcome.status is ScenarioStatus.FAILED]
    if failures:
        lines.extend(
            ["## Failed scenarios", "", "| Feature | Scenario | Failed step |", "|---|---|---|"]
        )
        for outcome in failures:
            lines.append(
                f"| {_escape_cell(outcome.feature)} | {_escape_cell(outcome.scenario)} "
                f"| {_escape_cell(outcome.failed_step or '')} |"
            )
    else:
        lines.append("All scenarios passed.")
    return "\n".join(lines) + "\n"


def _write_run_info_sheet(
    workbook: Workbook, outcomes: Sequence[ScenarioOutcome], metadata: ReportMetadata
) -> None:
    sheet = workbook.create_sheet(RUN_INFO_SHEET_NAME)
    passed = sum(1 for outcome in outcomes if outcome.status is ScenarioStatus.PASSED)
    entries = (
        ("project_name", metadata.project_name),
        ("browser", metadata.browser),
        ("test_type", metadata.test_type),
        ("generated_at", metadata.generated_at.isoformat()),
        ("source_path", metadata.source_path),
        ("total", len(outcomes)),
        ("passed", passed),
        ("failed", len(outcomes) - passed),
    )
    for row, (key, value) in enumerate(entries, start=1):
        sheet.cell(row=row, column=1, value=key)
        sheet.cell(row=row, column=2, value=_cell_value(value))


def _cell_value(value: Any) -> Any:
    """Drop terminal colour codes and control characters worksheets cannot hold."""
    if not isinstance(value, str):
        return value
    return ILLEGAL_CHARACTERS_RE.sub("", _ANSI_ESCAPE_RE.sub("", value))


def _status_of(step: Mapping[str, Any]) -> str | None:
    result = step.get("result")
    return result.get("status") if isinstance(result, Mapping) else None


def _duration_ms(step: Mapping[str, Any]) -> int:
    result = step.get("result")
    duration = result.get("duration") if isinstance(result, Mapping) else None
    if isinstance(duration, bool) or not isinstance(duration, int | float):
        return 0
    return int(duration // _NANOSECONDS_PER_MILLISECOND)


def _describe_step(step: Mapping[str, Any]) -> str:
    keyword = str(step.get("keyword") or "").strip()
    name = str(step.get("name") or "").strip()
    status = _status_of(step) or "unknown"
    return f"{keyword} {name} ({status})".strip()


def _error_of(step: Mapping[str, Any]) -> str | None:
    result = step.get("result")
    message = result.get("error_message") if isinstance(result, Mapping) else None
    if not isinstance(message, str):
        return None
    return message[:_MAX_ERROR_CHARS]


def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")
