"""Results writing domain exports."""

from .report_collector import (
    MARKDOWN_FILENAME,
    WORKBOOK_FILENAME,
    ReportCollectionError,
    collect_reports,
    flatten_scenarios,
    render_markdown_summary,
)
from .report_models import ReportMetadata, ScenarioOutcome, ScenarioStatus

__all__ = [
    "MARKDOWN_FILENAME",
    "WORKBOOK_FILENAME",
    "ReportCollectionError",
    "ReportMetadata",
    "ScenarioOutcome",
    "ScenarioStatus",
    "collect_reports",
    "flatten_scenarios",
    "render_markdown_summary",
]
