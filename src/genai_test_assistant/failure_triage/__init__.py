"""Failure triage exports."""

from .failure_summary import (
    TRIAGE_RESPONSE_SCHEMA,
    FailureTriageError,
    TriageSummary,
    extract_markdown,
    summarize_failures,
)

__all__ = [
    "TRIAGE_RESPONSE_SCHEMA",
    "FailureTriageError",
    "TriageSummary",
    "extract_markdown",
    "summarize_failures",
]
