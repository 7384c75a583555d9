"""Failure log triage service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from genai_test_assistant.artifact_generation.prompt_templates import TRIAGE_SYSTEM_PROMPT
from genai_test_assistant.artifact_writing.artifact_writer import write_text_file
from genai_test_assistant.backend_client import CompletionClient

logger = logging.getLogger(__name__)

TRIAGE_RESPONSE_SCHEMA: Mapping[str, Any] = {
    "type": "object",
    "required": ["markdown"],
    "properties": {"markdown": {"type": "string"}},
}
EMPTY_TRIAGE_MARKDOWN = "# No output"


class FailureTriageError(Exception):
    """Raised when the failure log cannot be read."""


@dataclass(frozen=True)
class TriageSummary:
    output_path: Path
    bytes_written: int


def extract_markdown(payload: Any) -> str:
    """Pick the Markdown body from the backend reply, falling back to a placeholder heading."""
    if isinstance(payload, str):
        return payload
    if isinstance(payload, Mapping):
        for key in ("markdown", "output"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return EMPTY_TRIAGE_MARKDOWN


async def summarize_failures(
    log_path: Path | str, output_path: Path | str, client: CompletionClient
) -> TriageSummary:
    path = Path(log_path)
    try:
        log_text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise FailureTriageError(f"Could not read failure log {path}: {exc}") from exc

    user = f"Analyze this log and produce the required Markdown sections.\n\nLOG:\n{log_text}"
    payload = await client.complete(TRIAGE_SYSTEM_PROMPT, user, TRIAGE_RESPONSE_SCHEMA)
    markdown = extract_markdown(payload)
    if markdown == EMPTY_TRIAGE_MARKDOWN:
        logger.warning("Backend returned no triage Markdown for %s", path)

    destination = Path(output_path)
    write_text_file(destination, markdown)
    return TriageSummary(
        output_path=destination.resolve(), bytes_written=len(markdown.encode("utf-8"))
    )
