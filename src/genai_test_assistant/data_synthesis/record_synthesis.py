"""Schema-constrained test data synthesis service."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema.exceptions import SchemaError
from jsonschema.protocols import Validator
from jsonschema.validators import validator_for

from genai_test_assistant.artifact_generation.prompt_templates import (
    DATA_SYNTHESIS_INSTRUCTIONS,
    DATA_SYNTHESIS_SYSTEM_PROMPT,
)
from genai_test_assistant.artifact_writing.artifact_writer import write_text_file
from genai_test_assistant.backend_client import CompletionClient

logger = logging.getLogger(__name__)

DEFAULT_RECORD_COUNT = 20


class DataSynthesisError(Exception):
    """Raised when the JSON Schema cannot be loaded or used."""


@dataclass(frozen=True)
class SynthesisSummary:
    """Counts reported after one synthesis run."""

    requested: int
    generated: int
    valid: int
    output_path: Path


def load_json_schema(schema_path: Path | str) -> Mapping[str, Any]:
    path = Path(schema_path)
    try:
        schema = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise DataSynthesisError(f"Could not read JSON Schema {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise DataSynthesisError(f"JSON Schema {path} is not valid JSON: {exc}") from exc
    if not isinstance(schema, Mapping):
        raise DataSynthesisError(f"JSON Schema {path} must be a JSON object.")
    return schema


def extract_records(payload: Any) -> list[Any]:
    """Accept a bare array or an array under 'items' or 'output'."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        for key in ("items", "output"):
            candidate = payload.get(key)
            if isinstance(candidate, list):
                return candidate
    return []


def build_validator(schema: Mapping[str, Any]) -> Validator:
    """Select the validator class from the schema's $schema and check the schema itself."""
    validator_cls = validator_for(schema)
    try:
        validator_cls.check_schema(schema)
    except SchemaError as exc:
        raise DataSynthesisError(f"Invalid JSON Schema: {exc.message}") from exc
    return validator_cls(schema)


def filter_valid_records(validator: Validator, records: Sequence[Any]) -> list[Any]:
    """Keep only records that validate against the schema."""
    valid: list[Any] = []
    for index, record in enumerate(records):
        errors = list(validator.iter_errors(record))
        if errors:
            logger.debug("Dropping record %d: %s", index, errors[0].message)
            continue
        valid.append(record)
    return valid


async def synthesize_records(
    schema_path: Path | str,
    count: int,
    output_path: Path | str,
    client: CompletionClient,
) -> SynthesisSummary:
    """Generate ``count`` records with the backend and write the schema-valid ones as JSON."""
    if count <= 0:
        raise DataSynthesisError("Record count must be greater than zero.")
    schema = load_json_schema(schema_path)
    validator = build_validator(schema)
    user = (
        f"{DATA_SYNTHESIS_INSTRUCTIONS}\n\nSchema:\n{json.dumps(schema)}\n\n"
        f"Generate {count} items."
    )
    payload = await client.complete(DATA_SYNTHESIS_SYSTEM_PROMPT, user)
    records = extract_records(payload)
    valid = filter_valid_records(validator, records)
    if len(valid) < len(records):
        logger.warning(
            "%d of %d generated records failed schema validation",
            len(records) - len(valid),
            len(records),
        )

    destination = Path(output_path)
    write_text_file(destination, json.dumps(valid, indent=2, ensure_ascii=False))
    return SynthesisSummary(
        requested=count,
        generated=len(records),
        valid=len(valid),
        output_path=destination.resolve(),
    )
