"""Artifact request and classification service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, NoReturn

from genai_test_assistant.backend_client import CompletionClient

from .artifact_models import (
    ApiArtifact,
    ClassifiedArtifact,
    GenerationRequest,
    TestType,
    UiArtifact,
)
from .prompt_templates import ARTIFACT_SYSTEM_PROMPT, ARTIFACT_USER_DIRECTIVE

logger = logging.getLogger(__name__)

ARTIFACT_RESPONSE_SCHEMA: Mapping[str, Any] = {
    "type": "object",
    "required": ["testType", "featureText", "stepsText"],
    "properties": {
        "testType": {"type": "string", "enum": [item.value for item in TestType]},
        "featureText": {"type": "string"},
        "stepsText": {"type": "string"},
        "pagesText": {"type": "string"},
    },
}


class GenerationValidationError(Exception):
    """Raised when the backend response does not describe a valid artifact."""


def build_user_prompt(story_text: str) -> str:
    """Combine the story with the strict-instructions directive."""
    return f"USER STORY & AC:\n\n{story_text}\n\n{ARTIFACT_USER_DIRECTIVE}"


async def request_artifact(
    request: GenerationRequest, client: CompletionClient
) -> ClassifiedArtifact:
    """Ask the backend for an artifact and validate it into a classified artifact."""
    logger.info(
        "Requesting test artifacts from %s/%s", request.backend.provider, request.backend.model
    )
    payload = await client.complete(
        ARTIFACT_SYSTEM_PROMPT,
        build_user_prompt(request.story_text),
        ARTIFACT_RESPONSE_SCHEMA,
    )
    artifact = classify_artifact(payload)
    logger.info("Backend classified the story as %s", artifact.test_type.value)
    return artifact


def classify_artifact(payload: Any) -> ClassifiedArtifact:
    """Validate a raw backend payload once and return the tagged artifact.

    Raises:
      GenerationValidationError: If a required field or the tag-dependent field is missing.
    """
    if not isinstance(payload, Mapping):
        _fail(f"Backend response must be a JSON object, got {type(payload).__name__}.")

    missing = [
        field_name
        for field_name in ("testType", "featureText", "stepsText")
        if not _is_non_empty_string(payload.get(field_name))
    ]
    if missing:
        _fail(f"Backend response is missing required field(s): {', '.join(missing)}.")

    raw_type = payload["testType"].strip().lower()
    try:
        test_type = TestType(raw_type)
    except ValueError:
        _fail(
            f"Backend response has unknown testType '{payload['testType']}' "
            "(expected api or ui)."
        )

    if test_type is TestType.UI:
        if not _is_non_empty_string(payload.get("pagesText")):
            _fail("Backend response tagged testType 'ui' is missing required field: pagesText.")
        return UiArtifact(
            feature_text=payload["featureText"],
            steps_text=payload["stepsText"],
            pages_text=payload["pagesText"],
        )
    return ApiArtifact(feature_text=payload["featureText"], steps_text=payload["stepsText"])


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _fail(message: str) -> NoReturn:
    logger.error(message)
    raise GenerationValidationError(message)
