"""Artifact generation domain exports."""

from .artifact_models import (
    ApiArtifact,
    ClassifiedArtifact,
    GenerationRequest,
    TestType,
    UiArtifact,
)
from .artifact_requester import (
    ARTIFACT_RESPONSE_SCHEMA,
    GenerationValidationError,
    build_user_prompt,
    classify_artifact,
    request_artifact,
)

__all__ = [
    "ApiArtifact",
    "UiArtifact",
    "ClassifiedArtifact",
    "GenerationRequest",
    "TestType",
    "ARTIFACT_RESPONSE_SCHEMA",
    "GenerationValidationError",
    "build_user_prompt",
    "classify_artifact",
    "request_artifact",
]
