"""Generate-only and generate-and-run pipeline entry points."""

from __future__ import annotations

import logging
from pathlib import Path

from genai_test_assistant.artifact_generation import GenerationRequest, request_artifact
from genai_test_assistant.artifact_writing import ArtifactSet, write_artifact_set
from genai_test_assistant.backend_client import CompletionClient
from genai_test_assistant.configuration.runtime_settings import BackendSettings, ExecutionSettings

from .execution_use_case import run_tests
from .run_contracts import ExecutionResult
from .runner_process import CancellationToken, OutputSink, ProcessLauncher

logger = logging.getLogger(__name__)


async def generate_artifacts(request: GenerationRequest, client: CompletionClient) -> ArtifactSet:
    """Request, classify and persist one artifact set; nothing is written on validation failure."""
    artifact = await request_artifact(request, client)
    return write_artifact_set(artifact, request.output_base_dir, request.story_text)


async def generate_and_run_tests(
    story_text: str,
    client: CompletionClient,
    *,
    backend: BackendSettings,
    execution: ExecutionSettings,
    output_base_dir: Path | None = None,
    launcher: ProcessLauncher | None = None,
    output_sink: OutputSink | None = None,
    cancellation: CancellationToken | None = None,
) -> tuple[ArtifactSet, ExecutionResult]:
    """Generate the artifact set for a story, then run it."""
    request = GenerationRequest(
        story_text=story_text,
        output_base_dir=output_base_dir or execution.output_base_dir,
        backend=backend,
    )
    artifact_set = await generate_artifacts(request, client)
    logger.info("Running generated tests from %s", artifact_set.directory)
    result = await run_tests(
        artifact_set.directory,
        execution.browser,
        execution.headless,
        runner_command=execution.runner_command,
        project_name=execution.project_name,
        launcher=launcher,
        output_sink=output_sink,
        cancellation=cancellation,
    )
    return artifact_set, result
