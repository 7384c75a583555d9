"""Artifact persistence service."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from genai_test_assistant.artifact_generation.artifact_models import (
    ClassifiedArtifact,
    TestType,
    UiArtifact,
)

from .artifact_set import FEATURE_FILENAME, PAGES_FILENAME, STEPS_FILENAME, ArtifactSet

logger = logging.getLogger(__name__)

_NON_ALPHANUMERIC_RUN = re.compile(r"[^a-z0-9]+")


class FileSystemError(Exception):
    """Raised when artifact or scaffold files cannot be written."""


def slugify_story(story_text: str) -> str:
    """Lowercase the first story line and collapse non-alphanumeric runs into '-'.

    Stories sharing a first line map to the same slug.
    """
    first_line = story_text.split("\n", 1)[0]
    return _NON_ALPHANUMERIC_RUN.sub("-", first_line.lower())


def derive_artifact_directory(
    output_base_dir: Path | str, test_type: TestType, story_text: str
) -> Path:
    """Return ``<output_base_dir>/<test_type>/<slug>``."""
    return Path(output_base_dir) / test_type.value / slugify_story(story_text)


def write_artifact_set(
    artifact: ClassifiedArtifact,
    output_base_dir: Path | str,
    story_text: str,
) -> ArtifactSet:
    """Persist the artifact files in feature, steps, pages order.

    Existing files in the target directory are overwritten.

    Raises:
      FileSystemError: If the directory or a file cannot be written.
    """
    directory = derive_artifact_directory(output_base_dir, artifact.test_type, story_text)
    if (directory / FEATURE_FILENAME).exists():
        logger.warning("Overwriting existing artifacts in %s", directory)

    contents: list[tuple[str, str, str]] = [
        ("feature", FEATURE_FILENAME, artifact.feature_text),
        ("steps", STEPS_FILENAME, artifact.steps_text),
    ]
    if isinstance(artifact, UiArtifact):
        contents.append(("pages", PAGES_FILENAME, artifact.pages_text))

    files: dict[str, Path] = {}
    for logical_name, filename, text in contents:
        write_text_file(directory / filename, text)
        files[logical_name] = Path(filename)
    logger.info(
        "Wrote %d %s artifact file(s) to %s", len(files), artifact.test_type.value, directory
    )
    return ArtifactSet(directory=directory, files=files)


def write_text_file(path: Path, content: str) -> None:
    """Create parent directories and write UTF-8 text, wrapping OS errors."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        message = f"Could not write {path}: {exc}"
        logger.error(message)
        raise FileSystemError(message) from exc
