"""Artifact writing domain exports."""

from .artifact_set import FEATURE_FILENAME, PAGES_FILENAME, STEPS_FILENAME, ArtifactSet
from .artifact_writer import (
    FileSystemError,
    derive_artifact_directory,
    slugify_story,
    write_artifact_set,
    write_text_file,
)

__all__ = [
    "ArtifactSet",
    "FEATURE_FILENAME",
    "PAGES_FILENAME",
    "STEPS_FILENAME",
    "FileSystemError",
    "derive_artifact_directory",
    "slugify_story",
    "write_artifact_set",
    "write_text_file",
]
