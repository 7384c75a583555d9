"""Artifact layout entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

FEATURE_FILENAME = "generated.feature"
STEPS_FILENAME = "steps.generated.ts"
PAGES_FILENAME = "pages.generated.ts"


@dataclass(frozen=True)
class ArtifactSet:
    """Artifact files persisted for one story.

    ``files`` maps logical names (``feature``, ``steps``, ``pages``) to paths
    relative to ``directory``.
    """

    directory: Path
    files: Mapping[str, Path]

    def path_of(self, logical_name: str) -> Path:
        return self.directory / self.files[logical_name]
