"""Execution environment scaffolding service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from genai_test_assistant.artifact_writing.artifact_writer import write_text_file

from .scaffold_templates import (
    COMPILER_CONFIG_FILENAME,
    COMPILER_CONFIG_TEMPLATE,
    REPORTS_DIRNAME,
    REPORTS_PLACEHOLDER_FILENAME,
    RUNNER_CONFIG_FILENAME,
    RUNNER_CONFIG_TEMPLATE,
    WORLD_MODULE_PATH,
    WORLD_MODULE_TEMPLATE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScaffoldBundle:
    """Support files written into one execution directory."""

    directory: Path
    reports_placeholder: Path
    runner_config: Path
    world_module: Path
    compiler_config: Path

    @property
    def reports_dir(self) -> Path:
        return self.reports_placeholder.parent

    def files(self) -> tuple[Path, ...]:
        return (
            self.reports_placeholder,
            self.runner_config,
            self.world_module,
            self.compiler_config,
        )


def build_scaffold_contents() -> Mapping[str, str]:
    """Return relative path -> canonical content for every scaffold file."""
    return {
        f"{REPORTS_DIRNAME}/{REPORTS_PLACEHOLDER_FILENAME}": "",
        RUNNER_CONFIG_FILENAME: RUNNER_CONFIG_TEMPLATE,
        WORLD_MODULE_PATH: WORLD_MODULE_TEMPLATE,
        COMPILER_CONFIG_FILENAME: COMPILER_CONFIG_TEMPLATE,
    }


def scaffold_environment(directory: Path | str) -> ScaffoldBundle:
    """Write the reports directory, runner config, world module and tsconfig.

    Every call overwrites the files with the same canonical content.

    Raises:
      FileSystemError: If a scaffold file cannot be written.
    """
    root = Path(directory)
    logger.info("Setting up test environment in %s", root)
    for relative_path, content in build_scaffold_contents().items():
        write_text_file(root / relative_path, content)
        logger.debug("Wrote %s", relative_path)
    return ScaffoldBundle(
        directory=root,
        reports_placeholder=root / REPORTS_DIRNAME / REPORTS_PLACEHOLDER_FILENAME,
        runner_config=root / RUNNER_CONFIG_FILENAME,
        world_module=root / WORLD_MODULE_PATH,
        compiler_config=root / COMPILER_CONFIG_FILENAME,
    )
