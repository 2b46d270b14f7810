"""
Final stage artifacts: `{cwd}/{artifacts_dir}/{task_name}/{filename}`.

Keyed by task name, not session id, so outputs can be found by project
name without consulting the session table.
"""

import logging
from pathlib import Path

from stageguard.domain.interfaces import ArtifactStoreInterface

logger = logging.getLogger(__name__)


class FilesystemArtifactStore(ArtifactStoreInterface):
    """Whole-file writes; re-saving a stage replaces its artifact."""

    def __init__(self, artifacts_dir: str = "specs"):
        self._artifacts_dir = artifacts_dir

    def _task_dir(self, cwd: str, task_name: str) -> Path:
        return Path(cwd) / self._artifacts_dir / task_name

    def write(self, cwd: str, task_name: str, filename: str, content: str) -> str:
        directory = self._task_dir(cwd, task_name)
        directory.mkdir(parents=True, exist_ok=True)

        path = directory / filename
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)

        relative = str(path.relative_to(cwd))
        logger.info("Saved artifact %s (%d chars)", relative, len(content))
        return relative

    def task_exists(self, cwd: str, task_name: str) -> bool:
        return self._task_dir(cwd, task_name).exists()
