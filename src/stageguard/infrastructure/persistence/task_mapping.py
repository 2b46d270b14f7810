"""
Task mapping table: `{cwd}/{state_dir}/task-mapping.json`.

Maps session id -> {task_name, objective, created_at} for operator lookup.
Entries are only ever added; the table is never read back into live
session logic other than to keep new task names unique.
"""

import json
import logging
from pathlib import Path
from typing import Any

from stageguard.domain.interfaces import TaskMappingInterface
from stageguard.domain.models import TaskMappingEntry

logger = logging.getLogger(__name__)

MAPPING_FILENAME = "task-mapping.json"


class FilesystemTaskMapping(TaskMappingInterface):
    """Append-only JSON table per working directory."""

    def __init__(self, state_dir: str = ".stageguard"):
        self._state_dir = state_dir

    def _mapping_path(self, cwd: str) -> Path:
        return Path(cwd) / self._state_dir / MAPPING_FILENAME

    def _read(self, cwd: str) -> dict[str, Any]:
        path = self._mapping_path(cwd)
        if not path.exists():
            return {}
        with open(path, encoding="utf-8") as f:
            result: dict[str, Any] = json.load(f)
            return result

    def record(self, cwd: str, entry: TaskMappingEntry) -> None:
        mapping = self._read(cwd)
        if entry.session_id in mapping:
            logger.warning("Task mapping already has session %s", entry.session_id)
            return

        mapping[entry.session_id] = {
            "task_name": entry.task_name,
            "objective": entry.objective,
            "created_at": entry.created_at,
        }

        path = self._mapping_path(cwd)
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(mapping, f, indent=2, ensure_ascii=False)
        temp_path.replace(path)

    def load(self, cwd: str) -> dict[str, TaskMappingEntry]:
        return {
            session_id: TaskMappingEntry(
                session_id=session_id,
                task_name=data["task_name"],
                objective=data["objective"],
                created_at=data["created_at"],
            )
            for session_id, data in self._read(cwd).items()
        }


class InMemoryTaskMapping(TaskMappingInterface):
    """In-memory task mapping for testing."""

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, TaskMappingEntry]] = {}

    def record(self, cwd: str, entry: TaskMappingEntry) -> None:
        self._entries.setdefault(cwd, {}).setdefault(entry.session_id, entry)

    def load(self, cwd: str) -> dict[str, TaskMappingEntry]:
        return dict(self._entries.get(cwd, {}))
