"""
Persistence adapters: sessions, content references, task mapping, artifacts.
"""

from stageguard.infrastructure.persistence.artifacts import FilesystemArtifactStore
from stageguard.infrastructure.persistence.references import (
    FilesystemReferenceStore,
    summarize,
)
from stageguard.infrastructure.persistence.sessions import (
    FilesystemSessionRepository,
    InMemorySessionRepository,
)
from stageguard.infrastructure.persistence.task_mapping import (
    FilesystemTaskMapping,
    InMemoryTaskMapping,
)

__all__ = [
    "FilesystemArtifactStore",
    "FilesystemReferenceStore",
    "FilesystemSessionRepository",
    "FilesystemTaskMapping",
    "InMemorySessionRepository",
    "InMemoryTaskMapping",
    "summarize",
]
