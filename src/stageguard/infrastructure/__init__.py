"""
Infrastructure layer for the stage workflow.

Contains adapters for external concerns (durable files on disk).
"""

from stageguard.infrastructure.persistence import (
    FilesystemArtifactStore,
    FilesystemReferenceStore,
    FilesystemSessionRepository,
    FilesystemTaskMapping,
    InMemorySessionRepository,
    InMemoryTaskMapping,
)

__all__ = [
    "FilesystemArtifactStore",
    "FilesystemReferenceStore",
    "FilesystemSessionRepository",
    "FilesystemTaskMapping",
    "InMemorySessionRepository",
    "InMemoryTaskMapping",
]
