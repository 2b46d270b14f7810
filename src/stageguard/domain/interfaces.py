"""
Domain interfaces (Ports) for the stage workflow.

These abstract base classes define the contracts the state machine depends
on. Persistence ports are implemented in `stageguard.infrastructure`;
extraction ports have their default implementations in the domain layer and
can be swapped for hardened or synthetic strategies.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stageguard.domain.models import (
        ClarificationQuestion,
        ContentReference,
        Session,
        TaskMappingEntry,
    )


# =============================================================================
# PERSISTENCE PORTS
# =============================================================================


class SessionRepositoryInterface(ABC):
    """
    Port for session records keyed by session id.

    Implementations keep a process-lifetime table and may rehydrate from a
    durable store on a cache miss. Callers serialize operations per session.
    """

    @abstractmethod
    def get(self, session_id: str) -> "Session":
        """
        Retrieve a session (cache first, then durable store).

        Raises:
            SessionNotFound: If no record exists anywhere
        """
        pass

    @abstractmethod
    def put(self, session: "Session") -> None:
        """Store a session in the table and persist it durably."""
        pass

    @abstractmethod
    def rehydrate(self, session_id: str) -> "Session | None":
        """Load a session from the durable store, bypassing the table."""
        pass


class ReferenceStoreInterface(ABC):
    """Port mapping large blobs to small on-disk references."""

    @abstractmethod
    def put(
        self,
        session_id: str,
        cwd: str,
        stage: str,
        kind: str,
        content: Any,
        extension: str = "md",
    ) -> "ContentReference":
        """
        Write content to a fresh file and return its reference.

        Args:
            session_id: Owning session (scopes the scratch directory)
            cwd: Session working directory
            stage: Stage id the content belongs to
            kind: Content kind, e.g. "claude_result", "questions"
            content: Text, or any JSON-serializable structure
            extension: File extension for the blob

        Returns:
            An immutable ContentReference
        """
        pass

    @abstractmethod
    def get(self, cwd: str, reference: "ContentReference") -> str:
        """
        Read the full content behind a reference.

        Raises:
            ReferenceReadFailure: If the file is missing or unreadable
        """
        pass


class ArtifactStoreInterface(ABC):
    """Port for final, per-stage artifacts keyed by task name."""

    @abstractmethod
    def write(self, cwd: str, task_name: str, filename: str, content: str) -> str:
        """Write an artifact and return its path relative to cwd."""
        pass

    @abstractmethod
    def task_exists(self, cwd: str, task_name: str) -> bool:
        """True if an artifact directory for the task name already exists."""
        pass


class TaskMappingInterface(ABC):
    """Port for the append-only session -> task lookup table."""

    @abstractmethod
    def record(self, cwd: str, entry: "TaskMappingEntry") -> None:
        """Add an entry for a session."""
        pass

    @abstractmethod
    def load(self, cwd: str) -> dict[str, "TaskMappingEntry"]:
        """Return all entries in a working directory keyed by session id."""
        pass


# =============================================================================
# EXTRACTION STRATEGY PORTS
# =============================================================================


class ScoreExtractorInterface(ABC):
    """Strategy deriving a 0-100 quality score from generated text."""

    @abstractmethod
    def extract_score(self, text: str) -> int:
        """Return an integer in [0, 100]; never raises."""
        pass


class GapAnalyzerInterface(ABC):
    """Strategy producing improvement guidance for an insufficient draft."""

    @abstractmethod
    def analyze(self, text: str, score: int) -> list[str]:
        """Return human-readable gap descriptions; never empty."""
        pass


class ClarificationExtractorInterface(ABC):
    """Strategy pulling embedded questions and gaps out of generated text."""

    @abstractmethod
    def extract_questions(self, text: str) -> list["ClarificationQuestion"]:
        """Return questions, or an empty list on absence or parse failure."""
        pass

    @abstractmethod
    def extract_gaps(self, text: str) -> list[str]:
        """Return gap strings, or an empty list on absence or parse failure."""
        pass


class DraftExtractorInterface(ABC):
    """Strategy recovering the plain document body from generated text."""

    @abstractmethod
    def extract_draft(self, text: str) -> str:
        """Return the document body; idempotent on its own output."""
        pass


class RolePromptProviderInterface(ABC):
    """Source of the static role prompt text handed to generators."""

    @abstractmethod
    def role_prompt(self, stage_id: str) -> str:
        """Return the role prompt for a stage."""
        pass
