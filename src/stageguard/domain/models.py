"""
Domain models for the stage workflow.

Reference and question records are immutable (frozen dataclasses); the
session and its stage records are the mutable state owned by the
orchestrator.
"""

from dataclasses import dataclass, field
from enum import Enum

# =============================================================================
# ENUMERATIONS
# =============================================================================


class StageStatus(Enum):
    """Lifecycle of a single pipeline stage."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class SessionState(Enum):
    """Position of a session inside the current stage's sub-protocol."""

    GENERATING = "generating"  # Waiting for the caller to generate + submit
    CLARIFYING = "clarifying"  # Waiting for the user to answer questions
    REFINING = "refining"  # Waiting for a regeneration
    AWAITING_CONFIRMATION = "awaiting_confirmation"  # Gated stage passed
    AWAITING_APPROVAL = "awaiting_approval"  # Ungated approval stage submitted
    COMPLETED = "completed"  # Terminal


class InteractionType(Enum):
    """Categorical tag telling the caller what kind of input is awaited."""

    AWAITING_GENERATION = "awaiting_generation"
    USER_DECISION = "user_decision"
    AWAITING_REGENERATION = "awaiting_regeneration"
    WORKFLOW_COMPLETED = "workflow_completed"
    STATUS = "status"
    FAILURE = "failure"


# =============================================================================
# CONTENT REFERENCES
# =============================================================================


@dataclass(frozen=True)
class ContentReference:
    """Small on-disk pointer substituted for a large blob."""

    summary: str  # Prefix of the content, or a structural description
    file_path: str  # Relative to the session's working directory
    size: int  # UTF-8 bytes
    last_updated: str  # ISO timestamp

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "file_path": self.file_path,
            "size": self.size,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ContentReference":
        return cls(
            summary=data["summary"],
            file_path=data["file_path"],
            size=data["size"],
            last_updated=data["last_updated"],
        )


# =============================================================================
# CLARIFICATION
# =============================================================================


@dataclass(frozen=True)
class ClarificationQuestion:
    """Open question raised by a generator for the user to answer."""

    id: str  # Short stable id, e.g. "q1"
    question: str
    context: str | None = None  # Why the question matters

    def to_dict(self) -> dict:
        data = {"id": self.id, "question": self.question}
        if self.context is not None:
            data["context"] = self.context
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ClarificationQuestion":
        return cls(
            id=data["id"],
            question=data["question"],
            context=data.get("context"),
        )


# =============================================================================
# SESSION STATE
# =============================================================================


@dataclass
class StageRecord:
    """Mutable per-stage record inside a session."""

    status: StageStatus = StageStatus.PENDING
    score: int | None = None
    approved: bool | None = None
    iteration: int | None = None
    draft: str | None = None
    questions: list[ClarificationQuestion] | None = None
    answers: dict[str, str] | None = None
    gaps: list[str] | None = None
    claude_result_ref: ContentReference | None = None
    codex_result_ref: ContentReference | None = None
    final_result_ref: ContentReference | None = None

    def candidate_ref(self, engine: str) -> ContentReference | None:
        return getattr(self, f"{engine}_result_ref", None)

    def has_answers(self) -> bool:
        """True if at least one non-blank answer has been recorded."""
        if not self.answers:
            return False
        return any(value and value.strip() for value in self.answers.values())


@dataclass
class Session:
    """The unit of work: one objective driven through the whole pipeline."""

    session_id: str
    task_name: str
    cwd: str
    objective: str
    current_stage: str
    current_state: SessionState
    stages: dict[str, StageRecord]
    artifacts: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @property
    def current_record(self) -> StageRecord:
        return self.stages[self.current_stage]

    def record_artifact(self, path: str) -> bool:
        """Append an artifact path; returns False if it was already recorded."""
        if path in self.artifacts:
            return False
        self.artifacts.append(path)
        return True


@dataclass(frozen=True)
class TaskMappingEntry:
    """Operator lookup entry: session id -> human-readable task."""

    session_id: str
    task_name: str
    objective: str
    created_at: str
