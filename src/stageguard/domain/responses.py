"""
Response variants returned by workflow operations.

One frozen dataclass per outcome. The gating signals callers must honour
(`interaction_type`, `requires_user_confirmation`) and the resulting
session state are class-level constants of each variant rather than loose
optional fields, so a variant cannot be produced without them.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar

from stageguard.domain.models import ContentReference, InteractionType, SessionState


def _plain(value: Any) -> Any:
    """Convert a field value into JSON-compatible data."""
    if isinstance(value, ContentReference):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple | list):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


@dataclass(frozen=True)
class WorkflowResponse:
    """Base for all operation outcomes."""

    interaction_type: ClassVar[InteractionType]
    requires_user_confirmation: ClassVar[bool] = True
    state: ClassVar[SessionState | None] = None

    session_id: str | None

    @property
    def is_error(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"session_id": self.session_id}
        if self.state is not None:
            data["state"] = self.state.value
        data["requires_user_confirmation"] = self.requires_user_confirmation
        data["interaction_type"] = self.interaction_type.value
        for f in fields(self):
            if f.name != "session_id":
                data[f.name] = _plain(getattr(self, f.name))
        return data


@dataclass(frozen=True)
class GenerationResponse(WorkflowResponse):
    """A stage is ready for the caller to generate content."""

    interaction_type: ClassVar[InteractionType] = InteractionType.AWAITING_GENERATION
    state: ClassVar[SessionState | None] = SessionState.GENERATING

    stage: str
    stage_description: str
    role_prompt: str
    engines: tuple[str, ...]
    context: dict[str, Any]
    user_message: str
    task_name: str | None = None
    previous_artifact: str | None = None
    scope_instructions_required: bool = False
    pending_user_actions: tuple[str, ...] = ("review_and_confirm_generation",)


@dataclass(frozen=True)
class ClarificationResponse(WorkflowResponse):
    """The user must answer questions before the stage can be regenerated."""

    interaction_type: ClassVar[InteractionType] = InteractionType.USER_DECISION
    state: ClassVar[SessionState | None] = SessionState.CLARIFYING

    stage: str
    current_score: int | None
    iteration: int
    questions_ref: ContentReference
    gaps_ref: ContentReference
    draft_ref: ContentReference
    questions_count: int
    gaps_count: int
    questions_summary: str
    gaps_summary: str
    user_message: str
    user_message_ref: ContentReference | None = None
    scores: dict[str, int] | None = None
    feedback: str | None = None
    must_wait_for_user: bool = True
    pending_user_actions: tuple[str, ...] = ("answer_questions",)


@dataclass(frozen=True)
class ConfirmationResponse(WorkflowResponse):
    """A gated stage passed; one confirm saves it and advances."""

    interaction_type: ClassVar[InteractionType] = InteractionType.USER_DECISION
    state: ClassVar[SessionState | None] = SessionState.AWAITING_CONFIRMATION

    stage: str
    score: int
    final_draft_ref: ContentReference
    scores: dict[str, int]
    score_summary: str
    user_message: str
    user_message_ref: ContentReference | None = None
    pending_user_actions: tuple[str, ...] = (
        "confirm",
        "confirm_save",
        "reject_and_refine",
    )


@dataclass(frozen=True)
class ApprovalResponse(WorkflowResponse):
    """The ungated approval stage was saved and awaits approve/reject."""

    interaction_type: ClassVar[InteractionType] = InteractionType.USER_DECISION
    state: ClassVar[SessionState | None] = SessionState.AWAITING_APPROVAL

    stage: str
    artifact_path: str
    user_message: str
    pending_user_actions: tuple[str, ...] = (
        "approve_to_next_stage",
        "reject_and_refine",
    )


@dataclass(frozen=True)
class RefinementResponse(WorkflowResponse):
    """The current stage must be regenerated."""

    interaction_type: ClassVar[InteractionType] = InteractionType.AWAITING_REGENERATION
    state: ClassVar[SessionState | None] = SessionState.REFINING

    stage: str
    user_message: str
    current_score: int | None = None
    iteration: int | None = None
    improvement_guidance: tuple[str, ...] = ()
    feedback: str | None = None
    scores: dict[str, int] | None = None
    user_feedback: str | None = None
    user_answers_ref: ContentReference | None = None
    role_prompt: str | None = None
    engines: tuple[str, ...] = ()
    context: dict[str, Any] | None = None
    pending_user_actions: tuple[str, ...] = ("regenerate_with_improvements",)


@dataclass(frozen=True)
class CompletionResponse(WorkflowResponse):
    """Every stage is completed."""

    interaction_type: ClassVar[InteractionType] = InteractionType.WORKFLOW_COMPLETED
    requires_user_confirmation: ClassVar[bool] = False
    state: ClassVar[SessionState | None] = SessionState.COMPLETED

    artifacts: tuple[str, ...]
    user_message: str
    previous_artifact: str | None = None


@dataclass(frozen=True)
class StatusResponse(WorkflowResponse):
    """Read-only projection of a session."""

    interaction_type: ClassVar[InteractionType] = InteractionType.STATUS
    requires_user_confirmation: ClassVar[bool] = False

    projection: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return _plain(self.projection)


@dataclass(frozen=True)
class FailureResponse(WorkflowResponse):
    """Structured failure; the session was not mutated."""

    interaction_type: ClassVar[InteractionType] = InteractionType.FAILURE
    requires_user_confirmation: ClassVar[bool] = False

    action: str
    error: str
    error_type: str

    @property
    def is_error(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "failed",
            "error": self.error,
            "error_type": self.error_type,
            "session_id": self.session_id,
            "action": self.action,
        }
