"""Tests for response variants."""

import pytest

from stageguard.domain.models import ContentReference
from stageguard.domain.responses import (
    ApprovalResponse,
    CompletionResponse,
    ConfirmationResponse,
    FailureResponse,
    GenerationResponse,
    StatusResponse,
)


@pytest.fixture
def ref() -> ContentReference:
    return ContentReference(
        summary="# PRD",
        file_path=".stageguard/temp/s/po_final_result_x.md",
        size=5,
        last_updated="2025-01-01T00:00:00+00:00",
    )


class TestGatingSignals:
    """interaction_type / requires_user_confirmation are part of each variant."""

    def test_generation_response(self) -> None:
        response = GenerationResponse(
            session_id="s",
            stage="po",
            stage_description="Product Owner",
            role_prompt="You are the PO",
            engines=("claude",),
            context={"objective": "x"},
            user_message="Generate",
        )

        data = response.to_dict()

        assert data["interaction_type"] == "awaiting_generation"
        assert data["requires_user_confirmation"] is True
        assert data["state"] == "generating"
        assert data["engines"] == ["claude"]
        assert list(data)[:4] == [
            "session_id",
            "state",
            "requires_user_confirmation",
            "interaction_type",
        ]

    def test_confirmation_renders_references(self, ref: ContentReference) -> None:
        response = ConfirmationResponse(
            session_id="s",
            stage="po",
            score=93,
            final_draft_ref=ref,
            scores={"claude": 93},
            score_summary="claude: 93/100",
            user_message="Confirm?",
        )

        data = response.to_dict()

        assert data["interaction_type"] == "user_decision"
        assert data["state"] == "awaiting_confirmation"
        assert data["final_draft_ref"]["file_path"] == ref.file_path
        assert data["user_message_ref"] is None
        assert "confirm" in data["pending_user_actions"]

    def test_approval_response(self) -> None:
        data = ApprovalResponse(
            session_id="s", stage="sm", artifact_path="specs/t/03-sprint-plan.md", user_message="ok"
        ).to_dict()

        assert data["state"] == "awaiting_approval"
        assert data["pending_user_actions"] == ["approve_to_next_stage", "reject_and_refine"]

    def test_completion_needs_no_confirmation(self) -> None:
        data = CompletionResponse(
            session_id="s", artifacts=("a.md", "b.md"), user_message="done"
        ).to_dict()

        assert data["requires_user_confirmation"] is False
        assert data["interaction_type"] == "workflow_completed"
        assert data["artifacts"] == ["a.md", "b.md"]

    def test_variants_are_frozen(self) -> None:
        response = CompletionResponse(session_id="s", artifacts=(), user_message="done")

        with pytest.raises(AttributeError):
            response.user_message = "changed"  # type: ignore[misc]


class TestFailureAndStatus:
    """Responses with their own rendering."""

    def test_failure_shape(self) -> None:
        response = FailureResponse(
            session_id="missing",
            action="submit",
            error="Session not found: missing",
            error_type="SessionNotFound",
        )

        assert response.is_error
        assert response.to_dict() == {
            "status": "failed",
            "error": "Session not found: missing",
            "error_type": "SessionNotFound",
            "session_id": "missing",
            "action": "submit",
        }

    def test_status_renders_projection(self) -> None:
        response = StatusResponse(session_id="s", projection={"current_stage": "po"})

        assert not response.is_error
        assert response.to_dict() == {"current_stage": "po"}
