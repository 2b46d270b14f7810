"""Tests for domain models."""

import pytest

from stageguard.domain.exceptions import (
    ReferenceReadFailure,
    SessionNotFound,
    StageMismatch,
)
from stageguard.domain.models import (
    ClarificationQuestion,
    ContentReference,
    SessionState,
    StageRecord,
    StageStatus,
)
from stageguard.domain.prompts import DEFAULT_ROLE_PROMPTS, StaticRolePrompts


class TestEnums:
    """Wire values of the enumerations."""

    def test_session_states(self) -> None:
        assert {state.value for state in SessionState} == {
            "generating",
            "clarifying",
            "refining",
            "awaiting_confirmation",
            "awaiting_approval",
            "completed",
        }

    def test_stage_statuses(self) -> None:
        assert len(StageStatus) == 3


class TestContentReference:
    """ContentReference is an immutable value."""

    def test_immutable(self, sample_reference: ContentReference) -> None:
        with pytest.raises(AttributeError):
            sample_reference.size = 10  # type: ignore[misc]

    def test_dict_round_trip(self, sample_reference: ContentReference) -> None:
        assert ContentReference.from_dict(sample_reference.to_dict()) == sample_reference


class TestClarificationQuestion:
    """Optional context is omitted when absent."""

    def test_context_omitted(self) -> None:
        assert ClarificationQuestion(id="q1", question="Why?").to_dict() == {
            "id": "q1",
            "question": "Why?",
        }

    def test_from_dict(self) -> None:
        question = ClarificationQuestion.from_dict(
            {"id": "q2", "question": "Who?", "context": "Roles"}
        )

        assert question.context == "Roles"


class TestStageRecord:
    """StageRecord helpers."""

    def test_defaults(self) -> None:
        record = StageRecord()

        assert record.status is StageStatus.PENDING
        assert record.final_result_ref is None

    def test_has_answers_ignores_blank_values(self) -> None:
        assert not StageRecord(answers={"q1": "  "}).has_answers()
        assert not StageRecord(answers={}).has_answers()
        assert StageRecord(answers={"q1": "", "q2": "yes"}).has_answers()

    def test_candidate_ref(self, sample_reference: ContentReference) -> None:
        record = StageRecord(codex_result_ref=sample_reference)

        assert record.candidate_ref("codex") == sample_reference
        assert record.candidate_ref("claude") is None
        assert record.candidate_ref("unknown") is None


class TestSession:
    """Session helpers."""

    def test_current_record(self, sample_session) -> None:  # noqa: ANN001
        assert sample_session.current_record is sample_session.stages["po"]

    def test_record_artifact_is_append_only_and_unique(self, sample_session) -> None:  # noqa: ANN001
        assert sample_session.record_artifact("specs/t/01-product-requirements.md")
        assert not sample_session.record_artifact("specs/t/01-product-requirements.md")
        assert sample_session.artifacts == ["specs/t/01-product-requirements.md"]


class TestExceptions:
    """Structured failure metadata."""

    def test_error_type_is_class_name(self) -> None:
        error = StageMismatch("wrong stage", "s1", "submit")

        assert error.error_type == "StageMismatch"
        assert error.session_id == "s1"
        assert error.action == "submit"

    def test_session_not_found_message(self) -> None:
        error = SessionNotFound("abc", "status")

        assert error.message == "Session not found: abc"
        assert error.action == "status"

    def test_reference_read_failure_keeps_path(self) -> None:
        error = ReferenceReadFailure("a/b.md")

        assert error.file_path == "a/b.md"
        assert "missing" in str(error)


class TestRolePrompts:
    """StaticRolePrompts falls back to defaults."""

    def test_default_prompt(self) -> None:
        assert StaticRolePrompts().role_prompt("po") == DEFAULT_ROLE_PROMPTS["po"]

    def test_override(self) -> None:
        prompts = StaticRolePrompts({"po": "Custom PO"})

        assert prompts.role_prompt("po") == "Custom PO"
        assert prompts.role_prompt("qa") == DEFAULT_ROLE_PROMPTS["qa"]

    def test_unknown_stage(self) -> None:
        assert "docs" in StaticRolePrompts().role_prompt("docs")

    def test_gated_prompts_state_output_contract(self) -> None:
        assert "quality_score" in DEFAULT_ROLE_PROMPTS["po"]
