"""Shared pytest fixtures for stageguard tests."""

import json
from collections.abc import Callable
from typing import Any

import pytest

from stageguard.application.orchestrator import WorkflowOrchestrator
from stageguard.domain.models import (
    ClarificationQuestion,
    ContentReference,
    Session,
    SessionState,
    StageRecord,
    StageStatus,
)
from stageguard.domain.pipeline import DEFAULT_WORKFLOW
from stageguard.infrastructure.persistence import (
    FilesystemArtifactStore,
    FilesystemReferenceStore,
    FilesystemSessionRepository,
    FilesystemTaskMapping,
    InMemorySessionRepository,
    InMemoryTaskMapping,
)

OBJECTIVE = "Build a user authentication system with JWT"

COMPLETE_PRD = """# Product Requirements

## Executive Summary
JWT based authentication for the web app.

## Business Goals
Reduce account takeover incidents by 50%.

## User Stories
As a user I can log in with email and password.

### Acceptance Criteria
- Login responds in < 200ms

## Functional Requirements
Issue access and refresh tokens.

## Technical Requirements
Dependencies: PyJWT 2.x. Error handling for expired tokens.

## Success Metrics
Login success rate > 99%

## Scope & Priorities
MVP covers login only. Timeline: milestone 1 in two weeks.
"""


def make_candidate(
    score: int | None,
    body: str = "# PRD\nInitial draft",
    questions: list[Any] | None = None,
    gaps: list[str] | None = None,
    field: str = "prd_draft",
) -> str:
    """Build engine output the way generators emit it: JSON with a body field."""
    data: dict[str, Any] = {field: body}
    if score is not None:
        data["quality_score"] = score
    if questions is not None:
        data["questions"] = questions
    if gaps is not None:
        data["gaps"] = gaps
    return json.dumps(data, ensure_ascii=False)


@pytest.fixture
def candidate() -> Callable[..., str]:
    """Factory for engine output (see make_candidate)."""
    return make_candidate


@pytest.fixture
def complete_prd() -> str:
    """A document with every section and signal the gap analysis checks."""
    return COMPLETE_PRD


@pytest.fixture
def objective() -> str:
    return OBJECTIVE


@pytest.fixture
def workspace(tmp_path) -> str:  # noqa: ANN001
    """Working directory for a session."""
    path = tmp_path / "project"
    path.mkdir()
    return str(path)


@pytest.fixture
def reference_store() -> FilesystemReferenceStore:
    """Reference store under the default state directory."""
    return FilesystemReferenceStore()


@pytest.fixture
def orchestrator(workspace: str, reference_store: FilesystemReferenceStore) -> WorkflowOrchestrator:
    """Orchestrator with filesystem adapters rooted at the workspace."""
    return WorkflowOrchestrator(
        repository=FilesystemSessionRepository(roots=[workspace]),
        references=reference_store,
        artifacts=FilesystemArtifactStore(),
        task_mapping=FilesystemTaskMapping(),
    )


@pytest.fixture
def memory_orchestrator(reference_store: FilesystemReferenceStore) -> WorkflowOrchestrator:
    """Orchestrator with in-memory session and task mapping tables."""
    return WorkflowOrchestrator(
        repository=InMemorySessionRepository(),
        references=reference_store,
        artifacts=FilesystemArtifactStore(),
        task_mapping=InMemoryTaskMapping(),
    )


@pytest.fixture
def sample_reference() -> ContentReference:
    """A reference as the store would produce it."""
    return ContentReference(
        summary="# PRD",
        file_path=".stageguard/temp/sess-001/po_final_result_2025-01-01T00-00-00-000000Z.md",
        size=5,
        last_updated="2025-01-01T00:00:00+00:00",
    )


@pytest.fixture
def sample_session(workspace: str, sample_reference: ContentReference) -> Session:
    """A session clarifying its first stage."""
    stages = {stage.stage_id: StageRecord() for stage in DEFAULT_WORKFLOW.stages}
    stages["po"] = StageRecord(
        status=StageStatus.IN_PROGRESS,
        score=72,
        iteration=1,
        draft="# PRD",
        questions=[
            ClarificationQuestion(id="q1", question="Which roles exist?"),
            ClarificationQuestion(id="q2", question="SSO needed?", context="Enterprise"),
        ],
        answers={"q1": "admin and member"},
        gaps=["No metrics"],
        claude_result_ref=sample_reference,
    )
    return Session(
        session_id="sess-001",
        task_name="build-a-user-authentication-system-with-jwt",
        cwd=workspace,
        objective=OBJECTIVE,
        current_stage="po",
        current_state=SessionState.CLARIFYING,
        stages=stages,
        artifacts=[],
        created_at="2025-01-01T00:00:00+00:00",
        updated_at="2025-01-01T00:00:00+00:00",
    )
