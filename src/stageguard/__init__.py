"""
stageguard: quality-gated, resumable stage workflow orchestration.

Sequences a fixed pipeline of content-generation stages (requirements,
architecture, sprint plan, implementation, review, QA), gates progression on
quality scores extracted from externally generated text, and persists
resumable state. It never calls a model itself: callers generate with the
engines each response names and submit the results back.

Example:
    from stageguard import WorkflowOrchestrator
    from stageguard.infrastructure import (
        FilesystemArtifactStore,
        FilesystemReferenceStore,
        FilesystemSessionRepository,
        FilesystemTaskMapping,
    )

    orchestrator = WorkflowOrchestrator(
        repository=FilesystemSessionRepository(),
        references=FilesystemReferenceStore(),
        artifacts=FilesystemArtifactStore(),
        task_mapping=FilesystemTaskMapping(),
    )
    started = orchestrator.start(".", "Build a user authentication system with JWT")
    response = orchestrator.submit(started.session_id, "po", claude_result=draft)
"""

# Application layer (orchestration)
from stageguard.application.orchestrator import WorkflowOrchestrator

# Domain exceptions
from stageguard.domain.exceptions import (
    InvalidTransition,
    MissingFinalResult,
    MissingResult,
    ReferenceReadFailure,
    SessionNotFound,
    StageMismatch,
    WorkflowError,
)

# Domain models
from stageguard.domain.models import (
    ClarificationQuestion,
    ContentReference,
    InteractionType,
    Session,
    SessionState,
    StageRecord,
    StageStatus,
)

# Pipeline structures (content defined by calling applications)
from stageguard.domain.pipeline import (
    DEFAULT_WORKFLOW,
    StageDefinition,
    WorkflowDefinition,
)

# Response variants
from stageguard.domain.responses import (
    ApprovalResponse,
    ClarificationResponse,
    CompletionResponse,
    ConfirmationResponse,
    FailureResponse,
    GenerationResponse,
    RefinementResponse,
    StatusResponse,
    WorkflowResponse,
)

# Infrastructure (explicit import encouraged for dependency injection)
from stageguard.infrastructure.persistence import (
    FilesystemSessionRepository,
    InMemorySessionRepository,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Application
    "WorkflowOrchestrator",
    # Models
    "ClarificationQuestion",
    "ContentReference",
    "InteractionType",
    "Session",
    "SessionState",
    "StageRecord",
    "StageStatus",
    # Pipeline
    "DEFAULT_WORKFLOW",
    "StageDefinition",
    "WorkflowDefinition",
    # Responses
    "ApprovalResponse",
    "ClarificationResponse",
    "CompletionResponse",
    "ConfirmationResponse",
    "FailureResponse",
    "GenerationResponse",
    "RefinementResponse",
    "StatusResponse",
    "WorkflowResponse",
    # Exceptions
    "InvalidTransition",
    "MissingFinalResult",
    "MissingResult",
    "ReferenceReadFailure",
    "SessionNotFound",
    "StageMismatch",
    "WorkflowError",
    # Infrastructure
    "FilesystemSessionRepository",
    "InMemorySessionRepository",
]
