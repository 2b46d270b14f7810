"""
Domain layer for the stage workflow.

Contains models, ports and the text heuristics, with no dependency on the
application or infrastructure layers.
"""

from stageguard.domain.exceptions import (
    ConfigurationError,
    InvalidTransition,
    MissingFinalResult,
    MissingResult,
    ReferenceReadFailure,
    SessionNotFound,
    StageMismatch,
    WorkflowError,
)
from stageguard.domain.interfaces import (
    ArtifactStoreInterface,
    ClarificationExtractorInterface,
    DraftExtractorInterface,
    GapAnalyzerInterface,
    ReferenceStoreInterface,
    RolePromptProviderInterface,
    ScoreExtractorInterface,
    SessionRepositoryInterface,
    TaskMappingInterface,
)
from stageguard.domain.models import (
    ClarificationQuestion,
    ContentReference,
    InteractionType,
    Session,
    SessionState,
    StageRecord,
    StageStatus,
    TaskMappingEntry,
)
from stageguard.domain.pipeline import (
    DEFAULT_WORKFLOW,
    StageDefinition,
    WorkflowDefinition,
)

__all__ = [
    # Models
    "ClarificationQuestion",
    "ContentReference",
    "InteractionType",
    "Session",
    "SessionState",
    "StageRecord",
    "StageStatus",
    "TaskMappingEntry",
    # Pipeline
    "DEFAULT_WORKFLOW",
    "StageDefinition",
    "WorkflowDefinition",
    # Interfaces
    "ArtifactStoreInterface",
    "ClarificationExtractorInterface",
    "DraftExtractorInterface",
    "GapAnalyzerInterface",
    "ReferenceStoreInterface",
    "RolePromptProviderInterface",
    "ScoreExtractorInterface",
    "SessionRepositoryInterface",
    "TaskMappingInterface",
    # Exceptions
    "ConfigurationError",
    "InvalidTransition",
    "MissingFinalResult",
    "MissingResult",
    "ReferenceReadFailure",
    "SessionNotFound",
    "StageMismatch",
    "WorkflowError",
]
