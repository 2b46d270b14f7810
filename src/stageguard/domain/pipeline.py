"""
Pipeline definition: the fixed, ordered stages a session moves through.

These are structures only. The default six-stage pipeline is defined at the
bottom of the module; alternative pipelines can be loaded from JSON via
`stageguard.config.load_workflow_definition`.
"""

import re
from dataclasses import dataclass
from typing import Any

# Objective text that opts a gated stage into the second candidate engine
SECOND_ENGINE_PATTERN = re.compile(r"codex|使用\s*codex", re.IGNORECASE)

GENERIC_CONTENT_FIELDS: tuple[str, ...] = ("draft", "result", "content")


@dataclass(frozen=True)
class StageDefinition:
    """Single pipeline stage definition."""

    stage_id: str  # e.g. "po", "architect"
    description: str  # Human-readable role/phase name
    engines: tuple[str, ...]  # Candidate engines that generate for this stage
    artifact: str  # Fixed artifact filename
    gated: bool = False  # Scored against a quality gate
    min_score: int | None = None  # Per-stage gate; None means the global pass threshold
    approval_required: bool = False
    content_fields: tuple[str, ...] = ()  # JSON fields holding the document body
    requires_scope: bool = False  # Caller must obtain scope before generating

    @property
    def is_gated(self) -> bool:
        return self.gated or self.min_score is not None

    @property
    def is_approval_stage(self) -> bool:
        """Ungated stage whose submission waits for an explicit approve."""
        return self.approval_required and not self.is_gated

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage_id": self.stage_id,
            "description": self.description,
            "engines": list(self.engines),
            "artifact": self.artifact,
            "gated": self.gated,
            "min_score": self.min_score,
            "approval_required": self.approval_required,
            "content_fields": list(self.content_fields),
            "requires_scope": self.requires_scope,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StageDefinition":
        return cls(
            stage_id=data["stage_id"],
            description=data.get("description", data["stage_id"]),
            engines=tuple(data["engines"]),
            artifact=data["artifact"],
            gated=data.get("gated", False),
            min_score=data.get("min_score"),
            approval_required=data.get("approval_required", False),
            content_fields=tuple(data.get("content_fields", ())),
            requires_scope=data.get("requires_scope", False),
        )


@dataclass(frozen=True)
class WorkflowDefinition:
    """Complete ordered pipeline."""

    name: str
    stages: tuple[StageDefinition, ...]
    generic_content_fields: tuple[str, ...] = GENERIC_CONTENT_FIELDS

    @property
    def stage_ids(self) -> tuple[str, ...]:
        return tuple(stage.stage_id for stage in self.stages)

    @property
    def first_stage(self) -> StageDefinition:
        return self.stages[0]

    def get_stage(self, stage_id: str) -> StageDefinition | None:
        """Get a stage by ID."""
        for stage in self.stages:
            if stage.stage_id == stage_id:
                return stage
        return None

    def index_of(self, stage_id: str) -> int:
        return self.stage_ids.index(stage_id)

    def next_stage(self, stage_id: str) -> StageDefinition | None:
        """Stage that follows `stage_id`, or None if it is the last one."""
        index = self.index_of(stage_id)
        if index + 1 < len(self.stages):
            return self.stages[index + 1]
        return None

    def previous_stages(self, stage_id: str) -> tuple[StageDefinition, ...]:
        return self.stages[: self.index_of(stage_id)]

    def content_fields(self) -> tuple[str, ...]:
        """Every document-body field: stage-specific first, generic last."""
        fields: list[str] = []
        for stage in self.stages:
            for name in stage.content_fields:
                if name not in fields:
                    fields.append(name)
        for name in self.generic_content_fields:
            if name not in fields:
                fields.append(name)
        return tuple(fields)

    def engines_for(self, stage_id: str, objective: str) -> tuple[str, ...]:
        """
        Engines the caller should run for a stage.

        Gated multi-engine stages only request the second engine when the
        objective explicitly asks for it; otherwise the first engine alone.
        """
        stage = self.get_stage(stage_id)
        if stage is None:
            return ()
        if stage.is_gated and len(stage.engines) > 1:
            if SECOND_ENGINE_PATTERN.search(objective or ""):
                return stage.engines
            return stage.engines[:1]
        return stage.engines

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "stages": [stage.to_dict() for stage in self.stages],
            "generic_content_fields": list(self.generic_content_fields),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkflowDefinition":
        return cls(
            name=data["name"],
            stages=tuple(StageDefinition.from_dict(s) for s in data["stages"]),
            generic_content_fields=tuple(
                data.get("generic_content_fields", GENERIC_CONTENT_FIELDS)
            ),
        )


# =============================================================================
# DEFAULT PIPELINE
# =============================================================================

DEFAULT_WORKFLOW = WorkflowDefinition(
    name="product-delivery",
    stages=(
        StageDefinition(
            stage_id="po",
            description="Product Owner - Requirements Analysis",
            engines=("claude", "codex"),
            artifact="01-product-requirements.md",
            gated=True,
            approval_required=True,
            content_fields=("prd_draft", "prd_updated"),
        ),
        StageDefinition(
            stage_id="architect",
            description="System Architect - Technical Design",
            engines=("claude", "codex"),
            artifact="02-system-architecture.md",
            gated=True,
            approval_required=True,
            content_fields=("architecture_draft", "architecture_updated"),
        ),
        StageDefinition(
            stage_id="sm",
            description="Scrum Master - Sprint Planning",
            engines=("claude",),
            artifact="03-sprint-plan.md",
            approval_required=True,
            content_fields=(
                "sprint_plan",
                "sprint_plan_updated",
                "plan",
                "plan_updated",
            ),
        ),
        StageDefinition(
            stage_id="dev",
            description="Developer - Implementation",
            engines=("codex",),
            artifact="code-implementation.md",
            content_fields=("implementation", "code", "dev_result"),
            requires_scope=True,
        ),
        StageDefinition(
            stage_id="review",
            description="Code Reviewer - Code Review",
            engines=("codex",),
            artifact="04-dev-reviewed.md",
            content_fields=("review", "review_result", "code_review"),
        ),
        StageDefinition(
            stage_id="qa",
            description="QA Engineer - Quality Assurance",
            engines=("codex",),
            artifact="05-qa-report.md",
            content_fields=("qa_report", "test_report", "qa_result"),
        ),
    ),
)
