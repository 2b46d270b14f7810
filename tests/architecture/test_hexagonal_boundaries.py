"""
Hexagonal Architecture Boundary Tests.

Tests that the orchestrator runs against any implementation of the domain
ports, and that durable session records hold references, never content.
"""

import json
from pathlib import Path
from typing import Any

import pytest

from stageguard.application import WorkflowOrchestrator
from stageguard.domain.exceptions import ReferenceReadFailure
from stageguard.domain.interfaces import ArtifactStoreInterface, ReferenceStoreInterface
from stageguard.domain.models import ContentReference
from stageguard.domain.responses import ConfirmationResponse, GenerationResponse
from stageguard.infrastructure.persistence import (
    InMemorySessionRepository,
    InMemoryTaskMapping,
)


class DictReferenceStore(ReferenceStoreInterface):
    """Reference store keeping content in a dict."""

    def __init__(self) -> None:
        self.blobs: dict[str, str] = {}

    def put(
        self,
        session_id: str,
        cwd: str,
        stage: str,
        kind: str,
        content: Any,
        extension: str = "md",
    ) -> ContentReference:
        text = content if isinstance(content, str) else json.dumps(content)
        key = f"{session_id}/{stage}_{kind}_{len(self.blobs)}.{extension}"
        self.blobs[key] = text
        return ContentReference(
            summary=text[:10], file_path=key, size=len(text), last_updated="now"
        )

    def get(self, cwd: str, reference: ContentReference) -> str:
        if reference.file_path not in self.blobs:
            raise ReferenceReadFailure(reference.file_path)
        return self.blobs[reference.file_path]


class DictArtifactStore(ArtifactStoreInterface):
    """Artifact store keeping files in a dict."""

    def __init__(self) -> None:
        self.files: dict[str, str] = {}

    def write(self, cwd: str, task_name: str, filename: str, content: str) -> str:
        path = f"{task_name}/{filename}"
        self.files[path] = content
        return path

    def task_exists(self, cwd: str, task_name: str) -> bool:
        return any(path.startswith(f"{task_name}/") for path in self.files)


class TestPortsAreSufficient:
    """The orchestrator needs nothing beyond the domain ports."""

    def test_runs_on_non_filesystem_adapters(self, candidate) -> None:  # noqa: ANN001
        references = DictReferenceStore()
        artifacts = DictArtifactStore()
        orchestrator = WorkflowOrchestrator(
            repository=InMemorySessionRepository(),
            references=references,
            artifacts=artifacts,
            task_mapping=InMemoryTaskMapping(),
        )
        session_id = orchestrator.start("/virtual", "Blog").session_id

        passed = orchestrator.submit(session_id, "po", claude_result=candidate(95, "# PRD"))
        assert isinstance(passed, ConfirmationResponse)
        advanced = orchestrator.confirm(session_id, True)

        assert isinstance(advanced, GenerationResponse)
        assert artifacts.files == {"blog/01-product-requirements.md": "# PRD"}
        assert references.blobs[passed.final_draft_ref.file_path] == "# PRD"


class TestSessionRecordHoldsReferencesOnly:
    """Large content lives in reference files, never in the session record."""

    def test_no_inline_engine_output(
        self, orchestrator: WorkflowOrchestrator, workspace: str, candidate
    ) -> None:  # noqa: ANN001
        marker = "UNIQUE-ENGINE-OUTPUT-MARKER " * 20
        session_id = orchestrator.start(workspace, "Blog").session_id

        orchestrator.submit(session_id, "po", claude_result=candidate(60, body=marker))

        record = (Path(workspace) / ".stageguard" / f"session-{session_id}.json").read_text(
            encoding="utf-8"
        )
        stage = json.loads(record)["stages"]["po"]
        assert set(stage["claude_result_ref"]) == {
            "summary",
            "file_path",
            "size",
            "last_updated",
        }
        assert marker not in json.dumps(stage["claude_result_ref"])

    @pytest.mark.parametrize("field", ["claude_result", "codex_result", "final_result"])
    def test_session_schema_has_no_inline_result_fields(self, field: str) -> None:
        from stageguard.schemas import get_session_schema

        stage_properties = get_session_schema()["$defs"]["stageRecord"]["properties"]

        assert field not in stage_properties
        assert f"{field}_ref" in stage_properties
