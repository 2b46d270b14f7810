"""
Session repositories.

FilesystemSessionRepository keeps a process-lifetime table and rehydrates
from `{root}/{state_dir}/session-{session_id}.json` on a miss, so a session
survives a process restart. InMemorySessionRepository is for tests and
ephemeral use.
"""

import copy
import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from stageguard.domain.exceptions import SessionNotFound
from stageguard.domain.interfaces import SessionRepositoryInterface
from stageguard.domain.models import (
    ClarificationQuestion,
    ContentReference,
    Session,
    SessionState,
    StageRecord,
    StageStatus,
)
from stageguard.schemas import validate_session

logger = logging.getLogger(__name__)

REF_FIELDS = ("claude_result_ref", "codex_result_ref", "final_result_ref")


# =============================================================================
# SERIALIZATION
# =============================================================================


def stage_record_to_dict(record: StageRecord) -> dict[str, Any]:
    """Serialize a stage record; unset optional fields are omitted."""
    data: dict[str, Any] = {"status": record.status.value}
    if record.score is not None:
        data["score"] = record.score
    if record.approved is not None:
        data["approved"] = record.approved
    if record.iteration is not None:
        data["iteration"] = record.iteration
    if record.draft is not None:
        data["draft"] = record.draft
    if record.questions is not None:
        data["questions"] = [q.to_dict() for q in record.questions]
    if record.answers is not None:
        data["answers"] = dict(record.answers)
    if record.gaps is not None:
        data["gaps"] = list(record.gaps)
    for name in REF_FIELDS:
        ref = getattr(record, name)
        if ref is not None:
            data[name] = ref.to_dict()
    return data


def dict_to_stage_record(data: dict[str, Any]) -> StageRecord:
    questions = data.get("questions")
    refs = {
        name: ContentReference.from_dict(data[name]) if data.get(name) else None
        for name in REF_FIELDS
    }
    return StageRecord(
        status=StageStatus(data["status"]),
        score=data.get("score"),
        approved=data.get("approved"),
        iteration=data.get("iteration"),
        draft=data.get("draft"),
        questions=(
            [ClarificationQuestion.from_dict(q) for q in questions]
            if questions is not None
            else None
        ),
        answers=data.get("answers"),
        gaps=data.get("gaps"),
        **refs,
    )


def session_to_dict(session: Session) -> dict[str, Any]:
    """Serialize session to JSON-compatible dict."""
    return {
        "session_id": session.session_id,
        "task_name": session.task_name,
        "cwd": session.cwd,
        "objective": session.objective,
        "current_stage": session.current_stage,
        "current_state": session.current_state.value,
        "stages": {
            stage_id: stage_record_to_dict(record)
            for stage_id, record in session.stages.items()
        },
        "artifacts": list(session.artifacts),
        "created_at": session.created_at,
        "updated_at": session.updated_at,
    }


def dict_to_session(data: dict[str, Any]) -> Session:
    """Deserialize session from JSON dict."""
    return Session(
        session_id=data["session_id"],
        task_name=data["task_name"],
        cwd=data["cwd"],
        objective=data["objective"],
        current_stage=data["current_stage"],
        current_state=SessionState(data["current_state"]),
        stages={
            stage_id: dict_to_stage_record(record)
            for stage_id, record in data["stages"].items()
        },
        artifacts=list(data.get("artifacts", [])),
        created_at=data.get("created_at", ""),
        updated_at=data.get("updated_at", ""),
    )


# =============================================================================
# REPOSITORIES
# =============================================================================


class FilesystemSessionRepository(SessionRepositoryInterface):
    """
    Durable session records, one JSON file per session.

    Records are written into the session's own working directory. Lookups
    after a restart search every known root (the roots passed in, plus every
    cwd a session has been stored under during this process).
    """

    def __init__(self, roots: list[str] | None = None, state_dir: str = ".stageguard"):
        """
        Args:
            roots: Working directories to search on a cache miss
                (defaults to the process working directory)
            state_dir: State directory, relative to each root
        """
        self._roots: list[Path] = [Path(r) for r in (roots or [os.getcwd()])]
        self._state_dir = state_dir
        self._cache: dict[str, Session] = {}

    def _session_path(self, root: Path | str, session_id: str) -> Path:
        return Path(root) / self._state_dir / f"session-{session_id}.json"

    def _remember_root(self, cwd: str) -> None:
        root = Path(cwd)
        if root not in self._roots:
            self._roots.append(root)

    def _write_atomic(self, path: Path, data: dict[str, Any]) -> None:
        """Write-to-temp + rename."""
        temp_path = path.with_suffix(".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        temp_path.replace(path)

    def get(self, session_id: str) -> Session:
        """Retrieve session by ID (cache-first)."""
        if session_id in self._cache:
            return self._cache[session_id]

        session = self.rehydrate(session_id)
        if session is None:
            raise SessionNotFound(session_id)

        self._cache[session_id] = session
        return session

    def put(self, session: Session) -> None:
        session.updated_at = datetime.now(UTC).isoformat()

        path = self._session_path(session.cwd, session.session_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._write_atomic(path, session_to_dict(session))

        self._remember_root(session.cwd)
        self._cache[session.session_id] = session
        logger.debug(
            "Saved session %s (%s/%s)",
            session.session_id,
            session.current_stage,
            session.current_state.value,
        )

    def rehydrate(self, session_id: str) -> Session | None:
        for root in self._roots:
            path = self._session_path(root, session_id)
            if not path.exists():
                continue
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            validate_session(data)
            logger.info("Rehydrated session %s from %s", session_id, path)
            return dict_to_session(data)
        return None


class InMemorySessionRepository(SessionRepositoryInterface):
    """Simple in-memory repository for testing."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def get(self, session_id: str) -> Session:
        if session_id not in self._sessions:
            raise SessionNotFound(session_id)
        return self._sessions[session_id]

    def put(self, session: Session) -> None:
        session.updated_at = datetime.now(UTC).isoformat()
        self._sessions[session.session_id] = session

    def rehydrate(self, session_id: str) -> Session | None:
        session = self._sessions.get(session_id)
        return copy.deepcopy(session) if session is not None else None
