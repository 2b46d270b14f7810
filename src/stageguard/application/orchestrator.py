"""
WorkflowOrchestrator: the session state machine.

Drives one objective through the pipeline stages. The orchestrator never
generates content itself; callers generate with the engines it names and
submit the results back. Every operation loads a copy of the session,
computes the new state entirely in memory, and stores it only on success,
so a failed operation leaves the stored record untouched.
"""

import copy
import json
import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from stageguard.domain.exceptions import (
    InvalidTransition,
    MissingFinalResult,
    MissingResult,
    SessionNotFound,
    StageMismatch,
    WorkflowError,
)
from stageguard.domain.extraction import (
    ClarificationExtractor,
    DraftExtractor,
    merge_gaps,
    merge_questions,
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
from stageguard.domain.merge import Candidate, merge_candidates
from stageguard.domain.models import (
    ClarificationQuestion,
    ContentReference,
    Session,
    SessionState,
    StageRecord,
    StageStatus,
    TaskMappingEntry,
)
from stageguard.domain.naming import ensure_unique_task_name, slugify_objective
from stageguard.domain.pipeline import (
    DEFAULT_WORKFLOW,
    StageDefinition,
    WorkflowDefinition,
)
from stageguard.domain.prompts import StaticRolePrompts
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
from stageguard.domain.scoring import PASS_THRESHOLD, GapAnalyzer, ScoreExtractor

logger = logging.getLogger(__name__)

MESSAGE_INLINE_LIMIT = 1000

# Engines a caller can submit results for, in candidate order (A, B)
CANDIDATE_ENGINES: tuple[str, ...] = ("claude", "codex")

# States in which a new generation may be submitted / answers recorded
OPEN_STATES = frozenset(
    {SessionState.GENERATING, SessionState.CLARIFYING, SessionState.REFINING}
)

SCOPE_ACTIONS: tuple[str, ...] = ("specify_sprint_scope_then_generate",)


def parse_answers(answers: Any) -> dict[str, str]:
    """
    Normalize caller-supplied answers into a question id -> text map.

    Accepts a dict or its JSON serialization. Anything else degrades to an
    empty map; values are stringified and stripped.
    """
    if isinstance(answers, str):
        try:
            answers = json.loads(answers)
        except ValueError:
            logger.warning("Unparsable answers payload, treating as empty")
            return {}
    if not isinstance(answers, dict):
        logger.warning(
            "Answers must be a mapping, got %s; treating as empty",
            type(answers).__name__,
        )
        return {}
    return {
        str(key): "" if value is None else str(value).strip()
        for key, value in answers.items()
    }


class WorkflowOrchestrator:
    """
    Session state machine over an injected repository and stores.

    Public operations raise WorkflowError subclasses for designed failures;
    `dispatch` is the boundary that turns them into FailureResponse.
    """

    def __init__(
        self,
        repository: SessionRepositoryInterface,
        references: ReferenceStoreInterface,
        artifacts: ArtifactStoreInterface,
        task_mapping: TaskMappingInterface,
        workflow: WorkflowDefinition = DEFAULT_WORKFLOW,
        role_prompts: RolePromptProviderInterface | None = None,
        score_extractor: ScoreExtractorInterface | None = None,
        gap_analyzer: GapAnalyzerInterface | None = None,
        clarification_extractor: ClarificationExtractorInterface | None = None,
        draft_extractor: DraftExtractorInterface | None = None,
        pass_threshold: int = PASS_THRESHOLD,
        message_inline_limit: int = MESSAGE_INLINE_LIMIT,
    ):
        """
        Args:
            repository: Session records keyed by session id
            references: Store for every intermediate blob
            artifacts: Store for final stage artifacts
            task_mapping: Operator lookup table
            workflow: Pipeline definition (defaults to the six-stage pipeline)
            role_prompts: Role prompt provider (defaults to built-in prompts)
            score_extractor: Score strategy (defaults to ScoreExtractor)
            gap_analyzer: Improvement guidance strategy (defaults to GapAnalyzer)
            clarification_extractor: Questions/gaps strategy
            draft_extractor: Document body strategy (defaults to the
                pipeline's content fields)
            pass_threshold: Gate for gated stages without their own min_score
            message_inline_limit: Longer user messages are also stored as a
                reference
        """
        self._repository = repository
        self._references = references
        self._artifacts = artifacts
        self._task_mapping = task_mapping
        self._workflow = workflow
        self._role_prompts = role_prompts or StaticRolePrompts()
        self._score_extractor = score_extractor or ScoreExtractor()
        self._gap_analyzer = gap_analyzer or GapAnalyzer(pass_threshold)
        self._clarification = clarification_extractor or ClarificationExtractor()
        self._draft_extractor = draft_extractor or DraftExtractor(
            workflow.content_fields()
        )
        self._pass_threshold = pass_threshold
        self._message_inline_limit = message_inline_limit

    @property
    def workflow(self) -> WorkflowDefinition:
        return self._workflow

    # =========================================================================
    # BOUNDARY
    # =========================================================================

    def dispatch(self, action: str, **params: Any) -> WorkflowResponse:
        """
        Run a named action and convert designed failures into responses.

        Errors outside the WorkflowError family (filesystem permissions,
        programming errors) propagate.
        """
        handlers: dict[str, Callable[..., WorkflowResponse]] = {
            "start": self.start,
            "submit": self.submit,
            "answer": self.answer,
            "confirm": self.confirm,
            "confirm_save": self.confirm_save,
            "approve": self.approve,
            "status": self.status,
        }
        handler = handlers.get(action)
        if handler is None:
            return FailureResponse(
                session_id=params.get("session_id"),
                action=action,
                error=f"Unknown action: {action}",
                error_type="UnknownAction",
            )

        try:
            return handler(**params)
        except WorkflowError as e:
            logger.warning("%s failed: %s", action, e.message)
            return FailureResponse(
                session_id=e.session_id or params.get("session_id"),
                action=e.action or action,
                error=e.message,
                error_type=e.error_type,
            )

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def start(self, cwd: str, objective: str) -> GenerationResponse:
        """Create a session positioned on the first stage, state generating."""
        cwd = str(Path(cwd).resolve())
        session_id = str(uuid.uuid4())

        known_names = {
            entry.task_name for entry in self._task_mapping.load(cwd).values()
        }
        task_name = ensure_unique_task_name(
            slugify_objective(objective),
            lambda name: name in known_names
            or self._artifacts.task_exists(cwd, name),
        )

        first = self._workflow.first_stage
        stages = {stage.stage_id: StageRecord() for stage in self._workflow.stages}
        stages[first.stage_id] = StageRecord(status=StageStatus.IN_PROGRESS, iteration=1)

        now = datetime.now(UTC).isoformat()
        session = Session(
            session_id=session_id,
            task_name=task_name,
            cwd=cwd,
            objective=objective,
            current_stage=first.stage_id,
            current_state=SessionState.GENERATING,
            stages=stages,
            created_at=now,
            updated_at=now,
        )

        response = self._generation_response(
            session,
            first,
            user_message=(
                f"Workflow started for task '{task_name}'. "
                f"Generate the {first.description} draft and submit it."
            ),
            task_name=task_name,
        )
        self._repository.put(session)
        self._task_mapping.record(
            cwd,
            TaskMappingEntry(
                session_id=session_id,
                task_name=task_name,
                objective=objective,
                created_at=now,
            ),
        )
        logger.info("Started session %s (task %s)", session_id, task_name)
        return response

    def submit(
        self,
        session_id: str,
        stage: str,
        claude_result: str | None = None,
        codex_result: str | None = None,
    ) -> WorkflowResponse:
        """Submit generated content for the current stage."""
        session = self._load(session_id, "submit")
        self._require_state(session, OPEN_STATES, "submit")
        if stage != session.current_stage:
            raise StageMismatch(
                f"Cannot submit stage '{stage}': current stage is "
                f"'{session.current_stage}'",
                session_id,
                "submit",
            )

        definition = self._stage(session.current_stage)
        results = {"claude": claude_result, "codex": codex_result}
        if definition.is_gated:
            response = self._submit_gated(session, definition, results)
        else:
            response = self._submit_single(session, definition, results)

        self._repository.put(session)
        return response

    def answer(self, session_id: str, answers: Any) -> RefinementResponse:
        """Record clarification answers; the stage moves to refining."""
        session = self._load(session_id, "answer")
        self._require_state(session, OPEN_STATES, "answer")

        parsed = parse_answers(answers)
        record = session.current_record
        record.answers = {**(record.answers or {}), **parsed}
        answers_ref = self._references.put(
            session.session_id,
            session.cwd,
            session.current_stage,
            "answers",
            parsed,
            extension="json",
        )
        session.current_state = SessionState.REFINING

        definition = self._stage(session.current_stage)
        context = self._stage_context(session, definition)
        context["questions"] = [q.to_dict() for q in record.questions or []]
        context["answers"] = dict(record.answers)
        if record.draft:
            context["draft"] = record.draft

        response = RefinementResponse(
            session_id=session.session_id,
            stage=definition.stage_id,
            user_message=(
                f"Recorded {len(parsed)} answer(s). Regenerate the "
                f"{definition.description} draft using them and submit again."
            ),
            current_score=record.score,
            iteration=record.iteration,
            user_answers_ref=answers_ref,
            role_prompt=self._role_prompts.role_prompt(definition.stage_id),
            engines=self._engines(session, definition),
            context=context,
        )
        self._repository.put(session)
        logger.info(
            "Session %s: %d answer(s) for %s", session_id, len(parsed), definition.stage_id
        )
        return response

    def confirm(self, session_id: str, confirmed: bool) -> WorkflowResponse:
        """Accept (save + advance) or reject a stage awaiting confirmation."""
        return self._confirm(session_id, confirmed, "confirm")

    def confirm_save(self, session_id: str, confirmed: bool) -> WorkflowResponse:
        """Legacy name for `confirm`."""
        return self._confirm(session_id, confirmed, "confirm_save")

    def approve(
        self,
        session_id: str,
        approved: bool,
        feedback: str | None = None,
    ) -> WorkflowResponse:
        """
        Approve the stage awaiting approval, or reject the current stage.

        Rejection is accepted in any non-terminal state and sends the stage
        back to refining with the feedback attached.
        """
        session = self._load(session_id, "approve")
        definition = self._stage(session.current_stage)
        record = session.current_record

        if approved:
            self._require_state(session, {SessionState.AWAITING_APPROVAL}, "approve")
            record.approved = True
            response = self._advance(session, definition, self._artifact_of(session, definition))
        else:
            self._require_state(session, set(SessionState) - {SessionState.COMPLETED}, "approve")
            record.approved = False
            record.final_result_ref = None
            session.current_state = SessionState.REFINING
            response = RefinementResponse(
                session_id=session.session_id,
                stage=definition.stage_id,
                user_message=(
                    f"{definition.description} rejected. Regenerate it "
                    "addressing the feedback and submit again."
                ),
                current_score=record.score,
                iteration=record.iteration,
                feedback=feedback,
                user_feedback=feedback,
                role_prompt=self._role_prompts.role_prompt(definition.stage_id),
                engines=self._engines(session, definition),
                context=self._stage_context(session, definition),
            )

        self._repository.put(session)
        logger.info(
            "Session %s: %s %s",
            session_id,
            definition.stage_id,
            "approved" if approved else "rejected",
        )
        return response

    def status(self, session_id: str) -> StatusResponse:
        """Read-only projection; never mutates."""
        session = self._load(session_id, "status")
        return StatusResponse(session_id=session.session_id, projection=project(session))

    # =========================================================================
    # SUBMISSION
    # =========================================================================

    def _submit_gated(
        self,
        session: Session,
        definition: StageDefinition,
        results: dict[str, str | None],
    ) -> WorkflowResponse:
        record = session.current_record
        stage_id = definition.stage_id

        candidates: dict[str, Candidate] = {}
        questions: list[ClarificationQuestion] = []
        gaps: list[str] = []
        for engine in CANDIDATE_ENGINES:
            text = results.get(engine)
            if not text or not text.strip():
                continue
            ref = self._references.put(
                session.session_id, session.cwd, stage_id, f"{engine}_result", text
            )
            setattr(record, f"{engine}_result_ref", ref)
            candidates[engine] = Candidate(
                engine=engine,
                score=self._score_extractor.extract_score(text),
                result=text,
            )
            questions = merge_questions(questions, self._clarification.extract_questions(text))
            gaps = merge_gaps(gaps, self._clarification.extract_gaps(text))

        if not candidates:
            raise MissingResult(
                f"No result supplied for stage '{stage_id}'", session.session_id, "submit"
            )

        threshold = self._threshold(definition)
        decision = merge_candidates(
            candidates.get(CANDIDATE_ENGINES[0]),
            candidates.get(CANDIDATE_ENGINES[1]),
            threshold,
        )
        scores = {engine: c.score for engine, c in candidates.items()}
        draft = self._draft_extractor.extract_draft(decision.winner.result)
        score = decision.final_score
        record.draft = draft
        record.score = score
        logger.info(
            "Session %s: %s iteration %s scored %s (winner %s)",
            session.session_id,
            stage_id,
            record.iteration,
            scores,
            decision.winner.engine,
        )

        # First pass lasts until an answer call is recorded, even an empty one
        first_pass = record.iteration == 1 and record.answers is None
        if first_pass and questions:
            # An un-clarified first draft is treated as incomplete regardless of score
            record.questions = questions
            record.gaps = gaps
            return self._clarify(session, definition, scores=scores)

        if decision.passed:
            if questions:
                record.questions = questions
            if gaps:
                record.gaps = gaps
            final_ref = self._references.put(
                session.session_id, session.cwd, stage_id, "final_result", draft
            )
            record.final_result_ref = final_ref
            session.current_state = SessionState.AWAITING_CONFIRMATION
            return self._confirmation_response(
                session, definition, final_ref, scores, decision.winner.engine
            )

        record.iteration = (record.iteration or 1) + 1
        if record.iteration > 2 or record.has_answers():
            guidance = self._gap_analyzer.analyze(draft, score)
            session.current_state = SessionState.REFINING
            return RefinementResponse(
                session_id=session.session_id,
                stage=stage_id,
                user_message=(
                    f"Score {score}/100 is still below {threshold} after "
                    "clarification. Regenerate the draft addressing each item "
                    "of the improvement guidance."
                ),
                current_score=score,
                iteration=record.iteration,
                improvement_guidance=tuple(guidance),
                scores=scores,
                role_prompt=self._role_prompts.role_prompt(stage_id),
                engines=self._engines(session, definition),
                context=self._refinement_context(session, definition),
            )

        if questions:
            record.questions = questions
            record.gaps = gaps
            return self._clarify(session, definition, scores=scores)

        session.current_state = SessionState.REFINING
        return RefinementResponse(
            session_id=session.session_id,
            stage=stage_id,
            user_message=(
                f"Score {score}/100 is below {threshold}. Regenerate the "
                f"{definition.description} draft with more complete content."
            ),
            current_score=score,
            iteration=record.iteration,
            feedback=f"Regenerate to reach at least {threshold}/100.",
            scores=scores,
            role_prompt=self._role_prompts.role_prompt(stage_id),
            engines=self._engines(session, definition),
            context=self._refinement_context(session, definition),
        )

    def _submit_single(
        self,
        session: Session,
        definition: StageDefinition,
        results: dict[str, str | None],
    ) -> WorkflowResponse:
        stage_id = definition.stage_id
        record = session.current_record

        # Prefer the stage's own engines, then whatever else was supplied
        order = list(definition.engines) + [
            engine for engine in CANDIDATE_ENGINES if engine not in definition.engines
        ]
        engine, text = next(
            ((e, results[e]) for e in order if results.get(e) and results[e].strip()),
            (None, None),
        )
        if engine is None or text is None:
            raise MissingResult(
                f"No result supplied for stage '{stage_id}'", session.session_id, "submit"
            )

        setattr(
            record,
            f"{engine}_result_ref",
            self._references.put(
                session.session_id, session.cwd, stage_id, f"{engine}_result", text
            ),
        )
        content = self._draft_extractor.extract_draft(text)
        record.final_result_ref = self._references.put(
            session.session_id, session.cwd, stage_id, "final_result", content
        )
        next_context = None
        if not definition.is_approval_stage:
            next_context = self._next_stage_context(session, definition)
        artifact_path = self._artifacts.write(
            session.cwd, session.task_name, definition.artifact, content
        )
        session.record_artifact(artifact_path)

        if definition.is_approval_stage:
            session.current_state = SessionState.AWAITING_APPROVAL
            return ApprovalResponse(
                session_id=session.session_id,
                stage=stage_id,
                artifact_path=artifact_path,
                user_message=(
                    f"{definition.description} saved to {artifact_path}. "
                    "Approve to continue, or reject with feedback."
                ),
            )
        return self._advance(session, definition, artifact_path, next_context)

    # =========================================================================
    # CONFIRMATION AND ADVANCING
    # =========================================================================

    def _confirm(self, session_id: str, confirmed: bool, action: str) -> WorkflowResponse:
        session = self._load(session_id, action)
        self._require_state(session, {SessionState.AWAITING_CONFIRMATION}, action)
        definition = self._stage(session.current_stage)
        record = session.current_record
        if record.final_result_ref is None:
            raise MissingFinalResult(
                f"Stage '{definition.stage_id}' has no final result to confirm",
                session_id,
                action,
            )

        if not confirmed:
            record.final_result_ref = None
            response: WorkflowResponse = self._clarify(
                session,
                definition,
                feedback="Draft not confirmed. Answer the questions to refine it.",
            )
        else:
            content = self._references.get(session.cwd, record.final_result_ref)
            # Every read that can fail happens before the artifact is written
            next_context = self._next_stage_context(session, definition)
            artifact_path = self._artifacts.write(
                session.cwd,
                session.task_name,
                definition.artifact,
                self._draft_extractor.extract_draft(content),
            )
            session.record_artifact(artifact_path)
            record.approved = True
            response = self._advance(session, definition, artifact_path, next_context)

        self._repository.put(session)
        logger.info(
            "Session %s: %s %s",
            session_id,
            definition.stage_id,
            "confirmed" if confirmed else "sent back to clarification",
        )
        return response

    def _advance(
        self,
        session: Session,
        definition: StageDefinition,
        artifact_path: str | None,
        next_context: dict[str, Any] | None = None,
    ) -> WorkflowResponse:
        """
        Complete the current stage and open the next one (or finish).

        `next_context` is the next stage's context when the caller already
        read it; otherwise it is read here.
        """
        session.stages[definition.stage_id].status = StageStatus.COMPLETED
        next_stage = self._workflow.next_stage(definition.stage_id)

        if next_stage is None:
            session.current_state = SessionState.COMPLETED
            logger.info("Session %s completed", session.session_id)
            return CompletionResponse(
                session_id=session.session_id,
                artifacts=tuple(session.artifacts),
                user_message=(
                    f"All stages completed. {len(session.artifacts)} artifact(s) "
                    f"saved for task '{session.task_name}'."
                ),
                previous_artifact=artifact_path,
            )

        session.current_stage = next_stage.stage_id
        next_record = session.stages[next_stage.stage_id]
        next_record.status = StageStatus.IN_PROGRESS
        next_record.iteration = 1
        session.current_state = SessionState.GENERATING

        if next_stage.requires_scope:
            message = (
                f"{definition.description} completed. Before generating the "
                f"{next_stage.description} output, ask the user which sprint "
                "or scope to implement."
            )
        else:
            message = (
                f"{definition.description} completed. Generate the "
                f"{next_stage.description} output and submit it."
            )
        return self._generation_response(
            session,
            next_stage,
            user_message=message,
            previous_artifact=artifact_path,
            context=next_context,
        )

    # =========================================================================
    # RESPONSE BUILDERS
    # =========================================================================

    def _generation_response(
        self,
        session: Session,
        definition: StageDefinition,
        user_message: str,
        task_name: str | None = None,
        previous_artifact: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> GenerationResponse:
        kwargs: dict[str, Any] = {}
        if definition.requires_scope:
            kwargs["pending_user_actions"] = SCOPE_ACTIONS
        if context is None:
            context = self._stage_context(session, definition)
        return GenerationResponse(
            session_id=session.session_id,
            stage=definition.stage_id,
            stage_description=definition.description,
            role_prompt=self._role_prompts.role_prompt(definition.stage_id),
            engines=self._engines(session, definition),
            context=context,
            user_message=user_message,
            task_name=task_name,
            previous_artifact=previous_artifact,
            scope_instructions_required=definition.requires_scope,
            **kwargs,
        )

    def _clarify(
        self,
        session: Session,
        definition: StageDefinition,
        scores: dict[str, int] | None = None,
        feedback: str | None = None,
    ) -> ClarificationResponse:
        """Enter clarifying and surface the stored questions, gaps and draft."""
        record = session.current_record
        questions = record.questions or []
        gaps = record.gaps or []
        session.current_state = SessionState.CLARIFYING

        put = self._references.put
        questions_ref = put(
            session.session_id,
            session.cwd,
            definition.stage_id,
            "questions",
            [q.to_dict() for q in questions],
            extension="json",
        )
        gaps_ref = put(
            session.session_id,
            session.cwd,
            definition.stage_id,
            "gaps",
            list(gaps),
            extension="json",
        )
        draft_ref = put(
            session.session_id, session.cwd, definition.stage_id, "draft", record.draft or ""
        )

        lines = [
            f"{definition.description} draft scored {record.score}/100 "
            f"(iteration {record.iteration}). Please answer these questions:",
        ]
        lines.extend(f"{i}. [{q.id}] {q.question}" for i, q in enumerate(questions, 1))
        if gaps:
            lines.append("Known gaps:")
            lines.extend(f"- {gap}" for gap in gaps)
        message = "\n".join(lines)

        return ClarificationResponse(
            session_id=session.session_id,
            stage=definition.stage_id,
            current_score=record.score,
            iteration=record.iteration or 1,
            questions_ref=questions_ref,
            gaps_ref=gaps_ref,
            draft_ref=draft_ref,
            questions_count=len(questions),
            gaps_count=len(gaps),
            questions_summary=questions_ref.summary,
            gaps_summary=gaps_ref.summary,
            user_message=message,
            user_message_ref=self._message_ref(session, definition, message),
            scores=scores,
            feedback=feedback,
        )

    def _confirmation_response(
        self,
        session: Session,
        definition: StageDefinition,
        final_ref: ContentReference,
        scores: dict[str, int],
        winner: str,
    ) -> ConfirmationResponse:
        record = session.current_record
        score_summary = ", ".join(f"{engine}: {s}/100" for engine, s in scores.items())
        score_summary += f" -> {winner} selected"
        message = (
            f"{definition.description} passed with {record.score}/100 "
            f"({score_summary}). Review the draft at "
            f"{final_ref.file_path} and confirm to save it and "
            "continue, or reject to refine it further."
        )
        return ConfirmationResponse(
            session_id=session.session_id,
            stage=definition.stage_id,
            score=record.score or 0,
            final_draft_ref=final_ref,
            scores=scores,
            score_summary=score_summary,
            user_message=message,
            user_message_ref=self._message_ref(session, definition, message),
        )

    def _message_ref(
        self, session: Session, definition: StageDefinition, message: str
    ) -> ContentReference | None:
        if len(message) <= self._message_inline_limit:
            return None
        return self._references.put(
            session.session_id, session.cwd, definition.stage_id, "user_message", message
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _load(self, session_id: str, action: str) -> Session:
        """Working copy of the stored session."""
        try:
            stored = self._repository.get(session_id)
        except SessionNotFound as e:
            raise SessionNotFound(session_id, action) from e
        return copy.deepcopy(stored)

    def _require_state(
        self, session: Session, allowed: set[SessionState] | frozenset[SessionState], action: str
    ) -> None:
        if session.current_state in allowed:
            return
        if session.current_state is SessionState.COMPLETED:
            message = f"Cannot {action}: workflow is already completed"
        else:
            message = (
                f"Cannot {action} while session is "
                f"'{session.current_state.value}' on stage '{session.current_stage}'"
            )
        raise InvalidTransition(message, session.session_id, action)

    def _stage(self, stage_id: str) -> StageDefinition:
        definition = self._workflow.get_stage(stage_id)
        if definition is None:
            raise StageMismatch(f"Unknown stage: {stage_id}")
        return definition

    def _threshold(self, definition: StageDefinition) -> int:
        if definition.min_score is not None:
            return definition.min_score
        return self._pass_threshold

    def _engines(self, session: Session, definition: StageDefinition) -> tuple[str, ...]:
        return self._workflow.engines_for(definition.stage_id, session.objective)

    def _stage_context(self, session: Session, definition: StageDefinition) -> dict[str, Any]:
        """Objective plus the full final output of every earlier stage."""
        previous: dict[str, str] = {}
        for stage in self._workflow.previous_stages(definition.stage_id):
            ref = session.stages[stage.stage_id].final_result_ref
            if ref is not None:
                previous[stage.stage_id] = self._references.get(session.cwd, ref)
        return {
            "objective": session.objective,
            "task_name": session.task_name,
            "stage": definition.stage_id,
            "previous_outputs": previous,
        }

    def _next_stage_context(
        self, session: Session, definition: StageDefinition
    ) -> dict[str, Any] | None:
        """Context of the stage after `definition`; None on the last stage."""
        next_stage = self._workflow.next_stage(definition.stage_id)
        if next_stage is None:
            return None
        return self._stage_context(session, next_stage)

    def _refinement_context(
        self, session: Session, definition: StageDefinition
    ) -> dict[str, Any]:
        record = session.current_record
        context = self._stage_context(session, definition)
        context["draft"] = record.draft or ""
        if record.answers:
            context["answers"] = dict(record.answers)
        return context

    def _artifact_of(self, session: Session, definition: StageDefinition) -> str | None:
        for path in reversed(session.artifacts):
            if Path(path).name == definition.artifact:
                return path
        return None


def project(session: Session) -> dict[str, Any]:
    """Reduced, reference-free view of a session."""
    return {
        "session_id": session.session_id,
        "task_name": session.task_name,
        "objective": session.objective,
        "cwd": session.cwd,
        "current_stage": session.current_stage,
        "current_state": session.current_state.value,
        "stages": {
            stage_id: {
                "status": record.status.value,
                "score": record.score,
                "approved": record.approved,
                "iteration": record.iteration,
                "has_claude_result": record.claude_result_ref is not None,
                "has_codex_result": record.codex_result_ref is not None,
                "has_final_result": record.final_result_ref is not None,
                "questions_count": len(record.questions or []),
                "gaps_count": len(record.gaps or []),
                "answers_count": len(record.answers or {}),
            }
            for stage_id, record in session.stages.items()
        },
        "artifacts": list(session.artifacts),
        "created_at": session.created_at,
        "updated_at": session.updated_at,
    }
