"""stageguard command line: one command per workflow action.

Every command prints the action's response as JSON on stdout. Structured
failures additionally print an error panel on stderr and exit with code 1.

Examples:
    stageguard start "Build a user authentication system with JWT"
    stageguard submit <session-id> po --claude draft.json
    stageguard answer <session-id> '{"q1": "OAuth is out of scope"}'
    stageguard confirm <session-id>
    stageguard approve <session-id> --reject --feedback "Split sprint 2"
    stageguard status <session-id>
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any

import click

from stageguard.application import WorkflowOrchestrator
from stageguard.config import (
    StageGuardConfig,
    load_config,
    load_role_prompts,
    load_workflow_definition,
)
from stageguard.console import print_error, print_sessions
from stageguard.domain.exceptions import ConfigurationError
from stageguard.domain.pipeline import DEFAULT_WORKFLOW
from stageguard.domain.prompts import StaticRolePrompts
from stageguard.domain.responses import WorkflowResponse
from stageguard.infrastructure import (
    FilesystemArtifactStore,
    FilesystemReferenceStore,
    FilesystemSessionRepository,
    FilesystemTaskMapping,
)
from stageguard.logging_setup import setup_logging


def build_orchestrator(
    cwd: str,
    config: StageGuardConfig | None = None,
    workflow_path: Path | None = None,
    prompts_path: Path | None = None,
) -> WorkflowOrchestrator:
    """
    Wire filesystem adapters into an orchestrator rooted at `cwd`.

    Raises:
        ConfigurationError: If a workflow or prompts file is invalid
    """
    config = config or StageGuardConfig()
    workflow = load_workflow_definition(workflow_path) if workflow_path else DEFAULT_WORKFLOW
    prompts = load_role_prompts(prompts_path) if prompts_path else None
    return WorkflowOrchestrator(
        repository=FilesystemSessionRepository(
            roots=[str(Path(cwd).resolve())], state_dir=config.state_dir
        ),
        references=FilesystemReferenceStore(
            state_dir=config.state_dir, summary_chars=config.summary_chars
        ),
        artifacts=FilesystemArtifactStore(artifacts_dir=config.artifacts_dir),
        task_mapping=FilesystemTaskMapping(state_dir=config.state_dir),
        workflow=workflow,
        role_prompts=StaticRolePrompts(prompts),
        pass_threshold=config.pass_threshold,
        message_inline_limit=config.message_inline_limit,
    )


def _emit(response: WorkflowResponse) -> None:
    """Print the response; exit 1 on a structured failure."""
    data = response.to_dict()
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))
    if response.is_error:
        print_error(
            data["error"],
            hint=f"action '{data['action']}', session {data['session_id']}",
        )
        raise SystemExit(1)


def _run(ctx: click.Context, action: str, **params: Any) -> None:
    orchestrator: WorkflowOrchestrator = ctx.obj["orchestrator"]
    _emit(orchestrator.dispatch(action, **params))


@click.group()
@click.option(
    "--cwd",
    default=".",
    type=click.Path(file_okay=False),
    help="Working directory holding state and artifacts (default: .)",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a stageguard config JSON file",
)
@click.option(
    "--workflow",
    "workflow_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a workflow.json pipeline definition",
)
@click.option(
    "--prompts",
    "prompts_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a prompts.json file of role prompts",
)
@click.option(
    "--log-file",
    default=None,
    type=click.Path(),
    help="Path to log file",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose (DEBUG) logging to console",
)
@click.pass_context
def cli(
    ctx: click.Context,
    cwd: str,
    config_path: str | None,
    workflow_path: str | None,
    prompts_path: str | None,
    log_file: str | None,
    verbose: bool,
) -> None:
    """stageguard: quality-gated, resumable stage workflow."""
    setup_logging("stageguard", log_file=log_file, verbose=verbose)
    try:
        config = load_config(Path(config_path)) if config_path else StageGuardConfig()
        orchestrator = build_orchestrator(
            cwd,
            config,
            Path(workflow_path) if workflow_path else None,
            Path(prompts_path) if prompts_path else None,
        )
    except ConfigurationError as e:
        print_error(str(e))
        raise SystemExit(1) from None

    ctx.ensure_object(dict)
    ctx.obj.update(cwd=cwd, config=config, orchestrator=orchestrator)


@cli.command()
@click.argument("objective")
@click.pass_context
def start(ctx: click.Context, objective: str) -> None:
    """Start a new session for OBJECTIVE."""
    _run(ctx, "start", cwd=ctx.obj["cwd"], objective=objective)


@cli.command()
@click.argument("session_id")
@click.argument("stage")
@click.option(
    "--claude",
    "claude_file",
    default=None,
    type=click.File("r", encoding="utf-8"),
    help="File holding the claude engine result ('-' for stdin)",
)
@click.option(
    "--codex",
    "codex_file",
    default=None,
    type=click.File("r", encoding="utf-8"),
    help="File holding the codex engine result ('-' for stdin)",
)
@click.pass_context
def submit(
    ctx: click.Context,
    session_id: str,
    stage: str,
    claude_file: IO[str] | None,
    codex_file: IO[str] | None,
) -> None:
    """Submit generated content for STAGE of SESSION_ID."""
    _run(
        ctx,
        "submit",
        session_id=session_id,
        stage=stage,
        claude_result=claude_file.read() if claude_file else None,
        codex_result=codex_file.read() if codex_file else None,
    )


@cli.command()
@click.argument("session_id")
@click.argument("answers")
@click.pass_context
def answer(ctx: click.Context, session_id: str, answers: str) -> None:
    """Record ANSWERS (a JSON object of question id -> text)."""
    _run(ctx, "answer", session_id=session_id, answers=answers)


@cli.command()
@click.argument("session_id")
@click.option("--reject", is_flag=True, help="Send the draft back to clarification")
@click.pass_context
def confirm(ctx: click.Context, session_id: str, reject: bool) -> None:
    """Save the passing draft and move to the next stage."""
    _run(ctx, "confirm", session_id=session_id, confirmed=not reject)


@cli.command("confirm-save")
@click.argument("session_id")
@click.option("--reject", is_flag=True, help="Send the draft back to clarification")
@click.pass_context
def confirm_save(ctx: click.Context, session_id: str, reject: bool) -> None:
    """Same as confirm."""
    _run(ctx, "confirm_save", session_id=session_id, confirmed=not reject)


@cli.command()
@click.argument("session_id")
@click.option("--reject", is_flag=True, help="Reject and return the stage to refining")
@click.option("--feedback", default=None, help="Feedback for the regeneration")
@click.pass_context
def approve(
    ctx: click.Context, session_id: str, reject: bool, feedback: str | None
) -> None:
    """Approve the stage awaiting approval (or reject with feedback)."""
    _run(
        ctx,
        "approve",
        session_id=session_id,
        approved=not reject,
        feedback=feedback,
    )


@cli.command()
@click.argument("session_id")
@click.pass_context
def status(ctx: click.Context, session_id: str) -> None:
    """Show the session projection."""
    _run(ctx, "status", session_id=session_id)


@cli.command()
@click.pass_context
def sessions(ctx: click.Context) -> None:
    """List sessions recorded in the task mapping."""
    config: StageGuardConfig = ctx.obj["config"]
    mapping = FilesystemTaskMapping(state_dir=config.state_dir)
    entries = mapping.load(str(Path(ctx.obj["cwd"]).resolve()))
    if not entries:
        click.echo("No sessions found. Run the 'start' command first.")
        return
    print_sessions(entries.values())


if __name__ == "__main__":
    cli()
