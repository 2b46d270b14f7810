"""
Application layer for the stage workflow.

Contains the session state machine that coordinates domain objects.
"""

from stageguard.application.orchestrator import WorkflowOrchestrator, parse_answers, project

__all__ = [
    "WorkflowOrchestrator",
    "parse_answers",
    "project",
]
