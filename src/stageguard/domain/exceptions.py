"""
Domain exceptions for the stage workflow.

Each represents a designed, recoverable failure. The orchestrator turns
them into structured failure responses at the operation boundary; anything
else (filesystem permissions, etc.) is left to propagate.
"""


class WorkflowError(Exception):
    """Base class for structured workflow failures."""

    def __init__(self, message: str, session_id: str | None = None, action: str = ""):
        """
        Args:
            message: Human-readable error message
            session_id: Session the failed operation targeted (if any)
            action: Name of the attempted action
        """
        super().__init__(message)
        self.message = message
        self.session_id = session_id
        self.action = action

    @property
    def error_type(self) -> str:
        return type(self).__name__


class SessionNotFound(WorkflowError):
    """No in-memory or durable record exists for the session id."""

    def __init__(self, session_id: str, action: str = ""):
        super().__init__(f"Session not found: {session_id}", session_id, action)


class MissingFinalResult(WorkflowError):
    """Confirm requested while the current stage has no final reference."""


class ReferenceReadFailure(WorkflowError):
    """
    A content reference points at a missing or unreadable file.

    Surfaced rather than replaced with empty content, since empty content
    would silently corrupt scoring and merge decisions.
    """

    def __init__(self, file_path: str, reason: str = "missing"):
        super().__init__(f"Cannot read referenced content '{file_path}': {reason}")
        self.file_path = file_path


class InvalidTransition(WorkflowError):
    """The requested action is not valid in the session's current state."""


class StageMismatch(WorkflowError):
    """A submission targeted a stage other than the current one."""


class MissingResult(WorkflowError):
    """A single-candidate submission carried no result text."""


class ConfigurationError(Exception):
    """Raised when configuration files are invalid or missing."""

    pass
