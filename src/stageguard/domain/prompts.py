"""
Role prompts handed to the caller's generators.

The full role prompt bodies are content owned by the deploying
application (see `stageguard.config.load_role_prompts`); the defaults here
only name the role and the expected output contract.
"""

from collections.abc import Mapping
from types import MappingProxyType

from stageguard.domain.interfaces import RolePromptProviderInterface

OUTPUT_CONTRACT = (
    "Respond with JSON containing the document body, a self-assessed "
    '"quality_score" (0-100), and optional "questions" '
    '([{"id", "question", "context"}]) and "gaps" arrays.'
)

DEFAULT_ROLE_PROMPTS: Mapping[str, str] = MappingProxyType(
    {
        "po": (
            "You are the Product Owner. Turn the objective into a product "
            "requirements document with user stories and acceptance criteria. "
            + OUTPUT_CONTRACT
        ),
        "architect": (
            "You are the System Architect. Design the technical architecture "
            "that satisfies the approved requirements. " + OUTPUT_CONTRACT
        ),
        "sm": (
            "You are the Scrum Master. Break the approved architecture into "
            "sprints with ordered, estimable tasks."
        ),
        "dev": (
            "You are the Developer. Implement the sprint scope the user "
            "selected, following the approved architecture."
        ),
        "review": (
            "You are the Code Reviewer. Review the implementation for "
            "correctness, security and maintainability."
        ),
        "qa": (
            "You are the QA Engineer. Test the reviewed implementation and "
            "report results against the acceptance criteria."
        ),
    }
)


class StaticRolePrompts(RolePromptProviderInterface):
    """Role prompts from an in-memory mapping, falling back to the defaults."""

    def __init__(self, prompts: Mapping[str, str] | None = None):
        self._prompts = dict(DEFAULT_ROLE_PROMPTS)
        if prompts:
            self._prompts.update(prompts)

    def role_prompt(self, stage_id: str) -> str:
        return self._prompts.get(stage_id, f"You are responsible for stage '{stage_id}'.")
