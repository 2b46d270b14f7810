"""Task naming: readable, collision-free directory slugs from objectives."""

import re
from collections.abc import Callable

MAX_SLUG_LENGTH = 50
FALLBACK_SLUG = "task"

_NON_WORD = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify_objective(objective: str) -> str:
    """
    "Build a user authentication system with JWT"
    -> "build-a-user-authentication-system-with-jwt"

    Lowercases, strips non-word characters, turns whitespace runs into
    hyphens, collapses hyphens and caps the length.
    """
    slug = _NON_WORD.sub("", (objective or "").lower()).strip()
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    slug = slug[:MAX_SLUG_LENGTH]
    return slug or FALLBACK_SLUG


def ensure_unique_task_name(base_name: str, is_taken: Callable[[str], bool]) -> str:
    """Append -1, -2, ... until `is_taken` reports the name free."""
    task_name = base_name
    counter = 1
    while is_taken(task_name):
        task_name = f"{base_name}-{counter}"
        counter += 1
    return task_name
