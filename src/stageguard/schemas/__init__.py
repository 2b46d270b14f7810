"""stageguard JSON Schema definitions and validation utilities.

Schemas:
    - session.schema.json: Durable session record
    - workflow.schema.json: Pipeline definition (stages, engines, gates)

Usage:
    from stageguard.schemas import validate_workflow

    with open("workflow.json") as f:
        data = json.load(f)
    validate_workflow(data)  # Raises jsonschema.ValidationError if invalid
"""

from __future__ import annotations

import json
from functools import cache
from importlib.resources import files
from typing import Any

import jsonschema


@cache
def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'session.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("stageguard.schemas").joinpath(name).read_text()
    result: dict[str, Any] = json.loads(schema_text)
    return result


def get_session_schema() -> dict[str, Any]:
    """Get the session record schema."""
    return _load_schema("session.schema.json")


def get_workflow_schema() -> dict[str, Any]:
    """Get the workflow definition schema."""
    return _load_schema("workflow.schema.json")


def validate_session(data: dict[str, Any]) -> None:
    """Validate a durable session record.

    Args:
        data: Session record dictionary

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_session_schema())


def validate_workflow(data: dict[str, Any]) -> None:
    """Validate a pipeline definition.

    Args:
        data: Workflow definition dictionary

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_workflow_schema())


__all__ = [
    "get_session_schema",
    "get_workflow_schema",
    "validate_session",
    "validate_workflow",
]
