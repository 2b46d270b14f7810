"""Configuration loading utilities for stageguard.

Three JSON files, all optional:

- config file: directory names and thresholds (`StageGuardConfig`)
- workflow file: an alternative pipeline definition, validated against
  `schemas/workflow.schema.json`
- role prompts file: stage id -> role prompt text
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import jsonschema

from stageguard.application.orchestrator import MESSAGE_INLINE_LIMIT
from stageguard.domain.exceptions import ConfigurationError
from stageguard.domain.pipeline import WorkflowDefinition
from stageguard.domain.scoring import PASS_THRESHOLD
from stageguard.schemas import validate_workflow


@dataclass(frozen=True)
class StageGuardConfig:
    """Runtime settings shared by the persistence adapters and orchestrator."""

    state_dir: str = ".stageguard"
    artifacts_dir: str = "specs"
    pass_threshold: int = PASS_THRESHOLD  # Gate for gated stages without a min_score
    summary_chars: int = 200
    message_inline_limit: int = MESSAGE_INLINE_LIMIT  # Longer messages go to a reference


def _read_json(path: Path, kind: str) -> Any:
    """Read a JSON file, mapping every failure to ConfigurationError."""
    if not path.exists():
        raise ConfigurationError(f"{kind} file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e


def load_config(path: Path) -> StageGuardConfig:
    """
    Load runtime settings from JSON file.

    Args:
        path: Path to the config file

    Returns:
        StageGuardConfig with file values over the defaults

    Raises:
        ConfigurationError: If the file is missing, invalid, or has
            unknown keys or wrongly typed values
    """
    data = _read_json(path, "Config")
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected dict in {path}, got {type(data).__name__}")

    known = {f.name: f for f in fields(StageGuardConfig)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigurationError(f"Unknown keys in {path}: {', '.join(unknown)}")

    for key, value in data.items():
        expected = int if known[key].type in (int, "int") else str
        if not isinstance(value, expected) or isinstance(value, bool):
            raise ConfigurationError(
                f"'{key}' in {path} must be {expected.__name__}, "
                f"got {type(value).__name__}"
            )
        if expected is int and value < 0:
            raise ConfigurationError(f"'{key}' in {path} must not be negative")
        if expected is str and not value:
            raise ConfigurationError(f"'{key}' in {path} cannot be empty")

    return StageGuardConfig(**data)


def load_workflow_definition(path: Path) -> WorkflowDefinition:
    """
    Load a pipeline definition from JSON file.

    Args:
        path: Path to workflow.json

    Returns:
        WorkflowDefinition with stages in file order

    Raises:
        ConfigurationError: If the file is missing, fails schema validation,
            or repeats a stage id
    """
    data = _read_json(path, "Workflow")

    try:
        validate_workflow(data)
    except jsonschema.ValidationError as e:
        raise ConfigurationError(f"Invalid workflow in {path}: {e.message}") from e

    stage_ids = [stage["stage_id"] for stage in data["stages"]]
    duplicates = sorted({sid for sid in stage_ids if stage_ids.count(sid) > 1})
    if duplicates:
        raise ConfigurationError(
            f"Duplicate stage ids in {path}: {', '.join(duplicates)}"
        )

    return WorkflowDefinition.from_dict(data)


def load_role_prompts(path: Path) -> dict[str, str]:
    """
    Load role prompt text per stage from JSON file.

    Args:
        path: Path to prompts.json ({"po": "You are ...", ...})

    Returns:
        Dict mapping stage id to prompt text

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    data = _read_json(path, "Prompts")
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected dict in {path}, got {type(data).__name__}")

    prompts = {}
    for stage_id, prompt in data.items():
        if not isinstance(prompt, str) or not prompt.strip():
            raise ConfigurationError(
                f"prompts.json: '{stage_id}' must be a non-empty string"
            )
        prompts[stage_id] = prompt
    return prompts
