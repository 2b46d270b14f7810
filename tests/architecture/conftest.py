"""Fixtures for the stageguard layering tests."""

import os

import pytest
from pytestarch import (
    EvaluableArchitecture,
    LayeredArchitecture,
    get_evaluable_architecture,
)


@pytest.fixture(scope="session")
def evaluable() -> EvaluableArchitecture:
    """Import graph of the stageguard package under src/."""
    src_dir = os.path.abspath(
        os.path.join(os.path.dirname(__file__), "..", "..", "src")
    )
    project_path = os.path.join(src_dir, "stageguard")
    return get_evaluable_architecture(src_dir, project_path)


@pytest.fixture(scope="session")
def layers() -> LayeredArchitecture:
    """Domain (models, ports, strategies), application (orchestrator) and
    infrastructure (filesystem adapters).

    Module names are relative to the src/ root, e.g. 'src.stageguard.domain'.
    config, cli, console and schemas sit outside the three layers: they
    form the composition root.
    """
    return (
        LayeredArchitecture()
        .layer("domain")
        .containing_modules(["src.stageguard.domain"])
        .layer("application")
        .containing_modules(["src.stageguard.application"])
        .layer("infrastructure")
        .containing_modules(["src.stageguard.infrastructure"])
    )
