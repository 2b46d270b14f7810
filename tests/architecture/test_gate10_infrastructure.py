"""
Gate 10: Infrastructure Validation Tests.

Tests that validate architectural constraints:
- Gate 10A: Dependency Direction (domain must not import outer layers)
- Gate 10B: Constructor Injects Abstractions (type hints use interfaces)
- Gate 10F: Infrastructure Testability (orchestrator accepts mocked ports)
"""

import importlib
import inspect
from unittest.mock import MagicMock

import pytest

from stageguard.application.orchestrator import WorkflowOrchestrator
from stageguard.domain import interfaces
from stageguard.domain.exceptions import SessionNotFound
from stageguard.domain.responses import FailureResponse

DOMAIN_MODULES = [
    "stageguard.domain.models",
    "stageguard.domain.interfaces",
    "stageguard.domain.extraction",
    "stageguard.domain.scoring",
    "stageguard.domain.merge",
    "stageguard.domain.pipeline",
    "stageguard.domain.responses",
]


class TestGate10A_DependencyDirection:
    """Gate 10A: Domain MUST NOT import infrastructure or application."""

    @pytest.mark.parametrize("module_name", DOMAIN_MODULES)
    def test_domain_does_not_import_outer_layers(self, module_name):
        source = inspect.getsource(importlib.import_module(module_name))

        for outer in ("stageguard.infrastructure", "stageguard.application"):
            assert f"from {outer}" not in source, f"{module_name} imports {outer}"
            assert f"import {outer}" not in source, f"{module_name} imports {outer}"

    def test_domain_does_not_read_configuration(self):
        """Config files are loaded at the composition root only."""
        for module_name in DOMAIN_MODULES:
            source = inspect.getsource(importlib.import_module(module_name))
            assert "from stageguard.config" not in source, module_name


class TestGate10B_ConstructorAbstractions:
    """Gate 10B: Orchestrator dependencies are typed as ports."""

    @pytest.mark.parametrize(
        ("parameter", "port"),
        [
            ("repository", "SessionRepositoryInterface"),
            ("references", "ReferenceStoreInterface"),
            ("artifacts", "ArtifactStoreInterface"),
            ("task_mapping", "TaskMappingInterface"),
        ],
    )
    def test_orchestrator_accepts_interface_type(self, parameter, port):
        annotation = inspect.signature(WorkflowOrchestrator.__init__).parameters[
            parameter
        ].annotation

        assert annotation is getattr(interfaces, port)


class TestGate10F_InfrastructureTestability:
    """Gate 10F: Orchestrator works with mocked ports."""

    def test_orchestrator_accepts_mock_ports(self):
        repository = MagicMock(spec=interfaces.SessionRepositoryInterface)
        repository.get.side_effect = SessionNotFound("s-1")
        orchestrator = WorkflowOrchestrator(
            repository=repository,
            references=MagicMock(spec=interfaces.ReferenceStoreInterface),
            artifacts=MagicMock(spec=interfaces.ArtifactStoreInterface),
            task_mapping=MagicMock(spec=interfaces.TaskMappingInterface),
        )

        response = orchestrator.dispatch("status", session_id="s-1")

        assert isinstance(response, FailureResponse)
        assert response.error_type == "SessionNotFound"
        repository.get.assert_called_once_with("s-1")
        repository.put.assert_not_called()
