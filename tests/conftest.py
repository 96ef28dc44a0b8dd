from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.fakes import InMemoryArtifactRepository, InMemoryObjectStore
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def repository() -> InMemoryArtifactRepository:
    return InMemoryArtifactRepository()


@pytest.fixture
def test_logger() -> logging.Logger:
    """Logger that propagates to the root so ``caplog`` sees its records."""
    logger = logging.getLogger("tests.documate")
    logger.setLevel(logging.DEBUG)
    logger.propagate = True
    return logger
