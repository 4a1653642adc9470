"""
Shared pytest fixtures for the green essays test suite.

Settings are read from the environment at import time, so the variables
below must be in place before any ``green_essays`` module is imported.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest

from fakes import EDITOR, VIEWER, FakeEssayRepository
from green_essays.domains.essays.sections import EssayLocation


@pytest.fixture
def repository() -> FakeEssayRepository:
    """Empty in-memory repository."""
    return FakeEssayRepository()


@pytest.fixture
def editor():
    return EDITOR


@pytest.fixture
def viewer():
    return VIEWER


@pytest.fixture
def location() -> EssayLocation:
    return EssayLocation(section="future", slug="new-essay")
