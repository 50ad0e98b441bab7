"""Pytest fixtures for weekgoals tests."""

import os
import uuid
from datetime import date

import pytest

from weekgoals.foundation.config import reset_config
from weekgoals.goals.service import GoalService
from weekgoals.storage import (
    JsonGoalRepository,
    MemoryAccountRepository,
    MemoryGoalRepository,
    SqliteStore,
)

WEEK = "2024-01-15"
"""Monday of ISO week 3, 2024."""

NEXT_WEEK = "2024-01-22"


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.weekgoals and WEEKGOALS_* env."""
    for key in list(os.environ):
        if key.startswith("WEEKGOALS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def today() -> date:
    """A Wednesday inside WEEK."""
    return date(2024, 1, 17)


@pytest.fixture
def week() -> str:
    return WEEK


@pytest.fixture
def memory_repo() -> MemoryGoalRepository:
    return MemoryGoalRepository()


@pytest.fixture
def json_repo(tmp_path) -> JsonGoalRepository:
    return JsonGoalRepository(tmp_path / "goals.json")


@pytest.fixture
def sqlite_store():
    store = SqliteStore(":memory:")
    yield store
    store.close()


@pytest.fixture(params=["memory", "json", "sqlite"])
def repository(request, tmp_path):
    """Every goal repository backend, for contract tests."""
    if request.param == "memory":
        yield MemoryGoalRepository()
    elif request.param == "json":
        yield JsonGoalRepository(tmp_path / "goals.json")
    else:
        store = SqliteStore(":memory:")
        yield store
        store.close()


@pytest.fixture
def make_owner(repository):
    """Create an owner id valid for ``repository``.

    SQLite enforces the users foreign key, so owners must be real accounts there.
    """

    def _make(name: str) -> str:
        if isinstance(repository, SqliteStore):
            return repository.create_user(name, "salt:key").id
        return uuid.uuid4().hex

    return _make


@pytest.fixture
def service(repository) -> GoalService:
    return GoalService(repository)


@pytest.fixture
def accounts() -> MemoryAccountRepository:
    return MemoryAccountRepository()
