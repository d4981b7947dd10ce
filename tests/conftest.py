"""
Shared fixtures for the recipebox test suite.

Providers are mocked with unittest.mock so no test makes a real API call.
"""

import time
from typing import List, Optional
from unittest.mock import Mock

import pytest

from recipebox.db import SqlRecipeStore, create_store_engine
from recipebox.models import Recipe
from recipebox.providers.base import BaseRecipeProvider
from recipebox.store import InMemoryRecipeStore


def _recipe(
    id,
    title: str,
    ingredients: Optional[List[str]] = None,
    steps: Optional[List[str]] = None,
    **extra,
) -> Recipe:
    return Recipe(
        id=id,
        title=title,
        ingredients=[{"original": line} for line in (ingredients or [])],
        instructions=[{"number": i, "step": s} for i, s in enumerate(steps or [], start=1)],
        **extra,
    )


@pytest.fixture
def make_recipe():
    """Factory building Recipe objects from plain ingredient and step strings."""
    return _recipe


@pytest.fixture
def provider():
    """Mock provider with the BaseRecipeProvider interface and a max of 100 results."""
    mock_provider = Mock(spec=BaseRecipeProvider)
    mock_provider.name = "mock"
    mock_provider.max_results = 100
    return mock_provider


@pytest.fixture
def memory_store():
    return InMemoryRecipeStore()


class _CountingClock:
    """Strictly increasing fake clock so cached_at ordering is deterministic."""

    def __init__(self) -> None:
        self.now = 1_700_000_000.0

    def __call__(self) -> float:
        self.now += 1.0
        return self.now


@pytest.fixture
def sql_store():
    """SqlRecipeStore on a private in-memory SQLite database."""
    engine = create_store_engine("sqlite://")
    store = SqlRecipeStore(engine=engine, clock=_CountingClock())
    yield store
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def any_store(request, memory_store, sql_store):
    """Run a test against both LocalRecipeStore implementations."""
    return memory_store if request.param == "memory" else sql_store


class SlowStore(InMemoryRecipeStore):
    """In-memory store whose writes take `delay` seconds."""

    def __init__(self, delay: float) -> None:
        super().__init__()
        self.delay = delay

    def upsert_many(self, recipes):
        time.sleep(self.delay)
        super().upsert_many(recipes)


@pytest.fixture
def slow_store():
    return SlowStore(delay=1.0)
