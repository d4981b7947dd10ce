"""
Local recipe store: contract and in-memory implementation.

LocalRecipeStore is the persistent, key-ordered cache of every recipe seen.
SearchOrchestrator writes provider results through to it and reads from it
when the provider is unreachable.

Contract:
- upsert_many(recipes): replace any record sharing an id; the whole batch is
  applied or none of it is (StoreError on failure)
- find_by_title_substring(text, limit): case-insensitive title substring match
- find_by_ingredients(names, limit): recipes whose ingredient text contains at
  least one of the names (case-insensitive substring)
- get(recipe_id), list_recent(limit), count(): used by RecipeCacheService
- delete(recipe_id): used to remove custom recipes

All queries return most-recently-cached recipes first. Recipes cached in the
same batch keep the batch's own (relevance) order. Retention is unbounded.

The in-memory store is used when DATABASE_URL is not set (see recipebox.db
for the SQLAlchemy-backed store).
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from recipebox.models import Recipe, RecipeId

logger = logging.getLogger(__name__)


class LocalRecipeStore(ABC):
    """Abstract base class for local recipe stores."""

    @abstractmethod
    def upsert_many(self, recipes: Iterable[Recipe]) -> None:
        """
        Insert or replace recipes keyed by id.

        Raises:
            StoreError: If the batch could not be written (nothing is written)
        """

    @abstractmethod
    def find_by_title_substring(self, text: str, limit: int) -> List[Recipe]:
        """Return up to `limit` recipes whose title contains `text` (case-insensitive)."""

    @abstractmethod
    def find_by_ingredients(self, names: Sequence[str], limit: int) -> List[Recipe]:
        """Return up to `limit` recipes using at least one of `names` (case-insensitive)."""

    @abstractmethod
    def get(self, recipe_id: RecipeId) -> Optional[Recipe]:
        """Return the cached recipe with this id, or None."""

    @abstractmethod
    def delete(self, recipe_id: RecipeId) -> bool:
        """
        Remove the recipe with this id.

        Returns:
            True if a recipe was removed, False if none was stored

        Raises:
            StoreError: If the recipe could not be removed
        """

    @abstractmethod
    def list_recent(self, limit: Optional[int] = None) -> List[Recipe]:
        """Return cached recipes, most recently cached first."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of cached recipes."""


class InMemoryRecipeStore(LocalRecipeStore):
    """
    Process-local recipe store backed by a dict.

    A single lock guards the dict, so each batch is applied atomically and
    concurrent writers resolve last-write-wins by id.
    """

    def __init__(self) -> None:
        # key -> (batch sequence, position in batch, recipe)
        self._records: Dict[str, Tuple[int, int, Recipe]] = {}
        self._lock = threading.Lock()
        self._batches = itertools.count(1)

    def upsert_many(self, recipes: Iterable[Recipe]) -> None:
        batch = list(recipes)
        if not batch:
            return
        with self._lock:
            seq = next(self._batches)
            for position, recipe in enumerate(batch):
                self._records[recipe.key] = (seq, position, recipe)
        logger.debug("Upserted %d recipes into in-memory store", len(batch))

    def find_by_title_substring(self, text: str, limit: int) -> List[Recipe]:
        return self._select(lambda r: r.matches_title(text), limit)

    def find_by_ingredients(self, names: Sequence[str], limit: int) -> List[Recipe]:
        names = [n for n in names if n]
        return self._select(lambda r: r.matches_any_ingredient(names), limit)

    def get(self, recipe_id: RecipeId) -> Optional[Recipe]:
        with self._lock:
            record = self._records.get(str(recipe_id))
        return record[2] if record else None

    def delete(self, recipe_id: RecipeId) -> bool:
        with self._lock:
            return self._records.pop(str(recipe_id), None) is not None

    def list_recent(self, limit: Optional[int] = None) -> List[Recipe]:
        return self._select(lambda r: True, limit)

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def clear(self) -> None:
        """Remove all cached recipes (useful for testing)."""
        with self._lock:
            self._records.clear()

    def _select(self, predicate, limit: Optional[int]) -> List[Recipe]:
        with self._lock:
            records = list(self._records.values())
        # Newest batch first, then the batch's own order
        records.sort(key=lambda rec: (-rec[0], rec[1]))
        matches = [rec[2] for rec in records if predicate(rec[2])]
        return matches if limit is None else matches[:limit]
