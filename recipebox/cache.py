"""
Cache-first recipe details and cache maintenance.

Search results often carry only basic recipe information. RecipeCacheService
fills in full details (ingredients and instructions) on demand and in
maintenance runs:
- get_recipe_details(): serve from the store when the cached copy is
  complete, otherwise fetch from the provider and cache the result
- cache_stats(): how many cached recipes have full details
- fill_missing_details(): fetch details for incomplete provider recipes,
  stopping early when the provider quota is exhausted
"""

import logging
import time
from typing import List, Optional

from recipebox.errors import ProviderError, ProviderQuotaError, StoreError
from recipebox.models import SOURCE_CUSTOM, CacheStats, Recipe, RecipeId
from recipebox.providers.base import BaseRecipeProvider
from recipebox.store import LocalRecipeStore

logger = logging.getLogger(__name__)

DEFAULT_FILL_LIMIT = 10


class RecipeCacheService:
    """Keeps cached recipes complete by fetching details from the provider."""

    def __init__(
        self,
        provider: BaseRecipeProvider,
        store: LocalRecipeStore,
        *,
        pause_seconds: float = 0.0,
    ) -> None:
        """
        Args:
            provider: Remote recipe provider
            store: Local recipe store
            pause_seconds: Delay between provider calls in fill_missing_details,
                to stay under provider rate limits (default: 0)
        """
        self.provider = provider
        self.store = store
        self.pause_seconds = pause_seconds

    def get_recipe_details(self, recipe_id: RecipeId) -> Optional[Recipe]:
        """
        Get a recipe with full details, checking the cache first.

        Returns:
            The complete recipe; the cached basic recipe if the provider
            fails; or None if the recipe is unknown everywhere.

        Raises:
            StoreError: If the cache cannot be read
        """
        cached = self.store.get(recipe_id)
        if cached is not None and (cached.has_full_details or cached.source == SOURCE_CUSTOM):
            logger.debug("Loaded recipe %s from cache (full details)", recipe_id)
            return cached

        try:
            recipe = self.provider.get_recipe_details(recipe_id)
        except ProviderError as e:
            logger.warning("Could not fetch details for recipe %s: %s", recipe_id, e)
            return cached

        try:
            self.store.upsert_many([recipe])
        except Exception as e:
            logger.warning("Failed to cache details for recipe %s: %s", recipe_id, e, exc_info=True)
        return recipe

    def cache_stats(self) -> CacheStats:
        """
        Summarize the cache.

        Raises:
            StoreError: If the cache cannot be read
        """
        recipes = self.store.list_recent()
        total = len(recipes)
        with_details = sum(1 for r in recipes if r.has_full_details)
        percentage = round(with_details / total * 100) if total else 0
        return CacheStats(
            total=total,
            with_details=with_details,
            basic_only=total - with_details,
            cache_percentage=percentage,
        )

    def recipes_needing_details(self, limit: Optional[int] = None) -> List[Recipe]:
        """Provider recipes in the cache that lack ingredients or instructions, newest first."""
        needing = [
            r for r in self.store.list_recent()
            if not r.has_full_details and r.source != SOURCE_CUSTOM
        ]
        return needing if limit is None else needing[:limit]

    def fill_missing_details(self, limit: int = DEFAULT_FILL_LIMIT) -> int:
        """
        Fetch and cache full details for up to `limit` incomplete recipes.

        Stops at the first ProviderQuotaError or when a result cannot be
        cached; other provider errors skip the recipe.

        Returns:
            Number of recipes whose details were cached
        """
        candidates = self.recipes_needing_details(limit)
        if not candidates:
            logger.info("All cached recipes have full details")
            return 0

        logger.info("Filling details for %d recipes", len(candidates))
        filled = 0
        for index, candidate in enumerate(candidates):
            if index and self.pause_seconds:
                time.sleep(self.pause_seconds)
            try:
                detailed = self.provider.get_recipe_details(candidate.id)
            except ProviderQuotaError as e:
                logger.info("Provider quota reached, stopping detail fill after %d recipes: %s", filled, e)
                break
            except ProviderError as e:
                logger.warning("Failed to fetch details for recipe %s: %s", candidate.id, e)
                continue

            try:
                self.store.upsert_many([detailed])
            except StoreError as e:
                logger.error("Failed to cache details for recipe %s, stopping detail fill: %s", candidate.id, e)
                break
            filled += 1

        logger.info("Detail fill completed: %d/%d recipes updated", filled, len(candidates))
        return filled
