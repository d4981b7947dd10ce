"""
Base provider abstract class for remote recipe APIs.

This module defines the interface every remote recipe provider must implement,
so SearchOrchestrator and RecipeCacheService can work against any recipe API.

All providers must:
- Expose a max_results attribute (largest result count a single call may request)
- Return recipes already mapped into recipebox.models.Recipe, in relevance order
- Raise ProviderError (or a subclass) for every transport or parse failure,
  including their own timeouts
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from recipebox.models import Recipe, RecipeId


class BaseRecipeProvider(ABC):
    """
    Abstract base class for all remote recipe providers.

    Attributes:
        name: Short provider identifier (e.g. "spoonacular")
        max_results: Maximum number of recipes a single search may request
    """
    name: str
    max_results: int = 100

    @abstractmethod
    def search_by_keyword(self, text: str, limit: int) -> List[Recipe]:
        """
        Search recipes by free text.

        Args:
            text: Search text (already trimmed, non-empty)
            limit: Maximum number of recipes to return

        Returns:
            List of Recipe objects in relevance order

        Raises:
            ProviderError: On any transport or parse problem
        """

    @abstractmethod
    def search_by_ingredients(self, names: Sequence[str], limit: int) -> List[Recipe]:
        """
        Search recipes that use the given ingredients.

        Raises:
            ProviderError: On any transport or parse problem
        """

    @abstractmethod
    def get_recipe_details(self, recipe_id: RecipeId) -> Recipe:
        """
        Fetch a single recipe with full ingredients and instructions.

        Raises:
            ProviderError: On any transport or parse problem
        """

    @abstractmethod
    def random_recipes(self, limit: int) -> List[Recipe]:
        """
        Fetch a selection of random (trending) recipes.

        Raises:
            ProviderError: On any transport or parse problem
        """
