"""
Remote recipe providers.

Every provider implements BaseRecipeProvider and maps its raw API payloads
into recipebox.models.Recipe.
"""

from recipebox.providers.base import BaseRecipeProvider
from recipebox.providers.spoonacular_provider import SpoonacularProvider

__all__ = [
    "BaseRecipeProvider",
    "SpoonacularProvider",
]
