"""
User-authored (custom) recipes.

Custom recipes live in the same store as provider recipes. Their ids are
UUID4 strings, so they never collide with the provider's integer ids.

Operations:
- create_custom_recipe(): new recipe with a generated id
- update_custom_recipe(): replace the fields of an existing custom recipe, keeping its id
- delete_custom_recipe(): remove a custom recipe
- get_custom_recipe() / list_custom_recipes(): read back, newest first,
  optionally filtered by title
"""

import logging
import uuid
from typing import List, Optional

from recipebox.models import SOURCE_CUSTOM, CustomRecipeInput, Ingredient, Recipe, RecipeId
from recipebox.store import LocalRecipeStore
from recipebox.utils.instructions import number_steps

logger = logging.getLogger(__name__)


def build_custom_recipe(data: CustomRecipeInput, recipe_id: Optional[str] = None) -> Recipe:
    """Build a Recipe from user input, numbering the steps from 1. A new UUID is assigned unless recipe_id is given."""
    return Recipe(
        id=recipe_id or str(uuid.uuid4()),
        title=data.title,
        image_url=data.image_url,
        ready_in_minutes=data.ready_in_minutes,
        servings=data.servings,
        summary=data.summary,
        ingredients=[Ingredient(original=line.strip()) for line in data.ingredients if line.strip()],
        instructions=number_steps(data.instructions),
        vegetarian=data.vegetarian,
        vegan=data.vegan,
        gluten_free=data.gluten_free,
        dairy_free=data.dairy_free,
        source=SOURCE_CUSTOM,
    )


def create_custom_recipe(data: CustomRecipeInput, store: LocalRecipeStore) -> Recipe:
    """
    Create a custom recipe and save it to the store.

    Raises:
        pydantic.ValidationError: If the input does not form a valid recipe
        StoreError: If the recipe could not be saved
    """
    recipe = build_custom_recipe(data)
    store.upsert_many([recipe])
    logger.info("Created custom recipe %s (%r)", recipe.id, recipe.title)
    return recipe


def get_custom_recipe(recipe_id: RecipeId, store: LocalRecipeStore) -> Optional[Recipe]:
    """Return the custom recipe with this id, or None (provider recipes are ignored)."""
    recipe = store.get(recipe_id)
    if recipe is None or recipe.source != SOURCE_CUSTOM:
        return None
    return recipe


def update_custom_recipe(recipe_id: RecipeId, data: CustomRecipeInput, store: LocalRecipeStore) -> Optional[Recipe]:
    """
    Replace an existing custom recipe with new content, keeping its id.

    Returns:
        The updated recipe, or None if no custom recipe has this id

    Raises:
        StoreError: If the recipe could not be read or saved
    """
    existing = get_custom_recipe(recipe_id, store)
    if existing is None:
        logger.info("Custom recipe %s not found for update", recipe_id)
        return None

    recipe = build_custom_recipe(data, recipe_id=existing.key)
    store.upsert_many([recipe])
    logger.info("Updated custom recipe %s (%r)", recipe.id, recipe.title)
    return recipe


def delete_custom_recipe(recipe_id: RecipeId, store: LocalRecipeStore) -> bool:
    """
    Delete a custom recipe.

    Returns:
        True if the recipe was deleted, False if no custom recipe has this id

    Raises:
        StoreError: If the recipe could not be read or removed
    """
    if get_custom_recipe(recipe_id, store) is None:
        return False
    deleted = store.delete(recipe_id)
    if deleted:
        logger.info("Deleted custom recipe %s", recipe_id)
    return deleted


def list_custom_recipes(store: LocalRecipeStore, query: Optional[str] = None) -> List[Recipe]:
    """
    List custom recipes, most recently saved first.

    Args:
        store: Local recipe store
        query: Optional case-insensitive title filter

    Raises:
        StoreError: If the store cannot be read
    """
    recipes = [r for r in store.list_recent() if r.source == SOURCE_CUSTOM]
    if query and query.strip():
        recipes = [r for r in recipes if r.matches_title(query.strip())]
    return recipes
