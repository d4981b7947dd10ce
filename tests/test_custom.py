"""
Tests for user-authored (custom) recipes.
"""

import uuid
from unittest.mock import Mock

import pytest

from recipebox.custom import (
    build_custom_recipe,
    create_custom_recipe,
    delete_custom_recipe,
    get_custom_recipe,
    list_custom_recipes,
    update_custom_recipe,
)
from recipebox.errors import StoreError
from recipebox.models import CustomRecipeInput


@pytest.fixture
def soup_input():
    return CustomRecipeInput(
        title="Grandma's Tomato Soup",
        servings=4,
        readyInMinutes=45,
        ingredients=["6 ripe tomatoes", "  ", "1 onion"],
        instructions=["Chop the vegetables.", "", "Simmer 30 minutes."],
        vegetarian=True,
    )


class TestBuildCustomRecipe:
    def test_id_is_a_uuid_string(self, soup_input):
        recipe = build_custom_recipe(soup_input)

        assert isinstance(recipe.id, str)
        assert str(uuid.UUID(recipe.id)) == recipe.id

    def test_each_recipe_gets_a_new_id(self, soup_input):
        assert build_custom_recipe(soup_input).id != build_custom_recipe(soup_input).id

    def test_fields_are_copied(self, soup_input):
        recipe = build_custom_recipe(soup_input)

        assert recipe.title == "Grandma's Tomato Soup"
        assert recipe.servings == 4
        assert recipe.ready_in_minutes == 45
        assert recipe.vegetarian is True
        assert recipe.source == "custom"

    def test_blank_lines_are_dropped_and_steps_numbered(self, soup_input):
        recipe = build_custom_recipe(soup_input)

        assert [i.original for i in recipe.ingredients] == ["6 ripe tomatoes", "1 onion"]
        assert [(s.number, s.step) for s in recipe.instructions] == [
            (1, "Chop the vegetables."),
            (2, "Simmer 30 minutes."),
        ]


class TestCreateCustomRecipe:
    def test_recipe_is_saved(self, soup_input, memory_store):
        recipe = create_custom_recipe(soup_input, memory_store)

        assert memory_store.get(recipe.id) == recipe

    def test_saved_recipe_is_found_by_title(self, soup_input, memory_store):
        recipe = create_custom_recipe(soup_input, memory_store)

        assert memory_store.find_by_title_substring("tomato soup", 10) == [recipe]

    def test_store_error_propagates(self, soup_input):
        store = Mock()
        store.upsert_many.side_effect = StoreError("disk full")

        with pytest.raises(StoreError):
            create_custom_recipe(soup_input, store)


@pytest.fixture
def stew_input():
    return CustomRecipeInput(
        title="Winter Stew",
        ingredients=["2 carrots", "1 leek"],
        instructions=["Dice.", "  ", "Braise 2 hours.", "Season."],
    )


class TestManageCustomRecipes:
    """Update, delete and list against both stores."""

    def test_update_keeps_id_and_renumbers_steps(self, soup_input, stew_input, any_store):
        created = create_custom_recipe(soup_input, any_store)

        updated = update_custom_recipe(created.id, stew_input, any_store)

        assert updated.id == created.id
        assert updated.source == "custom"
        assert updated.title == "Winter Stew"
        assert [(s.number, s.step) for s in updated.instructions] == [
            (1, "Dice."),
            (2, "Braise 2 hours."),
            (3, "Season."),
        ]
        assert any_store.get(created.id) == updated
        assert any_store.count() == 1

    def test_update_unknown_recipe_returns_none(self, stew_input, any_store):
        assert update_custom_recipe(str(uuid.uuid4()), stew_input, any_store) is None
        assert any_store.count() == 0

    def test_update_does_not_touch_provider_recipes(self, stew_input, any_store, make_recipe):
        any_store.upsert_many([make_recipe(716429, "Pasta")])

        assert update_custom_recipe(716429, stew_input, any_store) is None
        assert any_store.get(716429).title == "Pasta"

    def test_delete(self, soup_input, any_store):
        created = create_custom_recipe(soup_input, any_store)

        assert delete_custom_recipe(created.id, any_store) is True
        assert any_store.get(created.id) is None
        assert delete_custom_recipe(created.id, any_store) is False

    def test_delete_does_not_touch_provider_recipes(self, any_store, make_recipe):
        any_store.upsert_many([make_recipe(716429, "Pasta")])

        assert delete_custom_recipe(716429, any_store) is False
        assert any_store.get(716429) is not None

    def test_list_newest_first_and_custom_only(self, soup_input, stew_input, any_store, make_recipe):
        soup = create_custom_recipe(soup_input, any_store)
        any_store.upsert_many([make_recipe(716429, "Tomato Pasta")])
        stew = create_custom_recipe(stew_input, any_store)

        assert [r.id for r in list_custom_recipes(any_store)] == [stew.id, soup.id]

    def test_list_filters_by_title(self, soup_input, stew_input, any_store):
        soup = create_custom_recipe(soup_input, any_store)
        create_custom_recipe(stew_input, any_store)

        assert list_custom_recipes(any_store, "TOMATO") == [soup]
        assert len(list_custom_recipes(any_store, "  ")) == 2

    def test_get_custom_recipe(self, soup_input, any_store, make_recipe):
        created = create_custom_recipe(soup_input, any_store)
        any_store.upsert_many([make_recipe(1, "Remote")])

        assert get_custom_recipe(created.id, any_store) == created
        assert get_custom_recipe(1, any_store) is None
