"""
Tests for the RecipeBox FastAPI endpoints.

The SearchOrchestrator dependency is overridden with one that wraps a mocked
provider and an in-memory store, so no test calls Spoonacular.
"""

import os
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.main import _build_orchestrator, app, get_orchestrator, parse_recipe_id
from recipebox.errors import ProviderError, ProviderQuotaError
from recipebox.search import CACHED_RESULTS_MESSAGE, NO_RESULTS_MESSAGE, SearchOrchestrator


@pytest.fixture
def orchestrator(provider, memory_store):
    orch = SearchOrchestrator(provider, memory_store)
    yield orch
    orch.close()


@pytest.fixture
def client(orchestrator):
    """Create a test client whose endpoints use the mocked orchestrator."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestSearchEndpoint:
    """Tests for GET /search and GET /search/ingredients."""

    def test_live_search(self, client, provider, make_recipe):
        provider.search_by_keyword.return_value = [
            make_recipe(1, "Pasta Carbonara", ready_in_minutes=25),
            make_recipe(2, "Pasta Pomodoro"),
        ]

        response = client.get("/search", params={"q": "pasta", "limit": 20})

        assert response.status_code == 200
        data = response.json()
        assert data["provenance"] == "live"
        assert data["count"] == 2
        assert data["message"] is None
        assert [r["title"] for r in data["recipes"]] == ["Pasta Carbonara", "Pasta Pomodoro"]
        assert data["recipes"][0]["readyInMinutes"] == 25
        provider.search_by_keyword.assert_called_once_with("pasta", 20)

    def test_cached_search(self, client, provider, memory_store, make_recipe):
        memory_store.upsert_many([make_recipe(10, "Cheesy Pizza")])
        provider.search_by_keyword.side_effect = ProviderError("timed out")

        data = client.get("/search", params={"q": "pizza"}).json()

        assert data["provenance"] == "cached"
        assert data["message"] == CACHED_RESULTS_MESSAGE
        assert [r["id"] for r in data["recipes"]] == [10]

    def test_empty_search(self, client, provider):
        provider.search_by_keyword.side_effect = ProviderError("down")

        data = client.get("/search", params={"q": "xyzzy"}).json()

        assert data["provenance"] == "empty"
        assert data["recipes"] == []
        assert data["message"] == NO_RESULTS_MESSAGE

    def test_blank_query_is_bad_request(self, client, provider):
        response = client.get("/search", params={"q": "   "})

        assert response.status_code == 400
        provider.search_by_keyword.assert_not_called()

    @pytest.mark.parametrize("limit", [0, 101])
    def test_out_of_range_limit_is_bad_request(self, client, limit):
        response = client.get("/search", params={"q": "pasta", "limit": limit})

        assert response.status_code == 400

    def test_missing_query_is_unprocessable(self, client):
        assert client.get("/search").status_code == 422

    def test_ingredient_search(self, client, provider, make_recipe):
        provider.search_by_ingredients.return_value = [make_recipe(5, "Caprese")]

        response = client.get("/search/ingredients", params={"ingredients": "tomato, basil,"})

        assert response.status_code == 200
        assert response.json()["provenance"] == "live"
        provider.search_by_ingredients.assert_called_once_with(["tomato", "basil"], 20)

    def test_ingredient_search_without_names(self, client):
        response = client.get("/search/ingredients", params={"ingredients": " , "})

        assert response.status_code == 400


class TestRecipeEndpoints:
    """Tests for /recipes endpoints."""

    def test_trending_falls_back_to_cache(self, client, provider, memory_store, make_recipe):
        memory_store.upsert_many([make_recipe(1, "Banana Bread")])
        provider.random_recipes.side_effect = ProviderQuotaError("quota", status_code=402)

        data = client.get("/recipes/trending", params={"limit": 5}).json()

        assert data["provenance"] == "cached"
        assert data["recipes"][0]["title"] == "Banana Bread"

    def test_recipe_details_from_cache(self, client, provider, memory_store, make_recipe):
        memory_store.upsert_many([make_recipe(42, "Soup", ingredients=["water"], steps=["Boil."])])

        response = client.get("/recipes/42")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == 42
        assert data["has_full_details"] is True
        assert data["instructions"] == [{"number": 1, "step": "Boil."}]
        provider.get_recipe_details.assert_not_called()

    def test_unknown_recipe_is_not_found(self, client, provider):
        provider.get_recipe_details.side_effect = ProviderError("404", status_code=404)

        assert client.get("/recipes/123456").status_code == 404

    def test_create_custom_recipe(self, client, memory_store):
        payload = {
            "title": "Grandma's Tomato Soup",
            "readyInMinutes": 45,
            "ingredients": ["6 ripe tomatoes", "1 onion"],
            "instructions": ["Chop.", "Simmer."],
            "vegetarian": True,
        }

        response = client.post("/recipes/custom", json=payload)

        assert response.status_code == 201
        data = response.json()
        assert data["source"] == "custom"
        assert data["readyInMinutes"] == 45
        assert [s["number"] for s in data["instructions"]] == [1, 2]
        assert memory_store.get(data["id"]) is not None

        fetched = client.get(f"/recipes/{data['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["title"] == "Grandma's Tomato Soup"

    def test_create_custom_recipe_requires_title(self, client):
        assert client.post("/recipes/custom", json={"ingredients": ["salt"]}).status_code == 422

    def test_create_custom_recipe_rejects_blank_title(self, client, memory_store):
        response = client.post("/recipes/custom", json={"title": "   "})

        assert response.status_code == 422
        assert memory_store.count() == 0

    def test_parse_recipe_id(self):
        assert parse_recipe_id("716429") == 716429
        assert parse_recipe_id("0b8e2c1e-3f7a-4d8c-9a61-5a3c1f9e7b42") == "0b8e2c1e-3f7a-4d8c-9a61-5a3c1f9e7b42"
        assert parse_recipe_id("²") == "²"

    def test_non_ascii_digit_id_is_not_found(self, client, provider):
        provider.get_recipe_details.side_effect = ProviderError("404", status_code=404)

        response = client.get("/recipes/²")

        assert response.status_code == 404
        provider.get_recipe_details.assert_called_once_with("²")


class TestCustomRecipeEndpoints:
    """Tests for listing, updating and deleting custom recipes."""

    def _create(self, client, title="Grandma's Tomato Soup"):
        response = client.post("/recipes/custom", json={"title": title, "instructions": ["Chop.", "Simmer."]})
        assert response.status_code == 201
        return response.json()

    def test_list_custom_recipes_newest_first(self, client, memory_store, make_recipe):
        soup = self._create(client)
        memory_store.upsert_many([make_recipe(716429, "Tomato Pasta")])
        stew = self._create(client, "Winter Stew")

        response = client.get("/recipes/custom")

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [stew["id"], soup["id"]]

    def test_list_custom_recipes_by_title(self, client):
        soup = self._create(client)
        self._create(client, "Winter Stew")

        data = client.get("/recipes/custom", params={"q": "tomato"}).json()

        assert [r["id"] for r in data] == [soup["id"]]

    def test_update_custom_recipe(self, client, memory_store):
        soup = self._create(client)

        response = client.put(
            f"/recipes/custom/{soup['id']}",
            json={"title": "Roasted Tomato Soup", "instructions": ["Roast.", "", "Blend."]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == soup["id"]
        assert data["title"] == "Roasted Tomato Soup"
        assert data["instructions"] == [{"number": 1, "step": "Roast."}, {"number": 2, "step": "Blend."}]
        assert memory_store.get(soup["id"]).title == "Roasted Tomato Soup"

    def test_update_unknown_custom_recipe(self, client):
        response = client.put("/recipes/custom/0b8e2c1e-3f7a-4d8c-9a61-5a3c1f9e7b42", json={"title": "Soup"})

        assert response.status_code == 404

    def test_update_rejects_blank_title(self, client):
        soup = self._create(client)

        assert client.put(f"/recipes/custom/{soup['id']}", json={"title": " "}).status_code == 422

    def test_delete_custom_recipe(self, client, memory_store):
        soup = self._create(client)

        response = client.delete(f"/recipes/custom/{soup['id']}")

        assert response.status_code == 204
        assert memory_store.get(soup["id"]) is None
        assert client.delete(f"/recipes/custom/{soup['id']}").status_code == 404

    def test_delete_provider_recipe_is_not_found(self, client, memory_store, make_recipe):
        memory_store.upsert_many([make_recipe(716429, "Tomato Pasta")])

        assert client.delete("/recipes/custom/716429").status_code == 404
        assert memory_store.get(716429) is not None


class TestCacheEndpoints:
    """Tests for /cache endpoints."""

    def test_cache_stats(self, client, memory_store, make_recipe):
        memory_store.upsert_many([
            make_recipe(1, "Full", ingredients=["egg"], steps=["Cook."]),
            make_recipe(2, "Basic"),
        ])

        data = client.get("/cache/stats").json()

        assert data == {"total": 2, "with_details": 1, "basic_only": 1, "cache_percentage": 50}

    def test_cache_fill(self, client, provider, memory_store, make_recipe):
        memory_store.upsert_many([make_recipe(1, "Basic A"), make_recipe(2, "Basic B")])
        provider.get_recipe_details.side_effect = lambda recipe_id: make_recipe(
            recipe_id, "Full", ingredients=["egg"], steps=["Cook."]
        )

        response = client.post("/cache/fill", params={"limit": 1})

        assert response.status_code == 200
        assert response.json() == {"filled": 1, "remaining": 1}


class TestServiceEndpoints:
    """Tests for health, root and configuration errors."""

    def test_health(self, client):
        with patch.dict(os.environ, {"SPOONACULAR_API_KEY": "k"}, clear=True):
            response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["name"] == "RecipeBox API"
        assert data["provider_configured"] is True
        assert data["db_enabled"] is False

    def test_root(self, client):
        data = client.get("/").json()

        assert data["name"] == "RecipeBox API"
        assert data["docs"] == "/docs"

    def test_missing_api_key_returns_service_unavailable(self):
        _build_orchestrator.cache_clear()
        try:
            with patch.dict(os.environ, {}, clear=True):
                response = TestClient(app).get("/search", params={"q": "pasta"})
        finally:
            _build_orchestrator.cache_clear()

        assert response.status_code == 503
        assert "SPOONACULAR_API_KEY" in response.json()["detail"]
