"""
Spoonacular provider for remote recipe search.

This provider interfaces with the Spoonacular REST API to search recipes by
keyword or by ingredients, fetch full recipe details and random recipes, and
normalizes the responses into recipebox.models.Recipe.

Endpoints used:
- GET /recipes/complexSearch         keyword search (with recipe information)
- GET /recipes/findByIngredients     ingredient search
- GET /recipes/{id}/information      full recipe details
- GET /recipes/random                random / trending recipes

Every failure (timeout, connection error, non-2xx status, invalid JSON,
unexpected payload shape) is raised as ProviderError. HTTP 402 (daily points
exhausted) and 429 (rate limited) are raised as ProviderQuotaError.

Requires SPOONACULAR_API_KEY in .env file (or passed explicitly).
"""

import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import requests
from pydantic import ValidationError as PydanticValidationError

from recipebox.errors import ProviderError, ProviderQuotaError
from recipebox.models import Recipe, RecipeId

from .base import BaseRecipeProvider

logger = logging.getLogger(__name__)

# Spoonacular reports an exhausted daily quota with 402 and throttling with 429
QUOTA_STATUS_CODES = {402, 429}

DEFAULT_BASE_URL = "https://api.spoonacular.com"
DEFAULT_TIMEOUT_SECONDS = 10.0

# Note: Environment variables should be loaded by api.config early in the application lifecycle.


class SpoonacularProvider(BaseRecipeProvider):
    """
    Provider for the Spoonacular recipe API.

    Uses a requests.Session so connections are reused across calls. The
    request timeout is owned by the provider: a call that exceeds it raises
    ProviderError like any other failure.
    """
    name = "spoonacular"
    max_results = 100

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the Spoonacular provider.

        Args:
            api_key: Spoonacular API key (optional, reads SPOONACULAR_API_KEY if not provided)
            base_url: API base URL (optional, reads SPOONACULAR_BASE_URL or defaults to https://api.spoonacular.com)
            timeout: Request timeout in seconds (optional, reads SPOONACULAR_TIMEOUT_SECONDS or defaults to 10)
            session: requests.Session to use (optional, a new one is created)

        Raises:
            RuntimeError: If no API key is configured.
        """
        key = api_key or os.getenv("SPOONACULAR_API_KEY")
        if not key:
            raise RuntimeError(
                "SPOONACULAR_API_KEY is not set. Please add it to your .env file at the project root:\n"
                "SPOONACULAR_API_KEY=your_spoonacular_key_here"
            )

        self.api_key = key
        self.base_url = (base_url or os.getenv("SPOONACULAR_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        if timeout is None:
            timeout = float(os.getenv("SPOONACULAR_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
        self.timeout = timeout
        self.session = session or requests.Session()

    def search_by_keyword(self, text: str, limit: int) -> List[Recipe]:
        data = self._get(
            "/recipes/complexSearch",
            {
                "query": text,
                "number": limit,
                "addRecipeInformation": "true",
                "fillIngredients": "true",
            },
        )
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise ProviderError("Unexpected complexSearch response: missing 'results' list")
        return self._to_recipes(data["results"])

    def search_by_ingredients(self, names: Sequence[str], limit: int) -> List[Recipe]:
        data = self._get(
            "/recipes/findByIngredients",
            {
                "ingredients": ",".join(names),
                "number": limit,
                "ranking": 2,  # Maximize used ingredients
            },
        )
        if not isinstance(data, list):
            raise ProviderError("Unexpected findByIngredients response: expected a list")
        return self._to_recipes(data)

    def get_recipe_details(self, recipe_id: RecipeId) -> Recipe:
        data = self._get(f"/recipes/{recipe_id}/information", {"includeNutrition": "false"})
        if not isinstance(data, dict):
            raise ProviderError("Unexpected recipe information response: expected an object")
        recipes = self._to_recipes([data])
        return recipes[0]

    def random_recipes(self, limit: int) -> List[Recipe]:
        data = self._get("/recipes/random", {"number": limit})
        if not isinstance(data, dict) or not isinstance(data.get("recipes"), list):
            raise ProviderError("Unexpected random recipes response: missing 'recipes' list")
        return self._to_recipes(data["recipes"])

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        """
        Perform a GET request and return the decoded JSON body.

        Raises:
            ProviderQuotaError: On HTTP 402 / 429
            ProviderError: On any other transport, status or decoding failure
        """
        url = f"{self.base_url}{path}"
        query = dict(params)
        query["apiKey"] = self.api_key

        logger.debug("Spoonacular GET %s params=%r", path, params)
        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise ProviderError(f"Spoonacular request to {path} timed out after {self.timeout}s", cause=e) from e
        except requests.exceptions.ConnectionError as e:
            raise ProviderError(f"Could not connect to Spoonacular ({path}): {e}", cause=e) from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"Spoonacular request to {path} failed: {e}", cause=e) from e

        if response.status_code in QUOTA_STATUS_CODES:
            raise ProviderQuotaError(
                f"Spoonacular quota exceeded ({response.status_code}) for {path}",
                status_code=response.status_code,
            )
        if not 200 <= response.status_code < 300:
            raise ProviderError(
                f"Spoonacular returned HTTP {response.status_code} for {path}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"Spoonacular returned invalid JSON for {path}", cause=e) from e

    def _to_recipes(self, items: List[Any]) -> List[Recipe]:
        recipes: List[Recipe] = []
        for item in items:
            try:
                recipes.append(Recipe.from_api(item, source=self.name))
            except (KeyError, TypeError, AttributeError, PydanticValidationError) as e:
                raise ProviderError(f"Malformed recipe in Spoonacular response: {e}", cause=e) from e
        logger.debug("Spoonacular mapped %d recipes", len(recipes))
        return recipes
