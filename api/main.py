"""
FastAPI application for the RecipeBox API.

This module defines the REST API endpoints for the recipe search backend:
- GET /search: Search recipes by keyword (live, with cache fallback)
- GET /search/ingredients: Search recipes by ingredients
- GET /recipes/trending: Random recipes (live, with cache fallback)
- GET /recipes/{recipe_id}: Full recipe details (cache first)
- POST /recipes/custom: Create a user-authored recipe
- GET /recipes/custom: List user-authored recipes
- PUT /recipes/custom/{recipe_id}: Update a user-authored recipe
- DELETE /recipes/custom/{recipe_id}: Delete a user-authored recipe
- GET /cache/stats: Cache completeness statistics
- POST /cache/fill: Fetch missing details for cached recipes

Run the API with:
    uvicorn api.main:app --reload

Access API documentation at:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

# Import config early to load .env file before any other code accesses environment variables
import api.config  # noqa: F401

import logging
import time
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Response, status

from api.config import SearchConfig, SpoonacularConfig, StoreConfig, configure_logging, get_required_env_vars
from api.schemas import CacheFillResponse, HealthResponse, SearchResponse
from recipebox.cache import DEFAULT_FILL_LIMIT, RecipeCacheService
from recipebox.custom import create_custom_recipe, delete_custom_recipe, list_custom_recipes, update_custom_recipe
from recipebox.db import SqlRecipeStore
from recipebox.errors import StoreError, ValidationError
from recipebox.models import CacheStats, CustomRecipeInput, Recipe, RecipeId
from recipebox.providers.spoonacular_provider import SpoonacularProvider
from recipebox.search import SearchOrchestrator
from recipebox.store import InMemoryRecipeStore, LocalRecipeStore

configure_logging()
logger = logging.getLogger(__name__)

APP_NAME = "RecipeBox API"
APP_VERSION = "1.0.0"

# Track app start time for uptime calculation
_APP_START_TIME = time.time()


def build_store() -> LocalRecipeStore:
    """Use the database store when DATABASE_URL is set, the in-memory store otherwise."""
    database_url = StoreConfig.get_database_url()
    if database_url:
        logger.info("Using database recipe store")
        return SqlRecipeStore(database_url)
    logger.info("DATABASE_URL not set, using in-memory recipe store")
    return InMemoryRecipeStore()


@lru_cache(maxsize=1)
def _build_orchestrator() -> SearchOrchestrator:
    provider = SpoonacularProvider(
        api_key=SpoonacularConfig.get_api_key(),
        base_url=SpoonacularConfig.get_base_url(),
        timeout=SpoonacularConfig.get_timeout(),
    )
    return SearchOrchestrator(provider, build_store(), default_limit=SearchConfig.get_default_limit())


def get_orchestrator() -> SearchOrchestrator:
    """
    FastAPI dependency returning the process's SearchOrchestrator.

    Raises:
        HTTPException 503: If the recipe provider is not configured
    """
    try:
        return _build_orchestrator()
    except RuntimeError as e:
        logger.error("Recipe search is not configured: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Recipe search is not configured: {e}",
        ) from e


def get_cache_service(orchestrator: SearchOrchestrator = Depends(get_orchestrator)) -> RecipeCacheService:
    return RecipeCacheService(orchestrator.provider, orchestrator.store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Flush pending cache writes on shutdown
    if _build_orchestrator.cache_info().currsize:
        _build_orchestrator().close()


app = FastAPI(
    title=APP_NAME,
    description="Recipe search backed by Spoonacular, with a local cache fallback",
    version=APP_VERSION,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "search", "description": "Search recipes by keyword or ingredients."},
        {"name": "recipes", "description": "Recipe details, trending and custom recipes."},
        {"name": "cache", "description": "Local recipe cache statistics and maintenance."},
        {"name": "health", "description": "Health check and monitoring endpoints."},
    ],
)


def parse_recipe_id(recipe_id: str) -> RecipeId:
    """Provider ids are integers; anything else is a custom recipe UUID."""
    return int(recipe_id) if recipe_id.isascii() and recipe_id.isdigit() else recipe_id


@app.get(
    "/search",
    response_model=SearchResponse,
    tags=["search"],
    summary="Search recipes by keyword",
)
def search(
    q: str = Query(..., description="Search text (e.g. 'pasta', 'chicken curry')"),
    limit: Optional[int] = Query(None, description="Maximum number of recipes (default: 20, max: 100)"),
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> SearchResponse:
    """
    Search recipes by keyword.

    Returns live results from the provider when it is reachable, otherwise
    cached results (provenance "cached") or an empty list with a message
    (provenance "empty").

    Raises:
        HTTPException 400: If the query is blank or the limit is out of range
    """
    try:
        result = orchestrator.search(q, limit)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return SearchResponse.from_result(result)


@app.get(
    "/search/ingredients",
    response_model=SearchResponse,
    tags=["search"],
    summary="Search recipes by ingredients",
)
def search_by_ingredients(
    ingredients: str = Query(..., description="Comma-separated ingredient names (e.g. 'tomato,basil')"),
    limit: Optional[int] = Query(None, description="Maximum number of recipes (default: 20, max: 100)"),
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> SearchResponse:
    """
    Search recipes that use the given ingredients.

    Raises:
        HTTPException 400: If no ingredient names are given or the limit is out of range
    """
    names = [name.strip() for name in ingredients.split(",")]
    try:
        result = orchestrator.search(names, limit)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return SearchResponse.from_result(result)


@app.get(
    "/recipes/trending",
    response_model=SearchResponse,
    tags=["recipes"],
    summary="Random recipes, falling back to recently cached ones",
)
def trending(
    limit: Optional[int] = Query(None, description="Maximum number of recipes (default: 20, max: 100)"),
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> SearchResponse:
    try:
        result = orchestrator.trending(limit)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return SearchResponse.from_result(result)


@app.post(
    "/recipes/custom",
    response_model=Recipe,
    status_code=status.HTTP_201_CREATED,
    tags=["recipes"],
    summary="Create a custom recipe",
)
def create_custom(
    payload: CustomRecipeInput,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> Recipe:
    """
    Create a user-authored recipe with a generated UUID id.

    Raises:
        HTTPException 503: If the recipe could not be saved
    """
    try:
        return create_custom_recipe(payload, orchestrator.store)
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not save recipe: {e}",
        ) from e


@app.get(
    "/recipes/custom",
    response_model=List[Recipe],
    tags=["recipes"],
    summary="List custom recipes, newest first",
)
def list_custom(
    q: Optional[str] = Query(None, description="Only recipes whose title contains this text"),
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> List[Recipe]:
    try:
        return list_custom_recipes(orchestrator.store, q)
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Recipe cache unavailable: {e}",
        ) from e


@app.put(
    "/recipes/custom/{recipe_id}",
    response_model=Recipe,
    tags=["recipes"],
    summary="Update a custom recipe",
)
def update_custom(
    recipe_id: str,
    payload: CustomRecipeInput,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> Recipe:
    """
    Replace a custom recipe's content, keeping its id.

    Raises:
        HTTPException 404: If no custom recipe has this id
        HTTPException 503: If the recipe could not be saved
    """
    try:
        recipe = update_custom_recipe(recipe_id, payload, orchestrator.store)
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not save recipe: {e}",
        ) from e
    if recipe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Custom recipe {recipe_id} not found")
    return recipe


@app.delete(
    "/recipes/custom/{recipe_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["recipes"],
    summary="Delete a custom recipe",
)
def delete_custom(
    recipe_id: str,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> Response:
    try:
        deleted = delete_custom_recipe(recipe_id, orchestrator.store)
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not delete recipe: {e}",
        ) from e
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Custom recipe {recipe_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get(
    "/recipes/{recipe_id}",
    response_model=Recipe,
    tags=["recipes"],
    summary="Get full recipe details",
)
def recipe_details(
    recipe_id: str,
    cache_service: RecipeCacheService = Depends(get_cache_service),
) -> Recipe:
    """
    Get a recipe with ingredients and instructions, from the cache when complete.

    Raises:
        HTTPException 404: If the recipe is unknown to both the cache and the provider
        HTTPException 503: If the cache cannot be read
    """
    try:
        recipe = cache_service.get_recipe_details(parse_recipe_id(recipe_id))
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Recipe cache unavailable: {e}",
        ) from e
    if recipe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Recipe {recipe_id} not found")
    return recipe


@app.get("/cache/stats", response_model=CacheStats, tags=["cache"])
def cache_stats(cache_service: RecipeCacheService = Depends(get_cache_service)) -> CacheStats:
    try:
        return cache_service.cache_stats()
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Recipe cache unavailable: {e}",
        ) from e


@app.post("/cache/fill", response_model=CacheFillResponse, tags=["cache"])
def cache_fill(
    limit: int = Query(DEFAULT_FILL_LIMIT, ge=1, le=100, description="Maximum recipes to fill"),
    cache_service: RecipeCacheService = Depends(get_cache_service),
) -> CacheFillResponse:
    """Fetch full details for cached recipes that only have basic information."""
    try:
        filled = cache_service.fill_missing_details(limit=limit)
        remaining = len(cache_service.recipes_needing_details())
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Recipe cache unavailable: {e}",
        ) from e
    return CacheFillResponse(filled=filled, remaining=remaining)


@app.get("/health", response_model=HealthResponse, tags=["health"])
def health() -> HealthResponse:
    """
    Health check endpoint for monitoring and status checks.

    Always returns 200 OK if the endpoint is reachable.
    """
    env_status = get_required_env_vars()
    return HealthResponse(
        status="ok",
        name=APP_NAME,
        version=APP_VERSION,
        uptime_seconds=int(time.time() - _APP_START_TIME),
        db_enabled=env_status["database_url"],
        provider_configured=env_status["spoonacular_api_key"],
    )


@app.get("/")
def root():
    """
    Root endpoint providing API information.

    Returns:
        Dictionary with API name and version
    """
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "description": "Recipe search backed by Spoonacular, with a local cache fallback",
        "docs": "/docs",
    }
