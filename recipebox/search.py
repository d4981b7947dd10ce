"""
Recipe search with cache fallback.

This module provides SearchOrchestrator, the single entry point the UI layer
uses to search recipes. For every search it:
- Validates the query and limit synchronously (ValidationError, before any I/O)
- Calls the remote recipe provider
- On success, returns the provider's recipes tagged "live" and writes them
  through to the local store on a background worker (never awaited)
- On provider failure, falls back to the local store and returns "cached"
  recipes, or an "empty" result with an explanatory message

Apart from the upfront validation, search() never raises: transport and
store failures are converted into a SearchResult.

Search flow: UI -> GET /search -> SearchOrchestrator.search() -> provider.search_by_keyword() -> SearchResult
                                                        \\-> (failure) store.find_by_title_substring()
"""

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from typing import List, Optional, Sequence, Set, Union

from recipebox.errors import ProviderError, StoreError, ValidationError
from recipebox.models import (
    IngredientQuery,
    KeywordQuery,
    Provenance,
    Recipe,
    SearchQuery,
    SearchResult,
)
from recipebox.providers.base import BaseRecipeProvider
from recipebox.store import LocalRecipeStore

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20

NO_RESULTS_MESSAGE = "No recipes found. Try a different search term."
CACHED_RESULTS_MESSAGE = "Showing cached results"
UNAVAILABLE_MESSAGE = "Recipes are unavailable right now. Please try again later."
NO_CACHED_RECIPES_MESSAGE = "No cached recipes available yet."

QueryInput = Union[str, Sequence[str], KeywordQuery, IngredientQuery]


def parse_query(query: QueryInput) -> SearchQuery:
    """
    Normalize caller input into a KeywordQuery or IngredientQuery.

    A string is a keyword query; any other sequence is a list of ingredient
    names. Keywords are trimmed; ingredient names are trimmed and blank names
    dropped.

    Raises:
        ValidationError: If the keyword is empty/whitespace, or no ingredient
            names remain

    Examples:
        >>> parse_query("  pasta ")
        KeywordQuery(text='pasta')
        >>> parse_query(["tomato", " ", "basil"])
        IngredientQuery(names=('tomato', 'basil'))
    """
    if isinstance(query, KeywordQuery):
        query = query.text
    elif isinstance(query, IngredientQuery):
        query = query.names

    if isinstance(query, str):
        text = query.strip()
        if not text:
            raise ValidationError("Search text must not be empty.")
        return KeywordQuery(text=text)

    if query is None:
        raise ValidationError("A search query is required.")

    try:
        names = tuple(str(n).strip() for n in query if n is not None and str(n).strip())
    except TypeError as e:
        raise ValidationError(f"Unsupported query type: {type(query).__name__}") from e
    if not names:
        raise ValidationError("Provide at least one ingredient.")
    return IngredientQuery(names=names)


class SearchOrchestrator:
    """
    Coordinates a remote recipe provider and a local recipe store.

    The provider and store are passed in explicitly. Write-through upserts
    run on an executor owned by the orchestrator (or supplied by the caller);
    call close() (or use the orchestrator as a context manager) to wait for
    outstanding writes and release it.
    """

    def __init__(
        self,
        provider: BaseRecipeProvider,
        store: LocalRecipeStore,
        *,
        executor: Optional[Executor] = None,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        self.provider = provider
        self.store = store
        self.default_limit = default_limit
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="recipe-write-through")
        self._pending: Set[Future] = set()
        self._pending_lock = threading.Lock()

    def __enter__(self) -> "SearchOrchestrator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def search(self, query: QueryInput, limit: Optional[int] = None) -> SearchResult:
        """
        Search recipes, preferring the live provider and falling back to the cache.

        Args:
            query: Keyword string, list of ingredient names, KeywordQuery or IngredientQuery
            limit: Maximum number of recipes (default: default_limit, max: provider.max_results)

        Returns:
            SearchResult with provenance:
            - "live": provider answered (possibly with zero recipes)
            - "cached": provider failed, recipes came from the local store
            - "empty": provider failed and the store had nothing (or failed too)

        Raises:
            ValidationError: If the query or limit is invalid. No I/O happens in that case.
        """
        parsed = parse_query(query)
        limit = self._validate_limit(limit)

        logger.info("Search request: query=%r limit=%d", parsed, limit)

        try:
            if isinstance(parsed, KeywordQuery):
                recipes = list(self.provider.search_by_keyword(parsed.text, limit))
            else:
                recipes = list(self.provider.search_by_ingredients(list(parsed.names), limit))
        except ProviderError as e:
            logger.warning("Provider %s failed for %r, falling back to cache: %s",
                           getattr(self.provider, "name", "?"), parsed, e)
            return self._fallback(parsed, limit)
        except Exception as e:
            logger.error("Unexpected provider error for %r, falling back to cache: %s",
                         parsed, e, exc_info=True)
            return self._fallback(parsed, limit)

        logger.info("Provider returned %d recipes for %r", len(recipes), parsed)
        self._schedule_write_through(recipes)
        return SearchResult(recipes=recipes, provenance=Provenance.LIVE)

    def search_by_keyword(self, text: str, limit: Optional[int] = None) -> SearchResult:
        return self.search(KeywordQuery(text=text), limit)

    def search_by_ingredients(self, names: Sequence[str], limit: Optional[int] = None) -> SearchResult:
        return self.search(IngredientQuery(names=tuple(names)), limit)

    def trending(self, limit: Optional[int] = None) -> SearchResult:
        """
        Return random recipes from the provider, or the most recently cached ones.

        Follows the same live/cached/empty contract as search().
        """
        limit = self._validate_limit(limit)
        try:
            recipes = list(self.provider.random_recipes(limit))
        except Exception as e:
            logger.warning("Trending recipes unavailable from provider, loading from cache: %s", e)
            try:
                cached = self.store.list_recent(limit)
            except Exception as store_error:
                logger.error("Cache read failed for trending recipes: %s", store_error, exc_info=True)
                return SearchResult(provenance=Provenance.EMPTY, message=UNAVAILABLE_MESSAGE)
            if not cached:
                return SearchResult(provenance=Provenance.EMPTY, message=NO_CACHED_RECIPES_MESSAGE)
            return SearchResult(recipes=cached, provenance=Provenance.CACHED, message=CACHED_RESULTS_MESSAGE)

        self._schedule_write_through(recipes)
        return SearchResult(recipes=recipes, provenance=Provenance.LIVE)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for outstanding write-through tasks.

        Returns:
            True if every pending write finished within the timeout
        """
        with self._pending_lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self) -> None:
        """Wait for pending writes and shut down the owned executor."""
        self.flush()
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def _validate_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            limit = self.default_limit
        max_results = getattr(self.provider, "max_results", None)
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError(f"limit must be a positive integer, got {limit!r}")
        if max_results is not None and limit > max_results:
            raise ValidationError(f"limit must be at most {max_results}, got {limit}")
        return limit

    def _fallback(self, query: SearchQuery, limit: int) -> SearchResult:
        try:
            if isinstance(query, KeywordQuery):
                recipes = self.store.find_by_title_substring(query.text, limit)
            else:
                recipes = self.store.find_by_ingredients(list(query.names), limit)
        except StoreError as e:
            logger.error("Cache fallback failed for %r: %s", query, e)
            return SearchResult(provenance=Provenance.EMPTY, message=UNAVAILABLE_MESSAGE)
        except Exception as e:
            logger.error("Unexpected error in cache fallback for %r: %s", query, e, exc_info=True)
            return SearchResult(provenance=Provenance.EMPTY, message=UNAVAILABLE_MESSAGE)

        if not recipes:
            logger.info("Cache fallback found no recipes for %r", query)
            return SearchResult(provenance=Provenance.EMPTY, message=NO_RESULTS_MESSAGE)

        logger.info("Cache fallback returned %d recipes for %r", len(recipes), query)
        return SearchResult(recipes=list(recipes), provenance=Provenance.CACHED, message=CACHED_RESULTS_MESSAGE)

    def _schedule_write_through(self, recipes: List[Recipe]) -> None:
        if not recipes:
            return
        batch = list(recipes)
        try:
            future = self._executor.submit(self._write_through, batch)
        except RuntimeError as e:
            # Executor already shut down
            logger.warning("Could not schedule cache write for %d recipes: %s", len(batch), e)
            return
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._discard_pending)

    def _discard_pending(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _write_through(self, recipes: List[Recipe]) -> None:
        # Failures never reach the caller; the batch is dropped
        try:
            self.store.upsert_many(recipes)
            logger.debug("Cached %d recipes", len(recipes))
        except Exception as e:
            logger.warning("Failed to cache %d recipes: %s", len(recipes), e, exc_info=True)
