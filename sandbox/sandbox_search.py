"""
Sandbox script for trying recipe search against the live Spoonacular API.

Runs the same keyword search twice: once live (which writes the results to the
cache) and once with a provider that always fails, to show the cached fallback.

Prerequisites:
- SPOONACULAR_API_KEY must be set in .env file
- Optional: DATABASE_URL to use a database cache instead of memory

Run:
    python -m sandbox.sandbox_search [query]
"""

import sys
from pprint import pprint

from api.config import validate_required_config

from recipebox.errors import ProviderError
from recipebox.providers.spoonacular_provider import SpoonacularProvider
from recipebox.search import SearchOrchestrator
from recipebox.store import InMemoryRecipeStore


class _OfflineProvider(SpoonacularProvider):
    """Spoonacular provider that behaves as if the network were down."""

    def _get(self, path, params):
        raise ProviderError(f"offline sandbox: {path}")


def _print_result(label, result):
    print(f"\n=== {label}: provenance={result.provenance.value} ({len(result.recipes)} recipes) ===")
    if result.message:
        print(f"Message: {result.message}")
    for i, recipe in enumerate(result.recipes, 1):
        minutes = f"{recipe.ready_in_minutes} min" if recipe.ready_in_minutes else "?"
        print(f"{i:2d}. [{recipe.id}] {recipe.title} ({minutes}, {len(recipe.ingredients)} ingredients)")


def run(query: str = "pasta"):
    """Search live, then search again with the provider offline."""
    try:
        validate_required_config()
    except RuntimeError as e:
        print(f"\n❌ {e}")
        return

    store = InMemoryRecipeStore()
    print("=" * 80)
    print(f"Recipe search sandbox - query: '{query}'")
    print("=" * 80)

    with SearchOrchestrator(SpoonacularProvider(), store) as live:
        result = live.search(query, 5)
        _print_result("Live search", result)
        live.flush(timeout=10)

    print(f"\nCached recipes after write-through: {store.count()}")

    with SearchOrchestrator(_OfflineProvider(api_key="offline"), store) as offline:
        _print_result("Offline search", offline.search(query, 5))
        _print_result("Offline search (no match)", offline.search("xyzzy", 5))

    if result.recipes:
        print("\n=== Full Details (First Recipe) ===")
        pprint(result.recipes[0].model_dump(by_alias=True))


if __name__ == "__main__":
    run(sys.argv[1] if len(sys.argv) > 1 else "pasta")
