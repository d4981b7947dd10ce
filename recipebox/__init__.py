"""
RecipeBox: recipe search with a local cache fallback.

This package contains:
- models: Recipe, SearchResult and query types
- errors: ValidationError, ProviderError, StoreError
- search: SearchOrchestrator (remote first, cache fallback, write-through)
- store / db: LocalRecipeStore implementations (in-memory and SQLAlchemy)
- providers: remote recipe providers (Spoonacular)
- cache: cache-first recipe details and cache maintenance
- custom: user-authored recipes
"""
