"""
Pydantic schemas for FastAPI request and response models.

The schemas include:
- SearchResponse: recipes plus provenance ("live", "cached", "empty") and a message
- HealthResponse: status and store information
- CacheFillResponse: outcome of a cache maintenance run

# NOTE: Recipe, CacheStats and CustomRecipeInput are reused from recipebox.models.
    FastAPI serializes them by alias (imageUrl, readyInMinutes, glutenFree, dairyFree).
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from recipebox.models import Provenance, Recipe, SearchResult


class SearchResponse(BaseModel):
    """
    Response model for the search endpoints.

    The UI uses provenance to show an offline/cached indicator and message
    to explain empty results.
    """
    recipes: List[Recipe] = Field(default_factory=list, description="Recipes in relevance order")
    provenance: Provenance = Field(..., description="'live', 'cached' or 'empty'")
    message: Optional[str] = Field(None, description="Human-readable explanation, if any")
    count: int = Field(0, ge=0, description="Number of recipes returned")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "recipes": [
                    {
                        "id": 654959,
                        "title": "Pasta With Tuna",
                        "imageUrl": "https://img.spoonacular.com/recipes/654959-312x231.jpg",
                        "readyInMinutes": 45,
                        "servings": 4,
                        "ingredients": [{"original": "1 lb pasta", "name": "pasta", "amount": 1.0, "unit": "lb"}],
                        "instructions": [{"number": 1, "step": "Cook pasta until al dente."}],
                        "vegetarian": False,
                        "source": "spoonacular",
                    }
                ],
                "provenance": "live",
                "message": None,
                "count": 1,
            }
        }
    )

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResponse":
        return cls(
            recipes=result.recipes,
            provenance=result.provenance,
            message=result.message,
            count=len(result.recipes),
        )


class HealthResponse(BaseModel):
    """Response model for the health endpoint."""
    status: str = "ok"
    name: str
    version: str
    uptime_seconds: int = Field(0, ge=0)
    db_enabled: bool = False
    provider_configured: bool = False


class CacheFillResponse(BaseModel):
    """Response model for a cache detail-fill run."""
    filled: int = Field(0, ge=0, description="Recipes whose full details were cached")
    remaining: int = Field(0, ge=0, description="Cached recipes still missing details")
