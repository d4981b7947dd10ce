"""
Recipe and search models for the recipebox system.

This module defines the canonical recipe schema used throughout recipebox.
Providers map their raw payloads into Recipe via Recipe.from_api(); the local
store persists Recipe as a JSON document and rebuilds it with
Recipe.model_validate_json().

# NOTE: Recipe ids live in two namespaces that cannot collide:
    - provider recipes use the provider's integer id (e.g. 716429)
    - custom (user-authored) recipes use a generated UUID4 string
    Store keys are always str(recipe.id).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from recipebox.utils.instructions import number_steps, split_instruction_text

RecipeId = Union[int, str]

SOURCE_SPOONACULAR = "spoonacular"
SOURCE_CUSTOM = "custom"

UNKNOWN_TITLE = "Unknown Recipe"


class Ingredient(BaseModel):
    """One ingredient line of a recipe."""
    original: str = Field("", description="Free-text ingredient line (e.g. '2 cups of flour')")
    name: Optional[str] = Field(None, description="Structured ingredient name (e.g. 'flour')")
    amount: Optional[float] = Field(None, ge=0, description="Structured amount (e.g. 2.0)")
    unit: Optional[str] = Field(None, description="Structured unit (e.g. 'cups')")

    model_config = ConfigDict(frozen=True)

    @property
    def search_text(self) -> str:
        """Lower-cased text used when matching ingredient queries."""
        return " ".join(part for part in (self.original, self.name or "") if part).lower()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Ingredient":
        amount = data.get("amount")
        try:
            amount = float(amount) if amount is not None else None
        except (TypeError, ValueError):
            amount = None
        if amount is not None and amount < 0:
            amount = None
        return cls(
            original=str(data.get("original") or data.get("originalString") or data.get("name") or ""),
            name=data.get("name") or None,
            amount=amount,
            unit=data.get("unit") or None,
        )


class InstructionStep(BaseModel):
    """A single numbered instruction step."""
    number: int = Field(..., ge=1, description="Step number, starting at 1")
    step: str = Field(..., min_length=1, description="Step text")

    model_config = ConfigDict(frozen=True)


class Recipe(BaseModel):
    """
    Canonical recipe model.

    A Recipe is built either from a provider response (Recipe.from_api) or
    from user input (recipebox.custom). It is never mutated after creation;
    re-fetching a recipe with the same id replaces the cached copy.
    """
    id: RecipeId = Field(..., description="Provider integer id or UUID string for custom recipes")
    title: str = Field(..., min_length=1, description="Recipe title")
    image_url: Optional[str] = Field(None, alias="imageUrl", description="URL to recipe image")
    ready_in_minutes: Optional[int] = Field(None, gt=0, alias="readyInMinutes", description="Total time in minutes")
    servings: Optional[int] = Field(None, gt=0, description="Number of servings")
    summary: Optional[str] = Field(None, description="Short description, may contain HTML")
    ingredients: Tuple[Ingredient, ...] = Field(default=(), description="Ingredient lines in recipe order")
    instructions: Tuple[InstructionStep, ...] = Field(default=(), description="Steps ordered by number")

    # Dietary flags
    vegetarian: bool = False
    vegan: bool = False
    gluten_free: bool = Field(False, alias="glutenFree")
    dairy_free: bool = Field(False, alias="dairyFree")

    source: str = Field(SOURCE_SPOONACULAR, description="Where the recipe came from: 'spoonacular' or 'custom'")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @field_validator("instructions")
    @classmethod
    def _steps_strictly_increasing(cls, steps: Tuple[InstructionStep, ...]) -> Tuple[InstructionStep, ...]:
        previous = 0
        for step in steps:
            if step.number <= previous:
                raise ValueError(
                    f"instruction numbers must be strictly increasing (got {step.number} after {previous})"
                )
            previous = step.number
        return steps

    @property
    def key(self) -> str:
        """Store key for this recipe."""
        return str(self.id)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_full_details(self) -> bool:
        """True when both ingredients and instructions are present."""
        return bool(self.ingredients) and bool(self.instructions)

    @property
    def ingredient_text(self) -> str:
        """All ingredient lines joined and lower-cased, for substring matching."""
        return "\n".join(i.search_text for i in self.ingredients)

    def matches_title(self, text: str) -> bool:
        return text.lower() in self.title.lower()

    def matches_any_ingredient(self, names: List[str]) -> bool:
        haystack = self.ingredient_text
        return any(name.lower() in haystack for name in names)

    @classmethod
    def from_api(cls, data: Dict[str, Any], *, source: str = SOURCE_SPOONACULAR) -> "Recipe":
        """
        Build a Recipe from a provider payload.

        Handles the shapes returned by the different Spoonacular endpoints:
        - complexSearch / information / random: ``extendedIngredients`` and
          ``analyzedInstructions`` (a list of sections, each with ``steps``)
        - findByIngredients: ``usedIngredients`` + ``missedIngredients``
        - cached documents: ``ingredients`` and ``instructions`` lists
        - ``instructions`` given as an HTML string

        Instruction sections are flattened in order and renumbered from 1.

        Raises:
            KeyError: If the payload has no id
            pydantic.ValidationError: If the payload cannot form a valid Recipe
        """
        if isinstance(data.get("extendedIngredients"), list):
            raw_ingredients = data["extendedIngredients"]
        elif isinstance(data.get("ingredients"), list):
            raw_ingredients = data["ingredients"]
        else:
            raw_ingredients = list(data.get("usedIngredients") or []) + list(data.get("missedIngredients") or [])
        ingredients = [Ingredient.from_api(i) for i in raw_ingredients if isinstance(i, dict)]

        step_texts: List[str] = []
        analyzed = data.get("analyzedInstructions")
        raw_instructions = data.get("instructions")
        if isinstance(analyzed, list) and analyzed:
            for section in analyzed:
                if isinstance(section, dict):
                    step_texts.extend(str(s.get("step") or "") for s in section.get("steps") or [] if isinstance(s, dict))
        elif isinstance(raw_instructions, list):
            ordered = sorted(
                (s for s in raw_instructions if isinstance(s, dict)),
                key=lambda s: s.get("number") or 0,
            )
            step_texts.extend(str(s.get("step") or "") for s in ordered)
        elif isinstance(raw_instructions, str):
            step_texts.extend(split_instruction_text(raw_instructions))

        return cls(
            id=data["id"],
            title=str(data.get("title") or "").strip() or UNKNOWN_TITLE,
            image_url=data.get("image") or data.get("imageUrl") or data.get("image_url"),
            ready_in_minutes=_positive_or_none(data.get("readyInMinutes")),
            servings=_positive_or_none(data.get("servings")),
            summary=data.get("summary"),
            ingredients=ingredients,
            instructions=number_steps(step_texts),
            vegetarian=bool(data.get("vegetarian", False)),
            vegan=bool(data.get("vegan", False)),
            gluten_free=bool(data.get("glutenFree", False)),
            dairy_free=bool(data.get("dairyFree", False)),
            source=source,
        )


def _positive_or_none(value: Any) -> Optional[int]:
    try:
        value = int(value)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


class Provenance(str, Enum):
    """Where a search result came from."""
    LIVE = "live"
    CACHED = "cached"
    EMPTY = "empty"


class SearchResult(BaseModel):
    """Outcome of a single search call."""
    recipes: List[Recipe] = Field(default_factory=list, description="Recipes in relevance order")
    provenance: Provenance = Field(..., description="live, cached or empty")
    message: Optional[str] = Field(None, description="Human-readable explanation for the UI")

    model_config = ConfigDict(frozen=True)

    @property
    def is_offline(self) -> bool:
        """True when the UI should show an offline/cached indicator."""
        return self.provenance is not Provenance.LIVE


@dataclass(frozen=True)
class KeywordQuery:
    """Free-text keyword search."""
    text: str


@dataclass(frozen=True)
class IngredientQuery:
    """Search by a list of ingredient names."""
    names: Tuple[str, ...]


SearchQuery = Union[KeywordQuery, IngredientQuery]


class CacheStats(BaseModel):
    """Summary of how complete the local recipe cache is."""
    total: int = 0
    with_details: int = 0
    basic_only: int = 0
    cache_percentage: int = Field(0, ge=0, le=100)


class CustomRecipeInput(BaseModel):
    """User-provided fields for a new custom recipe."""
    title: str = Field(..., min_length=1)
    image_url: Optional[str] = Field(None, alias="imageUrl")
    ready_in_minutes: Optional[int] = Field(None, gt=0, alias="readyInMinutes")
    servings: Optional[int] = Field(None, gt=0)
    summary: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list, description="Ingredient lines, one per entry")
    instructions: List[str] = Field(default_factory=list, description="Instruction texts in order")
    vegetarian: bool = False
    vegan: bool = False
    gluten_free: bool = Field(False, alias="glutenFree")
    dairy_free: bool = Field(False, alias="dairyFree")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Grandma's Tomato Soup",
                "servings": 4,
                "readyInMinutes": 45,
                "ingredients": ["6 ripe tomatoes", "1 onion", "500 ml vegetable stock"],
                "instructions": ["Chop the vegetables.", "Simmer 30 minutes.", "Blend until smooth."],
                "vegetarian": True,
            }
        },
    )

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value
