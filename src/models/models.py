"""Data models and schemas for the recipe search engine.

Defines Pydantic models for provider payloads, search outcomes and the
accumulated result state. All models use Pydantic v2.
"""

from enum import Enum
from typing import Annotated, Any, List, Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchMode(str, Enum):
    """Search strategy derived from the query text."""

    KEYWORD = "keyword"
    NATURAL_LANGUAGE = "natural-language"


class ErrorKind(str, Enum):
    """Closed taxonomy of search failures shown to the user."""

    QUOTA_EXCEEDED = "quota-exceeded"
    AI_SEARCH_UNAVAILABLE = "ai-search-unavailable"
    GENERIC_SEARCH_FAILURE = "generic-search-failure"


class Recipe(BaseModel):
    """A recipe returned by a search provider.

    Identity is the Spoonacular recipe id. Display fields are optional because
    keyword search, natural-language search and favourites return different
    subsets; unknown provider fields are kept as extras.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True, extra="allow", frozen=True)

    id: Annotated[int, Field(description="Recipe ID from Spoonacular API")]
    title: Annotated[str, Field(max_length=300, description="Recipe name or title")] = ""
    image: Annotated[Optional[str], Field(description="URL to recipe image")] = None
    ready_in_minutes: Annotated[
        Optional[int],
        Field(ge=0, alias="readyInMinutes", description="Total time (prep + cook) in minutes"),
    ] = None
    servings: Annotated[Optional[int], Field(ge=0, description="Number of servings")] = None
    source_url: Annotated[Optional[str], Field(alias="sourceUrl", description="URL to original recipe")] = None
    summary: Annotated[Optional[str], Field(description="Short HTML summary from Spoonacular")] = None


class SearchSuccess(BaseModel):
    """A provider call that returned results."""

    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    items: List[Recipe] = Field(default_factory=list, description="Recipes in provider order")
    total_results: Annotated[int, Field(ge=0, description="Total matches reported by the provider")] = 0
    ai_optimized: Annotated[bool, Field(description="True for natural-language (single batch) results")] = False
    api_limit_reached: Annotated[bool, Field(description="Provider reported that all API keys are spent")] = False
    message: Annotated[Optional[str], Field(description="Informational message from the provider")] = None


class SearchFailure(BaseModel):
    """A provider call that failed, already classified."""

    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    kind: ErrorKind
    message: Annotated[str, Field(description="User-facing notification text")]
    detail: Annotated[Optional[str], Field(description="Raw error message, for logs")] = None

    @property
    def items(self) -> list[Recipe]:
        return []

    @property
    def ai_optimized(self) -> bool:
        return False


SearchOutcome = Annotated[Union[SearchSuccess, SearchFailure], Field(discriminator="status")]


class AccumulatedState(BaseModel):
    """Immutable snapshot of the current accumulation epoch."""

    model_config = ConfigDict(frozen=True)

    items: tuple[Recipe, ...] = ()
    query: str = ""
    filters: dict[str, Any] = Field(default_factory=dict)
    last_page: int = 0
    total_results: int = 0
    ai_optimized: bool = False
    api_limit_reached: bool = False
    error: Optional[SearchFailure] = None

    @property
    def has_more(self) -> bool:
        """Whether a "load more" request can return further keyword pages."""
        return not self.ai_optimized and self.total_results > len(self.items)


class FavoriteAnnotation(NamedTuple):
    recipe: Recipe
    is_favorite: bool


class ExtractedSearchParams(BaseModel):
    """Structured complexSearch parameters extracted by Gemini from a sentence.

    Field aliases are the Spoonacular query parameter names, so
    ``model_dump(by_alias=True, exclude_none=True)`` yields request params.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True, extra="ignore")

    query: Annotated[Optional[str], Field(max_length=200, description="Core dish keywords")] = None
    diet: Optional[str] = None
    cuisine: Optional[str] = None
    meal_type: Annotated[Optional[str], Field(alias="type")] = None
    max_ready_time: Annotated[Optional[int], Field(ge=1, le=1440, alias="maxReadyTime")] = None
    include_ingredients: Annotated[Optional[str], Field(alias="includeIngredients")] = None
    exclude_ingredients: Annotated[Optional[str], Field(alias="excludeIngredients")] = None
    intolerances: Optional[str] = None
    min_calories: Annotated[Optional[int], Field(ge=0, alias="minCalories")] = None
    max_calories: Annotated[Optional[int], Field(ge=0, alias="maxCalories")] = None
    min_protein: Annotated[Optional[int], Field(ge=0, alias="minProtein")] = None
    max_protein: Annotated[Optional[int], Field(ge=0, alias="maxProtein")] = None

    @field_validator(
        "include_ingredients", "exclude_ingredients", "intolerances", "diet", "cuisine", mode="before"
    )
    @classmethod
    def join_lists(cls, value: Any) -> Any:
        """Gemini sometimes answers with JSON arrays; Spoonacular wants comma-separated strings."""
        if isinstance(value, list):
            return ", ".join(str(item).strip() for item in value if str(item).strip()) or None
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_params(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
