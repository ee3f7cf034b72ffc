"""Models for structured LLM completions."""

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported by the completion API."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class OutputSchema(Generic[T]):
    """JSON schema sent to the model plus the model that validates its output."""

    name: str
    json_schema: dict[str, object]
    model: type[T]


@dataclass(frozen=True)
class Completion(Generic[T]):
    """Validated completion content with response metadata."""

    content: T
    model: str
    usage: TokenUsage


class ParsedMealItem(BaseModel):
    """Food item as returned by the meal parsing prompt."""

    model_config = ConfigDict(extra="forbid")

    name: str
    quantity: float = Field(allow_inf_nan=False)


class ParsedMeal(BaseModel):
    """Structured output for meal parsing."""

    model_config = ConfigDict(extra="forbid")

    items: list[ParsedMealItem]


class NutritionEstimate(BaseModel):
    """Structured output for a product nutrition lookup."""

    model_config = ConfigDict(extra="forbid")

    nutrition_basis: Literal["100g", "100ml", "unit"] = Field(alias="nutritionBasis")
    calories: float
    protein: float
    fat: float
    carbs: float
