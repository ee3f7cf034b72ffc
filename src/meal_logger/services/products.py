"""Product cache resolution with LLM enrichment on misses."""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Protocol

from meal_logger.domain.completions import NutritionEstimate, OutputSchema
from meal_logger.domain.nutrition import NutritionBasis, NutritionProfile
from meal_logger.domain.products import Product, ResolutionFailure, normalize_name
from meal_logger.services.completion import CompletionError, StructuredCompletionClient

NUTRITION_ESTIMATE_SCHEMA: OutputSchema[NutritionEstimate] = OutputSchema(
    name="nutrition_estimate",
    json_schema={
        "type": "object",
        "properties": {
            "nutritionBasis": {
                "type": "string",
                "enum": [basis.value for basis in NutritionBasis],
                "description": "Basis for nutrition values",
            },
            "calories": {"type": "number", "description": "Calories per basis"},
            "protein": {"type": "number", "description": "Protein in grams"},
            "fat": {"type": "number", "description": "Fat in grams"},
            "carbs": {"type": "number", "description": "Carbohydrates in grams"},
        },
        "required": ["nutritionBasis", "calories", "protein", "fat", "carbs"],
        "additionalProperties": False,
    },
    model=NutritionEstimate,
)

_SYSTEM_PROMPT = """You are a nutrition expert. Provide accurate nutritional \
information for food items.

Guidelines:
- Return realistic values based on standard USDA nutrition database data
- Use "100g" as basis for solids, "100ml" for liquids, "unit" for individual \
items (eggs, etc.)
- Include calories (per basis), protein, fat, and carbohydrates in grams
- Return ONLY valid JSON with no additional text

Example: {"nutritionBasis": "100g", "calories": 165, "protein": 31, "fat": 3.6, \
"carbs": 0}"""

_logger = logging.getLogger(__name__)


class DuplicateProductError(Exception):
    """Raised when a product with the same normalized name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Product already exists: {name}")
        self.name = name


class ProductRepository(Protocol):
    """Persistence interface for cached products."""

    def find_by_names(self, names: list[str]) -> list[Product]:
        """Return the products whose names are in ``names``."""

    def find_by_name(self, name: str) -> Product | None:
        """Return a product by exact normalized name."""

    def create_product(self, name: str, profile: NutritionProfile) -> Product:
        """Insert a product, raising DuplicateProductError on a name clash."""


@dataclass
class ProductResolver:
    """Read-through product cache that writes back LLM nutrition estimates."""

    repository: ProductRepository
    completion_client: StructuredCompletionClient
    max_tokens: int = 300
    temperature: float = 0.2

    async def resolve_batch(self, normalized_names: set[str]) -> dict[str, Product]:
        """Return the cached products for the given names in one lookup."""
        if not normalized_names:
            return {}
        products = await asyncio.to_thread(
            self.repository.find_by_names, sorted(normalized_names)
        )
        resolved: dict[str, Product] = {}
        for product in products:
            key = normalize_name(product.name)
            if key in normalized_names:
                resolved[key] = product
        return resolved

    async def resolve_or_create(
        self, normalized_name: str, original_name: str
    ) -> Product | ResolutionFailure:
        """Return the cached product, creating it from an LLM estimate if missing."""
        existing = await asyncio.to_thread(
            self.repository.find_by_name, normalized_name
        )
        if existing is not None:
            return existing

        try:
            completion = await self.completion_client.complete(
                prompt=f'Provide nutrition data for "{original_name}".',
                schema=NUTRITION_ESTIMATE_SCHEMA,
                system_prompt=_SYSTEM_PROMPT,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except CompletionError as exc:
            _logger.warning(
                "Nutrition lookup failed for %s: %s", normalized_name, exc
            )
            return ResolutionFailure(
                name=normalized_name,
                message=f'Failed to fetch nutrition data for "{original_name}": {exc}',
            )

        profile = _to_profile(completion.content)
        if isinstance(profile, str):
            return ResolutionFailure(
                name=normalized_name,
                message=f'Invalid nutrition data for "{original_name}": {profile}',
            )

        try:
            created = await asyncio.to_thread(
                self.repository.create_product, normalized_name, profile
            )
        except DuplicateProductError:
            _logger.info("Product %s was created concurrently", normalized_name)
            existing = await asyncio.to_thread(
                self.repository.find_by_name, normalized_name
            )
            if existing is None:
                raise
            return existing
        _logger.info("Cached new product %s", normalized_name)
        return created


def _to_profile(estimate: NutritionEstimate) -> NutritionProfile | str:
    """Build a profile, or describe why the estimate is unusable."""
    values = {
        "calories": estimate.calories,
        "protein": estimate.protein,
        "fat": estimate.fat,
        "carbs": estimate.carbs,
    }
    for field_name, value in values.items():
        if not math.isfinite(value) or value < 0:
            return f"{field_name} must be a non-negative number"
    return NutritionProfile(
        basis=NutritionBasis(estimate.nutrition_basis), **values
    )
