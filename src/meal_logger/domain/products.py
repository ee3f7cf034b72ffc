"""Domain models for the product cache."""

from dataclasses import dataclass
from uuid import UUID

from meal_logger.domain.nutrition import NutritionProfile


@dataclass(frozen=True)
class Product:
    """Cached product keyed by its normalized name."""

    id: UUID
    name: str
    profile: NutritionProfile


@dataclass(frozen=True)
class ResolutionFailure:
    """A product name that could not be resolved to a profile."""

    name: str
    message: str


def normalize_name(name: str) -> str:
    """Return the cache key for a product name."""
    return name.strip().lower()
