"""Nutrition domain models."""

from dataclasses import dataclass
from enum import Enum


class NutritionBasis(str, Enum):
    """Unit that per-basis nutrition values refer to."""

    PER_100_MASS = "100g"
    PER_100_VOLUME = "100ml"
    PER_UNIT = "unit"


@dataclass(frozen=True)
class NutritionProfile:
    """Per-basis nutrition values for a product."""

    basis: NutritionBasis
    calories: float
    protein: float
    fat: float
    carbs: float


@dataclass(frozen=True)
class Nutrition:
    """Absolute nutrition values for a consumed quantity."""

    calories: float
    protein: float
    fat: float
    carbs: float
