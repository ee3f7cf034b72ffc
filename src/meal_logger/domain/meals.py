"""Domain models for meal processing."""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

from meal_logger.domain.nutrition import Nutrition


@dataclass(frozen=True)
class ParsedItem:
    """Single food item extracted from a meal description."""

    name: str
    quantity: float

    @property
    def source_text(self) -> str:
        """Render the item the way it is echoed back in errors."""
        return f"{self.name} {self.quantity:g}"


@dataclass(frozen=True)
class EntryRecord:
    """Stored consumption entry."""

    id: UUID
    user_id: UUID
    product_id: UUID
    quantity: float
    consumed_date: date


@dataclass(frozen=True)
class EntryResult:
    """Entry shaped for responses, with quantity-scaled nutrition."""

    entry_id: UUID
    product_id: UUID
    name: str
    quantity: float
    nutrition: Nutrition
    consumed_date: date


@dataclass(frozen=True)
class ItemError:
    """Failure for one item, or for the whole text."""

    source_text: str
    message: str


@dataclass(frozen=True)
class ProcessResult:
    """Aggregated outcome of processing one meal description."""

    successes: list[EntryResult] = field(default_factory=list)
    errors: list[ItemError] = field(default_factory=list)
