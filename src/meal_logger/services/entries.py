"""Consumption entry persistence and retrieval."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from meal_logger.domain.meals import EntryRecord, EntryResult
from meal_logger.domain.nutrition import Nutrition, NutritionBasis, NutritionProfile
from meal_logger.domain.products import Product


class EntryRepository(Protocol):
    """Persistence interface for consumption entries."""

    def create_entry(
        self, user_id: UUID, product_id: UUID, quantity: float, consumed_date: date
    ) -> EntryRecord:
        """Insert an entry and return the stored row."""

    def list_entries(
        self, user_id: UUID, consumed_date: date
    ) -> list[tuple[EntryRecord, Product]]:
        """Return a user's entries for one day with their products."""

    def get_entry(self, entry_id: UUID) -> EntryRecord | None:
        """Return an entry by id, if present."""

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> None:
        """Delete an entry owned by the user."""


class DeleteOutcome(Enum):
    """Result of an entry deletion request."""

    DELETED = "deleted"
    NOT_FOUND = "not-found"
    FORBIDDEN = "forbidden"


def system_clock(timezone_name: str) -> Callable[[], date]:
    """Return a clock yielding today's date in the given timezone."""
    tz = ZoneInfo(timezone_name)

    def today() -> date:
        return datetime.now(tz=tz).date()

    return today


@dataclass
class EntryWriter:
    """Persists one entry per resolved item."""

    repository: EntryRepository
    clock: Callable[[], date]

    async def write(
        self, product: Product, quantity: float, user_id: UUID
    ) -> EntryResult:
        """Store an entry dated today and return it with scaled nutrition."""
        if quantity <= 0:
            raise ValueError("Quantity must be greater than zero")
        record = await asyncio.to_thread(
            self.repository.create_entry,
            user_id,
            product.id,
            quantity,
            self.clock(),
        )
        return build_entry_result(record, product)


@dataclass
class EntryService:
    """Read and delete access to a user's entries."""

    repository: EntryRepository
    clock: Callable[[], date]

    def list_today(self, user_id: UUID) -> list[EntryResult]:
        """Return today's entries for the user."""
        rows = self.repository.list_entries(user_id, self.clock())
        return [build_entry_result(record, product) for record, product in rows]

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> DeleteOutcome:
        """Delete an entry after checking it belongs to the user."""
        entry = self.repository.get_entry(entry_id)
        if entry is None:
            return DeleteOutcome.NOT_FOUND
        if entry.user_id != user_id:
            return DeleteOutcome.FORBIDDEN
        self.repository.delete_entry(user_id, entry_id)
        return DeleteOutcome.DELETED


def compute_nutrition(profile: NutritionProfile, quantity: float) -> Nutrition:
    """Scale per-basis values to the consumed quantity."""
    if profile.basis is NutritionBasis.PER_UNIT:
        factor = quantity
    else:
        factor = quantity / 100.0
    return Nutrition(
        calories=round(profile.calories * factor, 2),
        protein=round(profile.protein * factor, 2),
        fat=round(profile.fat * factor, 2),
        carbs=round(profile.carbs * factor, 2),
    )


def build_entry_result(record: EntryRecord, product: Product) -> EntryResult:
    """Shape a stored entry and its product into a response entry."""
    return EntryResult(
        entry_id=record.id,
        product_id=record.product_id,
        name=product.name,
        quantity=record.quantity,
        nutrition=compute_nutrition(product.profile, record.quantity),
        consumed_date=record.consumed_date,
    )
