"""Request and response models for the HTTP API."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from meal_logger.domain.meals import EntryResult, ItemError, ProcessResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProcessMealCommand(BaseModel):
    """Free-text meal description submitted for logging."""

    model_config = ConfigDict(str_strip_whitespace=True)

    text: str = Field(min_length=1, max_length=1000)


class NutritionPayload(_CamelModel):
    calories: float
    protein: float
    fat: float
    carbs: float


class EntryPayload(_CamelModel):
    entry_id: UUID
    product_id: UUID
    name: str
    quantity: float
    nutrition: NutritionPayload
    consumed_date: date

    @classmethod
    def from_domain(cls, entry: EntryResult) -> "EntryPayload":
        return cls(
            entry_id=entry.entry_id,
            product_id=entry.product_id,
            name=entry.name,
            quantity=entry.quantity,
            nutrition=NutritionPayload(
                calories=entry.nutrition.calories,
                protein=entry.nutrition.protein,
                fat=entry.nutrition.fat,
                carbs=entry.nutrition.carbs,
            ),
            consumed_date=entry.consumed_date,
        )


class ItemErrorPayload(_CamelModel):
    source_text: str
    message: str

    @classmethod
    def from_domain(cls, error: ItemError) -> "ItemErrorPayload":
        return cls(source_text=error.source_text, message=error.message)


class ProcessResultPayload(_CamelModel):
    """Serialized outcome of a processed meal description."""

    successes: list[EntryPayload]
    errors: list[ItemErrorPayload]

    @classmethod
    def from_domain(cls, result: ProcessResult) -> "ProcessResultPayload":
        return cls(
            successes=[EntryPayload.from_domain(entry) for entry in result.successes],
            errors=[ItemErrorPayload.from_domain(error) for error in result.errors],
        )


class PaginationPayload(BaseModel):
    page: int
    size: int
    total: int


class EntriesPayload(BaseModel):
    """List of entries with pagination metadata."""

    data: list[EntryPayload]
    pagination: PaginationPayload
