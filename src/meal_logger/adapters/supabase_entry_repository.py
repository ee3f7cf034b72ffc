"""Supabase repository for consumption entries."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from meal_logger.adapters.supabase_product_repository import (
    PRODUCT_COLUMNS,
    parse_product,
)
from meal_logger.domain.meals import EntryRecord
from meal_logger.domain.products import Product
from meal_logger.services.entries import EntryRepository

ENTRY_COLUMNS = "id, user_id, product_id, quantity, consumed_at"


@dataclass
class SupabaseEntryRepository(EntryRepository):
    """Supabase implementation for entries."""

    client: Client

    def create_entry(
        self, user_id: UUID, product_id: UUID, quantity: float, consumed_date: date
    ) -> EntryRecord:
        """Insert an entry row and return it."""
        response = (
            self.client.table("entries")
            .insert(
                {
                    "user_id": str(user_id),
                    "product_id": str(product_id),
                    "quantity": quantity,
                    "consumed_at": consumed_date.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to insert entry")
        return _parse_entry(response.data[0])

    def list_entries(
        self, user_id: UUID, consumed_date: date
    ) -> list[tuple[EntryRecord, Product]]:
        """Return a user's entries for one day joined with products."""
        response = (
            self.client.table("entries")
            .select(f"{ENTRY_COLUMNS}, products({PRODUCT_COLUMNS})")
            .eq("user_id", str(user_id))
            .eq("consumed_at", consumed_date.isoformat())
            .order("id", desc=False)
            .execute()
        )
        rows: list[tuple[EntryRecord, Product]] = []
        for row in response.data or []:
            product_row = row.get("products")
            if not isinstance(product_row, dict):
                continue
            rows.append((_parse_entry(row), parse_product(product_row)))
        return rows

    def get_entry(self, entry_id: UUID) -> EntryRecord | None:
        """Return an entry by id, if present."""
        response = (
            self.client.table("entries")
            .select(ENTRY_COLUMNS)
            .eq("id", str(entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> None:
        """Delete an entry scoped to its owner."""
        self.client.table("entries").delete().eq("id", str(entry_id)).eq(
            "user_id", str(user_id)
        ).execute()


def _parse_entry(row: dict[str, object]) -> EntryRecord:
    return EntryRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        product_id=UUID(str(row["product_id"])),
        quantity=float(row.get("quantity", 0.0)),
        consumed_date=date.fromisoformat(str(row["consumed_at"])),
    )
