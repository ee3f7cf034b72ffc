"""Supabase repository for the product cache."""

from dataclasses import dataclass
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from meal_logger.domain.nutrition import NutritionBasis, NutritionProfile
from meal_logger.domain.products import Product
from meal_logger.services.products import DuplicateProductError, ProductRepository

PRODUCT_COLUMNS = "id, name, nutrition_basis, calories, protein, fat, carbs"
_UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseProductRepository(ProductRepository):
    """Supabase implementation for cached products."""

    client: Client

    def find_by_names(self, names: list[str]) -> list[Product]:
        """Return products whose normalized names are in ``names``."""
        if not names:
            return []
        response = (
            self.client.table("products")
            .select(PRODUCT_COLUMNS)
            .in_("name", names)
            .execute()
        )
        return [parse_product(row) for row in response.data or []]

    def find_by_name(self, name: str) -> Product | None:
        """Return a product by normalized name, if present."""
        response = (
            self.client.table("products")
            .select(PRODUCT_COLUMNS)
            .eq("name", name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_product(response.data[0])

    def create_product(self, name: str, profile: NutritionProfile) -> Product:
        """Insert a product row and return it."""
        try:
            response = (
                self.client.table("products")
                .insert(
                    {
                        "name": name,
                        "nutrition_basis": profile.basis.value,
                        "calories": profile.calories,
                        "protein": profile.protein,
                        "fat": profile.fat,
                        "carbs": profile.carbs,
                    }
                )
                .execute()
            )
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise DuplicateProductError(name) from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create product")
        return parse_product(response.data[0])


def parse_product(row: dict[str, object]) -> Product:
    """Parse a products row into a domain model."""
    return Product(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        profile=NutritionProfile(
            basis=NutritionBasis(row.get("nutrition_basis")),
            calories=float(row.get("calories", 0.0)),
            protein=float(row.get("protein", 0.0)),
            fat=float(row.get("fat", 0.0)),
            carbs=float(row.get("carbs", 0.0)),
        ),
    )
