"""Services for managing the saved food library."""

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import uuid4

from logwell.domain.foods import Food
from logwell.domain.nutrition import NutritionInfo
from logwell.errors import FoodNotFoundError
from logwell.services.storage import StorageService, parse_nutrition

_UPDATABLE_FIELDS = {
    "name",
    "brand",
    "barcode",
    "category",
    "serving_description",
    "is_recipe",
}
_REQUIRED_FIELDS = {
    "name",
    "serving_description",
    "is_recipe",
    "nutrition_per_serving",
}

_logger = logging.getLogger(__name__)


@dataclass
class FoodLibrary:
    """Owns the list of saved foods."""

    storage: StorageService
    foods: list[Food] = field(default_factory=list)

    async def load_foods(self) -> list[Food]:
        """Load saved foods from storage."""
        self.foods = await self.storage.get_foods()
        return self.foods

    async def add_food(self, payload: dict[str, object]) -> Food:
        """Create a food from a payload and persist it."""
        now = datetime.now(tz=UTC)
        food = Food(
            id=uuid4().hex,
            name=str(payload.get("name") or "").strip() or "Unnamed food",
            brand=payload.get("brand"),
            barcode=payload.get("barcode"),
            category=payload.get("category"),
            nutrition_per_serving=_coerce_nutrition(
                payload.get("nutrition_per_serving")
            ),
            serving_description=str(payload.get("serving_description") or "1 serving"),
            is_recipe=bool(payload.get("is_recipe", False)),
            created_at=now,
            updated_at=now,
        )
        foods = [*self.foods, food]
        await self.storage.save_foods(foods)
        self.foods = foods
        _logger.info("Added food %s (%s)", food.id, food.name)
        return food

    async def update_food(self, food_id: str, patch: dict[str, object]) -> Food:
        """Merge a patch into a food.

        Days that already logged the food keep their cached totals.
        """
        cleared = sorted(
            name for name in _REQUIRED_FIELDS if name in patch and patch[name] is None
        )
        if cleared:
            raise ValueError(f"Food fields cannot be cleared: {cleared}")
        index = self._index_of(food_id)
        current = self.foods[index]
        changes = {
            key: value for key, value in patch.items() if key in _UPDATABLE_FIELDS
        }
        if "nutrition_per_serving" in patch:
            changes["nutrition_per_serving"] = _coerce_nutrition(
                patch["nutrition_per_serving"]
            )
        updated = replace(current, **changes, updated_at=datetime.now(tz=UTC))
        foods = list(self.foods)
        foods[index] = updated
        await self.storage.save_foods(foods)
        self.foods = foods
        return updated

    async def delete_food(self, food_id: str) -> None:
        """Remove a food; entries that reference it are left alone."""
        foods = [food for food in self.foods if food.id != food_id]
        await self.storage.save_foods(foods)
        self.foods = foods

    def get_food(self, food_id: str) -> Food:
        """Return a food by id."""
        return self.foods[self._index_of(food_id)]

    def search_foods(self, query: str | None) -> list[Food]:
        """Match foods by name, brand or category, case-insensitively."""
        if not query or not query.strip():
            return list(self.foods)
        needle = query.strip().lower()
        return [
            food
            for food in self.foods
            if needle in food.name.lower()
            or needle in (food.brand or "").lower()
            or needle in (food.category or "").lower()
        ]

    def _index_of(self, food_id: str) -> int:
        for index, food in enumerate(self.foods):
            if food.id == food_id:
                return index
        raise FoodNotFoundError(f"Food not found: {food_id}")


def _coerce_nutrition(value: object) -> NutritionInfo:
    if isinstance(value, NutritionInfo):
        return value
    if isinstance(value, dict):
        return parse_nutrition(value)
    return NutritionInfo()
