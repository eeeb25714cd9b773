"""Domain models for foods and recipes."""

from dataclasses import dataclass, field
from datetime import datetime

from logwell.domain.nutrition import NutritionInfo


@dataclass(frozen=True)
class Food:
    """A food that can be logged, with nutrition for one serving."""

    id: str
    name: str
    nutrition_per_serving: NutritionInfo
    serving_description: str
    created_at: datetime
    updated_at: datetime
    brand: str | None = None
    barcode: str | None = None
    category: str | None = None
    is_recipe: bool = False


@dataclass(frozen=True)
class RecipeIngredient:
    """A food used in a recipe with a serving multiplier."""

    food: Food
    quantity: float


@dataclass(frozen=True)
class Recipe:
    """A set of ingredients split into servings."""

    name: str
    servings: float
    ingredients: list[RecipeIngredient] = field(default_factory=list)
    serving_description: str = "1 serving"
