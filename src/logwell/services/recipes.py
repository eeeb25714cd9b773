"""Recipe nutrition and conversion into loggable foods."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from logwell.domain.foods import Food, Recipe
from logwell.domain.nutrition import ZERO_NUTRITION, NutritionInfo
from logwell.services.foods import FoodLibrary
from logwell.services.nutrition_math import round_half_up


def calculate_recipe_nutrition(recipe: Recipe) -> NutritionInfo:
    """Return the nutrition of the whole recipe."""
    total = ZERO_NUTRITION
    for ingredient in recipe.ingredients:
        total = total + ingredient.food.nutrition_per_serving.scaled(
            ingredient.quantity
        )
    return total


def calculate_recipe_nutrition_per_serving(recipe: Recipe) -> NutritionInfo:
    """Return the nutrition of one serving, rounded to whole units."""
    if recipe.servings <= 0:
        raise ValueError("Recipe servings must be positive")
    total = calculate_recipe_nutrition(recipe)
    per_serving = total.scaled(1 / recipe.servings)
    return NutritionInfo(
        calories=round_half_up(per_serving.calories),
        protein=round_half_up(per_serving.protein),
        carbs=round_half_up(per_serving.carbs),
        fat=round_half_up(per_serving.fat),
        fiber=round_half_up(per_serving.fiber),
        sugar=round_half_up(per_serving.sugar),
        sodium=round_half_up(per_serving.sodium),
    )


def build_recipe_food(recipe: Recipe) -> Food:
    """Create a food whose serving is one serving of the recipe."""
    if not recipe.ingredients:
        raise ValueError("Recipe needs at least one ingredient")
    now = datetime.now(tz=UTC)
    return Food(
        id=uuid4().hex,
        name=recipe.name,
        nutrition_per_serving=calculate_recipe_nutrition_per_serving(recipe),
        serving_description=recipe.serving_description,
        is_recipe=True,
        created_at=now,
        updated_at=now,
    )


@dataclass
class RecipeService:
    """Saves recipes into the food library."""

    food_library: FoodLibrary

    async def save_recipe(self, recipe: Recipe) -> Food:
        """Build the recipe food and add it to the library."""
        food = build_recipe_food(recipe)
        return await self.food_library.add_food(
            {
                "name": food.name,
                "nutrition_per_serving": food.nutrition_per_serving,
                "serving_description": food.serving_description,
                "is_recipe": True,
            }
        )
