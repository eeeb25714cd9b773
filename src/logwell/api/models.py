"""Request models for the HTTP API."""

import datetime

from pydantic import BaseModel, Field

from logwell.domain.nutrition import (
    ActivityLevel,
    FitnessGoal,
    Gender,
    MealType,
)


class NutritionPayload(BaseModel):
    """Nutrition for one serving."""

    calories: float = Field(default=0.0, ge=0.0)
    protein: float = Field(default=0.0, ge=0.0)
    carbs: float = Field(default=0.0, ge=0.0)
    fat: float = Field(default=0.0, ge=0.0)
    fiber: float = Field(default=0.0, ge=0.0)
    sugar: float = Field(default=0.0, ge=0.0)
    sodium: float = Field(default=0.0, ge=0.0)


class FoodCreate(BaseModel):
    """Payload for saving a food."""

    name: str = Field(min_length=1)
    brand: str | None = None
    barcode: str | None = None
    category: str | None = None
    nutrition_per_serving: NutritionPayload
    serving_description: str = "1 serving"
    is_recipe: bool = False


class FoodUpdate(BaseModel):
    """Partial update of a saved food."""

    name: str | None = Field(default=None, min_length=1)
    brand: str | None = None
    barcode: str | None = None
    category: str | None = None
    nutrition_per_serving: NutritionPayload | None = None
    serving_description: str | None = None


class EntryCreate(BaseModel):
    """Payload for logging a food on the selected date."""

    food_id: str
    quantity: float = Field(gt=0)
    meal_type: MealType
    notes: str | None = None


class EntryUpdate(BaseModel):
    """Partial update of a logged entry."""

    quantity: float | None = Field(default=None, gt=0)
    meal_type: MealType | None = None
    notes: str | None = None


class DateSelect(BaseModel):
    """Date to switch the log to."""

    date: datetime.date


class NotesUpdate(BaseModel):
    """Day-level notes."""

    notes: str | None = None


class WaterUpdate(BaseModel):
    """Day-level water intake in ml."""

    water_intake: float | None = Field(default=None, ge=0)


class GoalsPayload(BaseModel):
    """Explicit nutrition goals."""

    calories: float = Field(gt=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    fiber: float | None = Field(default=None, ge=0)
    water: float | None = Field(default=None, ge=0)


class ProfilePayload(BaseModel):
    """Onboarding data or a partial profile update."""

    name: str | None = None
    age: float | None = Field(default=None, gt=0)
    height_cm: float | None = Field(default=None, gt=0)
    weight_kg: float | None = Field(default=None, gt=0)
    gender: Gender | None = None
    activity_level: ActivityLevel | None = None
    fitness_goal: FitnessGoal | None = None
    weight_loss_rate: float | None = Field(default=None, gt=0, le=2)
    unit_system: str | None = None
    goals: GoalsPayload | None = None
    onboarding_completed: bool | None = None


class IngredientPayload(BaseModel):
    """A saved food used in a recipe."""

    food_id: str
    quantity: float = Field(gt=0)


class RecipeCreate(BaseModel):
    """Payload for building a recipe food."""

    name: str = Field(min_length=1)
    servings: float = Field(gt=0)
    ingredients: list[IngredientPayload] = Field(min_length=1)
    serving_description: str = "1 serving"


class AnalysisRequest(BaseModel):
    """Food description and/or base64-encoded photo to analyze."""

    text: str | None = Field(default=None, min_length=1)
    image_base64: str | None = Field(default=None, min_length=1)
