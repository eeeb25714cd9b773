"""Nutrition domain models."""

from dataclasses import dataclass
from typing import Literal

MealType = Literal["breakfast", "lunch", "dinner", "snack"]
ActivityLevel = Literal[
    "sedentary",
    "lightly-active",
    "moderately-active",
    "very-active",
    "extremely-active",
]
FitnessGoal = Literal["maintenance", "weight-loss", "weight-gain", "body-recomposition"]
Gender = Literal["male", "female", "other"]

MEAL_TYPES: tuple[str, ...] = ("breakfast", "lunch", "dinner", "snack")
ACTIVITY_LEVELS: tuple[str, ...] = (
    "sedentary",
    "lightly-active",
    "moderately-active",
    "very-active",
    "extremely-active",
)
FITNESS_GOALS: tuple[str, ...] = (
    "maintenance",
    "weight-loss",
    "weight-gain",
    "body-recomposition",
)
GENDERS: tuple[str, ...] = ("male", "female", "other")

NUTRIENT_FIELDS: tuple[str, ...] = (
    "calories",
    "protein",
    "carbs",
    "fat",
    "fiber",
    "sugar",
    "sodium",
)


@dataclass(frozen=True)
class NutritionInfo:
    """Calories and nutrients; grams except sodium (mg)."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0

    def scaled(self, factor: float) -> "NutritionInfo":
        """Return every field multiplied by factor."""
        return NutritionInfo(
            calories=self.calories * factor,
            protein=self.protein * factor,
            carbs=self.carbs * factor,
            fat=self.fat * factor,
            fiber=self.fiber * factor,
            sugar=self.sugar * factor,
            sodium=self.sodium * factor,
        )

    def __add__(self, other: "NutritionInfo") -> "NutritionInfo":
        return NutritionInfo(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
            fiber=self.fiber + other.fiber,
            sugar=self.sugar + other.sugar,
            sodium=self.sodium + other.sodium,
        )


ZERO_NUTRITION = NutritionInfo()


@dataclass(frozen=True)
class NutritionGoals:
    """Daily calorie and macro targets."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float | None = None
    water: float | None = None


@dataclass(frozen=True)
class MacroSplit:
    """Macro grams suggested for a calorie budget."""

    protein: int
    carbs: int
    fat: int


@dataclass(frozen=True)
class MacroPercentages:
    """Share of calories coming from each macro."""

    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class NutrientProgress:
    """Progress of one nutrient towards its goal."""

    current: float
    goal: float
    percentage: float
    status: str


@dataclass(frozen=True)
class GoalProgress:
    """Progress of the main macros towards their goals."""

    calories: NutrientProgress
    protein: NutrientProgress
    carbs: NutrientProgress
    fat: NutrientProgress
