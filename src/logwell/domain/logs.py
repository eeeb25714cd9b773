"""Domain models for daily food logs."""

from dataclasses import dataclass, field
from datetime import datetime

from logwell.domain.foods import Food
from logwell.domain.nutrition import (
    ZERO_NUTRITION,
    GoalProgress,
    NutritionInfo,
)


@dataclass(frozen=True)
class FoodEntry:
    """A logged portion of a food."""

    id: str
    food_id: str
    food: Food | None
    quantity: float
    meal_type: str
    logged_at: datetime
    notes: str | None = None


@dataclass(frozen=True)
class DailyLog:
    """All entries logged for one calendar day with cached totals."""

    id: str
    date: str
    entries: list[FoodEntry] = field(default_factory=list)
    total_nutrition: NutritionInfo = ZERO_NUTRITION
    water_intake: float | None = None
    notes: str | None = None


@dataclass(frozen=True)
class DayNutritionSummary:
    """Read-time view of a day against the user's goals."""

    date: str
    total: NutritionInfo
    progress: GoalProgress
    meal_breakdown: dict[str, NutritionInfo]
