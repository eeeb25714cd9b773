"""Domain model for the user profile."""

from dataclasses import dataclass
from datetime import datetime

from logwell.domain.nutrition import NutritionGoals


@dataclass(frozen=True)
class UserProfile:
    """Biometrics, fitness goal and the nutrition goals derived from them."""

    id: str
    goals: NutritionGoals
    goals_source: str
    created_at: datetime
    updated_at: datetime
    name: str | None = None
    age: float | None = None
    height_cm: float | None = None
    weight_kg: float | None = None
    gender: str | None = None
    activity_level: str | None = None
    fitness_goal: str = "maintenance"
    weight_loss_rate: float | None = None
    unit_system: str = "metric"
    onboarding_completed: bool = False
