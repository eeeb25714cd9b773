"""Pure nutrition arithmetic: scaling, progress, BMR/TDEE and macro splits."""

import logging
import math
from collections.abc import Iterable

from logwell.domain.logs import FoodEntry
from logwell.domain.nutrition import (
    ZERO_NUTRITION,
    GoalProgress,
    MacroPercentages,
    MacroSplit,
    NutrientProgress,
    NutritionGoals,
    NutritionInfo,
)

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "lightly-active": 1.375,
    "moderately-active": 1.55,
    "very-active": 1.725,
    "extremely-active": 1.9,
}

# Share of calories for protein, carbs, fat.
MACRO_SPLITS: dict[str, tuple[float, float, float]] = {
    "balanced": (0.20, 0.50, 0.30),
    "high-protein": (0.30, 0.40, 0.30),
    "low-carb": (0.25, 0.20, 0.55),
    "body-recomposition": (0.33, 0.33, 0.34),
}

PROTEIN_KCAL_PER_G = 4
CARBS_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9

GOAL_THRESHOLD = 0.9

_logger = logging.getLogger(__name__)


def calculate_entry_nutrition(entry: FoodEntry | None) -> NutritionInfo:
    """Scale the entry's per-serving nutrition by its quantity.

    Never raises: a missing food, missing nutrition or a quantity that is not
    a positive finite number yields zeroed nutrition and a warning, so one bad
    entry cannot blank a whole day.
    """
    food = getattr(entry, "food", None)
    nutrition = getattr(food, "nutrition_per_serving", None)
    if entry is None or food is None or nutrition is None:
        _logger.warning(
            "Invalid food entry: missing food or nutrition (entry_id=%s)",
            getattr(entry, "id", None),
        )
        return ZERO_NUTRITION

    quantity = entry.quantity
    if not _is_positive_number(quantity):
        _logger.warning(
            "Invalid quantity %r for entry %s; counting it as zero",
            quantity,
            entry.id,
        )
        return ZERO_NUTRITION

    return nutrition.scaled(float(quantity))


def calculate_total_nutrition(entries: Iterable[FoodEntry] | None) -> NutritionInfo:
    """Sum entry nutrition, skipping entries without a resolvable food."""
    total = ZERO_NUTRITION
    for entry in entries or []:
        if entry is None or entry.food is None:
            continue
        total = total + calculate_entry_nutrition(entry)
    return total


def calculate_progress(current: float, goal: float) -> float:
    """Return progress towards a goal as a percentage in [0, 100]."""
    if not _is_finite_number(current) or not _is_finite_number(goal) or goal <= 0:
        return 0.0
    return max(0.0, min(current / goal * 100, 100.0))


def calculate_remaining(current: NutritionInfo, goals: NutritionGoals) -> NutritionInfo:
    """Return what is left of each macro goal, never negative."""
    return NutritionInfo(
        calories=max(0.0, goals.calories - current.calories),
        protein=max(0.0, goals.protein - current.protein),
        carbs=max(0.0, goals.carbs - current.carbs),
        fat=max(0.0, goals.fat - current.fat),
    )


def calculate_macro_distribution(nutrition: NutritionInfo) -> MacroPercentages:
    """Return the percentage of calories provided by each macro."""
    if nutrition.calories == 0:
        return MacroPercentages(protein=0.0, carbs=0.0, fat=0.0)
    return MacroPercentages(
        protein=nutrition.protein * PROTEIN_KCAL_PER_G / nutrition.calories * 100,
        carbs=nutrition.carbs * CARBS_KCAL_PER_G / nutrition.calories * 100,
        fat=nutrition.fat * FAT_KCAL_PER_G / nutrition.calories * 100,
    )


def check_goal_progress(current: NutritionInfo, goals: NutritionGoals) -> GoalProgress:
    """Report progress and on-track status for calories and macros."""
    return GoalProgress(
        calories=_nutrient_progress(current.calories, goals.calories),
        protein=_nutrient_progress(current.protein, goals.protein),
        carbs=_nutrient_progress(current.carbs, goals.carbs),
        fat=_nutrient_progress(current.fat, goals.fat),
    )


def calculate_bmr(weight_kg: float, height_cm: float, age: float, gender: str) -> float:
    """Mifflin-St Jeor basal metabolic rate."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    if gender == "male":
        return base + 5
    return base - 161


def calculate_tdee(bmr: float, activity_level: str) -> float:
    """Scale BMR by the activity multiplier."""
    try:
        multiplier = ACTIVITY_MULTIPLIERS[activity_level]
    except KeyError:
        raise ValueError(f"Unknown activity level: {activity_level}") from None
    return bmr * multiplier


def suggest_macro_distribution(calories: float, macro_type: str) -> MacroSplit:
    """Split calories into macro grams using a preset.

    Each macro is rounded on its own; the rounded grams may not add back up
    to exactly ``calories``.
    """
    protein_share, carbs_share, fat_share = MACRO_SPLITS.get(
        macro_type, MACRO_SPLITS["balanced"]
    )
    return MacroSplit(
        protein=round_half_up(calories * protein_share / PROTEIN_KCAL_PER_G),
        carbs=round_half_up(calories * carbs_share / CARBS_KCAL_PER_G),
        fat=round_half_up(calories * fat_share / FAT_KCAL_PER_G),
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)


def _nutrient_progress(current: float, goal: float) -> NutrientProgress:
    status = "on-track" if current >= goal * GOAL_THRESHOLD else "under"
    return NutrientProgress(
        current=current,
        goal=goal,
        percentage=calculate_progress(current, goal),
        status=status,
    )


def _is_finite_number(value: object) -> bool:
    return (
        isinstance(value, int | float)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _is_positive_number(value: object) -> bool:
    return _is_finite_number(value) and value > 0
