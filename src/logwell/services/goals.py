"""Goal derivation from TDEE and fitness goal."""

import logging

from logwell.domain.nutrition import NutritionGoals
from logwell.domain.profile import UserProfile
from logwell.services.nutrition_math import (
    calculate_bmr,
    calculate_tdee,
    round_half_up,
    suggest_macro_distribution,
)

KCAL_PER_LB_WEEK = 500
DEFAULT_WEIGHT_LOSS_RATE = 1.0
WEIGHT_LOSS_FLOOR_KCAL = 1200
WEIGHT_GAIN_SURPLUS_KCAL = 500
RECOMP_DEFICIT_SHARE = 0.10
RECOMP_FLOOR_KCAL = 1400
DEFAULT_FIBER_G = 25

DEFAULT_GOALS = NutritionGoals(calories=2000, protein=150, carbs=250, fat=67)

GOALS_SOURCE_DEFAULT = "default"
GOALS_SOURCE_CALCULATED = "calculated"
GOALS_SOURCE_MANUAL = "manual"

_logger = logging.getLogger(__name__)


def calculate_goals_from_tdee(
    tdee: float,
    macro_type: str = "balanced",
    goal_type: str = "maintenance",
    weight_loss_rate: float | None = None,
) -> NutritionGoals:
    """Turn a TDEE figure into calorie and macro goals.

    Weight loss takes 500 kcal per lb/week off TDEE but never goes below
    1200 kcal. Body recomposition takes 10% off TDEE, never goes below
    1400 kcal and always uses the body-recomposition macro split.
    """
    target = tdee
    final_macro_type = macro_type

    if goal_type == "weight-loss":
        rate = weight_loss_rate or DEFAULT_WEIGHT_LOSS_RATE
        deficit = KCAL_PER_LB_WEEK * rate
        target = max(WEIGHT_LOSS_FLOOR_KCAL, tdee - deficit)
    elif goal_type == "weight-gain":
        target = tdee + WEIGHT_GAIN_SURPLUS_KCAL
    elif goal_type == "body-recomposition":
        deficit = round_half_up(tdee * RECOMP_DEFICIT_SHARE)
        target = max(RECOMP_FLOOR_KCAL, tdee - deficit)
        final_macro_type = "body-recomposition"

    macros = suggest_macro_distribution(target, final_macro_type)
    return NutritionGoals(
        calories=round_half_up(target),
        protein=macros.protein,
        carbs=macros.carbs,
        fat=macros.fat,
        fiber=DEFAULT_FIBER_G,
    )


def has_complete_profile(profile: UserProfile | None) -> bool:
    """Return True when the profile has every biometric TDEE needs."""
    if profile is None:
        return False
    return bool(
        profile.age
        and profile.height_cm
        and profile.weight_kg
        and profile.gender
        and profile.activity_level
    )


def are_goals_personalized(profile: UserProfile | None) -> bool:
    """Return True when goals were calculated or set by hand."""
    if profile is None:
        return False
    return profile.goals_source != GOALS_SOURCE_DEFAULT


def derive_goals(
    profile: UserProfile, macro_type: str = "balanced"
) -> tuple[NutritionGoals, str]:
    """Return goals and their source for a profile.

    Goals are calculated only when the profile is complete; otherwise the
    fixed defaults are returned.
    """
    if not has_complete_profile(profile):
        return DEFAULT_GOALS, GOALS_SOURCE_DEFAULT

    bmr = calculate_bmr(
        float(profile.weight_kg),
        float(profile.height_cm),
        float(profile.age),
        str(profile.gender),
    )
    tdee = calculate_tdee(bmr, str(profile.activity_level))
    goals = calculate_goals_from_tdee(
        tdee,
        macro_type=macro_type,
        goal_type=profile.fitness_goal,
        weight_loss_rate=profile.weight_loss_rate,
    )
    _logger.debug(
        "Derived goals: bmr=%.1f tdee=%.1f goal=%s calories=%s",
        bmr,
        tdee,
        profile.fitness_goal,
        goals.calories,
    )
    return goals, GOALS_SOURCE_CALCULATED
