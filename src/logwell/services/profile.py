"""User profile store."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import uuid4

from logwell.domain.nutrition import (
    ACTIVITY_LEVELS,
    FITNESS_GOALS,
    GENDERS,
    NutritionGoals,
)
from logwell.domain.profile import UserProfile
from logwell.errors import ProfileNotFoundError
from logwell.services.goals import (
    DEFAULT_GOALS,
    GOALS_SOURCE_DEFAULT,
    GOALS_SOURCE_MANUAL,
    derive_goals,
    has_complete_profile,
)
from logwell.services.storage import StorageService

_PROFILE_FIELDS = {
    "name",
    "age",
    "height_cm",
    "weight_kg",
    "gender",
    "activity_level",
    "fitness_goal",
    "weight_loss_rate",
    "unit_system",
    "goals",
    "goals_source",
    "onboarding_completed",
}

_GOAL_INPUT_FIELDS = {
    "age",
    "height_cm",
    "weight_kg",
    "gender",
    "activity_level",
    "fitness_goal",
    "weight_loss_rate",
}

_NOT_CLEARABLE_FIELDS = {"goals", "goals_source", "onboarding_completed"}

_logger = logging.getLogger(__name__)


@dataclass
class ProfileStore:
    """Owns the single user profile and keeps its goals populated."""

    storage: StorageService
    user_profile: UserProfile | None = None

    async def load_user_profile(self) -> UserProfile | None:
        """Load the profile from storage."""
        self.user_profile = await self.storage.get_user_profile()
        return self.user_profile

    async def create_user_profile(self, data: dict[str, object]) -> UserProfile:
        """Create the profile, deriving goals unless they are given."""
        changes = _clean_patch(data)
        now = datetime.now(tz=UTC)
        draft = replace(
            UserProfile(
                id=uuid4().hex,
                goals=DEFAULT_GOALS,
                goals_source=GOALS_SOURCE_DEFAULT,
                created_at=now,
                updated_at=now,
            ),
            **changes,
        )
        profile = _with_goals(draft, changes, fallback=None)
        await self.storage.save_user_profile(profile)
        self.user_profile = profile
        _logger.info(
            "Created profile %s (goals_source=%s)", profile.id, profile.goals_source
        )
        return profile

    async def update_user_profile(self, patch: dict[str, object]) -> UserProfile:
        """Merge a patch into the existing profile."""
        current = self.user_profile or await self.storage.get_user_profile()
        if current is None:
            raise ProfileNotFoundError("No user profile found; create one first")
        changes = _clean_patch(patch)
        draft = replace(current, **changes, updated_at=datetime.now(tz=UTC))
        profile = _with_goals(draft, changes, fallback=current)
        await self.storage.save_user_profile(profile)
        self.user_profile = profile
        return profile

    async def update_nutrition_goals(self, goals: NutritionGoals) -> UserProfile:
        """Override goals by hand."""
        return await self.update_user_profile(
            {"goals": goals, "goals_source": GOALS_SOURCE_MANUAL}
        )


def _clean_patch(data: dict[str, object]) -> dict[str, object]:
    unknown = set(data) - _PROFILE_FIELDS
    if unknown:
        raise ValueError(f"Unknown profile fields: {sorted(unknown)}")
    cleared = sorted(
        name for name in _NOT_CLEARABLE_FIELDS if name in data and data[name] is None
    )
    if cleared:
        raise ValueError(f"Profile fields cannot be cleared: {cleared}")
    changes = dict(data)
    _check_choice(changes, "gender", GENDERS)
    _check_choice(changes, "activity_level", ACTIVITY_LEVELS)
    _check_choice(changes, "fitness_goal", FITNESS_GOALS)
    goals = changes.get("goals")
    if isinstance(goals, dict):
        changes["goals"] = NutritionGoals(**goals)
    return changes


def _check_choice(
    changes: dict[str, object], name: str, allowed: tuple[str, ...]
) -> None:
    value = changes.get(name)
    if value is not None and value not in allowed:
        raise ValueError(f"Invalid {name}: {value}")


def _with_goals(
    draft: UserProfile, changes: dict[str, object], fallback: UserProfile | None
) -> UserProfile:
    if draft.fitness_goal != "weight-loss":
        draft = replace(draft, weight_loss_rate=None)

    if changes.get("goals") is not None:
        source = str(changes.get("goals_source") or GOALS_SOURCE_MANUAL)
        return replace(draft, goals_source=source)

    if fallback is None:
        goals, source = derive_goals(draft)
        return replace(draft, goals=goals, goals_source=source)

    # Hand-set goals are only replaced by new explicit goals.
    recalculate = (
        fallback.goals_source != GOALS_SOURCE_MANUAL
        and not _GOAL_INPUT_FIELDS.isdisjoint(changes)
        and has_complete_profile(draft)
    )
    if recalculate:
        goals, source = derive_goals(draft)
        return replace(draft, goals=goals, goals_source=source)

    return replace(draft, goals=fallback.goals, goals_source=fallback.goals_source)
