"""Daily food log store."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

from logwell.domain.foods import Food
from logwell.domain.logs import DailyLog, DayNutritionSummary, FoodEntry
from logwell.domain.nutrition import MEAL_TYPES, NutritionGoals, NutritionInfo
from logwell.services.nutrition_math import (
    calculate_total_nutrition,
    check_goal_progress,
)
from logwell.services.storage import StorageService

_PATCHABLE_FIELDS = {"quantity", "meal_type", "notes"}
_REQUIRED_FIELDS = {"quantity", "meal_type"}

_logger = logging.getLogger(__name__)


def _today() -> str:
    return date.today().isoformat()


@dataclass
class LogStore:
    """Owns the log of the selected date and all entry mutations.

    Every mutation builds the new log, recomputes its totals, writes the whole
    document and only then replaces ``current_day_log``. A failed write
    leaves the in-memory log as it was.
    """

    storage: StorageService
    today: Callable[[], str] = _today
    selected_date: str = ""
    current_day_log: DailyLog | None = None
    is_loading: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if not self.selected_date:
            self.selected_date = self.today()

    async def load_daily_log(self, day: str) -> DailyLog | None:
        """Load the log for a date and make it the selected date."""
        date.fromisoformat(day)
        self.is_loading = True
        try:
            daily_log = await self.storage.get_daily_log(day)
        finally:
            self.is_loading = False
        self.current_day_log = daily_log
        self.selected_date = day
        return daily_log

    async def add_entry(
        self,
        food: Food,
        quantity: float,
        meal_type: str,
        notes: str | None = None,
        logged_at: datetime | None = None,
    ) -> FoodEntry:
        """Log a portion of a food on the selected date."""
        _validate_meal_type(meal_type)
        entry = FoodEntry(
            id=uuid4().hex,
            food_id=food.id,
            food=food,
            quantity=quantity,
            meal_type=meal_type,
            logged_at=logged_at or datetime.now(tz=UTC),
            notes=notes,
        )
        daily_log = await self._load_or_new(self.selected_date)
        await self._commit(replace(daily_log, entries=[*daily_log.entries, entry]))
        _logger.info(
            "Logged entry %s on %s (food=%s quantity=%s)",
            entry.id,
            self.selected_date,
            food.id,
            quantity,
        )
        return entry

    async def update_entry(
        self, entry_id: str, patch: dict[str, object]
    ) -> FoodEntry | None:
        """Merge a patch into an entry of the selected date.

        Only the selected date is searched. Returns None when the entry is not
        in that day's log.
        """
        unknown = set(patch) - _PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update entry fields: {sorted(unknown)}")
        cleared = sorted(
            name for name in _REQUIRED_FIELDS if name in patch and patch[name] is None
        )
        if cleared:
            raise ValueError(f"Entry fields cannot be cleared: {cleared}")
        if "meal_type" in patch:
            _validate_meal_type(str(patch["meal_type"]))

        daily_log = await self.storage.get_daily_log(self.selected_date)
        if daily_log is None:
            return None
        entries = list(daily_log.entries)
        for index, entry in enumerate(entries):
            if entry.id == entry_id:
                entries[index] = replace(entry, **patch)
                break
        else:
            _logger.info("Entry %s not found on %s", entry_id, self.selected_date)
            return None

        await self._commit(replace(daily_log, entries=entries))
        return entries[index]

    async def delete_entry(self, entry_id: str) -> None:
        """Remove an entry from the selected date.

        The day's log stays in place even when its last entry is removed.
        """
        daily_log = await self.storage.get_daily_log(self.selected_date)
        if daily_log is None:
            return
        entries = [entry for entry in daily_log.entries if entry.id != entry_id]
        await self._commit(replace(daily_log, entries=entries))

    async def set_day_notes(self, notes: str | None) -> DailyLog:
        """Attach notes to the selected date."""
        daily_log = await self._load_or_new(self.selected_date)
        return await self._commit(replace(daily_log, notes=notes))

    async def set_water_intake(self, water_ml: float | None) -> DailyLog:
        """Record the selected date's water intake in ml."""
        if water_ml is not None and water_ml < 0:
            raise ValueError("Water intake cannot be negative")
        daily_log = await self._load_or_new(self.selected_date)
        return await self._commit(replace(daily_log, water_intake=water_ml))

    async def set_selected_date(self, day: str) -> DailyLog | None:
        """Switch to another date, reloading its log from storage."""
        return await self.load_daily_log(day)

    async def go_to_today(self) -> DailyLog | None:
        """Switch to today."""
        return await self.set_selected_date(self.today())

    async def go_to_previous_day(self) -> DailyLog | None:
        """Switch to the day before the selected date."""
        return await self.set_selected_date(_offset_date(self.selected_date, -1))

    async def go_to_next_day(self) -> DailyLog | None:
        """Switch to the day after the selected date."""
        return await self.set_selected_date(_offset_date(self.selected_date, 1))

    def day_summary(self, goals: NutritionGoals) -> DayNutritionSummary:
        """Summarize the selected date against goals."""
        daily_log = self.current_day_log
        total = daily_log.total_nutrition if daily_log else NutritionInfo()
        entries = daily_log.entries if daily_log else []
        return DayNutritionSummary(
            date=self.selected_date,
            total=total,
            progress=check_goal_progress(total, goals),
            meal_breakdown=meal_breakdown(entries),
        )

    async def _load_or_new(self, day: str) -> DailyLog:
        existing = await self.storage.get_daily_log(day)
        if existing is not None:
            return existing
        return DailyLog(id=f"log_{day}", date=day)

    async def _commit(self, daily_log: DailyLog) -> DailyLog:
        recomputed = replace(
            daily_log, total_nutrition=calculate_total_nutrition(daily_log.entries)
        )
        await self.storage.save_daily_log(recomputed)
        if recomputed.date == self.selected_date:
            self.current_day_log = recomputed
        return recomputed


def sort_entries_chronologically(entries: list[FoodEntry]) -> list[FoodEntry]:
    """Return entries ordered by the time they were logged."""
    return sorted(entries, key=lambda entry: entry.logged_at)


def group_entries_by_hour(entries: list[FoodEntry]) -> dict[int, list[FoodEntry]]:
    """Group entries by the hour they were logged, in chronological order."""
    groups: dict[int, list[FoodEntry]] = {}
    for entry in sort_entries_chronologically(entries):
        groups.setdefault(entry.logged_at.hour, []).append(entry)
    return groups


def entries_for_meal(entries: list[FoodEntry], meal_type: str) -> list[FoodEntry]:
    """Return the entries logged under one meal."""
    return [entry for entry in entries if entry.meal_type == meal_type]


def meal_breakdown(entries: list[FoodEntry]) -> dict[str, NutritionInfo]:
    """Return total nutrition per meal type."""
    return {
        meal_type: calculate_total_nutrition(entries_for_meal(entries, meal_type))
        for meal_type in MEAL_TYPES
    }


def _offset_date(day: str, days: int) -> str:
    return (date.fromisoformat(day) + timedelta(days=days)).isoformat()


def _validate_meal_type(meal_type: str) -> None:
    if meal_type not in MEAL_TYPES:
        raise ValueError(f"Unknown meal type: {meal_type}")
