"""Multi-day statistics over stored daily logs."""

from dataclasses import dataclass
from datetime import date, timedelta

from logwell.domain.logs import DailyLog
from logwell.domain.nutrition import NutritionInfo
from logwell.services.storage import StorageService

DECEMBER = 12


@dataclass(frozen=True)
class DailyTotals:
    """Cached totals of one day."""

    day: str
    nutrition: NutritionInfo
    entry_count: int


@dataclass
class PeriodSummary:
    """Aggregated totals for a period."""

    start: str
    end: str
    daily: list[DailyTotals]
    avg_calories: float
    avg_protein: float
    avg_carbs: float
    avg_fat: float
    logged_days: int


@dataclass
class StatsService:
    """Summaries over several days of logs."""

    storage: StorageService

    async def get_period(self, start: str, days: int) -> PeriodSummary:
        """Return per-day totals and averages for ``days`` days from start."""
        if days <= 0:
            raise ValueError("Period must cover at least one day")
        logs = {log.date: log for log in await self.storage.get_daily_logs()}
        first = date.fromisoformat(start)
        daily = [
            _totals_for((first + timedelta(days=offset)).isoformat(), logs)
            for offset in range(days)
        ]
        return _summarize(daily)

    async def get_week(self, anchor: str) -> PeriodSummary:
        """Return the Sunday-to-Saturday week containing anchor."""
        day = date.fromisoformat(anchor)
        # isoweekday: Monday=1 .. Sunday=7
        start = day - timedelta(days=day.isoweekday() % 7)
        return await self.get_period(start.isoformat(), 7)

    async def get_month(self, anchor: str) -> PeriodSummary:
        """Return the calendar month containing anchor."""
        day = date.fromisoformat(anchor)
        start = day.replace(day=1)
        if start.month == DECEMBER:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
        return await self.get_period(start.isoformat(), (end - start).days)


def _totals_for(day: str, logs: dict[str, DailyLog]) -> DailyTotals:
    log = logs.get(day)
    if log is None:
        return DailyTotals(day=day, nutrition=NutritionInfo(), entry_count=0)
    return DailyTotals(
        day=day, nutrition=log.total_nutrition, entry_count=len(log.entries)
    )


def _summarize(daily: list[DailyTotals]) -> PeriodSummary:
    total_days = max(len(daily), 1)
    totals = NutritionInfo()
    for entry in daily:
        totals = totals + entry.nutrition
    return PeriodSummary(
        start=daily[0].day,
        end=daily[-1].day,
        daily=daily,
        avg_calories=totals.calories / total_days,
        avg_protein=totals.protein / total_days,
        avg_carbs=totals.carbs / total_days,
        avg_fat=totals.fat / total_days,
        logged_days=sum(1 for entry in daily if entry.entry_count),
    )
