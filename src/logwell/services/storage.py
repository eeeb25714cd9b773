"""Document storage on top of an async key-value store."""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Protocol

from logwell.domain.foods import Food
from logwell.domain.logs import DailyLog, FoodEntry
from logwell.domain.nutrition import NUTRIENT_FIELDS, NutritionGoals, NutritionInfo
from logwell.domain.profile import UserProfile
from logwell.errors import PersistenceError

FOODS_KEY = "foods"
DAILY_LOGS_KEY = "daily_logs"
USER_PROFILE_KEY = "user_profile"
SETTINGS_KEY = "settings"

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Async string store holding whole JSON documents."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, if present."""

    async def set(self, key: str, value: str) -> None:
        """Store a value under a key."""

    async def remove(self, key: str) -> None:
        """Remove a key."""

    async def multi_remove(self, keys: list[str]) -> None:
        """Remove several keys."""


@dataclass
class StorageService:
    """Reads and writes the foods, daily logs and profile documents.

    Each document is stored whole: one array for foods, one array for daily
    logs and one object for the profile.
    """

    store: KeyValueStore
    key_prefix: str = "@LogWell:"

    def key(self, name: str) -> str:
        """Return the namespaced key for a document."""
        return f"{self.key_prefix}{name}"

    async def get_foods(self) -> list[Food]:
        """Return every saved food."""
        rows = await self._read_json(FOODS_KEY, default=[])
        return [parse_food(row) for row in rows]

    async def save_foods(self, foods: list[Food]) -> None:
        """Replace the foods document."""
        await self._write_json(FOODS_KEY, [serialize_food(food) for food in foods])

    async def get_daily_logs(self) -> list[DailyLog]:
        """Return every stored daily log."""
        rows = await self._read_json(DAILY_LOGS_KEY, default=[])
        return [parse_daily_log(row) for row in rows]

    async def get_daily_log(self, date: str) -> DailyLog | None:
        """Return the log for a date, if one exists."""
        for log in await self.get_daily_logs():
            if log.date == date:
                return log
        return None

    async def save_daily_log(self, daily_log: DailyLog) -> None:
        """Insert or replace the log for its date."""
        logs = await self.get_daily_logs()
        for index, log in enumerate(logs):
            if log.date == daily_log.date:
                logs[index] = daily_log
                break
        else:
            logs.append(daily_log)
        await self._write_json(
            DAILY_LOGS_KEY, [serialize_daily_log(log) for log in logs]
        )

    async def get_user_profile(self) -> UserProfile | None:
        """Return the stored profile, if any."""
        row = await self._read_json(USER_PROFILE_KEY, default=None)
        if row is None:
            return None
        return parse_profile(row)

    async def save_user_profile(self, profile: UserProfile) -> None:
        """Replace the profile document."""
        await self._write_json(USER_PROFILE_KEY, serialize_profile(profile))

    async def clear_all_data(self) -> None:
        """Remove every document owned by the application."""
        keys = [
            self.key(name)
            for name in (FOODS_KEY, DAILY_LOGS_KEY, USER_PROFILE_KEY, SETTINGS_KEY)
        ]
        try:
            await self.store.multi_remove(keys)
        except Exception as exc:
            _logger.exception("Failed to clear stored data")
            raise PersistenceError("Failed to clear stored data") from exc

    async def _read_json(self, name: str, default: object) -> object:
        key = self.key(name)
        try:
            raw = await self.store.get(key)
        except Exception as exc:
            _logger.exception("Failed to read %s", key)
            raise PersistenceError(f"Failed to read {key}") from exc
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            _logger.error("Corrupt document under %s", key)
            raise PersistenceError(f"Corrupt document under {key}") from exc

    async def _write_json(self, name: str, payload: object) -> None:
        key = self.key(name)
        try:
            await self.store.set(key, json.dumps(payload))
        except Exception as exc:
            _logger.exception("Failed to write %s", key)
            raise PersistenceError(f"Failed to write {key}") from exc


def serialize_nutrition(nutrition: NutritionInfo) -> dict[str, float]:
    """Convert nutrition into a JSON-ready dict."""
    return asdict(nutrition)


def parse_nutrition(row: dict[str, object] | None) -> NutritionInfo:
    """Parse nutrition, treating missing nutrients as zero."""
    row = row or {}
    return NutritionInfo(
        **{name: float(row.get(name) or 0.0) for name in NUTRIENT_FIELDS}
    )


def serialize_food(food: Food) -> dict[str, object]:
    """Convert a food into a JSON-ready dict."""
    return {
        "id": food.id,
        "name": food.name,
        "brand": food.brand,
        "barcode": food.barcode,
        "category": food.category,
        "nutrition_per_serving": serialize_nutrition(food.nutrition_per_serving),
        "serving_description": food.serving_description,
        "is_recipe": food.is_recipe,
        "created_at": food.created_at.isoformat(),
        "updated_at": food.updated_at.isoformat(),
    }


def parse_food(row: dict[str, object]) -> Food:
    """Parse a stored food."""
    return Food(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        brand=row.get("brand"),
        barcode=row.get("barcode"),
        category=row.get("category"),
        nutrition_per_serving=parse_nutrition(row.get("nutrition_per_serving")),
        serving_description=str(row.get("serving_description") or "1 serving"),
        is_recipe=bool(row.get("is_recipe", False)),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )


def serialize_entry(entry: FoodEntry) -> dict[str, object]:
    """Convert a food entry into a JSON-ready dict."""
    return {
        "id": entry.id,
        "food_id": entry.food_id,
        "food": serialize_food(entry.food) if entry.food else None,
        "quantity": entry.quantity,
        "meal_type": entry.meal_type,
        "logged_at": entry.logged_at.isoformat(),
        "notes": entry.notes,
    }


def parse_entry(row: dict[str, object]) -> FoodEntry:
    """Parse a stored food entry; a missing food stays None."""
    food_row = row.get("food")
    return FoodEntry(
        id=str(row["id"]),
        food_id=str(row.get("food_id", "")),
        food=parse_food(food_row) if isinstance(food_row, dict) else None,
        quantity=row.get("quantity", 0),
        meal_type=str(row.get("meal_type", "snack")),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
        notes=row.get("notes"),
    )


def serialize_daily_log(daily_log: DailyLog) -> dict[str, object]:
    """Convert a daily log into a JSON-ready dict."""
    return {
        "id": daily_log.id,
        "date": daily_log.date,
        "entries": [serialize_entry(entry) for entry in daily_log.entries],
        "total_nutrition": serialize_nutrition(daily_log.total_nutrition),
        "water_intake": daily_log.water_intake,
        "notes": daily_log.notes,
    }


def parse_daily_log(row: dict[str, object]) -> DailyLog:
    """Parse a stored daily log."""
    date = str(row["date"])
    return DailyLog(
        id=str(row.get("id") or f"log_{date}"),
        date=date,
        entries=[parse_entry(entry) for entry in row.get("entries") or []],
        total_nutrition=parse_nutrition(row.get("total_nutrition")),
        water_intake=row.get("water_intake"),
        notes=row.get("notes"),
    )


def parse_goals(row: dict[str, object]) -> NutritionGoals:
    """Parse stored nutrition goals."""
    return NutritionGoals(
        calories=float(row.get("calories", 0)),
        protein=float(row.get("protein", 0)),
        carbs=float(row.get("carbs", 0)),
        fat=float(row.get("fat", 0)),
        fiber=_optional_float(row.get("fiber")),
        water=_optional_float(row.get("water")),
    )


def serialize_profile(profile: UserProfile) -> dict[str, object]:
    """Convert the profile into a JSON-ready dict."""
    payload = asdict(profile)
    payload["created_at"] = profile.created_at.isoformat()
    payload["updated_at"] = profile.updated_at.isoformat()
    return payload


def parse_profile(row: dict[str, object]) -> UserProfile:
    """Parse the stored profile."""
    return UserProfile(
        id=str(row["id"]),
        name=row.get("name"),
        age=_optional_float(row.get("age")),
        height_cm=_optional_float(row.get("height_cm")),
        weight_kg=_optional_float(row.get("weight_kg")),
        gender=row.get("gender"),
        activity_level=row.get("activity_level"),
        fitness_goal=str(row.get("fitness_goal") or "maintenance"),
        weight_loss_rate=_optional_float(row.get("weight_loss_rate")),
        unit_system=str(row.get("unit_system") or "metric"),
        goals=parse_goals(row.get("goals") or {}),
        goals_source=str(row.get("goals_source") or "default"),
        onboarding_completed=bool(row.get("onboarding_completed", False)),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)
