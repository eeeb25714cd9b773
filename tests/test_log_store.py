"""Tests for the daily log store."""

import asyncio
from datetime import UTC, datetime

import pytest

from logwell.domain.nutrition import NutritionInfo
from logwell.errors import PersistenceError
from logwell.services.goals import DEFAULT_GOALS
from logwell.services.logs import (
    LogStore,
    entries_for_meal,
    group_entries_by_hour,
    meal_breakdown,
    sort_entries_chronologically,
)
from logwell.services.storage import StorageService
from tests.conftest import TODAY, FlakyKeyValueStore, make_entry, make_food


def test_add_entry_creates_log_and_totals(log_store: LogStore) -> None:
    food = make_food(calories=100, protein=10, carbs=20, fat=5)

    entry = asyncio.run(log_store.add_entry(food, quantity=2, meal_type="lunch"))

    daily_log = log_store.current_day_log
    assert daily_log is not None
    assert daily_log.id == f"log_{TODAY}"
    assert daily_log.date == TODAY
    assert daily_log.entries == [entry]
    assert entry.food == food
    assert daily_log.total_nutrition.calories == pytest.approx(200)
    assert daily_log.total_nutrition.fat == pytest.approx(10)


def test_reload_returns_equal_log(
    log_store: LogStore, storage: StorageService
) -> None:
    food = make_food()
    asyncio.run(log_store.add_entry(food, quantity=1.5, meal_type="breakfast"))
    asyncio.run(log_store.add_entry(food, quantity=1, meal_type="dinner", notes="x"))

    reloaded = asyncio.run(storage.get_daily_log(TODAY))

    assert reloaded == log_store.current_day_log


def test_update_entry_recomputes_totals(log_store: LogStore) -> None:
    food = make_food(calories=100)
    entry = asyncio.run(log_store.add_entry(food, quantity=1, meal_type="lunch"))

    updated = asyncio.run(
        log_store.update_entry(entry.id, {"quantity": 3, "meal_type": "dinner"})
    )

    assert updated is not None
    assert updated.quantity == 3
    assert updated.meal_type == "dinner"
    assert log_store.current_day_log.total_nutrition.calories == pytest.approx(300)


def test_update_entry_rejects_bad_patches(log_store: LogStore) -> None:
    entry = asyncio.run(log_store.add_entry(make_food(), 1, "lunch"))

    with pytest.raises(ValueError, match="food_id"):
        asyncio.run(log_store.update_entry(entry.id, {"food_id": "other"}))
    with pytest.raises(ValueError, match="meal type"):
        asyncio.run(log_store.update_entry(entry.id, {"meal_type": "brunch"}))


def test_update_missing_entry_returns_none(log_store: LogStore) -> None:
    asyncio.run(log_store.add_entry(make_food(), 1, "lunch"))

    assert asyncio.run(log_store.update_entry("nope", {"quantity": 2})) is None


def test_update_entry_only_searches_selected_date(log_store: LogStore) -> None:
    entry = asyncio.run(log_store.add_entry(make_food(), 1, "lunch"))
    asyncio.run(log_store.go_to_next_day())

    assert asyncio.run(log_store.update_entry(entry.id, {"quantity": 2})) is None


def test_delete_last_entry_keeps_log(
    log_store: LogStore, storage: StorageService
) -> None:
    entry = asyncio.run(log_store.add_entry(make_food(), 1, "snack"))

    asyncio.run(log_store.delete_entry(entry.id))

    daily_log = asyncio.run(storage.get_daily_log(TODAY))
    assert daily_log is not None
    assert daily_log.entries == []
    assert daily_log.total_nutrition == NutritionInfo()
    assert log_store.current_day_log == daily_log


def test_failed_write_leaves_state_unchanged(
    log_store: LogStore, kv_store: FlakyKeyValueStore
) -> None:
    first = asyncio.run(log_store.add_entry(make_food(), 1, "lunch"))
    before = log_store.current_day_log
    kv_store.fail_writes = True

    with pytest.raises(PersistenceError):
        asyncio.run(log_store.add_entry(make_food(), 2, "dinner"))
    with pytest.raises(PersistenceError):
        asyncio.run(log_store.delete_entry(first.id))

    assert log_store.current_day_log is before
    kv_store.fail_writes = False
    stored = asyncio.run(log_store.storage.get_daily_log(TODAY))
    assert stored == before


def test_invalid_meal_type_is_rejected(log_store: LogStore) -> None:
    with pytest.raises(ValueError, match="meal type"):
        asyncio.run(log_store.add_entry(make_food(), 1, "brunch"))

    assert log_store.current_day_log is None


def test_navigation_reloads_from_storage(
    log_store: LogStore, storage: StorageService
) -> None:
    assert log_store.selected_date == TODAY
    asyncio.run(log_store.add_entry(make_food(), 1, "lunch"))

    assert asyncio.run(log_store.go_to_previous_day()) is None
    assert log_store.selected_date == "2024-03-14"
    assert log_store.current_day_log is None

    asyncio.run(log_store.go_to_next_day())
    assert log_store.selected_date == TODAY
    assert log_store.current_day_log == asyncio.run(storage.get_daily_log(TODAY))

    asyncio.run(log_store.set_selected_date("2024-02-29"))
    asyncio.run(log_store.go_to_next_day())
    assert log_store.selected_date == "2024-03-01"

    asyncio.run(log_store.go_to_today())
    assert log_store.selected_date == TODAY


def test_load_rejects_malformed_date(log_store: LogStore) -> None:
    with pytest.raises(ValueError):
        asyncio.run(log_store.load_daily_log("15/03/2024"))

    assert log_store.selected_date == TODAY


def test_day_notes_and_water(log_store: LogStore) -> None:
    daily_log = asyncio.run(log_store.set_day_notes("felt great"))
    assert daily_log.id == f"log_{TODAY}"
    assert daily_log.notes == "felt great"

    daily_log = asyncio.run(log_store.set_water_intake(1500))
    assert daily_log.water_intake == 1500
    assert daily_log.notes == "felt great"

    with pytest.raises(ValueError, match="negative"):
        asyncio.run(log_store.set_water_intake(-1))


def test_entries_on_different_days_are_separate(
    log_store: LogStore, storage: StorageService
) -> None:
    asyncio.run(log_store.add_entry(make_food(), 1, "lunch"))
    asyncio.run(log_store.go_to_previous_day())
    asyncio.run(log_store.add_entry(make_food(), 2, "lunch"))

    logs = asyncio.run(storage.get_daily_logs())

    assert sorted(log.date for log in logs) == ["2024-03-14", TODAY]
    assert all(len(log.entries) == 1 for log in logs)


def test_day_summary(log_store: LogStore) -> None:
    food = make_food(calories=900, protein=50, carbs=100, fat=30)
    asyncio.run(log_store.add_entry(food, 2, "dinner"))

    summary = log_store.day_summary(DEFAULT_GOALS)

    assert summary.date == TODAY
    assert summary.total.calories == pytest.approx(1800)
    assert summary.progress.calories.status == "on-track"
    assert summary.meal_breakdown["dinner"].calories == pytest.approx(1800)
    assert summary.meal_breakdown["breakfast"] == NutritionInfo()


def test_empty_day_summary(log_store: LogStore) -> None:
    summary = log_store.day_summary(DEFAULT_GOALS)

    assert summary.total == NutritionInfo()
    assert summary.progress.calories.percentage == 0.0


def test_entry_helpers() -> None:
    food = make_food()
    late = make_entry(food, logged_at=datetime(2024, 3, 15, 8, 30, tzinfo=UTC))
    early = make_entry(food, logged_at=datetime(2024, 3, 15, 8, 10, tzinfo=UTC))
    noon = make_entry(
        food, meal_type="lunch", logged_at=datetime(2024, 3, 15, 12, 0, tzinfo=UTC)
    )

    assert sort_entries_chronologically([noon, late, early]) == [early, late, noon]
    assert group_entries_by_hour([noon, late, early]) == {
        8: [early, late],
        12: [noon],
    }
    assert entries_for_meal([noon, late], "lunch") == [noon]
    breakdown = meal_breakdown([noon, late, early])
    assert set(breakdown) == {"breakfast", "lunch", "dinner", "snack"}
    assert breakdown["breakfast"].calories == pytest.approx(200)
