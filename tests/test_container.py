"""Tests for container wiring."""

import asyncio
from pathlib import Path

import pytest

from logwell.adapters.json_file_store import JsonFileKeyValueStore
from logwell.adapters.memory_store import InMemoryKeyValueStore
from logwell.config import Settings
from logwell.containers import AppContainer, build_container, build_key_value_store
from tests.conftest import TODAY, make_food


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert isinstance(container.storage.store, InMemoryKeyValueStore)
    assert container.log_store is not None
    assert container.analysis_service is None
    asyncio.run(container.close_resources())


def test_build_container_with_openai_key() -> None:
    container = build_container(
        Settings(storage_backend="memory", openai_api_key="openai-key")
    )

    assert container.analysis_service is not None
    asyncio.run(container.close_resources())


def test_build_key_value_store_backends(tmp_path: Path) -> None:
    store = build_key_value_store(
        Settings(storage_backend="file", storage_path=str(tmp_path / "d.json"))
    )
    assert isinstance(store, JsonFileKeyValueStore)
    assert store.path == tmp_path / "d.json"

    with pytest.raises(ValueError, match="Supabase"):
        build_key_value_store(
            Settings(storage_backend="supabase", supabase_url=None)
        )


def test_initialize_loads_state(container: AppContainer) -> None:
    food = make_food()
    asyncio.run(container.storage.save_foods([food]))
    asyncio.run(container.log_store.add_entry(food, 1, "lunch"))
    container.log_store.current_day_log = None

    asyncio.run(container.initialize())

    assert container.food_library.foods == [food]
    assert container.profile_store.user_profile is None
    assert container.log_store.current_day_log.date == TODAY
