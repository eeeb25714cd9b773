"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from logwell.adapters.json_file_store import JsonFileKeyValueStore
from logwell.adapters.memory_store import InMemoryKeyValueStore
from logwell.adapters.openai_analysis_client import OpenAIFoodAnalysisClient
from logwell.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from logwell.adapters.supabase_kv_store import SupabaseKeyValueStore
from logwell.config import Settings, resolve_storage_backend
from logwell.services.analysis import FoodAnalysisService
from logwell.services.cache import InMemoryCache
from logwell.services.foods import FoodLibrary
from logwell.services.logs import LogStore
from logwell.services.products import ProductLookupService
from logwell.services.profile import ProfileStore
from logwell.services.recipes import RecipeService
from logwell.services.stats import StatsService
from logwell.services.storage import KeyValueStore, StorageService


@dataclass
class AppContainer:
    """Holds application-wide state objects and services."""

    settings: Settings
    storage: StorageService
    food_library: FoodLibrary
    log_store: LogStore
    profile_store: ProfileStore
    recipe_service: RecipeService
    stats_service: StatsService
    product_service: ProductLookupService
    analysis_service: FoodAnalysisService | None
    close_resources: Callable[[], Awaitable[None]]

    async def initialize(self) -> None:
        """Load foods, profile and the selected day's log."""
        await self.food_library.load_foods()
        await self.profile_store.load_user_profile()
        await self.log_store.load_daily_log(self.log_store.selected_date)

    async def clear_all_data(self) -> None:
        """Remove every stored document and reset in-memory state."""
        await self.storage.clear_all_data()
        self.food_library.foods = []
        self.profile_store.user_profile = None
        self.log_store.current_day_log = None


def build_key_value_store(settings: Settings) -> KeyValueStore:
    """Create the key-value store for the configured backend."""
    backend = resolve_storage_backend(settings.storage_backend)
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage needs supabase_url and service key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client, table=settings.supabase_table)
    return JsonFileKeyValueStore.create(settings.storage_path)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    storage = StorageService(
        build_key_value_store(resolved_settings),
        key_prefix=resolved_settings.storage_key_prefix,
    )
    food_library = FoodLibrary(storage)
    product_client = HttpxOpenFoodFactsClient.create(
        resolved_settings.openfoodfacts_base_url
    )
    analysis_client = (
        OpenAIFoodAnalysisClient.create(
            api_key=resolved_settings.openai_api_key,
            model=resolved_settings.openai_model,
        )
        if resolved_settings.openai_api_key
        else None
    )

    async def close_resources() -> None:
        await product_client.close()
        if analysis_client is not None:
            await analysis_client.close()

    return AppContainer(
        settings=resolved_settings,
        storage=storage,
        food_library=food_library,
        log_store=LogStore(storage),
        profile_store=ProfileStore(storage),
        recipe_service=RecipeService(food_library),
        stats_service=StatsService(storage),
        product_service=ProductLookupService(
            client=product_client,
            cache=InMemoryCache(),
            ttl_seconds=resolved_settings.product_cache_ttl_seconds,
        ),
        analysis_service=(
            FoodAnalysisService(analysis_client) if analysis_client else None
        ),
        close_resources=close_resources,
    )
