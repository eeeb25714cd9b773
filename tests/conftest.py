"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from logwell.adapters.memory_store import InMemoryKeyValueStore
from logwell.config import Settings
from logwell.containers import AppContainer
from logwell.domain.foods import Food
from logwell.domain.logs import FoodEntry
from logwell.domain.nutrition import NutritionInfo
from logwell.services.analysis import FoodAnalysisClient, FoodAnalysisService
from logwell.services.cache import InMemoryCache
from logwell.services.foods import FoodLibrary
from logwell.services.logs import LogStore
from logwell.services.products import ProductClient, ProductLookupService
from logwell.services.profile import ProfileStore
from logwell.services.recipes import RecipeService
from logwell.services.stats import StatsService
from logwell.services.storage import StorageService

TODAY = "2024-03-15"


@dataclass
class FlakyKeyValueStore(InMemoryKeyValueStore):
    """In-memory store that can be told to reject reads or writes."""

    fail_reads: bool = False
    fail_writes: bool = False

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise OSError("read failed")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        await super().set(key, value)


@dataclass
class FakeProductClient(ProductClient):
    """Fake product client serving payloads by barcode."""

    payloads: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def get_product(self, barcode: str) -> dict[str, object]:
        self.calls.append(barcode)
        return self.payloads.get(barcode, {"status": 0, "code": barcode})


@dataclass
class FakeAnalysisClient(FoodAnalysisClient):
    """Fake analysis client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "name": "Chicken salad",
            "brand": None,
            "servingSize": "1 bowl (250 g)",
            "nutrition": {
                "calories": 420,
                "protein": 35,
                "carbs": 12,
                "fat": 24,
                "fiber": None,
                "sugar": 4,
                "sodium": 610,
            },
            "confidence": 0.7,
            "reasoning": "Grilled chicken with dressing",
        }
    )
    calls: list[dict[str, object]] = field(default_factory=list)

    async def analyze(
        self,
        *,
        prompt: str,
        text: str | None,
        image_data_url: str | None,
        schema: dict[str, object],
    ) -> dict[str, object]:
        self.calls.append(
            {"prompt": prompt, "text": text, "image_data_url": image_data_url}
        )
        return self.payload


def make_food(  # noqa: PLR0913
    name: str = "Oatmeal",
    calories: float = 100.0,
    protein: float = 10.0,
    carbs: float = 20.0,
    fat: float = 5.0,
    brand: str | None = None,
    category: str | None = None,
) -> Food:
    now = datetime(2024, 3, 1, 8, 0, tzinfo=UTC)
    return Food(
        id=uuid4().hex,
        name=name,
        brand=brand,
        category=category,
        nutrition_per_serving=NutritionInfo(
            calories=calories, protein=protein, carbs=carbs, fat=fat
        ),
        serving_description="1 cup",
        created_at=now,
        updated_at=now,
    )


def make_entry(
    food: Food | None,
    quantity: object = 1.0,
    meal_type: str = "breakfast",
    logged_at: datetime | None = None,
) -> FoodEntry:
    return FoodEntry(
        id=uuid4().hex,
        food_id=food.id if food else "missing",
        food=food,
        quantity=quantity,
        meal_type=meal_type,
        logged_at=logged_at or datetime(2024, 3, 15, 8, 0, tzinfo=UTC),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(storage_backend="memory", openai_api_key=None)


@pytest.fixture
def kv_store() -> FlakyKeyValueStore:
    return FlakyKeyValueStore()


@pytest.fixture
def storage(kv_store: FlakyKeyValueStore) -> StorageService:
    return StorageService(kv_store)


@pytest.fixture
def log_store(storage: StorageService) -> LogStore:
    return LogStore(storage, today=lambda: TODAY)


@pytest.fixture
def product_client() -> FakeProductClient:
    return FakeProductClient()


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def container(
    settings: Settings,
    storage: StorageService,
    log_store: LogStore,
    product_client: FakeProductClient,
    analysis_client: FakeAnalysisClient,
) -> AppContainer:
    food_library = FoodLibrary(storage)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        storage=storage,
        food_library=food_library,
        log_store=log_store,
        profile_store=ProfileStore(storage),
        recipe_service=RecipeService(food_library),
        stats_service=StatsService(storage),
        product_service=ProductLookupService(
            client=product_client, cache=InMemoryCache()
        ),
        analysis_service=FoodAnalysisService(analysis_client),
        close_resources=close_resources,
    )
