"""Tests for barcode product lookups."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from logwell.domain.nutrition import NutritionInfo
from logwell.services.cache import MISSING, InMemoryCache
from logwell.services.products import ProductLookupService, parse_product
from tests.conftest import FakeProductClient

BARCODE = "3017620422003"

PRODUCT = {
    "status": 1,
    "code": BARCODE,
    "product": {
        "product_name": "Nutella",
        "brands": "Ferrero, Nutella",
        "serving_size": "15 g",
        "nutriments": {
            "energy-kcal_serving": 80.4,
            "energy-kcal_100g": 539,
            "proteins_100g": 6.3,
            "carbohydrates_serving": 8.63,
            "fat_serving": 4.64,
            "sugars_100g": 56.3,
            "sodium_serving": 6.4,
        },
    },
}


def test_parse_product_prefers_serving_values() -> None:
    food = parse_product(BARCODE, PRODUCT["product"])

    assert food["name"] == "Nutella"
    assert food["brand"] == "Ferrero"
    assert food["barcode"] == BARCODE
    assert food["serving_description"] == "15 g"
    assert food["nutrition_per_serving"] == NutritionInfo(
        calories=80,
        protein=6.3,
        carbs=8.6,
        fat=4.6,
        fiber=0.0,
        sugar=56.3,
        sodium=6,
    )


def test_parse_product_fallbacks() -> None:
    food = parse_product(
        "12345678",
        {"serving_quantity": 30, "serving_quantity_unit": "g", "nutriments": {}},
    )

    assert food["name"] == "Unknown Product"
    assert food["brand"] is None
    assert food["serving_description"] == "30 g"
    assert food["nutrition_per_serving"] == NutritionInfo()

    assert parse_product("12345678", {"quantity": "1 l"})["serving_description"] == (
        "1 l"
    )
    assert parse_product("12345678", {})["serving_description"] == "1 serving"


def test_lookup_caches_results() -> None:
    client = FakeProductClient(payloads={BARCODE: PRODUCT})
    service = ProductLookupService(client=client, cache=InMemoryCache())

    first = asyncio.run(service.lookup(f" {BARCODE} "))
    second = asyncio.run(service.lookup(BARCODE))

    assert first == second
    assert first["name"] == "Nutella"
    assert client.calls == [BARCODE]


def test_lookup_unknown_product_is_cached_as_none() -> None:
    client = FakeProductClient()
    service = ProductLookupService(client=client, cache=InMemoryCache())

    assert asyncio.run(service.lookup("00000000")) is None
    assert asyncio.run(service.lookup("00000000")) is None
    assert client.calls == ["00000000"]


def test_lookup_rejects_short_barcodes() -> None:
    client = FakeProductClient()
    service = ProductLookupService(client=client, cache=InMemoryCache())

    with pytest.raises(ValueError, match="barcode"):
        asyncio.run(service.lookup("1234"))
    assert client.calls == []


def test_cache_expires_entries() -> None:
    now = datetime(2024, 3, 15, tzinfo=UTC)
    clock = {"now": now}
    cache = InMemoryCache(clock=lambda: clock["now"])

    cache.store("key", None, ttl_seconds=60)
    assert cache.lookup("key") is None

    clock["now"] = now + timedelta(seconds=61)
    assert cache.lookup("key") is MISSING
    assert len(cache) == 0
