"""Barcode product lookup producing candidate foods."""

import logging
from dataclasses import dataclass
from typing import Protocol

from logwell.domain.nutrition import NutritionInfo
from logwell.services.cache import MISSING, Cache

MIN_BARCODE_LENGTH = 8

_logger = logging.getLogger(__name__)


class ProductClient(Protocol):
    """Interface for barcode product lookups."""

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Return the raw product payload for a barcode."""


@dataclass
class ProductLookupService:
    """Looks up barcodes and turns products into food payloads."""

    client: ProductClient
    cache: Cache
    ttl_seconds: int = 86400

    async def lookup(self, barcode: str) -> dict[str, object] | None:
        """Return a candidate food payload, or None for unknown products."""
        cleaned = barcode.strip()
        if len(cleaned) < MIN_BARCODE_LENGTH:
            raise ValueError(f"Invalid barcode: {barcode!r}")

        cache_key = f"off:product:{cleaned}"
        cached = self.cache.lookup(cache_key)
        if cached is not MISSING:
            return cached

        payload = await self.client.get_product(cleaned)
        product = payload.get("product")
        if payload.get("status") == 0 or not isinstance(product, dict):
            _logger.info("Product not found for barcode %s", cleaned)
            parsed = None
        else:
            parsed = parse_product(str(payload.get("code") or cleaned), product)
        self.cache.store(cache_key, parsed, ttl_seconds=self.ttl_seconds)
        return parsed


def parse_product(barcode: str, product: dict[str, object]) -> dict[str, object]:
    """Convert an Open Food Facts product into a food payload."""
    nutriments = product.get("nutriments") or {}
    name = product.get("product_name_en") or product.get("product_name")
    brands = str(product.get("brands") or "")
    brand = brands.split(",")[0].strip() or None

    def nutrient(serving_key: str, per_100g_key: str) -> float:
        for key in (serving_key, per_100g_key):
            value = nutriments.get(key)
            if isinstance(value, int | float):
                return float(value)
        return 0.0

    return {
        "name": str(name or "Unknown Product"),
        "brand": brand,
        "barcode": barcode,
        "serving_description": _serving_description(product),
        "nutrition_per_serving": NutritionInfo(
            calories=round(nutrient("energy-kcal_serving", "energy-kcal_100g")),
            protein=round(nutrient("proteins_serving", "proteins_100g"), 1),
            carbs=round(nutrient("carbohydrates_serving", "carbohydrates_100g"), 1),
            fat=round(nutrient("fat_serving", "fat_100g"), 1),
            fiber=round(nutrient("fiber_serving", "fiber_100g"), 1),
            sugar=round(nutrient("sugars_serving", "sugars_100g"), 1),
            sodium=round(nutrient("sodium_serving", "sodium_100g")),
        ),
    }


def _serving_description(product: dict[str, object]) -> str:
    if product.get("serving_size"):
        return str(product["serving_size"])
    quantity = product.get("serving_quantity")
    unit = product.get("serving_quantity_unit")
    if quantity and unit:
        return f"{quantity} {unit}"
    if product.get("quantity"):
        return str(product["quantity"])
    return "1 serving"
