"""Open Food Facts product API client."""

from dataclasses import dataclass

import httpx

from logwell.services.products import ProductClient


@dataclass
class HttpxOpenFoodFactsClient(ProductClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient())

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch the raw product payload for a barcode."""
        response = await self.http_client.get(
            f"{self.base_url}/product/{barcode}.json",
            headers={"Accept": "application/json"},
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
