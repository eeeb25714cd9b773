"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from logwell.adapters.openai_analysis_client import OpenAIFoodAnalysisClient
from logwell.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str) -> None:
        self.responses = _FakeResponses(output_text)


def test_openai_analysis_client_parses_output() -> None:
    fake = _FakeOpenAI(json.dumps({"name": "Soup"}))
    client = OpenAIFoodAnalysisClient(client=fake, model="gpt-4o-mini")

    result = asyncio.run(
        client.analyze(
            prompt="Estimate nutrition",
            text="tomato soup",
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
            schema={"type": "object"},
        )
    )

    assert result == {"name": "Soup"}
    payload = fake.responses.last_payload
    assert payload["model"] == "gpt-4o-mini"
    assert payload["store"] is False
    assert payload["text"]["format"]["strict"] is True
    content = payload["input"][0]["content"]
    assert [part["type"] for part in content] == [
        "input_text",
        "input_text",
        "input_image",
    ]


def test_openai_analysis_client_rejects_empty_output() -> None:
    client = OpenAIFoodAnalysisClient(client=_FakeOpenAI(""), model="gpt-4o-mini")

    with pytest.raises(RuntimeError):
        asyncio.run(
            client.analyze(
                prompt="Estimate nutrition",
                text="soup",
                image_data_url=None,
                schema={"type": "object"},
            )
        )


def test_openfoodfacts_client_fetches_product() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v0/product/12345678.json"
        return httpx.Response(200, json={"status": 1, "product": {"brands": "X"}})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxOpenFoodFactsClient(
        base_url="https://world.openfoodfacts.org/api/v0", http_client=async_client
    )

    payload = asyncio.run(client.get_product("12345678"))

    assert payload["product"] == {"brands": "X"}


def test_openfoodfacts_client_raises_on_error() -> None:
    transport = httpx.MockTransport(lambda _request: httpx.Response(500))
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxOpenFoodFactsClient(
        base_url="https://world.openfoodfacts.org/api/v0", http_client=async_client
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.get_product("12345678"))
