"""OpenAI Responses API client for food analysis."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from logwell.services.analysis import FoodAnalysisClient


@dataclass
class OpenAIFoodAnalysisClient(FoodAnalysisClient):
    """Food analysis backed by the OpenAI Responses API."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(cls, api_key: str, model: str) -> "OpenAIFoodAnalysisClient":
        """Create an OpenAI analysis client."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model)

    async def analyze(
        self,
        *,
        prompt: str,
        text: str | None,
        image_data_url: str | None,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Call the Responses API with structured outputs."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        if text:
            content.append({"type": "input_text", "text": f"Food: {text}"})
        if image_data_url:
            content.append({"type": "input_image", "image_url": image_data_url})

        response = await self.client.responses.create(
            model=self.model,
            input=[{"role": "user", "content": content}],
            text={
                "format": {
                    "type": "json_schema",
                    "name": "food_analysis",
                    "strict": True,
                    "schema": schema,
                }
            },
            store=False,
        )
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def close(self) -> None:
        """Close the underlying OpenAI client."""
        await self.client.close()
