"""AI food analysis producing candidate foods."""

import base64
from dataclasses import dataclass
from typing import Protocol

from logwell.domain.analysis import FoodAnalysis
from logwell.domain.nutrition import NutritionInfo

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "brand": {"anyOf": [{"type": "string"}, {"type": "null"}]},
        "servingSize": {"type": "string"},
        "nutrition": {
            "type": "object",
            "properties": {
                "calories": {"type": "number", "minimum": 0},
                "protein": {"type": "number", "minimum": 0},
                "carbs": {"type": "number", "minimum": 0},
                "fat": {"type": "number", "minimum": 0},
                "fiber": {"anyOf": [{"type": "number"}, {"type": "null"}]},
                "sugar": {"anyOf": [{"type": "number"}, {"type": "null"}]},
                "sodium": {"anyOf": [{"type": "number"}, {"type": "null"}]},
            },
            "required": [
                "calories",
                "protein",
                "carbs",
                "fat",
                "fiber",
                "sugar",
                "sodium",
            ],
            "additionalProperties": False,
        },
        "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
        "reasoning": {"anyOf": [{"type": "string"}, {"type": "null"}]},
    },
    "required": [
        "name",
        "brand",
        "servingSize",
        "nutrition",
        "confidence",
        "reasoning",
    ],
    "additionalProperties": False,
}

_PROMPT = (
    "Estimate the nutrition of the described or pictured food for one serving. "
    "Return a name, serving size, calories, macros in grams, sodium in mg, "
    "a confidence between 0 and 1 and a short reasoning."
)


class FoodAnalysisClient(Protocol):
    """Interface for LLM food analysis."""

    async def analyze(
        self,
        *,
        prompt: str,
        text: str | None,
        image_data_url: str | None,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Return structured analysis data."""


@dataclass
class FoodAnalysisService:
    """Runs food analysis and validates the result."""

    client: FoodAnalysisClient

    async def analyze(
        self, text: str | None = None, image_bytes: bytes | None = None
    ) -> FoodAnalysis:
        """Analyze a description and/or a photo of food."""
        if not text and not image_bytes:
            raise ValueError("Provide a description or an image to analyze")
        raw = await self.client.analyze(
            prompt=_PROMPT,
            text=text,
            image_data_url=_to_data_url(image_bytes) if image_bytes else None,
            schema=ANALYSIS_SCHEMA,
        )
        return FoodAnalysis.model_validate(raw)


def to_food_payload(analysis: FoodAnalysis) -> dict[str, object]:
    """Convert an accepted analysis into a food payload.

    Only the nutrition and serving size are used; confidence is for display.
    """
    nutrition = analysis.nutrition
    return {
        "name": analysis.name,
        "brand": analysis.brand,
        "serving_description": analysis.serving_size,
        "nutrition_per_serving": NutritionInfo(
            calories=nutrition.calories,
            protein=nutrition.protein,
            carbs=nutrition.carbs,
            fat=nutrition.fat,
            fiber=nutrition.fiber or 0.0,
            sugar=nutrition.sugar or 0.0,
            sodium=nutrition.sodium or 0.0,
        ),
    }


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
