"""Models for AI food analysis results."""

from pydantic import BaseModel, Field


class AnalyzedNutrition(BaseModel):
    """Nutrition estimate for the analyzed serving."""

    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    fiber: float | None = Field(default=None, ge=0.0)
    sugar: float | None = Field(default=None, ge=0.0)
    sodium: float | None = Field(default=None, ge=0.0)


class FoodAnalysis(BaseModel):
    """Structured output of a food analysis."""

    name: str
    brand: str | None = None
    serving_size: str = Field(alias="servingSize")
    nutrition: AnalyzedNutrition
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str | None = None

    model_config = {"populate_by_name": True}
