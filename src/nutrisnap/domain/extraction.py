"""Structured model outputs for extraction and recognition."""

from pydantic import BaseModel, ConfigDict, Field


class NutritionItem(BaseModel):
    """One food item with estimated nutrition."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    name: str = Field(min_length=1, strict=True)
    calories: float = Field(ge=0.0, strict=True)
    protein: float = Field(ge=0.0, strict=True)
    carbs: float = Field(ge=0.0, strict=True)
    fats: float = Field(ge=0.0, strict=True)


class ExtractionResult(BaseModel):
    """Structured output for nutrition extraction."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    food_items: list[NutritionItem] = Field(alias="foodItems")


class RecognizedFood(BaseModel):
    """Food item identified in an image, without nutrition."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, strict=True)
    description: str = Field(strict=True)


class RecognitionResult(BaseModel):
    """Structured output for food recognition."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    food_items: list[RecognizedFood] = Field(alias="foodItems")
