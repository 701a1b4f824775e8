"""Nutrition extraction service using LLMs."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError as SchemaValidationError

from nutrisnap.domain.extraction import ExtractionResult
from nutrisnap.domain.submissions import ImageSubmission, Submission
from nutrisnap.errors import ExtractionError

_logger = logging.getLogger(__name__)

EXTRACTION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "foodItems": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "calories": {"type": "number", "minimum": 0},
                    "protein": {"type": "number", "minimum": 0},
                    "carbs": {"type": "number", "minimum": 0},
                    "fats": {"type": "number", "minimum": 0},
                },
                "required": ["name", "calories", "protein", "carbs", "fats"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["foodItems"],
    "additionalProperties": False,
}

BASE_PROMPT = (
    "You are a nutrition expert with deep knowledge of international cuisines, "
    "including Indian food. Identify every distinct food item in the source and "
    "estimate its nutrition.\n"
    "- Regional variations: the same dish differs between regions "
    "(a North Indian samosa is not a South Indian one). "
    "Name the regional variant you assume.\n"
    "- Preparation: frying, tandoor, and curries with oil or cream change the "
    "values significantly. Account for the visible or described method.\n"
    "For each item estimate the quantity and include it in the name "
    '(e.g. "1 bowl of dal tadka", "2 pieces of paneer tikka"). '
    "Report calories in kcal and protein, carbs and fats in grams for that "
    "quantity. Return an empty list if there is no food."
)


class StructuredModelClient(Protocol):
    """Interface for LLM calls with structured JSON output."""

    async def generate_structured(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        image_data_url: str | None,
        schema_name: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Return the parsed JSON object produced by the model."""


@dataclass
class ExtractionService:
    """Service that prepares extraction prompts and validates results."""

    client: StructuredModelClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def extract(self, source: Submission) -> ExtractionResult:
        """Extract nutrition records from a text or image submission."""
        if isinstance(source, ImageSubmission):
            prompt = f"{BASE_PROMPT}\nAnalyze the attached image."
            image_data_url: str | None = source.to_data_url()
        else:
            prompt = f'{BASE_PROMPT}\nDescription: "{source.description}"'
            image_data_url = None
        try:
            raw = await self.client.generate_structured(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                image_data_url=image_data_url,
                schema_name="nutrition_extract",
                schema=EXTRACTION_SCHEMA,
            )
        except Exception as exc:
            _logger.exception("Nutrition extraction call failed")
            raise ExtractionError() from exc
        try:
            return ExtractionResult.model_validate(raw)
        except SchemaValidationError as exc:
            _logger.warning("Nutrition extraction returned invalid output: %s", exc)
            raise ExtractionError() from exc
