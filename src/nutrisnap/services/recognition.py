"""Food recognition service: names what is in an image, never how much."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError as SchemaValidationError

from nutrisnap.domain.extraction import RecognitionResult
from nutrisnap.domain.submissions import ImageSubmission
from nutrisnap.errors import RecognitionError
from nutrisnap.services.extraction import StructuredModelClient

_logger = logging.getLogger(__name__)

RECOGNITION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "foodItems": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                },
                "required": ["name", "description"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["foodItems"],
    "additionalProperties": False,
}

RECOGNITION_PROMPT = (
    "You are a food recognition expert covering world cuisines, including "
    "Indian food. Identify every distinct food item in the image. For each "
    "item give a short name and a description with the estimated quantity or "
    'serving size, e.g. {"name": "Roti", "description": "Two pieces of whole '
    'wheat flatbread"}. Do not provide any nutritional information. '
    "Return an empty list if there is no food."
)


@dataclass
class RecognitionService:
    """Service that lists the food items visible in an image."""

    client: StructuredModelClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def recognize(self, image: ImageSubmission) -> RecognitionResult:
        """Return recognized food names and descriptions."""
        try:
            raw = await self.client.generate_structured(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=RECOGNITION_PROMPT,
                image_data_url=image.to_data_url(),
                schema_name="food_recognition",
                schema=RECOGNITION_SCHEMA,
            )
        except Exception as exc:
            _logger.exception("Food recognition call failed")
            raise RecognitionError() from exc
        try:
            return RecognitionResult.model_validate(raw)
        except SchemaValidationError as exc:
            _logger.warning("Food recognition returned invalid output: %s", exc)
            raise RecognitionError() from exc
