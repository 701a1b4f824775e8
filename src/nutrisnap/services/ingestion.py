"""Ingestion pipeline: submission -> model extraction -> persisted entries."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from nutrisnap.domain.entries import FoodEntry
from nutrisnap.domain.extraction import NutritionItem, RecognizedFood
from nutrisnap.domain.submissions import ImageSubmission, Submission, TextSubmission
from nutrisnap.errors import EmptyResultError, PersistenceError, ValidationError
from nutrisnap.services.entries import EntryRepository
from nutrisnap.services.extraction import ExtractionService
from nutrisnap.services.recognition import RecognitionService

_logger = logging.getLogger(__name__)

MIN_DESCRIPTION_LENGTH = 3

IngestionStrategy = Literal["direct", "two_stage"]


@dataclass
class IngestionService:
    """Turns a user submission into persisted food entries."""

    extraction_service: ExtractionService
    recognition_service: RecognitionService
    repository: EntryRepository
    strategy: IngestionStrategy = "direct"

    async def ingest(self, user_id: UUID, submission: Submission) -> list[FoodEntry]:
        """Analyze a submission and persist every extracted item atomically."""
        validate_submission(submission)
        if self.strategy == "two_stage" and isinstance(submission, ImageSubmission):
            items = await self._recognize_then_extract(submission)
        else:
            result = await self.extraction_service.extract(submission)
            items = result.food_items
        if not items:
            raise EmptyResultError()

        entries = build_entries(user_id, items, datetime.now(tz=UTC))
        try:
            self.repository.add_entries(user_id, entries)
        except Exception as exc:
            _logger.exception(
                "Failed to save food entries",
                extra={"user_id": str(user_id), "count": len(entries)},
            )
            raise PersistenceError() from exc
        _logger.info(
            "Logged %s food entries for user %s (%s)",
            len(entries),
            user_id,
            self.strategy,
        )
        return entries

    async def _recognize_then_extract(
        self, image: ImageSubmission
    ) -> list[NutritionItem]:
        recognition = await self.recognition_service.recognize(image)
        if not recognition.food_items:
            raise EmptyResultError()
        results = await asyncio.gather(
            *(
                self.extraction_service.extract(_describe(food))
                for food in recognition.food_items
            )
        )
        return [item for result in results for item in result.food_items]


def validate_submission(submission: Submission) -> None:
    """Reject malformed submissions before any model call."""
    if isinstance(submission, TextSubmission):
        if len(submission.description.strip()) < MIN_DESCRIPTION_LENGTH:
            raise ValidationError("Please enter a more descriptive food item.")
        return
    if not submission.mime_type.startswith("image/"):
        raise ValidationError("Invalid image format. Must be an image.")
    if not submission.data:
        raise ValidationError("Image is empty.")


def build_entries(
    user_id: UUID, items: list[NutritionItem], created_at: datetime
) -> list[FoodEntry]:
    """Create entries with fresh ids, copying nutrition verbatim."""
    return [
        FoodEntry(
            id=uuid4(),
            user_id=user_id,
            name=item.name,
            calories=item.calories,
            protein=item.protein,
            carbs=item.carbs,
            fats=item.fats,
            created_at=created_at,
        )
        for item in items
    ]


def _describe(food: RecognizedFood) -> TextSubmission:
    if food.description.strip():
        return TextSubmission(description=f"{food.name}: {food.description}")
    return TextSubmission(description=food.name)
