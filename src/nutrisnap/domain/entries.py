"""Domain models for logged food entries."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID


@dataclass(frozen=True)
class FoodEntry:
    """A single logged food item owned by one user."""

    id: UUID
    user_id: UUID
    name: str
    calories: float
    protein: float
    carbs: float
    fats: float
    created_at: datetime

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "id": str(self.id),
            "name": self.name,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class NutritionTotals:
    """Summed macros over a set of entries."""

    calories: float
    protein: float
    carbs: float
    fats: float


@dataclass(frozen=True)
class DayGroup:
    """Entries that fall on one calendar day of the viewer."""

    day: date
    label: str
    entries: list[FoodEntry]
