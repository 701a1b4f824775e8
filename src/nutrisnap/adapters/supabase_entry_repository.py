"""Supabase repository for food entries."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from nutrisnap.domain.entries import FoodEntry
from nutrisnap.services.entries import EntryRepository

_COLUMNS = "id, user_id, name, calories, protein, carbs, fats, created_at"


@dataclass
class SupabaseEntryRepository(EntryRepository):
    """Supabase implementation for food entries."""

    client: Client
    table_name: str = "food_entries"

    def add_entries(self, user_id: UUID, entries: list[FoodEntry]) -> None:
        """Insert all entries in one bulk request, which commits atomically."""
        if not entries:
            return
        payload = [
            {
                "id": str(entry.id),
                "user_id": str(user_id),
                "name": entry.name,
                "calories": entry.calories,
                "protein": entry.protein,
                "carbs": entry.carbs,
                "fats": entry.fats,
                "created_at": entry.created_at.isoformat(),
            }
            for entry in entries
        ]
        response = self.client.table(self.table_name).insert(payload).execute()
        if response.data is not None and len(response.data) != len(payload):
            raise RuntimeError("Failed to create food entries")

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> None:
        """Delete an entry owned by the user."""
        self.client.table(self.table_name).delete().eq("id", str(entry_id)).eq(
            "user_id", str(user_id)
        ).execute()

    def list_entries_since(
        self, user_id: UUID, since: datetime, limit: int
    ) -> list[FoodEntry]:
        """Return recent entries for a user, newest first."""
        response = (
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("created_at", since.isoformat())
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> FoodEntry:
    return FoodEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name", "")),
        calories=float(row.get("calories", 0.0)),
        protein=float(row.get("protein", 0.0)),
        carbs=float(row.get("carbs", 0.0)),
        fats=float(row.get("fats", 0.0)),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
