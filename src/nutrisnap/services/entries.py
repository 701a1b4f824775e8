"""User-scoped access to the persisted food log."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrisnap.domain.chat import FoodLogProvider
from nutrisnap.domain.entries import DayGroup, FoodEntry, NutritionTotals
from nutrisnap.services.aggregation import daily_totals, group_by_day, recent_window

_logger = logging.getLogger(__name__)

MAX_LOG_ENTRIES = 500
CHAT_LOG_DAYS = 10
CHAT_LOG_LIMIT = 100


class EntryRepository(Protocol):
    """Persistence interface for food entries, partitioned by user."""

    def add_entries(self, user_id: UUID, entries: list[FoodEntry]) -> None:
        """Insert all entries atomically: all become visible or none do."""

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> None:
        """Delete one entry owned by the user; missing ids are ignored."""

    def list_entries_since(
        self, user_id: UUID, since: datetime, limit: int
    ) -> list[FoodEntry]:
        """Return up to ``limit`` entries since ``since``, newest first."""


@dataclass
class EntryLogService:
    """Service for reading and deleting a user's food entries."""

    repository: EntryRepository
    window_days: int = 10
    max_entries: int = MAX_LOG_ENTRIES

    def get_today(self, user_id: UUID, timezone_name: str) -> NutritionTotals:
        """Return today's totals in the viewer's timezone."""
        tz = ZoneInfo(timezone_name)
        now = datetime.now(tz=tz)
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        entries = self.repository.list_entries_since(
            user_id, start.astimezone(UTC), self.max_entries
        )
        self._warn_if_capped(user_id, entries)
        return daily_totals(entries, now.date(), tz)

    def get_recent(self, user_id: UUID, days: int | None = None) -> list[FoodEntry]:
        """Return entries from the last ``days`` days, newest first."""
        window = days if days is not None else self.window_days
        now = datetime.now(tz=UTC)
        entries = self.repository.list_entries_since(
            user_id, now - timedelta(days=window), self.max_entries
        )
        self._warn_if_capped(user_id, entries)
        return recent_window(entries, window, now)

    def get_log(
        self, user_id: UUID, timezone_name: str, days: int | None = None
    ) -> list[DayGroup]:
        """Return the recent log grouped by local day."""
        tz = ZoneInfo(timezone_name)
        entries = self.get_recent(user_id, days)
        return group_by_day(entries, datetime.now(tz=tz).date(), tz)

    def delete(self, user_id: UUID, entry_id: UUID) -> None:
        """Delete an entry; deleting an unknown id is a no-op."""
        self.repository.delete_entry(user_id, entry_id)

    def food_log_for_chat(self, user_id: UUID) -> list[FoodEntry]:
        """Return the bounded recent history used to ground the dietician."""
        now = datetime.now(tz=UTC)
        return self.repository.list_entries_since(
            user_id, now - timedelta(days=CHAT_LOG_DAYS), CHAT_LOG_LIMIT
        )

    def bind_food_log(self, user_id: UUID) -> FoodLogProvider:
        """Return a food log capability scoped to ``user_id``."""

        async def food_log() -> list[FoodEntry]:
            return self.food_log_for_chat(user_id)

        return food_log

    def _warn_if_capped(self, user_id: UUID, entries: list[FoodEntry]) -> None:
        if len(entries) >= self.max_entries:
            _logger.warning(
                "Food log fetch hit the %s entry cap; oldest entries are omitted",
                self.max_entries,
                extra={"user_id": str(user_id)},
            )
