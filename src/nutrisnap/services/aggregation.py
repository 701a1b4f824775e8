"""Pure aggregation over food entries: totals, windows and day groups."""

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from nutrisnap.domain.entries import DayGroup, FoodEntry, NutritionTotals

TODAY_LABEL = "Today"
YESTERDAY_LABEL = "Yesterday"


def daily_totals(
    entries: Iterable[FoodEntry], reference_date: date, tz: ZoneInfo
) -> NutritionTotals:
    """Sum macros of entries created on ``reference_date`` in ``tz``."""
    total = NutritionTotals(calories=0.0, protein=0.0, carbs=0.0, fats=0.0)
    for entry in entries:
        if entry.created_at.astimezone(tz).date() != reference_date:
            continue
        total = NutritionTotals(
            calories=total.calories + entry.calories,
            protein=total.protein + entry.protein,
            carbs=total.carbs + entry.carbs,
            fats=total.fats + entry.fats,
        )
    return total


def recent_window(
    entries: Iterable[FoodEntry], days: int, reference_instant: datetime
) -> list[FoodEntry]:
    """Keep entries created within ``days`` of ``reference_instant``."""
    cutoff = reference_instant - timedelta(days=days)
    return [entry for entry in entries if entry.created_at >= cutoff]


def group_by_day(
    entries: Iterable[FoodEntry], today: date, tz: ZoneInfo
) -> list[DayGroup]:
    """Bucket entries by local day, ordered Today, Yesterday, then newest first.

    Entries within a bucket keep their input order.
    """
    buckets: dict[date, list[FoodEntry]] = {}
    for entry in entries:
        day = entry.created_at.astimezone(tz).date()
        buckets.setdefault(day, []).append(entry)

    groups = [
        DayGroup(day=day, label=day_label(day, today), entries=items)
        for day, items in buckets.items()
    ]
    groups.sort(key=lambda group: (_label_rank(group.label), -group.day.toordinal()))
    return groups


def day_label(day: date, today: date) -> str:
    """Return the display label for a calendar day."""
    if day == today:
        return TODAY_LABEL
    if day == today - timedelta(days=1):
        return YESTERDAY_LABEL
    return f"{day:%B} {day.day}, {day.year}"


def _label_rank(label: str) -> int:
    if label == TODAY_LABEL:
        return 0
    if label == YESTERDAY_LABEL:
        return 1
    return 2
