"""Daily aggregation of food and activity records."""

from collections.abc import Iterable

from macro_manager.domain.nutrition import MetricKey, NutrientProfile
from macro_manager.domain.records import ActivityRecord, DailyAggregate, FoodRecord

TREND_DAYS = 7


def aggregate(
    food_records: Iterable[FoodRecord], activity_records: Iterable[ActivityRecord]
) -> list[DailyAggregate]:
    """Group records by date and sum them, ordered by ascending date.

    Only dates that appear in at least one of the inputs produce an
    aggregate. Records keep their input order within a day.
    """
    entries_by_date: dict[str, list[FoodRecord]] = {}
    activities_by_date: dict[str, list[ActivityRecord]] = {}
    for entry in food_records:
        entries_by_date.setdefault(entry.date, []).append(entry)
        activities_by_date.setdefault(entry.date, [])
    for activity in activity_records:
        activities_by_date.setdefault(activity.date, []).append(activity)
        entries_by_date.setdefault(activity.date, [])

    return [
        _build_day(day, entries_by_date[day], activities_by_date[day])
        for day in sorted(entries_by_date)
    ]


def _build_day(
    day: str, entries: list[FoodRecord], activities: list[ActivityRecord]
) -> DailyAggregate:
    totals = NutrientProfile.zero()
    for entry in entries:
        totals = totals + entry.nutrients
    return DailyAggregate(
        date=day,
        entries=entries,
        activities=activities,
        totals=totals,
        calories_burned=sum(activity.calories_burned for activity in activities),
    )


def empty_aggregate(day: str) -> DailyAggregate:
    """Return an aggregate for a day with nothing logged."""
    return DailyAggregate(date=day)


def find_day(aggregates: Iterable[DailyAggregate], day: str) -> DailyAggregate:
    """Return the aggregate for ``day``, or an empty one."""
    for daily in aggregates:
        if daily.date == day:
            return daily
    return empty_aggregate(day)


def trend(
    aggregates: list[DailyAggregate],
    metrics: Iterable[MetricKey],
    days: int = TREND_DAYS,
) -> list[dict[str, object]]:
    """Return chart points for the most recent logged days."""
    keys = list(metrics)
    recent = aggregates[-days:] if days > 0 else []
    points: list[dict[str, object]] = []
    for daily in recent:
        point: dict[str, object] = {"date": daily.date}
        for key in keys:
            point[key.value] = daily.totals.value(key)
        points.append(point)
    return points


def metric_values(
    daily: DailyAggregate, metrics: Iterable[MetricKey]
) -> dict[MetricKey, float]:
    """Return summary-card values for the selected metrics."""
    return {key: daily.totals.value(key) for key in metrics}
