"""Application service holding the logged collections and derived views."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from macro_manager.domain.errors import PersistenceError
from macro_manager.domain.nutrition import MetricKey
from macro_manager.domain.records import (
    ActivityDraft,
    ActivityRecord,
    DailyAggregate,
    FavoriteRecord,
    FoodDraft,
    FoodRecord,
)
from macro_manager.services import aggregation, dates
from macro_manager.services import entries as entry_policy
from macro_manager.services import favorites as favorite_policy
from macro_manager.services.metrics import MetricSelection
from macro_manager.services.records import RecordRepository

_logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class Dashboard:
    """Trend chart and today's summary."""

    today: DailyAggregate
    metrics: list[MetricKey]
    metric_values: dict[MetricKey, float]
    trend: list[dict[str, object]]


@dataclass(frozen=True)
class DayLog:
    """Date-scoped log view, newest records first."""

    date: str
    window: list[str]
    entries: list[FoodRecord]
    activities: list[ActivityRecord]
    daily: DailyAggregate
    favorite_names: set[str]


@dataclass
class TrackerService:
    """Keeps food, activity and favorite collections consistent.

    Aggregates are recomputed after every food or activity mutation and the
    changed collection is written back to the repository. Store failures are
    logged; the in-memory state stays authoritative for the session.
    """

    repository: RecordRepository
    timezone_name: str | None = None
    new_id: Callable[[], str] = _new_id
    now: Callable[[], datetime] = _now
    entries: list[FoodRecord] = field(default_factory=list)
    activities: list[ActivityRecord] = field(default_factory=list)
    favorites: list[FavoriteRecord] = field(default_factory=list)
    selection: MetricSelection = field(default_factory=MetricSelection)
    selected_date: str = ""
    aggregates: list[DailyAggregate] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.selected_date:
            self.selected_date = self.today()
        self._recompute()

    def load(self) -> None:
        """Replace in-memory collections with the stored ones."""
        self.entries = self.repository.load_entries()
        self.activities = self.repository.load_activities()
        self.favorites = self.repository.load_favorites()
        self._recompute()
        _logger.info(
            "Loaded %s entries, %s activities, %s favorites",
            len(self.entries),
            len(self.activities),
            len(self.favorites),
        )

    def today(self) -> str:
        """Return today's calendar day."""
        return dates.today(self.timezone_name)

    # Navigation

    def select_date(self, day: str) -> str:
        """Navigate to a calendar day."""
        dates.parse_day(day)
        self.selected_date = day
        return day

    def shift_date(self, delta_days: int) -> str:
        """Move the navigated day by ``delta_days``."""
        self.selected_date = dates.shift(self.selected_date, delta_days)
        return self.selected_date

    def date_window(self, radius: int = dates.DEFAULT_RADIUS) -> list[str]:
        """Return the day strip around the navigated day."""
        return dates.window(self.selected_date, radius)

    # Food

    def save_food(
        self, candidate: FoodDraft, edit_target: FoodRecord | None = None
    ) -> FoodRecord:
        """Create or replace a food entry and return the saved record."""
        if edit_target is not None:
            edit_target = self._require_entry(edit_target.id)
        updated = entry_policy.save_food(
            self.entries,
            candidate,
            edit_target,
            selected_date=self.selected_date,
            new_id=self.new_id,
            now=self.now,
        )
        saved = (
            entry_policy.find_record(updated, edit_target.id)
            if edit_target is not None
            else updated[-1]
        )
        self.entries = updated
        self._entries_changed()
        return saved

    def edit_food(self, entry_id: str, candidate: FoodDraft) -> FoodRecord:
        """Replace the food entry with this id."""
        return self.save_food(candidate, self._require_entry(entry_id))

    def delete_food(self, entry_id: str) -> None:
        """Delete a food entry; its favorite, if any, is kept."""
        self._require_entry(entry_id)
        self.entries = entry_policy.delete_record(self.entries, entry_id)
        self._entries_changed()

    # Activities

    def save_activity(
        self, candidate: ActivityDraft, edit_target: ActivityRecord | None = None
    ) -> ActivityRecord:
        """Create or replace an activity and return the saved record."""
        if edit_target is not None:
            edit_target = self._require_activity(edit_target.id)
        updated = entry_policy.save_activity(
            self.activities,
            candidate,
            edit_target,
            selected_date=self.selected_date,
            new_id=self.new_id,
            now=self.now,
        )
        saved = (
            entry_policy.find_record(updated, edit_target.id)
            if edit_target is not None
            else updated[-1]
        )
        self.activities = updated
        self._activities_changed()
        return saved

    def edit_activity(
        self, activity_id: str, candidate: ActivityDraft
    ) -> ActivityRecord:
        """Replace the activity with this id."""
        return self.save_activity(candidate, self._require_activity(activity_id))

    def delete_activity(self, activity_id: str) -> None:
        """Delete an activity."""
        self._require_activity(activity_id)
        self.activities = entry_policy.delete_record(self.activities, activity_id)
        self._activities_changed()

    # Favorites

    def toggle_favorite(self, entry_id: str) -> bool:
        """Star or unstar the food named like this entry; return the new state."""
        entry = self._require_entry(entry_id)
        self.favorites = favorite_policy.toggle_favorite(
            self.favorites, entry, new_id=self.new_id, now=self.now
        )
        self._persist(self.repository.save_favorites, self.favorites)
        return favorite_policy.is_favorite(self.favorites, entry.name)

    def remove_favorite(self, favorite_id: str) -> None:
        """Unstar a favorite by id."""
        favorite = self._require_favorite(favorite_id)
        self.favorites = favorite_policy.toggle_favorite(self.favorites, favorite)
        self._persist(self.repository.save_favorites, self.favorites)

    def log_favorite(self, favorite_id: str, day: str | None = None) -> FoodRecord:
        """Log a new entry from a favorite on the navigated (or given) day."""
        favorite = self._require_favorite(favorite_id)
        if day is not None:
            dates.parse_day(day)
        record = favorite_policy.instantiate_from_favorite(
            favorite, day or self.selected_date, new_id=self.new_id, now=self.now
        )
        self.entries = [*self.entries, record]
        self._entries_changed()
        return record

    # Metrics

    def toggle_metric(self, key: MetricKey) -> MetricSelection:
        """Show or hide a metric on the dashboard."""
        self.selection = self.selection.toggle(key)
        return self.selection

    # Views

    def dashboard(self) -> Dashboard:
        """Return the trend chart and today's summary."""
        today = aggregation.find_day(self.aggregates, self.today())
        metrics = list(self.selection)
        return Dashboard(
            today=today,
            metrics=metrics,
            metric_values=aggregation.metric_values(today, metrics),
            trend=aggregation.trend(self.aggregates, metrics),
        )

    def day_log(self, day: str | None = None) -> DayLog:
        """Return the log for a day, defaulting to the navigated day."""
        resolved = day or self.selected_date
        dates.parse_day(resolved)
        daily = aggregation.find_day(self.aggregates, resolved)
        names = {entry.name for entry in daily.entries}
        return DayLog(
            date=resolved,
            window=dates.window(resolved),
            entries=list(reversed(daily.entries)),
            activities=list(reversed(daily.activities)),
            daily=daily,
            favorite_names={
                name
                for name in names
                if favorite_policy.is_favorite(self.favorites, name)
            },
        )

    def get_entry(self, entry_id: str) -> FoodRecord:
        """Return a food entry or raise LookupError."""
        return self._require_entry(entry_id)

    def get_activity(self, activity_id: str) -> ActivityRecord:
        """Return an activity or raise LookupError."""
        return self._require_activity(activity_id)

    def get_favorite(self, favorite_id: str) -> FavoriteRecord:
        """Return a favorite or raise LookupError."""
        return self._require_favorite(favorite_id)

    def _recompute(self) -> None:
        self.aggregates = aggregation.aggregate(self.entries, self.activities)

    def _entries_changed(self) -> None:
        self._recompute()
        self._persist(self.repository.save_entries, self.entries)

    def _activities_changed(self) -> None:
        self._recompute()
        self._persist(self.repository.save_activities, self.activities)

    def _persist(self, write: Callable[[list], None], collection: list) -> None:
        try:
            write(collection)
        except PersistenceError:
            _logger.exception("Failed to persist collection")

    def _require_entry(self, entry_id: str) -> FoodRecord:
        entry = entry_policy.find_record(self.entries, entry_id)
        if entry is None:
            raise LookupError(f"Food entry {entry_id} not found")
        return entry

    def _require_activity(self, activity_id: str) -> ActivityRecord:
        activity = entry_policy.find_record(self.activities, activity_id)
        if activity is None:
            raise LookupError(f"Activity {activity_id} not found")
        return activity

    def _require_favorite(self, favorite_id: str) -> FavoriteRecord:
        favorite = entry_policy.find_record(self.favorites, favorite_id)
        if favorite is None:
            raise LookupError(f"Favorite {favorite_id} not found")
        return favorite

