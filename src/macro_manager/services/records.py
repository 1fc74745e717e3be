"""Record store interface and the serialized collection format."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from macro_manager.domain.nutrition import NutrientProfile
from macro_manager.domain.records import ActivityRecord, FavoriteRecord, FoodRecord

ENTRIES = "entries"
ACTIVITIES = "activities"
FAVORITES = "favorites"
COLLECTIONS = (ENTRIES, ACTIVITIES, FAVORITES)

_logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Key-value storage of serialized collections."""

    def load(self, collection: str) -> str | None:
        """Return the stored blob for a collection, if any."""

    def save(self, collection: str, blob: str) -> None:
        """Replace the stored blob for a collection."""


@dataclass
class RecordRepository:
    """Reads and writes typed collections through a record store."""

    store: RecordStore

    def load_entries(self) -> list[FoodRecord]:
        """Load food entries."""
        return [_parse_food(row) for row in self._load_rows(ENTRIES)]

    def load_activities(self) -> list[ActivityRecord]:
        """Load activity entries."""
        return [_parse_activity(row) for row in self._load_rows(ACTIVITIES)]

    def load_favorites(self) -> list[FavoriteRecord]:
        """Load favorites."""
        return [_parse_favorite(row) for row in self._load_rows(FAVORITES)]

    def save_entries(self, entries: list[FoodRecord]) -> None:
        """Persist food entries."""
        self._save_rows(ENTRIES, [_dump_food(entry) for entry in entries])

    def save_activities(self, activities: list[ActivityRecord]) -> None:
        """Persist activity entries."""
        self._save_rows(ACTIVITIES, [_dump_activity(item) for item in activities])

    def save_favorites(self, favorites: list[FavoriteRecord]) -> None:
        """Persist favorites."""
        self._save_rows(FAVORITES, [_dump_favorite(item) for item in favorites])

    def _load_rows(self, collection: str) -> list[dict[str, object]]:
        blob = self.store.load(collection)
        if not blob:
            return []
        rows = json.loads(blob)
        _logger.debug("Loaded %s rows from %s", len(rows), collection)
        return rows

    def _save_rows(self, collection: str, rows: list[dict[str, object]]) -> None:
        self.store.save(collection, json.dumps(rows))


def _number(row: dict[str, object], key: str) -> float:
    value = row.get(key)
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _parse_nutrients(row: dict[str, object]) -> NutrientProfile:
    return NutrientProfile(
        calories=_number(row, "calories"),
        protein=_number(row, "protein"),
        fiber=_number(row, "fiber"),
        carbs=_number(row, "carbs"),
        fat=_number(row, "fat"),
        sugar=_number(row, "sugar"),
    )


def _dump_nutrients(nutrients: NutrientProfile) -> dict[str, object]:
    return {
        "calories": nutrients.calories,
        "protein": nutrients.protein,
        "fiber": nutrients.fiber,
        "carbs": nutrients.carbs,
        "fat": nutrients.fat,
        "sugar": nutrients.sugar or 0,
    }


def _parse_food(row: dict[str, object]) -> FoodRecord:
    return FoodRecord(
        id=str(row["id"]),
        name=str(row["name"]),
        nutrients=_parse_nutrients(row),
        date=str(row["date"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        is_favorite_origin=bool(row.get("is_favorite", False)),
    )


def _dump_food(entry: FoodRecord) -> dict[str, object]:
    return {
        "id": entry.id,
        "name": entry.name,
        **_dump_nutrients(entry.nutrients),
        "date": entry.date,
        "created_at": entry.created_at.isoformat(),
        "is_favorite": entry.is_favorite_origin,
    }


def _parse_activity(row: dict[str, object]) -> ActivityRecord:
    return ActivityRecord(
        id=str(row["id"]),
        name=str(row["name"]),
        calories_burned=int(_number(row, "calories_burned")),
        date=str(row["date"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )


def _dump_activity(activity: ActivityRecord) -> dict[str, object]:
    return {
        "id": activity.id,
        "name": activity.name,
        "calories_burned": activity.calories_burned,
        "date": activity.date,
        "created_at": activity.created_at.isoformat(),
    }


def _parse_favorite(row: dict[str, object]) -> FavoriteRecord:
    return FavoriteRecord(
        id=str(row["id"]),
        name=str(row["name"]),
        nutrients=_parse_nutrients(row),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )


def _dump_favorite(favorite: FavoriteRecord) -> dict[str, object]:
    return {
        "id": favorite.id,
        "name": favorite.name,
        **_dump_nutrients(favorite.nutrients),
        "created_at": favorite.created_at.isoformat(),
        "is_favorite": True,
    }
