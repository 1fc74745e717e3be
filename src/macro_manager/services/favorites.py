"""Favorites reconciliation keyed by food name."""

from collections.abc import Callable
from datetime import UTC, datetime
from uuid import uuid4

from macro_manager.domain.records import FavoriteRecord, FoodRecord


def _new_id() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(tz=UTC)


def find_favorite(favorites: list[FavoriteRecord], name: str) -> FavoriteRecord | None:
    """Return the favorite with exactly this name, if present."""
    for favorite in favorites:
        if favorite.name == name:
            return favorite
    return None


def is_favorite(favorites: list[FavoriteRecord], name: str) -> bool:
    """Return True when a favorite with this name exists."""
    return find_favorite(favorites, name) is not None


def toggle_favorite(
    favorites: list[FavoriteRecord],
    record: FoodRecord | FavoriteRecord,
    *,
    new_id: Callable[[], str] = _new_id,
    now: Callable[[], datetime] = _now,
) -> list[FavoriteRecord]:
    """Remove the favorite named like ``record`` or add a snapshot of it."""
    if is_favorite(favorites, record.name):
        return [favorite for favorite in favorites if favorite.name != record.name]
    snapshot = FavoriteRecord(
        id=new_id(),
        name=record.name,
        nutrients=record.nutrients,
        created_at=now(),
    )
    return [*favorites, snapshot]


def instantiate_from_favorite(
    favorite: FavoriteRecord,
    target_date: str,
    *,
    new_id: Callable[[], str] = _new_id,
    now: Callable[[], datetime] = _now,
) -> FoodRecord:
    """Create a new food entry on ``target_date`` from a favorite."""
    return FoodRecord(
        id=new_id(),
        name=favorite.name,
        nutrients=favorite.nutrients,
        date=target_date,
        created_at=now(),
        is_favorite_origin=True,
    )
