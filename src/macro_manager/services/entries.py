"""Create-or-replace policy for food and activity records."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol, TypeVar
from uuid import uuid4

from macro_manager.domain.errors import ValidationError
from macro_manager.domain.records import (
    ActivityDraft,
    ActivityRecord,
    FoodDraft,
    FoodRecord,
)
from macro_manager.services.dates import parse_day


class _Identified(Protocol):
    id: str


RecordT = TypeVar("RecordT", bound=_Identified)


def _new_id() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(tz=UTC)


def save_food(  # noqa: PLR0913
    collection: list[FoodRecord],
    candidate: FoodDraft,
    edit_target: FoodRecord | None = None,
    *,
    selected_date: str,
    new_id: Callable[[], str] = _new_id,
    now: Callable[[], datetime] = _now,
) -> list[FoodRecord]:
    """Save a food candidate, replacing ``edit_target`` when editing."""
    if edit_target is not None:
        _check_identity(candidate.id, edit_target.id)
        record = FoodRecord(
            id=edit_target.id,
            name=_require_name(candidate.name or edit_target.name),
            nutrients=candidate.nutrients or edit_target.nutrients,
            date=_check_day(candidate.date) or edit_target.date,
            created_at=candidate.created_at or edit_target.created_at,
            is_favorite_origin=edit_target.is_favorite_origin,
        )
        return _replace_or_append(collection, record)

    if candidate.nutrients is None:
        raise ValidationError("Nutrient values are required")
    record = FoodRecord(
        id=new_id(),
        name=_require_name(candidate.name),
        nutrients=candidate.nutrients,
        date=_check_day(candidate.date) or selected_date,
        created_at=candidate.created_at or now(),
    )
    return [*collection, record]


def save_activity(  # noqa: PLR0913
    collection: list[ActivityRecord],
    candidate: ActivityDraft,
    edit_target: ActivityRecord | None = None,
    *,
    selected_date: str,
    new_id: Callable[[], str] = _new_id,
    now: Callable[[], datetime] = _now,
) -> list[ActivityRecord]:
    """Save an activity candidate, replacing ``edit_target`` when editing."""
    if edit_target is not None:
        _check_identity(candidate.id, edit_target.id)
        burned = (
            edit_target.calories_burned
            if candidate.calories_burned is None
            else candidate.calories_burned
        )
        record = ActivityRecord(
            id=edit_target.id,
            name=_require_name(candidate.name or edit_target.name),
            calories_burned=_require_burned(burned),
            date=_check_day(candidate.date) or edit_target.date,
            created_at=candidate.created_at or edit_target.created_at,
        )
        return _replace_or_append(collection, record)

    record = ActivityRecord(
        id=new_id(),
        name=_require_name(candidate.name),
        calories_burned=_require_burned(candidate.calories_burned),
        date=_check_day(candidate.date) or selected_date,
        created_at=candidate.created_at or now(),
    )
    return [*collection, record]


def delete_record(collection: list[RecordT], record_id: str) -> list[RecordT]:
    """Return the collection without the record with this id."""
    return [record for record in collection if record.id != record_id]


def find_record(collection: list[RecordT], record_id: str) -> RecordT | None:
    """Return the record with this id, if present."""
    for record in collection:
        if record.id == record_id:
            return record
    return None


def _replace_or_append(collection: list[RecordT], record: RecordT) -> list[RecordT]:
    replaced = False
    updated: list[RecordT] = []
    for existing in collection:
        if existing.id == record.id:
            if not replaced:
                updated.append(record)
                replaced = True
            continue
        updated.append(existing)
    if not replaced:
        updated.append(record)
    return updated


def _check_identity(candidate_id: str | None, target_id: str) -> None:
    if candidate_id is not None and candidate_id != target_id:
        raise ValidationError(
            f"Candidate id {candidate_id!r} does not match edited record {target_id!r}"
        )


def _check_day(day: str | None) -> str | None:
    if day is not None:
        parse_day(day)
    return day


def _require_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Name is required")
    return cleaned


def _require_burned(value: int | None) -> int:
    if value is None:
        raise ValidationError("Calories burned is required")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Calories burned must be a whole number")
    if value < 0:
        raise ValidationError("Calories burned must not be negative")
    return value
