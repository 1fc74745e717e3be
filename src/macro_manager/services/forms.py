"""State machines behind the add/edit food and activity forms."""

import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TypeVar

from macro_manager.domain.errors import EstimationError, ValidationError
from macro_manager.domain.estimation import EstimationResult
from macro_manager.domain.nutrition import MetricKey, NutrientProfile
from macro_manager.domain.records import (
    ActivityDraft,
    ActivityRecord,
    FavoriteRecord,
    FoodDraft,
    FoodRecord,
)
from macro_manager.services.estimation import EstimationService

_logger = logging.getLogger(__name__)

SaveResult = TypeVar("SaveResult")


class FormState(str, Enum):
    """Lifecycle of an add/edit form."""

    IDLE = "idle"
    COLLECTING_INPUT = "collecting-input"
    PREVIEWING_RESULT = "previewing-result"
    SAVED = "saved"


@dataclass(frozen=True)
class FoodPreview:
    """Candidate food values shown for confirmation."""

    name: str
    nutrients: NutrientProfile


@dataclass(frozen=True)
class ActivityPreview:
    """Candidate activity values shown for confirmation."""

    name: str
    calories_burned: int


@dataclass
class FoodForm:
    """Add/edit flow for food entries, with optional AI estimation."""

    estimation_service: EstimationService
    state: FormState = FormState.IDLE
    preview: FoodPreview | None = None
    edit_target: FoodRecord | None = None
    error: str | None = None
    _request_id: int = field(default=0, repr=False)

    def start_add(self) -> None:
        """Open the form for a new entry."""
        self._reset()
        self.state = FormState.COLLECTING_INPUT

    def start_edit(self, record: FoodRecord) -> None:
        """Open the form seeded with an existing entry."""
        self._reset()
        self.edit_target = record
        self.preview = FoodPreview(name=record.name, nutrients=record.nutrients)
        self.state = FormState.PREVIEWING_RESULT

    def start_from_favorite(self, favorite: FavoriteRecord) -> None:
        """Open the form for a new entry preset with a favorite's values."""
        self._reset()
        self.preview = FoodPreview(name=favorite.name, nutrients=favorite.nutrients)
        self.state = FormState.PREVIEWING_RESULT

    def enter_manual(self, name: str, values: dict[str, object]) -> FoodPreview:
        """Provide the candidate by hand instead of through estimation."""
        self._require(FormState.COLLECTING_INPUT)
        cleaned = name.strip()
        if not cleaned:
            raise ValidationError("Name is required")
        preview = FoodPreview(name=cleaned, nutrients=_parse_nutrients(values))
        self._show(preview)
        return preview

    async def describe(self, description: str) -> FoodPreview | None:
        """Estimate the candidate from text; None when the result is stale."""
        self._require(FormState.COLLECTING_INPUT)
        if not description.strip():
            raise ValidationError("Description is required")
        return await self._run_estimate(
            lambda: self.estimation_service.estimate_from_text(description)
        )

    async def analyze_image(
        self, image_bytes: bytes, mime_type: str | None = None
    ) -> FoodPreview | None:
        """Estimate the candidate from a photo; None when the result is stale."""
        self._require(FormState.COLLECTING_INPUT)
        return await self._run_estimate(
            lambda: self.estimation_service.estimate_from_image(image_bytes, mime_type)
        )

    async def _run_estimate(
        self, call: Callable[[], Awaitable[EstimationResult]]
    ) -> FoodPreview | None:
        self._request_id += 1
        request_id = self._request_id
        self.error = None
        try:
            result: EstimationResult = await call()
        except EstimationError as exc:
            if not self._is_current(request_id):
                _logger.info("Discarding failed estimation for abandoned form")
                return None
            self.error = str(exc)
            raise
        if not self._is_current(request_id):
            _logger.info("Discarding estimation result for abandoned form")
            return None
        preview = FoodPreview(name=result.name, nutrients=result.nutrients)
        self._show(preview)
        return preview

    def update_value(self, field_name: str, raw: object) -> FoodPreview:
        """Override the name or one nutrient of the preview."""
        preview = self._require_preview()
        if field_name == "name":
            cleaned = str(raw).strip()
            if not cleaned:
                raise ValidationError("Name is required")
            self.preview = replace(preview, name=cleaned)
            return self.preview
        try:
            key = MetricKey(field_name)
        except ValueError as exc:
            raise ValidationError(f"Unknown field: {field_name}") from exc
        nutrients = replace(
            preview.nutrients, **{key.value: _parse_number(raw, key.value)}
        )
        self.preview = replace(preview, nutrients=nutrients)
        return self.preview

    def back(self) -> None:
        """Discard the preview and return to input."""
        self._require(FormState.PREVIEWING_RESULT)
        self.preview = None
        self.error = None
        self.state = FormState.COLLECTING_INPUT

    def confirm(
        self, save: Callable[[FoodDraft, FoodRecord | None], SaveResult]
    ) -> SaveResult:
        """Save the previewed candidate and close the form."""
        preview = self._require_preview()
        draft = FoodDraft(
            name=preview.name,
            nutrients=preview.nutrients,
            id=self.edit_target.id if self.edit_target else None,
        )
        result = save(draft, self.edit_target)
        self.state = FormState.SAVED
        self._reset()
        return result

    def cancel(self) -> None:
        """Abandon the form from any state."""
        self._reset()

    def _show(self, preview: FoodPreview) -> None:
        self.preview = preview
        self.error = None
        self.state = FormState.PREVIEWING_RESULT

    def _require_preview(self) -> FoodPreview:
        self._require(FormState.PREVIEWING_RESULT)
        if self.preview is None:
            raise ValidationError("Nothing to preview")
        return self.preview

    def _is_current(self, request_id: int) -> bool:
        return (
            self.state == FormState.COLLECTING_INPUT
            and request_id == self._request_id
        )

    def _require(self, state: FormState) -> None:
        if self.state != state:
            raise ValidationError(
                f"Form is {self.state.value}, expected {state.value}"
            )

    def _reset(self) -> None:
        self._request_id += 1
        self.state = FormState.IDLE
        self.preview = None
        self.edit_target = None
        self.error = None


@dataclass
class ActivityForm:
    """Add/edit flow for activity entries."""

    state: FormState = FormState.IDLE
    preview: ActivityPreview | None = None
    edit_target: ActivityRecord | None = None

    def start_add(self) -> None:
        """Open the form for a new activity."""
        self._reset()
        self.state = FormState.COLLECTING_INPUT

    def start_edit(self, record: ActivityRecord) -> None:
        """Open the form seeded with an existing activity."""
        self._reset()
        self.edit_target = record
        self.preview = ActivityPreview(
            name=record.name, calories_burned=record.calories_burned
        )
        self.state = FormState.PREVIEWING_RESULT

    def enter(self, name: str, calories_burned: object) -> ActivityPreview:
        """Provide or correct the activity values."""
        if self.state not in {FormState.COLLECTING_INPUT, FormState.PREVIEWING_RESULT}:
            raise ValidationError(f"Form is {self.state.value}, expected input")
        cleaned = name.strip()
        if not cleaned:
            raise ValidationError("Activity name is required")
        self.preview = ActivityPreview(
            name=cleaned, calories_burned=_parse_burned(calories_burned)
        )
        self.state = FormState.PREVIEWING_RESULT
        return self.preview

    def confirm(
        self, save: Callable[[ActivityDraft, ActivityRecord | None], SaveResult]
    ) -> SaveResult:
        """Save the previewed activity and close the form."""
        if self.state != FormState.PREVIEWING_RESULT or self.preview is None:
            raise ValidationError(f"Form is {self.state.value}, nothing to save")
        draft = ActivityDraft(
            name=self.preview.name,
            calories_burned=self.preview.calories_burned,
            id=self.edit_target.id if self.edit_target else None,
        )
        result = save(draft, self.edit_target)
        self.state = FormState.SAVED
        self._reset()
        return result

    def cancel(self) -> None:
        """Abandon the form from any state."""
        self._reset()

    def _reset(self) -> None:
        self.state = FormState.IDLE
        self.preview = None
        self.edit_target = None


def _parse_number(raw: object, label: str) -> float:
    """Parse a numeric form value."""
    if isinstance(raw, bool):
        raise ValidationError(f"{label} must be a number")
    value: float | None = None
    if isinstance(raw, int | float | str):
        try:
            value = float(raw.strip() if isinstance(raw, str) else raw)
        except (OverflowError, ValueError):
            value = None
    if value is None or not math.isfinite(value):
        raise ValidationError(f"{label} must be a number")
    return value


def _parse_nutrients(values: dict[str, object]) -> NutrientProfile:
    """Parse nutrient inputs; sugar may be omitted."""
    parsed: dict[str, float] = {}
    for key in MetricKey:
        raw = values.get(key.value)
        if raw is None or raw == "":
            if key is MetricKey.SUGAR:
                parsed[key.value] = 0.0
                continue
            raise ValidationError(f"{key.value} is required")
        parsed[key.value] = _parse_number(raw, key.value)
    return NutrientProfile(**parsed)


def _parse_burned(raw: object) -> int:
    """Parse calories burned as a non-negative whole number."""
    value = _parse_number(raw, "calories burned") if raw not in (None, "") else None
    if value is None:
        raise ValidationError("Calories burned is required")
    return max(0, int(value))
