"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from macro_manager.api.models import (
    ActivityCreate,
    ActivityFormEntry,
    ActivityFormStart,
    ActivityUpdate,
    DateSelection,
    DateShift,
    FavoriteLog,
    FoodEntryCreate,
    FoodEntryUpdate,
    FoodFormManual,
    FoodFormStart,
    ImageEstimate,
    PreviewUpdate,
    TextEstimate,
)
from macro_manager.app_logging import configure_logging
from macro_manager.containers import AppContainer
from macro_manager.domain.errors import EstimationError, ValidationError
from macro_manager.domain.nutrition import MetricKey
from macro_manager.services.forms import ActivityForm, FoodForm
from macro_manager.services.metrics import MetricSelection
from macro_manager.services.tracker import Dashboard, DayLog


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(ValidationError)
    async def validation_error(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(EstimationError)
    async def estimation_error(_: Request, exc: EstimationError) -> JSONResponse:
        logger.warning("Estimation failed: %s", exc)
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(LookupError)
    async def not_found(_: Request, exc: LookupError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/dashboard")
    async def dashboard(request: Request) -> dict[str, object]:
        """Trend chart points and today's summary."""
        return _format_dashboard(_container(request).tracker_service.dashboard())

    @app.get("/log")
    async def day_log(request: Request, date: str | None = None) -> dict[str, object]:
        """Log view for a day, defaulting to the navigated day."""
        return _format_day_log(_container(request).tracker_service.day_log(date))

    @app.get("/navigator")
    async def navigator(request: Request) -> dict[str, object]:
        """Navigated day, today and the surrounding day strip."""
        return _format_navigator(_container(request))

    @app.post("/navigator/select")
    async def select_date(body: DateSelection, request: Request) -> dict[str, object]:
        state_container = _container(request)
        state_container.tracker_service.select_date(body.date)
        return _format_navigator(state_container)

    @app.post("/navigator/shift")
    async def shift_date(body: DateShift, request: Request) -> dict[str, object]:
        state_container = _container(request)
        state_container.tracker_service.shift_date(body.days)
        return _format_navigator(state_container)

    @app.post("/entries", status_code=201)
    async def create_entry(
        body: FoodEntryCreate, request: Request
    ) -> dict[str, object]:
        tracker = _container(request).tracker_service
        entry = tracker.save_food(body.to_draft())
        logger.info("Logged food entry %s on %s", entry.id, entry.date)
        return {"entry": entry}

    @app.put("/entries/{entry_id}")
    async def update_entry(
        entry_id: str, body: FoodEntryUpdate, request: Request
    ) -> dict[str, object]:
        tracker = _container(request).tracker_service
        return {"entry": tracker.edit_food(entry_id, body.to_draft())}

    @app.delete("/entries/{entry_id}")
    async def delete_entry(entry_id: str, request: Request) -> dict[str, str]:
        _container(request).tracker_service.delete_food(entry_id)
        return {"status": "deleted"}

    @app.post("/entries/{entry_id}/favorite")
    async def toggle_favorite(entry_id: str, request: Request) -> dict[str, bool]:
        starred = _container(request).tracker_service.toggle_favorite(entry_id)
        return {"favorite": starred}

    @app.post("/activities", status_code=201)
    async def create_activity(
        body: ActivityCreate, request: Request
    ) -> dict[str, object]:
        tracker = _container(request).tracker_service
        return {"activity": tracker.save_activity(body.to_draft())}

    @app.put("/activities/{activity_id}")
    async def update_activity(
        activity_id: str, body: ActivityUpdate, request: Request
    ) -> dict[str, object]:
        tracker = _container(request).tracker_service
        return {"activity": tracker.edit_activity(activity_id, body.to_draft())}

    @app.delete("/activities/{activity_id}")
    async def delete_activity(activity_id: str, request: Request) -> dict[str, str]:
        _container(request).tracker_service.delete_activity(activity_id)
        return {"status": "deleted"}

    @app.get("/favorites")
    async def list_favorites(request: Request) -> dict[str, object]:
        return {"favorites": _container(request).tracker_service.favorites}

    @app.post("/favorites/{favorite_id}/log", status_code=201)
    async def log_favorite(
        favorite_id: str, request: Request, body: FavoriteLog | None = None
    ) -> dict[str, object]:
        tracker = _container(request).tracker_service
        entry = tracker.log_favorite(favorite_id, body.date if body else None)
        return {"entry": entry}

    @app.delete("/favorites/{favorite_id}")
    async def remove_favorite(favorite_id: str, request: Request) -> dict[str, str]:
        _container(request).tracker_service.remove_favorite(favorite_id)
        return {"status": "deleted"}

    @app.get("/metrics")
    async def metrics(request: Request) -> dict[str, object]:
        return _format_selection(_container(request).tracker_service.selection)

    @app.post("/metrics/{key}/toggle")
    async def toggle_metric(key: MetricKey, request: Request) -> dict[str, object]:
        selection = _container(request).tracker_service.toggle_metric(key)
        return _format_selection(selection)

    @app.post("/estimate/text")
    async def estimate_text(body: TextEstimate, request: Request) -> dict[str, object]:
        service = _container(request).estimation_service
        result = await service.estimate_from_text(body.description)
        return {"name": result.name, "nutrients": result.nutrients}

    @app.post("/estimate/image")
    async def estimate_image(
        body: ImageEstimate, request: Request
    ) -> dict[str, object]:
        service = _container(request).estimation_service
        result = await service.estimate_from_image(
            _decode_image(body.image_base64), body.mime_type
        )
        return {"name": result.name, "nutrients": result.nutrients}

    @app.get("/forms/food")
    async def food_form(request: Request) -> dict[str, object]:
        return _format_food_form(_container(request).food_form)

    @app.post("/forms/food/start")
    async def start_food_form(
        body: FoodFormStart, request: Request
    ) -> dict[str, object]:
        state_container = _container(request)
        form = state_container.food_form
        tracker = state_container.tracker_service
        if body.edit_id:
            form.start_edit(tracker.get_entry(body.edit_id))
        elif body.favorite_id:
            form.start_from_favorite(tracker.get_favorite(body.favorite_id))
        else:
            form.start_add()
        return _format_food_form(form)

    @app.post("/forms/food/manual")
    async def manual_food_form(
        body: FoodFormManual, request: Request
    ) -> dict[str, object]:
        form = _container(request).food_form
        form.enter_manual(body.name, body.values)
        return _format_food_form(form)

    @app.post("/forms/food/describe")
    async def describe_food_form(
        body: TextEstimate, request: Request
    ) -> dict[str, object]:
        form = _container(request).food_form
        await form.describe(body.description)
        return _format_food_form(form)

    @app.post("/forms/food/image")
    async def image_food_form(
        body: ImageEstimate, request: Request
    ) -> dict[str, object]:
        form = _container(request).food_form
        await form.analyze_image(_decode_image(body.image_base64), body.mime_type)
        return _format_food_form(form)

    @app.patch("/forms/food/preview")
    async def update_food_preview(
        body: PreviewUpdate, request: Request
    ) -> dict[str, object]:
        form = _container(request).food_form
        form.update_value(body.field, body.value)
        return _format_food_form(form)

    @app.post("/forms/food/back")
    async def back_food_form(request: Request) -> dict[str, object]:
        form = _container(request).food_form
        form.back()
        return _format_food_form(form)

    @app.post("/forms/food/confirm")
    async def confirm_food_form(request: Request) -> dict[str, object]:
        state_container = _container(request)
        entry = state_container.food_form.confirm(
            state_container.tracker_service.save_food
        )
        return {"entry": entry, **_format_food_form(state_container.food_form)}

    @app.post("/forms/food/cancel")
    async def cancel_food_form(request: Request) -> dict[str, object]:
        form = _container(request).food_form
        form.cancel()
        return _format_food_form(form)

    @app.get("/forms/activity")
    async def activity_form(request: Request) -> dict[str, object]:
        return _format_activity_form(_container(request).activity_form)

    @app.post("/forms/activity/start")
    async def start_activity_form(
        body: ActivityFormStart, request: Request
    ) -> dict[str, object]:
        state_container = _container(request)
        form = state_container.activity_form
        if body.edit_id:
            form.start_edit(state_container.tracker_service.get_activity(body.edit_id))
        else:
            form.start_add()
        return _format_activity_form(form)

    @app.post("/forms/activity/enter")
    async def enter_activity_form(
        body: ActivityFormEntry, request: Request
    ) -> dict[str, object]:
        form = _container(request).activity_form
        form.enter(body.name, body.calories_burned)
        return _format_activity_form(form)

    @app.post("/forms/activity/confirm")
    async def confirm_activity_form(request: Request) -> dict[str, object]:
        state_container = _container(request)
        activity = state_container.activity_form.confirm(
            state_container.tracker_service.save_activity
        )
        return {
            "activity": activity,
            **_format_activity_form(state_container.activity_form),
        }

    @app.post("/forms/activity/cancel")
    async def cancel_activity_form(request: Request) -> dict[str, object]:
        form = _container(request).activity_form
        form.cancel()
        return _format_activity_form(form)

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _decode_image(encoded: str) -> bytes:
    """Decode a base64 image, accepting an optional data URL prefix."""
    payload = encoded.split(",", maxsplit=1)[1] if "," in encoded else encoded
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Image must be base64 encoded") from exc


def _format_dashboard(dashboard: Dashboard) -> dict[str, object]:
    today = dashboard.today
    return {
        "date": today.date,
        "totals": today.totals,
        "calories_burned": today.calories_burned,
        "net_calories": today.net_calories,
        "metrics": [
            {
                "key": key.value,
                "label": key.label,
                "color": key.color,
                "value": dashboard.metric_values[key],
            }
            for key in dashboard.metrics
        ],
        "trend": dashboard.trend,
    }


def _format_day_log(log: DayLog) -> dict[str, object]:
    return {
        "date": log.date,
        "window": log.window,
        "entries": [
            {"favorite": entry.name in log.favorite_names, "entry": entry}
            for entry in log.entries
        ],
        "activities": log.activities,
        "totals": log.daily.totals,
        "calories_burned": log.daily.calories_burned,
        "net_calories": log.daily.net_calories,
    }


def _format_navigator(state_container: AppContainer) -> dict[str, object]:
    tracker = state_container.tracker_service
    return {
        "selected_date": tracker.selected_date,
        "today": tracker.today(),
        "window": tracker.date_window(),
    }


def _format_selection(selection: MetricSelection) -> dict[str, object]:
    return {
        "selected": [key.value for key in selection],
        "available": [
            {"key": key.value, "label": key.label, "color": key.color}
            for key in MetricKey
        ],
    }


def _format_food_form(form: FoodForm) -> dict[str, object]:
    return {
        "state": form.state.value,
        "preview": form.preview,
        "editing": form.edit_target.id if form.edit_target else None,
        "error": form.error,
    }


def _format_activity_form(form: ActivityForm) -> dict[str, object]:
    return {
        "state": form.state.value,
        "preview": form.preview,
        "editing": form.edit_target.id if form.edit_target else None,
    }
