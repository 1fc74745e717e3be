"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from macro_manager.adapters.json_file_store import JsonFileRecordStore
from macro_manager.adapters.openai_estimation_client import OpenAIEstimationClient
from macro_manager.adapters.supabase_record_store import SupabaseRecordStore
from macro_manager.config import Settings, parse_store_backend
from macro_manager.services.estimation import EstimationService
from macro_manager.services.forms import ActivityForm, FoodForm
from macro_manager.services.records import RecordRepository, RecordStore
from macro_manager.services.tracker import TrackerService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    tracker_service: TrackerService
    estimation_service: EstimationService
    food_form: FoodForm
    activity_form: ActivityForm
    close_resources: Callable[[], Awaitable[None]]


def build_record_store(settings: Settings) -> RecordStore:
    """Create the configured record store backend."""
    backend = parse_store_backend(settings.store_backend)
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase backend requires SUPABASE_URL and key")
        return SupabaseRecordStore(
            create_client(settings.supabase_url, settings.supabase_service_key)
        )
    return JsonFileRecordStore(settings.data_dir)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    repository = RecordRepository(build_record_store(resolved_settings))
    tracker_service = TrackerService(
        repository=repository,
        timezone_name=resolved_settings.timezone,
    )
    tracker_service.load()

    openai_client = (
        OpenAIEstimationClient.create(resolved_settings.openai_api_key)
        if resolved_settings.openai_api_key
        else None
    )
    estimation_service = EstimationService(
        client=openai_client,
        model=resolved_settings.openai_model,
        image_model=resolved_settings.openai_image_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        tracker_service=tracker_service,
        estimation_service=estimation_service,
        food_form=FoodForm(estimation_service),
        activity_form=ActivityForm(),
        close_resources=close_resources,
    )
