"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest

from macro_manager.config import Settings
from macro_manager.containers import AppContainer
from macro_manager.domain.errors import PersistenceError
from macro_manager.domain.nutrition import NutrientProfile
from macro_manager.domain.records import ActivityRecord, FoodRecord
from macro_manager.services.estimation import EstimationClient, EstimationService
from macro_manager.services.forms import ActivityForm, FoodForm
from macro_manager.services.records import RecordRepository, RecordStore
from macro_manager.services.tracker import TrackerService

FIXED_NOW = datetime(2024, 3, 10, 8, 30, tzinfo=UTC)


def food(  # noqa: PLR0913
    record_id: str,
    day: str,
    name: str = "Apple",
    calories: float = 95,
    protein: float = 0.5,
    fiber: float = 4.4,
    carbs: float = 25,
    fat: float = 0.3,
    sugar: float | None = 19,
) -> FoodRecord:
    return FoodRecord(
        id=record_id,
        name=name,
        nutrients=NutrientProfile(
            calories=calories,
            protein=protein,
            fiber=fiber,
            carbs=carbs,
            fat=fat,
            sugar=sugar,
        ),
        date=day,
        created_at=FIXED_NOW,
    )


def activity(
    record_id: str, day: str, name: str = "Run", calories_burned: int = 300
) -> ActivityRecord:
    return ActivityRecord(
        id=record_id,
        name=name,
        calories_burned=calories_burned,
        date=day,
        created_at=FIXED_NOW,
    )


@dataclass
class InMemoryRecordStore(RecordStore):
    """In-memory record store for tests."""

    blobs: dict[str, str] = field(default_factory=dict)
    writes: list[str] = field(default_factory=list)

    def load(self, collection: str) -> str | None:
        return self.blobs.get(collection)

    def save(self, collection: str, blob: str) -> None:
        self.blobs[collection] = blob
        self.writes.append(collection)

    def rows(self, collection: str) -> list[dict[str, object]]:
        return json.loads(self.blobs.get(collection, "[]"))


@dataclass
class FailingRecordStore(RecordStore):
    """Record store whose writes always fail."""

    def load(self, collection: str) -> str | None:
        return None

    def save(self, collection: str, blob: str) -> None:
        raise PersistenceError(f"Failed to save {collection}")


@dataclass
class FakeEstimationClient(EstimationClient):
    """Fake estimation client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "name": "Banana",
            "calories": 105,
            "protein": 1.3,
            "fiber": 3.1,
            "carbs": 27,
            "fat": 0.4,
            "sugar": 14,
            "confidence": 0.9,
        }
    )
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def estimate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
    ) -> str:
        self.calls.append(
            {"model": model, "prompt": prompt, "image_data_url": image_data_url}
        )
        if self.error is not None:
            raise self.error
        return json.dumps(self.payload)


@dataclass
class BlockingEstimationClient(FakeEstimationClient):
    """Fake estimation client that waits until released."""

    started: asyncio.Event = field(default_factory=asyncio.Event)
    release: asyncio.Event = field(default_factory=asyncio.Event)

    async def estimate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
    ) -> str:
        self.started.set()
        await self.release.wait()
        return await super().estimate(
            model=model,
            reasoning_effort=reasoning_effort,
            store=store,
            prompt=prompt,
            schema=schema,
            image_data_url=image_data_url,
        )


def make_estimation_service(
    client: EstimationClient | None,
) -> EstimationService:
    return EstimationService(
        client=client,
        model="gpt-5.2",
        image_model="gpt-5.2-vision",
        reasoning_effort="low",
        store=False,
    )


def make_tracker(
    store: RecordStore | None = None, selected_date: str = "2024-03-10"
) -> TrackerService:
    ids = iter(f"id-{index}" for index in range(1, 1000))
    return TrackerService(
        repository=RecordRepository(store or InMemoryRecordStore()),
        new_id=lambda: next(ids),
        now=lambda: FIXED_NOW,
        selected_date=selected_date,
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        openai_api_key=None,
        supabase_url=None,
        supabase_service_key=None,
        store_backend="json",
        data_dir=tmp_path / "data",
        timezone="UTC",
    )


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def estimation_client() -> FakeEstimationClient:
    return FakeEstimationClient()


@pytest.fixture
def container(
    settings: Settings,
    record_store: InMemoryRecordStore,
    estimation_client: FakeEstimationClient,
) -> AppContainer:
    tracker_service = make_tracker(record_store)
    estimation_service = make_estimation_service(estimation_client)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        tracker_service=tracker_service,
        estimation_service=estimation_service,
        food_form=FoodForm(estimation_service),
        activity_form=ActivityForm(),
        close_resources=close_resources,
    )
