"""Domain models for logged food, activities and favorites."""

from dataclasses import dataclass, field
from datetime import datetime

from macro_manager.domain.nutrition import NutrientProfile


@dataclass(frozen=True)
class FoodRecord:
    """A food entry logged on a calendar day."""

    id: str
    name: str
    nutrients: NutrientProfile
    date: str
    created_at: datetime
    is_favorite_origin: bool = False


@dataclass(frozen=True)
class ActivityRecord:
    """A physical activity logged on a calendar day."""

    id: str
    name: str
    calories_burned: int
    date: str
    created_at: datetime


@dataclass(frozen=True)
class FavoriteRecord:
    """Name-keyed nutrient snapshot reusable to seed new entries."""

    id: str
    name: str
    nutrients: NutrientProfile
    created_at: datetime
    is_favorite_origin: bool = True


@dataclass(frozen=True)
class FoodDraft:
    """Candidate values for a food save; omitted fields keep their defaults."""

    name: str | None = None
    nutrients: NutrientProfile | None = None
    date: str | None = None
    created_at: datetime | None = None
    id: str | None = None


@dataclass(frozen=True)
class ActivityDraft:
    """Candidate values for an activity save."""

    name: str | None = None
    calories_burned: int | None = None
    date: str | None = None
    created_at: datetime | None = None
    id: str | None = None


@dataclass(frozen=True)
class DailyAggregate:
    """Derived per-day rollup of food and activity records."""

    date: str
    entries: list[FoodRecord] = field(default_factory=list)
    activities: list[ActivityRecord] = field(default_factory=list)
    totals: NutrientProfile = field(default_factory=NutrientProfile.zero)
    calories_burned: int = 0

    @property
    def net_calories(self) -> float:
        """Calories eaten minus calories burned."""
        return self.totals.calories - self.calories_burned
