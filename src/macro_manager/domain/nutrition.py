"""Nutrition domain models."""

from dataclasses import dataclass
from enum import Enum


class MetricKey(str, Enum):
    """Nutrient fields that can be charted and summarized."""

    CALORIES = "calories"
    PROTEIN = "protein"
    FIBER = "fiber"
    CARBS = "carbs"
    FAT = "fat"
    SUGAR = "sugar"

    @property
    def label(self) -> str:
        """Human-readable label for charts and summary cards."""
        return _METRIC_LABELS[self]

    @property
    def color(self) -> str:
        """Chart series colour."""
        return _METRIC_COLORS[self]


_METRIC_LABELS = {
    MetricKey.CALORIES: "Calories",
    MetricKey.PROTEIN: "Protein (g)",
    MetricKey.FIBER: "Fiber (g)",
    MetricKey.CARBS: "Carbs (g)",
    MetricKey.FAT: "Fat (g)",
    MetricKey.SUGAR: "Sugar (g)",
}

_METRIC_COLORS = {
    MetricKey.CALORIES: "#f59e0b",
    MetricKey.PROTEIN: "#10b981",
    MetricKey.FIBER: "#3b82f6",
    MetricKey.CARBS: "#8b5cf6",
    MetricKey.FAT: "#ef4444",
    MetricKey.SUGAR: "#ec4899",
}


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient totals for a food item or a day."""

    calories: float
    protein: float
    fiber: float
    carbs: float
    fat: float
    sugar: float | None = None

    @classmethod
    def zero(cls) -> "NutrientProfile":
        """Return the all-zero profile."""
        return cls(calories=0, protein=0, fiber=0, carbs=0, fat=0, sugar=0)

    def __add__(self, other: "NutrientProfile") -> "NutrientProfile":
        return NutrientProfile(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            fiber=self.fiber + other.fiber,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
            sugar=(self.sugar or 0) + (other.sugar or 0),
        )

    def value(self, key: MetricKey) -> float:
        """Return the value of a single nutrient field, sugar defaulting to 0."""
        return getattr(self, key.value) or 0
