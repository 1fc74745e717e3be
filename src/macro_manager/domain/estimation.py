"""Models for AI nutrient estimation results."""

from pydantic import BaseModel, Field, field_validator

from macro_manager.domain.nutrition import NutrientProfile


class EstimationResult(BaseModel):
    """Structured output of a food estimation call."""

    name: str = Field(min_length=1)
    calories: float = 0.0
    protein: float = 0.0
    fiber: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    sugar: float = 0.0
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)

    @field_validator(
        "calories", "protein", "fiber", "carbs", "fat", "sugar", mode="before"
    )
    @classmethod
    def _missing_as_zero(cls, value: object) -> object:
        return 0.0 if value is None else value

    @property
    def nutrients(self) -> NutrientProfile:
        """Nutrient profile of the estimated food."""
        return NutrientProfile(
            calories=self.calories,
            protein=self.protein,
            fiber=self.fiber,
            carbs=self.carbs,
            fat=self.fat,
            sugar=self.sugar,
        )
