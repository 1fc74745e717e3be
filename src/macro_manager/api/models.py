"""Pydantic request models for the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field

from macro_manager.domain.nutrition import NutrientProfile
from macro_manager.domain.records import ActivityDraft, FoodDraft


class NutrientsPayload(BaseModel):
    """Nutrient values as entered by the user."""

    model_config = ConfigDict(allow_inf_nan=False)

    calories: float
    protein: float
    fiber: float
    carbs: float
    fat: float
    sugar: float | None = None

    def to_profile(self) -> NutrientProfile:
        return NutrientProfile(
            calories=self.calories,
            protein=self.protein,
            fiber=self.fiber,
            carbs=self.carbs,
            fat=self.fat,
            sugar=self.sugar,
        )


class FoodEntryCreate(NutrientsPayload):
    """Body for logging a food entry directly."""

    name: str
    date: str | None = None

    def to_draft(self) -> FoodDraft:
        return FoodDraft(name=self.name, nutrients=self.to_profile(), date=self.date)


class FoodEntryUpdate(BaseModel):
    """Body for editing a food entry; omitted fields are kept."""

    name: str | None = None
    nutrients: NutrientsPayload | None = None
    date: str | None = None

    def to_draft(self) -> FoodDraft:
        return FoodDraft(
            name=self.name,
            nutrients=self.nutrients.to_profile() if self.nutrients else None,
            date=self.date,
        )


class ActivityCreate(BaseModel):
    """Body for logging an activity."""

    name: str
    calories_burned: int = Field(ge=0)
    date: str | None = None

    def to_draft(self) -> ActivityDraft:
        return ActivityDraft(
            name=self.name, calories_burned=self.calories_burned, date=self.date
        )


class ActivityUpdate(BaseModel):
    """Body for editing an activity; omitted fields are kept."""

    name: str | None = None
    calories_burned: int | None = Field(default=None, ge=0)
    date: str | None = None

    def to_draft(self) -> ActivityDraft:
        return ActivityDraft(
            name=self.name, calories_burned=self.calories_burned, date=self.date
        )


class DateSelection(BaseModel):
    date: str


class DateShift(BaseModel):
    days: int


class FavoriteLog(BaseModel):
    date: str | None = None


class TextEstimate(BaseModel):
    description: str


class ImageEstimate(BaseModel):
    image_base64: str
    mime_type: str | None = None


class FoodFormStart(BaseModel):
    """Open the food form for a new entry, an edit, or from a favorite."""

    edit_id: str | None = None
    favorite_id: str | None = None


class FoodFormManual(BaseModel):
    name: str
    values: dict[str, object]


class PreviewUpdate(BaseModel):
    field: str
    value: object


class ActivityFormStart(BaseModel):
    edit_id: str | None = None


class ActivityFormEntry(BaseModel):
    name: str
    calories_burned: object
