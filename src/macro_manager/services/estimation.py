"""Food nutrient estimation using LLMs."""

import base64
import json
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from macro_manager.domain.errors import EstimationError, ValidationError
from macro_manager.domain.estimation import EstimationResult

_logger = logging.getLogger(__name__)

_NUMBER = {"type": "number", "minimum": 0}

ESTIMATION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "calories": _NUMBER,
        "protein": _NUMBER,
        "fiber": _NUMBER,
        "carbs": _NUMBER,
        "fat": _NUMBER,
        "sugar": _NUMBER,
        "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
    },
    "required": [
        "name",
        "calories",
        "protein",
        "fiber",
        "carbs",
        "fat",
        "sugar",
        "confidence",
    ],
    "additionalProperties": False,
}

TEXT_PROMPT = (
    "Analyze the following food description and provide nutritional "
    'information: "{description}". Estimate for a standard serving size if '
    "not specified. Return a concise food name, calories, and grams of "
    "protein, fiber, carbs, fat and sugar, plus a confidence score (0-1)."
)

IMAGE_PROMPT = (
    "Identify the food in this image and estimate the portion size visible. "
    "Return a concise food name, calories, and grams of protein, fiber, "
    "carbs, fat and sugar for the entire visible portion, plus a confidence "
    "score (0-1)."
)


class EstimationClient(Protocol):
    """Interface for LLM nutrient estimation."""

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
        """Return the raw text output of the model."""


@dataclass
class EstimationService:
    """Service that builds estimation prompts and validates results."""

    client: EstimationClient | None
    model: str
    image_model: str
    reasoning_effort: str | None
    store: bool

    async def estimate_from_text(self, description: str) -> EstimationResult:
        """Estimate name and nutrients from a free-text description."""
        cleaned = description.strip()
        if not cleaned:
            raise ValidationError("Description is required")
        return await self._estimate(
            model=self.model,
            prompt=TEXT_PROMPT.format(description=cleaned),
            image_data_url=None,
        )

    async def estimate_from_image(
        self, image_bytes: bytes, mime_type: str | None = None
    ) -> EstimationResult:
        """Estimate name and nutrients from a food photo."""
        if not image_bytes:
            raise ValidationError("Image is empty")
        return await self._estimate(
            model=self.image_model,
            prompt=IMAGE_PROMPT,
            image_data_url=_to_data_url(image_bytes, mime_type),
        )

    async def _estimate(
        self, *, model: str, prompt: str, image_data_url: str | None
    ) -> EstimationResult:
        if self.client is None:
            raise EstimationError(
                "API key missing. Set OPENAI_API_KEY to enable AI estimation."
            )
        try:
            raw = await self.client.estimate(
                model=model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                schema=ESTIMATION_SCHEMA,
                image_data_url=image_data_url,
            )
        except EstimationError:
            raise
        except Exception as exc:
            _logger.warning("Estimation request failed: %s", exc)
            raise EstimationError(
                "Could not identify food. Please try again or use manual entry."
            ) from exc
        return parse_estimation(raw)


def parse_estimation(raw: str) -> EstimationResult:
    """Parse model output into an estimation result."""
    cleaned = _strip_code_fences(raw or "")
    if not cleaned:
        raise EstimationError("Estimation returned an empty response")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise EstimationError("Estimation response was not valid JSON") from exc
    if isinstance(payload, dict) and "name" not in payload and "foodName" in payload:
        payload["name"] = payload.pop("foodName")
    try:
        return EstimationResult.model_validate(payload)
    except PydanticValidationError as exc:
        raise EstimationError("Estimation response had an unexpected shape") from exc


def _strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model may wrap around JSON."""
    return text.replace("```json", "").replace("```", "").strip()


def _to_data_url(image_bytes: bytes, mime_type: str | None = None) -> str:
    """Convert bytes to a base64 data URL for image input."""
    resolved = mime_type or _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{resolved};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
