"""Tests for nutrient estimation."""

import asyncio
import base64

import pytest

from macro_manager.domain.errors import EstimationError, ValidationError
from macro_manager.services.estimation import (
    ESTIMATION_SCHEMA,
    _detect_mime_type,
    _to_data_url,
    parse_estimation,
)
from tests.conftest import FakeEstimationClient, make_estimation_service


def test_estimate_from_text_returns_result() -> None:
    client = FakeEstimationClient()
    service = make_estimation_service(client)

    result = asyncio.run(service.estimate_from_text("  a ripe banana "))

    assert result.name == "Banana"
    assert result.nutrients.calories == 105
    assert result.nutrients.sugar == 14
    assert client.calls[0]["model"] == "gpt-5.2"
    assert '"a ripe banana"' in str(client.calls[0]["prompt"])
    assert client.calls[0]["image_data_url"] is None


def test_estimate_from_image_uses_image_model() -> None:
    client = FakeEstimationClient()
    service = make_estimation_service(client)
    png = b"\x89PNG\r\n\x1a\nrest"

    asyncio.run(service.estimate_from_image(png))

    call = client.calls[0]
    assert call["model"] == "gpt-5.2-vision"
    assert str(call["image_data_url"]).startswith("data:image/png;base64,")


def test_empty_inputs_are_rejected_before_calling_client() -> None:
    client = FakeEstimationClient()
    service = make_estimation_service(client)

    with pytest.raises(ValidationError):
        asyncio.run(service.estimate_from_text("   "))
    with pytest.raises(ValidationError):
        asyncio.run(service.estimate_from_image(b""))
    assert client.calls == []


def test_missing_api_key_raises_estimation_error() -> None:
    service = make_estimation_service(None)

    with pytest.raises(EstimationError, match="API key missing"):
        asyncio.run(service.estimate_from_text("toast"))


def test_client_failure_is_wrapped() -> None:
    client = FakeEstimationClient(error=RuntimeError("quota exceeded"))
    service = make_estimation_service(client)

    with pytest.raises(EstimationError, match="manual entry"):
        asyncio.run(service.estimate_from_text("toast"))


def test_parse_estimation_strips_code_fences_and_defaults_missing_values() -> None:
    raw = '```json\n{"foodName": "Black coffee", "calories": 2, "fat": null}\n```'

    result = parse_estimation(raw)

    assert result.name == "Black coffee"
    assert result.calories == 2
    assert result.fat == 0
    assert result.protein == 0
    assert result.confidence is None


@pytest.mark.parametrize(
    "raw",
    ["", "not json", "[1, 2]", '{"calories": 10}', '{"name": "", "calories": 1}'],
)
def test_parse_estimation_rejects_unusable_output(raw: str) -> None:
    with pytest.raises(EstimationError):
        parse_estimation(raw)


def test_schema_requires_every_nutrient() -> None:
    required = ESTIMATION_SCHEMA["required"]

    assert isinstance(required, list)
    assert {"name", "calories", "protein", "fiber", "carbs", "fat", "sugar"} <= set(
        required
    )


def test_data_url_encoding() -> None:
    data = b"\xff\xd8\xffimage"

    assert _detect_mime_type(data) == "image/jpeg"
    assert _detect_mime_type(b"RIFF\x00\x00\x00\x00WEBPdata") == "image/webp"
    assert _to_data_url(data, "image/heic") == (
        "data:image/heic;base64," + base64.b64encode(data).decode()
    )
