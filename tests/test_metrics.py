"""Tests for metric visibility."""

import pytest

from macro_manager.domain.errors import ValidationError
from macro_manager.domain.nutrition import MetricKey
from macro_manager.services.metrics import MetricSelection


def test_default_selection() -> None:
    selection = MetricSelection()

    assert list(selection) == [
        MetricKey.CALORIES,
        MetricKey.PROTEIN,
        MetricKey.FIBER,
    ]


def test_toggle_adds_and_removes_metric() -> None:
    selection = MetricSelection()

    added = selection.toggle(MetricKey.FAT)
    removed = added.toggle(MetricKey.FAT)

    assert MetricKey.FAT in added
    assert len(added) == 4
    assert removed == selection


def test_toggle_keeps_at_least_one_metric() -> None:
    selection = MetricSelection((MetricKey.CALORIES,))

    assert selection.toggle(MetricKey.CALORIES) == selection


def test_toggle_keeps_at_most_four_metrics() -> None:
    selection = MetricSelection(
        (MetricKey.CALORIES, MetricKey.PROTEIN, MetricKey.FIBER, MetricKey.FAT)
    )

    assert selection.toggle(MetricKey.SUGAR) == selection


def test_toggle_preserves_order_of_remaining_metrics() -> None:
    selection = MetricSelection().toggle(MetricKey.PROTEIN).toggle(MetricKey.SUGAR)

    assert list(selection) == [
        MetricKey.CALORIES,
        MetricKey.FIBER,
        MetricKey.SUGAR,
    ]


@pytest.mark.parametrize(
    "keys",
    [
        (),
        (MetricKey.CALORIES, MetricKey.CALORIES),
        tuple(MetricKey)[:5],
    ],
)
def test_invalid_selection_rejected(keys: tuple[MetricKey, ...]) -> None:
    with pytest.raises(ValidationError):
        MetricSelection(keys)


def test_metric_labels_and_colors() -> None:
    assert MetricKey.PROTEIN.label == "Protein (g)"
    assert MetricKey.CALORIES.color.startswith("#")
