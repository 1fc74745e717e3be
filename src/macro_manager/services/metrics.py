"""Metric visibility policy for charts and summary cards."""

from collections.abc import Iterator
from dataclasses import dataclass

from macro_manager.domain.errors import ValidationError
from macro_manager.domain.nutrition import MetricKey

MIN_METRICS = 1
MAX_METRICS = 4


@dataclass(frozen=True)
class MetricSelection:
    """Ordered set of visible metrics, between one and four of them."""

    keys: tuple[MetricKey, ...] = (
        MetricKey.CALORIES,
        MetricKey.PROTEIN,
        MetricKey.FIBER,
    )

    def __post_init__(self) -> None:
        if len(set(self.keys)) != len(self.keys):
            raise ValidationError("Metric selection must not repeat a metric")
        if not MIN_METRICS <= len(self.keys) <= MAX_METRICS:
            raise ValidationError(
                f"Select between {MIN_METRICS} and {MAX_METRICS} metrics"
            )

    def __contains__(self, key: object) -> bool:
        return key in self.keys

    def __iter__(self) -> Iterator[MetricKey]:
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.keys)

    def toggle(self, key: MetricKey) -> "MetricSelection":
        """Show or hide a metric, ignoring changes that break the size bounds."""
        if key in self.keys:
            if len(self.keys) <= MIN_METRICS:
                return self
            return MetricSelection(tuple(k for k in self.keys if k != key))
        if len(self.keys) >= MAX_METRICS:
            return self
        return MetricSelection((*self.keys, key))
