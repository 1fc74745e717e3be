"""Calendar-day navigation.

Days are ``YYYY-MM-DD`` strings so that lexicographic order matches
chronological order. Every conversion and every piece of day arithmetic goes
through a noon-anchored local datetime, which keeps DST transitions and
local/UTC conversions from moving a value onto the neighbouring day.
"""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from macro_manager.domain.errors import ValidationError

DEFAULT_RADIUS = 2
_NOON = time(hour=12)


def parse_day(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a date."""
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid calendar day: {value!r}") from exc
    if parsed.date().isoformat() != value:
        raise ValidationError(f"Calendar day must be YYYY-MM-DD: {value!r}")
    return parsed.date()


def format_day(value: date | datetime) -> str:
    """Format a date (or the local date of a datetime) as ``YYYY-MM-DD``."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def _anchor(day: str) -> datetime:
    return datetime.combine(parse_day(day), _NOON)


def shift(center: str, delta_days: int) -> str:
    """Return the calendar day ``delta_days`` away from ``center``."""
    return format_day(_anchor(center) + timedelta(days=delta_days))


def window(center: str, radius: int = DEFAULT_RADIUS) -> list[str]:
    """Return ``2 * radius + 1`` consecutive days centred on ``center``."""
    if radius < 0:
        raise ValidationError("Window radius must not be negative")
    anchor = _anchor(center)
    return [
        format_day(anchor + timedelta(days=offset))
        for offset in range(-radius, radius + 1)
    ]


def today(timezone_name: str | None = None, now: datetime | None = None) -> str:
    """Return today's calendar day in local time or in the given timezone."""
    tz = ZoneInfo(timezone_name) if timezone_name else None
    current = now or datetime.now(tz=tz)
    if tz is not None and current.tzinfo is not None:
        current = current.astimezone(tz)
    return format_day(current)
