"""Cache epochs: coarse time buckets that bound cache freshness.

News results are bucketed into three daily windows (morning 06-12,
afternoon 12-18, evening 18-06 next day). Weather and reports are bucketed
per calendar day. Each window yields a label used in fingerprints and the
absolute expiry of entries written during it.
"""

import json
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any


MORNING_START = 6
AFTERNOON_START = 12
EVENING_START = 18


@dataclass(frozen=True)
class CacheWindow:
    """A time bucket with a stable label and an exclusive end."""

    label: str
    starts_at: datetime
    expires_at: datetime

    @property
    def expires_at_ms(self) -> int:
        return to_epoch_ms(self.expires_at)


def to_epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _at_hour(day: date, hour: int, like: datetime) -> datetime:
    return datetime.combine(day, time(hour), tzinfo=like.tzinfo)


def news_window(now: datetime) -> CacheWindow:
    """Return the morning/afternoon/evening window containing ``now``."""
    today = now.date()
    hour = now.hour

    if MORNING_START <= hour < AFTERNOON_START:
        start = _at_hour(today, MORNING_START, now)
        end = _at_hour(today, AFTERNOON_START, now)
        name = "morning"
    elif AFTERNOON_START <= hour < EVENING_START:
        start = _at_hour(today, AFTERNOON_START, now)
        end = _at_hour(today, EVENING_START, now)
        name = "afternoon"
    else:
        # Evening spans midnight; before 06:00 it belongs to yesterday's window
        start_day = today if hour >= EVENING_START else today - timedelta(days=1)
        start = _at_hour(start_day, EVENING_START, now)
        end = _at_hour(start_day + timedelta(days=1), MORNING_START, now)
        name = "evening"

    return CacheWindow(
        label=f"{start.date().isoformat()}_{name}",
        starts_at=start,
        expires_at=end,
    )


def day_window(now: datetime) -> CacheWindow:
    """Return the calendar-day window containing ``now``."""
    start = _at_hour(now.date(), 0, now)
    return CacheWindow(
        label=now.date().isoformat(),
        starts_at=start,
        expires_at=start + timedelta(days=1),
    )


def fingerprint(kind: str, params: dict[str, Any], window: CacheWindow) -> str:
    """Deterministic cache key for a request kind, parameters and window."""
    encoded = json.dumps(params, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
    return f"{kind}:{window.label}:{encoded}"


def weather_fingerprint(kind: str, lat: float, lon: float, window: CacheWindow) -> str:
    """Weather key: kind, coordinates and calendar day."""
    return f"weather_{kind}_{lat}_{lon}_{window.label}"
