"""Weekly ordering schedule: "can we accept orders now" and "when do we reopen".

All arithmetic is on wall-clock local time. Callers hand in `now` already
expressed in the store's time zone (see `local_now`).
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Optional
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone


DAY_KEYS: tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

DAY_LABELS: dict[str, str] = {
    "mon": "Lunedì",
    "tue": "Martedì",
    "wed": "Mercoledì",
    "thu": "Giovedì",
    "fri": "Venerdì",
    "sat": "Sabato",
    "sun": "Domenica",
}

# today plus the same weekday one week ahead
LOOKAHEAD_DAYS = 7


def parse_minutes(value: Any) -> Optional[int]:
    """'HH:MM' -> minutes since midnight, or None when malformed."""
    if not isinstance(value, str) or ":" not in value:
        return None
    hh, _, mm = value.strip().partition(":")
    try:
        h, m = int(hh), int(mm)
    except ValueError:
        return None
    if not (0 <= h <= 24 and 0 <= m < 60) or h * 60 + m > 24 * 60:
        return None
    return h * 60 + m


@dataclass(frozen=True)
class TimeRange:
    start: str
    end: str

    @property
    def start_minutes(self) -> Optional[int]:
        return parse_minutes(self.start)

    @property
    def end_minutes(self) -> Optional[int]:
        return parse_minutes(self.end)

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass
class OrderSchedule:
    enabled: bool = False
    days: dict[str, list[TimeRange]] = field(default_factory=lambda: {k: [] for k in DAY_KEYS})

    @classmethod
    def from_dict(cls, raw: Any) -> "OrderSchedule":
        """Build a normalized schedule: unknown days ignored, incomplete ranges dropped."""
        if not isinstance(raw, dict):
            return cls()
        raw_days = raw.get("days") if isinstance(raw.get("days"), dict) else {}
        days: dict[str, list[TimeRange]] = {}
        for key in DAY_KEYS:
            ranges = raw_days.get(key) or []
            days[key] = [
                TimeRange(start=str(r["start"]), end=str(r["end"]))
                for r in ranges
                if isinstance(r, dict) and r.get("start") and r.get("end")
            ]
        return cls(enabled=bool(raw.get("enabled")), days=days)

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "days": {k: [r.to_dict() for r in self.days.get(k, [])] for k in DAY_KEYS},
        }

    def has_any_range(self) -> bool:
        return any(self.days.get(k) for k in DAY_KEYS)

    def ranges_for(self, key: str) -> list[TimeRange]:
        return sorted(self.days.get(key, []), key=lambda r: r.start_minutes or 0)


@dataclass
class ScheduleStatus:
    is_open: bool
    next_open: Optional[dt.datetime] = None


def normalize_schedule(raw: Any) -> dict[str, Any]:
    return OrderSchedule.from_dict(raw).to_dict()


def day_key(day: dt.date) -> str:
    return DAY_KEYS[day.weekday()]


def evaluate(schedule: Optional[OrderSchedule], now: dt.datetime) -> ScheduleStatus:
    if schedule is None or not schedule.enabled:
        return ScheduleStatus(is_open=True)
    if not schedule.has_any_range():
        return ScheduleStatus(is_open=False)

    now_minutes = now.hour * 60 + now.minute
    for r in schedule.ranges_for(day_key(now.date())):
        start, end = r.start_minutes, r.end_minutes
        if start is None or end is None:
            continue
        if start <= now_minutes < end:
            return ScheduleStatus(is_open=True)

    for offset in range(LOOKAHEAD_DAYS + 1):
        day = now.date() + dt.timedelta(days=offset)
        for r in schedule.ranges_for(day_key(day)):
            start = r.start_minutes
            if start is None or start >= 24 * 60:
                continue
            if offset == 0 and start <= now_minutes:
                continue
            opens = dt.datetime.combine(day, dt.time(start // 60, start % 60), tzinfo=now.tzinfo)
            return ScheduleStatus(is_open=False, next_open=opens)
    return ScheduleStatus(is_open=False)


def format_next_open(next_open: Optional[dt.datetime], now: dt.datetime) -> Optional[str]:
    if next_open is None:
        return None
    hhmm = next_open.strftime("%H:%M")
    if next_open.date() == now.date():
        return hhmm
    if next_open.date() == now.date() + dt.timedelta(days=1):
        return f"domani {hhmm}"
    return f"{DAY_LABELS[day_key(next_open.date())]} {hhmm}"


def extract_opening_hours(value: Any) -> tuple[Any, Optional[OrderSchedule]]:
    """Split the persisted opening_hours value into (display, schedule).

    A bare string or a plain weekday->text map is display only; an object with
    an `order_schedule` key carries both.
    """
    if not value:
        return None, None
    if isinstance(value, str):
        return value, None
    if isinstance(value, dict) and "order_schedule" in value:
        raw = value.get("order_schedule")
        schedule = OrderSchedule.from_dict(raw) if raw else None
        return value.get("display"), schedule
    return value, None


def build_opening_hours_value(display: Any, schedule: Optional[OrderSchedule]) -> Any:
    if schedule is not None:
        return {"display": display, "order_schedule": schedule.to_dict()}
    return display


def local_now(now: Optional[dt.datetime] = None) -> dt.datetime:
    """Current time as wall-clock in the store's time zone."""
    now = now or timezone.now()
    tz = ZoneInfo(getattr(settings, "STORE_TIME_ZONE", settings.TIME_ZONE))
    if timezone.is_naive(now):
        return now
    return now.astimezone(tz)
