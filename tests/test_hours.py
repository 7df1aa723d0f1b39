import datetime as dt
from zoneinfo import ZoneInfo

import pytest

from apps.store.hours import (
    OrderSchedule,
    build_opening_hours_value,
    evaluate,
    extract_opening_hours,
    format_next_open,
    local_now,
    normalize_schedule,
    parse_minutes,
)
from apps.store.models import StoreSettings


ROME = ZoneInfo("Europe/Rome")
WEEKDAYS = {k: [{"start": "11:00", "end": "22:00"}] for k in ("mon", "tue", "wed", "thu", "fri")}


def weekday_schedule(**extra_days):
    return OrderSchedule.from_dict({"enabled": True, "days": {**WEEKDAYS, **extra_days}})


def at(day, hh, mm=0):
    # 2026-10-17 is a Saturday
    return dt.datetime(2026, 10, day, hh, mm, tzinfo=ROME)


def test_saturday_morning_reopens_next_monday():
    status = evaluate(weekday_schedule(), at(17, 10))
    assert status.is_open is False
    assert status.next_open == at(19, 11)


def test_open_inside_range_and_closed_at_end():
    schedule = weekday_schedule()
    assert evaluate(schedule, at(19, 11)).is_open
    assert evaluate(schedule, at(19, 21, 59)).is_open
    closing = evaluate(schedule, at(19, 22))
    assert closing.is_open is False
    assert closing.next_open == at(20, 11)


def test_before_opening_reopens_today():
    now = at(19, 9, 30)
    status = evaluate(weekday_schedule(), now)
    assert status.next_open == at(19, 11)
    assert format_next_open(status.next_open, now) == "11:00"


def test_ranges_already_started_today_are_skipped():
    schedule = weekday_schedule(sat=[{"start": "09:00", "end": "09:30"}, {"start": "18:00", "end": "23:00"}])
    assert evaluate(schedule, at(17, 10)).next_open == at(17, 18)


def test_same_weekday_next_week_is_found():
    schedule = OrderSchedule.from_dict({"enabled": True, "days": {"sat": [{"start": "09:00", "end": "09:30"}]}})
    assert evaluate(schedule, at(17, 10)).next_open == at(24, 9)


def test_disabled_schedule_is_always_open():
    assert evaluate(OrderSchedule.from_dict({"enabled": False, "days": {}}), at(17, 3)).is_open
    assert evaluate(None, at(17, 3)).is_open


def test_enabled_without_ranges_is_closed_without_next_open():
    status = evaluate(OrderSchedule.from_dict({"enabled": True, "days": {}}), at(17, 12))
    assert status.is_open is False
    assert status.next_open is None


def test_format_next_open_labels():
    now = at(17, 10)
    assert format_next_open(at(18, 11), now) == "domani 11:00"
    assert format_next_open(at(19, 11), now) == "Lunedì 11:00"
    assert format_next_open(None, now) is None


@pytest.mark.parametrize("raw,expected", [("11:30", 690), ("24:00", 1440), ("24:01", None), ("7", None), (None, None)])
def test_parse_minutes(raw, expected):
    assert parse_minutes(raw) == expected


def test_normalize_schedule_drops_incomplete_ranges():
    out = normalize_schedule({"enabled": 1, "days": {"mon": [{"start": "10:00"}, {"start": "12:00", "end": "14:00"}], "xyz": []}})
    assert out["enabled"] is True
    assert out["days"]["mon"] == [{"start": "12:00", "end": "14:00"}]
    assert out["days"]["sun"] == []
    assert "xyz" not in out["days"]


def test_opening_hours_value_round_trip_shapes():
    assert extract_opening_hours("Tutti i giorni 11-22") == ("Tutti i giorni 11-22", None)
    assert extract_opening_hours({"mon": "11-22"}) == ({"mon": "11-22"}, None)
    assert extract_opening_hours(None) == (None, None)

    schedule = weekday_schedule()
    stored = build_opening_hours_value("Lun-Ven 11-22", schedule)
    display, parsed = extract_opening_hours(stored)
    assert display == "Lun-Ven 11-22"
    assert parsed.to_dict() == schedule.to_dict()
    assert build_opening_hours_value("solo testo", None) == "solo testo"


def test_local_now_converts_to_store_zone(settings):
    settings.STORE_TIME_ZONE = "Europe/Rome"
    utc = dt.datetime(2026, 10, 17, 8, 0, tzinfo=dt.timezone.utc)
    assert local_now(utc).hour == 10


@pytest.mark.django_db
def test_store_ordering_status_uses_persisted_schedule():
    store = StoreSettings.load()
    store.opening_hours = build_opening_hours_value("Lun-Ven", weekday_schedule())
    store.save()
    status = StoreSettings.load().ordering_status(at(17, 10))
    assert status.is_open is False
    assert status.next_open.date() == dt.date(2026, 10, 19)


@pytest.mark.django_db
def test_store_status_endpoint(client):
    StoreSettings.objects.create(key="default", opening_hours="Sempre aperti")
    r = client.get("/api/store/status")
    assert r.status_code == 200
    assert r.json() == {"is_open": True, "next_open": None, "next_open_label": None, "display": "Sempre aperti"}
