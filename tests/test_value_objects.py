import logging
from datetime import time

import pytest
from sla.domain import CalendarSettings, WorkCalendar, resolve_work_calendar


def test_missing_settings_resolve_to_default_calendar():
    assert resolve_work_calendar(None) == WorkCalendar()
    assert resolve_work_calendar({}) == WorkCalendar()


def test_default_calendar_values():
    calendar = WorkCalendar()
    assert calendar.work_start == time(9, 0)
    assert calendar.work_end == time(18, 0)
    assert calendar.lunch_start == time(12, 0)
    assert calendar.lunch_end == time(13, 0)
    assert calendar.timezone == "Europe/Lisbon"
    assert calendar.work_days == frozenset({1, 2, 3, 4, 5})
    assert calendar.daily_capacity_minutes == 8 * 60
    assert calendar.is_valid


def test_full_settings_map_is_resolved():
    calendar = resolve_work_calendar({
        "slaWorkStartHour": "8",
        "slaWorkStartMinute": "30",
        "slaWorkEndHour": "17",
        "slaWorkEndMinute": "15",
        "slaLunchStartHour": "12",
        "slaLunchStartMinute": "30",
        "slaLunchEndHour": "13",
        "slaLunchEndMinute": "15",
        "slaTimezone": "America/New_York",
        "slaWorkDays": "[0, 1, 2, 3, 4]",
    })
    assert calendar == WorkCalendar(
        work_start=time(8, 30),
        work_end=time(17, 15),
        lunch_start=time(12, 30),
        lunch_end=time(13, 15),
        timezone="America/New_York",
        work_days=frozenset({0, 1, 2, 3, 4}),
    )
    assert calendar.daily_capacity_minutes == 8 * 60


def test_zero_is_a_valid_value():
    calendar = resolve_work_calendar({"slaWorkStartHour": "0", "slaLunchEndMinute": "0"})
    assert calendar.work_start == time(0, 0)


def test_native_yaml_types_are_accepted():
    calendar = resolve_work_calendar({"slaWorkEndHour": 20, "slaWorkDays": [1, 2, 3]})
    assert calendar.work_end == time(20, 0)
    assert calendar.work_days == frozenset({1, 2, 3})


@pytest.mark.parametrize(
    "key, value",
    [
        ("slaWorkStartHour", "abc"),
        ("slaWorkStartHour", "25"),
        ("slaWorkStartHour", "-1"),
        ("slaWorkStartHour", "9.5"),
        ("slaWorkStartHour", True),
        ("slaLunchStartMinute", "60"),
        ("slaTimezone", "Mars/Olympus_Mons"),
        ("slaTimezone", 42),
        ("slaWorkDays", "[1,2"),
        ("slaWorkDays", "[]"),
        ("slaWorkDays", "[1, 7]"),
        ("slaWorkDays", '["mon"]'),
        ("slaWorkDays", '{"a": 1}'),
        ("slaWorkDays", {"a": 1}),
    ],
)
def test_malformed_field_falls_back_to_its_default(key, value, caplog):
    with caplog.at_level(logging.WARNING):
        calendar = resolve_work_calendar({key: value})
    assert calendar == WorkCalendar()
    assert "using default" in caplog.text


def test_fallback_is_field_by_field():
    calendar = resolve_work_calendar({"slaWorkStartHour": "oops", "slaWorkEndHour": "17"})
    assert calendar.work_start == time(9, 0)
    assert calendar.work_end == time(17, 0)


def test_inverted_window_falls_back_to_default_window():
    calendar = resolve_work_calendar({"slaWorkStartHour": "17", "slaWorkEndHour": "8"})
    assert calendar.work_start == time(9, 0)
    assert calendar.work_end == time(18, 0)
    assert calendar.is_valid


def test_lunch_outside_the_window_is_kept_but_ignored():
    calendar = resolve_work_calendar({"slaLunchStartHour": "8", "slaLunchEndHour": "10"})
    assert calendar.lunch_start == time(8, 0)
    assert not calendar.lunch_applies
    assert calendar.daily_capacity_minutes == 9 * 60


def test_inverted_lunch_is_ignored():
    calendar = WorkCalendar(lunch_start=time(14, 0), lunch_end=time(13, 0))
    assert not calendar.lunch_applies


def test_unknown_keys_are_ignored():
    assert resolve_work_calendar({"slaResponseHours": "24", "theme": "dark"}) == WorkCalendar()


def test_settings_accept_field_names():
    settings = CalendarSettings(work_start_hour=7, timezone="UTC")
    calendar = settings.to_calendar()
    assert calendar.work_start == time(7, 0)
    assert calendar.timezone == "UTC"


def test_work_days_are_deduplicated_and_frozen():
    calendar = WorkCalendar(work_days=[1, 1, 2])
    assert calendar.work_days == frozenset({1, 2})
    assert hash(calendar) == hash(WorkCalendar(work_days=frozenset({1, 2})))


def test_unknown_timezone_on_direct_construction_uses_default_zone():
    calendar = WorkCalendar(timezone="Nowhere/Land")
    assert calendar.tzinfo.key == "Europe/Lisbon"
