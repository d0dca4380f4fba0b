"""
SLA Value Objects
==================

Immutable value objects for SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.

The business calendar is resolved from the raw, string-keyed settings the
settings store keeps (``slaWorkStartHour``, ``slaTimezone``, ...). Resolution
never fails: every field that cannot be parsed falls back to its default, so a
misconfigured calendar can never block ticket creation.
"""

import json
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, FrozenSet, List, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

MINUTES_PER_DAY = 24 * 60

DEFAULT_WORK_START = time(9, 0)
DEFAULT_WORK_END = time(18, 0)
DEFAULT_LUNCH_START = time(12, 0)
DEFAULT_LUNCH_END = time(13, 0)
DEFAULT_TIMEZONE = "Europe/Lisbon"
# 0=Sunday .. 6=Saturday
DEFAULT_WORK_DAYS: FrozenSet[int] = frozenset({1, 2, 3, 4, 5})


def minute_of_day(value: time) -> int:
    """Minutes elapsed since midnight, ignoring seconds."""
    return value.hour * 60 + value.minute


def weekday_index(day: date) -> int:
    """Weekday numbered 0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def as_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class WorkCalendar:
    """
    Business calendar: daily work window, lunch break, timezone, work days.

    Lunch is subtracted from the window only when it lies fully inside it;
    a lunch that overlaps the window edges is ignored rather than clamped.
    """
    work_start: time = DEFAULT_WORK_START
    work_end: time = DEFAULT_WORK_END
    lunch_start: time = DEFAULT_LUNCH_START
    lunch_end: time = DEFAULT_LUNCH_END
    timezone: str = DEFAULT_TIMEZONE
    work_days: FrozenSet[int] = DEFAULT_WORK_DAYS

    def __post_init__(self):
        if not isinstance(self.work_days, frozenset):
            object.__setattr__(self, "work_days", frozenset(self.work_days))

    @property
    def work_start_minute(self) -> int:
        return minute_of_day(self.work_start)

    @property
    def work_end_minute(self) -> int:
        return minute_of_day(self.work_end)

    @property
    def lunch_start_minute(self) -> int:
        return minute_of_day(self.lunch_start)

    @property
    def lunch_end_minute(self) -> int:
        return minute_of_day(self.lunch_end)

    @property
    def lunch_applies(self) -> bool:
        """True when the lunch break lies fully inside the work window."""
        return (
            self.lunch_start_minute >= self.work_start_minute
            and self.lunch_end_minute <= self.work_end_minute
            and self.lunch_end_minute > self.lunch_start_minute
        )

    @property
    def daily_capacity_minutes(self) -> int:
        """Work minutes in a single work day, lunch excluded."""
        total = self.work_end_minute - self.work_start_minute
        if self.lunch_applies:
            total -= self.lunch_end_minute - self.lunch_start_minute
        return total

    @property
    def first_work_minute(self) -> int:
        """First minute of the day at which work time is actually counted."""
        if self.lunch_applies and self.lunch_start_minute == self.work_start_minute:
            return self.lunch_end_minute
        return self.work_start_minute

    @property
    def is_valid(self) -> bool:
        return (
            self.work_end_minute > self.work_start_minute
            and self.daily_capacity_minutes > 0
            and any(0 <= day <= 6 for day in self.work_days)
        )

    @property
    def tzinfo(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(
                "Unknown calendar timezone, using default",
                extra={"timezone": self.timezone, "default": DEFAULT_TIMEZONE},
            )
            return ZoneInfo(DEFAULT_TIMEZONE)

    def is_work_day(self, day: date) -> bool:
        return weekday_index(day) in self.work_days


def _fallback(field_name: str, value: Any, default: Any) -> Any:
    logger.warning(
        "Invalid SLA calendar setting, using default",
        extra={"setting": field_name, "value": repr(value), "default": repr(default)},
    )
    return default


def _parse_bounded_int(value: Any, upper: int, field_name: str, default: int) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return _fallback(field_name, value, default)
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError:
            return _fallback(field_name, value, default)
    else:
        return _fallback(field_name, value, default)

    if not 0 <= parsed <= upper:
        return _fallback(field_name, value, default)
    return parsed


class CalendarSettings(BaseModel):
    """
    Raw SLA calendar settings as stored by the settings store.

    Every validator runs in "before" mode and degrades to the field default
    instead of raising, so validating any mapping always succeeds.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    work_start_hour: int = Field(default=DEFAULT_WORK_START.hour, alias="slaWorkStartHour")
    work_start_minute: int = Field(default=DEFAULT_WORK_START.minute, alias="slaWorkStartMinute")
    work_end_hour: int = Field(default=DEFAULT_WORK_END.hour, alias="slaWorkEndHour")
    work_end_minute: int = Field(default=DEFAULT_WORK_END.minute, alias="slaWorkEndMinute")
    lunch_start_hour: int = Field(default=DEFAULT_LUNCH_START.hour, alias="slaLunchStartHour")
    lunch_start_minute: int = Field(default=DEFAULT_LUNCH_START.minute, alias="slaLunchStartMinute")
    lunch_end_hour: int = Field(default=DEFAULT_LUNCH_END.hour, alias="slaLunchEndHour")
    lunch_end_minute: int = Field(default=DEFAULT_LUNCH_END.minute, alias="slaLunchEndMinute")
    timezone: str = Field(default=DEFAULT_TIMEZONE, alias="slaTimezone")
    work_days: List[int] = Field(
        default_factory=lambda: sorted(DEFAULT_WORK_DAYS),
        alias="slaWorkDays"
    )

    @field_validator(
        "work_start_hour", "work_end_hour", "lunch_start_hour", "lunch_end_hour",
        mode="before"
    )
    @classmethod
    def parse_hour(cls, v: Any, info: ValidationInfo) -> int:
        default = cls.model_fields[info.field_name].default
        return _parse_bounded_int(v, 23, info.field_name, default)

    @field_validator(
        "work_start_minute", "work_end_minute", "lunch_start_minute", "lunch_end_minute",
        mode="before"
    )
    @classmethod
    def parse_minute(cls, v: Any, info: ValidationInfo) -> int:
        default = cls.model_fields[info.field_name].default
        return _parse_bounded_int(v, 59, info.field_name, default)

    @field_validator("timezone", mode="before")
    @classmethod
    def parse_timezone(cls, v: Any) -> str:
        if v is None or v == "":
            return DEFAULT_TIMEZONE
        if not isinstance(v, str):
            return _fallback("timezone", v, DEFAULT_TIMEZONE)
        try:
            ZoneInfo(v.strip())
        except (ZoneInfoNotFoundError, ValueError):
            return _fallback("timezone", v, DEFAULT_TIMEZONE)
        return v.strip()

    @field_validator("work_days", mode="before")
    @classmethod
    def parse_work_days(cls, v: Any) -> List[int]:
        default = sorted(DEFAULT_WORK_DAYS)
        if v is None or v == "":
            return default
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                return _fallback("work_days", v, default)
        if not isinstance(v, (list, tuple)) or not v:
            return _fallback("work_days", v, default)
        for day in v:
            if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
                return _fallback("work_days", v, default)
        return sorted(set(v))

    def to_calendar(self) -> WorkCalendar:
        """Build the calendar, falling back to the default window if inverted."""
        work_start = time(self.work_start_hour, self.work_start_minute)
        work_end = time(self.work_end_hour, self.work_end_minute)
        if minute_of_day(work_end) <= minute_of_day(work_start):
            logger.warning(
                "SLA work window ends before it starts, using default window",
                extra={"work_start": work_start.isoformat(), "work_end": work_end.isoformat()},
            )
            work_start, work_end = DEFAULT_WORK_START, DEFAULT_WORK_END

        return WorkCalendar(
            work_start=work_start,
            work_end=work_end,
            lunch_start=time(self.lunch_start_hour, self.lunch_start_minute),
            lunch_end=time(self.lunch_end_hour, self.lunch_end_minute),
            timezone=self.timezone,
            work_days=frozenset(self.work_days),
        )


def resolve_work_calendar(raw_settings: Optional[Mapping[str, Any]]) -> WorkCalendar:
    """
    Resolve raw settings into a WorkCalendar.

    Args:
        raw_settings: String-keyed settings, e.g. ``{"slaWorkStartHour": "8"}``.
            Missing or malformed values fall back to their defaults.

    Returns:
        WorkCalendar: Always a usable calendar.
    """
    try:
        settings = CalendarSettings.model_validate(dict(raw_settings or {}))
    except (ValidationError, TypeError, ValueError) as e:
        logger.warning("Unreadable SLA calendar settings, using defaults", extra={"error": str(e)})
        return WorkCalendar()
    return settings.to_calendar()
