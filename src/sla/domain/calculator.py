"""
Work Hours Calculator
======================

Converts a budget expressed in work hours into an absolute deadline.

The cursor is moved on local wall-clock time in the calendar's timezone and
always jumps to the next boundary that matters to the calendar (work start,
lunch end, lunch start or work end). Whole work days are skipped
arithmetically, so the loop only handles the partial first and last days.
"""

import math
from datetime import datetime, timedelta
from enum import Enum

from shared.infrastructure.logging import get_logger
from sla.domain.value_objects import MINUTES_PER_DAY, WorkCalendar, as_aware, weekday_index

logger = get_logger(__name__)


class CursorState(Enum):
    """Where the cursor sits relative to the business calendar."""
    NON_WORK_DAY = "non_work_day"
    BEFORE_WORK = "before_work"
    AFTER_WORK = "after_work"
    LUNCH = "lunch"
    IN_WINDOW = "in_window"


class WorkHoursCalculator:
    """
    Pure functions for work-hours deadline arithmetic.

    Stateless; the calendar is always passed in explicitly.
    """

    # Upper bound on loop steps once whole days are skipped: a partial first
    # day, up to six non-work days on each side of the skip, a partial last day.
    MAX_STEPS = 64

    @staticmethod
    def hours_to_minutes(hours: float) -> int:
        """Round a work-hours budget to whole minutes, halves rounding up."""
        if hours is None or not math.isfinite(hours):
            return 0
        return math.floor(hours * 60 + 0.5)

    @staticmethod
    def classify(cursor: datetime, calendar: WorkCalendar) -> CursorState:
        """Classify a local wall-clock cursor against the calendar."""
        minute = cursor.hour * 60 + cursor.minute

        if not calendar.is_work_day(cursor.date()):
            return CursorState.NON_WORK_DAY
        if minute < calendar.work_start_minute:
            return CursorState.BEFORE_WORK
        if minute >= calendar.work_end_minute:
            return CursorState.AFTER_WORK
        if calendar.lunch_applies and calendar.lunch_start_minute <= minute < calendar.lunch_end_minute:
            return CursorState.LUNCH
        return CursorState.IN_WINDOW

    @staticmethod
    def skip_work_days(cursor: datetime, days: int, calendar: WorkCalendar) -> datetime:
        """
        Move the cursor to the same time of day on the ``days``-th work day
        after the cursor's date.

        Any seven consecutive days hold exactly one of each weekday, so whole
        weeks are skipped at once and at most six single days remain.
        """
        work_days_per_week = sum(1 for day in calendar.work_days if 0 <= day <= 6)
        weeks, rest = divmod(days, work_days_per_week)
        target = cursor + timedelta(days=7 * weeks)
        while rest > 0:
            target += timedelta(days=1)
            if weekday_index(target.date()) in calendar.work_days:
                rest -= 1
        return target

    @staticmethod
    def add_work_hours(start: datetime, hours: float, calendar: WorkCalendar) -> datetime:
        """
        Add a work-hours budget to a start instant.

        Args:
            start: Start instant; naive values are read as UTC
            hours: Work hours to add, may be fractional
            calendar: Business calendar to count against

        Returns:
            The instant at which the budget is used up, in the timezone of
            ``start``. A non-positive budget or an unusable calendar returns
            ``start`` unchanged.
        """
        start = as_aware(start)
        remaining = WorkHoursCalculator.hours_to_minutes(hours)
        if remaining <= 0:
            return start

        if not calendar.is_valid:
            logger.error(
                "SLA calendar has no working capacity, deadline not advanced",
                extra={
                    "work_start": calendar.work_start.isoformat(),
                    "work_end": calendar.work_end.isoformat(),
                    "work_days": sorted(calendar.work_days),
                },
            )
            return start

        tz = calendar.tzinfo
        capacity = calendar.daily_capacity_minutes
        work_start = calendar.work_start_minute
        cursor = start.astimezone(tz).replace(tzinfo=None)

        steps = 0
        while remaining > 0:
            if steps >= WorkHoursCalculator.MAX_STEPS:
                logger.error(
                    "SLA deadline calculation hit its step limit",
                    extra={"start": start.isoformat(), "hours": hours, "remaining_minutes": remaining},
                )
                break
            steps += 1

            minute = cursor.hour * 60 + cursor.minute
            state = WorkHoursCalculator.classify(cursor, calendar)

            if state in (CursorState.NON_WORK_DAY, CursorState.AFTER_WORK):
                cursor += timedelta(minutes=MINUTES_PER_DAY - minute + work_start)
            elif state is CursorState.BEFORE_WORK:
                cursor += timedelta(minutes=work_start - minute)
            elif state is CursorState.LUNCH:
                cursor += timedelta(minutes=calendar.lunch_end_minute - minute)
            elif minute == calendar.first_work_minute and remaining > capacity:
                days = (remaining - 1) // capacity
                cursor = WorkHoursCalculator.skip_work_days(cursor, days, calendar)
                remaining -= days * capacity
            else:
                if calendar.lunch_applies and minute < calendar.lunch_start_minute:
                    boundary = calendar.lunch_start_minute
                else:
                    boundary = calendar.work_end_minute
                step = min(remaining, boundary - minute)
                cursor += timedelta(minutes=step)
                remaining -= step

        return cursor.replace(tzinfo=tz).astimezone(start.tzinfo)
