"""
SLA Clock Controller
=====================

State transitions of a ticket's SLA clock.

Deadlines are anchored once, when the ticket is created, using the business
calendar. Pausing and resuming never go back to the calendar: on resume both
deadlines are shifted by the wall-clock time the ticket spent waiting.
"""

import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from sla.domain.calculator import WorkHoursCalculator
from sla.domain.entities import SlaClock
from sla.domain.value_objects import WorkCalendar, as_aware


class SLAClockController:
    """Stateless transitions over SlaClock values."""

    @staticmethod
    def start(
        created_at: datetime,
        response_hours: Optional[float],
        resolution_hours: Optional[float],
        calendar: WorkCalendar
    ) -> SlaClock:
        """
        Seed the clock of a new ticket.

        Args:
            created_at: Ticket creation instant
            response_hours: First-response budget in work hours, None for no target
            resolution_hours: Resolution budget in work hours, None for no target
            calendar: Calendar in effect at creation time

        Returns:
            SlaClock: Running clock with both deadlines anchored
        """
        response_deadline = None
        if response_hours is not None:
            response_deadline = WorkHoursCalculator.add_work_hours(created_at, response_hours, calendar)

        resolution_deadline = None
        if resolution_hours is not None:
            resolution_deadline = WorkHoursCalculator.add_work_hours(created_at, resolution_hours, calendar)

        return SlaClock(
            response_deadline=response_deadline,
            resolution_deadline=resolution_deadline
        )

    @staticmethod
    def pause(clock: SlaClock, now: datetime) -> SlaClock:
        """Stop the clock; a paused clock keeps its original pause instant."""
        if clock.is_paused:
            return clock
        return replace(clock, paused_at=as_aware(now))

    @staticmethod
    def resume(clock: SlaClock, now: datetime) -> SlaClock:
        """
        Restart a paused clock.

        The paused time, in whole seconds and never negative, is added to
        ``accumulated_pause_seconds`` and both deadlines move forward by it.
        """
        if not clock.is_paused:
            return clock

        elapsed = math.floor((as_aware(now) - clock.paused_at).total_seconds())
        # Clock skew between hosts can put "now" before the pause
        elapsed = max(0, elapsed)
        shift = timedelta(seconds=elapsed)

        return replace(
            clock,
            paused_at=None,
            accumulated_pause_seconds=clock.accumulated_pause_seconds + elapsed,
            response_deadline=clock.response_deadline + shift if clock.response_deadline else None,
            resolution_deadline=clock.resolution_deadline + shift if clock.resolution_deadline else None
        )

    @staticmethod
    def mark_responded(clock: SlaClock, now: datetime) -> SlaClock:
        """Record the first response; later calls keep the first timestamp."""
        if clock.response_met_at is not None:
            return clock
        return replace(clock, response_met_at=as_aware(now))

    @staticmethod
    def mark_resolved(clock: SlaClock, now: datetime) -> SlaClock:
        """
        Record resolution.

        Every close stamps the clock, so a reopened ticket that is closed again
        reports its latest resolution.
        """
        return replace(clock, resolution_met_at=as_aware(now))

    @staticmethod
    def reopen(clock: SlaClock) -> SlaClock:
        """Clear the resolution of a ticket that leaves CLOSED."""
        if clock.resolution_met_at is None:
            return clock
        return replace(clock, resolution_met_at=None)
