"""
SLA Application Services
=========================

Application services orchestrate the SLA domain services for the hosting
ticket service.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (calendar provider), not concrete implementations
"""

from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping, Optional
from abc import ABC, abstractmethod

from config import SLAState, TicketStatus, get_settings
from shared.infrastructure.logging import get_logger
from sla.domain import (
    SlaClock, SLAMetrics, WorkCalendar,
    SLAClockController, BreachEvaluator, resolve_work_calendar
)
from sla.application.dto import OperationalSummary, TicketSLAResponse

logger = get_logger(__name__)


# ========== Provider Interfaces (Dependency Inversion) ==========

class ICalendarProvider(ABC):
    """Interface for business calendar access."""

    @abstractmethod
    def get_calendar(self) -> WorkCalendar:
        """Get the calendar currently in effect."""


class StaticCalendarProvider(ICalendarProvider):
    """Calendar resolved once from an in-memory settings map."""

    def __init__(self, raw_settings: Optional[Mapping[str, Any]] = None):
        self._calendar = resolve_work_calendar(raw_settings)

    def get_calendar(self) -> WorkCalendar:
        return self._calendar


# ========== Application Services ==========

class SLAClockService:
    """
    Service driving a ticket's SLA clock through its lifecycle.

    The hosting service persists the returned clocks; it must serialize
    updates of a given ticket (e.g. one transaction per row).
    """

    def __init__(
        self,
        calendar_provider: ICalendarProvider,
        risk_threshold_hours: Optional[float] = None,
        waiting_status: Optional[str] = None
    ):
        if risk_threshold_hours is None or waiting_status is None:
            settings = get_settings()
            if risk_threshold_hours is None:
                risk_threshold_hours = settings.sla_risk_threshold_hours
            if waiting_status is None:
                waiting_status = settings.sla_waiting_status

        self._calendar_provider = calendar_provider
        self._risk_threshold = timedelta(hours=risk_threshold_hours)
        self._waiting_status = waiting_status

    @property
    def risk_threshold(self) -> timedelta:
        return self._risk_threshold

    def open_clock(
        self,
        created_at: datetime,
        response_hours: Optional[float],
        resolution_hours: Optional[float],
        ticket_id: Optional[str] = None
    ) -> SlaClock:
        """
        Anchor the deadlines of a new ticket.

        Args:
            created_at: Ticket creation time
            response_hours: First-response budget in work hours
            resolution_hours: Resolution budget in work hours
            ticket_id: Used for log correlation only

        Returns:
            SlaClock: Running clock
        """
        calendar = self._calendar_provider.get_calendar()
        clock = SLAClockController.start(created_at, response_hours, resolution_hours, calendar)

        logger.info(
            "SLA clock opened",
            extra={
                "correlation_id": ticket_id,
                "response_deadline": clock.response_deadline.isoformat() if clock.response_deadline else None,
                "resolution_deadline": clock.resolution_deadline.isoformat() if clock.resolution_deadline else None,
            }
        )
        return clock

    def on_status_change(
        self,
        clock: SlaClock,
        previous_status: str,
        new_status: str,
        now: datetime,
        ticket_id: Optional[str] = None
    ) -> SlaClock:
        """
        Apply a ticket status transition to its clock.

        Entering the waiting status pauses the clock; leaving it resumes.
        Moving to IN_PROGRESS records the first response and CLOSED records
        the resolution. Leaving CLOSED clears the resolution again.
        """
        if new_status == previous_status:
            return clock

        if previous_status == TicketStatus.CLOSED:
            clock = SLAClockController.reopen(clock)

        if new_status == self._waiting_status:
            if not clock.is_paused:
                logger.info("SLA clock paused", extra={"correlation_id": ticket_id, "from_status": previous_status})
            clock = SLAClockController.pause(clock, now)
        elif clock.is_paused:
            clock = SLAClockController.resume(clock, now)
            logger.info(
                "SLA clock resumed",
                extra={
                    "correlation_id": ticket_id,
                    "to_status": new_status,
                    "accumulated_pause_seconds": clock.accumulated_pause_seconds,
                }
            )

        if new_status == TicketStatus.IN_PROGRESS:
            clock = SLAClockController.mark_responded(clock, now)
        elif new_status == TicketStatus.CLOSED:
            clock = SLAClockController.mark_resolved(clock, now)

        return clock

    def evaluate(self, clock: SlaClock, now: datetime) -> SLAMetrics:
        """Evaluate both SLA targets of a clock."""
        return BreachEvaluator.evaluate(clock, now, self._risk_threshold)

    def describe(
        self,
        clock: SlaClock,
        now: datetime,
        ticket_id: Optional[str] = None
    ) -> TicketSLAResponse:
        """Evaluate a clock into its API representation."""
        return TicketSLAResponse.from_domain(self.evaluate(clock, now), ticket_id)

    def summarize(self, clocks: Iterable[SlaClock], now: datetime) -> OperationalSummary:
        """
        Count tickets by the standing of their resolution target.

        Paused clocks are counted apart, whatever their deadline. Tickets
        resolved after their deadline count as ``missed``, never as overdue.
        Compliance is met / (met + missed) and the average pause is taken
        over resolved tickets.
        """
        counts = {"ok": 0, "at_risk": 0, "overdue": 0, "paused": 0, "met": 0, "missed": 0, "no_sla": 0}
        total = 0
        resolved_pause_seconds = []

        for clock in clocks:
            total += 1
            if clock.resolution_met_at is not None:
                resolved_pause_seconds.append(clock.accumulated_pause_seconds)
            if clock.is_paused:
                counts["paused"] += 1
                continue

            state = BreachEvaluator.status(clock, now, risk_threshold=self._risk_threshold).state
            if state == SLAState.BREACHED:
                if clock.resolution_met_at is not None:
                    counts["missed"] += 1
                else:
                    counts["overdue"] += 1
            elif state == SLAState.AT_RISK:
                counts["at_risk"] += 1
            elif state == SLAState.MET:
                counts["met"] += 1
            elif state == SLAState.NO_SLA:
                counts["no_sla"] += 1
            else:
                counts["ok"] += 1

        breach_rate = round(counts["overdue"] / total * 100, 2) if total else 0.0

        closed_with_sla = counts["met"] + counts["missed"]
        compliance_rate = round(counts["met"] / closed_with_sla * 100, 2) if closed_with_sla else 100.0

        avg_paused_seconds = 0.0
        if resolved_pause_seconds:
            avg_paused_seconds = round(sum(resolved_pause_seconds) / len(resolved_pause_seconds), 2)

        return OperationalSummary(
            total=total,
            breach_rate=breach_rate,
            compliance_rate=compliance_rate,
            avg_paused_seconds=avg_paused_seconds,
            **counts
        )
