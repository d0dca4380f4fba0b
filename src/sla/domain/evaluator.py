"""
Breach Evaluator
=================

Classifies the SLA standing of a ticket's clock.

While a clock is paused, time is frozen at the pause instant, so a ticket
waiting on the requester never becomes newly breached.
"""

from datetime import datetime, timedelta
from typing import Optional

from config import SLAType, SLAState
from sla.domain.entities import SlaClock, SLAStatus, SLAMetrics
from sla.domain.value_objects import as_aware

DEFAULT_RISK_THRESHOLD = timedelta(hours=8)


class BreachEvaluator:
    """Pure functions for SLA status evaluation."""

    @staticmethod
    def effective_now(clock: SlaClock, now: datetime) -> datetime:
        """The instant SLA time is measured at: the pause instant while paused."""
        if clock.is_paused:
            return clock.paused_at
        return as_aware(now)

    @staticmethod
    def status(
        clock: SlaClock,
        now: datetime,
        sla_type: SLAType = SLAType.RESOLUTION,
        risk_threshold: Optional[timedelta] = None
    ) -> SLAStatus:
        """
        Calculate the standing of one SLA target.

        Args:
            clock: Ticket SLA clock
            now: Current time, injected by the caller
            sla_type: Which deadline to evaluate
            risk_threshold: Window before the deadline counted as at risk

        Returns:
            SLAStatus: NO_SLA when the target has no deadline
        """
        if risk_threshold is None:
            risk_threshold = DEFAULT_RISK_THRESHOLD

        deadline = clock.deadline_for(sla_type)
        met_at = clock.met_at_for(sla_type)

        if deadline is None:
            return SLAStatus(
                sla_type=sla_type,
                state=SLAState.NO_SLA,
                is_paused=clock.is_paused,
                met_at=met_at
            )

        reference = BreachEvaluator.effective_now(clock, now)
        if met_at is not None:
            reference = min(reference, as_aware(met_at))

        remaining = deadline - reference
        hours_remaining = remaining.total_seconds() / 3600

        if met_at is not None:
            state = SLAState.MET if reference <= deadline else SLAState.BREACHED
        elif remaining <= timedelta(0):
            state = SLAState.BREACHED
        elif remaining < risk_threshold:
            state = SLAState.AT_RISK
        else:
            state = SLAState.ON_TRACK

        return SLAStatus(
            sla_type=sla_type,
            state=state,
            deadline=deadline,
            hours_remaining=hours_remaining,
            is_paused=clock.is_paused,
            met_at=met_at
        )

    @staticmethod
    def evaluate(
        clock: SlaClock,
        now: datetime,
        risk_threshold: Optional[timedelta] = None
    ) -> SLAMetrics:
        """Evaluate both the response and the resolution targets."""
        return SLAMetrics(
            response=BreachEvaluator.status(clock, now, SLAType.RESPONSE, risk_threshold),
            resolution=BreachEvaluator.status(clock, now, SLAType.RESOLUTION, risk_threshold)
        )
