"""
SLA Domain Entities
====================

Pure Python domain entities for SLA tracking.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from config import SLAType, SLAState, VALID_SLA_TYPES
from core.exceptions import ValidationException
from sla.domain.value_objects import as_aware


def _check_sla_type(sla_type: str) -> None:
    if sla_type not in VALID_SLA_TYPES:
        raise ValidationException(
            f"Unknown SLA type '{sla_type}'",
            {"sla_type": sla_type, "allowed": VALID_SLA_TYPES}
        )


@dataclass(frozen=True)
class SlaClock:
    """
    SLA clock of a single ticket.

    Holds the two deadlines, the pause marker and the cumulative paused time.
    The ticket record owns it; transitions return a fresh copy.
    """

    response_deadline: Optional[datetime] = None
    resolution_deadline: Optional[datetime] = None
    paused_at: Optional[datetime] = None
    accumulated_pause_seconds: int = 0

    # When the targets were met
    response_met_at: Optional[datetime] = None
    resolution_met_at: Optional[datetime] = None

    def __post_init__(self):
        if self.accumulated_pause_seconds < 0:
            raise ValidationException(
                "Accumulated pause time cannot be negative",
                {"accumulated_pause_seconds": self.accumulated_pause_seconds}
            )
        # Record columns without an offset are UTC
        for name in ("response_deadline", "resolution_deadline", "paused_at",
                     "response_met_at", "resolution_met_at"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, as_aware(value))

    @property
    def is_paused(self) -> bool:
        """Check if the clock is currently paused."""
        return self.paused_at is not None

    def deadline_for(self, sla_type: SLAType) -> Optional[datetime]:
        """Get the deadline of the given SLA type."""
        _check_sla_type(sla_type)
        if sla_type == SLAType.RESPONSE:
            return self.response_deadline
        return self.resolution_deadline

    def met_at_for(self, sla_type: SLAType) -> Optional[datetime]:
        """Get when the given SLA target was met, if it was."""
        _check_sla_type(sla_type)
        if sla_type == SLAType.RESPONSE:
            return self.response_met_at
        return self.resolution_met_at


@dataclass(frozen=True)
class SLAStatus:
    """
    Standing of one SLA target at a point in time.

    ``hours_remaining`` is negative once the deadline has passed and None
    when the ticket has no deadline for this target.
    """

    sla_type: SLAType
    state: SLAState
    deadline: Optional[datetime] = None
    hours_remaining: Optional[float] = None
    is_paused: bool = False
    met_at: Optional[datetime] = None

    @property
    def is_breached(self) -> bool:
        return self.state == SLAState.BREACHED

    @property
    def hours_overdue(self) -> float:
        """Hours past the deadline, 0 if not overdue."""
        if self.hours_remaining is None or self.hours_remaining > 0:
            return 0.0
        return -self.hours_remaining


@dataclass(frozen=True)
class SLAMetrics:
    """SLA standing of both targets of a ticket."""

    response: SLAStatus
    resolution: SLAStatus

    @property
    def is_any_breached(self) -> bool:
        return self.response.is_breached or self.resolution.is_breached

    @property
    def is_paused(self) -> bool:
        return self.response.is_paused or self.resolution.is_paused

    @property
    def most_urgent_state(self) -> SLAState:
        """Get the most urgent SLA state."""
        states = (self.response.state, self.resolution.state)
        if SLAState.BREACHED in states:
            return SLAState.BREACHED
        if SLAState.AT_RISK in states:
            return SLAState.AT_RISK
        if SLAState.ON_TRACK in states:
            return SLAState.ON_TRACK
        if SLAState.MET in states:
            return SLAState.MET
        return SLAState.NO_SLA

    @property
    def next_deadline(self) -> Optional[datetime]:
        """Get the next deadline still running, if any."""
        for status in (self.response, self.resolution):
            if status.state in (SLAState.ON_TRACK, SLAState.AT_RISK):
                return status.deadline
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        def _status(status: SLAStatus) -> dict:
            return {
                "deadline": status.deadline.isoformat() if status.deadline else None,
                "hours_remaining": status.hours_remaining,
                "state": status.state,
                "is_paused": status.is_paused,
                "met_at": status.met_at.isoformat() if status.met_at else None
            }

        next_deadline = self.next_deadline
        return {
            "response": _status(self.response),
            "resolution": _status(self.resolution),
            "overall": {
                "state": self.most_urgent_state,
                "is_any_breached": self.is_any_breached,
                "is_paused": self.is_paused,
                "next_deadline": next_deadline.isoformat() if next_deadline else None
            }
        }
