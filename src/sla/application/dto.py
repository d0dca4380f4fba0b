"""
SLA Application DTOs
=====================

Data Transfer Objects between the SLA engine and the hosting ticket service.

These Pydantic models handle serialization/deserialization and validation
of the clock columns stored on the ticket record and of the SLA status
returned for display and reporting.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal
from datetime import datetime

from sla.domain import SlaClock, SLAStatus, SLAMetrics


# ========== Type Aliases for Literals ==========
SLATypeStr = Literal["response", "resolution"]
SLAStateStr = Literal["on_track", "at_risk", "breached", "met", "no_sla"]


# ========== Ticket Record DTOs ==========

class SlaClockDTO(BaseModel):
    """
    SLA clock columns as kept on the ticket record.

    Accepts the record's camelCase column names as well as field names.
    """
    model_config = ConfigDict(populate_by_name=True)

    response_deadline: Optional[datetime] = Field(None, alias="slaResponseDeadline")
    resolution_deadline: Optional[datetime] = Field(None, alias="slaResolutionDeadline")
    paused_at: Optional[datetime] = Field(None, alias="slaPausedAt")
    paused_duration: int = Field(
        default=0,
        ge=0,
        alias="slaPausedDuration",
        description="Total paused seconds"
    )
    response_at: Optional[datetime] = Field(None, alias="slaResponseAt")
    resolved_at: Optional[datetime] = Field(None, alias="slaResolvedAt")

    def to_domain(self) -> SlaClock:
        """Convert to domain entity."""
        return SlaClock(
            response_deadline=self.response_deadline,
            resolution_deadline=self.resolution_deadline,
            paused_at=self.paused_at,
            accumulated_pause_seconds=self.paused_duration,
            response_met_at=self.response_at,
            resolution_met_at=self.resolved_at
        )

    @classmethod
    def from_domain(cls, clock: SlaClock) -> "SlaClockDTO":
        """Create from domain entity."""
        return cls(
            response_deadline=clock.response_deadline,
            resolution_deadline=clock.resolution_deadline,
            paused_at=clock.paused_at,
            paused_duration=clock.accumulated_pause_seconds,
            response_at=clock.response_met_at,
            resolved_at=clock.resolution_met_at
        )


# ========== Response DTOs ==========

class SLAStatusResponse(BaseModel):
    """Response model for the status of a single SLA target."""
    sla_type: SLATypeStr
    state: SLAStateStr = Field(..., description="Current SLA state")
    deadline: Optional[datetime] = Field(None, description="SLA deadline, pause-adjusted")
    hours_remaining: Optional[float] = Field(
        None,
        description="Hours left before the deadline, negative when overdue"
    )
    is_paused: bool = Field(default=False, description="Whether the clock is paused")
    met_at: Optional[datetime] = Field(None, description="When the SLA target was met")

    @classmethod
    def from_domain(cls, status: SLAStatus) -> "SLAStatusResponse":
        return cls(
            sla_type=status.sla_type,
            state=status.state,
            deadline=status.deadline,
            hours_remaining=round(status.hours_remaining, 2) if status.hours_remaining is not None else None,
            is_paused=status.is_paused,
            met_at=status.met_at
        )


class TicketSLAResponse(BaseModel):
    """Response model for ticket SLA information."""
    ticket_id: Optional[str] = Field(None, description="Ticket ID")
    response_sla: SLAStatusResponse = Field(..., description="Response SLA status")
    resolution_sla: SLAStatusResponse = Field(..., description="Resolution SLA status")
    overall_state: SLAStateStr = Field(..., description="Overall SLA state")
    is_paused: bool = False
    next_deadline: Optional[datetime] = Field(None, description="Next running deadline")

    @classmethod
    def from_domain(cls, metrics: SLAMetrics, ticket_id: Optional[str] = None) -> "TicketSLAResponse":
        return cls(
            ticket_id=ticket_id,
            response_sla=SLAStatusResponse.from_domain(metrics.response),
            resolution_sla=SLAStatusResponse.from_domain(metrics.resolution),
            overall_state=metrics.most_urgent_state,
            is_paused=metrics.is_paused,
            next_deadline=metrics.next_deadline
        )


class OperationalSummary(BaseModel):
    """Operational SLA counts and rates over a set of tickets."""
    total: int = 0
    ok: int = 0
    at_risk: int = 0
    overdue: int = 0
    paused: int = 0
    met: int = 0
    missed: int = 0
    no_sla: int = 0
    breach_rate: float = Field(default=0.0, description="Percentage of tickets overdue")
    compliance_rate: float = Field(
        default=100.0,
        description="Percentage of resolved tickets closed within their deadline"
    )
    avg_paused_seconds: float = Field(
        default=0.0,
        description="Average accumulated pause time of resolved tickets"
    )
