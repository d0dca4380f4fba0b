"""
SLA Application Layer
======================

Application layer for the SLA deadline engine.

Contains:
- Services: Drive ticket SLA clocks through their lifecycle
- DTOs: Data transfer objects for the hosting ticket service

This layer depends on the domain layer and the calendar provider interface,
but not on concrete infrastructure implementations.
"""

from sla.application.dto import (
    SlaClockDTO,
    SLAStatusResponse,
    TicketSLAResponse,
    OperationalSummary,
)
from sla.application.services import (
    SLAClockService,
    ICalendarProvider,
    StaticCalendarProvider,
)

__all__ = [
    # DTOs
    "SlaClockDTO",
    "SLAStatusResponse",
    "TicketSLAResponse",
    "OperationalSummary",
    # Services
    "SLAClockService",
    # Provider Interfaces
    "ICalendarProvider",
    "StaticCalendarProvider",
]
