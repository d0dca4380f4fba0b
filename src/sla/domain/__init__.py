"""
SLA Domain Layer
================

Domain layer for the SLA deadline engine.

Contains:
- Entities: SlaClock and the evaluation results (SLAStatus, SLAMetrics)
- Value Objects: WorkCalendar and the raw-settings resolver
- Domain Services: WorkHoursCalculator, SLAClockController, BreachEvaluator

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from sla.domain.entities import SlaClock, SLAStatus, SLAMetrics
from sla.domain.value_objects import (
    WorkCalendar,
    CalendarSettings,
    resolve_work_calendar,
)
from sla.domain.calculator import WorkHoursCalculator, CursorState
from sla.domain.clock import SLAClockController
from sla.domain.evaluator import BreachEvaluator, DEFAULT_RISK_THRESHOLD

__all__ = [
    # Entities
    "SlaClock",
    "SLAStatus",
    "SLAMetrics",
    # Value Objects
    "WorkCalendar",
    "CalendarSettings",
    "resolve_work_calendar",
    # Domain Services
    "WorkHoursCalculator",
    "CursorState",
    "SLAClockController",
    "BreachEvaluator",
    "DEFAULT_RISK_THRESHOLD",
]
