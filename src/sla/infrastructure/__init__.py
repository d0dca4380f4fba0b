"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for the SLA engine:
- External: calendar settings store (YAML file, watchdog hot reload)
"""

from sla.infrastructure.external import CalendarSettingsManager, ConfigFileHandler, create_calendar_provider

__all__ = [
    "CalendarSettingsManager",
    "ConfigFileHandler",
    "create_calendar_provider",
]
