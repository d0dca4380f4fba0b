from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from sla.domain import WorkCalendar

LISBON = ZoneInfo("Europe/Lisbon")


@pytest.fixture
def calendar() -> WorkCalendar:
    """09:00-18:00, lunch 12:00-13:00, Mon-Fri, Europe/Lisbon."""
    return WorkCalendar()


@pytest.fixture
def lisbon():
    """Build an aware Europe/Lisbon datetime."""

    def _build(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
        return datetime(year, month, day, hour, minute, second, tzinfo=LISBON)

    return _build
