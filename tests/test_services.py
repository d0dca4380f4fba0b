from datetime import datetime, timedelta, timezone

import pytest
from config import SLAState, TicketStatus
from sla.application import (
    OperationalSummary,
    SLAClockService,
    SlaClockDTO,
    StaticCalendarProvider,
    TicketSLAResponse,
)
from sla.domain import SlaClock, SLAClockController

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service() -> SLAClockService:
    return SLAClockService(
        StaticCalendarProvider(),
        risk_threshold_hours=8,
        waiting_status=TicketStatus.WAITING_REPLY,
    )


def test_open_clock_uses_provider_calendar(service, lisbon):
    clock = service.open_clock(lisbon(2024, 1, 5, 17), 2, 8, ticket_id="T-1")
    assert clock.response_deadline == lisbon(2024, 1, 8, 10)
    assert clock.resolution_deadline == lisbon(2024, 1, 8, 16)


def test_open_clock_with_custom_calendar(lisbon):
    provider = StaticCalendarProvider({"slaWorkStartHour": "8", "slaWorkDays": "[1,2,3,4,5,6]"})
    service = SLAClockService(provider, risk_threshold_hours=8, waiting_status="WAITING_REPLY")
    # Saturday is a work day now, starting at 08:00
    clock = service.open_clock(lisbon(2024, 1, 5, 17), 2, None)
    assert clock.response_deadline == lisbon(2024, 1, 6, 9)
    assert clock.resolution_deadline is None


def test_entering_waiting_pauses(service):
    clock = SlaClock(resolution_deadline=NOW + timedelta(days=1))
    paused = service.on_status_change(clock, TicketStatus.OPEN, TicketStatus.WAITING_REPLY, NOW)
    assert paused.paused_at == NOW


def test_leaving_waiting_resumes_and_marks_response(service):
    clock = SLAClockController.pause(SlaClock(resolution_deadline=NOW + timedelta(days=1)), NOW)
    later = NOW + timedelta(hours=6)

    resumed = service.on_status_change(clock, TicketStatus.WAITING_REPLY, TicketStatus.IN_PROGRESS, later)

    assert not resumed.is_paused
    assert resumed.accumulated_pause_seconds == 6 * 3600
    assert resumed.resolution_deadline == NOW + timedelta(days=1, hours=6)
    assert resumed.response_met_at == later


def test_closing_a_waiting_ticket_resumes_and_resolves(service):
    clock = SLAClockController.pause(SlaClock(resolution_deadline=NOW + timedelta(days=1)), NOW)
    closed = service.on_status_change(
        clock, TicketStatus.WAITING_REPLY, TicketStatus.CLOSED, NOW + timedelta(hours=1)
    )
    assert not closed.is_paused
    assert closed.resolution_met_at == NOW + timedelta(hours=1)


def test_same_status_is_ignored(service):
    clock = SlaClock(resolution_deadline=NOW)
    assert service.on_status_change(clock, TicketStatus.OPEN, TicketStatus.OPEN, NOW) is clock


def test_status_change_on_running_clock_does_not_touch_deadlines(service):
    clock = SlaClock(resolution_deadline=NOW + timedelta(days=1))
    result = service.on_status_change(clock, TicketStatus.DRAFT, TicketStatus.OPEN, NOW)
    assert result == clock


def test_custom_waiting_status():
    service = SLAClockService(StaticCalendarProvider(), risk_threshold_hours=8, waiting_status="ON_HOLD")
    clock = SlaClock(resolution_deadline=NOW)
    assert service.on_status_change(clock, "OPEN", "ON_HOLD", NOW).is_paused
    assert not service.on_status_change(clock, "OPEN", TicketStatus.WAITING_REPLY, NOW).is_paused


def test_defaults_come_from_settings():
    service = SLAClockService(StaticCalendarProvider())
    assert service.risk_threshold == timedelta(hours=8)


def test_describe_builds_response(service):
    clock = SlaClock(
        response_deadline=NOW - timedelta(hours=1),
        resolution_deadline=NOW + timedelta(hours=30),
    )
    response = service.describe(clock, NOW, ticket_id="T-42")

    assert isinstance(response, TicketSLAResponse)
    assert response.ticket_id == "T-42"
    assert response.response_sla.state == SLAState.BREACHED
    assert response.response_sla.hours_remaining == -1.0
    assert response.resolution_sla.state == SLAState.ON_TRACK
    assert response.overall_state == SLAState.BREACHED
    assert response.next_deadline == NOW + timedelta(hours=30)
    assert response.model_dump(mode="json")["resolution_sla"]["state"] == "on_track"


def test_summarize(service):
    clocks = [
        SlaClock(resolution_deadline=NOW + timedelta(days=2)),
        SlaClock(resolution_deadline=NOW + timedelta(hours=2)),
        SlaClock(resolution_deadline=NOW - timedelta(hours=2)),
        SLAClockController.pause(SlaClock(resolution_deadline=NOW - timedelta(days=2)), NOW),
        SlaClock(),
        SlaClock(
            resolution_deadline=NOW + timedelta(hours=1),
            resolution_met_at=NOW - timedelta(hours=1),
        ),
    ]

    summary = service.summarize(clocks, NOW)

    assert summary.model_dump() == {
        "total": 6, "ok": 1, "at_risk": 1, "overdue": 1,
        "paused": 1, "met": 1, "missed": 0, "no_sla": 1,
        "breach_rate": 16.67, "compliance_rate": 100.0, "avg_paused_seconds": 0.0,
    }


def test_summarize_separates_late_resolutions_from_overdue(service):
    clocks = [
        SlaClock(resolution_deadline=NOW - timedelta(hours=3)),
        SlaClock(
            resolution_deadline=NOW - timedelta(days=1),
            resolution_met_at=NOW - timedelta(hours=2),
            accumulated_pause_seconds=600,
        ),
        SlaClock(
            resolution_deadline=NOW - timedelta(days=1),
            resolution_met_at=NOW - timedelta(days=2),
            accumulated_pause_seconds=0,
        ),
        SlaClock(
            resolution_deadline=NOW + timedelta(days=1),
            resolution_met_at=NOW - timedelta(hours=1),
            accumulated_pause_seconds=300,
        ),
    ]

    summary = service.summarize(clocks, NOW)

    assert summary.overdue == 1
    assert summary.missed == 1
    assert summary.met == 2
    assert summary.breach_rate == 25.0
    assert summary.compliance_rate == 66.67
    assert summary.avg_paused_seconds == 300.0


def test_summarize_nothing(service):
    assert service.summarize([], NOW).model_dump() == OperationalSummary().model_dump()


def test_clock_dto_reads_ticket_record_columns():
    dto = SlaClockDTO.model_validate({
        "slaResponseDeadline": "2024-01-08T10:00:00+00:00",
        "slaResolutionDeadline": "2024-01-10T18:00:00+00:00",
        "slaPausedAt": None,
        "slaPausedDuration": 120,
        "slaResponseAt": "2024-01-08T09:30:00+00:00",
    })
    clock = dto.to_domain()

    assert clock.response_deadline == datetime(2024, 1, 8, 10, 0, tzinfo=timezone.utc)
    assert clock.accumulated_pause_seconds == 120
    assert clock.response_met_at == datetime(2024, 1, 8, 9, 30, tzinfo=timezone.utc)
    assert clock.resolution_met_at is None
    assert SlaClockDTO.from_domain(clock).model_dump() == dto.model_dump()


def test_clock_dto_rejects_negative_pause_duration():
    with pytest.raises(ValueError):
        SlaClockDTO(paused_duration=-1)


def test_clock_from_naive_record_columns_is_read_as_utc(service):
    clock = SlaClockDTO.model_validate({
        "slaResolutionDeadline": "2024-01-10T18:00:00",
        "slaPausedAt": "2024-01-10T10:00:00",
    }).to_domain()

    assert clock.resolution_deadline == datetime(2024, 1, 10, 18, 0, tzinfo=timezone.utc)
    assert service.evaluate(clock, NOW).resolution.hours_remaining == pytest.approx(8)

    resumed = SLAClockController.resume(clock, NOW)
    assert resumed.accumulated_pause_seconds == 2 * 3600
    assert resumed.resolution_deadline == datetime(2024, 1, 10, 20, 0, tzinfo=timezone.utc)


def test_running_clock_from_naive_record_columns_is_evaluated(service):
    clock = SlaClockDTO.model_validate({"slaResolutionDeadline": "2024-01-10T18:00:00"}).to_domain()
    status = service.evaluate(clock, NOW).resolution
    assert status.state == SLAState.AT_RISK
    assert status.hours_remaining == pytest.approx(6)


def test_reopening_clears_resolution(service):
    clock = SlaClock(resolution_deadline=NOW + timedelta(days=1))
    closed = service.on_status_change(clock, TicketStatus.IN_PROGRESS, TicketStatus.CLOSED, NOW)
    reopened = service.on_status_change(closed, TicketStatus.CLOSED, TicketStatus.OPEN, NOW + timedelta(hours=1))

    assert closed.resolution_met_at == NOW
    assert reopened.resolution_met_at is None
    assert service.evaluate(reopened, NOW + timedelta(hours=1)).resolution.state == SLAState.ON_TRACK
