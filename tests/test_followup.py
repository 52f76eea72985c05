"""
Tests for the Follow-up Tracker: outcome reports, notifications and follow-up windows.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from onboard.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from onboard.core.identity import Actor, Role
from onboard.repositories.notification import NotificationRepository
from onboard.repositories.payment import PaymentRepository
from onboard.repositories.vendor import FollowUpHistoryRepository
from onboard.schemas.followup import FollowUpOutcomeIn, FollowUpWindow
from onboard.services.followup import FollowUpService
from onboard.services.notification import NotificationService

AGENT = Actor(id="agent-1", role=Role.AGENT, name="Ravi")
STRANGER = Actor(id="agent-2", role=Role.AGENT, name="Meera")

NOW = datetime(2026, 10, 16, 10, 0, tzinfo=timezone.utc)


class BrokenNotifier:
    async def create_status_update(self, *args, **kwargs):
        raise RuntimeError("notification store unavailable")


@pytest.fixture
def tracker(session, client_id):
    return FollowUpService(session, client_id, notifier=NotificationService(session, client_id))


@pytest.fixture
async def scheduled_vendor(make_vendor):
    """Category A vendor whose first visit (140) has been charged already."""
    return await make_vendor(
        payment_category="A",
        visit_status="visited-followup-scheduled",
        follow_up_date=NOW,
        total_payment_due=Decimal("140"),
        total_payment_paid=Decimal("140"),
    )


class TestReportOutcome:
    async def test_onboarded_pays_balance(self, tracker, session, client_id, scheduled_vendor):
        result = await tracker.report_outcome(scheduled_vendor.id, AGENT, "onboarded", remarks="Signed", now=NOW)

        vendor = result.vendor
        assert vendor.visit_status == "followup-onboarded"
        assert vendor.payment_completed
        assert vendor.total_payment_paid == Decimal("700")
        assert vendor.last_outcome == "onboarded"
        assert vendor.last_remarks == "Signed"
        assert result.payment.amount == Decimal("560")
        assert result.payment.payment_type == "balance"

        history = await FollowUpHistoryRepository(session, client_id).list_for_vendor(vendor.id)
        assert [(h.outcome, h.visit_status, h.updated_by) for h in history] == [
            ("onboarded", "followup-onboarded", "agent-1"),
        ]

    async def test_notification_is_written(self, tracker, session, client_id, scheduled_vendor):
        await tracker.report_outcome(scheduled_vendor.id, AGENT, "onboarded", now=NOW)

        items, total = await NotificationRepository(session, client_id).list()
        assert total == 1
        assert items[0].title == "Vendor Onboarded"
        assert items[0].user_name == "Ravi"
        assert "Spice Route" in items[0].message

    async def test_second_followup_sets_date(self, tracker, scheduled_vendor):
        next_visit = NOW + timedelta(days=5)
        result = await tracker.report_outcome(
            scheduled_vendor.id, AGENT, "2nd-followup", next_follow_up_date=next_visit, now=NOW
        )
        assert result.vendor.visit_status == "followup-2nd-scheduled"
        assert result.vendor.second_follow_up_date is not None
        assert not result.payment_created
        assert not result.vendor.payment_completed

    async def test_stranger_is_forbidden(self, tracker, session, client_id, scheduled_vendor):
        with pytest.raises(ForbiddenError):
            await tracker.report_outcome(scheduled_vendor.id, STRANGER, "onboarded", now=NOW)

        assert scheduled_vendor.visit_status == "visited-followup-scheduled"
        assert await PaymentRepository(session, client_id).all_for_vendor(scheduled_vendor.id) == []

    async def test_assigned_agent_may_report(self, tracker, make_vendor):
        vendor = await make_vendor(
            payment_category="D", visit_status="visited-followup-scheduled", assigned_agent_id="agent-2"
        )
        result = await tracker.report_outcome(vendor.id, STRANGER, "rejected", now=NOW)
        assert result.vendor.visit_status == "followup-rejected"
        assert not result.payment_created

    async def test_empty_outcome(self, tracker, scheduled_vendor):
        with pytest.raises(ValidationError) as exc:
            await tracker.report_outcome(scheduled_vendor.id, AGENT, "", now=NOW)
        assert exc.value.field == "outcome"

    async def test_unknown_vendor(self, tracker):
        with pytest.raises(NotFoundError):
            await tracker.report_outcome("missing", AGENT, "onboarded", now=NOW)

    async def test_no_followup_scheduled(self, tracker, make_vendor):
        vendor = await make_vendor(payment_category="A")
        with pytest.raises(ValidationError):
            await tracker.report_outcome(vendor.id, AGENT, "onboarded", now=NOW)

    async def test_notifier_failure_does_not_fail_report(self, session, client_id, scheduled_vendor):
        tracker = FollowUpService(session, client_id, notifier=BrokenNotifier())
        result = await tracker.report_outcome(scheduled_vendor.id, AGENT, "onboarded", now=NOW)
        assert result.vendor.visit_status == "followup-onboarded"
        assert result.payment.amount == Decimal("560")


class TestLegacyPayload:
    def test_status_and_notes_are_mapped(self):
        body = FollowUpOutcomeIn.model_validate({"status": "followup-rejected", "notes": "Closed down"})
        assert body.outcome == "rejected"
        assert body.remarks == "Closed down"

    def test_explicit_outcome_wins(self):
        body = FollowUpOutcomeIn.model_validate({"outcome": "onboarded", "status": "followup-rejected"})
        assert body.outcome == "onboarded"


class TestFollowUpDatesInUtc:
    LATE_EVENING_EST = {"outcome": "2nd-followup", "nextFollowUpDate": "2026-10-16T23:00:00-05:00"}

    def test_offset_is_converted(self):
        body = FollowUpOutcomeIn.model_validate(self.LATE_EVENING_EST)
        assert body.next_follow_up_date == datetime(2026, 10, 17, 4, 0, tzinfo=timezone.utc)
        assert body.next_follow_up_date.utcoffset() == timedelta(0)

    def test_naive_date_is_read_as_utc(self):
        body = FollowUpOutcomeIn.model_validate({"nextFollowUpDate": "2026-10-16T23:00:00"})
        assert body.next_follow_up_date == datetime(2026, 10, 16, 23, 0, tzinfo=timezone.utc)

    async def test_offset_date_lands_in_the_right_window(self, tracker, scheduled_vendor):
        body = FollowUpOutcomeIn.model_validate(self.LATE_EVENING_EST)
        await tracker.report_outcome(
            scheduled_vendor.id, AGENT, body.outcome,
            next_follow_up_date=body.next_follow_up_date, now=NOW,
        )

        due = await tracker.due_follow_ups("agent-1", FollowUpWindow.DUE, now=NOW)
        upcoming = await tracker.due_follow_ups("agent-1", FollowUpWindow.UPCOMING, now=NOW)
        assert [v.id for v in due] == []
        assert [v.id for v in upcoming] == [scheduled_vendor.id]


class TestDueFollowUps:
    @pytest.fixture
    async def vendors(self, make_vendor):
        return {
            "overdue": await make_vendor(
                restaurant_name="Overdue", visit_status="visited-followup-scheduled",
                follow_up_date=NOW - timedelta(days=2),
            ),
            "tomorrow": await make_vendor(
                restaurant_name="Tomorrow", visit_status="visited-followup-scheduled",
                follow_up_date=NOW + timedelta(days=1),
            ),
            "second": await make_vendor(
                restaurant_name="Second", visit_status="followup-2nd-scheduled",
                follow_up_date=NOW - timedelta(days=10),
                second_follow_up_date=NOW + timedelta(days=20),
            ),
            "done": await make_vendor(
                restaurant_name="Done", visit_status="followup-onboarded",
                follow_up_date=NOW - timedelta(days=1),
            ),
            "fresh": await make_vendor(restaurant_name="Fresh"),
            "foreign": await make_vendor(
                restaurant_name="Foreign", created_by_id="agent-2",
                visit_status="visited-followup-scheduled", follow_up_date=NOW,
            ),
        }

    @staticmethod
    def _names(vendors):
        return [v.restaurant_name for v in vendors]

    async def test_due(self, tracker, vendors):
        result = await tracker.due_follow_ups("agent-1", FollowUpWindow.DUE, now=NOW)
        assert self._names(result) == ["Overdue"]

    async def test_upcoming(self, tracker, vendors):
        result = await tracker.due_follow_ups("agent-1", FollowUpWindow.UPCOMING, now=NOW)
        assert self._names(result) == ["Tomorrow", "Second"]

    async def test_week(self, tracker, vendors):
        result = await tracker.due_follow_ups("agent-1", FollowUpWindow.WEEK, now=NOW)
        assert self._names(result) == ["Tomorrow"]

    async def test_month(self, tracker, vendors):
        result = await tracker.due_follow_ups("agent-1", FollowUpWindow.MONTH, now=NOW)
        assert self._names(result) == ["Tomorrow", "Second"]

    async def test_all_followups(self, tracker, vendors):
        result = await tracker.due_follow_ups("agent-1", now=NOW)
        assert set(self._names(result)) == {"Overdue", "Tomorrow", "Second", "Done"}
