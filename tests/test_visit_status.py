"""
Unit Tests for the Visit-Status State Machine
"""

from datetime import datetime, timezone

import pytest

from onboard.core.exceptions import ValidationError
from onboard.services.visit_status import (
    TERMINAL_STATUSES,
    VisitStatus,
    allowed_transitions,
    assert_transition,
    can_transition,
    is_terminal,
    next_status,
)

NEXT_WEEK = datetime(2026, 10, 23, tzinfo=timezone.utc)


class TestTransitions:
    def test_pending_visit_edges(self):
        assert allowed_transitions("pending-visit") == {
            VisitStatus.VISITED_ONBOARDED,
            VisitStatus.VISITED_REJECTED,
            VisitStatus.VISITED_FOLLOWUP_SCHEDULED,
        }

    def test_second_followup_edges(self):
        assert allowed_transitions(VisitStatus.FOLLOWUP_2ND_SCHEDULED) == {
            VisitStatus.SECOND_FOLLOWUP_ONBOARDED,
            VisitStatus.SECOND_FOLLOWUP_REJECTED,
        }

    @pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    def test_terminal_states_have_no_exit(self, status):
        assert is_terminal(status)
        assert allowed_transitions(status) == frozenset()

    def test_skipping_a_step_is_illegal(self):
        assert not can_transition("pending-visit", "followup-onboarded")
        with pytest.raises(ValidationError) as exc:
            assert_transition("pending-visit", "followup-onboarded")
        assert exc.value.field == "visitStatus"

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValidationError):
            can_transition("pending-visit", "archived")


class TestNextStatus:
    @pytest.mark.parametrize(
        "current, outcome, expected",
        [
            ("visited-followup-scheduled", "onboarded", VisitStatus.FOLLOWUP_ONBOARDED),
            ("visited-followup-scheduled", "rejected", VisitStatus.FOLLOWUP_REJECTED),
            ("followup-2nd-scheduled", "onboarded", VisitStatus.SECOND_FOLLOWUP_ONBOARDED),
            ("followup-2nd-scheduled", "rejected", VisitStatus.SECOND_FOLLOWUP_REJECTED),
        ],
    )
    def test_outcome_derivation(self, current, outcome, expected):
        assert next_status(current, outcome) is expected

    def test_second_followup_needs_date(self):
        with pytest.raises(ValidationError) as exc:
            next_status("visited-followup-scheduled", "2nd-followup")
        assert exc.value.field == "nextFollowUpDate"

    def test_second_followup_with_date(self):
        result = next_status("visited-followup-scheduled", "2nd-followup", NEXT_WEEK)
        assert result is VisitStatus.FOLLOWUP_2ND_SCHEDULED

    def test_no_third_followup(self):
        with pytest.raises(ValidationError):
            next_status("followup-2nd-scheduled", "2nd-followup", NEXT_WEEK)

    @pytest.mark.parametrize("current", ["pending-visit", "visited-onboarded", "followup-rejected"])
    def test_outcome_without_scheduled_followup(self, current):
        with pytest.raises(ValidationError):
            next_status(current, "onboarded")

    @pytest.mark.parametrize("outcome", [None, "", "  ", "maybe"])
    def test_missing_or_unknown_outcome(self, outcome):
        with pytest.raises(ValidationError) as exc:
            next_status("visited-followup-scheduled", outcome)
        assert exc.value.field == "outcome"
