"""Visit-status state machine for the vendor onboarding funnel.

    pending-visit
      ├── visited-onboarded                       (terminal)
      ├── visited-rejected                        (terminal)
      └── visited-followup-scheduled
            ├── followup-onboarded                (terminal)
            ├── followup-rejected                 (terminal)
            └── followup-2nd-scheduled
                  ├── 2nd-followup-onboarded      (terminal)
                  └── 2nd-followup-rejected       (terminal)

Admins move vendors along any legal edge directly; agents report an
*outcome* from one of the two scheduled states and the next status is
derived from it.

Rule: no SQLAlchemy / no FastAPI here.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from onboard.core.exceptions import ValidationError


class VisitStatus(str, Enum):
    PENDING_VISIT = "pending-visit"
    VISITED_ONBOARDED = "visited-onboarded"
    VISITED_REJECTED = "visited-rejected"
    VISITED_FOLLOWUP_SCHEDULED = "visited-followup-scheduled"
    FOLLOWUP_ONBOARDED = "followup-onboarded"
    FOLLOWUP_REJECTED = "followup-rejected"
    FOLLOWUP_2ND_SCHEDULED = "followup-2nd-scheduled"
    SECOND_FOLLOWUP_ONBOARDED = "2nd-followup-onboarded"
    SECOND_FOLLOWUP_REJECTED = "2nd-followup-rejected"


class Outcome(str, Enum):
    ONBOARDED = "onboarded"
    REJECTED = "rejected"
    SECOND_FOLLOWUP = "2nd-followup"


INITIAL_STATUS = VisitStatus.PENDING_VISIT

TRANSITIONS: dict[VisitStatus, frozenset[VisitStatus]] = {
    VisitStatus.PENDING_VISIT: frozenset({
        VisitStatus.VISITED_ONBOARDED,
        VisitStatus.VISITED_REJECTED,
        VisitStatus.VISITED_FOLLOWUP_SCHEDULED,
    }),
    VisitStatus.VISITED_FOLLOWUP_SCHEDULED: frozenset({
        VisitStatus.FOLLOWUP_ONBOARDED,
        VisitStatus.FOLLOWUP_REJECTED,
        VisitStatus.FOLLOWUP_2ND_SCHEDULED,
    }),
    VisitStatus.FOLLOWUP_2ND_SCHEDULED: frozenset({
        VisitStatus.SECOND_FOLLOWUP_ONBOARDED,
        VisitStatus.SECOND_FOLLOWUP_REJECTED,
    }),
}

TERMINAL_STATUSES: frozenset[VisitStatus] = frozenset({
    VisitStatus.VISITED_ONBOARDED,
    VisitStatus.VISITED_REJECTED,
    VisitStatus.FOLLOWUP_ONBOARDED,
    VisitStatus.FOLLOWUP_REJECTED,
    VisitStatus.SECOND_FOLLOWUP_ONBOARDED,
    VisitStatus.SECOND_FOLLOWUP_REJECTED,
})

# States in which an agent owes the vendor another visit
SCHEDULED_STATUSES: frozenset[VisitStatus] = frozenset({
    VisitStatus.VISITED_FOLLOWUP_SCHEDULED,
    VisitStatus.FOLLOWUP_2ND_SCHEDULED,
})

# Everything reachable once a follow-up has been scheduled
FOLLOWUP_FUNNEL_STATUSES: frozenset[VisitStatus] = SCHEDULED_STATUSES | frozenset({
    VisitStatus.FOLLOWUP_ONBOARDED,
    VisitStatus.FOLLOWUP_REJECTED,
    VisitStatus.SECOND_FOLLOWUP_ONBOARDED,
    VisitStatus.SECOND_FOLLOWUP_REJECTED,
})

_OUTCOME_TARGETS: dict[tuple[VisitStatus, Outcome], VisitStatus] = {
    (VisitStatus.VISITED_FOLLOWUP_SCHEDULED, Outcome.ONBOARDED): VisitStatus.FOLLOWUP_ONBOARDED,
    (VisitStatus.VISITED_FOLLOWUP_SCHEDULED, Outcome.REJECTED): VisitStatus.FOLLOWUP_REJECTED,
    (VisitStatus.VISITED_FOLLOWUP_SCHEDULED, Outcome.SECOND_FOLLOWUP): VisitStatus.FOLLOWUP_2ND_SCHEDULED,
    (VisitStatus.FOLLOWUP_2ND_SCHEDULED, Outcome.ONBOARDED): VisitStatus.SECOND_FOLLOWUP_ONBOARDED,
    (VisitStatus.FOLLOWUP_2ND_SCHEDULED, Outcome.REJECTED): VisitStatus.SECOND_FOLLOWUP_REJECTED,
}


def parse_status(value: str | VisitStatus, field: str = "visitStatus") -> VisitStatus:
    try:
        return VisitStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown visit status '{value}'", field=field) from None


def parse_outcome(value: str | Outcome | None) -> Outcome:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Outcome is required", field="outcome")
    try:
        return Outcome(value.strip() if isinstance(value, str) else value)
    except ValueError:
        allowed = ", ".join(o.value for o in Outcome)
        raise ValidationError(
            f"Unknown outcome '{value}'. Expected one of: {allowed}", field="outcome"
        ) from None


def allowed_transitions(status: str | VisitStatus) -> frozenset[VisitStatus]:
    return TRANSITIONS.get(parse_status(status), frozenset())


def is_terminal(status: str | VisitStatus) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def can_transition(current: str | VisitStatus, new: str | VisitStatus) -> bool:
    return parse_status(new) in allowed_transitions(current)


def assert_transition(current: str | VisitStatus, new: str | VisitStatus) -> None:
    """Raise ValidationError unless ``current -> new`` is a legal edge."""
    if not can_transition(current, new):
        raise ValidationError(
            f"Illegal visit status transition: {VisitStatus(current).value} -> {VisitStatus(new).value}",
            field="visitStatus",
        )


def next_status(
    current: str | VisitStatus,
    outcome: str | Outcome,
    next_follow_up_date: datetime | None = None,
) -> VisitStatus:
    """Derive the status an agent-reported outcome leads to.

    Outcomes are only accepted while a follow-up is scheduled; a
    ``2nd-followup`` outcome additionally needs the date of that visit.
    """
    current = parse_status(current)
    outcome = parse_outcome(outcome)

    if current not in SCHEDULED_STATUSES:
        raise ValidationError(
            f"No follow-up is scheduled for a vendor in status '{current.value}'",
            field="outcome",
        )
    if outcome is Outcome.SECOND_FOLLOWUP and next_follow_up_date is None:
        raise ValidationError(
            "nextFollowUpDate is required to schedule a 2nd follow-up",
            field="nextFollowUpDate",
        )

    target = _OUTCOME_TARGETS.get((current, outcome))
    if target is None:
        raise ValidationError(
            f"Outcome '{outcome.value}' is not allowed from status '{current.value}'",
            field="outcome",
        )
    return target
