"""
Application Status Workflow

Every legal status change and the side effects it carries are defined in
TRANSITIONS. The service consults ``plan_transition`` and applies the flags of
the returned rule; no other code decides whether a transition is allowed.

    REGISTERED ──submit──► PENDING ──approve──► APPROVED
                              ▲  └───reject───► REJECTED
                              └────resubmit───────┘
    APPROVED ◄──revise──► REJECTED
    any non-INACTIVE ──deactivate──► INACTIVE
"""

from dataclasses import dataclass

from .errors import InvalidStatusLabelError, InvalidStatusTransitionError
from .models import ApplicationStatus


@dataclass(frozen=True)
class TransitionRule:
    """Side effects of one (current, requested) status pair."""

    allocates_identifier: bool = False
    issues_credentials: bool = False
    normalizes_names: bool = False
    stores_remarks: bool = False
    records_history: bool = False
    notifies: bool = False


_SUBMIT = TransitionRule()
_APPROVE = TransitionRule(
    allocates_identifier=True,
    issues_credentials=True,
    normalizes_names=True,
    records_history=True,
    notifies=True,
)
_REJECT = TransitionRule(stores_remarks=True, records_history=True, notifies=True)
_DEACTIVATE = TransitionRule()

S = ApplicationStatus

TRANSITIONS: dict[tuple[ApplicationStatus, ApplicationStatus], TransitionRule] = {
    (S.REGISTERED, S.PENDING): _SUBMIT,
    (S.REJECTED, S.PENDING): _SUBMIT,
    (S.PENDING, S.APPROVED): _APPROVE,
    (S.PENDING, S.REJECTED): _REJECT,
    # Decision revisions
    (S.APPROVED, S.REJECTED): _REJECT,
    (S.REJECTED, S.APPROVED): _APPROVE,
    # Deactivation keeps any assigned identifier
    (S.REGISTERED, S.INACTIVE): _DEACTIVATE,
    (S.PENDING, S.INACTIVE): _DEACTIVATE,
    (S.APPROVED, S.INACTIVE): _DEACTIVATE,
    (S.REJECTED, S.INACTIVE): _DEACTIVATE,
}

# Statuses an administrator may decide
DECISIONS = frozenset({S.APPROVED, S.REJECTED})

# Statuses recorded in the decision history
AUDITED_STATUSES = frozenset({S.APPROVED, S.REJECTED})


def parse_status(label: "str | ApplicationStatus") -> ApplicationStatus:
    """
    Resolve a status label (case-insensitive).

    Raises:
        InvalidStatusLabelError: If the label is not a known status
    """
    if isinstance(label, ApplicationStatus):
        return label
    try:
        return ApplicationStatus(str(label).strip().upper())
    except ValueError as e:
        raise InvalidStatusLabelError(str(label)) from e


def plan_transition(
    current: ApplicationStatus, requested: ApplicationStatus
) -> TransitionRule | None:
    """
    Look up the rule for moving from ``current`` to ``requested``.

    Returns:
        The rule, or None for a self-transition (a no-op)

    Raises:
        InvalidStatusTransitionError: If the pair is not in TRANSITIONS
    """
    if current == requested:
        return None

    rule = TRANSITIONS.get((current, requested))
    if rule is None:
        raise InvalidStatusTransitionError(current.value, requested.value)
    return rule


def allowed_targets(current: ApplicationStatus) -> set[ApplicationStatus]:
    return {target for (source, target) in TRANSITIONS if source == current}


def capitalize_first(value: str | None) -> str | None:
    """Upper-case the first letter, leaving the rest untouched."""
    if not value:
        return value
    return value[0].upper() + value[1:]
