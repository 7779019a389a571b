"""Canonical state transition helpers for proposal lifecycle."""

from __future__ import annotations

from dataclasses import dataclass

from app.core.exceptions import MandapException
from app.models.enums import NotificationType, ProposalAction, ProposalStatus, UserRole


class InvalidTransitionError(MandapException, ValueError):
    """Raised when a disallowed state transition is attempted."""


class StateMachine:
    """Simple in-memory state machine keyed by current state."""

    def __init__(self, transitions: dict[str, set[str]]) -> None:
        self._transitions = transitions

    def can_transition(self, current: str, target: str) -> bool:
        return target in self._transitions.get(current, set())

    def assert_transition(self, current: str, target: str) -> None:
        if not self.can_transition(current=current, target=target):
            raise InvalidTransitionError(f"Transition not allowed: {current} -> {target}")


# Finalizing (re)sends a proposal; resending an already sent or viewed proposal restamps sentAt.
FINALIZE_MACHINE = StateMachine(
    {
        ProposalStatus.DRAFT.value: {ProposalStatus.SENT.value},
        ProposalStatus.SENT.value: {ProposalStatus.SENT.value},
        ProposalStatus.VIEWED.value: {ProposalStatus.SENT.value},
    }
)


@dataclass(frozen=True)
class ProposalTransition:
    target: ProposalStatus
    timestamp_field: str
    notification_type: NotificationType
    verb: str


_VIEW = ProposalTransition(ProposalStatus.VIEWED, "viewed_at", NotificationType.PROPOSAL_VIEWED, "viewed")
_ACCEPT = ProposalTransition(ProposalStatus.ACCEPTED, "accepted_at", NotificationType.PROPOSAL_ACCEPTED, "accepted")
_REJECT = ProposalTransition(ProposalStatus.REJECTED, "rejected_at", NotificationType.PROPOSAL_REJECTED, "rejected")

PROPOSAL_TRANSITIONS: dict[tuple[ProposalStatus, ProposalAction, UserRole], ProposalTransition] = {
    (ProposalStatus.SENT, ProposalAction.VIEW, UserRole.USER): _VIEW,
    (ProposalStatus.SENT, ProposalAction.ACCEPT, UserRole.USER): _ACCEPT,
    (ProposalStatus.VIEWED, ProposalAction.ACCEPT, UserRole.USER): _ACCEPT,
    (ProposalStatus.SENT, ProposalAction.REJECT, UserRole.USER): _REJECT,
    (ProposalStatus.VIEWED, ProposalAction.REJECT, UserRole.USER): _REJECT,
}

# Roles allowed to drive client-side transitions at all.
TRANSITION_ROLES = frozenset(role for (_, _, role) in PROPOSAL_TRANSITIONS)


def resolve_transition(
    state: ProposalStatus,
    action: ProposalAction,
    role: UserRole,
) -> ProposalTransition | None:
    """Look up the transition for a (state, verb, role) triple; None when not allowed."""
    return PROPOSAL_TRANSITIONS.get((state, action, role))
