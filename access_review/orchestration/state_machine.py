"""
State machine for the data access application lifecycle.

Two compiled-in tables live here:

- ``_TRANSITIONS``: the legal state graph. ``can_transition`` is a pure,
  total function over it.
- ``ACTION_TRANSITIONS``: which named action moves along which edge, and which
  roles may trigger it. Every action edge is an edge of the state graph.
"""

from typing import Dict, FrozenSet, List, NamedTuple

from access_review.kernel.errors import InvalidTransitionError
from access_review.kernel.models.action import ApplicationAction
from access_review.kernel.models.application import (
    REVISION_STATES,
    TERMINAL_STATES,
    ApplicationState,
    UserRole,
)

S = ApplicationState

# Valid transitions: from_state -> legal target states
_TRANSITIONS: Dict[ApplicationState, FrozenSet[ApplicationState]] = {
    S.DRAFT: frozenset({S.INSTITUTIONAL_REP_REVIEW}),
    S.INSTITUTIONAL_REP_REVIEW: frozenset({
        S.INSTITUTIONAL_REP_REVISION_REQUESTED,
        S.DAC_REVIEW,
        S.REJECTED,
    }),
    S.INSTITUTIONAL_REP_REVISION_REQUESTED: frozenset({S.INSTITUTIONAL_REP_REVIEW}),
    S.DAC_REVIEW: frozenset({
        S.DAC_REVISIONS_REQUESTED,
        S.APPROVED,
        S.REJECTED,
    }),
    S.DAC_REVISIONS_REQUESTED: frozenset({S.DAC_REVIEW}),
    S.APPROVED: frozenset({S.CLOSED, S.REVOKED}),
    S.REJECTED: frozenset(),
    S.CLOSED: frozenset(),
    S.REVOKED: frozenset(),
}


class ActionTransition(NamedTuple):
    """Edge of the state graph that an action moves along."""
    from_state: ApplicationState
    to_state: ApplicationState
    roles: FrozenSet[UserRole]


A = ApplicationAction
R = UserRole

ACTION_TRANSITIONS: Dict[ApplicationAction, ActionTransition] = {
    # Applicant
    A.SUBMIT_DRAFT: ActionTransition(S.DRAFT, S.INSTITUTIONAL_REP_REVIEW, frozenset({R.APPLICANT})),
    A.INSTITUTIONAL_REP_SUBMIT: ActionTransition(
        S.INSTITUTIONAL_REP_REVISION_REQUESTED, S.INSTITUTIONAL_REP_REVIEW, frozenset({R.APPLICANT})
    ),
    A.DAC_REVIEW_SUBMIT: ActionTransition(S.DAC_REVISIONS_REQUESTED, S.DAC_REVIEW, frozenset({R.APPLICANT})),
    # Institutional rep
    A.INSTITUTIONAL_REP_APPROVED: ActionTransition(
        S.INSTITUTIONAL_REP_REVIEW, S.DAC_REVIEW, frozenset({R.INSTITUTIONAL_REP})
    ),
    A.INSTITUTIONAL_REP_REVISION_REQUEST: ActionTransition(
        S.INSTITUTIONAL_REP_REVIEW, S.INSTITUTIONAL_REP_REVISION_REQUESTED, frozenset({R.INSTITUTIONAL_REP})
    ),
    A.INSTITUTIONAL_REP_REJECTED: ActionTransition(
        S.INSTITUTIONAL_REP_REVIEW, S.REJECTED, frozenset({R.INSTITUTIONAL_REP})
    ),
    # DAC
    A.DAC_REVIEW_REVISION_REQUEST: ActionTransition(
        S.DAC_REVIEW, S.DAC_REVISIONS_REQUESTED, frozenset({R.DAC_MEMBER})
    ),
    A.DAC_REVIEW_APPROVED: ActionTransition(S.DAC_REVIEW, S.APPROVED, frozenset({R.DAC_MEMBER})),
    A.DAC_REVIEW_REJECTED: ActionTransition(S.DAC_REVIEW, S.REJECTED, frozenset({R.DAC_MEMBER})),
    A.REVOKE: ActionTransition(S.APPROVED, S.REVOKED, frozenset({R.DAC_MEMBER})),
    # Either
    A.CLOSE: ActionTransition(S.APPROVED, S.CLOSED, frozenset({R.APPLICANT, R.DAC_MEMBER})),
}

# Actions that open a revision cycle / resolve the open one
REVISION_OPENING_ACTIONS = frozenset({A.INSTITUTIONAL_REP_REVISION_REQUEST, A.DAC_REVIEW_REVISION_REQUEST})
REVISION_RESOLVING_ACTIONS = frozenset({A.INSTITUTIONAL_REP_SUBMIT, A.DAC_REVIEW_SUBMIT})

# Actions gated by the signature authorizer's can_submit
SUBMIT_ACTIONS = frozenset({
    A.SUBMIT_DRAFT,
    A.INSTITUTIONAL_REP_APPROVED,
    A.INSTITUTIONAL_REP_SUBMIT,
    A.DAC_REVIEW_SUBMIT,
})


def can_transition(current: ApplicationState, target: ApplicationState) -> bool:
    """Check whether ``current -> target`` is an edge of the state graph."""
    return target in _TRANSITIONS.get(current, frozenset())


def validate_transition(current: ApplicationState, target: ApplicationState) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is legal."""
    if can_transition(current, target):
        return
    if is_terminal(current):
        raise InvalidTransitionError(
            current, target, f"Application in terminal state {current.value} cannot change state"
        )
    raise InvalidTransitionError(current, target)


def valid_transitions(from_state: ApplicationState) -> List[ApplicationState]:
    """Return the legal target states from ``from_state``, in enum order."""
    targets = _TRANSITIONS.get(from_state, frozenset())
    return [s for s in ApplicationState if s in targets]


def is_terminal(state: ApplicationState) -> bool:
    return state in TERMINAL_STATES


def is_revision_state(state: ApplicationState) -> bool:
    return state in REVISION_STATES


def transition_for(action: ApplicationAction) -> ActionTransition:
    return ACTION_TRANSITIONS[action]


def available_actions(state: ApplicationState, role: UserRole) -> List[ApplicationAction]:
    """Actions the role may attempt from ``state``. Signature gating is not applied here."""
    return [
        action
        for action, edge in ACTION_TRANSITIONS.items()
        if edge.from_state == state and role in edge.roles
    ]
