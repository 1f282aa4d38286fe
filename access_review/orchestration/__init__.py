"""Orchestration layer - state machine, revision cycles, workflow coordinator."""

from access_review.orchestration.revision_tracker import RevisionTracker
from access_review.orchestration.state_machine import (
    ACTION_TRANSITIONS,
    can_transition,
    valid_transitions,
    validate_transition,
)
from access_review.orchestration.workflow import (
    ApplicationWorkflow,
    PermissionSnapshot,
    TransitionResult,
)

__all__ = [
    "ACTION_TRANSITIONS",
    "ApplicationWorkflow",
    "PermissionSnapshot",
    "RevisionTracker",
    "TransitionResult",
    "can_transition",
    "valid_transitions",
    "validate_transition",
]
