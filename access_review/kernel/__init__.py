"""
Stable kernel layer of the review engine.

- Domain models (application, sections, revision requests, signatures, ledger entries)
- Typed errors
- Permission core (editability, signature rights)
- Append-only action ledger and notification routing

Kernel invariants:
- Every accepted transition is recorded exactly once in the ledger
- Ledger entries are immutable
- Only the latest revision cycle governs editability
"""

from access_review.kernel.errors import (
    ForbiddenError,
    InvalidRequestError,
    InvalidTransitionError,
    NotFoundError,
    WorkflowError,
    WorkflowSystemError,
)

__all__ = [
    "WorkflowError",
    "InvalidTransitionError",
    "ForbiddenError",
    "InvalidRequestError",
    "NotFoundError",
    "WorkflowSystemError",
]
