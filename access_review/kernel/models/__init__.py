"""
Workflow domain models.
"""

from access_review.kernel.models.application import (
    REVISION_STATES,
    TERMINAL_STATES,
    Actor,
    Application,
    ApplicationContents,
    ApplicationState,
    UserRole,
)
from access_review.kernel.models.section import SECTION_FIELDS, Section, section_for_field
from access_review.kernel.models.revision import RevisionRequest, SectionRevision
from access_review.kernel.models.signature import SignatureRole, SignatureSet
from access_review.kernel.models.action import ActionLedgerEntry, ApplicationAction
from access_review.kernel.models.comment import COMMENTABLE_STATES, DacComment

__all__ = [
    # Application
    "Actor",
    "Application",
    "ApplicationContents",
    "ApplicationState",
    "UserRole",
    "TERMINAL_STATES",
    "REVISION_STATES",
    # Sections
    "Section",
    "SECTION_FIELDS",
    "section_for_field",
    # Revisions
    "RevisionRequest",
    "SectionRevision",
    # Signatures
    "SignatureRole",
    "SignatureSet",
    # Ledger
    "ActionLedgerEntry",
    "ApplicationAction",
    # Comments
    "DacComment",
    "COMMENTABLE_STATES",
]
