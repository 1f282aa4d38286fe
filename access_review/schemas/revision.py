"""
Revision request schemas.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from access_review.kernel.models.application import UserRole
from access_review.kernel.models.revision import RevisionRequest
from access_review.kernel.models.section import Section


class SectionRevisionResponse(BaseModel):
    approved: bool
    needs_changes: bool
    notes: Optional[str]


class RevisionResponse(BaseModel):
    """A revision cycle with per-section verdicts."""

    id: uuid.UUID
    application_id: uuid.UUID
    created_at: datetime
    initiating_role: UserRole
    comments: Optional[str]
    resolved_at: Optional[datetime]
    sections: Dict[Section, SectionRevisionResponse]
    sections_needing_changes: List[Section]

    @classmethod
    def from_revision(cls, revision: RevisionRequest) -> "RevisionResponse":
        return cls(
            id=revision.id,
            application_id=revision.application_id,
            created_at=revision.created_at,
            initiating_role=revision.initiating_role,
            comments=revision.comments,
            resolved_at=revision.resolved_at,
            sections={
                section: SectionRevisionResponse(
                    approved=revision[section].approved,
                    needs_changes=revision[section].needs_changes,
                    notes=revision[section].notes,
                )
                for section in Section
            },
            sections_needing_changes=revision.sections_needing_changes(),
        )


class SectionRevisionUpdate(BaseModel):
    """Reviewer amends one section verdict."""

    approved: bool
    notes: Optional[str] = Field(None, max_length=5000)
