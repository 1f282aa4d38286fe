"""
Revision request model - one round of reviewer-requested changes.

Polarity of the per-section flag: ``approved=True`` means the reviewer found
the section acceptable and it needs no changes; ``approved=False`` means it
needs changes. ``needs_changes`` exposes the inverted reading.
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from access_review.kernel.models.application import UserRole
from access_review.kernel.models.section import Section


class SectionRevision(BaseModel):
    """Reviewer verdict on one section within a revision cycle."""

    model_config = ConfigDict(frozen=True)

    approved: bool = False
    notes: Optional[str] = None

    @property
    def needs_changes(self) -> bool:
        return not self.approved


def _all_sections_pending() -> Dict[Section, SectionRevision]:
    return {section: SectionRevision() for section in Section}


class RevisionRequest(BaseModel):
    """
    A revision cycle opened when a reviewer sends the application back.

    Only the latest request of an application is authoritative for
    editability; older ones are kept for audit.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    application_id: uuid.UUID
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    initiating_role: UserRole
    comments: Optional[str] = None
    sections: Dict[Section, SectionRevision] = Field(default_factory=_all_sections_pending)
    resolved_at: Optional[datetime] = None

    def __getitem__(self, section: Section) -> SectionRevision:
        return self.sections.get(section, SectionRevision())

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None

    def sections_needing_changes(self) -> List[Section]:
        return [s for s in Section if self[s].needs_changes]
