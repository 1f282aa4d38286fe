"""
Application model - the document under review and the people acting on it.

Application.state is authoritative for every editability and signature
decision. Snapshots are plain pydantic models; the workflow produces new
snapshots with ``model_copy`` rather than mutating the one it was given.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApplicationState(str, Enum):
    """Status of a data access application."""

    DRAFT = "DRAFT"
    INSTITUTIONAL_REP_REVIEW = "INSTITUTIONAL_REP_REVIEW"
    INSTITUTIONAL_REP_REVISION_REQUESTED = "INSTITUTIONAL_REP_REVISION_REQUESTED"
    DAC_REVIEW = "DAC_REVIEW"
    DAC_REVISIONS_REQUESTED = "DAC_REVISIONS_REQUESTED"
    REJECTED = "REJECTED"
    APPROVED = "APPROVED"
    CLOSED = "CLOSED"
    REVOKED = "REVOKED"


TERMINAL_STATES = frozenset({
    ApplicationState.REJECTED,
    ApplicationState.CLOSED,
    ApplicationState.REVOKED,
})

REVISION_STATES = frozenset({
    ApplicationState.INSTITUTIONAL_REP_REVISION_REQUESTED,
    ApplicationState.DAC_REVISIONS_REQUESTED,
})


class UserRole(str, Enum):
    """Roles an actor can hold on an application."""
    APPLICANT = "APPLICANT"
    INSTITUTIONAL_REP = "INSTITUTIONAL_REP"
    DAC_MEMBER = "DAC_MEMBER"


class Actor(BaseModel):
    """Whoever is attempting an action."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    display_name: Optional[str] = None


class ApplicationContents(BaseModel):
    """
    Section field values of the application document.

    Every field is optional while the application is being drafted. Which
    section owns which field is fixed in ``kernel.models.section.SECTION_FIELDS``.
    """

    model_config = ConfigDict(extra="forbid")

    # Applicant
    applicant_title: Optional[str] = None
    applicant_first_name: Optional[str] = None
    applicant_middle_name: Optional[str] = None
    applicant_last_name: Optional[str] = None
    applicant_suffix: Optional[str] = None
    applicant_primary_affiliation: Optional[str] = None
    applicant_institutional_email: Optional[str] = None
    applicant_profile_url: Optional[str] = None
    applicant_position_title: Optional[str] = None
    applicant_institution_country: Optional[str] = None
    applicant_institution_state: Optional[str] = None
    applicant_institution_city: Optional[str] = None
    applicant_institution_postal_code: Optional[str] = None
    applicant_institution_street_address: Optional[str] = None
    applicant_institution_building: Optional[str] = None

    # Institutional representative and institution
    institutional_rep_title: Optional[str] = None
    institutional_rep_first_name: Optional[str] = None
    institutional_rep_middle_name: Optional[str] = None
    institutional_rep_last_name: Optional[str] = None
    institutional_rep_suffix: Optional[str] = None
    institutional_rep_primary_affiliation: Optional[str] = None
    institutional_rep_email: Optional[str] = None
    institutional_rep_profile_url: Optional[str] = None
    institutional_rep_position_title: Optional[str] = None
    institution_country: Optional[str] = None
    institution_state: Optional[str] = None
    institution_city: Optional[str] = None
    institution_street_address: Optional[str] = None
    institution_postal_code: Optional[str] = None
    institution_building: Optional[str] = None

    # Project
    project_title: Optional[str] = None
    project_website: Optional[str] = None
    project_background: Optional[str] = None
    project_aims: Optional[str] = None
    project_methodology: Optional[str] = None
    project_summary: Optional[str] = None
    project_publication_urls: Optional[List[str]] = None

    # Requested studies, ethics, agreements, appendices
    requested_studies: Optional[List[str]] = None
    ethics_review_required: Optional[bool] = None
    ethics_letter: Optional[int] = None
    accepted_agreements: Optional[List[str]] = None
    accepted_appendices: Optional[List[str]] = None

    # Collaborators
    collaborators: Optional[List[Dict[str, Any]]] = None

    # Sign and submit
    signed_pdf: Optional[int] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Application(BaseModel):
    """Snapshot of one data access application."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    user_id: str
    state: ApplicationState = ApplicationState.DRAFT
    dac_id: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    approved_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    contents: ApplicationContents = Field(default_factory=ApplicationContents)

    def is_owned_by(self, actor: Actor) -> bool:
        return self.user_id == actor.user_id
