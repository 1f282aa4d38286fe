"""
Application schemas.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from access_review.kernel.models.action import ActionLedgerEntry, ApplicationAction
from access_review.kernel.models.application import (
    Application,
    ApplicationContents,
    ApplicationState,
    UserRole,
)
from access_review.kernel.models.section import Section, SECTION_FIELDS
from access_review.orchestration.listing import ApplicationPage
from access_review.orchestration.workflow import PermissionSnapshot
from access_review.schemas.common import PaginatedResponse


class ApplicationCreate(BaseModel):
    """Application creation request."""

    dac_id: Optional[str] = Field(None, max_length=100)
    contents: Optional[ApplicationContents] = None


class ContentsUpdate(BaseModel):
    """Partial update of document fields."""

    fields: Dict[str, Any] = Field(..., min_length=1)
    edit_mode: bool = False


class SectionReviewInput(BaseModel):
    """Reviewer verdict on one section when requesting revisions."""

    approved: bool = False
    notes: Optional[str] = Field(None, max_length=5000)


class ActionRequest(BaseModel):
    """Attempt a workflow action."""

    action: ApplicationAction
    comments: Optional[str] = Field(None, max_length=10000)
    sections: Optional[Dict[Section, SectionReviewInput]] = None


class ApplicationResponse(BaseModel):
    """Application response."""

    id: uuid.UUID
    user_id: str
    state: ApplicationState
    dac_id: Optional[str]
    created_at: datetime
    updated_at: datetime
    approved_at: Optional[datetime]
    expires_at: Optional[datetime]
    contents: ApplicationContents

    @classmethod
    def from_application(cls, application: Application) -> "ApplicationResponse":
        return cls(**application.model_dump())


class ApplicationListResponse(PaginatedResponse[ApplicationResponse]):
    """One page of applications with per-state totals (plus TOTAL)."""

    counts: Dict[str, int]

    @classmethod
    def from_page(cls, page: ApplicationPage) -> "ApplicationListResponse":
        return cls(
            items=[ApplicationResponse.from_application(a) for a in page.items],
            total=page.total,
            page=page.page,
            page_size=page.page_size,
            has_more=page.has_more,
            counts=page.counts,
        )


class LedgerEntryResponse(BaseModel):
    """One accepted transition."""

    id: uuid.UUID
    application_id: uuid.UUID
    user_id: str
    user_name: Optional[str]
    created_at: datetime
    action: ApplicationAction
    state_before: ApplicationState
    state_after: ApplicationState
    revision_request_id: Optional[uuid.UUID]

    @classmethod
    def from_entry(cls, entry: ActionLedgerEntry) -> "LedgerEntryResponse":
        return cls(**entry.model_dump())


class ActionResponse(BaseModel):
    """Result of an accepted action."""

    application: ApplicationResponse
    entry: LedgerEntryResponse
    revision_request_id: Optional[uuid.UUID] = None


class PermissionsResponse(BaseModel):
    """What the current actor may do right now."""

    application_id: uuid.UUID
    state: ApplicationState
    role: UserRole
    is_edit_mode: bool
    sections: Dict[Section, bool]
    editable_fields: List[str]
    can_sign: bool
    can_submit: bool
    available_actions: List[ApplicationAction]
    active_revision_id: Optional[uuid.UUID] = None

    @classmethod
    def from_snapshot(cls, snapshot: PermissionSnapshot) -> "PermissionsResponse":
        fields = sorted(
            field
            for section, allowed in snapshot.sections.items()
            if allowed
            for field in SECTION_FIELDS[section]
        )
        return cls(**snapshot.model_dump(), editable_fields=fields)
