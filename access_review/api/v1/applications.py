"""
Application endpoints: creation, content edits, workflow actions, permissions
and history.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Query, status

from access_review.api.deps import CurrentActor, Service
from access_review.kernel.models.application import ApplicationState
from access_review.kernel.models.revision import SectionRevision
from access_review.schemas.application import (
    ActionRequest,
    ActionResponse,
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ContentsUpdate,
    LedgerEntryResponse,
    PermissionsResponse,
)

router = APIRouter()


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def create_application(data: ApplicationCreate, actor: CurrentActor, service: Service):
    """Start a new application in DRAFT."""
    application = await service.create(actor, dac_id=data.dac_id, contents=data.contents)
    return ApplicationResponse.from_application(application)


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    actor: CurrentActor,
    service: Service,
    state: Optional[List[ApplicationState]] = Query(None, description="Filter by state (repeatable)"),
    search: Optional[str] = Query(None, max_length=200, description="Applicant name, email, affiliation or id"),
    sort: Optional[List[str]] = Query(None, description="created_at, updated_at or state; prefix - for descending"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """
    Applicants see their own applications, reviewers see all.

    ``counts`` holds per-state totals over the search filter, ignoring the
    state filter, so every state tab can show its count.
    """
    result = await service.list_applications(
        actor, states=state, search=search, sort=sort, page=page, page_size=page_size
    )
    return ApplicationListResponse.from_page(result)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(application_id: uuid.UUID, actor: CurrentActor, service: Service):
    application = await service.get(application_id, actor)
    return ApplicationResponse.from_application(application)


@router.patch("/{application_id}/contents", response_model=ApplicationResponse)
async def update_contents(
    application_id: uuid.UUID,
    data: ContentsUpdate,
    actor: CurrentActor,
    service: Service,
):
    """
    Update document fields.

    Every field must belong to a section the caller may currently edit;
    otherwise nothing is written and 403 names the offending fields.
    """
    application = await service.update_contents(
        application_id, actor, data.fields, is_edit_mode=data.edit_mode
    )
    return ApplicationResponse.from_application(application)


@router.post("/{application_id}/actions", response_model=ActionResponse)
async def perform_action(
    application_id: uuid.UUID,
    data: ActionRequest,
    actor: CurrentActor,
    service: Service,
):
    """Attempt a workflow action (submit, approve, request revisions, ...)."""
    section_reviews = None
    if data.sections:
        section_reviews = {
            section: SectionRevision(approved=review.approved, notes=review.notes)
            for section, review in data.sections.items()
        }
    result = await service.perform(
        application_id,
        actor,
        data.action,
        comments=data.comments,
        section_reviews=section_reviews,
    )
    return ActionResponse(
        application=ApplicationResponse.from_application(result.application),
        entry=LedgerEntryResponse.from_entry(result.entry),
        revision_request_id=result.revision.id if result.revision else None,
    )


@router.get("/{application_id}/permissions", response_model=PermissionsResponse)
async def get_permissions(
    application_id: uuid.UUID,
    actor: CurrentActor,
    service: Service,
    edit_mode: bool = Query(False, description="Caller is in the draft editing view"),
):
    """Section edit rights, signature rights and available actions for the caller."""
    snapshot = await service.permissions(application_id, actor, is_edit_mode=edit_mode)
    return PermissionsResponse.from_snapshot(snapshot)


@router.get("/{application_id}/history", response_model=List[LedgerEntryResponse])
async def get_history(application_id: uuid.UUID, actor: CurrentActor, service: Service):
    """Accepted actions, oldest first."""
    entries = await service.history(application_id, actor)
    return [LedgerEntryResponse.from_entry(e) for e in entries]
