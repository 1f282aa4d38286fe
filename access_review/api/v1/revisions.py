"""
Revision request endpoints.
"""

import uuid
from typing import List

from fastapi import APIRouter

from access_review.api.deps import CurrentActor, Service
from access_review.kernel.models.section import Section
from access_review.schemas.revision import RevisionResponse, SectionRevisionUpdate

router = APIRouter()


@router.get("", response_model=List[RevisionResponse])
async def list_revisions(application_id: uuid.UUID, actor: CurrentActor, service: Service):
    """All revision cycles of the application, oldest first."""
    revisions = await service.revisions(application_id, actor)
    return [RevisionResponse.from_revision(r) for r in revisions]


@router.get("/latest", response_model=RevisionResponse)
async def get_latest_revision(application_id: uuid.UUID, actor: CurrentActor, service: Service):
    revision = await service.latest_revision(application_id, actor)
    return RevisionResponse.from_revision(revision)


@router.patch("/{revision_id}/sections/{section}", response_model=RevisionResponse)
async def update_section(
    application_id: uuid.UUID,
    revision_id: uuid.UUID,
    section: Section,
    data: SectionRevisionUpdate,
    actor: CurrentActor,
    service: Service,
):
    """Amend one section verdict of the active revision cycle."""
    revision = await service.mark_revision_section(
        application_id, actor, revision_id, section, data.approved, data.notes
    )
    return RevisionResponse.from_revision(revision)
