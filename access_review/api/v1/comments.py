"""
DAC comment endpoints.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Query, status

from access_review.api.deps import CurrentActor, Service
from access_review.kernel.models.section import Section
from access_review.schemas.comment import CommentCreate, CommentResponse

router = APIRouter()


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    application_id: uuid.UUID,
    data: CommentCreate,
    actor: CurrentActor,
    service: Service,
):
    """DAC members comment on a section while the DAC is reviewing."""
    comment = await service.add_comment(
        application_id, actor, data.section, data.message, dac_chair_only=data.dac_chair_only
    )
    return CommentResponse.from_comment(comment)


@router.get("", response_model=List[CommentResponse])
async def list_comments(
    application_id: uuid.UUID,
    actor: CurrentActor,
    service: Service,
    section: Optional[Section] = Query(None, description="Only comments on this section"),
):
    """Comments oldest first. Chair-only comments are hidden outside the DAC."""
    comments = await service.comments(application_id, actor, section)
    return [CommentResponse.from_comment(c) for c in comments]
