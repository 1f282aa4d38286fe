"""
DAC comment schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from access_review.kernel.models.comment import MAX_COMMENT_LENGTH, DacComment
from access_review.kernel.models.section import Section


class CommentCreate(BaseModel):
    """New comment on one section."""

    section: Section
    message: str = Field(..., min_length=1, max_length=MAX_COMMENT_LENGTH)
    dac_chair_only: bool = Field(False, description="Visible to DAC members only")


class CommentResponse(BaseModel):
    id: uuid.UUID
    application_id: uuid.UUID
    user_id: str
    user_name: Optional[str]
    section: Section
    message: str
    dac_chair_only: bool
    created_at: datetime

    @classmethod
    def from_comment(cls, comment: DacComment) -> "CommentResponse":
        return cls(**comment.model_dump())
