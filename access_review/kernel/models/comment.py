"""
DAC comment model - reviewer discussion attached to one section.

Chair-only comments are addressed to the DAC chair and are never shown to
readers outside the DAC.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from access_review.kernel.models.application import ApplicationState
from access_review.kernel.models.section import Section

MAX_COMMENT_LENGTH = 5000

# States in which the DAC is working on the application
COMMENTABLE_STATES = frozenset({
    ApplicationState.DAC_REVIEW,
    ApplicationState.DAC_REVISIONS_REQUESTED,
})


class DacComment(BaseModel):
    """One comment left by a DAC member."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    application_id: uuid.UUID
    user_id: str
    user_name: Optional[str] = None
    section: Section
    message: str = Field(..., min_length=1, max_length=MAX_COMMENT_LENGTH)
    dac_chair_only: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
