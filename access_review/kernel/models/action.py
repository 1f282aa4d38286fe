"""
Action ledger entry model.

One entry per accepted transition; entries are immutable once recorded.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from access_review.kernel.models.application import ApplicationState


class ApplicationAction(str, Enum):
    """Action codes recorded for each accepted transition."""

    SUBMIT_DRAFT = "SUBMIT_DRAFT"
    INSTITUTIONAL_REP_APPROVED = "INSTITUTIONAL_REP_APPROVED"
    INSTITUTIONAL_REP_REVISION_REQUEST = "INSTITUTIONAL_REP_REVISION_REQUEST"
    INSTITUTIONAL_REP_REJECTED = "INSTITUTIONAL_REP_REJECTED"
    INSTITUTIONAL_REP_SUBMIT = "INSTITUTIONAL_REP_SUBMIT"
    DAC_REVIEW_REVISION_REQUEST = "DAC_REVIEW_REVISION_REQUEST"
    DAC_REVIEW_SUBMIT = "DAC_REVIEW_SUBMIT"
    DAC_REVIEW_APPROVED = "DAC_REVIEW_APPROVED"
    DAC_REVIEW_REJECTED = "DAC_REVIEW_REJECTED"
    CLOSE = "CLOSE"
    REVOKE = "REVOKE"


class ActionLedgerEntry(BaseModel):
    """Immutable audit record of one accepted transition."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    application_id: uuid.UUID
    user_id: str
    user_name: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    action: ApplicationAction
    state_before: ApplicationState
    state_after: ApplicationState
    revision_request_id: Optional[uuid.UUID] = None
