"""
Notification routing for ledger entries.

Turns each recorded action into notification records for the email system.
Dispatch itself happens outside the engine; this only decides who is told
what and keeps a bounded outbox. When the outbox is full the oldest pending
notification is dropped with a warning.
"""

import uuid
from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from access_review.kernel.models.action import ActionLedgerEntry, ApplicationAction
from access_review.logging_config import get_logger

logger = get_logger(__name__)


class Recipient(str, Enum):
    """Who receives a notification."""
    APPLICANT = "applicant"
    INSTITUTIONAL_REP = "institutional_rep"
    DAC = "dac"


class NotificationTemplate(str, Enum):
    """Email templates known to the notification system."""
    APPLICANT_SUBMITTED = "applicant_app_submitted"
    INSTITUTIONAL_REP_REVIEW = "institutional_rep_review"
    APPLICANT_REP_REVISION = "applicant_rep_revision"
    DAC_REVIEW = "dac_review"
    DAC_SUBMITTED_REVISIONS = "dac_submitted_revisions"
    APPLICANT_DAC_REVISION = "applicant_dac_revision"
    APPLICANT_APPROVED = "applicant_approved"
    APPLICANT_REJECTED = "applicant_rejected"
    APPLICANT_REVOKED = "applicant_revoked"
    DAC_REVOKED = "dac_revoked"


A = ApplicationAction

NOTIFICATION_ROUTES: Dict[ApplicationAction, Tuple[Tuple[Recipient, NotificationTemplate], ...]] = {
    A.SUBMIT_DRAFT: (
        (Recipient.INSTITUTIONAL_REP, NotificationTemplate.INSTITUTIONAL_REP_REVIEW),
        (Recipient.APPLICANT, NotificationTemplate.APPLICANT_SUBMITTED),
    ),
    A.INSTITUTIONAL_REP_REVISION_REQUEST: (
        (Recipient.APPLICANT, NotificationTemplate.APPLICANT_REP_REVISION),
    ),
    A.INSTITUTIONAL_REP_SUBMIT: (
        (Recipient.INSTITUTIONAL_REP, NotificationTemplate.INSTITUTIONAL_REP_REVIEW),
    ),
    A.INSTITUTIONAL_REP_APPROVED: (
        (Recipient.DAC, NotificationTemplate.DAC_REVIEW),
    ),
    A.INSTITUTIONAL_REP_REJECTED: (
        (Recipient.APPLICANT, NotificationTemplate.APPLICANT_REJECTED),
    ),
    A.DAC_REVIEW_REVISION_REQUEST: (
        (Recipient.APPLICANT, NotificationTemplate.APPLICANT_DAC_REVISION),
    ),
    A.DAC_REVIEW_SUBMIT: (
        (Recipient.DAC, NotificationTemplate.DAC_SUBMITTED_REVISIONS),
    ),
    A.DAC_REVIEW_APPROVED: (
        (Recipient.APPLICANT, NotificationTemplate.APPLICANT_APPROVED),
    ),
    A.DAC_REVIEW_REJECTED: (
        (Recipient.APPLICANT, NotificationTemplate.APPLICANT_REJECTED),
    ),
    A.REVOKE: (
        (Recipient.APPLICANT, NotificationTemplate.APPLICANT_REVOKED),
        (Recipient.DAC, NotificationTemplate.DAC_REVOKED),
    ),
    A.CLOSE: (),
}


class Notification(BaseModel):
    """One pending notification for the email system."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    application_id: uuid.UUID
    ledger_entry_id: uuid.UUID
    recipient: Recipient
    template: NotificationTemplate
    revision_request_id: Optional[uuid.UUID] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationRouter:
    """Fills an outbox with notifications for recorded actions."""

    def __init__(self, max_pending: int = 1000) -> None:
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")
        self.outbox: Deque[Notification] = deque(maxlen=max_pending)

    def __call__(self, entry: ActionLedgerEntry) -> None:
        for recipient, template in NOTIFICATION_ROUTES.get(entry.action, ()):
            notification = Notification(
                application_id=entry.application_id,
                ledger_entry_id=entry.id,
                recipient=recipient,
                template=template,
                revision_request_id=entry.revision_request_id,
            )
            if len(self.outbox) == self.outbox.maxlen:
                dropped = self.outbox[0]
                logger.warning(
                    "Notification outbox full, dropping oldest",
                    extra={
                        "application_id": str(dropped.application_id),
                        "template": dropped.template.value,
                        "max_pending": self.outbox.maxlen,
                    },
                )
            self.outbox.append(notification)
            logger.debug(
                "Notification queued",
                extra={
                    "application_id": str(entry.application_id),
                    "recipient": recipient.value,
                    "template": template.value,
                },
            )

    def drain(self) -> List[Notification]:
        """Hand pending notifications to the dispatcher and clear the outbox."""
        pending = list(self.outbox)
        self.outbox.clear()
        return pending
