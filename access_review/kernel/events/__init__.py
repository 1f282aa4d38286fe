"""
Audit ledger and notification routing.
"""

from access_review.kernel.events.action_ledger import ActionLedger
from access_review.kernel.events.notifications import (
    Notification,
    NotificationRouter,
    NotificationTemplate,
    Recipient,
)

__all__ = [
    "ActionLedger",
    "Notification",
    "NotificationRouter",
    "NotificationTemplate",
    "Recipient",
]
