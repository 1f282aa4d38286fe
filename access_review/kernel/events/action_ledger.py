"""
Action ledger - append-only audit trail of accepted transitions.

Exactly one entry is recorded per accepted transition, inside the same unit
of work that changes the application state. The ledger does not see
transaction boundaries; the caller owns them.
"""

import uuid
from typing import Callable, Dict, List, Tuple

from access_review.kernel.models.action import ActionLedgerEntry
from access_review.logging_config import get_logger

logger = get_logger(__name__)

LedgerSubscriber = Callable[[ActionLedgerEntry], None]


class ActionLedger:
    """
    Ordered, append-only store of ActionLedgerEntry records.

    Usage:
        ledger = ActionLedger()
        ledger.subscribe(audit_sink)
        ledger.record(entry)
        history = ledger.entries_for(application_id)
    """

    def __init__(self) -> None:
        self._entries: List[ActionLedgerEntry] = []
        self._ids: Dict[uuid.UUID, int] = {}
        self._subscribers: List[LedgerSubscriber] = []

    def record(self, entry: ActionLedgerEntry) -> ActionLedgerEntry:
        """
        Append an entry. Entries are never updated or deleted.

        Subscribers are notified after the append; a failing subscriber is
        logged and does not undo it.

        Raises:
            ValueError: if an entry with the same id was already recorded
        """
        if entry.id in self._ids:
            raise ValueError(f"Ledger entry {entry.id} already recorded")

        self._ids[entry.id] = len(self._entries)
        self._entries.append(entry)
        logger.info(
            "Action recorded",
            extra={
                "application_id": str(entry.application_id),
                "action": entry.action.value,
                "state_before": entry.state_before.value,
                "state_after": entry.state_after.value,
                "user_id": entry.user_id,
            },
        )

        for subscriber in list(self._subscribers):
            try:
                subscriber(entry)
            except Exception:
                logger.exception(
                    "Ledger subscriber failed",
                    extra={"entry_id": str(entry.id), "subscriber": repr(subscriber)},
                )
        return entry

    def subscribe(self, subscriber: LedgerSubscriber) -> None:
        self._subscribers.append(subscriber)

    def entries(self) -> Tuple[ActionLedgerEntry, ...]:
        """All entries in the order they were accepted."""
        return tuple(self._entries)

    def entries_for(self, application_id: uuid.UUID) -> Tuple[ActionLedgerEntry, ...]:
        """Entries for one application, oldest first."""
        return tuple(e for e in self._entries if e.application_id == application_id)

    def __len__(self) -> int:
        return len(self._entries)
