"""
In-memory application store.

Holds application snapshots with their signatures and DAC comments.
Transitions on one application are serialized by a per-application
``asyncio.Lock``, and saves compare-and-set on ``state`` so a writer working
from a stale snapshot is rejected instead of overwriting a newer state.
"""

import asyncio
import uuid
from typing import Dict, List, Optional

from access_review.kernel.errors import InvalidTransitionError, NotFoundError, WorkflowSystemError
from access_review.kernel.models.application import Application, ApplicationState
from access_review.kernel.models.comment import DacComment
from access_review.kernel.models.section import Section
from access_review.kernel.models.signature import SignatureSet
from access_review.logging_config import get_logger

logger = get_logger(__name__)


class ApplicationStore:
    """Snapshot store keyed by application id."""

    def __init__(self) -> None:
        self._applications: Dict[uuid.UUID, Application] = {}
        self._signatures: Dict[uuid.UUID, SignatureSet] = {}
        self._comments: Dict[uuid.UUID, List[DacComment]] = {}
        self._locks: Dict[uuid.UUID, asyncio.Lock] = {}

    def lock(self, application_id: uuid.UUID) -> asyncio.Lock:
        """
        Lock serializing writes to one application.

        Raises:
            NotFoundError: unknown application
        """
        lock = self._locks.get(application_id)
        if lock is None:
            raise NotFoundError(
                f"Application {application_id} not found",
                application_id=application_id,
            )
        return lock

    async def add(self, application: Application) -> Application:
        if application.id in self._applications:
            raise WorkflowSystemError(
                f"Application {application.id} already exists",
                application_id=application.id,
            )
        self._applications[application.id] = application
        self._signatures[application.id] = SignatureSet()
        self._comments[application.id] = []
        self._locks[application.id] = asyncio.Lock()
        return application

    async def get(self, application_id: uuid.UUID) -> Application:
        application = self._applications.get(application_id)
        if application is None:
            raise NotFoundError(
                f"Application {application_id} not found",
                application_id=application_id,
            )
        return application

    async def list_for_user(self, user_id: Optional[str] = None) -> List[Application]:
        """All applications, or only those owned by ``user_id``."""
        apps = self._applications.values()
        if user_id is not None:
            apps = [a for a in apps if a.user_id == user_id]
        return sorted(apps, key=lambda a: a.created_at)

    async def save(self, application: Application, expected_state: ApplicationState) -> Application:
        """
        Replace the stored snapshot if its state is still ``expected_state``.

        Raises:
            NotFoundError: unknown application
            InvalidTransitionError: the stored state moved on since the
                snapshot was read
        """
        current = await self.get(application.id)
        if current.state != expected_state:
            logger.warning(
                "Stale application snapshot rejected",
                extra={
                    "application_id": str(application.id),
                    "expected_state": expected_state.value,
                    "current_state": current.state.value,
                },
            )
            raise InvalidTransitionError(
                current.state,
                application.state,
                f"Application state changed to {current.state.value} while the update was in flight",
            )
        self._applications[application.id] = application
        return application

    async def get_signatures(self, application_id: uuid.UUID) -> SignatureSet:
        await self.get(application_id)
        return self._signatures[application_id]

    async def save_signatures(self, application_id: uuid.UUID, signatures: SignatureSet) -> SignatureSet:
        await self.get(application_id)
        self._signatures[application_id] = signatures
        return signatures

    async def add_comment(self, comment: DacComment) -> DacComment:
        await self.get(comment.application_id)
        self._comments[comment.application_id].append(comment)
        return comment

    async def get_comments(self, application_id: uuid.UUID, section: Optional[Section] = None) -> List[DacComment]:
        """Comments oldest first, optionally for one section."""
        await self.get(application_id)
        comments = self._comments[application_id]
        if section is not None:
            comments = [c for c in comments if c.section == section]
        return list(comments)
