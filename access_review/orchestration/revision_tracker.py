"""
Revision tracker - owns the revision cycles of each application.

A cycle is opened as a side effect of a transition into a
``*_REVISION_REQUESTED`` state and resolved when the applicant resubmits.
Only the latest cycle is authoritative for editability; older cycles stay
readable for audit.
"""

import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from access_review.kernel.errors import NotFoundError
from access_review.kernel.models.application import ApplicationState, UserRole
from access_review.kernel.models.revision import RevisionRequest, SectionRevision
from access_review.kernel.models.section import Section
from access_review.logging_config import get_logger
from access_review.orchestration.state_machine import is_revision_state

logger = get_logger(__name__)

REVIEWER_ROLES = frozenset({UserRole.INSTITUTIONAL_REP, UserRole.DAC_MEMBER})


class RevisionTracker:
    """
    In-memory registry of revision cycles, keyed by application.

    Usage:
        tracker = RevisionTracker()
        revision = tracker.open_revision_cycle(app.id, UserRole.DAC_MEMBER, "See notes")
        tracker.mark_section(app.id, revision.id, Section.APPLICANT, True, None)
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._cycles: Dict[uuid.UUID, List[RevisionRequest]] = defaultdict(list)

    def open_revision_cycle(
        self,
        application_id: uuid.UUID,
        initiating_role: UserRole,
        comments: Optional[str] = None,
    ) -> RevisionRequest:
        """
        Open a new cycle with every section flagged as needing changes.

        Args:
            application_id: The application being sent back
            initiating_role: Reviewer role (institutional rep or DAC member)
            comments: Free-text reviewer comments

        Returns:
            The new RevisionRequest, now the application's authoritative cycle
        """
        if initiating_role not in REVIEWER_ROLES:
            raise ValueError(f"Role {initiating_role.value} cannot open a revision cycle")

        revision = RevisionRequest(
            application_id=application_id,
            created_at=self._clock(),
            initiating_role=initiating_role,
            comments=comments,
        )
        self._cycles[application_id].append(revision)
        logger.info(
            "Revision cycle opened",
            extra={
                "application_id": str(application_id),
                "revision_id": str(revision.id),
                "initiating_role": initiating_role.value,
            },
        )
        return revision

    def mark_section(
        self,
        application_id: uuid.UUID,
        revision_id: uuid.UUID,
        section: Section,
        approved: bool,
        notes: Optional[str] = None,
    ) -> RevisionRequest:
        """Upsert one section's verdict within the application's active cycle."""
        current = self._require_active(application_id, revision_id)
        sections = dict(current.sections)
        sections[section] = SectionRevision(approved=approved, notes=notes)
        updated = current.model_copy(update={"sections": sections})
        self._cycles[application_id][-1] = updated
        return updated

    def resolve(self, application_id: uuid.UUID, revision_id: uuid.UUID) -> RevisionRequest:
        """Mark the active cycle as resolved by an applicant resubmission."""
        current = self._require_active(application_id, revision_id)
        updated = current.model_copy(update={"resolved_at": self._clock()})
        self._cycles[application_id][-1] = updated
        return updated

    def latest_for(self, application_id: uuid.UUID) -> Optional[RevisionRequest]:
        """Most recent cycle regardless of application state, for display."""
        cycles = self._cycles.get(application_id)
        return cycles[-1] if cycles else None

    def active_for(
        self,
        application_id: uuid.UUID,
        state: ApplicationState,
    ) -> Optional[RevisionRequest]:
        """
        The cycle that governs editability right now.

        Outside the revision-requested states there is none, even if earlier
        cycles exist, so stale section flags can never grant edits.
        """
        if not is_revision_state(state):
            return None
        latest = self.latest_for(application_id)
        if latest is None or latest.is_resolved:
            return None
        return latest

    def history_for(self, application_id: uuid.UUID) -> List[RevisionRequest]:
        """All cycles for the application, oldest first."""
        return list(self._cycles.get(application_id, []))

    def get(self, application_id: uuid.UUID, revision_id: uuid.UUID) -> RevisionRequest:
        for revision in self._cycles.get(application_id, []):
            if revision.id == revision_id:
                return revision
        raise NotFoundError(
            f"Revision request {revision_id} not found for application {application_id}",
            application_id=application_id,
            revision_id=revision_id,
        )

    def _require_active(self, application_id: uuid.UUID, revision_id: uuid.UUID) -> RevisionRequest:
        latest = self.latest_for(application_id)
        if latest is None or latest.id != revision_id or latest.is_resolved:
            raise NotFoundError(
                f"Revision request {revision_id} is not the active revision cycle of application {application_id}",
                application_id=application_id,
                revision_id=revision_id,
            )
        return latest
