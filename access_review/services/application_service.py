"""
Application service - async facade over the workflow engine and the store.

Every write follows the same shape: take the application's lock, read the
current snapshot, let the workflow decide, then save with a compare-and-set
on the state that was read. Notifications are queued only once the save
has gone through.
"""

import uuid
from datetime import timedelta
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from access_review.config import Settings
from access_review.kernel.errors import ForbiddenError, NotFoundError
from access_review.kernel.events.action_ledger import ActionLedger
from access_review.kernel.events.notifications import NotificationRouter
from access_review.kernel.models.action import ActionLedgerEntry, ApplicationAction
from access_review.kernel.models.application import (
    Actor,
    Application,
    ApplicationContents,
    ApplicationState,
    UserRole,
)
from access_review.kernel.models.comment import DacComment
from access_review.kernel.models.revision import RevisionRequest, SectionRevision
from access_review.kernel.models.section import Section
from access_review.kernel.models.signature import SignatureSet
from access_review.logging_config import get_logger, workflow_context
from access_review.orchestration.listing import (
    DEFAULT_SORT,
    ApplicationPage,
    ApplicationQuery,
    list_applications,
    parse_sort,
)
from access_review.orchestration.revision_tracker import RevisionTracker
from access_review.orchestration.workflow import (
    ApplicationWorkflow,
    PermissionSnapshot,
    TransitionResult,
)
from access_review.store import ApplicationStore

logger = get_logger(__name__)


class ApplicationService:
    """
    Usage:
        service = ApplicationService.from_settings(get_settings())
        app = await service.create(actor, dac_id="DAC-1")
        await service.sign(app.id, actor, image, is_edit_mode=True)
        result = await service.perform(app.id, actor, ApplicationAction.SUBMIT_DRAFT)
    """

    def __init__(
        self,
        workflow: ApplicationWorkflow,
        store: Optional[ApplicationStore] = None,
        notifications: Optional[NotificationRouter] = None,
    ):
        self.workflow = workflow
        self.store = store or ApplicationStore()
        self.notifications = notifications or NotificationRouter()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApplicationService":
        workflow = ApplicationWorkflow(
            tracker=RevisionTracker(),
            ledger=ActionLedger(),
            approval_validity=timedelta(days=settings.approval_validity_days),
        )
        return cls(workflow, notifications=NotificationRouter(settings.notification_outbox_size))

    # Reads

    async def get(self, application_id: uuid.UUID, actor: Actor) -> Application:
        application = await self.store.get(application_id)
        self._require_visible(application, actor)
        return application

    async def list_applications(
        self,
        actor: Actor,
        states: Optional[Sequence[ApplicationState]] = None,
        search: Optional[str] = None,
        sort: Optional[Sequence[str]] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> ApplicationPage:
        """
        Applicants see their own applications; reviewers see all.

        Raises:
            InvalidRequestError: unknown sort field
            ValidationError: page or page size out of range
        """
        applicant_view = actor.role == UserRole.APPLICANT
        query = ApplicationQuery(
            states=list(states or ()),
            search=search,
            sort=parse_sort(sort) or list(DEFAULT_SORT),
            page=page,
            page_size=page_size,
            applicant_view=applicant_view,
        )
        owned = await self.store.list_for_user(actor.user_id if applicant_view else None)
        return list_applications(owned, query)

    async def permissions(
        self,
        application_id: uuid.UUID,
        actor: Actor,
        is_edit_mode: bool = False,
    ) -> PermissionSnapshot:
        application = await self.get(application_id, actor)
        signatures = await self.store.get_signatures(application_id)
        return self.workflow.permissions(application, actor, is_edit_mode, signatures)

    async def history(self, application_id: uuid.UUID, actor: Actor) -> Tuple[ActionLedgerEntry, ...]:
        await self.get(application_id, actor)
        return self.workflow.ledger.entries_for(application_id)

    async def revisions(self, application_id: uuid.UUID, actor: Actor) -> List[RevisionRequest]:
        await self.get(application_id, actor)
        return self.workflow.tracker.history_for(application_id)

    async def latest_revision(self, application_id: uuid.UUID, actor: Actor) -> RevisionRequest:
        await self.get(application_id, actor)
        latest = self.workflow.tracker.latest_for(application_id)
        if latest is None:
            raise NotFoundError(
                f"Application {application_id} has no revision requests",
                application_id=application_id,
            )
        return latest

    async def signatures(self, application_id: uuid.UUID, actor: Actor) -> SignatureSet:
        await self.get(application_id, actor)
        return await self.store.get_signatures(application_id)

    # Writes

    async def create(
        self,
        actor: Actor,
        dac_id: Optional[str] = None,
        contents: Optional[ApplicationContents] = None,
    ) -> Application:
        application = self.workflow.create_application(actor, dac_id=dac_id, contents=contents)
        return await self.store.add(application)

    async def update_contents(
        self,
        application_id: uuid.UUID,
        actor: Actor,
        fields: Mapping[str, Any],
        is_edit_mode: bool = False,
    ) -> Application:
        with workflow_context(application_id=application_id, action="EDIT_CONTENTS"):
            async with self.store.lock(application_id):
                current = await self.get(application_id, actor)
                with workflow_context(state=current.state):
                    updated = self.workflow.edit_contents(current, actor, fields, is_edit_mode)
                    return await self.store.save(updated, expected_state=current.state)

    async def perform(
        self,
        application_id: uuid.UUID,
        actor: Actor,
        action: ApplicationAction,
        comments: Optional[str] = None,
        section_reviews: Optional[Mapping[Section, SectionRevision]] = None,
    ) -> TransitionResult:
        with workflow_context(application_id=application_id, action=action):
            async with self.store.lock(application_id):
                current = await self.get(application_id, actor)
                signatures = await self.store.get_signatures(application_id)
                with workflow_context(state=current.state):
                    result = self.workflow.perform(
                        current,
                        action,
                        actor,
                        signatures=signatures,
                        comments=comments,
                        section_reviews=section_reviews,
                    )
                    await self.store.save(result.application, expected_state=current.state)
            with workflow_context(state=result.application.state):
                logger.info(
                    "Action accepted",
                    extra={"user_id": actor.user_id, "state_before": current.state.value},
                )
                self.notifications(result.entry)
        return result

    async def mark_revision_section(
        self,
        application_id: uuid.UUID,
        actor: Actor,
        revision_id: uuid.UUID,
        section: Section,
        approved: bool,
        notes: Optional[str] = None,
    ) -> RevisionRequest:
        """Reviewer amends a section verdict of the active revision cycle."""
        with workflow_context(application_id=application_id, action="AMEND_REVISION"):
            async with self.store.lock(application_id):
                current = await self.get(application_id, actor)
                active = self.workflow.active_revision(current)
                if active is None or active.id != revision_id:
                    raise NotFoundError(
                        f"Revision request {revision_id} is not the active revision cycle of application {application_id}",
                        application_id=application_id,
                        revision_id=revision_id,
                    )
                if actor.role != active.initiating_role:
                    raise ForbiddenError(
                        "Only the reviewer role that requested the revisions can amend them",
                        role=actor.role,
                        initiating_role=active.initiating_role,
                    )
                return self.workflow.tracker.mark_section(application_id, revision_id, section, approved, notes)

    async def sign(
        self,
        application_id: uuid.UUID,
        actor: Actor,
        signature: str,
        is_edit_mode: bool = False,
    ) -> SignatureSet:
        with workflow_context(application_id=application_id, action="SIGN"):
            async with self.store.lock(application_id):
                current = await self.get(application_id, actor)
                signatures = await self.store.get_signatures(application_id)
                with workflow_context(state=current.state):
                    updated = self.workflow.sign(current, actor, signature, signatures, is_edit_mode)
                    return await self.store.save_signatures(application_id, updated)

    async def clear_signature(
        self,
        application_id: uuid.UUID,
        actor: Actor,
        is_edit_mode: bool = False,
    ) -> SignatureSet:
        with workflow_context(application_id=application_id, action="CLEAR_SIGNATURE"):
            async with self.store.lock(application_id):
                current = await self.get(application_id, actor)
                signatures = await self.store.get_signatures(application_id)
                with workflow_context(state=current.state):
                    updated = self.workflow.clear_signature(current, actor, signatures, is_edit_mode)
                    return await self.store.save_signatures(application_id, updated)

    async def add_comment(
        self,
        application_id: uuid.UUID,
        actor: Actor,
        section: Section,
        message: str,
        dac_chair_only: bool = False,
    ) -> DacComment:
        with workflow_context(application_id=application_id, action="COMMENT"):
            async with self.store.lock(application_id):
                current = await self.get(application_id, actor)
                comment = self.workflow.add_dac_comment(current, actor, section, message, dac_chair_only)
                return await self.store.add_comment(comment)

    async def comments(
        self,
        application_id: uuid.UUID,
        actor: Actor,
        section: Optional[Section] = None,
    ) -> List[DacComment]:
        await self.get(application_id, actor)
        comments = await self.store.get_comments(application_id, section)
        return self.workflow.visible_comments(comments, actor)

    @staticmethod
    def _require_visible(application: Application, actor: Actor) -> None:
        if actor.role == UserRole.APPLICANT and not application.is_owned_by(actor):
            raise ForbiddenError(
                "Applicants can only access their own applications",
                application_id=application.id,
            )
