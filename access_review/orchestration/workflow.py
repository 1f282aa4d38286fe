"""
Application workflow - coordinates one actor action against one application.

Data flow for a transition:

1. StateMachine: is the action's edge legal from the current state?
2. Role and ownership gating.
3. SignatureAuthorizer for actions that submit the document.
4. RevisionTracker: open a cycle on a revision request, resolve it on
   resubmission.
5. ActionLedger: append exactly one entry.

All checks in 1-3 run before anything is mutated. The workflow never touches
storage: it takes a snapshot and returns the next one.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, ValidationError

from access_review.kernel.errors import ForbiddenError, InvalidRequestError, InvalidTransitionError
from access_review.kernel.events.action_ledger import ActionLedger
from access_review.kernel.models.action import ActionLedgerEntry, ApplicationAction
from access_review.kernel.models.application import (
    Actor,
    Application,
    ApplicationContents,
    ApplicationState,
    UserRole,
)
from access_review.kernel.models.comment import COMMENTABLE_STATES, DacComment
from access_review.kernel.models.revision import RevisionRequest, SectionRevision
from access_review.kernel.models.section import Section
from access_review.kernel.models.signature import SignatureRole, SignatureSet, validate_signature_image
from access_review.kernel.permissions.editability import editable_sections, validate_revised_fields
from access_review.kernel.permissions.signature_rights import DISABLED, resolve_signature_rights
from access_review.logging_config import get_logger
from access_review.orchestration.revision_tracker import RevisionTracker
from access_review.orchestration.state_machine import (
    REVISION_OPENING_ACTIONS,
    REVISION_RESOLVING_ACTIONS,
    SUBMIT_ACTIONS,
    available_actions,
    transition_for,
    validate_transition,
)

logger = get_logger(__name__)


class TransitionResult(BaseModel):
    """Outcome of an accepted transition."""

    application: Application
    entry: ActionLedgerEntry
    revision: Optional[RevisionRequest] = None


class PermissionSnapshot(BaseModel):
    """Everything a client needs to enable or disable form controls."""

    application_id: uuid.UUID
    state: ApplicationState
    role: UserRole
    is_edit_mode: bool
    sections: Dict[Section, bool]
    can_sign: bool
    can_submit: bool
    available_actions: List[ApplicationAction]
    active_revision_id: Optional[uuid.UUID] = None


class ApplicationWorkflow:
    """
    Review workflow engine.

    Usage:
        workflow = ApplicationWorkflow()
        app = workflow.create_application(applicant, dac_id="DAC-1")
        signatures = workflow.sign(app, applicant, image, SignatureSet(), is_edit_mode=True)
        result = workflow.submit_draft(app, applicant, signatures)
    """

    def __init__(
        self,
        tracker: Optional[RevisionTracker] = None,
        ledger: Optional[ActionLedger] = None,
        clock: Optional[Callable[[], datetime]] = None,
        approval_validity: timedelta = timedelta(days=365),
    ):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.tracker = tracker or RevisionTracker(clock=self._clock)
        self.ledger = ledger or ActionLedger()
        self.approval_validity = approval_validity

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    @staticmethod
    def effective_edit_mode(application: Application, is_edit_mode: bool) -> bool:
        """Edit mode only counts while the application is a draft."""
        return is_edit_mode and application.state == ApplicationState.DRAFT

    def active_revision(self, application: Application) -> Optional[RevisionRequest]:
        return self.tracker.active_for(application.id, application.state)

    def permissions(
        self,
        application: Application,
        actor: Actor,
        is_edit_mode: bool = False,
        signatures: Optional[SignatureSet] = None,
    ) -> PermissionSnapshot:
        """Derive the actor's current section, signature and action rights."""
        edit_mode = self.effective_edit_mode(application, is_edit_mode)
        active = self.active_revision(application)

        if self._is_owner_applicant(application, actor):
            sections = editable_sections(active, edit_mode)
        else:
            sections = {section: False for section in Section}

        if actor.role == UserRole.APPLICANT and not application.is_owned_by(actor):
            rights = DISABLED
            actions: List[ApplicationAction] = []
        else:
            rights = resolve_signature_rights(
                actor.role, application.state, edit_mode, signatures, active
            )
            actions = available_actions(application.state, actor.role)

        return PermissionSnapshot(
            application_id=application.id,
            state=application.state,
            role=actor.role,
            is_edit_mode=edit_mode,
            sections=sections,
            can_sign=rights.can_sign,
            can_submit=rights.can_submit,
            available_actions=actions,
            active_revision_id=active.id if active else None,
        )

    # ------------------------------------------------------------------ #
    # Creation and edits
    # ------------------------------------------------------------------ #

    def create_application(
        self,
        actor: Actor,
        dac_id: Optional[str] = None,
        contents: Optional[ApplicationContents] = None,
    ) -> Application:
        """Start a new application in DRAFT, owned by the applicant."""
        if actor.role != UserRole.APPLICANT:
            raise ForbiddenError("Only applicants can create applications", role=actor.role)
        now = self._clock()
        application = Application(
            user_id=actor.user_id,
            dac_id=dac_id,
            created_at=now,
            updated_at=now,
            contents=contents or ApplicationContents(),
        )
        logger.info(
            "Application created",
            extra={"application_id": str(application.id), "user_id": actor.user_id},
        )
        return application

    def edit_contents(
        self,
        application: Application,
        actor: Actor,
        update: Mapping[str, Any],
        is_edit_mode: bool = False,
    ) -> Application:
        """
        Apply a partial content update.

        Allowed for the owning applicant either in DRAFT with edit mode, or in a
        revision-requested state for the sections the reviewer flagged.

        Raises:
            ForbiddenError: wrong actor, non-editable state, or a field outside
                the editable sections
        """
        if not self._is_owner_applicant(application, actor):
            raise ForbiddenError(
                "Only the applicant who owns the application can edit it",
                application_id=application.id,
            )

        edit_mode = self.effective_edit_mode(application, is_edit_mode)
        active = self.active_revision(application)
        if not edit_mode and active is None:
            self._deny(application, actor, "edit", f"Application cannot be edited in state {application.state.value}")

        validate_revised_fields(update.keys(), active, edit_mode)

        merged = application.contents.model_dump()
        merged.update(update)
        contents = ApplicationContents.model_validate(merged)
        return application.model_copy(update={"contents": contents, "updated_at": self._clock()})

    # ------------------------------------------------------------------ #
    # Signatures
    # ------------------------------------------------------------------ #

    def sign(
        self,
        application: Application,
        actor: Actor,
        signature: str,
        signatures: Optional[SignatureSet],
        is_edit_mode: bool = False,
    ) -> SignatureSet:
        """Create or replace the actor's signature."""
        signer = self._require_sign_right(application, actor, signatures, is_edit_mode)
        try:
            validate_signature_image(signature)
        except ValueError as exc:
            raise InvalidRequestError(str(exc), field="signature") from exc
        now = self._clock()
        if signer == SignatureRole.APPLICANT:
            update = {"applicant_signature": signature, "applicant_signed_at": now}
        else:
            update = {"institutional_rep_signature": signature, "institutional_rep_signed_at": now}
        return signatures.model_copy(update=update)

    def clear_signature(
        self,
        application: Application,
        actor: Actor,
        signatures: Optional[SignatureSet],
        is_edit_mode: bool = False,
    ) -> SignatureSet:
        """Remove the actor's signature."""
        signer = self._require_sign_right(application, actor, signatures, is_edit_mode)
        if signer == SignatureRole.APPLICANT:
            update = {"applicant_signature": None, "applicant_signed_at": None}
        else:
            update = {"institutional_rep_signature": None, "institutional_rep_signed_at": None}
        return signatures.model_copy(update=update)

    def _require_sign_right(
        self,
        application: Application,
        actor: Actor,
        signatures: Optional[SignatureSet],
        is_edit_mode: bool,
    ) -> SignatureRole:
        signer = SignatureRole.for_user_role(actor.role)
        if signer is None:
            self._deny(application, actor, "sign", f"Role {actor.role.value} does not sign applications")
        if signer == SignatureRole.APPLICANT and not application.is_owned_by(actor):
            self._deny(application, actor, "sign", "Only the owning applicant can sign as applicant")

        rights = resolve_signature_rights(
            actor.role,
            application.state,
            self.effective_edit_mode(application, is_edit_mode),
            signatures,
            self.active_revision(application),
        )
        if not rights.can_sign:
            self._deny(
                application, actor, "sign",
                f"Signing is not allowed for {actor.role.value} in state {application.state.value}",
            )
        return signer

    # ------------------------------------------------------------------ #
    # DAC comments
    # ------------------------------------------------------------------ #

    def add_dac_comment(
        self,
        application: Application,
        actor: Actor,
        section: Section,
        message: str,
        dac_chair_only: bool = False,
    ) -> DacComment:
        """
        Attach a DAC member's comment to one section.

        Raises:
            ForbiddenError: the actor is not a DAC member, or the DAC is not
                reviewing the application
            InvalidRequestError: blank or oversized message
        """
        if actor.role != UserRole.DAC_MEMBER:
            self._deny(application, actor, "comment", "Only DAC members can comment on applications")
        if application.state not in COMMENTABLE_STATES:
            self._deny(
                application, actor, "comment",
                f"Comments are closed for applications in state {application.state.value}",
            )
        try:
            return DacComment(
                application_id=application.id,
                user_id=actor.user_id,
                user_name=actor.display_name,
                section=section,
                message=message.strip(),
                dac_chair_only=dac_chair_only,
                created_at=self._clock(),
            )
        except ValidationError as exc:
            raise InvalidRequestError(
                f"Invalid comment: {exc.errors()[0]['msg']}",
                field="message",
            ) from exc

    @staticmethod
    def visible_comments(comments: List[DacComment], actor: Actor) -> List[DacComment]:
        """Chair-only comments are dropped for readers outside the DAC."""
        if actor.role == UserRole.DAC_MEMBER:
            return list(comments)
        return [c for c in comments if not c.dac_chair_only]

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def perform(
        self,
        application: Application,
        action: ApplicationAction,
        actor: Actor,
        *,
        signatures: Optional[SignatureSet] = None,
        comments: Optional[str] = None,
        section_reviews: Optional[Mapping[Section, SectionRevision]] = None,
    ) -> TransitionResult:
        """
        Attempt ``action`` on ``application`` as ``actor``.

        Args:
            application: Current snapshot
            action: The action being attempted
            actor: Who is attempting it
            signatures: Current signatures; required for submitting actions
            comments: Reviewer comments when requesting revisions
            section_reviews: Per-section verdicts when requesting revisions;
                omitted sections keep the default (needs changes)

        Returns:
            TransitionResult with the new snapshot, the ledger entry, and the
            revision cycle opened or resolved (if any)

        Raises:
            InvalidTransitionError: the action is not legal from the current state
            ForbiddenError: the actor may not perform it right now
            InvalidRequestError: malformed section reviews
        """
        edge = transition_for(action)
        state_before = application.state

        validate_transition(state_before, edge.to_state)
        if state_before != edge.from_state:
            raise InvalidTransitionError(
                state_before,
                edge.to_state,
                f"Cannot perform action {action.value} on application with state {state_before.value}",
            )

        if actor.role not in edge.roles:
            self._deny(application, actor, action.value, f"Role {actor.role.value} cannot perform {action.value}")
        if actor.role == UserRole.APPLICANT and not application.is_owned_by(actor):
            self._deny(application, actor, action.value, "Only the owning applicant can perform this action")

        if action in SUBMIT_ACTIONS:
            rights = resolve_signature_rights(
                actor.role,
                state_before,
                state_before == ApplicationState.DRAFT,
                signatures,
                self.active_revision(application),
            )
            if not rights.can_submit:
                self._deny(application, actor, action.value, "Application must be signed before it can be submitted")

        reviews = _normalize_reviews(section_reviews) if action in REVISION_OPENING_ACTIONS else {}

        # Checks done; mutate from here on
        now = self._clock()
        revision: Optional[RevisionRequest] = None

        if action in REVISION_OPENING_ACTIONS:
            revision = self.tracker.open_revision_cycle(application.id, actor.role, comments)
            for section, review in reviews.items():
                revision = self.tracker.mark_section(
                    application.id, revision.id, section, review.approved, review.notes
                )
        elif action in REVISION_RESOLVING_ACTIONS:
            active = self.active_revision(application)
            if active is not None:
                revision = self.tracker.resolve(application.id, active.id)

        update: Dict[str, Any] = {"state": edge.to_state, "updated_at": now}
        if edge.to_state == ApplicationState.APPROVED:
            update["approved_at"] = now
            update["expires_at"] = now + self.approval_validity
        next_application = application.model_copy(update=update)

        entry = self.ledger.record(
            ActionLedgerEntry(
                application_id=application.id,
                user_id=actor.user_id,
                user_name=actor.display_name,
                created_at=now,
                action=action,
                state_before=state_before,
                state_after=edge.to_state,
                revision_request_id=revision.id if revision else None,
            )
        )
        return TransitionResult(application=next_application, entry=entry, revision=revision)

    # Named actions

    def submit_draft(self, application: Application, actor: Actor, signatures: Optional[SignatureSet]) -> TransitionResult:
        return self.perform(application, ApplicationAction.SUBMIT_DRAFT, actor, signatures=signatures)

    def approve_rep_review(self, application: Application, actor: Actor, signatures: Optional[SignatureSet]) -> TransitionResult:
        return self.perform(application, ApplicationAction.INSTITUTIONAL_REP_APPROVED, actor, signatures=signatures)

    def request_rep_revisions(
        self,
        application: Application,
        actor: Actor,
        comments: Optional[str] = None,
        section_reviews: Optional[Mapping[Section, SectionRevision]] = None,
    ) -> TransitionResult:
        return self.perform(
            application,
            ApplicationAction.INSTITUTIONAL_REP_REVISION_REQUEST,
            actor,
            comments=comments,
            section_reviews=section_reviews,
        )

    def reject_rep_review(self, application: Application, actor: Actor) -> TransitionResult:
        return self.perform(application, ApplicationAction.INSTITUTIONAL_REP_REJECTED, actor)

    def submit_rep_revisions(self, application: Application, actor: Actor, signatures: Optional[SignatureSet]) -> TransitionResult:
        return self.perform(application, ApplicationAction.INSTITUTIONAL_REP_SUBMIT, actor, signatures=signatures)

    def request_dac_revisions(
        self,
        application: Application,
        actor: Actor,
        comments: Optional[str] = None,
        section_reviews: Optional[Mapping[Section, SectionRevision]] = None,
    ) -> TransitionResult:
        return self.perform(
            application,
            ApplicationAction.DAC_REVIEW_REVISION_REQUEST,
            actor,
            comments=comments,
            section_reviews=section_reviews,
        )

    def submit_dac_revisions(self, application: Application, actor: Actor, signatures: Optional[SignatureSet]) -> TransitionResult:
        return self.perform(application, ApplicationAction.DAC_REVIEW_SUBMIT, actor, signatures=signatures)

    def approve_dac_review(self, application: Application, actor: Actor) -> TransitionResult:
        return self.perform(application, ApplicationAction.DAC_REVIEW_APPROVED, actor)

    def reject_dac_review(self, application: Application, actor: Actor) -> TransitionResult:
        return self.perform(application, ApplicationAction.DAC_REVIEW_REJECTED, actor)

    def close(self, application: Application, actor: Actor) -> TransitionResult:
        return self.perform(application, ApplicationAction.CLOSE, actor)

    def revoke(self, application: Application, actor: Actor) -> TransitionResult:
        return self.perform(application, ApplicationAction.REVOKE, actor)

    # ------------------------------------------------------------------ #

    @staticmethod
    def _is_owner_applicant(application: Application, actor: Actor) -> bool:
        return actor.role == UserRole.APPLICANT and application.is_owned_by(actor)

    @staticmethod
    def _deny(application: Application, actor: Actor, attempted: str, message: str) -> None:
        logger.warning(
            "Action denied",
            extra={
                "application_id": str(application.id),
                "state": application.state.value,
                "role": actor.role.value,
                "attempted": attempted,
            },
        )
        raise ForbiddenError(message, application_id=application.id, state=application.state, role=actor.role)


def _normalize_reviews(
    section_reviews: Optional[Mapping[Any, Any]],
) -> Dict[Section, SectionRevision]:
    """Coerce section keys and verdicts; raise InvalidRequestError on anything unknown."""
    reviews: Dict[Section, SectionRevision] = {}
    for key, review in (section_reviews or {}).items():
        try:
            section = Section(key)
        except ValueError as exc:
            raise InvalidRequestError(f"Unknown section: {key}", section=key) from exc
        if isinstance(review, SectionRevision):
            reviews[section] = review
            continue
        try:
            reviews[section] = SectionRevision.model_validate(review)
        except ValidationError as exc:
            raise InvalidRequestError(f"Invalid review for section {section.value}", section=section) from exc
    return reviews
