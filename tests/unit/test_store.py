"""Unit tests for the in-memory application store and service."""

import asyncio
import uuid

import pytest

from access_review.config import Settings
from access_review.kernel.errors import ForbiddenError, InvalidTransitionError, NotFoundError
from access_review.kernel.models.action import ApplicationAction
from access_review.kernel.models.application import Application, ApplicationState
from access_review.kernel.models.section import Section
from access_review.services.application_service import ApplicationService
from access_review.store import ApplicationStore


@pytest.fixture
def service(workflow) -> ApplicationService:
    return ApplicationService(workflow)


class TestApplicationStore:
    """Tests for ApplicationStore."""

    @pytest.mark.asyncio
    async def test_add_and_get(self):
        store = ApplicationStore()
        app = await store.add(Application(user_id="u1"))

        assert await store.get(app.id) == app
        assert (await store.get_signatures(app.id)).applicant_signature is None

    @pytest.mark.asyncio
    async def test_missing_application(self):
        store = ApplicationStore()
        with pytest.raises(NotFoundError):
            await store.get(Application(user_id="u1").id)

    @pytest.mark.asyncio
    async def test_compare_and_set_on_state(self):
        store = ApplicationStore()
        app = await store.add(Application(user_id="u1"))
        moved = app.model_copy(update={"state": ApplicationState.INSTITUTIONAL_REP_REVIEW})
        await store.save(moved, expected_state=ApplicationState.DRAFT)

        stale = app.model_copy(update={"state": ApplicationState.INSTITUTIONAL_REP_REVIEW})
        with pytest.raises(InvalidTransitionError):
            await store.save(stale, expected_state=ApplicationState.DRAFT)

    @pytest.mark.asyncio
    async def test_list_for_user(self):
        store = ApplicationStore()
        mine = await store.add(Application(user_id="u1"))
        await store.add(Application(user_id="u2"))

        assert await store.list_for_user("u1") == [mine]
        assert len(await store.list_for_user()) == 2

    def test_lock_requires_known_application(self):
        store = ApplicationStore()
        with pytest.raises(NotFoundError):
            store.lock(uuid.uuid4())
        assert store._locks == {}


class TestApplicationService:
    """Tests for ApplicationService."""

    @pytest.mark.asyncio
    async def test_concurrent_submits_accept_one(self, service, applicant, signature_image):
        app = await service.create(applicant)
        await service.sign(app.id, applicant, signature_image, is_edit_mode=True)

        results = await asyncio.gather(
            service.perform(app.id, applicant, ApplicationAction.SUBMIT_DRAFT),
            service.perform(app.id, applicant, ApplicationAction.SUBMIT_DRAFT),
            return_exceptions=True,
        )

        accepted = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, InvalidTransitionError)]
        assert len(accepted) == 1
        assert len(rejected) == 1
        assert len(await service.history(app.id, applicant)) == 1

    @pytest.mark.asyncio
    async def test_applicants_only_see_their_own(self, service, applicant, other_applicant, rep):
        app = await service.create(applicant)

        with pytest.raises(ForbiddenError):
            await service.get(app.id, other_applicant)
        assert await service.get(app.id, rep) == app
        assert (await service.list_applications(other_applicant)).items == []

    @pytest.mark.asyncio
    async def test_reviewer_amends_active_revision(self, service, applicant, rep, dac, signature_image):
        app = await service.create(applicant)
        await service.sign(app.id, applicant, signature_image, is_edit_mode=True)
        await service.perform(app.id, applicant, ApplicationAction.SUBMIT_DRAFT)
        result = await service.perform(app.id, rep, ApplicationAction.INSTITUTIONAL_REP_REVISION_REQUEST)

        revision = await service.mark_revision_section(
            app.id, rep, result.revision.id, Section.APPLICANT, True, "fine"
        )
        assert revision[Section.APPLICANT].approved is True

        with pytest.raises(ForbiddenError):
            await service.mark_revision_section(app.id, dac, result.revision.id, Section.PROJECT, True)

    @pytest.mark.asyncio
    async def test_latest_revision_missing(self, service, applicant):
        app = await service.create(applicant)
        with pytest.raises(NotFoundError):
            await service.latest_revision(app.id, applicant)

    def test_from_settings(self):
        service = ApplicationService.from_settings(Settings(approval_validity_days=30))
        assert service.workflow.approval_validity.days == 30

    @pytest.mark.asyncio
    async def test_notifications_follow_saved_actions(self, service, applicant, signature_image):
        app = await service.create(applicant)
        await service.sign(app.id, applicant, signature_image, is_edit_mode=True)
        await service.perform(app.id, applicant, ApplicationAction.SUBMIT_DRAFT)

        assert len(service.notifications.drain()) == 2

    @pytest.mark.asyncio
    async def test_unknown_ids_leave_no_locks(self, service, applicant):
        for _ in range(500):
            with pytest.raises(NotFoundError):
                await service.perform(uuid.uuid4(), applicant, ApplicationAction.SUBMIT_DRAFT)

        assert len(service.store._locks) == 0

    @pytest.mark.asyncio
    async def test_failed_save_queues_no_notifications(self, service, applicant, signature_image, monkeypatch):
        app = await service.create(applicant)
        await service.sign(app.id, applicant, signature_image, is_edit_mode=True)

        async def failing_save(application, expected_state):
            raise InvalidTransitionError(expected_state, application.state)

        monkeypatch.setattr(service.store, "save", failing_save)
        with pytest.raises(InvalidTransitionError):
            await service.perform(app.id, applicant, ApplicationAction.SUBMIT_DRAFT)

        assert service.notifications.drain() == []

    def test_outbox_size_from_settings(self):
        service = ApplicationService.from_settings(Settings(notification_outbox_size=5))
        assert service.notifications.outbox.maxlen == 5
