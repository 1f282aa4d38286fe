"""Integration tests for the application API endpoints."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from access_review.api.deps import get_application_service
from access_review.config import get_settings
from access_review.kernel.models.application import Application, ApplicationState
from access_review.main import app
from access_review.services.application_service import ApplicationService

API = get_settings().api_v1_prefix


@pytest.fixture
def service() -> ApplicationService:
    return ApplicationService.from_settings(get_settings())


@pytest_asyncio.fixture
async def client(service):
    """Async client against a fresh in-memory service."""
    app.dependency_overrides[get_application_service] = lambda: service
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_application_service, None)


async def create_draft(client, headers) -> str:
    r = await client.post(f"{API}/applications", json={"dac_id": "DAC-1"}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["id"]


async def sign(client, app_id, headers, image, edit_mode=False):
    return await client.put(
        f"{API}/applications/{app_id}/signature",
        json={"signature": image, "edit_mode": edit_mode},
        headers=headers,
    )


async def act(client, app_id, headers, action, **body):
    return await client.post(
        f"{API}/applications/{app_id}/actions",
        json={"action": action, **body},
        headers=headers,
    )


class TestApplicationsAPI:
    """Tests for /api/v1/applications."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        r = await client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

    @pytest.mark.asyncio
    async def test_missing_identity_is_401(self, client):
        r = await client.post(f"{API}/applications", json={})
        assert r.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_role_is_401(self, client):
        r = await client.post(
            f"{API}/applications",
            json={},
            headers={"X-User-Id": "u1", "X-User-Role": "ADMIN"},
        )
        assert r.status_code == 401

    @pytest.mark.asyncio
    async def test_create_and_get(self, client, applicant, headers_for):
        app_id = await create_draft(client, headers_for(applicant))

        r = await client.get(f"{API}/applications/{app_id}", headers=headers_for(applicant))
        assert r.status_code == 200
        data = r.json()
        assert data["state"] == "DRAFT"
        assert data["user_id"] == applicant.user_id
        assert "X-Request-ID" in r.headers

    @pytest.mark.asyncio
    async def test_reviewer_cannot_create(self, client, rep, headers_for):
        r = await client.post(f"{API}/applications", json={}, headers=headers_for(rep))
        assert r.status_code == 403
        assert r.json()["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_unknown_application_is_404(self, client, applicant, headers_for):
        r = await client.get(
            f"{API}/applications/00000000-0000-0000-0000-000000000000",
            headers=headers_for(applicant),
        )
        assert r.status_code == 404
        assert r.json()["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_edit_contents_in_edit_mode(self, client, applicant, headers_for):
        headers = headers_for(applicant)
        app_id = await create_draft(client, headers)

        r = await client.patch(
            f"{API}/applications/{app_id}/contents",
            json={"fields": {"project_title": "Cohort study"}, "edit_mode": True},
            headers=headers,
        )
        assert r.status_code == 200, r.text
        assert r.json()["contents"]["project_title"] == "Cohort study"

    @pytest.mark.asyncio
    async def test_edit_without_edit_mode_is_403(self, client, applicant, headers_for):
        headers = headers_for(applicant)
        app_id = await create_draft(client, headers)

        r = await client.patch(
            f"{API}/applications/{app_id}/contents",
            json={"fields": {"project_title": "Cohort study"}},
            headers=headers,
        )
        assert r.status_code == 403
        assert r.json()["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_bad_field_value_is_422(self, client, applicant, headers_for):
        headers = headers_for(applicant)
        app_id = await create_draft(client, headers)

        r = await client.patch(
            f"{API}/applications/{app_id}/contents",
            json={"fields": {"ethics_letter": "letter.pdf"}, "edit_mode": True},
            headers=headers,
        )
        assert r.status_code == 422

    @pytest.mark.asyncio
    async def test_invalid_signature_is_422(self, client, applicant, headers_for):
        headers = headers_for(applicant)
        app_id = await create_draft(client, headers)

        r = await sign(client, app_id, headers, "scribble", edit_mode=True)
        assert r.status_code == 422

    @pytest.mark.asyncio
    async def test_unsigned_submit_is_403(self, client, applicant, headers_for):
        headers = headers_for(applicant)
        app_id = await create_draft(client, headers)

        r = await act(client, app_id, headers, "SUBMIT_DRAFT")
        assert r.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_transition_is_409(self, client, applicant, dac, headers_for):
        app_id = await create_draft(client, headers_for(applicant))

        r = await act(client, app_id, headers_for(dac), "DAC_REVIEW_APPROVED")
        assert r.status_code == 409
        body = r.json()
        assert body["code"] == "INVALID_TRANSITION"
        assert "detail" in body

    @pytest.mark.asyncio
    async def test_unknown_action_is_422(self, client, applicant, headers_for):
        headers = headers_for(applicant)
        app_id = await create_draft(client, headers)

        r = await act(client, app_id, headers, "WITHDRAW")
        assert r.status_code == 422

    @pytest.mark.asyncio
    async def test_submit_and_history(self, client, applicant, headers_for, signature_image):
        headers = headers_for(applicant)
        app_id = await create_draft(client, headers)

        r = await sign(client, app_id, headers, signature_image, edit_mode=True)
        assert r.status_code == 200, r.text
        assert r.json()["applicant_signed"] is True

        r = await act(client, app_id, headers, "SUBMIT_DRAFT")
        assert r.status_code == 200, r.text
        assert r.json()["application"]["state"] == "INSTITUTIONAL_REP_REVIEW"
        assert r.json()["entry"]["action"] == "SUBMIT_DRAFT"

        r = await client.get(f"{API}/applications/{app_id}/history", headers=headers)
        assert [e["action"] for e in r.json()] == ["SUBMIT_DRAFT"]
        assert r.json()[0]["user_name"] == applicant.display_name

    @pytest.mark.asyncio
    async def test_permissions_endpoint(self, client, applicant, headers_for):
        headers = headers_for(applicant)
        app_id = await create_draft(client, headers)

        r = await client.get(f"{API}/applications/{app_id}/permissions", headers=headers)
        data = r.json()
        assert data["is_edit_mode"] is False
        assert not any(data["sections"].values())
        assert data["editable_fields"] == []

        r = await client.get(
            f"{API}/applications/{app_id}/permissions",
            params={"edit_mode": "true"},
            headers=headers,
        )
        data = r.json()
        assert all(data["sections"].values())
        assert data["can_sign"] is True
        assert data["can_submit"] is False
        assert data["available_actions"] == ["SUBMIT_DRAFT"]
        assert "project_title" in data["editable_fields"]

    @pytest.mark.asyncio
    async def test_revisions_endpoints(self, client, applicant, rep, headers_for, signature_image):
        headers = headers_for(applicant)
        app_id = await create_draft(client, headers)
        await sign(client, app_id, headers, signature_image, edit_mode=True)
        await act(client, app_id, headers, "SUBMIT_DRAFT")

        r = await client.get(f"{API}/applications/{app_id}/revisions/latest", headers=headers)
        assert r.status_code == 404

        r = await act(
            client,
            app_id,
            headers_for(rep),
            "INSTITUTIONAL_REP_REVISION_REQUEST",
            comments="Tighten the aims",
            sections={"applicant": {"approved": True}, "project": {"approved": False, "notes": "Aims vague"}},
        )
        assert r.status_code == 200, r.text
        revision_id = r.json()["revision_request_id"]

        r = await client.get(f"{API}/applications/{app_id}/revisions/latest", headers=headers)
        data = r.json()
        assert data["id"] == revision_id
        assert data["comments"] == "Tighten the aims"
        assert data["sections"]["applicant"]["approved"] is True
        assert data["sections"]["project"]["needs_changes"] is True
        assert data["sections"]["project"]["notes"] == "Aims vague"

        r = await client.patch(
            f"{API}/applications/{app_id}/revisions/{revision_id}/sections/ethics",
            json={"approved": True},
            headers=headers_for(rep),
        )
        assert r.status_code == 200, r.text
        assert r.json()["sections"]["ethics"]["approved"] is True

        r = await client.patch(
            f"{API}/applications/{app_id}/revisions/{revision_id}/sections/ethics",
            json={"approved": False},
            headers=headers,
        )
        assert r.status_code == 403

        r = await client.get(f"{API}/applications/{app_id}/revisions", headers=headers)
        assert [rev["id"] for rev in r.json()] == [revision_id]

    @pytest.mark.asyncio
    async def test_delete_signature(self, client, applicant, headers_for, signature_image):
        headers = headers_for(applicant)
        app_id = await create_draft(client, headers)
        await sign(client, app_id, headers, signature_image, edit_mode=True)

        r = await client.delete(
            f"{API}/applications/{app_id}/signature",
            params={"edit_mode": "true"},
            headers=headers,
        )
        assert r.status_code == 200
        assert r.json()["applicant_signed"] is False

        r = await client.get(f"{API}/applications/{app_id}/signature", headers=headers)
        assert r.json()["applicant_signature"] is None


class TestListingAPI:
    """Tests for GET /api/v1/applications."""

    @pytest.mark.asyncio
    async def test_page_with_counts(self, client, applicant, headers_for):
        for _ in range(3):
            await create_draft(client, headers_for(applicant))

        r = await client.get(f"{API}/applications", params={"page_size": 2}, headers=headers_for(applicant))
        assert r.status_code == 200
        body = r.json()
        assert len(body["items"]) == 2
        assert body["total"] == 3
        assert body["has_more"] is True
        assert body["counts"]["DRAFT"] == 3
        assert body["counts"]["TOTAL"] == 3

    @pytest.mark.asyncio
    async def test_state_filter_keeps_counts(self, client, applicant, headers_for):
        await create_draft(client, headers_for(applicant))

        r = await client.get(
            f"{API}/applications",
            params={"state": ["APPROVED", "REJECTED"]},
            headers=headers_for(applicant),
        )
        body = r.json()
        assert body["items"] == []
        assert body["counts"]["DRAFT"] == 1

    @pytest.mark.asyncio
    async def test_bad_paging_and_sort_are_422(self, client, rep, headers_for):
        for params in ({"page": 0}, {"page_size": 500}, {"sort": "secret"}):
            r = await client.get(f"{API}/applications", params=params, headers=headers_for(rep))
            assert r.status_code == 422, params


class TestCommentsAPI:
    """Tests for /api/v1/applications/{id}/comments."""

    @pytest.mark.asyncio
    async def test_post_and_list(self, client, service, applicant, dac, headers_for):
        application = await service.store.add(
            Application(user_id=applicant.user_id, state=ApplicationState.DAC_REVIEW)
        )
        url = f"{API}/applications/{application.id}/comments"

        r = await client.post(url, json={"section": "project", "message": "Scope?"}, headers=headers_for(dac))
        assert r.status_code == 201, r.text
        assert r.json()["user_name"] == "Dana DAC"
        r = await client.post(
            url,
            json={"section": "ethics", "message": "Chair: check letter", "dac_chair_only": True},
            headers=headers_for(dac),
        )
        assert r.status_code == 201

        seen_by_dac = (await client.get(url, headers=headers_for(dac))).json()
        seen_by_applicant = (await client.get(url, headers=headers_for(applicant))).json()
        project_only = (await client.get(url, params={"section": "project"}, headers=headers_for(dac))).json()

        assert len(seen_by_dac) == 2
        assert [c["message"] for c in seen_by_applicant] == ["Scope?"]
        assert [c["section"] for c in project_only] == ["project"]

    @pytest.mark.asyncio
    async def test_applicant_cannot_comment(self, client, service, applicant, headers_for):
        application = await service.store.add(
            Application(user_id=applicant.user_id, state=ApplicationState.DAC_REVIEW)
        )
        r = await client.post(
            f"{API}/applications/{application.id}/comments",
            json={"section": "project", "message": "me too"},
            headers=headers_for(applicant),
        )
        assert r.status_code == 403
        assert r.json()["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_comment_on_draft_is_403(self, client, applicant, dac, headers_for):
        app_id = await create_draft(client, headers_for(applicant))
        r = await client.post(
            f"{API}/applications/{app_id}/comments",
            json={"section": "project", "message": "early"},
            headers=headers_for(dac),
        )
        assert r.status_code == 403
