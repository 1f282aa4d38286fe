"""
Pytest fixtures for access review tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict

import pytest

from access_review.kernel.events.action_ledger import ActionLedger
from access_review.kernel.models.application import Actor, UserRole
from access_review.kernel.models.signature import SignatureSet
from access_review.orchestration.revision_tracker import RevisionTracker
from access_review.orchestration.workflow import ApplicationWorkflow

SIGNATURE_IMAGE = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def workflow(clock: FakeClock) -> ApplicationWorkflow:
    return ApplicationWorkflow(
        tracker=RevisionTracker(clock=clock),
        ledger=ActionLedger(),
        clock=clock,
    )


@pytest.fixture
def applicant() -> Actor:
    return Actor(user_id="applicant-1", role=UserRole.APPLICANT, display_name="Ada Applicant")


@pytest.fixture
def other_applicant() -> Actor:
    return Actor(user_id="applicant-2", role=UserRole.APPLICANT, display_name="Otto Other")


@pytest.fixture
def rep() -> Actor:
    return Actor(user_id="rep-1", role=UserRole.INSTITUTIONAL_REP, display_name="Rita Rep")


@pytest.fixture
def dac() -> Actor:
    return Actor(user_id="dac-1", role=UserRole.DAC_MEMBER, display_name="Dana DAC")


@pytest.fixture
def signature_image() -> str:
    return SIGNATURE_IMAGE


@pytest.fixture
def applicant_signed() -> SignatureSet:
    return SignatureSet(applicant_signature=SIGNATURE_IMAGE)


@pytest.fixture
def both_signed() -> SignatureSet:
    return SignatureSet(
        applicant_signature=SIGNATURE_IMAGE,
        institutional_rep_signature=SIGNATURE_IMAGE,
    )


def actor_headers(actor: Actor) -> Dict[str, str]:
    """HTTP headers identifying ``actor`` to the API."""
    headers = {"X-User-Id": actor.user_id, "X-User-Role": actor.role.value}
    if actor.display_name:
        headers["X-User-Name"] = actor.display_name
    return headers


@pytest.fixture
def headers_for() -> Callable[[Actor], Dict[str, str]]:
    return actor_headers
