"""
Signature endpoints for the sign-and-submit section.
"""

import uuid

from fastapi import APIRouter, Query

from access_review.api.deps import CurrentActor, Service
from access_review.schemas.signature import SignatureInput, SignatureResponse

router = APIRouter()


@router.get("", response_model=SignatureResponse)
async def get_signatures(application_id: uuid.UUID, actor: CurrentActor, service: Service):
    signatures = await service.signatures(application_id, actor)
    return SignatureResponse.from_set(signatures)


@router.put("", response_model=SignatureResponse)
async def sign_application(
    application_id: uuid.UUID,
    data: SignatureInput,
    actor: CurrentActor,
    service: Service,
):
    """Sign as the caller's role (applicant or institutional rep)."""
    signatures = await service.sign(
        application_id, actor, data.signature, is_edit_mode=data.edit_mode
    )
    return SignatureResponse.from_set(signatures)


@router.delete("", response_model=SignatureResponse)
async def clear_signature(
    application_id: uuid.UUID,
    actor: CurrentActor,
    service: Service,
    edit_mode: bool = Query(False),
):
    signatures = await service.clear_signature(application_id, actor, is_edit_mode=edit_mode)
    return SignatureResponse.from_set(signatures)
