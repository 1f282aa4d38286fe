"""
API v1 routes.
"""

from fastapi import APIRouter

from access_review.api.v1 import applications, comments, revisions, signatures

router = APIRouter()

router.include_router(applications.router, prefix="/applications", tags=["Applications"])
router.include_router(revisions.router, prefix="/applications/{application_id}/revisions", tags=["Revisions"])
router.include_router(signatures.router, prefix="/applications/{application_id}/signature", tags=["Signatures"])
router.include_router(comments.router, prefix="/applications/{application_id}/comments", tags=["Comments"])
