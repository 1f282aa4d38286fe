"""
Pydantic schemas for API request/response validation.
"""

from access_review.schemas.application import (
    ActionRequest,
    ActionResponse,
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ContentsUpdate,
    LedgerEntryResponse,
    PermissionsResponse,
    SectionReviewInput,
)
from access_review.schemas.comment import CommentCreate, CommentResponse
from access_review.schemas.common import (
    ErrorResponse,
    HealthResponse,
    PaginatedResponse,
    ValidationErrorResponse,
)
from access_review.schemas.revision import (
    RevisionResponse,
    SectionRevisionResponse,
    SectionRevisionUpdate,
)
from access_review.schemas.signature import SignatureInput, SignatureResponse

__all__ = [
    "ActionRequest",
    "ActionResponse",
    "ApplicationCreate",
    "ApplicationListResponse",
    "ApplicationResponse",
    "CommentCreate",
    "CommentResponse",
    "ContentsUpdate",
    "ErrorResponse",
    "HealthResponse",
    "LedgerEntryResponse",
    "PaginatedResponse",
    "PermissionsResponse",
    "RevisionResponse",
    "SectionReviewInput",
    "SectionRevisionResponse",
    "SectionRevisionUpdate",
    "SignatureInput",
    "SignatureResponse",
    "ValidationErrorResponse",
]
