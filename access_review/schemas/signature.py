"""
Signature schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from access_review.kernel.models.signature import SignatureSet, validate_signature_image


class SignatureInput(BaseModel):
    """Create or replace the caller's signature."""

    signature: str
    edit_mode: bool = False

    @field_validator("signature")
    @classmethod
    def check_image(cls, v: str) -> str:
        return validate_signature_image(v)


class SignatureResponse(BaseModel):
    applicant_signed: bool
    applicant_signature: Optional[str]
    applicant_signed_at: Optional[datetime]
    institutional_rep_signed: bool
    institutional_rep_signature: Optional[str]
    institutional_rep_signed_at: Optional[datetime]

    @classmethod
    def from_set(cls, signatures: SignatureSet) -> "SignatureResponse":
        return cls(
            applicant_signed=bool(signatures.applicant_signature),
            applicant_signature=signatures.applicant_signature,
            applicant_signed_at=signatures.applicant_signed_at,
            institutional_rep_signed=bool(signatures.institutional_rep_signature),
            institutional_rep_signature=signatures.institutional_rep_signature,
            institutional_rep_signed_at=signatures.institutional_rep_signed_at,
        )
