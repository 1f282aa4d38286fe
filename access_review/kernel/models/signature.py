"""
Signatures on the sign-and-submit section.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from access_review.kernel.models.application import UserRole

BASE64_IMAGE = re.compile(r"^data:image/(png|jpeg|jpg|gif|webp);base64,[A-Za-z0-9+/]+={0,2}$")


class SignatureRole(str, Enum):
    """Roles that sign an application."""
    APPLICANT = "APPLICANT"
    INSTITUTIONAL_REP = "INSTITUTIONAL_REP"

    @classmethod
    def for_user_role(cls, role: UserRole) -> Optional["SignatureRole"]:
        try:
            return cls(role.value)
        except ValueError:
            return None


class SignatureSet(BaseModel):
    """Applicant and institutional rep signatures of one application."""

    applicant_signature: Optional[str] = None
    applicant_signed_at: Optional[datetime] = None
    institutional_rep_signature: Optional[str] = None
    institutional_rep_signed_at: Optional[datetime] = None

    def is_signed(self, role: SignatureRole) -> bool:
        if role == SignatureRole.APPLICANT:
            return bool(self.applicant_signature)
        return bool(self.institutional_rep_signature)


def validate_signature_image(value: str) -> str:
    """Signatures are base64 encoded images sent as data URLs."""
    if not BASE64_IMAGE.match(value):
        raise ValueError("Signature must be a base64 encoded image data URL")
    return value

