"""
Permission core - section editability and signature rights.
"""

from access_review.kernel.permissions.editability import (
    can_edit,
    editable_sections,
    validate_revised_fields,
)
from access_review.kernel.permissions.signature_rights import (
    SignatureRights,
    resolve_signature_rights,
)

__all__ = [
    "can_edit",
    "editable_sections",
    "validate_revised_fields",
    "SignatureRights",
    "resolve_signature_rights",
]
