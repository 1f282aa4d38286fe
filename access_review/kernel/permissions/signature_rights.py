"""
Signature authorizer - who may sign the application and who may submit it.

Rights are keyed by application state:

    DRAFT                                 sign: applicant in edit mode
                                          submit: + applicant signed
    INSTITUTIONAL_REP_REVIEW              sign: institutional rep
                                          submit: + rep signed
    INSTITUTIONAL_REP_REVISION_REQUESTED  sign: applicant, sign section not approved
    DAC_REVISIONS_REQUESTED               submit: applicant, applicant signed
    anything else                         neither

Signatures that have not been loaded yet disable both rights.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from access_review.kernel.models.application import ApplicationState, UserRole
from access_review.kernel.models.revision import RevisionRequest
from access_review.kernel.models.section import Section
from access_review.kernel.models.signature import SignatureRole, SignatureSet


class SignatureRights(BaseModel):
    """Result of resolving signature rights for one actor."""

    model_config = ConfigDict(frozen=True)

    can_sign: bool = False
    can_submit: bool = False


DISABLED = SignatureRights(can_sign=False, can_submit=False)


def _sign_section_open(active_revision: Optional[RevisionRequest]) -> bool:
    """The sign section was not accepted by the reviewer in the active cycle."""
    if active_revision is None:
        return True
    return not active_revision[Section.SIGN].approved


def resolve_signature_rights(
    role: Optional[UserRole],
    state: ApplicationState,
    is_edit_mode: bool,
    signatures: Optional[SignatureSet],
    active_revision: Optional[RevisionRequest] = None,
) -> SignatureRights:
    """Derive sign and submit rights for ``role`` in ``state``."""
    if signatures is None:
        return DISABLED

    applicant = role == UserRole.APPLICANT
    rep = role == UserRole.INSTITUTIONAL_REP
    applicant_signed = signatures.is_signed(SignatureRole.APPLICANT)
    rep_signed = signatures.is_signed(SignatureRole.INSTITUTIONAL_REP)

    if state == ApplicationState.DRAFT:
        return SignatureRights(
            can_sign=applicant and is_edit_mode,
            can_submit=applicant and is_edit_mode and applicant_signed,
        )
    if state == ApplicationState.INSTITUTIONAL_REP_REVIEW:
        return SignatureRights(can_sign=rep, can_submit=rep and rep_signed)
    if state in (
        ApplicationState.INSTITUTIONAL_REP_REVISION_REQUESTED,
        ApplicationState.DAC_REVISIONS_REQUESTED,
    ):
        return SignatureRights(
            can_sign=applicant and _sign_section_open(active_revision),
            can_submit=applicant and applicant_signed,
        )
    return DISABLED
