"""
Editability resolver - which document sections the current actor may modify.

The rule, per section:

1. No active revision cycle: editable only in edit mode.
2. Active revision cycle: editable if the reviewer flagged the section as
   needing changes (``approved is False``) or in edit mode.
3. No section is editable by default, the sign section included.

Edit mode is only legitimate while the application is in DRAFT; the workflow
normalizes the flag before calling in here.
"""

from typing import Dict, Iterable, List, Optional

from access_review.kernel.errors import ForbiddenError
from access_review.kernel.models.revision import RevisionRequest
from access_review.kernel.models.section import Section, section_for_field


def can_edit(
    active_revision: Optional[RevisionRequest],
    section: Section,
    is_edit_mode: bool,
) -> bool:
    """Check if fields of ``section`` may be modified right now."""
    if active_revision is None:
        return is_edit_mode
    return active_revision[section].approved is False or is_edit_mode


def editable_sections(
    active_revision: Optional[RevisionRequest],
    is_edit_mode: bool,
) -> Dict[Section, bool]:
    """``can_edit`` for every section."""
    return {
        section: can_edit(active_revision, section, is_edit_mode)
        for section in Section
    }


def validate_revised_fields(
    fields: Iterable[str],
    active_revision: Optional[RevisionRequest],
    is_edit_mode: bool,
) -> None:
    """
    Ensure every field of an update belongs to an editable section.

    Raises:
        ForbiddenError: naming the fields that fall outside editable sections
    """
    rejected: List[str] = []
    for field in fields:
        section = section_for_field(field)
        if section is None or not can_edit(active_revision, section, is_edit_mode):
            rejected.append(field)

    if rejected:
        raise ForbiddenError(
            "Update contains fields that may not be edited: " + ", ".join(sorted(rejected)),
            fields=sorted(rejected),
        )
