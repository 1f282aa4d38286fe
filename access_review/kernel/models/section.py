"""
Document sections and the fields each one owns.

Section membership is a compiled-in table rather than reflection over a
validation schema: a field belongs to exactly one section.
"""

from enum import Enum
from typing import Dict, Optional, Tuple


class Section(str, Enum):
    """Named, disjoint parts of the application document."""

    APPLICANT = "applicant"
    INSTITUTIONAL = "institutional"
    PROJECT = "project"
    REQUESTED_STUDIES = "requestedStudies"
    ETHICS = "ethics"
    AGREEMENTS = "agreements"
    APPENDICES = "appendices"
    COLLABORATORS = "collaborators"
    SIGN = "sign"


SECTION_FIELDS: Dict[Section, Tuple[str, ...]] = {
    Section.APPLICANT: (
        "applicant_title",
        "applicant_first_name",
        "applicant_middle_name",
        "applicant_last_name",
        "applicant_suffix",
        "applicant_primary_affiliation",
        "applicant_institutional_email",
        "applicant_profile_url",
        "applicant_position_title",
        "applicant_institution_country",
        "applicant_institution_state",
        "applicant_institution_city",
        "applicant_institution_postal_code",
        "applicant_institution_street_address",
        "applicant_institution_building",
    ),
    Section.INSTITUTIONAL: (
        "institutional_rep_title",
        "institutional_rep_first_name",
        "institutional_rep_middle_name",
        "institutional_rep_last_name",
        "institutional_rep_suffix",
        "institutional_rep_primary_affiliation",
        "institutional_rep_email",
        "institutional_rep_profile_url",
        "institutional_rep_position_title",
        "institution_country",
        "institution_state",
        "institution_city",
        "institution_street_address",
        "institution_postal_code",
        "institution_building",
    ),
    Section.PROJECT: (
        "project_title",
        "project_website",
        "project_background",
        "project_aims",
        "project_methodology",
        "project_summary",
        "project_publication_urls",
    ),
    Section.REQUESTED_STUDIES: ("requested_studies",),
    Section.ETHICS: ("ethics_review_required", "ethics_letter"),
    Section.AGREEMENTS: ("accepted_agreements",),
    Section.APPENDICES: ("accepted_appendices",),
    Section.COLLABORATORS: ("collaborators",),
    Section.SIGN: ("signed_pdf",),
}

# Reverse index: field -> owning section
FIELD_SECTIONS: Dict[str, Section] = {
    field: section
    for section, fields in SECTION_FIELDS.items()
    for field in fields
}


def section_for_field(field: str) -> Optional[Section]:
    """Return the section owning ``field``, or None if no section does."""
    return FIELD_SECTIONS.get(field)
