"""Unit tests for the section -> field table."""

from access_review.kernel.models.application import ApplicationContents
from access_review.kernel.models.section import (
    FIELD_SECTIONS,
    SECTION_FIELDS,
    Section,
    section_for_field,
)


class TestSectionFields:
    """Tests for SECTION_FIELDS."""

    def test_every_section_listed(self):
        assert set(SECTION_FIELDS) == set(Section)

    def test_sections_are_disjoint(self):
        seen = set()
        for fields in SECTION_FIELDS.values():
            for field in fields:
                assert field not in seen, field
                seen.add(field)

    def test_table_covers_document_model(self):
        """Every document field belongs to exactly one section and vice versa."""
        all_fields = {f for fields in SECTION_FIELDS.values() for f in fields}
        assert all_fields == set(ApplicationContents.model_fields)
        assert set(FIELD_SECTIONS) == all_fields

    def test_section_for_field(self):
        assert section_for_field("project_title") == Section.PROJECT
        assert section_for_field("signed_pdf") == Section.SIGN
        assert section_for_field("ethics_letter") == Section.ETHICS
        assert section_for_field("institution_city") == Section.INSTITUTIONAL

    def test_unknown_field_has_no_section(self):
        assert section_for_field("not_a_field") is None

    def test_wire_values(self):
        assert Section.REQUESTED_STUDIES.value == "requestedStudies"
        assert Section("sign") == Section.SIGN
