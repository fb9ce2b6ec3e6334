"""Tests for the disclosure attribute model."""

import pytest
from pydantic import ValidationError

from disclosure.core.ontology import (
    AttributeName,
    DisclosureAttributes,
    FERPA_EXCEPTION_ATTRIBUTES,
)


class TestAttributeName:
    def test_closed_set_of_twenty(self):
        assert len(AttributeName) == 20
        assert set(DisclosureAttributes.model_fields) == {name.value for name in AttributeName}

    def test_lookup_known_and_unknown(self):
        assert AttributeName.lookup("includes_fti") is AttributeName.INCLUDES_FTI
        assert AttributeName.lookup(AttributeName.CONTAINS_PII) is AttributeName.CONTAINS_PII
        assert AttributeName.lookup("includes_ftl") is None

    def test_ferpa_exceptions_in_box_order(self):
        assert len(FERPA_EXCEPTION_ATTRIBUTES) == 9
        assert FERPA_EXCEPTION_ATTRIBUTES[0] is AttributeName.DIRECTORY_INFO_AND_NOT_OPTED_OUT
        assert FERPA_EXCEPTION_ATTRIBUTES[-1] is AttributeName.OTHERWISE_PERMITTED_UNDER_99_31


class TestDisclosureAttributes:
    def test_defaults_all_false(self):
        attributes = DisclosureAttributes()
        assert attributes.true_names() == []
        assert all(value is False for value in attributes.to_dict().values())

    def test_lookup_by_name_and_enum(self):
        attributes = DisclosureAttributes(includes_fti=True)
        assert attributes["includes_fti"] is True
        assert attributes[AttributeName.INCLUDES_FTI] is True
        assert attributes.get("disclosure_to_student") is False

    def test_unknown_name_reads_false(self):
        attributes = DisclosureAttributes(includes_fti=True)
        assert attributes.get("not_an_attribute") is False
        assert attributes["includes_FTI"] is False

    def test_immutable(self):
        attributes = DisclosureAttributes()
        with pytest.raises(ValidationError):
            attributes.includes_fti = True

    def test_rejects_unknown_keyword(self):
        with pytest.raises(ValidationError):
            DisclosureAttributes(includes_ftl=True)

    def test_true_names_in_declaration_order(self):
        attributes = DisclosureAttributes(contains_pii=True, includes_fti=True)
        assert attributes.true_names() == ["includes_fti", "contains_pii"]

    def test_from_answers(self):
        attributes = DisclosureAttributes.from_answers({
            AttributeName.INCLUDES_FTI: False,
            AttributeName.DISCLOSURE_TO_STUDENT: True,
            "is_fafsa_data": True,
        })
        assert attributes.true_names() == ["disclosure_to_student", "is_fafsa_data"]


class TestBuild:
    def test_normalized_keys_only(self):
        attributes = DisclosureAttributes.build({"includes_fti": True})
        assert attributes.true_names() == ["includes_fti"]

    def test_empty_and_none(self):
        assert DisclosureAttributes.build().true_names() == []
        assert DisclosureAttributes.build({}).true_names() == []

    def test_legacy_keys_are_mapped(self):
        attributes = DisclosureAttributes.build({
            "recipient_type": "student",
            "data_type": "fafsa_data",
        })
        assert attributes.disclosure_to_student is True
        assert attributes.is_fafsa_data is True

    def test_legacy_flags_are_ored_on_top(self):
        attributes = DisclosureAttributes.build({
            "ferpa_written_consent": False,
            "consent": {"ferpa": True},
            "includes_fti": True,
        })
        assert attributes.ferpa_written_consent is True
        assert attributes.includes_fti is True

    def test_legacy_cannot_clear_normalized_flag(self):
        attributes = DisclosureAttributes.build({
            "contains_pii": True,
            "recipient_type": "other",
        })
        assert attributes.contains_pii is True

    def test_unknown_key_raises(self):
        with pytest.raises(ValueError, match="Unknown disclosure attributes: bogus"):
            DisclosureAttributes.build({"bogus": True, "includes_fti": True})

    def test_bad_legacy_enum_value_raises(self):
        with pytest.raises(ValidationError):
            DisclosureAttributes.build({"recipient_type": "landlord"})
