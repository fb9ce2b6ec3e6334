"""Disclosure attributes - the boolean facts describing one disclosure request.

The attribute names form a closed set shared by the rule table, the
decision tree and the question graph. Adding a regulatory exception means
extending all three together with ``AttributeName``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict


class AttributeName(str, Enum):
    """Recognized disclosure attribute names."""

    INCLUDES_FTI = "includes_fti"
    DISCLOSURE_TO_STUDENT = "disclosure_to_student"
    DISCLOSURE_TO_CONTRIBUTOR_PARENT_OR_SPOUSE = "disclosure_to_contributor_parent_or_spouse"
    IS_FAFSA_DATA = "is_fafsa_data"
    USED_FOR_AID_ADMIN = "used_for_aid_admin"
    DISCLOSURE_TO_SCHOLARSHIP_ORG = "disclosure_to_scholarship_org"
    EXPLICIT_WRITTEN_CONSENT = "explicit_written_consent"
    RESEARCH_PROMOTE_ATTENDANCE = "research_promote_attendance"
    HEA_WRITTEN_CONSENT = "hea_written_consent"
    FERPA_WRITTEN_CONSENT = "ferpa_written_consent"
    DIRECTORY_INFO_AND_NOT_OPTED_OUT = "directory_info_and_not_opted_out"
    TO_SCHOOL_OFFICIAL_LEGITIMATE_INTEREST = "to_school_official_legitimate_interest"
    DUE_TO_JUDICIAL_ORDER_OR_SUBPOENA_OR_FINANCIAL_AID = (
        "due_to_judicial_order_or_subpoena_or_financial_aid"
    )
    TO_OTHER_SCHOOL_ENROLLMENT_TRANSFER = "to_other_school_enrollment_transfer"
    TO_AUTHORIZED_REPRESENTATIVES = "to_authorized_representatives"
    TO_RESEARCH_ORG_FERPA = "to_research_org_ferpa"
    TO_ACCREDITING_AGENCY = "to_accrediting_agency"
    PARENT_OF_DEPENDENT_STUDENT = "parent_of_dependent_student"
    OTHERWISE_PERMITTED_UNDER_99_31 = "otherwise_permitted_under_99_31"
    CONTAINS_PII = "contains_pii"

    @classmethod
    def lookup(cls, name: AttributeName | str) -> AttributeName | None:
        """Resolve a name to a member, or None when it is not recognized."""
        try:
            return cls(name)
        except ValueError:
            return None


# FERPA 34 CFR 99.31 exceptions, Boxes 11-19 in published order.
FERPA_EXCEPTION_ATTRIBUTES: tuple[AttributeName, ...] = (
    AttributeName.DIRECTORY_INFO_AND_NOT_OPTED_OUT,
    AttributeName.TO_SCHOOL_OFFICIAL_LEGITIMATE_INTEREST,
    AttributeName.DUE_TO_JUDICIAL_ORDER_OR_SUBPOENA_OR_FINANCIAL_AID,
    AttributeName.TO_OTHER_SCHOOL_ENROLLMENT_TRANSFER,
    AttributeName.TO_AUTHORIZED_REPRESENTATIVES,
    AttributeName.TO_RESEARCH_ORG_FERPA,
    AttributeName.TO_ACCREDITING_AGENCY,
    AttributeName.PARENT_OF_DEPENDENT_STUDENT,
    AttributeName.OTHERWISE_PERMITTED_UNDER_99_31,
)


class DisclosureAttributes(BaseModel):
    """Immutable record of the facts about one disclosure request.

    Every attribute defaults to False. Construct once per request (or once
    per walkthrough session from the accumulated answers) and read only.

    Example:
        {
            "includes_fti": true,
            "disclosure_to_student": true
        }
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Top-level branch
    includes_fti: bool = False
    disclosure_to_student: bool = False

    # FAFSA (HEA 483(a)(3)(E)) attributes
    disclosure_to_contributor_parent_or_spouse: bool = False
    is_fafsa_data: bool = False
    used_for_aid_admin: bool = False
    disclosure_to_scholarship_org: bool = False
    explicit_written_consent: bool = False
    research_promote_attendance: bool = False
    hea_written_consent: bool = False
    contains_pii: bool = False

    # FERPA consent and 99.31 exceptions
    ferpa_written_consent: bool = False
    directory_info_and_not_opted_out: bool = False
    to_school_official_legitimate_interest: bool = False
    due_to_judicial_order_or_subpoena_or_financial_aid: bool = False
    to_other_school_enrollment_transfer: bool = False
    to_authorized_representatives: bool = False
    to_research_org_ferpa: bool = False
    to_accrediting_agency: bool = False
    parent_of_dependent_student: bool = False
    otherwise_permitted_under_99_31: bool = False

    def get(self, name: AttributeName | str) -> bool:
        """Look up an attribute by name.

        Unrecognized names resolve to False instead of raising, so a
        partially populated or misspelled lookup biases toward denial.
        """
        key = AttributeName.lookup(name)
        if key is None:
            return False
        return getattr(self, key.value)

    def __getitem__(self, name: AttributeName | str) -> bool:
        return self.get(name)

    def true_names(self) -> list[str]:
        """Names of the attributes set to True, in declaration order."""
        return [name.value for name in AttributeName if getattr(self, name.value)]

    def to_dict(self) -> dict[str, bool]:
        return {name.value: getattr(self, name.value) for name in AttributeName}

    @classmethod
    def from_answers(
        cls, answers: Mapping[AttributeName | str, bool]
    ) -> DisclosureAttributes:
        """Build attributes from a walkthrough answer accumulator."""
        return cls(**{AttributeName(name).value: value for name, value in answers.items()})

    @classmethod
    def from_legacy(cls, legacy: Any) -> DisclosureAttributes:
        """Derive normalized attributes from a legacy-shaped record or mapping."""
        from .legacy import LegacyDisclosure, map_legacy

        if not isinstance(legacy, LegacyDisclosure):
            legacy = LegacyDisclosure.model_validate(legacy)
        return cls(**{name.value: value for name, value in map_legacy(legacy).items()})

    @classmethod
    def build(cls, data: Mapping[str, Any] | None = None) -> DisclosureAttributes:
        """Build attributes from a mapping mixing normalized and legacy keys.

        Normalized keys are taken as given; flags derived from legacy keys
        are OR-ed on top. Keys that are neither raise ValueError.
        """
        from .legacy import LegacyDisclosure, map_legacy

        data = dict(data or {})
        normalized: dict[str, bool] = {}
        legacy: dict[str, Any] = {}
        unknown: list[str] = []

        for key, value in data.items():
            if AttributeName.lookup(key) is not None:
                normalized[key] = value
            elif key in LegacyDisclosure.model_fields:
                legacy[key] = value
            else:
                unknown.append(key)

        if unknown:
            raise ValueError(f"Unknown disclosure attributes: {', '.join(sorted(unknown))}")

        base = cls(**normalized)
        if not legacy:
            return base

        derived = map_legacy(LegacyDisclosure.model_validate(legacy))
        merged = base.to_dict()
        for name, value in derived.items():
            merged[name.value] = merged[name.value] or value
        return cls(**merged)
