"""Legacy disclosure shape and its one-way mapping to normalized attributes.

Older callers describe a disclosure with enumerated recipient, data type,
purpose and legal basis plus a nested consent record. ``map_legacy`` derives
the subset of normalized flags this shape can express. The mapping is
best-effort and not invertible: combinations it does not recognize leave the
corresponding flag False.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .attributes import AttributeName

logger = logging.getLogger(__name__)


class RecipientType(str, Enum):
    STUDENT = "student"
    PARENT_CONTRIBUTOR = "parent_contributor"
    SPOUSE_CONTRIBUTOR = "spouse_contributor"
    SCHOLARSHIP_ORGANIZATION = "scholarship_organization"
    TRIBAL_ORGANIZATION = "tribal_organization"
    SCHOOL_OFFICIAL = "school_official"
    OTHER_SCHOOL = "other_school"
    FEDERAL_REPRESENTATIVE = "federal_representative"
    STATE_LOCAL_AUTHORITY = "state_local_authority"
    RESEARCH_ORGANIZATION = "research_organization"
    ACCREDITING_AGENCY = "accrediting_agency"
    PARENT = "parent"
    OTHER = "other"


class DataType(str, Enum):
    FAFSA_DATA = "fafsa_data"
    DIRECTORY_INFORMATION = "directory_information"
    EDUCATION_RECORD = "education_record"


class Purpose(str, Enum):
    FINANCIAL_AID = "financial_aid"
    RESEARCH_COLLEGE_ATTENDANCE = "research_college_attendance"
    FINANCIAL_AID_RELATED = "financial_aid_related"
    ENROLLMENT_OR_TRANSFER = "enrollment_or_transfer"
    RESEARCH = "research"
    OTHER = "other"


class LegalBasis(str, Enum):
    JUDICIAL_ORDER = "judicial_order"
    SUBPOENA = "subpoena"
    NONE = "none"


class ResearchPurpose(str, Enum):
    PREDICTIVE_TESTS = "predictive_tests"
    STUDENT_AID_PROGRAMS = "student_aid_programs"
    IMPROVE_INSTRUCTION = "improve_instruction"
    OTHER = "other"


class DependencyStatus(str, Enum):
    DEPENDENT = "dependent"
    INDEPENDENT = "independent"


class LegacyConsent(BaseModel):
    """Nested consent record of the legacy shape."""

    hea: bool = False
    ferpa: bool = False
    explicit_written: bool = False


class LegacyDisclosure(BaseModel):
    """Legacy enum-and-nested representation of a disclosure request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    recipient_type: RecipientType | None = None
    data_type: DataType | None = None
    purpose: Purpose | None = None
    legal_basis: LegalBasis | None = None
    consent: LegacyConsent | None = None

    has_educational_interest: bool = False
    research_purpose: ResearchPurpose | None = None
    student_dependency_status: DependencyStatus | None = None

    contains_pii: bool | None = Field(None, description="Copied through when present")
    other_99_31_exception: bool | None = Field(
        None, description="Maps to otherwise_permitted_under_99_31"
    )


VALID_RESEARCH_PURPOSES = frozenset({
    ResearchPurpose.PREDICTIVE_TESTS,
    ResearchPurpose.STUDENT_AID_PROGRAMS,
    ResearchPurpose.IMPROVE_INSTRUCTION,
})


def map_legacy(legacy: LegacyDisclosure) -> dict[AttributeName, bool]:
    """Derive normalized flags from a legacy record.

    Only flags the legacy record sets are returned; absent keys mean False.
    """
    flags: dict[AttributeName, bool] = {}
    flags.update(_map_recipient(legacy))

    if legacy.data_type == DataType.FAFSA_DATA:
        flags[AttributeName.IS_FAFSA_DATA] = True
    elif legacy.data_type == DataType.DIRECTORY_INFORMATION:
        flags[AttributeName.DIRECTORY_INFO_AND_NOT_OPTED_OUT] = True

    if legacy.purpose == Purpose.FINANCIAL_AID:
        flags[AttributeName.USED_FOR_AID_ADMIN] = True
    elif legacy.purpose == Purpose.RESEARCH_COLLEGE_ATTENDANCE:
        flags[AttributeName.RESEARCH_PROMOTE_ATTENDANCE] = True
    elif legacy.purpose == Purpose.FINANCIAL_AID_RELATED:
        flags[AttributeName.DUE_TO_JUDICIAL_ORDER_OR_SUBPOENA_OR_FINANCIAL_AID] = True

    if legacy.consent:
        if legacy.consent.hea:
            flags[AttributeName.HEA_WRITTEN_CONSENT] = True
        if legacy.consent.ferpa:
            flags[AttributeName.FERPA_WRITTEN_CONSENT] = True
        if legacy.consent.explicit_written:
            flags[AttributeName.EXPLICIT_WRITTEN_CONSENT] = True

    if legacy.legal_basis in (LegalBasis.JUDICIAL_ORDER, LegalBasis.SUBPOENA):
        flags[AttributeName.DUE_TO_JUDICIAL_ORDER_OR_SUBPOENA_OR_FINANCIAL_AID] = True

    if legacy.contains_pii is not None:
        flags[AttributeName.CONTAINS_PII] = legacy.contains_pii
    if legacy.other_99_31_exception is not None:
        flags[AttributeName.OTHERWISE_PERMITTED_UNDER_99_31] = legacy.other_99_31_exception

    return flags


def _map_recipient(legacy: LegacyDisclosure) -> dict[AttributeName, bool]:
    recipient = legacy.recipient_type
    if recipient is None:
        return {}

    if recipient == RecipientType.STUDENT:
        return {AttributeName.DISCLOSURE_TO_STUDENT: True}
    if recipient in (RecipientType.PARENT_CONTRIBUTOR, RecipientType.SPOUSE_CONTRIBUTOR):
        return {AttributeName.DISCLOSURE_TO_CONTRIBUTOR_PARENT_OR_SPOUSE: True}
    if recipient in (RecipientType.SCHOLARSHIP_ORGANIZATION, RecipientType.TRIBAL_ORGANIZATION):
        return {AttributeName.DISCLOSURE_TO_SCHOLARSHIP_ORG: True}
    if recipient in (RecipientType.FEDERAL_REPRESENTATIVE, RecipientType.STATE_LOCAL_AUTHORITY):
        return {AttributeName.TO_AUTHORIZED_REPRESENTATIVES: True}
    if recipient == RecipientType.ACCREDITING_AGENCY:
        return {AttributeName.TO_ACCREDITING_AGENCY: True}

    # Conditional recipients: unmet qualifiers leave the flag unset (fail closed)
    if recipient == RecipientType.SCHOOL_OFFICIAL and legacy.has_educational_interest:
        return {AttributeName.TO_SCHOOL_OFFICIAL_LEGITIMATE_INTEREST: True}
    if recipient == RecipientType.OTHER_SCHOOL and legacy.purpose == Purpose.ENROLLMENT_OR_TRANSFER:
        return {AttributeName.TO_OTHER_SCHOOL_ENROLLMENT_TRANSFER: True}
    if (
        recipient == RecipientType.RESEARCH_ORGANIZATION
        and legacy.research_purpose in VALID_RESEARCH_PURPOSES
    ):
        return {AttributeName.TO_RESEARCH_ORG_FERPA: True}
    if (
        recipient == RecipientType.PARENT
        and legacy.student_dependency_status == DependencyStatus.DEPENDENT
    ):
        return {AttributeName.PARENT_OF_DEPENDENT_STUDENT: True}

    logger.debug("Legacy recipient %s did not map to a normalized attribute", recipient.value)
    return {}
