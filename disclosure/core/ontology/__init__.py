"""Disclosure ontology: attributes, the legacy adapter and scenarios."""

from .attributes import (
    AttributeName,
    DisclosureAttributes,
    FERPA_EXCEPTION_ATTRIBUTES,
)
from .legacy import (
    DataType,
    DependencyStatus,
    LegacyConsent,
    LegacyDisclosure,
    LegalBasis,
    Purpose,
    RecipientType,
    ResearchPurpose,
    map_legacy,
)
from .scenario import ExpectedOutcome, Scenario, ScenarioLibrary, ScenarioLibraryError

__all__ = [
    # Attributes
    "AttributeName",
    "DisclosureAttributes",
    "FERPA_EXCEPTION_ATTRIBUTES",
    # Legacy shape
    "DataType",
    "DependencyStatus",
    "LegacyConsent",
    "LegacyDisclosure",
    "LegalBasis",
    "Purpose",
    "RecipientType",
    "ResearchPurpose",
    "map_legacy",
    # Scenarios
    "ExpectedOutcome",
    "Scenario",
    "ScenarioLibrary",
    "ScenarioLibraryError",
]
