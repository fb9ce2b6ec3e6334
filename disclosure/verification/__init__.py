"""Cross-verification of the rule engine, decision tree and question graph."""

from .service import (
    CORE_ATTRIBUTES,
    INDEPENDENT_ATTRIBUTES,
    CheckResult,
    Disagreement,
    VerificationEngine,
    VerificationReport,
    combination_count,
    iter_combinations,
)

__all__ = [
    "CORE_ATTRIBUTES",
    "INDEPENDENT_ATTRIBUTES",
    "CheckResult",
    "Disagreement",
    "VerificationEngine",
    "VerificationReport",
    "combination_count",
    "iter_combinations",
]
