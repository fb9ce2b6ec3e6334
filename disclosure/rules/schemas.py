"""Pydantic models for rules domain API requests and responses."""

from typing import Any

from pydantic import BaseModel, Field

from disclosure.runtime.trace import Trace, Verdict


# =============================================================================
# Decision Models
# =============================================================================


class DecideRequest(BaseModel):
    """Request for a disclosure decision.

    ``attributes`` may mix normalized attribute names with legacy keys
    (recipient_type, data_type, purpose, legal_basis, consent, ...).
    """

    attributes: dict[str, Any] = Field(default_factory=dict)


class DecideResponse(BaseModel):
    """Rule engine decision cross-checked against the decision tree."""

    verdict: Verdict
    outcome: Verdict = Field(..., description="Verdict collapsed to permit/deny")
    permitted: bool
    rule_id: str
    trace: Trace
    decision_tree: Trace
    agrees: bool = Field(..., description="Rule engine and decision tree fired the same rule")
    attributes: list[str] = Field(default_factory=list, description="Attributes set to True")


# =============================================================================
# Rule Inspection Models
# =============================================================================


class RuleInfo(BaseModel):
    """Summary of a rule."""

    rule_id: str
    position: int = Field(..., description="1-based evaluation order")
    when_all: list[str]
    result: Verdict
    description: str | None = None
    citation: str | None = None


class RulesListResponse(BaseModel):
    rules: list[RuleInfo]
    total: int
    source_path: str | None = None


class RuleDetailResponse(RuleInfo):
    scope_note: str | None = None
    caution_note: str | None = None
    unknown_attributes: list[str] = Field(default_factory=list)
