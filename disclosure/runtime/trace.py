"""
Verdict classification and evaluation traces.

Every evaluator (rule engine, decision tree, walkthrough) returns a Trace:
- which rule fired and its classified verdict
- the ordered path taken to reach it
- the advisory scope/caution notes carried by the rule
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Verdict(str, Enum):
    """Four-valued disclosure classification."""

    PERMIT = "permit"
    PERMIT_WITH_SCOPE = "permit_with_scope"
    PERMIT_WITH_CAUTION = "permit_with_caution"
    DENY = "deny"

    @property
    def is_permit(self) -> bool:
        return self is not Verdict.DENY

    def collapse(self) -> Verdict:
        """Collapse to the binary permit/deny outcome.

        Used wherever a classification is compared to a yes/no expectation
        (compact assertions, scenario checks, equivalence harness).
        """
        return Verdict.PERMIT if self.is_permit else Verdict.DENY


PERMIT_VERDICTS = frozenset(v for v in Verdict if v.is_permit)


class EvaluatorKind(str, Enum):
    """Which encoding of the regulation produced a trace."""

    RULE_ENGINE = "rule_engine"
    DECISION_TREE = "decision_tree"
    WALKTHROUGH = "walkthrough"


class Trace(BaseModel):
    """Result of one evaluation.

    ``path`` holds rule ids for the rule engine, box labels for the
    decision tree and question node ids for the walkthrough.
    """

    model_config = ConfigDict(frozen=True)

    rule_id: str
    """The rule (or verdict node rule id) that fired."""

    verdict: Verdict
    """Classified outcome."""

    path: list[str] = Field(default_factory=list)
    """Identifiers visited, in evaluation order."""

    scope_note: str | None = None
    """Limits on the recipient's use (permit_with_scope)."""

    caution_note: str | None = None
    """Advice to consult counsel (permit_with_caution)."""

    message: str | None = None
    citation: str | None = None
    source: EvaluatorKind | None = None

    @property
    def permitted(self) -> bool:
        return self.verdict.is_permit

    @property
    def denied(self) -> bool:
        return self.verdict is Verdict.DENY

    @property
    def outcome(self) -> Verdict:
        """Binary permit/deny outcome of this trace."""
        return self.verdict.collapse()
