"""
Compact evaluator - run the walkthrough from a string of y/n answers.

Each ``y``/``n`` answers the next question in order. An optional trailing
``p`` (permit) or ``d`` (deny) asserts the expected outcome, compared after
collapsing the verdict to permit/deny. Input is case-insensitive.

    "ynnyp"  ->  permit via FTI_R3_scholarship_with_consent, assertion passes
    "yy"     ->  permit via FTI_R1_student, no assertion
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from disclosure.rules.service import RuleEngine
from disclosure.runtime.trace import Trace, Verdict

from .graph import QuestionGraph
from .service import AnswersExhausted, ScriptedAnswers, Walkthrough

logger = logging.getLogger(__name__)

ANSWER_CHARS = {"y": True, "n": False}
ASSERTION_CHARS = {"p": Verdict.PERMIT, "d": Verdict.DENY}


class CompactInputError(ValueError):
    """The compact string is malformed."""

    pass


class TooFewAnswersError(Exception):
    """The compact string ran out of answers before reaching a verdict."""

    def __init__(self, compact: str, answered: int):
        self.compact = compact
        self.answered = answered
        super().__init__(
            f"Too few answers: {compact!r} answered {answered} question(s) "
            "without reaching a result"
        )


class CompactInput(BaseModel):
    """Parsed compact string."""

    compact: str
    answers: list[bool] = Field(default_factory=list)
    assertion: Verdict | None = None


class CompactResult(BaseModel):
    compact: str
    trace: Trace
    engine_trace: Trace
    assertion: Verdict | None = None
    passed: bool | None = None
    provided: int
    consumed: int
    excess: int = 0
    warnings: list[str] = Field(default_factory=list)

    @property
    def agrees(self) -> bool:
        """True when the walkthrough and the rule engine fired the same rule."""
        return self.trace.rule_id == self.engine_trace.rule_id


def parse_compact(compact: str | None) -> CompactInput:
    """Split a compact string into answers and an optional assertion.

    Raises:
        CompactInputError: empty input, characters outside y/n/p/d,
            anything after the assertion, or nothing to evaluate
    """
    if not compact:
        raise CompactInputError("Input string cannot be empty")

    chars = list(compact.lower())
    invalid = [c for c in chars if c not in ANSWER_CHARS and c not in ASSERTION_CHARS]
    if invalid:
        raise CompactInputError(f"Invalid characters: {', '.join(invalid)}")

    answers: list[bool] = []
    assertion: Verdict | None = None
    for c in chars:
        if assertion is not None:
            raise CompactInputError(f"Unexpected character '{c}' after assertion")
        if c in ASSERTION_CHARS:
            assertion = ASSERTION_CHARS[c]
        else:
            answers.append(ANSWER_CHARS[c])

    if not answers and assertion is None:
        raise CompactInputError("No y/n answers provided")

    return CompactInput(compact=compact, answers=answers, assertion=assertion)


class CompactEvaluator:
    """Drives the walkthrough from compact strings and cross-checks the rule engine."""

    def __init__(self, graph: QuestionGraph, engine: RuleEngine):
        self.graph = graph
        self.engine = engine

    def evaluate(self, compact: str | None) -> CompactResult:
        parsed = parse_compact(compact)
        source = ScriptedAnswers(parsed.answers)
        walkthrough = Walkthrough(self.graph, source)

        try:
            trace = walkthrough.run()
        except AnswersExhausted as e:
            raise TooFewAnswersError(parsed.compact, e.answered) from e

        engine_trace = self.engine.evaluate(walkthrough.to_attributes())
        warnings: list[str] = []

        if engine_trace.rule_id != trace.rule_id:
            message = (
                f"DAG returned {trace.rule_id} but RuleEngine returned {engine_trace.rule_id}"
            )
            logger.warning("%s (compact %r)", message, parsed.compact)
            warnings.append(message)

        excess = source.remaining
        if excess:
            message = (
                f"{excess} excess answer(s) ignored "
                f"({source.provided} provided, {source.consumed} consumed)"
            )
            logger.warning("%s (compact %r)", message, parsed.compact)
            warnings.append(message)

        passed = None
        if parsed.assertion is not None:
            passed = trace.verdict.collapse() == parsed.assertion

        return CompactResult(
            compact=parsed.compact,
            trace=trace,
            engine_trace=engine_trace,
            assertion=parsed.assertion,
            passed=passed,
            provided=source.provided,
            consumed=source.consumed,
            excess=excess,
            warnings=warnings,
        )
