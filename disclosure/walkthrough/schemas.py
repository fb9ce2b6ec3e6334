"""Pydantic models for walkthrough API requests and responses."""

from pydantic import BaseModel, Field

from disclosure.runtime.trace import Trace, Verdict


class QuestionInfo(BaseModel):
    """A question as presented to the user."""

    id: str
    text: str
    help: str | None = None
    box: str | None = None
    fields: list[str]


class GraphSummaryResponse(BaseModel):
    start: str
    questions: int
    verdicts: int
    max_depth: int = Field(..., description="Questions on the longest path")
    rule_ids: list[str]
    nodes: list[QuestionInfo] = Field(default_factory=list)


class StepRequest(BaseModel):
    """Answers given so far, in order (true = yes)."""

    answers: list[bool] = Field(default_factory=list)


class StepResponse(BaseModel):
    complete: bool
    answered: int
    path: list[str]
    pending: QuestionInfo | None = None
    trace: Trace | None = None
    unused_answers: int = 0


class CompactRequest(BaseModel):
    compact: str = Field(..., description="y/n answers with an optional trailing p or d")


class CompactResponse(BaseModel):
    compact: str
    rule_id: str
    verdict: Verdict
    trace: Trace
    engine_rule_id: str
    agrees: bool
    assertion: Verdict | None = None
    passed: bool | None = None
    provided: int
    consumed: int
    excess: int
    warnings: list[str] = Field(default_factory=list)
