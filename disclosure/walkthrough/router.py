"""Walkthrough API endpoints."""

from fastapi import APIRouter, HTTPException

from disclosure.core.registry import get_compact_evaluator, get_question_graph

from .compact import CompactInputError, TooFewAnswersError
from .graph import QuestionNode
from .schemas import (
    CompactRequest,
    CompactResponse,
    GraphSummaryResponse,
    QuestionInfo,
    StepRequest,
    StepResponse,
)
from .service import Walkthrough

router = APIRouter(prefix="/walkthrough", tags=["Walkthrough"])


def _question_info(node: QuestionNode) -> QuestionInfo:
    return QuestionInfo(
        id=node.id,
        text=node.text,
        help=node.help,
        box=node.box,
        fields=list(node.target_fields),
    )


@router.get("/graph", response_model=GraphSummaryResponse)
async def graph_summary() -> GraphSummaryResponse:
    """Summarize the question graph and list its questions."""
    graph = get_question_graph()
    return GraphSummaryResponse(
        **graph.summary(),
        nodes=[_question_info(q) for q in graph.questions],
    )


@router.post("/step", response_model=StepResponse)
async def step(request: StepRequest) -> StepResponse:
    """Replay the answers given so far.

    Returns the next question to ask, or the verdict once one is reached.
    """
    walkthrough = Walkthrough(get_question_graph())
    result = walkthrough.advance(request.answers)
    return StepResponse(
        complete=result.complete,
        answered=result.answered,
        path=result.path,
        pending=_question_info(result.pending) if result.pending else None,
        trace=result.trace,
        unused_answers=result.unused_answers,
    )


@router.post("/compact", response_model=CompactResponse)
async def evaluate_compact(request: CompactRequest) -> CompactResponse:
    """Evaluate a compact y/n string (e.g. ``ynnyp``)."""
    try:
        result = get_compact_evaluator().evaluate(request.compact)
    except (CompactInputError, TooFewAnswersError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    return CompactResponse(
        compact=result.compact,
        rule_id=result.trace.rule_id,
        verdict=result.trace.verdict,
        trace=result.trace,
        engine_rule_id=result.engine_trace.rule_id,
        agrees=result.agrees,
        assertion=result.assertion,
        passed=result.passed,
        provided=result.provided,
        consumed=result.consumed,
        excess=result.excess,
        warnings=result.warnings,
    )
