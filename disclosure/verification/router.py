"""Cross-verification API endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

from disclosure.core.registry import get_question_graph, get_rule_table, get_scenario_library

from .service import CheckResult, VerificationEngine

router = APIRouter(prefix="/verification", tags=["Verification"])


class VerificationResponse(BaseModel):
    passed: bool
    summary: dict
    checks: list[CheckResult]


@router.get("", response_model=VerificationResponse)
def run_verification(exhaustive: bool = True) -> VerificationResponse:
    """Cross-check the rule engine, decision tree, question graph and scenarios.

    ``exhaustive=false`` skips the full tree/engine enumeration.
    """
    engine = VerificationEngine(get_rule_table(), get_question_graph(), get_scenario_library())
    report = engine.run(exhaustive=exhaustive)
    return VerificationResponse(passed=report.passed, summary=report.summary(), checks=report.checks)
