"""Routes for disclosure decisions and rule inspection."""

import logging

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from disclosure.core.ontology import DisclosureAttributes
from disclosure.core.registry import get_decision_tree, get_engine, get_rule_table

from .schemas import (
    DecideRequest,
    DecideResponse,
    RuleDetailResponse,
    RuleInfo,
    RulesListResponse,
)
from .service import Rule

logger = logging.getLogger(__name__)

decide_router = APIRouter(prefix="/decide", tags=["Decisions"])
rules_router = APIRouter(prefix="/rules", tags=["Rules"])


def _rule_info(rule: Rule, position: int) -> dict:
    return {
        "rule_id": rule.id,
        "position": position,
        "when_all": list(rule.when_all),
        "result": rule.result,
        "description": rule.description,
        "citation": rule.citation,
    }


@decide_router.post("", response_model=DecideResponse)
async def decide(request: DecideRequest) -> DecideResponse:
    """Evaluate a disclosure request with the rule engine.

    The decision tree evaluates the same attributes; ``agrees`` reports
    whether both fired the same rule.
    """
    try:
        attributes = DisclosureAttributes.build(request.attributes)
    except (ValidationError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    trace = get_engine().evaluate(attributes)
    tree_trace = get_decision_tree().evaluate(attributes)
    agrees = trace.rule_id == tree_trace.rule_id
    if not agrees:
        logger.warning(
            "Decision tree returned %s but RuleEngine returned %s for %s",
            tree_trace.rule_id, trace.rule_id, attributes.true_names(),
        )

    return DecideResponse(
        verdict=trace.verdict,
        outcome=trace.outcome,
        permitted=trace.permitted,
        rule_id=trace.rule_id,
        trace=trace,
        decision_tree=tree_trace,
        agrees=agrees,
        attributes=attributes.true_names(),
    )


@rules_router.get("", response_model=RulesListResponse)
async def list_rules() -> RulesListResponse:
    """List the rule table in evaluation order."""
    table = get_rule_table()
    rules = [RuleInfo(**_rule_info(rule, i)) for i, rule in enumerate(table.rules, start=1)]
    return RulesListResponse(rules=rules, total=len(rules), source_path=table.source_path)


@rules_router.get("/{rule_id}", response_model=RuleDetailResponse)
async def get_rule(rule_id: str) -> RuleDetailResponse:
    """Get detailed information about a specific rule."""
    table = get_rule_table()
    rule = table.get_rule(rule_id)
    if rule is None:
        raise HTTPException(status_code=404, detail=f"Rule not found: {rule_id}")

    return RuleDetailResponse(
        **_rule_info(rule, table.rule_ids.index(rule_id) + 1),
        scope_note=rule.scope_note,
        caution_note=rule.caution_note,
        unknown_attributes=rule.unknown_attributes(),
    )
