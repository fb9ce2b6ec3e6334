"""Process-wide lazy loaders for the regulation data.

Evaluators never reach for these; they take their table / graph / library
as constructor arguments. Only the HTTP layer resolves them here.
"""

from functools import lru_cache

from disclosure.core.config import get_settings
from disclosure.core.ontology.scenario import ScenarioLibrary
from disclosure.rules.decision_tree import DecisionTree
from disclosure.rules.service import RuleEngine, RuleLoader, RuleTable
from disclosure.walkthrough.compact import CompactEvaluator
from disclosure.walkthrough.graph import QuestionGraph, load_question_graph


@lru_cache
def get_rule_table() -> RuleTable:
    settings = get_settings()
    loader = RuleLoader(strict_attribute_names=settings.strict_attribute_names)
    return loader.load_file(settings.rules_path)


@lru_cache
def get_question_graph() -> QuestionGraph:
    return load_question_graph(get_settings().questions_path)


@lru_cache
def get_scenario_library() -> ScenarioLibrary:
    return ScenarioLibrary.load_file(get_settings().scenarios_path)


@lru_cache
def get_engine() -> RuleEngine:
    return RuleEngine(get_rule_table())


@lru_cache
def get_decision_tree() -> DecisionTree:
    return DecisionTree()


@lru_cache
def get_compact_evaluator() -> CompactEvaluator:
    return CompactEvaluator(get_question_graph(), get_engine())


def reset() -> None:
    """Drop every cached object (settings included) so the next call reloads."""
    for loader in (
        get_rule_table,
        get_question_graph,
        get_scenario_library,
        get_engine,
        get_decision_tree,
        get_compact_evaluator,
        get_settings,
    ):
        loader.cache_clear()
