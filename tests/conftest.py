"""Pytest fixtures for test suite."""

import pytest
from pathlib import Path

from disclosure.core.ontology import DisclosureAttributes, ScenarioLibrary
from disclosure.rules import DecisionTree, RuleEngine, RuleLoader, RuleTable
from disclosure.walkthrough import (
    CompactEvaluator,
    QuestionGraph,
    ScriptedAnswers,
    Walkthrough,
    load_question_graph,
)


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def data_dir() -> Path:
    """Path to the packaged regulation data."""
    return Path(__file__).parent.parent / "disclosure" / "data"


@pytest.fixture(scope="session")
def rule_table(data_dir: Path) -> RuleTable:
    return RuleLoader().load_file(data_dir / "disclosure_rules.yaml")


@pytest.fixture(scope="session")
def engine(rule_table: RuleTable) -> RuleEngine:
    return RuleEngine(rule_table)


@pytest.fixture(scope="session")
def tree() -> DecisionTree:
    return DecisionTree()


@pytest.fixture(scope="session")
def question_graph(data_dir: Path) -> QuestionGraph:
    return load_question_graph(data_dir / "disclosure_questions.yaml")


@pytest.fixture(scope="session")
def scenario_library(data_dir: Path) -> ScenarioLibrary:
    return ScenarioLibrary.load_file(data_dir / "disclosure_scenarios.yaml")


@pytest.fixture(scope="session")
def compact(question_graph: QuestionGraph, engine: RuleEngine) -> CompactEvaluator:
    return CompactEvaluator(question_graph, engine)


@pytest.fixture
def walk(question_graph: QuestionGraph):
    """Run a walkthrough over a y/n string; returns the finished walkthrough."""

    def _walk(answers: str) -> Walkthrough:
        walkthrough = Walkthrough(question_graph, ScriptedAnswers(answers))
        walkthrough.run()
        return walkthrough

    return _walk


@pytest.fixture
def attrs():
    """Build DisclosureAttributes with the named flags set to True."""

    def _attrs(*names: str, **values: bool) -> DisclosureAttributes:
        return DisclosureAttributes(**{name: True for name in names}, **values)

    return _attrs


# =============================================================================
# Rule Table Documents
# =============================================================================


@pytest.fixture
def minimal_rules() -> dict:
    """Smallest valid rule table: one catch-all per branch."""
    return {
        "rules": [
            {"id": "FTI_DENY", "when_all": ["includes_fti"], "result": "deny"},
            {"id": "STUDENT", "when_all": ["!includes_fti", "disclosure_to_student"], "result": "permit"},
            {"id": "NONFTI_DENY", "when_all": ["!includes_fti"], "result": "deny"},
        ]
    }
