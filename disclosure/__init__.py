"""Disclosure Decision Workbench - FERPA, FAFSA and FTI disclosure decisions.

Three independent encodings of the same regulation (an ordered rule table,
a hand-written decision tree and a question graph) share one attribute
model and one trace type, and are cross-verified against each other.
"""

# Attributes and scenarios
from .core.ontology import (
    AttributeName,
    DisclosureAttributes,
    LegacyDisclosure,
    Scenario,
    ScenarioLibrary,
)

# Evaluation results
from .runtime import EvaluatorKind, Trace, Verdict

# Rules and decision tree
from .rules import DecisionTree, RuleEngine, RuleLoader, RuleTable

# Walkthrough
from .walkthrough import CompactEvaluator, QuestionGraph, Walkthrough, load_question_graph

# Verification
from .verification import VerificationEngine

__version__ = "0.1.0"

__all__ = [
    # Ontology
    "AttributeName",
    "DisclosureAttributes",
    "LegacyDisclosure",
    "Scenario",
    "ScenarioLibrary",
    # Results
    "EvaluatorKind",
    "Trace",
    "Verdict",
    # Rules
    "DecisionTree",
    "RuleEngine",
    "RuleLoader",
    "RuleTable",
    # Walkthrough
    "CompactEvaluator",
    "QuestionGraph",
    "Walkthrough",
    "load_question_graph",
    # Verification
    "VerificationEngine",
]
