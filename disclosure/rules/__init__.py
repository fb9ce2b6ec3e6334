"""Rules package - the ordered rule table, its engine and the decision tree."""

from .decision_tree import DecisionTree
from .service import (
    Condition,
    Rule,
    RuleEngine,
    RuleLoader,
    RuleTable,
    RuleTableError,
)

__all__ = [
    "Condition",
    "DecisionTree",
    "Rule",
    "RuleEngine",
    "RuleLoader",
    "RuleTable",
    "RuleTableError",
]
