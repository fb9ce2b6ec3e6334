"""Walkthrough package - question graph traversal and the compact evaluator."""

from .compact import (
    CompactEvaluator,
    CompactInput,
    CompactInputError,
    CompactResult,
    TooFewAnswersError,
    parse_compact,
)
from .graph import (
    QuestionGraph,
    QuestionGraphError,
    QuestionNode,
    VerdictNode,
    load_question_graph,
)
from .service import (
    Answer,
    AnswersExhausted,
    ScriptedAnswers,
    Walkthrough,
    WalkthroughCancelled,
    WalkthroughStep,
)

__all__ = [
    # Graph
    "QuestionGraph",
    "QuestionGraphError",
    "QuestionNode",
    "VerdictNode",
    "load_question_graph",
    # Traversal
    "Answer",
    "AnswersExhausted",
    "ScriptedAnswers",
    "Walkthrough",
    "WalkthroughCancelled",
    "WalkthroughStep",
    # Compact strings
    "CompactEvaluator",
    "CompactInput",
    "CompactInputError",
    "CompactResult",
    "TooFewAnswersError",
    "parse_compact",
]
