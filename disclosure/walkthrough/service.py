"""
Walkthrough service - steps through the question graph one answer at a time.

A walkthrough owns its own state (current node, answer accumulator and the
path of answered questions) and pulls answers from an injected source.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterable, Optional

from pydantic import BaseModel

from disclosure.core.ontology.attributes import AttributeName, DisclosureAttributes
from disclosure.runtime.trace import EvaluatorKind, Trace

from .graph import QuestionGraph, QuestionNode, VerdictNode

logger = logging.getLogger(__name__)


class Answer(str, Enum):
    YES = "yes"
    NO = "no"
    QUIT = "quit"

    @classmethod
    def parse(cls, value: Answer | bool | str) -> Answer:
        """Accept an Answer, a bool, or y/yes/n/no/q/quit (any case)."""
        if isinstance(value, Answer):
            return value
        if isinstance(value, bool):
            return cls.YES if value else cls.NO
        text = str(value).strip().lower()
        for answer in cls:
            if text in (answer.value, answer.value[0]):
                return answer
        raise ValueError(f"Not a yes/no answer: {value!r}")


# Called with the question being asked; returns None once it has no more answers.
AnswerSource = Callable[[QuestionNode], Optional[Answer]]


class AnswersExhausted(Exception):
    """The answer source ran out before a verdict was reached."""

    def __init__(self, answered: int, node_id: str):
        self.answered = answered
        self.node_id = node_id
        super().__init__(f"Answers ran out at {node_id} after {answered} question(s)")


class WalkthroughCancelled(Exception):
    """The answer source asked to stop the walkthrough."""

    def __init__(self, answered: int, node_id: str):
        self.answered = answered
        self.node_id = node_id
        super().__init__(f"Walkthrough cancelled at {node_id} after {answered} question(s)")


class ScriptedAnswers:
    """Answer source that replays a fixed sequence of answers."""

    def __init__(self, answers: Iterable[Answer | bool | str]):
        self._answers = [Answer.parse(a) for a in answers]
        self.consumed = 0

    def __call__(self, question: QuestionNode) -> Answer | None:
        if self.consumed >= len(self._answers):
            return None
        answer = self._answers[self.consumed]
        self.consumed += 1
        return answer

    @property
    def provided(self) -> int:
        return len(self._answers)

    @property
    def remaining(self) -> int:
        return len(self._answers) - self.consumed


class WalkthroughStep(BaseModel):
    """Where a partially answered walkthrough stands."""

    answered: int
    path: list[str]
    pending: QuestionNode | None = None
    trace: Trace | None = None
    unused_answers: int = 0

    @property
    def complete(self) -> bool:
        return self.trace is not None


class Walkthrough:
    """Traversal of the question graph driven by an answer source.

    Example:
        walkthrough = Walkthrough(graph, ScriptedAnswers("ynnyy"))
        trace = walkthrough.run()
        walkthrough.to_attributes()  # facts gathered along the way
    """

    def __init__(self, graph: QuestionGraph, answer_source: AnswerSource | None = None):
        self.graph = graph
        self.answer_source = answer_source
        self.current = graph.start
        self.answers: dict[AttributeName, bool] = {}
        self.path: list[str] = []
        self.trace: Trace | None = None

    @property
    def answered(self) -> int:
        return len(self.path)

    @property
    def finished(self) -> bool:
        return self.trace is not None

    def run(self) -> Trace:
        """Ask questions until a verdict node is reached.

        Raises:
            AnswersExhausted: the source returned no answer for a question
            WalkthroughCancelled: the source answered QUIT
            QuestionGraphError: an edge led to an undefined node
        """
        if self.answer_source is None:
            raise ValueError("Walkthrough.run() needs an answer source")

        while True:
            node = self.graph.node(self.current)
            if isinstance(node, VerdictNode):
                return self._finish(node)

            answer = self.answer_source(node)
            if answer is None:
                raise AnswersExhausted(self.answered, node.id)
            self._record(node, answer)

    def advance(self, answers: Iterable[Answer | bool | str]) -> WalkthroughStep:
        """Apply as many of ``answers`` as the graph accepts.

        Stops at the first verdict node (leftover answers are counted, not
        applied) or at the question the answers do not reach.
        """
        source = ScriptedAnswers(answers)
        while True:
            node = self.graph.node(self.current)
            if isinstance(node, VerdictNode):
                trace = self._finish(node)
                return WalkthroughStep(
                    answered=self.answered,
                    path=list(self.path),
                    trace=trace,
                    unused_answers=source.remaining,
                )

            answer = source(node)
            if answer is None:
                return WalkthroughStep(answered=self.answered, path=list(self.path), pending=node)
            self._record(node, answer)

    def to_attributes(self) -> DisclosureAttributes:
        """Attributes from the answers given so far; unanswered facts are False."""
        return DisclosureAttributes.from_answers(self.answers)

    def _record(self, node: QuestionNode, answer: Answer) -> None:
        if answer is Answer.QUIT:
            raise WalkthroughCancelled(self.answered, node.id)

        value = answer is Answer.YES
        self.path.append(node.id)
        for field in node.target_fields:
            self.answers[AttributeName(field)] = value
        self.current = node.next_node(value)

    def _finish(self, node: VerdictNode) -> Trace:
        self.trace = Trace(
            rule_id=node.rule_id,
            verdict=node.result,
            path=list(self.path),
            message=node.message,
            citation=node.citation,
            source=EvaluatorKind.WALKTHROUGH,
        )
        logger.debug("Walkthrough reached %s via %s", node.rule_id, " -> ".join(self.path))
        return self.trace
