"""
Question graph for the disclosure walkthrough.

The graph is a DAG of yes/no questions ending in verdict nodes. It is loaded
from YAML and validated once on construction:

- the start node exists and every edge points at a defined node
- every node is reachable from the start
- the graph is acyclic
- every question records its answer on at least one known attribute
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, Literal, Union

import networkx as nx
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from disclosure.core.errors import ConfigurationError
from disclosure.core.ontology.attributes import AttributeName
from disclosure.runtime.trace import Verdict

logger = logging.getLogger(__name__)


class QuestionGraphError(ConfigurationError):
    """Raised when the question graph is malformed or references a missing node."""

    pass


# =============================================================================
# Node Models
# =============================================================================


class QuestionNode(BaseModel):
    """A yes/no question. The answer is recorded on every target field."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: Literal["question"] = "question"
    text: str
    help: str | None = None
    box: str | None = Field(None, description="Flowchart box label")
    field: str | None = None
    fields: list[str] | None = None
    on_yes: str
    on_no: str

    @property
    def target_fields(self) -> tuple[str, ...]:
        if self.fields:
            return tuple(self.fields)
        if self.field:
            return (self.field,)
        return ()

    def next_node(self, answer: bool) -> str:
        return self.on_yes if answer else self.on_no


class VerdictNode(BaseModel):
    """A terminal node naming the rule the walkthrough reached."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: Literal["result"] = "result"
    rule_id: str
    result: Verdict
    message: str | None = None
    citation: str | None = None


GraphNode = Union[QuestionNode, VerdictNode]


# =============================================================================
# Graph
# =============================================================================


class QuestionGraph:
    """Validated, immutable question DAG."""

    def __init__(
        self,
        start: str,
        nodes: dict[str, GraphNode],
        source_path: str | None = None,
    ):
        self.start = start
        self._nodes = dict(nodes)
        self.source_path = source_path
        self._digraph = self._build_digraph()
        self._validate()

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    @property
    def nodes(self) -> dict[str, GraphNode]:
        return dict(self._nodes)

    def get(self, node_id: str) -> GraphNode | None:
        return self._nodes.get(node_id)

    def node(self, node_id: str) -> GraphNode:
        """Return a node, raising QuestionGraphError if it is not defined."""
        try:
            return self._nodes[node_id]
        except KeyError:
            raise QuestionGraphError(f"Unknown node: {node_id}") from None

    @property
    def questions(self) -> list[QuestionNode]:
        return [n for n in self._nodes.values() if isinstance(n, QuestionNode)]

    @property
    def verdicts(self) -> list[VerdictNode]:
        return [n for n in self._nodes.values() if isinstance(n, VerdictNode)]

    @property
    def rule_ids(self) -> set[str]:
        return {n.rule_id for n in self.verdicts}

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------

    def answers_along(self, node_path: list[str]) -> list[bool]:
        """Translate a node path into the answers that traverse it."""
        answers = []
        for current, following in zip(node_path, node_path[1:]):
            answers.append(self._digraph.edges[current, following]["answer"])
        return answers

    def canonical_paths(self) -> dict[str, list[bool]]:
        """Shortest answer sequence reaching each verdict node, keyed by node id."""
        paths = {}
        for verdict in self.verdicts:
            node_path = nx.shortest_path(self._digraph, self.start, verdict.id)
            paths[verdict.id] = self.answers_along(node_path)
        return paths

    def iter_paths(self) -> Iterator[tuple[VerdictNode, list[bool]]]:
        """Every simple start-to-verdict path as (verdict node, answers)."""
        for verdict in self.verdicts:
            for node_path in nx.all_simple_paths(self._digraph, self.start, verdict.id):
                yield verdict, self.answers_along(node_path)

    def longest_path(self) -> list[str]:
        """Question ids on the longest start-to-verdict path."""
        node_path = nx.dag_longest_path(self._digraph)
        return [n for n in node_path if isinstance(self._nodes[n], QuestionNode)]

    def summary(self) -> dict[str, Any]:
        return {
            "start": self.start,
            "questions": len(self.questions),
            "verdicts": len(self.verdicts),
            "max_depth": len(self.longest_path()),
            "rule_ids": sorted(self.rule_ids),
        }

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def _build_digraph(self) -> nx.DiGraph:
        graph = nx.DiGraph()
        for node_id, node in self._nodes.items():
            graph.add_node(node_id, type=node.type)

        for node_id, node in self._nodes.items():
            if not isinstance(node, QuestionNode):
                continue
            for answer, target in ((True, node.on_yes), (False, node.on_no)):
                if target not in self._nodes:
                    raise QuestionGraphError(
                        f"Node {node_id} points at undefined node {target} (on_{'yes' if answer else 'no'})"
                    )
                graph.add_edge(node_id, target, answer=answer)
        return graph

    def _validate(self) -> None:
        if self.start not in self._nodes:
            raise QuestionGraphError(f"Start node {self.start} is not defined")

        if not nx.is_directed_acyclic_graph(self._digraph):
            cycle = nx.find_cycle(self._digraph)
            raise QuestionGraphError(
                "Question graph contains a cycle: " + " -> ".join(edge[0] for edge in cycle)
            )

        reachable = nx.descendants(self._digraph, self.start) | {self.start}
        orphans = sorted(set(self._nodes) - reachable)
        if orphans:
            raise QuestionGraphError(f"Nodes unreachable from {self.start}: {', '.join(orphans)}")

        for question in self.questions:
            fields = question.target_fields
            if not fields:
                raise QuestionGraphError(f"Question {question.id} declares no field")
            unknown = [f for f in fields if AttributeName.lookup(f) is None]
            if unknown:
                raise QuestionGraphError(
                    f"Question {question.id} references unknown attributes: {', '.join(unknown)}"
                )

    @classmethod
    def parse(cls, content: Any, source_path: str | None = None) -> QuestionGraph:
        """Build a graph from a loaded document ({start, nodes: {id: {...}}})."""
        if not isinstance(content, dict) or not isinstance(content.get("nodes"), dict):
            raise QuestionGraphError("Question graph must be a mapping with a 'nodes' mapping")
        start = content.get("start")
        if not start:
            raise QuestionGraphError("Question graph does not declare a start node")

        nodes: dict[str, GraphNode] = {}
        for node_id, data in content["nodes"].items():
            nodes[node_id] = _parse_node(node_id, data)
        return cls(start=start, nodes=nodes, source_path=source_path)


def _parse_node(node_id: str, data: Any) -> GraphNode:
    if not isinstance(data, dict):
        raise QuestionGraphError(f"Node {node_id} must be a mapping")

    kind = data.get("type") or ("result" if "rule_id" in data else "question")
    model = {"question": QuestionNode, "result": VerdictNode}.get(kind)
    if model is None:
        raise QuestionGraphError(f"Node {node_id} has unknown type {kind!r}")

    try:
        return model(**{**data, "id": node_id, "type": kind})
    except ValidationError as e:
        raise QuestionGraphError(f"Invalid node {node_id}: {e}") from e


def load_question_graph(path: str | Path) -> QuestionGraph:
    """Load and validate the question graph YAML file."""
    path = Path(path)
    if not path.exists():
        raise QuestionGraphError(f"Question graph file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise QuestionGraphError(f"Question graph is not valid YAML: {path}: {e}") from e

    graph = QuestionGraph.parse(content, source_path=str(path))
    logger.info(
        "Loaded question graph from %s (%d questions, %d verdicts)",
        path, len(graph.questions), len(graph.verdicts),
    )
    return graph
