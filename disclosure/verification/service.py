"""Cross-verification of the disclosure evaluators.

The regulation is encoded three times: the ordered rule table, the
hand-written decision tree and the question graph. Each check below
compares two encodings and reports every input on which they disagree:

- Exhaustive: decision tree vs rule engine over every core combination
- Paths: question graph vs rule engine on canonical and on all simple paths
- Robustness: single-answer flips of every canonical path
- Coverage: rule ids shared by the table, the graph and the scenario library
- Scenarios: every named scenario reproduced by both evaluators
"""

from __future__ import annotations

import itertools
import logging
from typing import Iterator

from pydantic import BaseModel, Field

from disclosure.core.ontology.attributes import AttributeName, DisclosureAttributes
from disclosure.core.ontology.scenario import ScenarioLibrary
from disclosure.rules.decision_tree import DecisionTree
from disclosure.rules.service import RuleEngine, RuleTable
from disclosure.walkthrough.graph import QuestionGraph
from disclosure.walkthrough.service import AnswersExhausted, ScriptedAnswers, Walkthrough

logger = logging.getLogger(__name__)

# Attributes that steer the decision flow; enumerated exhaustively.
CORE_ATTRIBUTES: tuple[AttributeName, ...] = (
    AttributeName.INCLUDES_FTI,
    AttributeName.DISCLOSURE_TO_STUDENT,
    AttributeName.IS_FAFSA_DATA,
    AttributeName.DISCLOSURE_TO_CONTRIBUTOR_PARENT_OR_SPOUSE,
    AttributeName.USED_FOR_AID_ADMIN,
    AttributeName.DISCLOSURE_TO_SCHOLARSHIP_ORG,
    AttributeName.EXPLICIT_WRITTEN_CONSENT,
    AttributeName.RESEARCH_PROMOTE_ATTENDANCE,
    AttributeName.HEA_WRITTEN_CONSENT,
    AttributeName.CONTAINS_PII,
    AttributeName.FERPA_WRITTEN_CONSENT,
    AttributeName.TO_SCHOOL_OFFICIAL_LEGITIMATE_INTEREST,
)

# Remaining FERPA exceptions; each is tried alone against every core combination.
INDEPENDENT_ATTRIBUTES: tuple[AttributeName, ...] = tuple(
    name for name in AttributeName if name not in CORE_ATTRIBUTES
)

MAX_REPORTED_DISAGREEMENTS = 25


# =============================================================================
# Report Models
# =============================================================================


class Disagreement(BaseModel):
    """One input on which two encodings gave different answers."""

    inputs: list[str] = Field(default_factory=list, description="Attributes set to True or answers given")
    expected: str
    actual: str
    detail: str | None = None


class CheckResult(BaseModel):
    name: str
    description: str
    checked: int = 0
    failures: int = 0
    disagreements: list[Disagreement] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.failures == 0

    def record(self, disagreement: Disagreement) -> None:
        self.failures += 1
        if len(self.disagreements) < MAX_REPORTED_DISAGREEMENTS:
            self.disagreements.append(disagreement)


class VerificationReport(BaseModel):
    checks: list[CheckResult] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)

    def get(self, name: str) -> CheckResult | None:
        for check in self.checks:
            if check.name == name:
                return check
        return None

    def summary(self) -> dict[str, object]:
        return {
            "passed": self.passed,
            "checks": len(self.checks),
            "failed_checks": [c.name for c in self.checks if not c.passed],
            "cases": sum(c.checked for c in self.checks),
        }


# =============================================================================
# Input Generation
# =============================================================================


def iter_independent_configs() -> Iterator[dict[str, bool]]:
    """All independent flags off, then each one switched on alone."""
    yield {}
    for name in INDEPENDENT_ATTRIBUTES:
        yield {name.value: True}


def iter_combinations() -> Iterator[DisclosureAttributes]:
    """Every core combination under every independent configuration."""
    for config in iter_independent_configs():
        for values in itertools.product((False, True), repeat=len(CORE_ATTRIBUTES)):
            core = {name.value: value for name, value in zip(CORE_ATTRIBUTES, values)}
            yield DisclosureAttributes(**core, **config)


def combination_count() -> int:
    return (len(INDEPENDENT_ATTRIBUTES) + 1) * 2 ** len(CORE_ATTRIBUTES)


def _answers_label(answers: list[bool]) -> list[str]:
    return ["".join("y" if a else "n" for a in answers)]


def _walk(graph: QuestionGraph, answers: list[bool]) -> Walkthrough:
    walkthrough = Walkthrough(graph, ScriptedAnswers(answers))
    walkthrough.run()
    return walkthrough


# =============================================================================
# Checks
# =============================================================================


def check_tree_matches_engine(
    tree: DecisionTree, engine: RuleEngine
) -> tuple[CheckResult, CheckResult]:
    """Exhaustively compare the decision tree with the rule engine.

    Returns the permit/deny family check and the rule-id check.
    """
    family = CheckResult(
        name="tree_engine_family",
        description="Decision tree and rule engine agree on permit/deny",
    )
    rule_ids = CheckResult(
        name="tree_engine_rule_id",
        description="Decision tree and rule engine fire the same rule",
    )

    for attributes in iter_combinations():
        tree_trace = tree.evaluate(attributes)
        engine_trace = engine.evaluate(attributes)
        family.checked += 1
        rule_ids.checked += 1

        if tree_trace.outcome != engine_trace.outcome:
            family.record(Disagreement(
                inputs=attributes.true_names(),
                expected=engine_trace.outcome.value,
                actual=tree_trace.outcome.value,
                detail=f"engine {engine_trace.rule_id}, tree {tree_trace.rule_id}",
            ))
        if tree_trace.rule_id != engine_trace.rule_id:
            rule_ids.record(Disagreement(
                inputs=attributes.true_names(),
                expected=engine_trace.rule_id,
                actual=tree_trace.rule_id,
            ))

    return family, rule_ids


def check_graph_paths(
    graph: QuestionGraph, engine: RuleEngine, all_paths: bool = False
) -> CheckResult:
    """Walk graph paths and confirm the engine fires the verdict node's rule."""
    if all_paths:
        result = CheckResult(
            name="graph_all_paths",
            description="Every simple start-to-verdict path agrees with the rule engine",
        )
        paths = list(graph.iter_paths())
    else:
        result = CheckResult(
            name="graph_canonical_paths",
            description="The shortest path to each verdict agrees with the rule engine",
        )
        verdicts = {v.id: v for v in graph.verdicts}
        paths = [(verdicts[node_id], answers) for node_id, answers in graph.canonical_paths().items()]

    for verdict, answers in paths:
        result.checked += 1
        walkthrough = _walk(graph, answers)
        engine_trace = engine.evaluate(walkthrough.to_attributes())

        if walkthrough.trace.rule_id != verdict.rule_id:
            result.record(Disagreement(
                inputs=_answers_label(answers),
                expected=verdict.rule_id,
                actual=walkthrough.trace.rule_id,
                detail="walkthrough did not end at the path's verdict node",
            ))
        elif engine_trace.rule_id != verdict.rule_id:
            result.record(Disagreement(
                inputs=_answers_label(answers),
                expected=verdict.rule_id,
                actual=engine_trace.rule_id,
                detail=f"attributes: {', '.join(walkthrough.to_attributes().true_names()) or '(all false)'}",
            ))

    return result


def check_single_flips(graph: QuestionGraph, engine: RuleEngine) -> CheckResult:
    """Flip each answer of every canonical path.

    A flipped string either runs out of answers or reaches a verdict the
    rule engine agrees with.
    """
    result = CheckResult(
        name="graph_single_flips",
        description="Single-answer mutations never split graph and engine",
    )
    for answers in graph.canonical_paths().values():
        for index in range(len(answers)):
            mutated = list(answers)
            mutated[index] = not mutated[index]
            result.checked += 1
            try:
                walkthrough = _walk(graph, mutated)
            except AnswersExhausted:
                continue

            engine_trace = engine.evaluate(walkthrough.to_attributes())
            if engine_trace.rule_id != walkthrough.trace.rule_id:
                result.record(Disagreement(
                    inputs=_answers_label(mutated),
                    expected=walkthrough.trace.rule_id,
                    actual=engine_trace.rule_id,
                ))
    return result


def check_rule_coverage(
    table: RuleTable, graph: QuestionGraph, library: ScenarioLibrary | None = None
) -> CheckResult:
    """Every rule has a verdict node (and a scenario); no verdict names an unknown rule."""
    result = CheckResult(
        name="rule_coverage",
        description="Rule table, question graph and scenarios cover the same rules",
    )
    table_ids = set(table.rule_ids)
    for rule_id in table.rule_ids:
        result.checked += 1
        if rule_id not in graph.rule_ids:
            result.record(Disagreement(inputs=[rule_id], expected="verdict node", actual="missing"))
        if library is not None and library.find_by_rule_id(rule_id) is None:
            result.record(Disagreement(inputs=[rule_id], expected="scenario", actual="missing"))

    for rule_id in sorted(graph.rule_ids - table_ids):
        result.checked += 1
        result.record(Disagreement(inputs=[rule_id], expected="rule in table", actual="missing"))
    return result


def check_scenarios(library: ScenarioLibrary, tree: DecisionTree, engine: RuleEngine) -> CheckResult:
    """Each scenario's expected rule and verdict are reproduced by both evaluators."""
    result = CheckResult(
        name="scenarios",
        description="Named scenarios reproduce their expected rule under both evaluators",
    )
    for scenario in library.all():
        attributes = scenario.to_attributes()
        for trace in (engine.evaluate(attributes), tree.evaluate(attributes)):
            result.checked += 1
            if (trace.rule_id, trace.verdict) != (scenario.expected_rule_id, scenario.expected_result):
                result.record(Disagreement(
                    inputs=[scenario.id],
                    expected=f"{scenario.expected_result.value} {scenario.expected_rule_id}",
                    actual=f"{trace.verdict.value} {trace.rule_id}",
                    detail=trace.source.value if trace.source else None,
                ))
    return result


# =============================================================================
# Engine
# =============================================================================


class VerificationEngine:
    """Runs every cross-check over one rule table, graph and scenario library."""

    def __init__(
        self,
        table: RuleTable,
        graph: QuestionGraph,
        library: ScenarioLibrary | None = None,
    ):
        self.table = table
        self.graph = graph
        self.library = library
        self.engine = RuleEngine(table)
        self.tree = DecisionTree()

    def run(self, exhaustive: bool = True) -> VerificationReport:
        """Run the checks.

        Args:
            exhaustive: include the full tree/engine enumeration
                (combination_count() inputs)
        """
        report = VerificationReport()
        report.checks.append(check_rule_coverage(self.table, self.graph, self.library))
        if exhaustive:
            report.checks.extend(check_tree_matches_engine(self.tree, self.engine))
        report.checks.append(check_graph_paths(self.graph, self.engine))
        report.checks.append(check_graph_paths(self.graph, self.engine, all_paths=True))
        report.checks.append(check_single_flips(self.graph, self.engine))
        if self.library is not None:
            report.checks.append(check_scenarios(self.library, self.tree, self.engine))

        for check in report.checks:
            if check.passed:
                logger.info("Verification %s passed (%d cases)", check.name, check.checked)
            else:
                logger.warning(
                    "Verification %s failed: %d of %d cases disagree",
                    check.name, check.failures, check.checked,
                )
        return report
