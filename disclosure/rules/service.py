"""Rules service layer - rule table loading and the ordered rule engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from disclosure.core.errors import ConfigurationError
from disclosure.core.ontology.attributes import AttributeName, DisclosureAttributes
from disclosure.runtime.trace import EvaluatorKind, Trace, Verdict

logger = logging.getLogger(__name__)

NEGATION_PREFIX = "!"


class RuleTableError(ConfigurationError):
    """Raised when the rule table cannot be loaded or is structurally invalid."""

    pass


# =============================================================================
# Rule Models
# =============================================================================


class Condition(BaseModel):
    """One conjunct of a rule: an attribute name, optionally negated."""

    model_config = ConfigDict(frozen=True)

    attribute: str
    negated: bool = False

    @classmethod
    def parse(cls, text: str) -> Condition:
        text = text.strip()
        if text.startswith(NEGATION_PREFIX):
            return cls(attribute=text[len(NEGATION_PREFIX):].strip(), negated=True)
        return cls(attribute=text)

    @property
    def known(self) -> bool:
        return AttributeName.lookup(self.attribute) is not None

    def holds(self, attributes: DisclosureAttributes) -> bool:
        value = attributes.get(self.attribute)
        return not value if self.negated else value

    def __str__(self) -> str:
        return f"{NEGATION_PREFIX if self.negated else ''}{self.attribute}"


class Rule(BaseModel):
    """A named conjunction of attribute conditions mapping to a verdict."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique rule identifier")
    when_all: list[str] = Field(default_factory=list, description="Conjunctive conditions")
    result: Verdict = Field(..., description="Verdict when every condition holds")
    scope_note: str | None = Field(None, description="Use limits for permit_with_scope")
    caution_note: str | None = Field(None, description="Counsel advice for permit_with_caution")
    description: str | None = None
    citation: str | None = None

    @field_validator("when_all")
    @classmethod
    def conditions_not_blank(cls, value: list[str]) -> list[str]:
        for condition in value:
            name = (condition or "").strip()
            if name.startswith(NEGATION_PREFIX):
                name = name[len(NEGATION_PREFIX):].strip()
            if not name:
                raise ValueError("conditions must name an attribute")
            if name.startswith(NEGATION_PREFIX):
                raise ValueError(f"condition {condition!r} may be negated only once")
        return value

    _conditions: tuple[Condition, ...] = PrivateAttr(default=())

    def model_post_init(self, __context: Any) -> None:
        self._conditions = tuple(Condition.parse(c) for c in self.when_all)

    @property
    def conditions(self) -> tuple[Condition, ...]:
        return self._conditions

    def matches(self, attributes: DisclosureAttributes) -> bool:
        return all(condition.holds(attributes) for condition in self.conditions)

    def unknown_attributes(self) -> list[str]:
        return [c.attribute for c in self.conditions if not c.known]


class RuleTable(BaseModel):
    """Ordered, immutable list of rules.

    Validated on construction: rule ids are unique and each top-level
    branch (FTI / non-FTI) has a catch-all so every input reaches a verdict.
    """

    model_config = ConfigDict(frozen=True)

    rules: tuple[Rule, ...]
    source_path: str | None = None

    def model_post_init(self, __context: Any) -> None:
        seen: set[str] = set()
        duplicates = []
        for rule in self.rules:
            if rule.id in seen:
                duplicates.append(rule.id)
            seen.add(rule.id)
        if duplicates:
            raise RuleTableError(f"Duplicate rule ids: {', '.join(duplicates)}")

        for includes_fti in (True, False):
            if not any(_is_catch_all(rule, includes_fti) for rule in self.rules):
                branch = "FTI" if includes_fti else "non-FTI"
                raise RuleTableError(f"Rule table has no catch-all rule for the {branch} branch")

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def rule_ids(self) -> list[str]:
        return [rule.id for rule in self.rules]

    def get_rule(self, rule_id: str) -> Rule | None:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None


def _is_catch_all(rule: Rule, includes_fti: bool) -> bool:
    """True if the rule matches every input on one side of the FTI split."""
    for condition in rule.conditions:
        if condition.attribute != AttributeName.INCLUDES_FTI.value:
            return False
        if condition.negated == includes_fti:
            return False
    return True


# =============================================================================
# Loader
# =============================================================================


class RuleLoader:
    """Loads and validates the YAML rule table."""

    def __init__(self, strict_attribute_names: bool = False):
        self.strict_attribute_names = strict_attribute_names

    def load_file(self, path: str | Path) -> RuleTable:
        """Load the rule table from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise RuleTableError(f"Rule file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RuleTableError(f"Rule file is not valid YAML: {path}: {e}") from e

        table = self.parse(content, source_path=str(path))
        logger.info("Loaded %d rules from %s", len(table), path)
        return table

    def parse(self, content: Any, source_path: str | None = None) -> RuleTable:
        """Parse an already-loaded document ({rules: [...]}) into a table."""
        if not isinstance(content, dict) or not isinstance(content.get("rules"), list):
            raise RuleTableError("Rule table must be a mapping with a 'rules' list")

        rules = [self._parse_rule(i, item) for i, item in enumerate(content["rules"])]
        self._check_attribute_names(rules)
        return RuleTable(rules=tuple(rules), source_path=source_path)

    def _parse_rule(self, index: int, data: Any) -> Rule:
        if not isinstance(data, dict):
            raise RuleTableError(f"Rule #{index} must be a mapping, got {type(data).__name__}")
        try:
            return Rule(**data)
        except ValidationError as e:
            rule_id = data.get("id", f"#{index}")
            raise RuleTableError(f"Invalid rule {rule_id}: {e}") from e

    def _check_attribute_names(self, rules: list[Rule]) -> None:
        for rule in rules:
            unknown = rule.unknown_attributes()
            if not unknown:
                continue
            message = f"Rule {rule.id} references unknown attributes: {', '.join(unknown)}"
            if self.strict_attribute_names:
                raise RuleTableError(message)
            # Unknown names read as False at evaluation time
            logger.warning(message)


# =============================================================================
# Engine
# =============================================================================


class RuleEngine:
    """Evaluates the ordered rule table: the first fully matching rule wins."""

    def __init__(self, table: RuleTable):
        self.table = table

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self.table.rules

    @property
    def rule_ids(self) -> list[str]:
        return self.table.rule_ids

    def get_rule(self, rule_id: str) -> Rule | None:
        return self.table.get_rule(rule_id)

    def evaluate(self, attributes: DisclosureAttributes) -> Trace:
        """Return the trace of the first matching rule.

        The trace path lists every rule id considered, in order, ending with
        the rule that matched.
        """
        path: list[str] = []
        for rule in self.table.rules:
            path.append(rule.id)
            if rule.matches(attributes):
                return Trace(
                    rule_id=rule.id,
                    verdict=rule.result,
                    path=path,
                    scope_note=rule.scope_note,
                    caution_note=rule.caution_note,
                    citation=rule.citation,
                    source=EvaluatorKind.RULE_ENGINE,
                )

        # Unreachable for a validated table; guards tables with non-FTI-keyed catch-alls
        raise RuleTableError(
            f"No rule matched attributes: {', '.join(attributes.true_names()) or '(all false)'}"
        )
