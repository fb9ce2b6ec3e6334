"""Scenario library - named disclosure fact patterns with expected outcomes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from disclosure.core.errors import ConfigurationError
from disclosure.runtime.trace import Verdict

from .attributes import AttributeName, DisclosureAttributes

logger = logging.getLogger(__name__)


class ScenarioLibraryError(ConfigurationError):
    """Raised when the scenario file cannot be loaded or is malformed."""

    pass


class ExpectedOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    result: Verdict
    rule_id: str


class Scenario(BaseModel):
    """A real-world disclosure situation mapped to the rule that decides it.

    Scenarios double as regression fixtures and as documentation: each one
    is evaluated by both the rule engine and the decision tree.

    Example:
        {
            "id": "student_views_own_fti",
            "inputs": {"includes_fti": true, "disclosure_to_student": true},
            "expected": {"result": "permit", "rule_id": "FTI_R1_student"}
        }
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    inputs: dict[str, bool] = Field(default_factory=dict)
    expected: ExpectedOutcome
    citation: str | None = None
    tags: tuple[str, ...] = ()

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        return value.strip()

    @field_validator("inputs")
    @classmethod
    def inputs_are_known_attributes(cls, value: dict[str, bool]) -> dict[str, bool]:
        unknown = [name for name in value if AttributeName.lookup(name) is None]
        if unknown:
            raise ValueError(f"unknown attributes: {', '.join(sorted(unknown))}")
        return value

    @property
    def expected_result(self) -> Verdict:
        return self.expected.result

    @property
    def expected_rule_id(self) -> str:
        return self.expected.rule_id

    def to_attributes(self) -> DisclosureAttributes:
        """Attributes for this scenario's inputs."""
        return DisclosureAttributes(**self.inputs)


class ScenarioLibrary:
    """Immutable, queryable collection of scenarios."""

    def __init__(self, scenarios: list[Scenario] | tuple[Scenario, ...]):
        self._scenarios = tuple(scenarios)

    def __len__(self) -> int:
        return len(self._scenarios)

    def all(self) -> list[Scenario]:
        return list(self._scenarios)

    def find(self, scenario_id: str) -> Scenario | None:
        for scenario in self._scenarios:
            if scenario.id == scenario_id:
                return scenario
        return None

    def find_by_rule_id(self, rule_id: str) -> Scenario | None:
        """First scenario expected to fire ``rule_id``, or None if uncovered."""
        for scenario in self._scenarios:
            if scenario.expected_rule_id == rule_id:
                return scenario
        return None

    def by_tag(self, tag: str) -> list[Scenario]:
        return [s for s in self._scenarios if tag in s.tags]

    def permits(self) -> list[Scenario]:
        return [s for s in self._scenarios if s.expected_result.is_permit]

    def denials(self) -> list[Scenario]:
        return [s for s in self._scenarios if s.expected_result is Verdict.DENY]

    @property
    def tags(self) -> list[str]:
        return sorted({tag for s in self._scenarios for tag in s.tags})

    @classmethod
    def load_file(cls, path: str | Path) -> ScenarioLibrary:
        """Load scenarios from YAML ({scenarios: [...]})."""
        path = Path(path)
        if not path.exists():
            raise ScenarioLibraryError(f"Scenario file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ScenarioLibraryError(f"Scenario file is not valid YAML: {path}: {e}") from e

        library = cls.parse(content)
        logger.info("Loaded %d scenarios from %s", len(library), path)
        return library

    @classmethod
    def parse(cls, content: Any) -> ScenarioLibrary:
        if not isinstance(content, dict) or not isinstance(content.get("scenarios"), list):
            raise ScenarioLibraryError("Scenario file must be a mapping with a 'scenarios' list")

        scenarios = []
        seen: set[str] = set()
        for index, raw in enumerate(content["scenarios"]):
            try:
                scenario = Scenario.model_validate(raw)
            except ValidationError as e:
                label = raw.get("id", f"#{index}") if isinstance(raw, dict) else f"#{index}"
                raise ScenarioLibraryError(f"Invalid scenario {label}: {e}") from e
            if scenario.id in seen:
                raise ScenarioLibraryError(f"Duplicate scenario id: {scenario.id}")
            seen.add(scenario.id)
            scenarios.append(scenario)

        return cls(scenarios)
