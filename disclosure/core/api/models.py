"""Pydantic models for scenario API responses."""

from pydantic import BaseModel

from disclosure.core.ontology.scenario import Scenario


class ScenarioListResponse(BaseModel):
    scenarios: list[Scenario]
    total: int
    tags: list[str]
