"""Routes for browsing the scenario library."""

from fastapi import APIRouter, HTTPException

from disclosure.core.ontology.scenario import Scenario
from disclosure.core.registry import get_scenario_library

from .models import ScenarioListResponse

router = APIRouter(prefix="/scenarios", tags=["Scenarios"])


@router.get("", response_model=ScenarioListResponse)
async def list_scenarios(tag: str | None = None) -> ScenarioListResponse:
    """List all scenarios.

    Optionally filter by tag.
    """
    library = get_scenario_library()
    scenarios = library.by_tag(tag) if tag else library.all()
    return ScenarioListResponse(scenarios=scenarios, total=len(scenarios), tags=library.tags)


@router.get("/{scenario_id}", response_model=Scenario)
async def get_scenario(scenario_id: str) -> Scenario:
    scenario = get_scenario_library().find(scenario_id)
    if scenario is None:
        raise HTTPException(status_code=404, detail=f"Scenario not found: {scenario_id}")
    return scenario
