"""Work tools: team iterations (sprints)."""
import logging
from datetime import datetime
from typing import Optional

from mcp.types import CallToolResult

from .. import formatters, schemas
from ..connection import AdoConnection, segments
from ..registry import ToolRegistry

logger = logging.getLogger("ado-mcp.tools.work")


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


async def handle_list_team_iterations(
    params: schemas.ListTeamIterations,
    connection: AdoConnection,
) -> CallToolResult:
    """List the iterations a team is subscribed to."""
    result = await connection.get(
        f"{segments(params.project, params.team)}/_apis/work/teamsettings/iterations",
        params={"$timeframe": params.timeframe},
    )
    iterations = (result or {}).get("value")
    if not iterations:
        return formatters.empty_result("No iterations found")

    logger.info(f"Successfully listed {len(iterations)} iterations for team {params.team}")
    return formatters.json_result(iterations)


async def handle_create_iterations(
    params: schemas.CreateIterations,
    connection: AdoConnection,
) -> CallToolResult:
    """Create iteration nodes one at a time, in the order given."""
    path = f"{segments(params.project)}/_apis/wit/classificationnodes/Iterations"
    results = []

    for iteration in params.iterations:
        attributes = {
            k: v for k, v in {
                "startDate": _iso(iteration.start_date),
                "finishDate": _iso(iteration.finish_date),
            }.items() if v is not None
        }
        body = {"name": iteration.iteration_name}
        if attributes:
            body["attributes"] = attributes

        created = await connection.post(path, json=body)
        if created:
            results.append(created)
            logger.info(f"Created iteration {iteration.iteration_name} in project {params.project}")

    if not results:
        return formatters.empty_result("No iterations were created")

    return formatters.json_result(results)


async def handle_assign_iterations(
    params: schemas.AssignIterations,
    connection: AdoConnection,
) -> CallToolResult:
    """Subscribe a team to existing iterations, in the order given."""
    path = f"{segments(params.project, params.team)}/_apis/work/teamsettings/iterations"
    results = []

    for iteration in params.iterations:
        assignment = await connection.post(path, json={"id": iteration.identifier, "path": iteration.path})
        if assignment:
            results.append(assignment)
            logger.info(f"Assigned iteration {iteration.path} to team {params.team}")

    if not results:
        return formatters.empty_result("No iterations were assigned to the team")

    return formatters.json_result(results)


def configure_work_tools(registry: ToolRegistry) -> None:
    registry.register(
        "work_list_team_iterations",
        "Retrieve a list of iterations for a specific team in a project.",
        schemas.ListTeamIterations,
        handle_list_team_iterations,
        failure_message="Error fetching team iterations",
    )
    registry.register(
        "work_create_iterations",
        "Create new iterations in a specified Azure DevOps project.",
        schemas.CreateIterations,
        handle_create_iterations,
        failure_message="Error creating iterations",
    )
    registry.register(
        "work_assign_iterations",
        "Assign existing iterations to a specific team in a project.",
        schemas.AssignIterations,
        handle_assign_iterations,
        failure_message="Error assigning iterations",
    )
