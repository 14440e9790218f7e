"""Core tools: projects and teams."""
import logging

from mcp.types import CallToolResult

from .. import formatters, schemas
from ..connection import AdoConnection, segments
from ..registry import ToolRegistry

logger = logging.getLogger("ado-mcp.tools.core")


async def handle_list_project_teams(
    params: schemas.ListProjectTeams,
    connection: AdoConnection,
) -> CallToolResult:
    """List teams of a project, optionally only those the caller belongs to."""
    result = await connection.get(
        f"_apis/projects/{segments(params.project)}/teams",
        params={
            "$mine": params.mine,
            "$top": params.top,
            "$skip": params.skip,
            "$expandIdentity": False,
        },
        api_version="7.1-preview.3",
    )
    teams = (result or {}).get("value")
    if not teams:
        return formatters.empty_result("No teams found")

    logger.info(f"Successfully listed {len(teams)} teams for project {params.project}")
    return formatters.json_result(teams)


async def handle_list_projects(
    params: schemas.ListProjects,
    connection: AdoConnection,
) -> CallToolResult:
    """List projects in the organization."""
    result = await connection.get(
        "_apis/projects",
        params={
            "stateFilter": params.state_filter,
            "$top": params.top,
            "$skip": params.skip,
            "continuationToken": params.continuation_token,
            "getDefaultTeamImageUrl": False,
        },
    )
    projects = (result or {}).get("value")
    if not projects:
        return formatters.empty_result("No projects found")

    logger.info(f"Successfully listed {len(projects)} projects")
    return formatters.json_result(projects)


def configure_core_tools(registry: ToolRegistry) -> None:
    registry.register(
        "core_list_project_teams",
        "Retrieve a list of teams for the specified Azure DevOps project.",
        schemas.ListProjectTeams,
        handle_list_project_teams,
        failure_message="Error fetching project teams",
    )
    registry.register(
        "core_list_projects",
        "Retrieve a list of projects in your Azure DevOps organization.",
        schemas.ListProjects,
        handle_list_projects,
        failure_message="Error fetching projects",
    )
