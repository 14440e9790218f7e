"""Release tools. Served from the vsrm host."""
import logging

from mcp.types import CallToolResult

from .. import formatters, schemas
from ..connection import AdoConnection, segments
from ..registry import ToolRegistry

logger = logging.getLogger("ado-mcp.tools.releases")


async def handle_get_release_definitions(
    params: schemas.GetReleaseDefinitions,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        f"{segments(params.project)}/_apis/release/definitions",
        area="release",
        params={
            "searchText": params.search_text,
            "path": params.path,
            "isDeleted": params.is_deleted,
            "$top": params.top,
        },
    )
    definitions = (result or {}).get("value")
    if not definitions:
        return formatters.empty_result("No release definitions found")

    logger.info(f"Successfully listed {len(definitions)} release definitions for project {params.project}")
    return formatters.json_result(definitions)


async def handle_get_releases(
    params: schemas.GetReleases,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        f"{segments(params.project)}/_apis/release/releases",
        area="release",
        params={
            "definitionId": params.definition_id,
            "searchText": params.search_text,
            "statusFilter": params.status_filter,
            "createdBy": params.created_by,
            "minCreatedTime": params.min_created_time.isoformat() if params.min_created_time else None,
            "maxCreatedTime": params.max_created_time.isoformat() if params.max_created_time else None,
            "$top": params.top,
        },
    )
    releases = (result or {}).get("value")
    if not releases:
        return formatters.empty_result("No releases found")

    logger.info(f"Successfully listed {len(releases)} releases for project {params.project}")
    return formatters.json_result([formatters.project_release(release) for release in releases])


def configure_release_tools(registry: ToolRegistry) -> None:
    registry.register(
        "release_get_definitions",
        "Retrieves list of release definitions for a given project.",
        schemas.GetReleaseDefinitions,
        handle_get_release_definitions,
        failure_message="Error fetching release definitions",
    )
    registry.register(
        "release_get_releases",
        "Retrieves a list of releases for a given project.",
        schemas.GetReleases,
        handle_get_releases,
        failure_message="Error fetching releases",
    )
