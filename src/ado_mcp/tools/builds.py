"""Build tools: definitions, builds, logs, changes and queueing."""
import json
import logging

from mcp.types import CallToolResult

from .. import formatters, schemas
from ..connection import AdoConnection, segments
from ..registry import ToolRegistry

logger = logging.getLogger("ado-mcp.tools.builds")


def _builds_path(project: str, *rest: object) -> str:
    return "/".join([segments(project), "_apis", "build", "builds", *(segments(p) for p in rest)])


async def handle_get_definitions(
    params: schemas.GetBuildDefinitions,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        f"{segments(params.project)}/_apis/build/definitions",
        params={
            "repositoryId": params.repository_id,
            "repositoryType": params.repository_type,
            "name": params.name,
            "$top": params.top,
            "includeLatestBuilds": params.include_latest_builds,
        },
    )
    definitions = (result or {}).get("value")
    if not definitions:
        return formatters.empty_result("No build definitions found")

    logger.info(f"Successfully listed {len(definitions)} build definitions for project {params.project}")
    return formatters.json_result(definitions)


async def handle_get_builds(
    params: schemas.GetBuilds,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        _builds_path(params.project),
        params={
            "definitions": ",".join(str(d) for d in params.definitions) if params.definitions else None,
            "branchName": params.branch_name,
            "requestedFor": params.requested_for,
            "statusFilter": params.status_filter,
            "resultFilter": params.result_filter,
            "$top": params.top,
        },
    )
    builds = (result or {}).get("value")
    if not builds:
        return formatters.empty_result("No builds found")

    logger.info(f"Successfully listed {len(builds)} builds for project {params.project}")
    return formatters.json_result([formatters.project_build(build) for build in builds])


async def handle_get_log(
    params: schemas.GetBuildLog,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(_builds_path(params.project, params.build_id, "logs"))
    logs = (result or {}).get("value")
    if not logs:
        return formatters.empty_result("No logs found for this build")

    return formatters.json_result(logs)


async def handle_get_log_by_id(
    params: schemas.GetBuildLogById,
    connection: AdoConnection,
) -> CallToolResult:
    """Fetch the plain-text lines of one build log."""
    content = await connection.get(
        _builds_path(params.project, params.build_id, "logs", params.log_id),
        params={"startLine": params.start_line, "endLine": params.end_line},
        headers={"Accept": "text/plain"},
    )
    if not content:
        return formatters.empty_result("Log is empty")

    lines = content.splitlines() if isinstance(content, str) else content.get("value", [])
    return formatters.json_result(lines)


async def handle_get_changes(
    params: schemas.GetBuildChanges,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        _builds_path(params.project, params.build_id, "changes"),
        params={"$top": params.top, "includeSourceChange": params.include_source_change},
    )
    changes = (result or {}).get("value")
    if not changes:
        return formatters.empty_result("No changes found for this build")

    return formatters.json_result(changes)


async def handle_run_build(
    params: schemas.RunBuild,
    connection: AdoConnection,
) -> CallToolResult:
    body = {"definition": {"id": params.definition_id}}
    if params.source_branch:
        body["sourceBranch"] = params.source_branch
    # the build API takes parameters as a JSON-encoded string
    if params.parameters:
        body["parameters"] = json.dumps(params.parameters)

    build = await connection.post(_builds_path(params.project), json=body)
    logger.info(f"Queued build {(build or {}).get('id')} for definition {params.definition_id}")
    return formatters.json_result(build)


async def handle_get_status(
    params: schemas.GetBuildStatus,
    connection: AdoConnection,
) -> CallToolResult:
    report = await connection.get(
        _builds_path(params.project, params.build_id, "report"),
        api_version="7.1-preview.2",
    )
    return formatters.json_result(report)


def configure_build_tools(registry: ToolRegistry) -> None:
    registry.register(
        "build_get_definitions",
        "Retrieves a list of build definitions for a given project.",
        schemas.GetBuildDefinitions,
        handle_get_definitions,
        failure_message="Error fetching build definitions",
    )
    registry.register(
        "build_get_builds",
        "Retrieves a list of builds for a given project.",
        schemas.GetBuilds,
        handle_get_builds,
        failure_message="Error fetching builds",
    )
    registry.register(
        "build_get_log",
        "Retrieves the logs for a specific build.",
        schemas.GetBuildLog,
        handle_get_log,
        failure_message="Error fetching build logs",
    )
    registry.register(
        "build_get_log_by_id",
        "Get a specific build log by log ID.",
        schemas.GetBuildLogById,
        handle_get_log_by_id,
        failure_message="Error fetching build log",
    )
    registry.register(
        "build_get_changes",
        "Get the changes associated with a specific build.",
        schemas.GetBuildChanges,
        handle_get_changes,
        failure_message="Error fetching build changes",
    )
    registry.register(
        "build_run_build",
        "Triggers a new build for a specified definition.",
        schemas.RunBuild,
        handle_run_build,
        failure_message="Error running build",
    )
    registry.register(
        "build_get_status",
        "Fetches the status report of a specific build.",
        schemas.GetBuildStatus,
        handle_get_status,
        failure_message="Error fetching build status",
    )
