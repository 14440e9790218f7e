"""Work item tools: backlogs, queries, CRUD, comments and iteration contents."""
import logging
from typing import Any, Optional

from mcp.types import CallToolResult

from .. import formatters, schemas
from ..connection import AdoConnection, segments
from ..registry import ToolRegistry

logger = logging.getLogger("ado-mcp.tools.workitems")

JSON_PATCH = {"Content-Type": "application/json-patch+json"}
PARENT_LINK_TYPE = "System.LinkTypes.Hierarchy-Reverse"
COMMENTS_API_VERSION = "7.1-preview.4"


def _add_field(reference_name: str, value: Any) -> dict:
    return {"op": "add", "path": f"/fields/{reference_name}", "value": value}


def _joined(values: Optional[list[str]]) -> Optional[str]:
    return ",".join(values) if values else None


# ============================================================================
# Queries
# ============================================================================

async def handle_list_backlogs(
    params: schemas.ListBacklogs,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(f"{segments(params.project, params.team)}/_apis/work/backlogs")
    backlogs = (result or {}).get("value")
    if not backlogs:
        return formatters.empty_result("No backlogs found")

    logger.info(f"Successfully listed {len(backlogs)} backlogs for team {params.team}")
    return formatters.json_result(backlogs)


async def handle_my_work_items(
    params: schemas.MyWorkItems,
    connection: AdoConnection,
) -> CallToolResult:
    """Run one of the predefined "assigned to me" / "my activity" queries."""
    result = await connection.get(
        f"{segments(params.project)}/_apis/work/predefinedqueries/{segments(params.type)}",
        params={"$top": params.top, "includeCompleted": params.include_completed},
        api_version="7.1-preview.1",
    )
    work_items = (result or {}).get("results")
    if not work_items:
        return formatters.empty_result("No work items found")

    return formatters.json_result(work_items)


async def handle_get_work_items_for_iteration(
    params: schemas.GetWorkItemsForIteration,
    connection: AdoConnection,
) -> CallToolResult:
    scope = segments(params.project, params.team) if params.team else segments(params.project)
    result = await connection.get(
        f"{scope}/_apis/work/teamsettings/iterations/{segments(params.iteration_id)}/workitems",
        api_version="7.1-preview.1",
    )
    relations = (result or {}).get("workItemRelations")
    if not relations:
        return formatters.empty_result("No work items found for this iteration")

    return formatters.json_result(relations)


# ============================================================================
# Read
# ============================================================================

async def handle_get_work_item(
    params: schemas.GetWorkItem,
    connection: AdoConnection,
) -> CallToolResult:
    work_item = await connection.get(
        f"{segments(params.project)}/_apis/wit/workitems/{params.id}",
        params={
            "fields": _joined(params.fields),
            "asOf": params.as_of.isoformat() if params.as_of else None,
            "$expand": params.expand,
        },
    )
    return formatters.json_result(work_item)


async def handle_get_work_items_batch_by_ids(
    params: schemas.GetWorkItemsBatchByIds,
    connection: AdoConnection,
) -> CallToolResult:
    body = {"ids": params.ids}
    if params.fields:
        body["fields"] = params.fields
    else:
        body["fields"] = ["System.Id", "System.WorkItemType", "System.Title", "System.State",
                          "System.AssignedTo", "System.IterationPath"]

    result = await connection.post(f"{segments(params.project)}/_apis/wit/workitemsbatch", json=body)
    work_items = (result or {}).get("value")
    if not work_items:
        return formatters.empty_result("No work items found")

    if params.fields:
        return formatters.json_result(work_items)
    return formatters.json_result([formatters.project_work_item(wi) for wi in work_items])


# ============================================================================
# Write
# ============================================================================

async def handle_create_work_item(
    params: schemas.CreateWorkItem,
    connection: AdoConnection,
) -> CallToolResult:
    document = [_add_field(name, value) for name, value in params.fields.items()]
    work_item = await connection.post(
        f"{segments(params.project)}/_apis/wit/workitems/${segments(params.work_item_type)}",
        json=document,
        headers=JSON_PATCH,
    )
    logger.info(f"Created {params.work_item_type} {(work_item or {}).get('id')} in project {params.project}")
    return formatters.json_result(work_item)


async def handle_update_work_item(
    params: schemas.UpdateWorkItem,
    connection: AdoConnection,
) -> CallToolResult:
    document = []
    for update in params.updates:
        operation = {"op": update.op, "path": update.path}
        if update.op != "remove":
            operation["value"] = update.value
        document.append(operation)

    work_item = await connection.patch(f"_apis/wit/workitems/{params.id}", json=document, headers=JSON_PATCH)
    logger.info(f"Updated work item {params.id} ({len(document)} operations)")
    return formatters.json_result(work_item)


async def handle_add_child_work_item(
    params: schemas.AddChildWorkItem,
    connection: AdoConnection,
) -> CallToolResult:
    """Create a work item linked under an existing parent."""
    document = [
        _add_field("System.Title", params.title),
        _add_field("System.Description", params.description),
        {
            "op": "add",
            "path": "/relations/-",
            "value": {
                "rel": PARENT_LINK_TYPE,
                "url": connection.url(f"_apis/wit/workItems/{params.parent_id}"),
            },
        },
    ]
    if params.area_path:
        document.append(_add_field("System.AreaPath", params.area_path))
    if params.iteration_path:
        document.append(_add_field("System.IterationPath", params.iteration_path))

    work_item = await connection.post(
        f"{segments(params.project)}/_apis/wit/workitems/${segments(params.work_item_type)}",
        json=document,
        headers=JSON_PATCH,
    )
    logger.info(f"Created child {params.work_item_type} {(work_item or {}).get('id')} under {params.parent_id}")
    return formatters.json_result(work_item)


# ============================================================================
# Comments
# ============================================================================

async def handle_list_work_item_comments(
    params: schemas.ListWorkItemComments,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        f"{segments(params.project)}/_apis/wit/workItems/{params.work_item_id}/comments",
        params={"$top": params.top},
        api_version=COMMENTS_API_VERSION,
    )
    comments = (result or {}).get("comments")
    if not comments:
        return formatters.empty_result("No comments found")

    return formatters.json_result(comments)


async def handle_add_work_item_comment(
    params: schemas.AddWorkItemComment,
    connection: AdoConnection,
) -> CallToolResult:
    comment = await connection.post(
        f"{segments(params.project)}/_apis/wit/workItems/{params.work_item_id}/comments",
        json={"text": params.comment},
        api_version=COMMENTS_API_VERSION,
    )
    logger.info(f"Added comment to work item {params.work_item_id}")
    return formatters.json_result(comment)


def configure_work_item_tools(registry: ToolRegistry) -> None:
    registry.register(
        "wit_list_backlogs",
        "Retrieve a list of backlogs for a given project and team.",
        schemas.ListBacklogs,
        handle_list_backlogs,
        failure_message="Error fetching backlogs",
    )
    registry.register(
        "wit_my_work_items",
        "Retrieve a list of work items relevent to the authenticated user.",
        schemas.MyWorkItems,
        handle_my_work_items,
        failure_message="Error fetching work items",
    )
    registry.register(
        "wit_get_work_item",
        "Get a single work item by ID.",
        schemas.GetWorkItem,
        handle_get_work_item,
        failure_message="Error fetching work item",
    )
    registry.register(
        "wit_get_work_items_batch_by_ids",
        "Retrieve list of work items by IDs in batch.",
        schemas.GetWorkItemsBatchByIds,
        handle_get_work_items_batch_by_ids,
        failure_message="Error fetching work items",
    )
    registry.register(
        "wit_create_work_item",
        "Create a new work item in a specified project and work item type.",
        schemas.CreateWorkItem,
        handle_create_work_item,
        failure_message="Error creating work item",
    )
    registry.register(
        "wit_update_work_item",
        "Update a work item by ID with specified fields.",
        schemas.UpdateWorkItem,
        handle_update_work_item,
        failure_message="Error updating work item",
    )
    registry.register(
        "wit_add_child_work_item",
        "Create a child work item from a parent by ID.",
        schemas.AddChildWorkItem,
        handle_add_child_work_item,
        failure_message="Error creating child work item",
    )
    registry.register(
        "wit_list_work_item_comments",
        "Retrieve list of comments for a work item by ID.",
        schemas.ListWorkItemComments,
        handle_list_work_item_comments,
        failure_message="Error fetching work item comments",
    )
    registry.register(
        "wit_add_work_item_comment",
        "Add comment to a work item by ID.",
        schemas.AddWorkItemComment,
        handle_add_work_item_comment,
        failure_message="Error adding work item comment",
    )
    registry.register(
        "wit_get_work_items_for_iteration",
        "Retrieve a list of work items for a specified iteration.",
        schemas.GetWorkItemsForIteration,
        handle_get_work_items_for_iteration,
        failure_message="Error fetching work items for iteration",
    )
