"""Search tools. Served from the almsearch host."""
import logging
from typing import Optional

from mcp.types import CallToolResult

from .. import formatters, schemas
from ..connection import AdoConnection
from ..registry import ToolRegistry

logger = logging.getLogger("ado-mcp.tools.search")

SEARCH_API_VERSION = "7.1-preview.1"


def _search_body(search_text: str, skip: int, top: int, include_facets: bool,
                 filters: dict[str, Optional[list[str]]]) -> dict:
    body = {
        "searchText": search_text,
        "$skip": skip,
        "$top": top,
        "includeFacets": include_facets,
    }
    filters = {k: v for k, v in filters.items() if v}
    if filters:
        body["filters"] = filters
    return body


async def _search(connection: AdoConnection, kind: str, body: dict) -> CallToolResult:
    result = await connection.post(
        f"_apis/search/{kind}searchresults",
        area="search",
        json=body,
        api_version=SEARCH_API_VERSION,
    )
    if not (result or {}).get("results"):
        return formatters.empty_result("No results found")

    logger.info(f"{kind} search for '{body['searchText']}' returned {result.get('count')} results")
    return formatters.json_result(result)


async def handle_search_code(
    params: schemas.SearchCode,
    connection: AdoConnection,
) -> CallToolResult:
    body = _search_body(params.search_text, params.skip, params.top, params.include_facets, {
        "Project": params.project,
        "Repository": params.repository,
        "Path": params.path,
        "Branch": params.branch,
    })
    return await _search(connection, "code", body)


async def handle_search_wiki(
    params: schemas.SearchWiki,
    connection: AdoConnection,
) -> CallToolResult:
    body = _search_body(params.search_text, params.skip, params.top, params.include_facets, {
        "Project": params.project,
        "Wiki": params.wiki,
    })
    return await _search(connection, "wiki", body)


async def handle_search_workitem(
    params: schemas.SearchWorkItem,
    connection: AdoConnection,
) -> CallToolResult:
    body = _search_body(params.search_text, params.skip, params.top, params.include_facets, {
        "System.TeamProject": params.project,
        "System.AreaPath": params.area_path,
        "System.WorkItemType": params.work_item_type,
        "System.State": params.state,
        "System.AssignedTo": params.assigned_to,
    })
    return await _search(connection, "workitem", body)


def configure_search_tools(registry: ToolRegistry) -> None:
    registry.register(
        "search_code",
        "Get the code search results for a given search text.",
        schemas.SearchCode,
        handle_search_code,
        failure_message="Error searching code",
    )
    registry.register(
        "search_wiki",
        "Get wiki search results for a given search text.",
        schemas.SearchWiki,
        handle_search_wiki,
        failure_message="Error searching wiki",
    )
    registry.register(
        "search_workitem",
        "Get work item search results for a given search text.",
        schemas.SearchWorkItem,
        handle_search_workitem,
        failure_message="Error searching work items",
    )
