"""Wiki tools: wikis, page listings and page content."""
import logging
from typing import Optional

from mcp.types import CallToolResult

from .. import formatters, schemas
from ..connection import AdoConnection, segments
from ..registry import ToolRegistry

logger = logging.getLogger("ado-mcp.tools.wiki")


def _wikis_path(project: Optional[str], *rest: object) -> str:
    prefix = f"{segments(project)}/" if project else ""
    suffix = "".join(f"/{segments(p)}" for p in rest)
    return f"{prefix}_apis/wiki/wikis{suffix}"


async def handle_list_wikis(
    params: schemas.ListWikis,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(_wikis_path(params.project))
    wikis = (result or {}).get("value")
    if not wikis:
        return formatters.empty_result("No wikis found")

    logger.info(f"Successfully listed {len(wikis)} wikis")
    return formatters.json_result(wikis)


async def handle_get_wiki(
    params: schemas.GetWiki,
    connection: AdoConnection,
) -> CallToolResult:
    wiki = await connection.get(_wikis_path(params.project, params.wiki_identifier))
    if not wiki:
        return formatters.empty_result("No wiki found")

    return formatters.json_result(wiki)


async def handle_list_pages(
    params: schemas.ListWikiPages,
    connection: AdoConnection,
) -> CallToolResult:
    body = {"top": params.top}
    if params.continuation_token:
        body["continuationToken"] = params.continuation_token
    if params.page_views_for_days is not None:
        body["pageViewsForDays"] = params.page_views_for_days

    result = await connection.post(
        _wikis_path(params.project, params.wiki_identifier, "pagesbatch"),
        json=body,
        api_version="7.1-preview.1",
    )
    pages = (result or {}).get("value")
    if not pages:
        return formatters.empty_result("No wiki pages found")

    return formatters.json_result(pages)


async def handle_get_page_content(
    params: schemas.GetWikiPageContent,
    connection: AdoConnection,
) -> CallToolResult:
    page = await connection.get(
        _wikis_path(params.project, params.wiki_identifier, "pages"),
        params={"path": params.path, "includeContent": True},
    )
    if not page:
        return formatters.empty_result(f"Wiki page {params.path} not found")

    return formatters.json_result(page)


async def handle_create_or_update_page(
    params: schemas.CreateOrUpdateWikiPage,
    connection: AdoConnection,
) -> CallToolResult:
    """Create a page, or update it in place when it already exists.

    Updating an existing page requires its current ETag in If-Match.
    """
    pages_path = _wikis_path(params.project, params.wiki_identifier, "pages")
    etag = await connection.head_etag(pages_path, params={"path": params.path})

    headers = {"If-Match": etag} if etag else None
    page = await connection.put(
        pages_path,
        params={"path": params.path, "comment": params.comment},
        json={"content": params.content},
        headers=headers,
    )
    logger.info(f"{'Updated' if etag else 'Created'} wiki page {params.path} in {params.wiki_identifier}")
    return formatters.json_result(page)


def configure_wiki_tools(registry: ToolRegistry) -> None:
    registry.register(
        "wiki_list_wikis",
        "Retrieve a list of wikis for an organization or project.",
        schemas.ListWikis,
        handle_list_wikis,
        failure_message="Error fetching wikis",
    )
    registry.register(
        "wiki_get_wiki",
        "Get the wiki by wikiIdentifier",
        schemas.GetWiki,
        handle_get_wiki,
        failure_message="Error fetching wiki",
    )
    registry.register(
        "wiki_list_pages",
        "Retrieve a list of wiki pages for a specific wiki and project.",
        schemas.ListWikiPages,
        handle_list_pages,
        failure_message="Error fetching wiki pages",
    )
    registry.register(
        "wiki_get_page_content",
        "Retrieve wiki page content by wikiIdentifier and path.",
        schemas.GetWikiPageContent,
        handle_get_page_content,
        failure_message="Error fetching wiki page content",
    )
    registry.register(
        "wiki_create_or_update_page",
        "Create a new wiki page or update an existing one.",
        schemas.CreateOrUpdateWikiPage,
        handle_create_or_update_page,
        failure_message="Error saving wiki page",
    )
