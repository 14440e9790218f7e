"""Repository tools: repositories, branches, pull requests and comment threads."""
import logging
from typing import Optional, Union

from mcp.types import CallToolResult

from .. import formatters, schemas
from ..connection import AdoConnection, segments
from ..registry import ToolRegistry

logger = logging.getLogger("ado-mcp.tools.repos")

PullRequestFilter = Union[schemas.ListPullRequestsByRepo, schemas.ListPullRequestsByProject]


def _repository_path(repository_id: str, *rest: object, project: Optional[str] = None) -> str:
    """Build a git repository path, scoped to a project when one is given."""
    prefix = f"{segments(project)}/" if project else ""
    return f"{prefix}_apis/git/repositories/{segments(repository_id, *rest)}"


async def _search_criteria(params: PullRequestFilter, connection: AdoConnection) -> dict:
    """Build pull request search criteria.

    The creator/reviewer filters need the caller's own id, so the identity
    lookup happens first and only when one of those filters is set.
    """
    criteria = {"searchCriteria.status": "active"}
    if params.created_by_me or params.i_am_reviewer:
        user_id = await connection.current_user_id()
        if params.created_by_me:
            criteria["searchCriteria.creatorId"] = user_id
        if params.i_am_reviewer:
            criteria["searchCriteria.reviewerId"] = user_id
    return criteria


# ============================================================================
# Pull requests
# ============================================================================

async def handle_create_pull_request(
    params: schemas.CreatePullRequest,
    connection: AdoConnection,
) -> CallToolResult:
    body = {
        "sourceRefName": params.source_ref_name,
        "targetRefName": params.target_ref_name,
        "title": params.title,
        "isDraft": params.is_draft,
    }
    if params.description is not None:
        body["description"] = params.description

    pull_request = await connection.post(_repository_path(params.repository_id, "pullrequests"), json=body)
    logger.info(f"Created pull request {pull_request.get('pullRequestId')} in repository {params.repository_id}")
    return formatters.json_result(pull_request)


async def handle_update_pull_request_status(
    params: schemas.UpdatePullRequestStatus,
    connection: AdoConnection,
) -> CallToolResult:
    status_value = formatters.pull_request_status_code(params.status)
    pull_request = await connection.patch(
        _repository_path(params.repository_id, "pullrequests", params.pull_request_id),
        json={"status": status_value},
    )
    logger.info(f"Updated pull request {params.pull_request_id} status to {params.status} ({status_value})")
    return formatters.json_result(pull_request)


async def handle_list_pull_requests_by_repo(
    params: schemas.ListPullRequestsByRepo,
    connection: AdoConnection,
) -> CallToolResult:
    criteria = await _search_criteria(params, connection)
    criteria["searchCriteria.repositoryId"] = params.repository_id

    result = await connection.get(_repository_path(params.repository_id, "pullrequests"), params=criteria)
    pull_requests = (result or {}).get("value")
    if not pull_requests:
        return formatters.empty_result("No pull requests found")

    logger.info(f"Successfully listed {len(pull_requests)} pull requests for repository {params.repository_id}")
    return formatters.json_result([formatters.project_pull_request(pr) for pr in pull_requests])


async def handle_list_pull_requests_by_project(
    params: schemas.ListPullRequestsByProject,
    connection: AdoConnection,
) -> CallToolResult:
    criteria = await _search_criteria(params, connection)

    result = await connection.get(f"{segments(params.project)}/_apis/git/pullrequests", params=criteria)
    pull_requests = (result or {}).get("value")
    if not pull_requests:
        return formatters.empty_result("No pull requests found")

    logger.info(f"Successfully listed {len(pull_requests)} pull requests for project {params.project}")
    return formatters.json_result(
        [formatters.project_pull_request(pr, include_repository=True) for pr in pull_requests]
    )


async def handle_get_pull_request_by_id(
    params: schemas.GetPullRequestById,
    connection: AdoConnection,
) -> CallToolResult:
    pull_request = await connection.get(
        _repository_path(params.repository_id, "pullrequests", params.pull_request_id)
    )
    return formatters.json_result(pull_request)


# ============================================================================
# Comment threads
# ============================================================================

async def handle_list_pull_request_threads(
    params: schemas.ListPullRequestThreads,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        _repository_path(params.repository_id, "pullRequests", params.pull_request_id, "threads",
                         project=params.project),
        params={"$iteration": params.iteration, "$baseIteration": params.base_iteration},
    )
    threads = (result or {}).get("value")
    if not threads:
        return formatters.empty_result("No threads found")

    return formatters.json_result(threads)


async def handle_list_pull_request_thread_comments(
    params: schemas.ListPullRequestThreadComments,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        _repository_path(params.repository_id, "pullRequests", params.pull_request_id, "threads",
                         params.thread_id, "comments", project=params.project)
    )
    comments = (result or {}).get("value")
    if not comments:
        return formatters.empty_result("No comments found")

    return formatters.json_result(comments)


async def handle_reply_to_comment(
    params: schemas.ReplyToComment,
    connection: AdoConnection,
) -> CallToolResult:
    comment = await connection.post(
        _repository_path(params.repository_id, "pullRequests", params.pull_request_id, "threads",
                         params.thread_id, "comments", project=params.project),
        json={"content": params.content},
    )
    logger.info(f"Replied to thread {params.thread_id} on pull request {params.pull_request_id}")
    return formatters.json_result(comment)


async def handle_resolve_comment(
    params: schemas.ResolveComment,
    connection: AdoConnection,
) -> CallToolResult:
    thread = await connection.patch(
        _repository_path(params.repository_id, "pullRequests", params.pull_request_id, "threads", params.thread_id),
        json={"status": formatters.RESOLVED_THREAD_STATUS},
    )
    logger.info(f"Resolved thread {params.thread_id} on pull request {params.pull_request_id}")
    return formatters.json_result(thread)


# ============================================================================
# Repositories and branches
# ============================================================================

async def handle_list_repos_by_project(
    params: schemas.ListReposByProject,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        f"{segments(params.project)}/_apis/git/repositories",
        params={"includeLinks": False, "includeAllUrls": False, "includeHidden": False},
    )
    repositories = (result or {}).get("value")
    if not repositories:
        return formatters.empty_result("No repositories found")

    logger.info(f"Successfully listed {len(repositories)} repositories for project {params.project}")
    return formatters.json_result([formatters.project_repository(repo) for repo in repositories])


async def handle_get_repo_by_name_or_id(
    params: schemas.GetRepoByNameOrId,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(f"{segments(params.project)}/_apis/git/repositories")
    repositories = (result or {}).get("value") or []

    wanted = params.repository_name_or_id
    repository = next((r for r in repositories if r.get("name") == wanted or r.get("id") == wanted), None)
    if repository is None:
        return formatters.empty_result(f"Repository {wanted} not found in project {params.project}")

    return formatters.json_result(repository)


async def handle_list_branches_by_repo(
    params: schemas.ListBranchesByRepo,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(_repository_path(params.repository_id, "refs"))
    branches = formatters.branch_names((result or {}).get("value"), params.top)
    if not branches:
        return formatters.empty_result("No branches found")

    return formatters.json_result(branches)


async def handle_list_my_branches_by_repo(
    params: schemas.ListMyBranchesByRepo,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(
        _repository_path(params.repository_id, "refs"),
        params={"includeMyBranches": True},
    )
    branches = (result or {}).get("value")
    if not branches:
        return formatters.empty_result("No branches found")

    return formatters.json_result(branches)


async def handle_get_branch_by_name(
    params: schemas.GetBranchByName,
    connection: AdoConnection,
) -> CallToolResult:
    result = await connection.get(_repository_path(params.repository_id, "refs"))
    refs = (result or {}).get("value") or []

    wanted = f"{formatters.HEADS_PREFIX}{params.branch_name}"
    branch = next((ref for ref in refs if ref.get("name") == wanted), None)
    if branch is None:
        return formatters.empty_result(f"Branch {params.branch_name} not found in repository {params.repository_id}")

    return formatters.json_result(branch)


def configure_repo_tools(registry: ToolRegistry) -> None:
    registry.register(
        "repo_create_pull_request",
        "Create a new pull request.",
        schemas.CreatePullRequest,
        handle_create_pull_request,
        failure_message="Error creating pull request",
    )
    registry.register(
        "repo_update_pull_request_status",
        "Update status of an existing pull request to active or abandoned.",
        schemas.UpdatePullRequestStatus,
        handle_update_pull_request_status,
        failure_message="Error updating pull request status",
    )
    registry.register(
        "repo_list_repos_by_project",
        "Retrieve a list of repositories for a given project",
        schemas.ListReposByProject,
        handle_list_repos_by_project,
        failure_message="Error fetching repositories",
    )
    registry.register(
        "repo_list_pull_requests_by_repo",
        "Retrieve a list of pull requests for a given repository.",
        schemas.ListPullRequestsByRepo,
        handle_list_pull_requests_by_repo,
        failure_message="Error fetching pull requests",
    )
    registry.register(
        "repo_list_pull_requests_by_project",
        "Retrieve a list of pull requests for a given project Id or Name.",
        schemas.ListPullRequestsByProject,
        handle_list_pull_requests_by_project,
        failure_message="Error fetching pull requests",
    )
    registry.register(
        "repo_list_pull_request_threads",
        "Retrieve a list of comment threads for a pull request.",
        schemas.ListPullRequestThreads,
        handle_list_pull_request_threads,
        failure_message="Error fetching pull request threads",
    )
    registry.register(
        "repo_list_pull_request_thread_comments",
        "Retrieve a list of comments in a pull request thread.",
        schemas.ListPullRequestThreadComments,
        handle_list_pull_request_thread_comments,
        failure_message="Error fetching thread comments",
    )
    registry.register(
        "repo_list_branches_by_repo",
        "Retrieve a list of branches for a given repository.",
        schemas.ListBranchesByRepo,
        handle_list_branches_by_repo,
        failure_message="Error fetching branches",
    )
    registry.register(
        "repo_list_my_branches_by_repo",
        "Retrieve a list of my branches for a given repository Id.",
        schemas.ListMyBranchesByRepo,
        handle_list_my_branches_by_repo,
        failure_message="Error fetching my branches",
    )
    registry.register(
        "repo_get_repo_by_name_or_id",
        "Get the repository by project and repository name or ID.",
        schemas.GetRepoByNameOrId,
        handle_get_repo_by_name_or_id,
        failure_message="Error getting repository",
    )
    registry.register(
        "repo_get_branch_by_name",
        "Get a branch by its name.",
        schemas.GetBranchByName,
        handle_get_branch_by_name,
        failure_message="Error getting branch",
    )
    registry.register(
        "repo_get_pull_request_by_id",
        "Get a pull request by its ID.",
        schemas.GetPullRequestById,
        handle_get_pull_request_by_id,
        failure_message="Error getting pull request",
    )
    registry.register(
        "repo_reply_to_comment",
        "Replies to a specific comment on a pull request.",
        schemas.ReplyToComment,
        handle_reply_to_comment,
        failure_message="Error replying to comment",
    )
    registry.register(
        "repo_resolve_comment",
        "Resolves a specific comment thread on a pull request.",
        schemas.ResolveComment,
        handle_resolve_comment,
        failure_message="Error resolving comment thread",
    )
