"""Pydantic input schemas for every MCP tool.

Each tool declares one model here. The registry validates raw arguments
against it before the handler runs, and the model's JSON schema is what
list_tools advertises as the tool's inputSchema. Field names are snake_case in
Python and camelCase on the wire, matching Azure DevOps naming.
"""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ToolInput(BaseModel):
    """Base schema for tool arguments."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


PROJECT_DESCRIPTION = "The name or ID of the Azure DevOps project."
TEAM_DESCRIPTION = "The name or ID of the Azure DevOps team."


# ============================================================================
# Core
# ============================================================================

class ListProjectTeams(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    mine: Optional[bool] = Field(None, description="If true, only return teams that the authenticated user is a member of.")
    top: Optional[int] = Field(None, ge=1, description="The maximum number of teams to return. Defaults to 100.")
    skip: Optional[int] = Field(None, ge=0, description="The number of teams to skip for pagination. Defaults to 0.")


class ListProjects(ToolInput):
    state_filter: Literal["all", "wellFormed", "createPending", "deleted"] = Field(
        "wellFormed", description="Filter projects by their state. Defaults to 'wellFormed'."
    )
    top: Optional[int] = Field(None, ge=1, description="The maximum number of projects to return. Defaults to 100.")
    skip: Optional[int] = Field(None, ge=0, description="The number of projects to skip for pagination. Defaults to 0.")
    continuation_token: Optional[int] = Field(
        None, description="Continuation token for pagination. Used to fetch the next set of results if available."
    )


# ============================================================================
# Work (iterations)
# ============================================================================

class ListTeamIterations(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    team: str = Field(..., description=TEAM_DESCRIPTION)
    timeframe: Optional[Literal["current"]] = Field(
        None, description="The timeframe for which to retrieve iterations. Currently, only 'current' is supported."
    )


class NewIteration(ToolInput):
    iteration_name: str = Field(..., min_length=1, description="The name of the iteration to create.")
    start_date: Optional[datetime] = Field(
        None, description="The start date of the iteration in ISO format (e.g., '2023-01-01T00:00:00Z'). Optional."
    )
    finish_date: Optional[datetime] = Field(
        None, description="The finish date of the iteration in ISO format (e.g., '2023-01-31T23:59:59Z'). Optional."
    )


class CreateIterations(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    iterations: list[NewIteration] = Field(
        ...,
        min_length=1,
        description="An array of iterations to create. Each iteration must have a name and can optionally have "
                    "start and finish dates in ISO format.",
    )


class IterationAssignment(ToolInput):
    identifier: str = Field(..., description="The identifier of the iteration to assign.")
    path: str = Field(..., description="The path of the iteration to assign, e.g., 'Project/Iteration'.")


class AssignIterations(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    team: str = Field(..., description=TEAM_DESCRIPTION)
    iterations: list[IterationAssignment] = Field(
        ...,
        min_length=1,
        description="An array of iterations to assign. Each iteration must have an identifier and a path.",
    )


# ============================================================================
# Repositories and pull requests
# ============================================================================

class CreatePullRequest(ToolInput):
    repository_id: str = Field(..., description="The ID of the repository where the pull request will be created.")
    source_ref_name: str = Field(
        ..., description="The source branch name for the pull request, e.g., 'refs/heads/feature-branch'."
    )
    target_ref_name: str = Field(..., description="The target branch name for the pull request, e.g., 'refs/heads/main'.")
    title: str = Field(..., min_length=1, description="The title of the pull request.")
    description: Optional[str] = Field(None, description="The description of the pull request. Optional.")
    is_draft: bool = Field(False, description="Indicates whether the pull request is a draft. Defaults to false.")


class UpdatePullRequestStatus(ToolInput):
    repository_id: str = Field(..., description="The ID of the repository where the pull request exists.")
    pull_request_id: int = Field(..., description="The ID of the pull request to be updated.")
    status: Literal["active", "abandoned"] = Field(
        ..., description="The new status of the pull request. Can be 'active' or 'abandoned'."
    )


class ListReposByProject(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)


class ListPullRequestsByRepo(ToolInput):
    repository_id: str = Field(..., description="The ID of the repository where the pull requests are located.")
    created_by_me: bool = Field(False, alias="created_by_me", description="Filter pull requests created by the current user.")
    i_am_reviewer: bool = Field(
        False, alias="i_am_reviewer", description="Filter pull requests where the current user is a reviewer."
    )


class ListPullRequestsByProject(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    created_by_me: bool = Field(False, alias="created_by_me", description="Filter pull requests created by the current user.")
    i_am_reviewer: bool = Field(
        False, alias="i_am_reviewer", description="Filter pull requests where the current user is a reviewer."
    )


class ListPullRequestThreads(ToolInput):
    repository_id: str = Field(..., description="The ID of the repository where the pull request is located.")
    pull_request_id: int = Field(..., description="The ID of the pull request for which to retrieve threads.")
    project: Optional[str] = Field(None, description="Project ID or project name (optional)")
    iteration: Optional[int] = Field(
        None, description="The iteration ID for which to retrieve threads. Optional, defaults to the latest iteration."
    )
    base_iteration: Optional[int] = Field(
        None, description="The base iteration ID for which to retrieve threads. Optional, defaults to the latest base iteration."
    )


class ListPullRequestThreadComments(ToolInput):
    repository_id: str = Field(..., description="The ID of the repository where the pull request is located.")
    pull_request_id: int = Field(..., description="The ID of the pull request for which to retrieve thread comments.")
    thread_id: int = Field(..., description="The ID of the thread for which to retrieve comments.")
    project: Optional[str] = Field(None, description="Project ID or project name (optional)")


class ListBranchesByRepo(ToolInput):
    repository_id: str = Field(..., description="The ID of the repository where the branches are located.")
    top: int = Field(100, ge=0, description="The maximum number of branches to return. Defaults to 100.")


class ListMyBranchesByRepo(ToolInput):
    repository_id: str = Field(..., description="The ID of the repository where the branches are located.")


class GetRepoByNameOrId(ToolInput):
    project: str = Field(..., description="Project name or ID where the repository is located.")
    repository_name_or_id: str = Field(..., description="Repository name or ID.")


class GetBranchByName(ToolInput):
    repository_id: str = Field(..., description="The ID of the repository where the branch is located.")
    branch_name: str = Field(..., description="The name of the branch to retrieve, e.g., 'main' or 'feature-branch'.")


class GetPullRequestById(ToolInput):
    repository_id: str = Field(..., description="The ID of the repository where the pull request is located.")
    pull_request_id: int = Field(..., description="The ID of the pull request to retrieve.")


class ReplyToComment(ToolInput):
    repository_id: str = Field(..., description="The ID of the repository where the pull request is located.")
    pull_request_id: int = Field(..., description="The ID of the pull request where the comment thread exists.")
    thread_id: int = Field(..., description="The ID of the thread to which the comment will be added.")
    content: str = Field(..., min_length=1, description="The content of the comment to be added.")
    project: Optional[str] = Field(None, description="Project ID or project name (optional)")


class ResolveComment(ToolInput):
    repository_id: str = Field(..., description="The ID of the repository where the pull request is located.")
    pull_request_id: int = Field(..., description="The ID of the pull request where the comment thread exists.")
    thread_id: int = Field(..., description="The ID of the thread to be resolved.")


# ============================================================================
# Work items
# ============================================================================

class ListBacklogs(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    team: str = Field(..., description=TEAM_DESCRIPTION)


class MyWorkItems(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    type: Literal["assignedtome", "myactivity"] = Field(
        "assignedtome", description="The type of work items to retrieve. Defaults to 'assignedtome'."
    )
    top: int = Field(50, ge=1, description="The maximum number of work items to return. Defaults to 50.")
    include_completed: bool = Field(False, description="Whether to include completed work items. Defaults to false.")


class GetWorkItem(ToolInput):
    id: int = Field(..., description="The ID of the work item to retrieve.")
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    fields: Optional[list[str]] = Field(None, description="Optional list of fields to include in the response.")
    as_of: Optional[datetime] = Field(None, description="Optional date to retrieve the work item as of a specific time.")
    expand: Optional[Literal["all", "fields", "links", "none", "relations"]] = Field(
        None, description="Optional expand parameter to include additional details."
    )


class GetWorkItemsBatchByIds(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    ids: list[int] = Field(..., min_length=1, max_length=200, description="The IDs of the work items to retrieve.")
    fields: Optional[list[str]] = Field(None, description="Optional list of fields to include in the response.")


class CreateWorkItem(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    work_item_type: str = Field(..., description="The type of work item to create, e.g., 'Task', 'Bug', etc.")
    fields: dict[str, Any] = Field(
        ...,
        min_length=1,
        description="A record of field reference names and values to set, e.g. {'System.Title': 'New task'}.",
    )


class WorkItemFieldUpdate(ToolInput):
    op: Literal["add", "replace", "remove"] = Field("add", description="The JSON patch operation. Defaults to 'add'.")
    path: str = Field(..., description="The path of the field to update, e.g., '/fields/System.Title'.")
    value: Optional[Any] = Field(None, description="The new value for the field. Omit for 'remove'.")


class UpdateWorkItem(ToolInput):
    id: int = Field(..., description="The ID of the work item to update.")
    updates: list[WorkItemFieldUpdate] = Field(..., min_length=1, description="An array of field updates to apply.")


class AddChildWorkItem(ToolInput):
    parent_id: int = Field(..., description="The ID of the parent work item.")
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    work_item_type: str = Field(..., description="The type of the child work item to create.")
    title: str = Field(..., min_length=1, description="The title of the child work item.")
    description: str = Field("", description="The description of the child work item.")
    area_path: Optional[str] = Field(None, description="Optional area path for the child work item.")
    iteration_path: Optional[str] = Field(None, description="Optional iteration path for the child work item.")


class ListWorkItemComments(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    work_item_id: int = Field(..., description="The ID of the work item to retrieve comments for.")
    top: int = Field(50, ge=1, description="Optional number of comments to retrieve. Defaults to 50.")


class AddWorkItemComment(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    work_item_id: int = Field(..., description="The ID of the work item to add a comment to.")
    comment: str = Field(..., min_length=1, description="The text of the comment to add to the work item.")


class GetWorkItemsForIteration(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    team: Optional[str] = Field(None, description="The name or ID of the Azure DevOps team. Optional.")
    iteration_id: str = Field(..., description="The ID of the iteration to retrieve work items for.")


# ============================================================================
# Builds
# ============================================================================

class GetBuildDefinitions(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    repository_id: Optional[str] = Field(None, description="Repository ID to filter build definitions")
    repository_type: Optional[Literal["TfsGit", "GitHub", "BitbucketCloud"]] = Field(
        None, description="Type of repository to filter build definitions"
    )
    name: Optional[str] = Field(None, description="Name of the build definition to filter")
    top: Optional[int] = Field(None, ge=1, description="Maximum number of build definitions to return")
    include_latest_builds: bool = Field(False, description="Whether to include the latest builds for each definition")


class GetBuilds(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    definitions: Optional[list[int]] = Field(None, description="Array of build definition IDs to filter builds")
    branch_name: Optional[str] = Field(None, description="Branch name to filter builds")
    requested_for: Optional[str] = Field(None, description="User ID or name who requested the build")
    status_filter: Optional[
        Literal["none", "inProgress", "completed", "cancelling", "postponed", "notStarted", "all"]
    ] = Field(None, description="Status filter for the builds")
    result_filter: Optional[Literal["none", "succeeded", "partiallySucceeded", "failed", "canceled"]] = Field(
        None, description="Result filter for the builds"
    )
    top: int = Field(20, ge=1, description="Maximum number of builds to return. Defaults to 20.")


class GetBuildLog(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    build_id: int = Field(..., description="ID of the build to get the log for")


class GetBuildLogById(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    build_id: int = Field(..., description="ID of the build to get the log for")
    log_id: int = Field(..., description="ID of the log to retrieve")
    start_line: Optional[int] = Field(None, ge=0, description="Starting line number for the log content")
    end_line: Optional[int] = Field(None, ge=0, description="Ending line number for the log content")


class GetBuildChanges(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    build_id: int = Field(..., description="ID of the build to get changes for")
    top: int = Field(100, ge=1, description="Number of changes to retrieve. Defaults to 100.")
    include_source_change: bool = Field(False, description="Whether to include the source change details")


class RunBuild(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    definition_id: int = Field(..., description="ID of the build definition to run")
    source_branch: Optional[str] = Field(None, description="Source branch to run the build from. Defaults to the definition's default branch.")
    parameters: Optional[dict[str, str]] = Field(None, description="Custom build parameters as key-value pairs")


class GetBuildStatus(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    build_id: int = Field(..., description="ID of the build to get the status for")


# ============================================================================
# Releases
# ============================================================================

class GetReleaseDefinitions(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    search_text: Optional[str] = Field(None, description="Search text to filter release definitions")
    path: Optional[str] = Field(None, description="Folder path of the release definitions")
    is_deleted: bool = Field(False, description="Whether to return deleted release definitions. Defaults to false.")
    top: Optional[int] = Field(None, ge=1, description="Maximum number of release definitions to return")


class GetReleases(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    definition_id: Optional[int] = Field(None, description="ID of the release definition to filter releases")
    search_text: Optional[str] = Field(None, description="Search text to filter releases")
    status_filter: Optional[Literal["undefined", "draft", "active", "abandoned"]] = Field(
        None, description="Status of the releases to filter"
    )
    created_by: Optional[str] = Field(None, description="User ID or name who created the release")
    min_created_time: Optional[datetime] = Field(None, description="Minimum created time for releases")
    max_created_time: Optional[datetime] = Field(None, description="Maximum created time for releases")
    top: int = Field(50, ge=1, description="Number of releases to return. Defaults to 50.")


# ============================================================================
# Wiki
# ============================================================================

class ListWikis(ToolInput):
    project: Optional[str] = Field(
        None, description="The project name or ID to filter wikis. If not provided, all wikis in the organization will be returned."
    )


class GetWiki(ToolInput):
    wiki_identifier: str = Field(..., description="The unique identifier of the wiki.")
    project: Optional[str] = Field(None, description="The project name or ID where the wiki is located.")


class ListWikiPages(ToolInput):
    wiki_identifier: str = Field(..., description="The unique identifier of the wiki.")
    project: str = Field(..., description="The project name or ID where the wiki is located.")
    top: int = Field(20, ge=1, description="The maximum number of pages to return. Defaults to 20.")
    continuation_token: Optional[str] = Field(None, description="Token for pagination to retrieve the next set of pages.")
    page_views_for_days: Optional[int] = Field(None, ge=0, description="Number of days to retrieve page views for.")


class GetWikiPageContent(ToolInput):
    wiki_identifier: str = Field(..., description="The unique identifier of the wiki.")
    project: str = Field(..., description="The project name or ID where the wiki is located.")
    path: str = Field("/", description="The path of the wiki page to retrieve content for.")


class CreateOrUpdateWikiPage(ToolInput):
    wiki_identifier: str = Field(..., description="The unique identifier or name of the wiki.")
    project: str = Field(..., description="The project name or ID where the wiki is located.")
    path: str = Field(..., min_length=1, description="The path of the wiki page, e.g. '/Home' or '/Docs/Setup'.")
    content: str = Field(..., description="The markdown content of the wiki page.")
    comment: Optional[str] = Field(None, description="Optional comment recorded with the page revision.")


# ============================================================================
# Test plans
# ============================================================================

class ListTestPlans(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    filter_active_plans: bool = Field(True, description="Filter to include only active test plans. Defaults to true.")
    include_plan_details: bool = Field(False, description="Include detailed information about each test plan.")
    continuation_token: Optional[str] = Field(None, description="Token to continue fetching test plans from a previous request.")


class CreateTestPlan(ToolInput):
    project: str = Field(..., description="The unique identifier (ID or name) of the Azure DevOps project where the test plan will be created.")
    name: str = Field(..., min_length=1, description="The name of the test plan to be created.")
    iteration: str = Field(..., description="The iteration path for the test plan")
    description: Optional[str] = Field(None, description="The description of the test plan")
    start_date: Optional[datetime] = Field(None, description="The start date of the test plan")
    end_date: Optional[datetime] = Field(None, description="The end date of the test plan")
    area_path: Optional[str] = Field(None, description="The area path for the test plan")


class CreateTestCase(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    title: str = Field(..., min_length=1, description="The title of the test case.")
    steps: Optional[str] = Field(
        None, description="The steps to reproduce the test case, one per line as 'action|expected result'."
    )
    priority: Optional[int] = Field(None, ge=1, le=4, description="The priority of the test case (1-4).")
    area_path: Optional[str] = Field(None, description="The area path for the test case.")
    iteration_path: Optional[str] = Field(None, description="The iteration path for the test case.")


class ListTestCases(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    plan_id: int = Field(..., description="The ID of the test plan.")
    suite_id: int = Field(..., description="The ID of the test suite.")


class AddTestCasesToSuite(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    plan_id: int = Field(..., description="The ID of the test plan.")
    suite_id: int = Field(..., description="The ID of the test suite.")
    test_case_ids: list[int] = Field(..., min_length=1, description="The IDs of the test cases to add to the suite.")


class ShowTestResultsFromBuildId(ToolInput):
    project: str = Field(..., description=PROJECT_DESCRIPTION)
    build_id: int = Field(..., description="The ID of the build.")


# ============================================================================
# Search
# ============================================================================

class SearchCode(ToolInput):
    search_text: str = Field(..., min_length=1, description="Keywords to search for in code repositories")
    project: Optional[list[str]] = Field(None, description="Filter by projects")
    repository: Optional[list[str]] = Field(None, description="Filter by repositories")
    path: Optional[list[str]] = Field(None, description="Filter by paths")
    branch: Optional[list[str]] = Field(None, description="Filter by branches")
    include_facets: bool = Field(False, description="Include facets in the search results")
    skip: int = Field(0, ge=0, description="Number of results to skip")
    top: int = Field(5, ge=1, description="Maximum number of results to return")


class SearchWiki(ToolInput):
    search_text: str = Field(..., min_length=1, description="Keywords to search for wiki pages")
    project: Optional[list[str]] = Field(None, description="Filter by projects")
    wiki: Optional[list[str]] = Field(None, description="Filter by wiki names")
    include_facets: bool = Field(False, description="Include facets in the search results")
    skip: int = Field(0, ge=0, description="Number of results to skip")
    top: int = Field(10, ge=1, description="Maximum number of results to return")


class SearchWorkItem(ToolInput):
    search_text: str = Field(..., min_length=1, description="Search text to find in work items")
    project: Optional[list[str]] = Field(None, description="Filter by projects")
    area_path: Optional[list[str]] = Field(None, description="Filter by area paths")
    work_item_type: Optional[list[str]] = Field(None, description="Filter by work item types")
    state: Optional[list[str]] = Field(None, description="Filter by work item states")
    assigned_to: Optional[list[str]] = Field(None, description="Filter by assigned to users")
    include_facets: bool = Field(False, description="Include facets in the search results")
    skip: int = Field(0, ge=0, description="Number of results to skip")
    top: int = Field(10, ge=1, description="Number of results to return")
