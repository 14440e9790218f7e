"""Tests for repository, branch and pull request tools."""
import pytest

from ado_mcp.formatters import result_text

from conftest import body, payload

REPO = "repo-1"
PULL_REQUESTS = f"_apis/git/repositories/{REPO}/pullrequests"
REFS = f"_apis/git/repositories/{REPO}/refs"
CONNECTION_DATA = "_apis/connectionData"

PR = {
    "pullRequestId": 7,
    "codeReviewId": 7,
    "repository": {"name": "web"},
    "status": "active",
    "createdBy": {"displayName": "Dana", "uniqueName": "dana@contoso.com"},
    "creationDate": "2024-01-01T00:00:00Z",
    "title": "Fix login",
    "isDraft": False,
}


class TestListPullRequests:
    """Test the pull request listing tools and their identity filters."""

    @pytest.mark.asyncio
    async def test_no_identity_lookup_without_filters(self, call, fake):
        fake.add("GET", PULL_REQUESTS, {"value": [PR]})

        result = await call("repo_list_pull_requests_by_repo", {"repositoryId": REPO})

        assert payload(result)[0]["pullRequestId"] == 7
        assert fake.paths() == [PULL_REQUESTS]
        params = fake.requests[0].url.params
        assert params["searchCriteria.status"] == "active"
        assert params["searchCriteria.repositoryId"] == REPO
        assert "searchCriteria.creatorId" not in params

    @pytest.mark.asyncio
    async def test_created_by_me_looks_up_identity_first(self, call, fake):
        """One identity lookup, then one query, in that order."""
        fake.add("GET", CONNECTION_DATA, {"authenticatedUser": {"id": "user-1"}})
        fake.add("GET", PULL_REQUESTS, {"value": [PR]})

        await call("repo_list_pull_requests_by_repo", {"repositoryId": REPO, "created_by_me": True})

        assert fake.paths() == [CONNECTION_DATA, PULL_REQUESTS]
        assert fake.requests[1].url.params["searchCriteria.creatorId"] == "user-1"

    @pytest.mark.asyncio
    async def test_both_filters_share_one_lookup(self, call, fake):
        fake.add("GET", CONNECTION_DATA, {"authenticatedUser": {"id": "user-1"}})
        fake.add("GET", "P/_apis/git/pullrequests", {"value": [PR]})

        result = await call("repo_list_pull_requests_by_project", {
            "project": "P", "created_by_me": True, "i_am_reviewer": True,
        })

        assert fake.paths() == [CONNECTION_DATA, "P/_apis/git/pullrequests"]
        params = fake.requests[1].url.params
        assert params["searchCriteria.creatorId"] == "user-1"
        assert params["searchCriteria.reviewerId"] == "user-1"
        assert payload(result)[0]["repository"] == "web"

    @pytest.mark.asyncio
    async def test_identity_failure_skips_query(self, call, fake):
        fake.add("GET", CONNECTION_DATA, {"message": "Unauthorized"}, status=401)

        result = await call("repo_list_pull_requests_by_repo", {"repositoryId": REPO, "i_am_reviewer": True})

        assert result.isError is True
        assert result_text(result) == "Error fetching pull requests: Unauthorized"
        assert fake.paths() == [CONNECTION_DATA]

    @pytest.mark.asyncio
    async def test_no_pull_requests(self, call, fake):
        fake.add("GET", PULL_REQUESTS, {"value": []})

        result = await call("repo_list_pull_requests_by_repo", {"repositoryId": REPO})

        assert result.isError is True
        assert result_text(result) == "No pull requests found"


class TestPullRequestWrites:
    """Test creating pull requests and changing their status."""

    @pytest.mark.asyncio
    async def test_create_pull_request(self, call, fake):
        fake.add("POST", PULL_REQUESTS, {"pullRequestId": 8})

        result = await call("repo_create_pull_request", {
            "repositoryId": REPO,
            "sourceRefName": "refs/heads/feature",
            "targetRefName": "refs/heads/main",
            "title": "Add feature",
        })

        assert payload(result) == {"pullRequestId": 8}
        assert body(fake.requests[0]) == {
            "sourceRefName": "refs/heads/feature",
            "targetRefName": "refs/heads/main",
            "title": "Add feature",
            "isDraft": False,
        }

    @pytest.mark.asyncio
    async def test_abandon_sends_documented_constant(self, call, fake):
        fake.add("PATCH", f"{PULL_REQUESTS}/7", {"pullRequestId": 7, "status": "abandoned"})

        await call("repo_update_pull_request_status", {"repositoryId": REPO, "pullRequestId": 7, "status": "abandoned"})

        assert body(fake.requests[0]) == {"status": 2}

    @pytest.mark.asyncio
    async def test_activate_sends_documented_constant(self, call, fake):
        fake.add("PATCH", f"{PULL_REQUESTS}/7", {"pullRequestId": 7, "status": "active"})

        await call("repo_update_pull_request_status", {"repositoryId": REPO, "pullRequestId": 7, "status": "active"})

        assert body(fake.requests[0]) == {"status": 3}

    @pytest.mark.asyncio
    async def test_unknown_status_rejected_before_connecting(self, call, factory):
        result = await call("repo_update_pull_request_status", {
            "repositoryId": REPO, "pullRequestId": 7, "status": "completed",
        })

        assert result.isError is True
        assert factory.connects == 0


class TestThreads:
    """Test comment thread tools."""

    THREADS = f"P/_apis/git/repositories/{REPO}/pullRequests/7/threads"

    @pytest.mark.asyncio
    async def test_list_threads_scoped_to_project(self, call, fake):
        fake.add("GET", self.THREADS, {"value": [{"id": 1}]})

        result = await call("repo_list_pull_request_threads", {
            "repositoryId": REPO, "pullRequestId": 7, "project": "P", "iteration": 2,
        })

        assert payload(result) == [{"id": 1}]
        assert fake.requests[0].url.params["$iteration"] == "2"

    @pytest.mark.asyncio
    async def test_list_thread_comments(self, call, fake):
        fake.add("GET", f"{self.THREADS}/1/comments", {"value": [{"id": 1, "content": "LGTM"}]})

        result = await call("repo_list_pull_request_thread_comments", {
            "repositoryId": REPO, "pullRequestId": 7, "threadId": 1, "project": "P",
        })

        assert payload(result)[0]["content"] == "LGTM"

    @pytest.mark.asyncio
    async def test_reply(self, call, fake):
        fake.add("POST", f"{self.THREADS}/1/comments", {"id": 2, "content": "Done"})

        result = await call("repo_reply_to_comment", {
            "repositoryId": REPO, "pullRequestId": 7, "threadId": 1, "content": "Done", "project": "P",
        })

        assert payload(result)["id"] == 2
        assert body(fake.requests[0]) == {"content": "Done"}

    @pytest.mark.asyncio
    async def test_reply_to_missing_thread(self, call, fake):
        """A nonexistent thread yields a normalized error naming the operation."""
        fake.add(
            "POST", f"{self.THREADS}/999/comments",
            {"message": "TF401181: The pull request thread 999 does not exist."}, status=404,
        )

        result = await call("repo_reply_to_comment", {
            "repositoryId": REPO, "pullRequestId": 7, "threadId": 999, "content": "Hello", "project": "P",
        })

        assert result.isError is True
        assert result_text(result) == (
            "Error replying to comment: TF401181: The pull request thread 999 does not exist."
        )

    @pytest.mark.asyncio
    async def test_resolve_sets_fixed_status(self, call, fake):
        fake.add("PATCH", f"_apis/git/repositories/{REPO}/pullRequests/7/threads/1", {"id": 1, "status": "fixed"})

        await call("repo_resolve_comment", {"repositoryId": REPO, "pullRequestId": 7, "threadId": 1})

        assert body(fake.requests[0]) == {"status": 2}


class TestBranches:
    """Test branch listing and lookup."""

    REFS_BODY = {"value": [
        {"name": "refs/heads/main", "objectId": "a"},
        {"name": "refs/tags/v1", "objectId": "b"},
        {"name": "refs/heads/dev", "objectId": "c"},
    ]}

    @pytest.mark.asyncio
    async def test_branches_filtered_and_stripped(self, call, fake):
        fake.add("GET", REFS, self.REFS_BODY)

        assert payload(await call("repo_list_branches_by_repo", {"repositoryId": REPO})) == ["main", "dev"]
        assert payload(await call("repo_list_branches_by_repo", {"repositoryId": REPO, "top": 1})) == ["main"]

    @pytest.mark.asyncio
    async def test_only_tags(self, call, fake):
        fake.add("GET", REFS, {"value": [{"name": "refs/tags/v1"}]})

        result = await call("repo_list_branches_by_repo", {"repositoryId": REPO})

        assert result.isError is True
        assert result_text(result) == "No branches found"

    @pytest.mark.asyncio
    async def test_my_branches(self, call, fake):
        fake.add("GET", REFS, {"value": [{"name": "refs/heads/mine"}]})

        result = await call("repo_list_my_branches_by_repo", {"repositoryId": REPO})

        assert payload(result) == [{"name": "refs/heads/mine"}]
        assert fake.requests[0].url.params["includeMyBranches"] == "true"

    @pytest.mark.asyncio
    async def test_get_branch_by_name(self, call, fake):
        fake.add("GET", REFS, self.REFS_BODY)

        result = await call("repo_get_branch_by_name", {"repositoryId": REPO, "branchName": "dev"})

        assert payload(result)["objectId"] == "c"

    @pytest.mark.asyncio
    async def test_branch_not_found(self, call, fake):
        fake.add("GET", REFS, self.REFS_BODY)

        result = await call("repo_get_branch_by_name", {"repositoryId": REPO, "branchName": "v1"})

        assert result.isError is True
        assert "v1 not found" in result_text(result)


class TestRepositories:
    """Test repository listing and lookup."""

    REPOS = {"value": [
        {"id": "r1", "name": "web", "webUrl": "https://x/web", "size": 10, "_links": {}},
        {"id": "r2", "name": "api", "webUrl": "https://x/api", "size": 20, "_links": {}},
    ]}

    @pytest.mark.asyncio
    async def test_list_repos_projected(self, call, fake):
        fake.add("GET", "P/_apis/git/repositories", self.REPOS)

        repos = payload(await call("repo_list_repos_by_project", {"project": "P"}))

        assert [r["name"] for r in repos] == ["web", "api"]
        assert "_links" not in repos[0]

    @pytest.mark.asyncio
    async def test_get_repo_by_name_or_id(self, call, fake):
        fake.add("GET", "P/_apis/git/repositories", self.REPOS)

        by_name = payload(await call("repo_get_repo_by_name_or_id", {"project": "P", "repositoryNameOrId": "api"}))
        by_id = payload(await call("repo_get_repo_by_name_or_id", {"project": "P", "repositoryNameOrId": "r1"}))

        assert by_name["id"] == "r2"
        assert by_id["name"] == "web"

    @pytest.mark.asyncio
    async def test_repo_not_found(self, call, fake):
        fake.add("GET", "P/_apis/git/repositories", self.REPOS)

        result = await call("repo_get_repo_by_name_or_id", {"project": "P", "repositoryNameOrId": "docs"})

        assert result.isError is True
        assert result_text(result) == "Repository docs not found in project P"

    @pytest.mark.asyncio
    async def test_get_pull_request_by_id(self, call, fake):
        fake.add("GET", f"{PULL_REQUESTS}/7", PR)

        result = await call("repo_get_pull_request_by_id", {"repositoryId": REPO, "pullRequestId": 7})

        assert payload(result)["title"] == "Fix login"
