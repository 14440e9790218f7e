"""Tests for server assembly and properties that hold across every tool."""
import base64

import pytest
from mcp.types import CallToolRequest, CallToolRequestParams, ListToolsRequest

from ado_mcp import server
from ado_mcp.config import USAGE, Settings
from ado_mcp.errors import RemoteOperationError
from ado_mcp.formatters import result_text
from ado_mcp.registry import ToolRegistry
from ado_mcp.tools import REGISTRARS, configure_all_tools

from conftest import ORGANIZATION, PAT

# Tool catalog for parametrization; registration never touches the factory.
CATALOG = configure_all_tools(ToolRegistry(None))

GROUP_PREFIXES = ["core_", "work_", "build_", "repo_", "wit_", "release_", "wiki_", "testplan_", "search_"]

# Minimal valid arguments for every tool that returns a list.
LIST_TOOLS = {
    "core_list_project_teams": {"project": "P"},
    "core_list_projects": {},
    "work_list_team_iterations": {"project": "P", "team": "T"},
    "repo_list_repos_by_project": {"project": "P"},
    "repo_list_pull_requests_by_repo": {"repositoryId": "r"},
    "repo_list_pull_requests_by_project": {"project": "P"},
    "repo_list_branches_by_repo": {"repositoryId": "r"},
    "repo_list_my_branches_by_repo": {"repositoryId": "r"},
    "repo_list_pull_request_threads": {"repositoryId": "r", "pullRequestId": 1},
    "repo_list_pull_request_thread_comments": {"repositoryId": "r", "pullRequestId": 1, "threadId": 1},
    "wit_list_backlogs": {"project": "P", "team": "T"},
    "wit_my_work_items": {"project": "P"},
    "wit_get_work_items_batch_by_ids": {"project": "P", "ids": [1]},
    "wit_list_work_item_comments": {"project": "P", "workItemId": 1},
    "wit_get_work_items_for_iteration": {"project": "P", "iterationId": "i"},
    "build_get_definitions": {"project": "P"},
    "build_get_builds": {"project": "P"},
    "build_get_log": {"project": "P", "buildId": 1},
    "build_get_changes": {"project": "P", "buildId": 1},
    "release_get_definitions": {"project": "P"},
    "release_get_releases": {"project": "P"},
    "wiki_list_wikis": {},
    "wiki_list_pages": {"wikiIdentifier": "w", "project": "P"},
    "testplan_list_test_plans": {"project": "P"},
    "testplan_list_test_cases": {"project": "P", "planId": 1, "suiteId": 1},
    "search_code": {"searchText": "x"},
    "search_wiki": {"searchText": "x"},
    "search_workitem": {"searchText": "x"},
}

EMPTY_UPSTREAM = {"count": 0, "value": [], "results": [], "comments": [], "workItemRelations": []}


@pytest.fixture
def app_and_registry(settings, fake):
    return server.create_server(settings, transport=fake.transport)


class TestCreateServer:
    """Test server assembly."""

    def test_nine_groups_registered_in_order(self, app_and_registry):
        _, registry = app_and_registry
        names = registry.names()

        assert len(REGISTRARS) == 9
        first_seen = []
        for name in names:
            prefix = next(p for p in GROUP_PREFIXES if name.startswith(p))
            if prefix not in first_seen:
                first_seen.append(prefix)
        assert first_seen == GROUP_PREFIXES

    def test_every_tool_has_schema_and_description(self, app_and_registry):
        _, registry = app_and_registry

        for tool in registry.list_tools():
            assert tool.description
            assert tool.inputSchema["type"] == "object"

    @pytest.mark.asyncio
    async def test_list_tools_handler(self, app_and_registry):
        app, registry = app_and_registry

        response = await app.request_handlers[ListToolsRequest](ListToolsRequest(method="tools/list"))

        assert [tool.name for tool in response.root.tools] == registry.names()

    @pytest.mark.asyncio
    async def test_call_tool_handler_routes_through_registry(self, app_and_registry, fake):
        app, _ = app_and_registry
        fake.add("GET", "_apis/projects", {"value": [{"name": "Alpha"}]})

        request = CallToolRequest(
            method="tools/call",
            params=CallToolRequestParams(name="core_list_projects", arguments={}),
        )
        response = await app.request_handlers[CallToolRequest](request)

        assert response.root.isError is False
        assert "Alpha" in result_text(response.root)

    @pytest.mark.asyncio
    async def test_pat_sent_as_basic_auth(self, app_and_registry, fake):
        """The configured PAT reaches the wire unmasked."""
        _, registry = app_and_registry
        fake.add("GET", "_apis/projects", {"value": [{"name": "Alpha"}]})

        await registry.call("core_list_projects", {})

        expected = base64.b64encode(f":{PAT}".encode()).decode()
        assert fake.requests[0].headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_call_tool_handler_reports_validation(self, app_and_registry, fake):
        """The registry, not the SDK, reports invalid arguments."""
        app, _ = app_and_registry

        request = CallToolRequest(
            method="tools/call",
            params=CallToolRequestParams(name="core_list_project_teams", arguments={}),
        )
        response = await app.request_handlers[CallToolRequest](request)

        assert response.root.isError is True
        assert result_text(response.root).startswith("Invalid arguments for core_list_project_teams")
        assert fake.requests == []


class TestCheckConnection:
    """Test the debug-mode connection check."""

    @pytest.mark.asyncio
    async def test_counts_projects(self, factory, fake):
        fake.add("GET", "_apis/projects", {"value": [{"name": "Alpha"}, {"name": "Beta"}]})

        assert await server.check_connection(factory) == 2

    @pytest.mark.asyncio
    async def test_failure_propagates(self, factory, fake):
        fake.add("GET", "_apis/projects", {"message": "Access denied"}, status=401)

        with pytest.raises(RemoteOperationError, match="Access denied"):
            await server.check_connection(factory)


class TestMain:
    """Test the console entry point."""

    def test_usage_on_missing_organization(self, monkeypatch, capsys):
        monkeypatch.delenv("ADO_ORGANIZATION", raising=False)

        with pytest.raises(SystemExit) as exc_info:
            server.main([])

        assert exc_info.value.code == 1
        assert USAGE in capsys.readouterr().err

    def test_runs_with_parsed_settings(self, monkeypatch):
        monkeypatch.delenv("ADO_MCP_LOG_LEVEL", raising=False)
        seen = []

        async def fake_serve(settings):
            seen.append(settings)

        monkeypatch.setattr(server, "serve", fake_serve)
        monkeypatch.setattr(server, "configure_logging", lambda level: None)

        server.main([ORGANIZATION, PAT])

        assert seen == [Settings(organization=ORGANIZATION, pat=PAT)]


class TestEveryTool:
    """Properties that hold for the whole tool catalog."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", CATALOG.names())
    async def test_malformed_arguments_never_connect(self, name, call, factory, fake):
        result = await call(name, ["not", "an", "object"])

        assert result.isError is True
        assert result_text(result).startswith(f"Invalid arguments for {name}")
        assert factory.connects == 0
        assert fake.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name", [d.name for d in CATALOG if d.input_schema.get("required")]
    )
    async def test_missing_required_arguments_never_connect(self, name, call, factory):
        result = await call(name, {})

        assert result.isError is True
        assert factory.connects == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", sorted(LIST_TOOLS))
    async def test_empty_upstream_is_flagged(self, name, call, fake):
        fake.default = EMPTY_UPSTREAM

        result = await call(name, LIST_TOOLS[name])

        assert result.isError is True
        assert len(result.content) == 1
        assert result_text(result).strip()
        assert not result_text(result).startswith("Error")

    def test_list_tool_catalog_is_current(self):
        assert set(LIST_TOOLS) <= set(CATALOG.names())
