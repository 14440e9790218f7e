"""Shared fixtures: an in-memory Azure DevOps and a registry wired to it."""
import json
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from ado_mcp.auth import CredentialResolver
from ado_mcp.config import Settings
from ado_mcp.connection import ConnectionFactory
from ado_mcp.formatters import result_text
from ado_mcp.registry import ToolRegistry
from ado_mcp.tools import configure_all_tools

ORGANIZATION = "contoso"
PAT = "secret"

Responder = Callable[[httpx.Request], httpx.Response]


class FakeAzureDevOps:
    """Route table standing in for the Azure DevOps REST API.

    Routes match on method, host and URL-decoded path (relative to the
    organization). Every request is recorded in order. Unmatched requests get
    ``default`` when set, otherwise a 404 with a service-style message.
    """

    def __init__(self):
        self.routes: list[tuple[str, str, str, Responder]] = []
        self.requests: list[httpx.Request] = []
        self.default: Optional[Any] = None

    def add(
        self,
        method: str,
        path: str,
        json: Any = None,
        *,
        status: int = 200,
        text: Optional[str] = None,
        headers: Optional[dict] = None,
        host: str = "dev.azure.com",
        responder: Optional[Responder] = None,
    ) -> None:
        if responder is None:
            def responder(request: httpx.Request) -> httpx.Response:
                if text is not None:
                    return httpx.Response(status, text=text, headers=headers)
                if json is None:
                    return httpx.Response(status, headers=headers)
                return httpx.Response(status, json=json, headers=headers)
        self.routes.append((method, host, f"/{ORGANIZATION}/{path}", responder))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, host, path, responder in self.routes:
            if request.method == method and request.url.host == host and request.url.path == path:
                return responder(request)
        if self.default is not None:
            return httpx.Response(200, json=self.default)
        return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        """Request paths without the organization prefix, in order."""
        prefix = f"/{ORGANIZATION}/"
        return [r.url.path[len(prefix):] for r in self.requests]


class CountingConnectionFactory(ConnectionFactory):
    """ConnectionFactory that counts how many connections were opened."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.connects = 0

    @asynccontextmanager
    async def connect(self):
        self.connects += 1
        async with super().connect() as connection:
            yield connection


def body(request: httpx.Request) -> Any:
    return json.loads(request.content)


def payload(result) -> Any:
    """Decode the JSON text of a successful tool result."""
    assert result.isError is False, result_text(result)
    return json.loads(result_text(result))


@pytest.fixture
def settings() -> Settings:
    return Settings(organization=ORGANIZATION, pat=PAT)


@pytest.fixture
def fake() -> FakeAzureDevOps:
    return FakeAzureDevOps()


@pytest.fixture
def factory(settings, fake) -> CountingConnectionFactory:
    return CountingConnectionFactory(settings, CredentialResolver(pat=PAT), transport=fake.transport)


@pytest.fixture
def registry(factory) -> ToolRegistry:
    return configure_all_tools(ToolRegistry(factory))


@pytest.fixture
def call(registry) -> Callable:
    """Invoke a tool through the registry, as the MCP server does."""
    async def _call(name: str, arguments: Union[dict, None] = None):
        return await registry.call(name, arguments)
    return _call
