"""Authenticated REST connections to an Azure DevOps organization.

A connection is built fresh for every tool invocation and closed when the
invocation ends; nothing is pooled or shared between calls.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Literal, Optional
from urllib.parse import quote

import httpx

from . import __version__
from .auth import CredentialResolver
from .config import Settings
from .errors import RemoteOperationError

logger = logging.getLogger("ado-mcp.connection")

PRODUCT_NAME = "AzureDevOps.MCP"
USER_AGENT = f"{PRODUCT_NAME}/{__version__} (ado-mcp; python-httpx/{httpx.__version__})"

Area = Literal["core", "search", "release"]


def segments(*parts: Any) -> str:
    """Join URL path segments, percent-encoding each one.

    Project, team, repository and wiki names may contain spaces or slashes.
    """
    return "/".join(quote(str(part), safe="") for part in parts)


class AdoConnection:
    """Client handle bound to one organization and one credential."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self._settings = settings
        self._client = client
        self._base_urls = {
            "core": settings.org_url,
            "search": settings.search_url,
            "release": settings.release_url,
        }

    @property
    def organization(self) -> str:
        return self._settings.organization

    def url(self, path: str, area: Area = "core") -> str:
        return f"{self._base_urls[area]}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        area: Area = "core",
        params: Optional[dict] = None,
        json: Any = None,
        api_version: Optional[str] = None,
        headers: Optional[dict] = None,
    ) -> Any:
        """Issue one REST call and decode the response.

        Returns the decoded JSON body, the raw text for non-JSON bodies, or
        None for 204. Raises RemoteOperationError for any status >= 400.
        """
        query = {k: v for k, v in (params or {}).items() if v is not None}
        query["api-version"] = api_version or self._settings.api_version
        url = self.url(path, area)

        logger.debug(f"{method} {url} params={query}")
        response = await self._client.request(method, url, params=query, json=json, headers=headers)

        if response.status_code >= 400:
            raise RemoteOperationError(
                _error_message(response),
                status_code=response.status_code,
                url=str(response.request.url),
            )
        if response.status_code == 204 or not response.content:
            return None
        if "json" in response.headers.get("content-type", ""):
            return response.json()
        return response.text

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def head_etag(self, path: str, *, params: Optional[dict] = None, api_version: Optional[str] = None) -> Optional[str]:
        """Return the ETag of a resource, or None if it does not exist."""
        query = {k: v for k, v in (params or {}).items() if v is not None}
        query["api-version"] = api_version or self._settings.api_version
        response = await self._client.request("GET", self.url(path), params=query)
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise RemoteOperationError(
                _error_message(response),
                status_code=response.status_code,
                url=str(response.request.url),
            )
        return response.headers.get("etag")

    async def current_user_id(self) -> str:
        """Look up the id of the authenticated identity."""
        data = await self.get("_apis/connectionData", api_version="7.1-preview.1")
        user_id = (data or {}).get("authenticatedUser", {}).get("id")
        if not user_id:
            raise RemoteOperationError("Could not determine the authenticated user")
        return user_id


def _error_message(response: httpx.Response) -> str:
    """Pull the service diagnostic out of an error response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    text = response.text.strip()
    return text or f"HTTP {response.status_code} {response.reason_phrase}"


class ConnectionFactory:
    """Build authenticated connections for the configured organization.

    Args:
        settings: Process-wide configuration.
        resolver: Credential resolver consulted on every connect.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        settings: Settings,
        resolver: CredentialResolver,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._resolver = resolver
        self._transport = transport

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[AdoConnection]:
        credential = await self._resolver.resolve()
        headers = {
            "Authorization": credential.authorization_header(),
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            "X-TFS-FedAuthRedirect": "Suppress",
            "X-VSS-ReauthenticationAction": "Suppress",
        }
        async with httpx.AsyncClient(
            headers=headers,
            timeout=self.settings.timeout,
            transport=self._transport,
        ) as client:
            yield AdoConnection(self.settings, client)
