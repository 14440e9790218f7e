"""Credential resolution for Azure DevOps.

Two branches: a static Personal Access Token supplied at startup, or a bearer
token requested from Azure Identity for the Azure DevOps resource. Bearer
tokens are not cached; every resolve asks the identity provider again.
"""
import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from azure.core.exceptions import ClientAuthenticationError
from azure.identity import DefaultAzureCredential

from .errors import AuthError

logger = logging.getLogger("ado-mcp.auth")

# Azure DevOps resource id; the same for every organization
ADO_TOKEN_SCOPE = "499b84ac-1321-427f-aa17-267ca6975798/.default"


@dataclass(frozen=True)
class Credential:
    """One active credential: a PAT or a short-lived bearer token."""

    kind: Literal["pat", "bearer"]
    secret: str

    def authorization_header(self) -> str:
        if self.kind == "pat":
            encoded = base64.b64encode(f":{self.secret}".encode()).decode()
            return f"Basic {encoded}"
        return f"Bearer {self.secret}"

    def __repr__(self) -> str:
        return f"Credential(kind={self.kind!r}, secret='***')"


class CredentialResolver:
    """Resolve the credential used for every connection.

    Args:
        pat: Static Personal Access Token. When set it is returned as-is.
        credential_factory: Zero-argument callable returning an Azure Identity
            token credential (anything with ``get_token(scope)``).
    """

    def __init__(
        self,
        pat: Optional[str] = None,
        credential_factory: Callable[[], Any] = DefaultAzureCredential,
    ):
        self._pat = pat
        self._credential_factory = credential_factory

    @property
    def uses_pat(self) -> bool:
        return bool(self._pat)

    async def resolve(self) -> Credential:
        if self._pat:
            return Credential(kind="pat", secret=self._pat)
        token = await asyncio.to_thread(self._fetch_token)
        return Credential(kind="bearer", secret=token)

    def _fetch_token(self) -> str:
        credential = self._credential_factory()
        try:
            access_token = credential.get_token(ADO_TOKEN_SCOPE)
        except ClientAuthenticationError as e:
            logger.error(f"Azure Identity could not issue a token: {e}")
            raise AuthError(f"Failed to acquire Azure DevOps token: {e.message or e}") from e
        finally:
            close = getattr(credential, "close", None)
            if close is not None:
                close()
        logger.debug("Acquired Azure DevOps bearer token from Azure Identity")
        return access_token.token
