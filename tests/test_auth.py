"""Tests for credential resolution."""
import base64

import pytest
from azure.core.credentials import AccessToken
from azure.core.exceptions import ClientAuthenticationError

from ado_mcp.auth import ADO_TOKEN_SCOPE, Credential, CredentialResolver
from ado_mcp.errors import AuthError


class FakeTokenCredential:
    """Stand-in for an Azure Identity credential."""

    def __init__(self, token="bearer-token", error=None):
        self.token = token
        self.error = error
        self.scopes = None
        self.closed = False

    def get_token(self, *scopes, **kwargs):
        self.scopes = scopes
        if self.error is not None:
            raise self.error
        return AccessToken(self.token, 0)

    def close(self):
        self.closed = True


class TestCredential:
    """Test Authorization header rendering."""

    def test_pat_uses_basic_auth_with_empty_user(self):
        credential = Credential(kind="pat", secret="secret")
        expected = base64.b64encode(b":secret").decode()

        assert credential.authorization_header() == f"Basic {expected}"

    def test_bearer_header(self):
        credential = Credential(kind="bearer", secret="tok")
        assert credential.authorization_header() == "Bearer tok"

    def test_repr_masks_secret(self):
        text = repr(Credential(kind="pat", secret="s3cr3t-pat"))

        assert "s3cr3t-pat" not in text
        assert "'***'" in text


class TestCredentialResolver:
    """Test the PAT and Azure Identity branches."""

    @pytest.mark.asyncio
    async def test_pat_returned_without_identity_call(self):
        """A static PAT is used as-is; the identity provider is never built."""
        def factory():
            raise AssertionError("identity provider should not be used")

        resolver = CredentialResolver(pat="secret", credential_factory=factory)
        credential = await resolver.resolve()

        assert resolver.uses_pat is True
        assert credential == Credential(kind="pat", secret="secret")

    @pytest.mark.asyncio
    async def test_bearer_token_for_devops_scope(self):
        fake = FakeTokenCredential()
        resolver = CredentialResolver(credential_factory=lambda: fake)

        credential = await resolver.resolve()

        assert resolver.uses_pat is False
        assert credential == Credential(kind="bearer", secret="bearer-token")
        assert fake.scopes == (ADO_TOKEN_SCOPE,)
        assert fake.closed is True

    @pytest.mark.asyncio
    async def test_token_fetched_on_every_resolve(self):
        """Bearer tokens are not cached between invocations."""
        built = []

        def factory():
            credential = FakeTokenCredential(token=f"tok-{len(built)}")
            built.append(credential)
            return credential

        resolver = CredentialResolver(credential_factory=factory)
        first = await resolver.resolve()
        second = await resolver.resolve()

        assert len(built) == 2
        assert first.secret == "tok-0"
        assert second.secret == "tok-1"

    @pytest.mark.asyncio
    async def test_identity_failure_becomes_auth_error(self):
        fake = FakeTokenCredential(error=ClientAuthenticationError(message="no identity available"))
        resolver = CredentialResolver(credential_factory=lambda: fake)

        with pytest.raises(AuthError) as exc_info:
            await resolver.resolve()

        assert "no identity available" in str(exc_info.value)
        assert fake.closed is True
