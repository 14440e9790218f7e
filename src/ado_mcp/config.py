"""Startup configuration for the Azure DevOps MCP server.

Settings are built once at startup and handed to the connection factory and
every tool registrar. The model is frozen; nothing mutates it afterwards.
"""
import os
from typing import Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from .errors import ConfigurationError

USAGE = "Usage: ado-mcp <organization_name> [ado_pat] [--debug]"


class Settings(BaseModel):
    """Immutable process-wide configuration."""

    organization: str = Field(..., description="Azure DevOps organization name")
    pat: Optional[SecretStr] = Field(None, description="Personal Access Token; Azure Identity is used when absent")
    api_version: str = Field("7.1", description="Default REST api-version")
    timeout: float = Field(30.0, gt=0, description="HTTP timeout in seconds")
    debug: bool = False
    log_level: str = "INFO"

    model_config = ConfigDict(frozen=True)

    @field_validator("organization")
    @classmethod
    def _organization_not_blank(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value:
            raise ValueError("organization must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def org_url(self) -> str:
        return f"https://dev.azure.com/{self.organization}"

    @property
    def search_url(self) -> str:
        return f"https://almsearch.dev.azure.com/{self.organization}"

    @property
    def release_url(self) -> str:
        return f"https://vsrm.dev.azure.com/{self.organization}"

    @classmethod
    def from_args(
        cls,
        argv: Sequence[str],
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """Build settings from command-line arguments.

        Positional arguments are ``<organization_name> [ado_pat]``; ``--debug``
        may appear anywhere. ADO_ORGANIZATION, ADO_PAT and ADO_MCP_LOG_LEVEL
        fill in whatever the command line leaves out.
        """
        environ = os.environ if environ is None else environ
        debug = "--debug" in argv
        positional = [arg for arg in argv if not arg.startswith("--")]

        organization = positional[0] if positional else environ.get("ADO_ORGANIZATION")
        pat = positional[1] if len(positional) > 1 else environ.get("ADO_PAT")

        if not organization or not organization.strip():
            raise ConfigurationError(USAGE)

        log_level = "DEBUG" if debug else environ.get("ADO_MCP_LOG_LEVEL", "INFO")
        try:
            return cls(organization=organization, pat=pat or None, debug=debug, log_level=log_level)
        except ValidationError as e:
            raise ConfigurationError(f"{USAGE}\n{e}") from e
