"""Exception types raised by the Azure DevOps MCP server.

Handlers raise; the tool registry catches at the handler boundary and turns
every failure into an error envelope, so none of these reach the MCP client
as a raw fault.
"""
from typing import Any, Optional


class AdoMcpError(Exception):
    """Base class for all server errors."""
    pass


class ConfigurationError(AdoMcpError):
    """Raised when startup parameters are missing or invalid."""
    pass


class ToolValidationError(AdoMcpError):
    """Raised when tool arguments do not match the tool's input schema."""

    def __init__(self, tool_name: str, errors: list[dict[str, Any]]):
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in err.get('loc', ())) or '(root)'}: {err.get('msg')}"
            for err in errors
        )
        super().__init__(f"Invalid arguments for {tool_name}: {details}")
        self.tool_name = tool_name
        self.errors = errors


class AuthError(AdoMcpError):
    """Raised when no credential can be obtained for the organization."""
    pass


class RemoteOperationError(AdoMcpError):
    """Raised when Azure DevOps rejects or fails a REST call."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class DuplicateToolError(AdoMcpError):
    """Raised when two tools are registered under the same identifier."""

    def __init__(self, name: str):
        super().__init__(f"Tool '{name}' is already registered")
        self.name = name
