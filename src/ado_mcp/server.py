"""Azure DevOps MCP Server - expose an Azure DevOps organization to AI assistants."""
import asyncio
import logging
import sys
from typing import Any, Optional, Sequence

import httpx
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, Tool

from . import __version__
from .auth import CredentialResolver
from .config import Settings
from .connection import ConnectionFactory
from .errors import ConfigurationError
from .registry import ToolRegistry
from .tools import configure_all_tools

SERVER_NAME = "Azure DevOps MCP Server"

logger = logging.getLogger("ado-mcp")


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr; stdout carries the MCP protocol."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
        force=True
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_server(
    settings: Settings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> tuple[Server, ToolRegistry]:
    """Build the MCP server with every tool group registered."""
    resolver = CredentialResolver(pat=settings.pat.get_secret_value() if settings.pat else None)
    factory = ConnectionFactory(settings, resolver, transport=transport)
    registry = configure_all_tools(ToolRegistry(factory))

    app = Server(SERVER_NAME, version=__version__)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List available Azure DevOps tools."""
        return registry.list_tools()

    # Arguments are validated by the registry against the tool's pydantic model.
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Any) -> CallToolResult:
        """Handle MCP tool calls by delegating to the registry."""
        return await registry.call(name, arguments)

    if resolver.uses_pat:
        logger.info("Configured with Personal Access Token authentication")
    else:
        logger.info("No PAT given; using Azure Identity for authentication")
    logger.info(f"Registered {len(registry)} tools for organization {settings.organization}")
    return app, registry


async def check_connection(factory: ConnectionFactory) -> int:
    """List projects once to prove the credential and organization work.

    Returns the number of projects found. Failures propagate.
    """
    logger.info("Testing Azure DevOps connection...")
    try:
        async with factory.connect() as connection:
            result = await connection.get("_apis/projects")
    except Exception as e:
        logger.error(f"Connection failed: {e}")
        raise

    projects = (result or {}).get("value") or []
    logger.info(
        f"Connection successful! Found {len(projects)} projects in organization: "
        f"{factory.settings.organization}"
    )
    if projects:
        logger.info(f"First project: {projects[0].get('name')}")
    return len(projects)


async def serve(settings: Settings) -> None:
    """Run the MCP server over stdio."""
    app, registry = create_server(settings)

    if settings.debug:
        await check_connection(registry.connection_factory)

    logger.info(f"{SERVER_NAME} version : {__version__}")
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Console entry point: ``ado-mcp <organization_name> [ado_pat] [--debug]``."""
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        settings = Settings.from_args(argv)
    except ConfigurationError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_level)
    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except Exception as e:
        logger.error(f"Fatal error in main(): {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
