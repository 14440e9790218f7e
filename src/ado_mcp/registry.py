"""Tool registry and the uniform call wrapper.

Tool groups register their tools here once at startup. Every invocation then
goes through ToolRegistry.call, which:

1. validates the raw arguments against the tool's pydantic schema (no
   connection is opened for invalid input),
2. opens a fresh connection,
3. runs the handler,
4. turns any exception into an error envelope prefixed with the tool's
   failure message.

Handlers therefore only deal with the happy path and explicit empty results.
"""
import logging
import traceback
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, Optional

import httpx
from mcp.types import CallToolResult, Tool
from pydantic import BaseModel, ValidationError

from . import formatters
from .connection import AdoConnection, ConnectionFactory
from .errors import AuthError, DuplicateToolError, RemoteOperationError, ToolValidationError

logger = logging.getLogger("ado-mcp.registry")

Handler = Callable[[Any, AdoConnection], Awaitable[CallToolResult]]


@dataclass(frozen=True)
class ToolDescriptor:
    """A registered tool. Immutable once registered."""

    name: str
    description: str
    input_model: type[BaseModel]
    handler: Handler
    failure_message: str

    @property
    def input_schema(self) -> dict:
        return self.input_model.model_json_schema(by_alias=True)

    @property
    def tool(self) -> Tool:
        return Tool(name=self.name, description=self.description, inputSchema=self.input_schema)

    def validate(self, arguments: Optional[dict]) -> BaseModel:
        try:
            return self.input_model.model_validate(arguments or {})
        except ValidationError as e:
            raise ToolValidationError(self.name, e.errors(include_url=False)) from e


class ToolRegistry:
    """Process-wide table of tools, keyed by identifier."""

    def __init__(self, connection_factory: ConnectionFactory):
        self.connection_factory = connection_factory
        self._tools: dict[str, ToolDescriptor] = {}

    def register(
        self,
        name: str,
        description: str,
        input_model: type[BaseModel],
        handler: Handler,
        failure_message: str,
    ) -> ToolDescriptor:
        """Register a tool. Registering the same name twice is an error."""
        if name in self._tools:
            raise DuplicateToolError(name)
        descriptor = ToolDescriptor(
            name=name,
            description=description,
            input_model=input_model,
            handler=handler,
            failure_message=failure_message,
        )
        self._tools[name] = descriptor
        logger.debug(f"Registered tool {name}")
        return descriptor

    def get(self, name: str) -> Optional[ToolDescriptor]:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def list_tools(self) -> list[Tool]:
        return [descriptor.tool for descriptor in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    async def call(self, name: str, arguments: Optional[dict]) -> CallToolResult:
        """Validate, connect, run and normalize one tool invocation."""
        descriptor = self._tools.get(name)
        if descriptor is None:
            logger.warning(f"Unknown tool requested: {name}")
            return formatters.error_result(f"Unknown tool: {name}")

        try:
            params = descriptor.validate(arguments)
        except ToolValidationError as e:
            logger.warning(str(e))
            return formatters.error_result(str(e))

        logger.info(f"Tool call: {name}")
        try:
            async with self.connection_factory.connect() as connection:
                return await descriptor.handler(params, connection)

        except RemoteOperationError as e:
            logger.error(f"Azure DevOps error during {name} call:")
            logger.error(f"  Status: {e.status_code}")
            logger.error(f"  URL: {e.url}")
            logger.error(f"  Message: {e}")
            return formatters.error_result(f"{descriptor.failure_message}: {e}")

        except AuthError as e:
            logger.error(f"Authentication failed during {name} call: {e}")
            return formatters.error_result(f"{descriptor.failure_message}: {e}")

        except httpx.RequestError as e:
            logger.error(f"Request error during {name} call:")
            logger.error(f"  Error type: {type(e).__name__}")
            logger.error(f"  Error message: {str(e)}")
            logger.error(f"  Traceback: {traceback.format_exc()}")
            return formatters.error_result(
                f"{descriptor.failure_message}: Connection failed - {str(e) or type(e).__name__}"
            )

        except Exception as e:
            logger.error(f"Unexpected error during {name} call:")
            logger.error(f"  Error type: {type(e).__name__}")
            logger.error(f"  Error message: {str(e)}")
            logger.error(f"  Traceback:\n{traceback.format_exc()}")
            return formatters.error_result(f"{descriptor.failure_message}: {str(e) or type(e).__name__}")
