"""Azure DevOps MCP Server - Model Context Protocol integration.

This package exposes Azure DevOps (projects, repos, pull requests, work items,
builds, releases, wikis, test plans and search) as MCP tools, enabling AI
assistants to work with an organization through one uniform tool interface.

Modules:
- server: stdio MCP server implementation
- registry: tool registration and the uniform call wrapper
- connection: authenticated REST connections to the organization
- formatters: response envelopes and payload projections
- tools: tool groups (one registrar per group)
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
