"""Azure DevOps tool groups.

Each group module exposes one ``configure_<group>_tools(registry)`` function.
"""
from ..registry import ToolRegistry
from .builds import configure_build_tools
from .core import configure_core_tools
from .releases import configure_release_tools
from .repos import configure_repo_tools
from .search import configure_search_tools
from .testplans import configure_test_plan_tools
from .wiki import configure_wiki_tools
from .work import configure_work_tools
from .workitems import configure_work_item_tools

REGISTRARS = (
    configure_core_tools,
    configure_work_tools,
    configure_build_tools,
    configure_repo_tools,
    configure_work_item_tools,
    configure_release_tools,
    configure_wiki_tools,
    configure_test_plan_tools,
    configure_search_tools,
)


def configure_all_tools(registry: ToolRegistry) -> ToolRegistry:
    """Register every tool group, in a fixed order."""
    for configure in REGISTRARS:
        configure(registry)
    return registry


__all__ = ["REGISTRARS", "configure_all_tools"]
