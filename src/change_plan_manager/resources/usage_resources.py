import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

from change_plan_manager.config import USAGE_GUIDE_REL_PATH
from change_plan_manager.io.files import read_markdown

logger = logging.getLogger(__name__)

FALLBACK_USAGE_GUIDE = """# Change Plan Manager - Usage Guide

1. `create_change_plan` with a name and ordered steps (IDs are '0', '1', ...).
2. `get_next_step` returns the highest-priority step whose dependencies are complete.
3. `mark_step_complete` once the step is done; it fails while dependencies are open.
4. `add_step` / `update_step` to evolve the plan; `search_change_plans` to find plans.
5. `export_change_plan` / `import_change_plan` to back up or share a plan.
"""


def load_usage_guide() -> str:
    try:
        return read_markdown(USAGE_GUIDE_REL_PATH)
    except OSError as e:
        logger.debug(f"Usage guide not readable at {USAGE_GUIDE_REL_PATH}: {e}")
        return FALLBACK_USAGE_GUIDE


def register_usage_resources(mcp_instance: "FastMCP") -> None:
    """Register the usage guide as an MCP resource.

    The content is loaded from docs/usage_guide.md so it can be edited easily.
    """

    @mcp_instance.resource(
        uri="resource://change-plan-manager/usage_guide.md",
        name="usage_guide.md",
        title="Change Plan Manager Usage Guide",
        description="How to create, schedule, and complete change plans with this server.",
        mime_type="text/markdown",
    )
    def usage_guide_resource() -> str:
        return load_usage_guide()

    # Reference the function to avoid unused-function linter warnings.
    _ = usage_guide_resource
