from typing import Callable, List, Optional, TypedDict

from mcp.server.fastmcp.prompts import base

from change_plan_manager.prompts.plan_prompts import (
    build_draft_change_plan_prompt_messages,
    build_work_next_step_prompt_messages,
)


class PromptSpec(TypedDict):
    name: str
    title: str
    description: str
    handler: Callable[..., List[base.Message]]


# Catalog of prompts defined in this module. Servers can import this and
# dynamically register/unregister entries at runtime.
PROMPT_SPECS: List[PromptSpec] = [
    {
        "name": "draft_change_plan",
        "title": "Draft a change plan",
        "description": "Guides the model to draft a change plan as ordered, prioritized steps with dependencies, ready for create_change_plan.",
        "handler": build_draft_change_plan_prompt_messages,
    },
    {
        "name": "work_next_step",
        "title": "Work the next step of a plan",
        "description": "Guides the model to fetch the next ready step of a plan, implement it, and mark it complete.",
        "handler": build_work_next_step_prompt_messages,
    },
]


def register_prompts(mcp_instance, prompt_specs: Optional[List[PromptSpec]] = None) -> None:
    """Register prompts with the MCP instance using provided specs."""
    for spec in (prompt_specs or PROMPT_SPECS):
        # Register the real handler directly so FastMCP reflects the actual
        # parameter name (goal/plan_id) in the UI.
        mcp_instance.prompt(
            name=spec["name"],
            title=spec["title"],
            description=spec["description"],
        )(spec["handler"])
