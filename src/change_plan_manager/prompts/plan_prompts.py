from mcp.server.fastmcp.prompts import base


def build_draft_change_plan_prompt_messages(goal: str = "") -> list[base.Message]:
    """Few-shot prompt to draft a change plan for the create_change_plan tool.

    Output format aligns with create_change_plan: name (required) and steps,
    each with title, description, optional context, dependsOn and priority.
    """

    return [
        # == Turn 1: The Example ==
        base.UserMessage(
            "You are an AI assistant that plans code changes. "
            "Break a change into small, ordered steps. "
            "Respond with a valid JSON object with the keys 'name' (string) and 'steps' (array). "
            "Each step must have 'title' and 'description' and may have 'context', "
            "'priority' ('high', 'medium' or 'low') and 'dependsOn' (array of step IDs). "
            "Step IDs are the zero-based positions of the steps as strings: '0', '1', ... "
            "A step may only depend on other steps of the same plan, never on itself. "
            "Do not add any other text or formatting. "
            "\n\nHere is an example change: Add rate limiting to the public API"
        ),
        base.AssistantMessage(
            """{
  "name": "Add rate limiting to the public API",
  "steps": [
    {
      "title": "Add limiter configuration",
      "description": "Introduce RATE_LIMIT_PER_MINUTE and RATE_LIMIT_BURST settings with sane defaults.",
      "priority": "high"
    },
    {
      "title": "Implement token bucket middleware",
      "description": "Add middleware that tracks a token bucket per API key and rejects requests with 429.",
      "context": "Buckets live in the existing Redis connection pool.",
      "dependsOn": ["0"],
      "priority": "high"
    },
    {
      "title": "Document the limits",
      "description": "Describe limits and the Retry-After header in the API reference.",
      "dependsOn": ["1"],
      "priority": "low"
    }
  ]
}"""
        ),
        # == Turn 2: The Real Request ==
        base.UserMessage(
            f"Now, draft a change plan for this change: {goal or 'the change we just discussed'}. "
            "Show me the JSON and STOP. I might review the JSON, edit it, or ask you to edit it. "
            "The review is considered complete when I say 'approve'. "
            "Once I approve, create the plan by calling the `create_change_plan` tool of the "
            "Change Plan Manager MCP server with the fields from the JSON."
        ),
    ]


def build_work_next_step_prompt_messages(plan_id: str) -> list[base.Message]:
    """Prompt that walks an agent through one iteration of a change plan."""

    return [
        base.UserMessage(
            f"Work on change plan {plan_id}. "
            "Call `get_next_step` with this plan ID. "
            "If it reports status 'all_completed', tell me the plan is done and STOP. "
            "If it reports status 'blocked', list the incomplete steps with their unmet dependencies and STOP. "
            "Otherwise implement the returned step using its description and context. "
            "When the work is done and verified, call `mark_step_complete` with the plan ID and the step ID, "
            "then summarize what changed and STOP. Do not start the following step without my go-ahead."
        ),
    ]
