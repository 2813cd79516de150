"""Unit tests for prompt builders and the usage guide resource."""

from mcp.server.fastmcp.prompts import base

from change_plan_manager.prompts.plan_prompts import (
    build_draft_change_plan_prompt_messages,
    build_work_next_step_prompt_messages,
)
from change_plan_manager.prompts.prompt_register import PROMPT_SPECS, register_prompts
from change_plan_manager.resources import usage_resources


class RecordingPrompts:
    def __init__(self):
        self.prompts = {}

    def prompt(self, name, title, description):
        def register(fn):
            self.prompts[name] = fn
            return fn

        return register


class TestPrompts:
    def test_draft_prompt_ends_with_goal(self):
        messages = build_draft_change_plan_prompt_messages("Drop Python 3.8 support")
        assert isinstance(messages[0], base.UserMessage)
        assert "Drop Python 3.8 support" in messages[-1].content.text

    def test_work_next_step_mentions_plan(self):
        messages = build_work_next_step_prompt_messages("plan-123")
        assert any("plan-123" in m.content.text for m in messages)

    def test_register_prompts_uses_catalog(self):
        mcp = RecordingPrompts()
        register_prompts(mcp)
        assert set(mcp.prompts) == {spec["name"] for spec in PROMPT_SPECS}


class TestUsageGuide:
    def test_reads_guide_from_workspace(self, tmp_path, monkeypatch):
        guide = tmp_path / "guide.md"
        guide.write_text("# Guide\n\nUse get_next_step.\n")
        monkeypatch.setattr(usage_resources, "USAGE_GUIDE_REL_PATH", str(guide))
        assert usage_resources.load_usage_guide() == "# Guide\n\nUse get_next_step."

    def test_falls_back_when_missing(self, tmp_path, monkeypatch):
        monkeypatch.setattr(usage_resources, "USAGE_GUIDE_REL_PATH", str(tmp_path / "nope.md"))
        assert usage_resources.load_usage_guide() == usage_resources.FALLBACK_USAGE_GUIDE
