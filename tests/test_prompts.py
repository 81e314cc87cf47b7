"""Tests for prompt builders."""

from campaign_agent.models import IdeaListItem, SessionContext
from campaign_agent.prompts import build_concept_prompt, build_ideas_prompt, build_router_prompt


def test_ideas_prompt_embeds_context_and_user_text(ctx):
    prompt = build_ideas_prompt(ctx, "10 ideas for a new trail shoe launch")

    assert "ORG: Northpeak — Outdoor brand" in prompt
    assert "PRODUCT: Ridge Runner — Trail shoe" in prompt
    assert "AUDIENCE: Weekend trail runners (25-40, Pacific Northwest)" in prompt
    assert "INTERESTS: trail running, hiking | TONE: Energetic" in prompt
    assert "OBJECTIVE: Conversion" in prompt
    assert "10 ideas for a new trail shoe launch" in prompt


def test_ideas_prompt_states_hard_constraints(ctx):
    prompt = build_ideas_prompt(ctx, "anything")

    assert "exactly 10 objects" in prompt
    assert "all 6 keys: id, title, summary, channel, hook, tags" in prompt
    assert "channel must be one of: TikTok, Instagram, Email, OOH" in prompt
    assert "no discounts unless allowed" in prompt


def test_ideas_prompt_is_deterministic(ctx):
    assert build_ideas_prompt(ctx, "x") == build_ideas_prompt(ctx, "x")


def test_ideas_prompt_tolerates_empty_context():
    prompt = build_ideas_prompt(SessionContext(), "")
    assert "PRODUCT:" in prompt
    assert "OBJECTIVE: Awareness" in prompt


def test_concept_prompt_embeds_idea_and_objective(ctx, idea):
    prompt = build_concept_prompt(ctx, idea)

    assert '"id": "idea_3"' in prompt
    assert '"name": "Ridge Runner"' in prompt
    assert "rtbs MUST be an array of exactly 2 strings" in prompt
    assert "beats MUST be an array of 3-5 strings" in prompt
    assert "Video|Story|Reel|Post|Newsletter|Billboard" in prompt
    assert prompt.rstrip().endswith("Map CTA/KPI to objective: Conversion")


def test_router_prompt_marks_missing_idea(ctx):
    prompt = build_router_prompt(ctx, "hello", None)
    assert "SELECTED_IDEA: none" in prompt
    assert prompt.endswith("USER_INPUT: hello")


def test_router_prompt_includes_selected_idea(ctx):
    prompt = build_router_prompt(ctx, "go", IdeaListItem(id="idea_2", title="T"))
    assert '"id": "idea_2"' in prompt
