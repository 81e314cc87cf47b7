"""Instruction text for the intent router and the two generation tools.

Every builder here is a pure function of its inputs.
"""

from __future__ import annotations

import json

from campaign_agent.models import IdeaListItem, SessionContext

IDEAS_SYSTEM = (
    "You generate 10 marketing ideas. "
    "Output JSON ONLY with { items:[...] } per the requested schema."
)

CONCEPT_SYSTEM = (
    "You develop one idea into a full concept. "
    "Output JSON ONLY with the exact concept schema."
)

ROUTER_SYSTEM = """
You are an intent router. Do exactly ONE of:
- Call GenerateIdeas (if user_input looks like a brief for concepts)
- Call DevelopConcept (if a selected_idea is present or user asks to expand an idea)
- Reply with a short helpful text (no tool) for general questions/clarifications.

Prefer DevelopConcept if selected_idea exists and no clarification is needed.
""".strip()

IDEAS_SCHEMA = """
{
  "items": [
    {
      "id": "string (idea_1, idea_2, ... idea_10)",
      "title": "string (max 8 words)",
      "summary": "string (40-60 words)",
      "channel": "string (TikTok|Instagram|Email|OOH)",
      "hook": "string (max 12 words)",
      "tags": ["string", "string", "string"]
    }
  ]
}
""".strip()

CONCEPT_SCHEMA = """
{
  "title": "string",
  "summary": "string (80-120 words)",
  "channel_format": {
    "channel": "string (TikTok|Instagram|Email|OOH)",
    "format": "string (Video|Story|Reel|Post|Newsletter|Billboard)"
  },
  "audience_insight": "string",
  "key_message": "string",
  "rtbs": ["string", "string"],
  "beats": ["string", "string", "string"],
  "hook": "string",
  "cta": "string",
  "kpi": {
    "primary": "string",
    "target": "string"
  },
  "copy_examples": {
    "headline": "string",
    "caption": "string",
    "alt_caption": "string"
  },
  "assets": ["string"],
  "production_notes": "string",
  "compliance": "string"
}
""".strip()


def _context_json(ctx: SessionContext) -> str:
    return json.dumps(ctx.model_dump(), ensure_ascii=False)


def _build_context_summary(ctx: SessionContext) -> str:
    """Human-readable business context block."""
    audience = ctx.audience
    lines = [
        f"ORG: {ctx.organization.name} — {ctx.organization.description}",
        f"PRODUCT: {ctx.product.name} — {ctx.product.description}",
        f"AUDIENCE: {audience.name} ({audience.age_range}, {audience.location})",
        f"INTERESTS: {', '.join(audience.interests)} | TONE: {audience.tone}",
        f"OBJECTIVE: {ctx.objective}",
    ]
    return "\n".join(lines)


def build_ideas_prompt(ctx: SessionContext, user_input: str) -> str:
    """Instruction for a batch of ten ideas grounded in the session context."""
    rules = [
        "items MUST be an array of exactly 10 objects",
        "Each item MUST have all 6 keys: id, title, summary, channel, hook, tags",
        "title ≤ 8 words",
        "summary 40–60 words",
        "hook ≤ 12 words",
        "channel must be one of: TikTok, Instagram, Email, OOH",
        "tags must be an array of strings",
        "Keep Product & Audience unchanged; use org voice; no discounts unless allowed",
    ]
    return "\n".join(
        [
            _build_context_summary(ctx),
            "",
            "USER PROMPT:",
            user_input,
            "",
            "RETURN JSON ONLY with this EXACT schema:",
            IDEAS_SCHEMA,
            "",
            "Rules:",
            *(f"- {r}" for r in rules),
        ]
    )


def build_concept_prompt(ctx: SessionContext, idea: IdeaListItem) -> str:
    """Instruction for expanding *idea* into a full concept."""
    rules = [
        'channel_format MUST be an object with exactly two keys: "channel" and "format"',
        "rtbs MUST be an array of exactly 2 strings",
        "beats MUST be an array of 3-5 strings",
        "Keep Product & Audience unchanged",
        "Summary 80–120 words",
        f"Map CTA/KPI to objective: {ctx.objective}",
    ]
    return "\n".join(
        [
            "CONTEXT:",
            _context_json(ctx),
            "",
            "SELECTED_IDEA:",
            json.dumps(idea.model_dump(), ensure_ascii=False),
            "",
            "TASK: Return JSON ONLY with this EXACT schema:",
            CONCEPT_SCHEMA,
            "",
            "Rules:",
            *(f"- {r}" for r in rules),
        ]
    )


def build_router_prompt(
    ctx: SessionContext, user_input: str, selected_idea: IdeaListItem | None
) -> str:
    idea = json.dumps(selected_idea.model_dump(), ensure_ascii=False) if selected_idea else "none"
    return "\n".join(
        [
            f"CONTEXT: {_context_json(ctx)}",
            f"SELECTED_IDEA: {idea}",
            f"USER_INPUT: {user_input}",
        ]
    )
