"""Generation tools: GenerateIdeas and DevelopConcept.

Each tool wraps one schema-constrained generation call and always returns an
agent message. Any failure becomes the tool's fixed apology text.
"""

from __future__ import annotations

import logging
from typing import Union

from campaign_agent.llm.base import JsonResult, LLMProvider
from campaign_agent.logging import get_logger, log_with_context
from campaign_agent.models import (
    ConceptMessage,
    IdeaListContent,
    IdeaListItem,
    IdeaListMessage,
    MessageMeta,
    SessionContext,
    TextMessage,
    text_message,
)
from campaign_agent.prompts import (
    CONCEPT_SYSTEM,
    IDEAS_SYSTEM,
    build_concept_prompt,
    build_ideas_prompt,
)
from campaign_agent.validation import audit_concept, audit_ideas, coerce_concept, coerce_items

logger = get_logger(__name__)

GENERATE_IDEAS = "GenerateIdeas"
DEVELOP_CONCEPT = "DevelopConcept"

IDEAS_FALLBACK = "Sorry—couldn't generate ideas. Try again."
CONCEPT_FALLBACK = "Sorry—couldn't develop that concept. Try again."


def _meta(result: JsonResult) -> MessageMeta:
    return MessageMeta(
        model=result.model,
        prompt_tokens=result.usage.prompt_tokens,
        completion_tokens=result.usage.completion_tokens,
    )


def generate_ideas(
    provider: LLMProvider, ctx: SessionContext, user_input: str
) -> Union[IdeaListMessage, TextMessage]:
    """Produce an idea_list message for the brief in *user_input*."""
    try:
        result = provider.generate_json(IDEAS_SYSTEM, build_ideas_prompt(ctx, user_input))
        items = coerce_items(result.data)
    except Exception:
        logger.exception("%s failed", GENERATE_IDEAS)
        return text_message(IDEAS_FALLBACK)

    issues = audit_ideas(items)
    if issues:
        log_with_context(
            logger, logging.WARNING, "idea batch outside requested rules",
            tool=GENERATE_IDEAS, issues="; ".join(issues),
        )
    return IdeaListMessage(content=IdeaListContent(items=items), meta=_meta(result))


def develop_concept(
    provider: LLMProvider, ctx: SessionContext, idea: IdeaListItem
) -> Union[ConceptMessage, TextMessage]:
    """Expand *idea* into a concept message."""
    try:
        result = provider.generate_json(CONCEPT_SYSTEM, build_concept_prompt(ctx, idea))
        concept = coerce_concept(result.data)
    except Exception:
        logger.exception("%s failed", DEVELOP_CONCEPT)
        return text_message(CONCEPT_FALLBACK)

    if concept.from_idea_ref is None and idea.id:
        concept.from_idea_ref = idea.id

    issues = audit_concept(concept)
    if issues:
        log_with_context(
            logger, logging.WARNING, "concept outside requested rules",
            tool=DEVELOP_CONCEPT, idea=idea.id, issues="; ".join(issues),
        )
    return ConceptMessage(content=concept, meta=_meta(result))
