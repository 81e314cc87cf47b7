"""LangGraph intent router.

One turn walks a single path through the graph:

    classify ──┬─> generate_ideas ──> END
               ├─> develop_concept ─> END
               ├─> pick_idea ───────> END   (DevelopConcept chosen without an idea)
               └─> reply ───────────> END

``phases`` records the walk: classifying, dispatching, [overridden], done.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional, Union

from langgraph.graph import END, StateGraph
from pydantic import BaseModel, Field, TypeAdapter

from campaign_agent.llm.base import LLMProvider, ToolSpec
from campaign_agent.logging import get_logger, log_with_context
from campaign_agent.models import (
    AgentMessage,
    AutoAgentArgs,
    ConceptMessage,
    IdeaListItem,
    IdeaListMessage,
    SessionContext,
    TextMessage,
    text_message,
)
from campaign_agent.prompts import ROUTER_SYSTEM, build_router_prompt
from campaign_agent.tools import DEVELOP_CONCEPT, GENERATE_IDEAS, develop_concept, generate_ideas

logger = get_logger(__name__)

Phase = Literal["classifying", "dispatching", "overridden", "done"]

ROUTER_FALLBACK = "Sorry—something went wrong. Please try again."
PICK_IDEA_TEXT = "Pick an idea to develop."
DEFAULT_REPLY = "How can I help with your campaign?"

ROUTER_TOOLS = (
    ToolSpec(name=GENERATE_IDEAS, description="Create 10 ideas as an idea_list"),
    ToolSpec(name=DEVELOP_CONCEPT, description="Expand a selected idea into a full concept"),
)

_MESSAGE_ADAPTER = TypeAdapter(AgentMessage)


class RouterState(BaseModel):
    context: Dict[str, Any]
    user_input: str
    selected_idea: Optional[Dict[str, Any]] = None
    phases: List[Phase] = Field(default_factory=lambda: ["classifying"])
    decision: Optional[str] = None
    reply_text: Optional[str] = None
    message: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


def _finish(state: RouterState, message: BaseModel, *extra: Phase) -> dict:
    return {"message": message.model_dump(), "phases": [*state.phases, *extra, "done"]}


# ── Nodes ────────────────────────────────────────────────────────────────────

def _make_classify_node(provider: LLMProvider):
    def classify(state: RouterState) -> dict:
        ctx = SessionContext.model_validate(state.context)
        idea = IdeaListItem.model_validate(state.selected_idea) if state.selected_idea else None
        try:
            decision = provider.choose_tool(
                ROUTER_SYSTEM,
                build_router_prompt(ctx, state.user_input, idea),
                ROUTER_TOOLS,
            )
        except Exception as exc:
            logger.exception("intent classification failed")
            return {"error": str(exc)}
        return {
            "decision": decision.tool,
            "reply_text": decision.text,
            "phases": [*state.phases, "dispatching"],
        }
    return classify


def _make_generate_ideas_node(provider: LLMProvider):
    def generate_ideas_node(state: RouterState) -> dict:
        ctx = SessionContext.model_validate(state.context)
        return _finish(state, generate_ideas(provider, ctx, state.user_input))
    return generate_ideas_node


def _make_develop_concept_node(provider: LLMProvider):
    def develop_concept_node(state: RouterState) -> dict:
        ctx = SessionContext.model_validate(state.context)
        idea = IdeaListItem.model_validate(state.selected_idea)
        return _finish(state, develop_concept(provider, ctx, idea))
    return develop_concept_node


def pick_idea(state: RouterState) -> dict:
    return _finish(state, text_message(PICK_IDEA_TEXT), "overridden")


def reply(state: RouterState) -> dict:
    text = (state.reply_text or "").strip() or DEFAULT_REPLY
    return _finish(state, text_message(text))


def route_decision(state: RouterState) -> str:
    if state.error:
        return END
    if state.decision == DEVELOP_CONCEPT:
        return "develop_concept" if state.selected_idea else "pick_idea"
    if state.decision:
        return "generate_ideas"
    return "reply"


# ── Graph ────────────────────────────────────────────────────────────────────

def build_router_graph(provider: LLMProvider):
    """Build and compile the intent-routing graph."""
    graph = StateGraph(RouterState)
    graph.add_node("classify", _make_classify_node(provider))
    graph.add_node("generate_ideas", _make_generate_ideas_node(provider))
    graph.add_node("develop_concept", _make_develop_concept_node(provider))
    graph.add_node("pick_idea", pick_idea)
    graph.add_node("reply", reply)
    graph.set_entry_point("classify")
    graph.add_conditional_edges(
        "classify",
        route_decision,
        {
            "generate_ideas": "generate_ideas",
            "develop_concept": "develop_concept",
            "pick_idea": "pick_idea",
            "reply": "reply",
            END: END,
        },
    )
    for node in ("generate_ideas", "develop_concept", "pick_idea", "reply"):
        graph.add_edge(node, END)
    return graph.compile()


def run_router(provider: LLMProvider, args: AutoAgentArgs) -> RouterState:
    """Run one turn through the graph and return the final state."""
    compiled = build_router_graph(provider)
    initial = RouterState(
        context=args.context.model_dump(),
        user_input=args.user_input,
        selected_idea=args.selected_idea.model_dump() if args.selected_idea else None,
    )
    result = compiled.invoke(initial)
    if isinstance(result, dict):
        return RouterState.model_validate(result)
    return result


def auto_agent(
    provider: LLMProvider, args: AutoAgentArgs
) -> Union[TextMessage, IdeaListMessage, ConceptMessage]:
    """Answer one turn with exactly one agent message. Never raises."""
    try:
        state = run_router(provider, args)
        if state.error or state.message is None:
            return text_message(ROUTER_FALLBACK)
        log_with_context(
            logger, logging.INFO, "turn routed",
            decision=state.decision or "text", path="->".join(state.phases),
        )
        return _MESSAGE_ADAPTER.validate_python(state.message)
    except Exception:
        logger.exception("auto_agent failed")
        return text_message(ROUTER_FALLBACK)
