"""Turn handling: persist the user turn, route it, persist the answer."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel

from campaign_agent.errors import PersistenceError, RequestValidationError
from campaign_agent.llm.base import LLMProvider
from campaign_agent.logging import get_logger, log_with_context
from campaign_agent.models import AgentRequest, AutoAgentArgs, SessionContext, SessionRecord
from campaign_agent.router import auto_agent
from campaign_agent.storage import MessageStore

logger = get_logger(__name__)


class TurnResult(BaseModel):
    message: Dict[str, Any]
    persisted: bool = False


class SessionStart(BaseModel):
    session: SessionRecord
    turn: TurnResult


def handle_turn(request: AgentRequest, provider: LLMProvider, store: MessageStore) -> TurnResult:
    """Run one turn. Persistence failures are logged and never abort the turn."""
    try:
        store.insert_message(request.session_id, "user", "text", {"text": request.user_input})
    except PersistenceError as exc:
        log_with_context(
            logger, logging.ERROR, f"Error storing user message: {exc}",
            session_id=request.session_id,
        )

    message = auto_agent(
        provider,
        AutoAgentArgs(
            context=request.context,
            user_input=request.user_input,
            selected_idea=request.selected_idea,
        ),
    )

    try:
        stored = store.insert_message(
            request.session_id,
            "assistant",
            message.type,
            message.content.model_dump(exclude_none=True),
        )
    except PersistenceError as exc:
        log_with_context(
            logger, logging.ERROR, f"Error storing message: {exc}",
            session_id=request.session_id,
        )
        return TurnResult(message=message.model_dump(exclude_none=True), persisted=False)

    log_with_context(
        logger, logging.INFO, "turn stored", session_id=request.session_id, type=message.type
    )
    return TurnResult(message=stored.model_dump(), persisted=True)


def start_session(
    prompt: str,
    context: SessionContext,
    provider: LLMProvider,
    store: MessageStore,
    user_id: Optional[str] = None,
) -> SessionStart:
    """Create a session for *prompt* and answer it as the first turn."""
    prompt = prompt.strip()
    if not prompt:
        raise RequestValidationError("A prompt is required to start a session")
    if not context.product.name.strip():
        raise RequestValidationError("Please select a product before generating")
    if not context.audience.name.strip():
        raise RequestValidationError("Please select an audience before generating")

    session = store.create_session(prompt, context, user_id=user_id)
    turn = handle_turn(
        AgentRequest(session_id=session.id, context=context, user_input=prompt),
        provider,
        store,
    )
    return SessionStart(session=session, turn=turn)
