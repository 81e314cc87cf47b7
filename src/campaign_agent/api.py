"""FastAPI HTTP API for campaign-agent.

Install with: pip install campaign-agent[api]
Run with: uvicorn campaign_agent.api:api --reload
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from campaign_agent.config import get_settings
from campaign_agent.errors import ConfigurationError, PersistenceError, RequestValidationError
from campaign_agent.llm.base import LLMProvider
from campaign_agent.logging import get_logger
from campaign_agent.models import AgentRequest, SessionContext
from campaign_agent.router import ROUTER_FALLBACK
from campaign_agent.service import handle_turn, start_session
from campaign_agent.storage import MessageStore, get_message_store, summarize_session

logger = get_logger(__name__)

REQUIRED_FIELDS = ("context", "user_input", "session_id")

api = FastAPI(title="campaign-agent", version="0.1.0")

api.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


def get_provider() -> LLMProvider:
    from campaign_agent.llm.openai_provider import OpenAIProvider

    return OpenAIProvider()


def get_store() -> MessageStore:
    return get_message_store()


def _fallback_response() -> JSONResponse:
    return JSONResponse(
        {"message": {"role": "assistant", "type": "text", "content": {"text": ROUTER_FALLBACK}}},
        status_code=200,
    )


@api.exception_handler(ConfigurationError)
async def configuration_error(_request: Request, exc: ConfigurationError):
    logger.error(str(exc))
    return JSONResponse({"error": str(exc)}, status_code=500)


@api.exception_handler(RequestValidationError)
async def request_validation_error(_request: Request, exc: RequestValidationError):
    return JSONResponse({"error": str(exc)}, status_code=400)


@api.post("/agent")
def agent(
    body: Dict[str, Any] = Body(...),
    provider: LLMProvider = Depends(get_provider),
    store: MessageStore = Depends(get_store),
):
    missing = [f for f in REQUIRED_FIELDS if body.get(f) in (None, "")]
    if missing:
        logger.error(f"Missing required fields: {', '.join(missing)}")
        raise RequestValidationError(
            "Missing required fields: context, user_input, and session_id"
        )
    try:
        request = AgentRequest.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(f"Invalid request: {exc.error_count()} error(s)") from exc

    try:
        result = handle_turn(request, provider, store)
    except Exception:
        logger.exception("Agent error")
        return _fallback_response()
    return {"message": result.message}


class NewSession(BaseModel):
    prompt: str
    context: SessionContext
    user_id: Optional[str] = None


@api.post("/sessions")
def create_session(
    payload: NewSession,
    provider: LLMProvider = Depends(get_provider),
    store: MessageStore = Depends(get_store),
):
    try:
        started = start_session(
            payload.prompt, payload.context, provider, store, user_id=payload.user_id
        )
    except PersistenceError as exc:
        raise HTTPException(502, f"Failed to create session: {exc}")
    return {"session": started.session.model_dump(), "message": started.turn.message}


@api.get("/sessions")
def get_sessions(
    user_id: Optional[str] = None, n: int = 20, store: MessageStore = Depends(get_store)
):
    sessions = store.list_sessions(user_id=user_id, limit=n)
    return {
        "sessions": [
            summarize_session(s, store.list_messages(s.id)).model_dump() for s in sessions
        ]
    }


@api.get("/sessions/{session_id}/messages")
def get_messages(session_id: str, store: MessageStore = Depends(get_store)):
    session = store.get_session(session_id)
    if session is None:
        raise HTTPException(404, f"Session not found: {session_id}")
    return {
        "session": session.model_dump(),
        "messages": [m.model_dump() for m in store.list_messages(session_id)],
    }
