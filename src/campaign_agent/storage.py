"""Session and message persistence for campaign-agent.

Two backends share the MessageStore interface:
- SupabaseMessageStore: ``sessions`` and ``messages`` tables.
- LocalMessageStore: one JSON document per session under a base directory.
"""

from __future__ import annotations

import json
import re
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from campaign_agent.config import Settings, get_settings
from campaign_agent.errors import PersistenceError
from campaign_agent.logging import get_logger
from campaign_agent.models import (
    SessionContext,
    SessionRecord,
    SessionSummary,
    StoredMessage,
)

logger = get_logger(__name__)

_SESSION_ID_RE = re.compile(r"^[\w-]+$")

# One lock per session file; guards load-append-save within this process.
_locks_guard = threading.Lock()
_file_locks: dict[Path, threading.RLock] = {}


def _file_lock(path: Path) -> threading.RLock:
    with _locks_guard:
        return _file_locks.setdefault(path.resolve(), threading.RLock())


def write_json(path: Path, data: Any) -> None:
    """Write *data* as pretty-printed JSON."""
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


def read_json(path: Path) -> Any:
    """Read and parse a JSON file."""
    return json.loads(path.read_text(encoding="utf-8"))


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MessageStore(ABC):
    """Durable, append-only conversation log."""

    @abstractmethod
    def create_session(
        self, prompt: str, context: SessionContext, user_id: Optional[str] = None
    ) -> SessionRecord:
        ...

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        ...

    @abstractmethod
    def list_sessions(self, user_id: Optional[str] = None, limit: int = 20) -> List[SessionRecord]:
        """Sessions newest-first."""
        ...

    @abstractmethod
    def insert_message(
        self, session_id: str, role: str, type: str, content: Dict[str, Any]
    ) -> StoredMessage:
        ...

    @abstractmethod
    def list_messages(self, session_id: str) -> List[StoredMessage]:
        """Messages of a session oldest-first."""
        ...


# ── Local JSON store ─────────────────────────────────────────────────────────

class LocalMessageStore(MessageStore):
    """Filesystem store: ``<base_dir>/<session_id>.json`` holds the session and its log.

    Appends are serialized per session file within one process. Several
    processes writing the same directory are not supported; use Supabase there.
    """

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    def _path(self, session_id: str) -> Path:
        if not _SESSION_ID_RE.match(session_id):
            raise PersistenceError(f"Invalid session id: {session_id!r}")
        return self.base_dir / f"{session_id}.json"

    def _load(self, session_id: str) -> Optional[Dict[str, Any]]:
        path = self._path(session_id)
        with _file_lock(path):
            if not path.exists():
                return None
            try:
                return read_json(path)
            except (OSError, json.JSONDecodeError) as exc:
                raise PersistenceError(f"Failed to read session {session_id}: {exc}") from exc

    def _save(self, doc: Dict[str, Any]) -> None:
        path = self._path(doc["session"]["id"])
        with _file_lock(path):
            try:
                self.base_dir.mkdir(parents=True, exist_ok=True)
                write_json(path, doc)
            except OSError as exc:
                raise PersistenceError(f"Failed to write session: {exc}") from exc

    def create_session(
        self, prompt: str, context: SessionContext, user_id: Optional[str] = None
    ) -> SessionRecord:
        record = SessionRecord(
            id=str(uuid.uuid4()),
            prompt=prompt,
            context=context.model_dump(),
            user_id=user_id,
            created_at=_now(),
        )
        self._save({"session": record.model_dump(), "messages": []})
        return record

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        doc = self._load(session_id)
        return SessionRecord.model_validate(doc["session"]) if doc else None

    def list_sessions(self, user_id: Optional[str] = None, limit: int = 20) -> List[SessionRecord]:
        if not self.base_dir.is_dir():
            return []
        records = []
        for path in self.base_dir.glob("*.json"):
            record = self.get_session(path.stem)
            if record and (user_id is None or record.user_id == user_id):
                records.append(record)
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit]

    def insert_message(
        self, session_id: str, role: str, type: str, content: Dict[str, Any]
    ) -> StoredMessage:
        with _file_lock(self._path(session_id)):
            doc = self._load(session_id)
            if doc is None:
                raise PersistenceError(f"Session not found: {session_id}")
            message = StoredMessage(
                id=str(uuid.uuid4()),
                session_id=session_id,
                created_at=_now(),
                role=role,
                type=type,
                content=content,
            )
            doc["messages"].append(message.model_dump())
            self._save(doc)
        return message

    def list_messages(self, session_id: str) -> List[StoredMessage]:
        doc = self._load(session_id)
        if doc is None:
            return []
        messages = [StoredMessage.model_validate(m) for m in doc["messages"]]
        return sorted(messages, key=lambda m: m.created_at)


# ── Supabase store ───────────────────────────────────────────────────────────

@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Get Supabase client instance (cached singleton).

    Raises:
        ConfigurationError: If URL or service key is missing
    """
    url, key = get_settings().require_supabase()
    return create_client(url, key)


class SupabaseMessageStore(MessageStore):
    def __init__(self, client=None) -> None:
        self._client = client if client is not None else get_supabase()

    def _execute(self, what: str, query) -> List[Dict[str, Any]]:
        try:
            response = query.execute()
        except Exception as exc:
            logger.error(f"Supabase {what} failed: {exc}")
            raise PersistenceError(f"Failed to {what}: {exc}") from exc
        return response.data or []

    def create_session(
        self, prompt: str, context: SessionContext, user_id: Optional[str] = None
    ) -> SessionRecord:
        row: Dict[str, Any] = {"prompt": prompt, "context": context.model_dump()}
        if user_id:
            row["user_id"] = user_id
        data = self._execute("create session", self._client.table("sessions").insert(row))
        if not data:
            raise PersistenceError("Session insert returned no row")
        return SessionRecord.model_validate(data[0])

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        data = self._execute(
            "get session",
            self._client.table("sessions").select("*").eq("id", session_id).limit(1),
        )
        return SessionRecord.model_validate(data[0]) if data else None

    def list_sessions(self, user_id: Optional[str] = None, limit: int = 20) -> List[SessionRecord]:
        query = self._client.table("sessions").select("*")
        if user_id:
            query = query.eq("user_id", user_id)
        data = self._execute(
            "list sessions", query.order("created_at", desc=True).limit(limit)
        )
        return [SessionRecord.model_validate(row) for row in data]

    def insert_message(
        self, session_id: str, role: str, type: str, content: Dict[str, Any]
    ) -> StoredMessage:
        row = {"session_id": session_id, "role": role, "type": type, "content": content}
        data = self._execute("store message", self._client.table("messages").insert(row))
        if not data:
            raise PersistenceError("Message insert returned no row")
        return StoredMessage.model_validate(data[0])

    def list_messages(self, session_id: str) -> List[StoredMessage]:
        data = self._execute(
            "list messages",
            self._client.table("messages")
            .select("*")
            .eq("session_id", session_id)
            .order("created_at"),
        )
        return [StoredMessage.model_validate(row) for row in data]


def get_message_store(settings: Settings | None = None) -> MessageStore:
    """Return the store selected by STORE_BACKEND."""
    settings = settings or get_settings()
    if settings.STORE_BACKEND == "local":
        return LocalMessageStore(settings.LOCAL_STORE_DIR)
    return SupabaseMessageStore()


# ── Session summaries ────────────────────────────────────────────────────────

def format_time_ago(created_at: str, now: datetime | None = None) -> str:
    """Render an ISO timestamp as "just now", "5m ago", "3h ago", ... relative to *now*."""
    past = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    if past.tzinfo is None:
        past = past.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    seconds = int((now - past).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 604800:
        return f"{seconds // 86400}d ago"
    if seconds < 2592000:
        return f"{seconds // 604800}w ago"
    return f"{seconds // 2592000}mo ago"


def summarize_session(
    session: SessionRecord, messages: List[StoredMessage], now: datetime | None = None
) -> SessionSummary:
    context = session.context or {}
    return SessionSummary(
        id=session.id,
        prompt=session.prompt,
        ideas_count=sum(1 for m in messages if m.type == "idea_list"),
        developed_count=sum(1 for m in messages if m.type == "concept"),
        created_at=session.created_at,
        age=format_time_ago(session.created_at, now),
        product=(context.get("product") or {}).get("name") or "N/A",
        audience=(context.get("audience") or {}).get("name") or "N/A",
        objective=context.get("objective") or "N/A",
    )
