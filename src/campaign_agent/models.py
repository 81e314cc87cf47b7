"""Pydantic v2 data models for campaign-agent."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

Channel = Literal["TikTok", "Instagram", "Email", "OOH"]
Objective = Literal["Awareness", "Engagement", "Conversion"]
ConceptFormat = Literal["Video", "Story", "Reel", "Post", "Newsletter", "Billboard"]
MessageType = Literal["text", "idea_list", "concept"]
Role = Literal["user", "assistant"]

CHANNELS = ("TikTok", "Instagram", "Email", "OOH")
CONCEPT_FORMATS = ("Video", "Story", "Reel", "Post", "Newsletter", "Billboard")
IDEA_KEYS = ("id", "title", "summary", "channel", "hook", "tags")


# ── Session context ──────────────────────────────────────────────────────────

class Organization(BaseModel):
    name: str = ""
    description: str = ""


class Product(BaseModel):
    name: str = ""
    description: str = ""


class Audience(BaseModel):
    name: str = ""
    age_range: str = ""
    location: str = ""
    interests: List[str] = Field(default_factory=list)
    tone: str = ""


class SessionContext(BaseModel):
    """Business configuration a session is created with."""

    organization: Organization = Field(default_factory=Organization)
    product: Product = Field(default_factory=Product)
    audience: Audience = Field(default_factory=Audience)
    objective: Objective = "Awareness"


# ── Ideas & concepts ─────────────────────────────────────────────────────────

class IdeaListItem(BaseModel):
    """One idea as generated, or as sent back by the client as ``selected_idea``.

    Generated items are stored unchanged, so text fields accept null or scalars
    and ``tags`` accepts a comma-separated string.
    """

    id: str = ""
    title: str = ""
    summary: str = ""
    channel: str = ""
    hook: str = ""
    tags: List[str] = Field(default_factory=list)

    @field_validator("id", "title", "summary", "channel", "hook", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        if isinstance(v, (list, tuple)):
            return [t if isinstance(t, str) else str(t) for t in v if t is not None]
        return [str(v)]


class ChannelFormat(BaseModel):
    channel: str = ""
    format: str = ""


class Kpi(BaseModel):
    primary: str = ""
    target: str = ""


class CopyExamples(BaseModel):
    headline: str = ""
    caption: str = ""
    alt_caption: str = ""


class ConceptContent(BaseModel):
    """One idea expanded into a full creative concept."""

    from_idea_ref: Optional[str] = None
    title: str = ""
    summary: str = ""
    channel_format: ChannelFormat = Field(default_factory=ChannelFormat)
    audience_insight: str = ""
    key_message: str = ""
    rtbs: List[str] = Field(default_factory=list)
    beats: List[str] = Field(default_factory=list)
    hook: str = ""
    cta: str = ""
    kpi: Kpi = Field(default_factory=Kpi)
    copy_examples: Optional[CopyExamples] = None
    assets: Optional[List[str]] = None
    production_notes: Optional[str] = None
    compliance: Optional[str] = None


# ── Agent messages ───────────────────────────────────────────────────────────

class MessageMeta(BaseModel):
    model: Optional[str] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None


class TextContent(BaseModel):
    text: str


class IdeaListContent(BaseModel):
    # Items are passed through as the model produced them; see validation.audit_ideas.
    items: List[Dict[str, Any]] = Field(default_factory=list)


class TextMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    type: Literal["text"] = "text"
    content: TextContent
    meta: Optional[MessageMeta] = None


class IdeaListMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    type: Literal["idea_list"] = "idea_list"
    content: IdeaListContent
    meta: Optional[MessageMeta] = None


class ConceptMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    type: Literal["concept"] = "concept"
    content: ConceptContent
    meta: Optional[MessageMeta] = None


AgentMessage = Annotated[
    Union[TextMessage, IdeaListMessage, ConceptMessage],
    Field(discriminator="type"),
]


def text_message(text: str) -> TextMessage:
    return TextMessage(content=TextContent(text=text))


# ── Inputs ───────────────────────────────────────────────────────────────────

class AutoAgentArgs(BaseModel):
    context: SessionContext
    user_input: str
    selected_idea: Optional[IdeaListItem] = None


class AgentRequest(AutoAgentArgs):
    session_id: str


# ── Persisted rows ───────────────────────────────────────────────────────────

class StoredMessage(BaseModel):
    id: str
    session_id: str
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    role: Role
    type: MessageType
    content: Dict[str, Any] = Field(default_factory=dict)


class SessionRecord(BaseModel):
    id: str
    prompt: str = ""
    context: Dict[str, Any] = Field(default_factory=dict)
    user_id: Optional[str] = None
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class SessionSummary(BaseModel):
    """Dashboard row for one session."""

    id: str
    prompt: str
    ideas_count: int = 0
    developed_count: int = 0
    created_at: str
    age: str
    product: str = "N/A"
    audience: str = "N/A"
    objective: str = "N/A"
