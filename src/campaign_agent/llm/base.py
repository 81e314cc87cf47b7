"""Base LLM provider interface for schema-constrained generation and tool routing."""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from pydantic import BaseModel, Field

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)


def _strip_code_fences(text: str) -> str:
    """Remove markdown code fences wrapping JSON."""
    m = _FENCE_RE.search(text)
    if m:
        return m.group(1).strip()
    return text.strip()


def parse_json_object(raw: str | None) -> Dict[str, Any]:
    """Parse model output as a JSON object, returning {} when it is not one."""
    if not raw:
        return {}
    try:
        data = json.loads(_strip_code_fences(raw))
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


class Usage(BaseModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None


class JsonResult(BaseModel):
    """Parsed structured output plus advisory usage counters."""

    data: Dict[str, Any] = Field(default_factory=dict)
    usage: Usage = Field(default_factory=Usage)
    model: Optional[str] = None


class ToolSpec(BaseModel):
    """A zero-argument action the classifier may choose instead of replying."""

    name: str
    description: str


class ToolDecision(BaseModel):
    tool: Optional[str] = None
    text: Optional[str] = None
    usage: Usage = Field(default_factory=Usage)


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def generate_json(self, system: str, user: str) -> JsonResult:
        """Return a single structured object for system + user instructions.

        Malformed output yields an empty ``data`` dict; transport errors raise.
        """
        ...

    @abstractmethod
    def choose_tool(self, system: str, user: str, tools: Sequence[ToolSpec]) -> ToolDecision:
        """Let the model pick one of *tools* or answer with free text."""
        ...
