"""OpenAI-based LLM provider."""

from __future__ import annotations

from typing import Any, Sequence

from openai import OpenAI

from campaign_agent.config import Settings, get_settings
from campaign_agent.llm.base import (
    JsonResult,
    LLMProvider,
    ToolDecision,
    ToolSpec,
    Usage,
    parse_json_object,
)


def _usage(response: Any) -> Usage:
    usage = getattr(response, "usage", None)
    if usage is None:
        return Usage()
    return Usage(
        prompt_tokens=getattr(usage, "prompt_tokens", None),
        completion_tokens=getattr(usage, "completion_tokens", None),
    )


def _tool_payload(tool: ToolSpec) -> dict:
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": {
                "type": "object",
                "properties": {},
                "additionalProperties": False,
            },
        },
    }


class OpenAIProvider(LLMProvider):
    """LLM provider backed by the OpenAI chat completions API."""

    def __init__(self, settings: Settings | None = None, client: OpenAI | None = None) -> None:
        settings = settings or get_settings()
        api_key = settings.require_openai()
        self._client = client or OpenAI(api_key=api_key)
        self.generation_model = settings.GENERATION_MODEL
        self.generation_temperature = settings.GENERATION_TEMPERATURE
        self.classifier_model = settings.CLASSIFIER_MODEL
        self.classifier_temperature = settings.CLASSIFIER_TEMPERATURE

    def generate_json(self, system: str, user: str) -> JsonResult:
        response = self._client.chat.completions.create(
            model=self.generation_model,
            temperature=self.generation_temperature,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )
        content = response.choices[0].message.content if response.choices else None
        return JsonResult(
            data=parse_json_object(content),
            usage=_usage(response),
            model=self.generation_model,
        )

    def choose_tool(self, system: str, user: str, tools: Sequence[ToolSpec]) -> ToolDecision:
        response = self._client.chat.completions.create(
            model=self.classifier_model,
            temperature=self.classifier_temperature,
            tool_choice="auto",
            tools=[_tool_payload(t) for t in tools],
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )
        if not response.choices:
            return ToolDecision(usage=_usage(response))

        message = response.choices[0].message
        tool_calls = message.tool_calls or []
        if tool_calls:
            return ToolDecision(tool=tool_calls[0].function.name, usage=_usage(response))
        return ToolDecision(text=message.content, usage=_usage(response))
