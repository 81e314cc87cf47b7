"""LLM provider abstraction."""

from campaign_agent.llm.base import JsonResult, LLMProvider, ToolDecision, ToolSpec, Usage
from campaign_agent.llm.openai_provider import OpenAIProvider

__all__ = ["JsonResult", "LLMProvider", "OpenAIProvider", "ToolDecision", "ToolSpec", "Usage"]
