"""Tests for structured-output parsing and the OpenAI provider."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from campaign_agent.config import Settings
from campaign_agent.errors import ConfigurationError
from campaign_agent.llm.base import ToolSpec, parse_json_object
from campaign_agent.llm.openai_provider import OpenAIProvider


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('{"items": []}', {"items": []}),
        ('```json\n{"a": 1}\n```', {"a": 1}),
        ("not json at all", {}),
        ("[1, 2, 3]", {}),
        ("", {}),
        (None, {}),
    ],
)
def test_parse_json_object(raw, expected):
    assert parse_json_object(raw) == expected


def _completion(content=None, tool_name=None, usage=(10, 20)):
    tool_calls = None
    if tool_name:
        tool_calls = [SimpleNamespace(function=SimpleNamespace(name=tool_name, arguments="{}"))]
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message)],
        usage=SimpleNamespace(prompt_tokens=usage[0], completion_tokens=usage[1]),
    )


def _provider(response):
    client = MagicMock()
    client.chat.completions.create.return_value = response
    settings = Settings(OPENAI_API_KEY="sk-test")
    return OpenAIProvider(settings=settings, client=client), client


def test_generate_json_requests_json_mode():
    provider, client = _provider(_completion(content='{"items": [{"id": "idea_1"}]}'))

    result = provider.generate_json("sys", "user")

    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["temperature"] == 0.7
    assert kwargs["messages"][0] == {"role": "system", "content": "sys"}
    assert result.data == {"items": [{"id": "idea_1"}]}
    assert result.usage.prompt_tokens == 10
    assert result.usage.completion_tokens == 20
    assert result.model == "gpt-4o-mini"


def test_generate_json_malformed_output_is_empty():
    provider, _ = _provider(_completion(content="Sure! Here are ideas:"))
    assert provider.generate_json("sys", "user").data == {}


def test_generate_json_propagates_transport_errors():
    provider, client = _provider(None)
    client.chat.completions.create.side_effect = ConnectionError("boom")
    with pytest.raises(ConnectionError):
        provider.generate_json("sys", "user")


def test_choose_tool_returns_first_tool_call():
    provider, client = _provider(_completion(tool_name="DevelopConcept"))

    decision = provider.choose_tool("sys", "user", [ToolSpec(name="DevelopConcept", description="d")])

    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["tool_choice"] == "auto"
    assert kwargs["temperature"] == 0.2
    assert kwargs["tools"][0]["function"]["name"] == "DevelopConcept"
    assert kwargs["tools"][0]["function"]["parameters"]["properties"] == {}
    assert decision.tool == "DevelopConcept"
    assert decision.text is None


def test_choose_tool_returns_text_without_tool_call():
    provider, _ = _provider(_completion(content="What product is this for?"))
    decision = provider.choose_tool("sys", "user", [])
    assert decision.tool is None
    assert decision.text == "What product is this for?"


def test_provider_requires_api_key():
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY not configured"):
        OpenAIProvider(settings=Settings(OPENAI_API_KEY=None), client=MagicMock())
