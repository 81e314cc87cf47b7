"""Tests for the HTTP API via FastAPI TestClient with fake provider and store."""

import pytest
from fastapi.testclient import TestClient

from campaign_agent import api as api_module
from campaign_agent.errors import ConfigurationError
from campaign_agent.models import CHANNELS
from tests.fakes.fake_provider import FakeProvider
from tests.fakes.fake_store import FakeStore
from tests.fakes.samples import CONTEXT, make_concept, make_idea, make_ideas


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def client(provider, store):
    api_module.api.dependency_overrides[api_module.get_provider] = lambda: provider
    api_module.api.dependency_overrides[api_module.get_store] = lambda: store
    yield TestClient(api_module.api)
    api_module.api.dependency_overrides.clear()


def _body(**overrides):
    body = {
        "session_id": "s1",
        "context": CONTEXT,
        "user_input": "10 ideas for a new trail shoe launch",
    }
    body.update(overrides)
    return body


def test_generate_ideas_turn(client, provider, store):
    provider.decisions = ["GenerateIdeas"]
    provider.payloads = [{"items": make_ideas()}]

    response = client.post("/agent", json=_body())

    assert response.status_code == 200
    message = response.json()["message"]
    assert message["type"] == "idea_list"
    assert message["session_id"] == "s1"
    assert {"id", "created_at", "role", "content"} <= message.keys()
    assert len(store.messages) == 2


def test_develop_selected_idea_turn(client, provider):
    provider.decisions = ["DevelopConcept"]
    provider.payloads = [make_concept()]

    response = client.post(
        "/agent",
        json=_body(user_input="Develop this idea: idea_1", selected_idea=make_idea(1)),
    )

    message = response.json()["message"]
    assert message["type"] == "concept"
    assert message["content"]["channel_format"]["channel"] in CHANNELS


@pytest.mark.parametrize("field", ["context", "user_input", "session_id"])
def test_missing_field_rejected_before_model_call(client, provider, store, field):
    body = _body()
    del body[field]

    response = client.post("/agent", json=body)

    assert response.status_code == 400
    assert response.json() == {
        "error": "Missing required fields: context, user_input, and session_id"
    }
    assert provider.calls == 0
    assert store.messages == []


def test_invalid_context_is_client_error(client, provider):
    response = client.post("/agent", json=_body(context={"objective": "Virality"}))
    assert response.status_code == 400
    assert provider.calls == 0


def test_network_error_in_generate_ideas(client, provider):
    provider.decisions = ["GenerateIdeas"]
    provider.payloads = [ConnectionError("network down")]

    message = client.post("/agent", json=_body()).json()["message"]

    assert message["type"] == "text"
    assert message["content"] == {"text": "Sorry—couldn't generate ideas. Try again."}


def test_unexpected_error_returns_generic_message(client, monkeypatch):
    def explode(*_args, **_kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(api_module, "handle_turn", explode)

    response = client.post("/agent", json=_body())

    assert response.status_code == 200
    assert response.json() == {
        "message": {
            "role": "assistant",
            "type": "text",
            "content": {"text": "Sorry—something went wrong. Please try again."},
        }
    }


def test_missing_credentials_is_server_error(client, store):
    def unconfigured():
        raise ConfigurationError("OPENAI_API_KEY not configured")

    api_module.api.dependency_overrides[api_module.get_provider] = unconfigured

    response = client.post("/agent", json=_body())

    assert response.status_code == 500
    assert response.json() == {"error": "OPENAI_API_KEY not configured"}
    assert store.messages == []


def test_preflight_is_acknowledged(client, provider):
    response = client.options(
        "/agent",
        headers={
            "Origin": "https://app.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )
    assert response.status_code == 200
    assert provider.calls == 0


def test_create_and_list_sessions(client, provider, store):
    provider.decisions = ["GenerateIdeas"]
    provider.payloads = [{"items": make_ideas()}]

    created = client.post("/sessions", json={"prompt": "10 ideas", "context": CONTEXT}).json()
    session_id = created["session"]["id"]
    assert created["message"]["type"] == "idea_list"

    sessions = client.get("/sessions").json()["sessions"]
    assert sessions[0]["id"] == session_id
    assert sessions[0]["ideas_count"] == 1
    assert sessions[0]["product"] == "Ridge Runner"

    log = client.get(f"/sessions/{session_id}/messages").json()["messages"]
    assert [m["role"] for m in log] == ["user", "assistant"]


def test_create_session_requires_product(client, provider):
    context = dict(CONTEXT, product={"name": "", "description": ""})
    response = client.post("/sessions", json={"prompt": "ideas", "context": context})
    assert response.status_code == 400
    assert provider.calls == 0


def test_unknown_session_messages(client):
    assert client.get("/sessions/nope/messages").status_code == 404


def test_loosely_generated_idea_can_be_developed(client, provider):
    provider.decisions = ["GenerateIdeas", "DevelopConcept"]
    provider.payloads = [
        {"items": [make_idea(1, id=1, hook=None, tags="launch, trail")]},
        make_concept(),
    ]

    first = client.post("/agent", json=_body())
    stored_idea = first.json()["message"]["content"]["items"][0]
    second = client.post(
        "/agent",
        json=_body(user_input="Develop this idea: Mud Season Mile 1", selected_idea=stored_idea),
    )

    assert second.status_code == 200
    message = second.json()["message"]
    assert message["type"] == "concept"
    assert message["content"]["from_idea_ref"] == "1"
    assert '"tags": ["launch", "trail"]' in provider.json_calls[-1]["user"]
