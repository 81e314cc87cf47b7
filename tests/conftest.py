"""Pytest configuration and fixtures."""

import os

# Settings are cached on first use, so the environment is fixed before any import.
os.environ["CAMPAIGN_AGENT_ENV"] = "test"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
os.environ["STORE_BACKEND"] = "local"

import pytest  # noqa: E402

from campaign_agent.models import IdeaListItem, SessionContext  # noqa: E402
from tests.fakes.samples import CONTEXT, make_idea  # noqa: E402


@pytest.fixture
def ctx() -> SessionContext:
    return SessionContext.model_validate(CONTEXT)


@pytest.fixture
def idea() -> IdeaListItem:
    return IdeaListItem.model_validate(make_idea(3))
