"""Tests for model parsing rules."""

from datetime import datetime

import pytest

from campaign_agent.models import AgentRequest, IdeaListItem, SessionRecord, StoredMessage
from tests.fakes.samples import CONTEXT, make_idea


def test_idea_item_tolerates_generated_shapes():
    item = IdeaListItem.model_validate(
        make_idea(1, id=3, title=None, hook=12, tags="launch,  trail , ")
    )

    assert item.id == "3"
    assert item.title == ""
    assert item.hook == "12"
    assert item.tags == ["launch", "trail"]


@pytest.mark.parametrize(
    "tags, expected",
    [(None, []), (["a", 2, None], ["a", "2"]), (5, ["5"]), ("", [])],
)
def test_idea_item_tags(tags, expected):
    assert IdeaListItem.model_validate({"tags": tags}).tags == expected


def test_request_accepts_loose_selected_idea():
    request = AgentRequest.model_validate(
        {
            "session_id": "s1",
            "context": CONTEXT,
            "user_input": "Develop this idea",
            "selected_idea": make_idea(2, hook=None, channel=None),
        }
    )

    assert request.selected_idea.id == "idea_2"
    assert request.selected_idea.hook == ""


def test_row_defaults_are_timezone_aware():
    message = StoredMessage(id="m1", session_id="s1", role="user", type="text")
    session = SessionRecord(id="s1")

    assert datetime.fromisoformat(message.created_at).tzinfo is not None
    assert datetime.fromisoformat(session.created_at).tzinfo is not None
