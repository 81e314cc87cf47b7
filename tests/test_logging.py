"""Tests for the key=value log formatter."""

import logging
import sys

from campaign_agent.logging import StructuredFormatter


def _record(msg, context=None, exc_info=None):
    record = logging.LogRecord("campaign_agent.router", logging.INFO, __file__, 1, msg, None, exc_info)
    if context is not None:
        record.context = context
    return record


def test_context_keys_come_first_after_message():
    line = StructuredFormatter().format(
        _record("turn routed", {"path": "a->b", "decision": "GenerateIdeas", "session_id": "s1"})
    )

    assert 'msg="turn routed" session_id=s1 decision=GenerateIdeas path=a->b' in line
    assert "level=INFO logger=campaign_agent.router" in line


def test_values_with_spaces_are_quoted():
    line = StructuredFormatter().format(_record("x", {"issues": 'bad "title"; long'}))

    assert 'issues="bad \\"title\\"; long"' in line


def test_exception_is_rendered_on_one_line():
    try:
        raise ValueError("boom")
    except ValueError:
        line = StructuredFormatter().format(_record("failed", exc_info=sys.exc_info()))

    assert "exc=" in line
    assert "ValueError: boom" in line
    assert "\n" not in line
