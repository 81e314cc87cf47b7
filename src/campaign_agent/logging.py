"""key=value logging for campaign-agent.

Lines look like::

    ts=... level=INFO logger=campaign_agent.router msg="turn routed" decision=GenerateIdeas path=...

``session_id``, ``tool`` and ``decision`` always come right after the message
when present; any other context follows in the order it was given.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict

CONTEXT_KEYS = ("session_id", "tool", "decision")


def _quote(value: Any) -> str:
    text = str(value)
    if text == "" or any(c in text for c in ' ="'):
        return '"' + text.replace('"', '\\"') + '"'
    return text


class StructuredFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        fields: Dict[str, Any] = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        context: Dict[str, Any] = getattr(record, "context", {})
        for key in CONTEXT_KEYS:
            if key in context:
                fields[key] = context[key]
        for key, value in context.items():
            fields.setdefault(key, value)
        if record.exc_info:
            fields["exc"] = self.formatException(record.exc_info).replace("\n", " | ")
        return " ".join(f"{k}={_quote(v)}" for k, v in fields.items())


def get_logger(name: str) -> logging.Logger:
    """Logger writing key=value lines to stderr; DEBUG in the dev environment."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    try:
        from campaign_agent.config import get_settings

        dev = get_settings().CAMPAIGN_AGENT_ENV == "dev"
    except Exception:
        dev = False
    logger.setLevel(logging.DEBUG if dev else logging.INFO)
    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **context: Any) -> None:
    """Log *msg* with *context* rendered as extra key=value fields."""
    logger.log(level, msg, extra={"context": context})
