"""Audit of generated ideas and concepts against the requested output rules.

Audits are advisory: they report issues but never change or reject output.
Payloads whose shape makes them unusable raise MalformedOutputError instead.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import ValidationError

from campaign_agent.errors import MalformedOutputError
from campaign_agent.models import CHANNELS, CONCEPT_FORMATS, IDEA_KEYS, ConceptContent

EXPECTED_IDEAS = 10


def _words(value: Any) -> int:
    return len(value.split()) if isinstance(value, str) else 0


def coerce_items(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Return ``data["items"]`` unchanged, or [] when the key is absent."""
    items = data.get("items")
    if items is None:
        return []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise MalformedOutputError("'items' must be an array of objects")
    return items


def coerce_concept(data: Dict[str, Any]) -> ConceptContent:
    try:
        return ConceptContent.model_validate(data)
    except ValidationError as exc:
        raise MalformedOutputError(f"concept has invalid fields: {exc.error_count()} error(s)") from exc


def audit_ideas(items: List[Dict[str, Any]]) -> List[str]:
    """Return a list of rule violations found in an idea batch."""
    issues: List[str] = []
    if len(items) != EXPECTED_IDEAS:
        issues.append(f"expected {EXPECTED_IDEAS} items, got {len(items)}")

    for pos, item in enumerate(items, 1):
        label = item.get("id") or f"#{pos}"
        missing = [k for k in IDEA_KEYS if k not in item]
        if missing:
            issues.append(f"{label}: missing {', '.join(missing)}")
        if _words(item.get("title")) > 8:
            issues.append(f"{label}: title longer than 8 words")
        summary_words = _words(item.get("summary"))
        if "summary" in item and not 40 <= summary_words <= 60:
            issues.append(f"{label}: summary has {summary_words} words (40-60)")
        if _words(item.get("hook")) > 12:
            issues.append(f"{label}: hook longer than 12 words")
        if "channel" in item and item["channel"] not in CHANNELS:
            issues.append(f"{label}: unknown channel {item['channel']!r}")
        tags = item.get("tags")
        if tags is not None and not (
            isinstance(tags, list) and all(isinstance(t, str) for t in tags)
        ):
            issues.append(f"{label}: tags must be an array of strings")
    return issues


def audit_concept(concept: ConceptContent) -> List[str]:
    """Return a list of rule violations found in a developed concept."""
    issues: List[str] = []
    for name in ("title", "summary", "hook", "cta"):
        if not getattr(concept, name):
            issues.append(f"{name} is empty")
    if not concept.kpi.primary:
        issues.append("kpi.primary is empty")

    summary_words = _words(concept.summary)
    if concept.summary and not 80 <= summary_words <= 120:
        issues.append(f"summary has {summary_words} words (80-120)")
    if concept.channel_format.channel not in CHANNELS:
        issues.append(f"unknown channel {concept.channel_format.channel!r}")
    if concept.channel_format.format not in CONCEPT_FORMATS:
        issues.append(f"unknown format {concept.channel_format.format!r}")
    if len(concept.rtbs) != 2:
        issues.append(f"expected 2 rtbs, got {len(concept.rtbs)}")
    if not 3 <= len(concept.beats) <= 5:
        issues.append(f"expected 3-5 beats, got {len(concept.beats)}")
    return issues
