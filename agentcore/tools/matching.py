"""Keyword matching from sub-unit text to a tool name."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class TriggerRule:
    """Routes text containing ``keyword`` to the tool named ``tool_name``."""

    keyword: str
    tool_name: str


# Signature of a pluggable matcher: text + ordered rules -> tool name or None
Matcher = Callable[[str, Sequence[TriggerRule]], str | None]


def match_keywords(text: str, rules: Sequence[TriggerRule]) -> str | None:
    """Return the tool name of the first rule whose keyword occurs in ``text``.

    Matching is case-insensitive substring containment. Rules are checked in
    the order given, so earlier rules take priority.
    """
    lowered = text.lower()
    for rule in rules:
        if rule.keyword.lower() in lowered:
            return rule.tool_name
    return None
