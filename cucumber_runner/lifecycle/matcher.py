"""Resolve parsed step results to known step entities.

Exact ``Keyword text`` equality is tried first; if that fails, bracketed
tag tokens (``[TAG123]``) are stripped from both sides and equality is
tried again.  Candidates are tried in the order given, so callers control
which of several identical steps wins.
"""

from __future__ import annotations

import re
from typing import Iterable

from cucumber_runner.analysis.events import StepResultEvent
from cucumber_runner.lifecycle.entities import TestEntity

_TAG_RE = re.compile(r"\s*\[[A-Za-z0-9]+\]\s*")
_SPACE_RE = re.compile(r"\s+")


def strip_tags(text: str) -> str:
    """Remove bracketed tag tokens and collapse the whitespace left behind."""
    return _SPACE_RE.sub(" ", _TAG_RE.sub(" ", text)).strip()


def resolve(event: StepResultEvent, known: Iterable[TestEntity]) -> TestEntity | None:
    """Find the step entity an event refers to.

    Args:
        event: Parsed step result.
        known: Candidate step entities, in preference order.

    Returns:
        The first matching entity, or None when neither pass matches.
    """
    candidates = [e for e in known if e.is_step]
    label = event.label
    for entity in candidates:
        if entity.label == label:
            return entity

    cleaned = strip_tags(label)
    for entity in candidates:
        if strip_tags(entity.label) == cleaned:
            return entity
    return None
