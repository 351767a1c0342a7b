"""Merge duplicate mentions, keeping the strongest detection per key."""
from __future__ import annotations

from typing import Dict, Iterable, List

from scpDetector.core.models import Entity, MentionContext


def score_entity(entity: Entity) -> int:
    """Confidence tier (high=3, medium=2, low=1) plus one for link context."""

    score = entity.confidence.tier
    if entity.context is MentionContext.LINK:
        score += 1
    return score


def dedupe_entities(candidates: Iterable[Entity]) -> List[Entity]:
    """Return one entity per ``(id, url)`` key.

    The highest-scoring candidate wins; on equal scores the first one seen
    is kept. Output follows first-seen key order.
    """

    by_key: Dict[str, Entity] = {}
    for entity in candidates:
        existing = by_key.get(entity.key)
        if existing is None or score_entity(entity) > score_entity(existing):
            by_key[entity.key] = entity
    return list(by_key.values())


__all__ = ["dedupe_entities", "score_entity"]
