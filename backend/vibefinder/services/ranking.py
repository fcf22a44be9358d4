from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from ..schemas.recommend import InteractionKind, Recommendation, dedupe_tags

logger = logging.getLogger("ranking")

DEFAULT_JITTER = 0.1
MAX_PREFERENCES_LEARNED = 10
CLICK_ADOPTION_PROBABILITY = 0.7


def match_ratio(vibe_tags: Sequence[str], preferences: Sequence[str]) -> float:
    """Share of preferences found among the tags, compared case-insensitively."""
    tags = {tag.lower() for tag in vibe_tags}
    matches = sum(1 for pref in preferences if pref.lower() in tags)
    return matches / max(len(preferences), 1)


def rank(
    recommendations: Sequence[Recommendation],
    preferences: Sequence[str],
    *,
    jitter: float = DEFAULT_JITTER,
    rng: Optional[random.Random] = None,
) -> List[Recommendation]:
    """Order recommendations by how well they match the user's vibes.

    Empty preferences keep the incoming order. Otherwise each record scores its
    match ratio plus uniform noise in ``[-jitter, jitter]``; with ``jitter=0``
    the sort is stable, so equal scores keep their arrival order.
    """
    items = list(recommendations)
    if not preferences or not items:
        return items

    rng = rng or random.Random()
    scored = []
    for rec in items:
        score = match_ratio(rec.vibe_tags, preferences)
        if jitter:
            score += rng.uniform(-jitter, jitter)
        scored.append((score, rec))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [rec for _, rec in scored]


def learn_from_interaction(
    preferences: Sequence[str],
    vibe_tags: Sequence[str],
    kind: InteractionKind,
    *,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Fold a recommendation's tags into the user's preferences.

    Saves adopt every new tag, clicks adopt each new tag with probability 0.7
    and views change nothing. The result keeps at most ten tags.
    """
    updated = list(preferences)
    known = {pref.lower() for pref in updated}
    rng = rng or random.Random()

    for tag in dedupe_tags(list(vibe_tags)):
        if tag.lower() in known:
            continue
        if kind == "save" or (kind == "click" and rng.random() < CLICK_ADOPTION_PROBABILITY):
            updated.append(tag)
            known.add(tag.lower())

    if len(updated) > MAX_PREFERENCES_LEARNED:
        logger.debug("Trimming learned preferences from %s to %s", len(updated), MAX_PREFERENCES_LEARNED)
    return updated[:MAX_PREFERENCES_LEARNED]
