from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from ..core.config import Settings
from ..schemas.recommend import Recommendation, dedupe_tags
from .aggregator import AggregationRequest, Aggregator
from .fallback import fallback_recommendations
from .ranking import rank

logger = logging.getLogger("recommendations")


class RecommendationService:
    def __init__(self, aggregator: Aggregator, settings: Settings, *, rng: Optional[random.Random] = None) -> None:
        self.aggregator = aggregator
        self.settings = settings
        self.rng = rng

    async def get_recommendations(self, location: str, preferences: Sequence[str]) -> List[Recommendation]:
        """Ranked recommendations for a location; never raises.

        Any failure inside the pipeline resolves to the static fallback list.
        """
        try:
            request = AggregationRequest(
                location_query=(location or "").strip(),
                preferences=dedupe_tags(list(preferences or [])),
                min_results=self.settings.min_results,
            )
            result = await self.aggregator.aggregate(request)
            ranked = rank(
                result.recommendations,
                request.preferences,
                jitter=self.settings.ranking_jitter,
                rng=self.rng,
            )
            logger.info(
                "Served %s recommendations for '%s' from %s",
                len(ranked),
                request.location_query,
                result.source,
            )
            return ranked
        except Exception:
            logger.exception("Recommendation pipeline failed for '%s'", location)
            return fallback_recommendations()


async def get_recommendations(
    location: str,
    preferences: Sequence[str],
    *,
    service: RecommendationService,
) -> List[Recommendation]:
    return await service.get_recommendations(location, preferences)
