from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Literal, Optional, Tuple

from ..cache.redis import KeyValueCache
from ..core.config import Settings
from ..db.repository import RecommendationRepository
from ..providers.registry import ProviderSet
from ..schemas.recommend import Recommendation
from ..sources.adapters import (
    fetch_nearby_places,
    fetch_place_details,
    fetch_trending_venues,
    fetch_video_keywords,
    fetch_video_sentiment,
    fetch_video_summary,
    generate_recommendations,
    geocode_location,
)
from ..sources.records import PlaceRecord, ProviderRecord, TrendingVenueRecord, VideoAnalysis
from ..sources.result import Err, ErrorKind, unwrap_or
from .fallback import fallback_recommendations
from .normalizer import normalize

logger = logging.getLogger("aggregator")

Source = Literal["database", "trending", "places", "generated", "fallback"]


@dataclass(slots=True)
class AggregationRequest:
    location_query: str
    preferences: List[str] = field(default_factory=list)
    min_results: int = 5


@dataclass(slots=True)
class AggregationResult:
    source: Source
    recommendations: List[Recommendation]


def dedupe_by_id(recommendations: Iterable[Recommendation]) -> List[Recommendation]:
    seen: set[str] = set()
    out: List[Recommendation] = []
    for rec in recommendations:
        if rec.id in seen:
            continue
        seen.add(rec.id)
        out.append(rec)
    return out


class Aggregator:
    """Walks the sources in priority order until one yields a usable batch.

    database (when it already holds ``min_results``) -> trending venues with
    video analysis -> nearby places with details -> AI generation -> static
    fallback list. Batches keep their arrival order; ranking happens later.
    Live batches are written back to the repository so their ids can be saved.
    """

    def __init__(
        self,
        repository: RecommendationRepository,
        providers: ProviderSet,
        settings: Settings,
        *,
        cache: KeyValueCache | None = None,
    ) -> None:
        self.repository = repository
        self.providers = providers
        self.settings = settings
        self.cache = cache

    @property
    def _timeout(self) -> float:
        return self.settings.adapter_timeout_seconds

    @property
    def _batch_size(self) -> int:
        return self.settings.enrichment_batch_size

    async def aggregate(self, request: AggregationRequest) -> AggregationResult:
        try:
            return await asyncio.wait_for(self._run(request), timeout=self.settings.aggregation_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "Aggregation for '%s' exceeded %.1fs, serving fallback",
                request.location_query,
                self.settings.aggregation_timeout_seconds,
            )
        except Exception:
            logger.exception("Aggregation for '%s' failed, serving fallback", request.location_query)
        return AggregationResult("fallback", fallback_recommendations())

    async def _run(self, request: AggregationRequest) -> AggregationResult:
        observed_at = datetime.now(timezone.utc)
        lat, lng = await self.resolve_location(request.location_query)

        stored = await self._from_database(request, lat, lng)
        if len(stored) >= request.min_results:
            logger.info("Serving %s stored recommendations for '%s'", len(stored), request.location_query)
            return AggregationResult("database", stored)

        trending = await self._from_trending(lat, lng, observed_at)
        if trending:
            return await self._remember(AggregationResult("trending", trending))

        places = await self._from_places(lat, lng, observed_at)
        if places:
            return await self._remember(AggregationResult("places", places))

        generated = await self._from_generator(request, observed_at)
        if generated:
            return await self._remember(AggregationResult("generated", generated))

        logger.warning("No live source produced recommendations for '%s'", request.location_query)
        return AggregationResult("fallback", fallback_recommendations())

    async def _remember(self, result: AggregationResult) -> AggregationResult:
        try:
            await self.repository.upsert_many(result.recommendations, source=result.source)
        except Exception as exc:
            logger.warning("Could not store %s %s recommendations: %s", len(result.recommendations), result.source, exc)
        return result

    async def resolve_location(self, query: str) -> Tuple[float, float]:
        result = await geocode_location(
            self.providers.maps,
            query,
            cache=self.cache,
            cache_ttl=self.settings.geocode_cache_ttl_seconds,
            timeout=self._timeout,
        )
        if isinstance(result, Err):
            logger.info("Geocoding '%s' failed (%s), using reference coordinate", query, result.detail)
            return self.settings.default_latitude, self.settings.default_longitude
        return result.value

    async def _from_database(self, request: AggregationRequest, lat: float, lng: float) -> List[Recommendation]:
        try:
            if request.preferences:
                rows = await self.repository.find_by_tags(request.preferences)
            else:
                rows = await self.repository.find_by_location(lat, lng, radius_km=self.settings.trending_radius_km)
        except Exception as exc:
            logger.warning("Stored recommendations unavailable: %s", exc)
            return []
        return dedupe_by_id(rows)

    async def _from_trending(self, lat: float, lng: float, observed_at: datetime) -> List[Recommendation]:
        result = await fetch_trending_venues(
            self.providers.ensemble,
            lat,
            lng,
            radius_km=self.settings.trending_radius_km,
            limit=self._batch_size,
            timeout=self._timeout,
        )
        venues = unwrap_or(result, [])[: self._batch_size]
        if not venues:
            return []
        enriched = await asyncio.gather(*(self._enrich_venue(venue) for venue in venues))
        return self._normalize_batch([venue for venue in enriched if venue is not None], observed_at)

    async def _enrich_venue(self, venue: TrendingVenueRecord) -> Optional[TrendingVenueRecord]:
        if not venue.video_url:
            return venue
        client = self.providers.socialkit
        summary, sentiment, keywords = await asyncio.gather(
            fetch_video_summary(client, venue.video_url, timeout=self._timeout),
            fetch_video_sentiment(client, venue.video_url, timeout=self._timeout),
            fetch_video_keywords(client, venue.video_url, timeout=self._timeout),
        )
        failed = [res for res in (summary, sentiment, keywords) if isinstance(res, Err)]
        if failed:
            logger.warning(
                "Dropping venue %s: %s (%s)",
                venue.id,
                ErrorKind.PARTIAL_ENRICHMENT_FAILURE.value,
                ", ".join(res.kind.value for res in failed),
            )
            return None
        analysis = VideoAnalysis(summary=summary.value, sentiment=sentiment.value, keywords=keywords.value)
        return dataclasses.replace(venue, analysis=analysis)

    async def _from_places(self, lat: float, lng: float, observed_at: datetime) -> List[Recommendation]:
        result = await fetch_nearby_places(
            self.providers.maps,
            lat,
            lng,
            self.settings.places_radius_meters,
            timeout=self._timeout,
        )
        places = unwrap_or(result, [])[: self._batch_size]
        if not places:
            return []
        detailed = await asyncio.gather(*(self._enrich_place(place) for place in places))
        return self._normalize_batch([place for place in detailed if place is not None], observed_at)

    async def _enrich_place(self, place: PlaceRecord) -> Optional[PlaceRecord]:
        result = await fetch_place_details(self.providers.maps, place.place_id, timeout=self._timeout)
        if isinstance(result, Err) or result.value is None:
            reason = result.kind.value if isinstance(result, Err) else "not found"
            logger.warning("Dropping place %s: %s (%s)", place.place_id, ErrorKind.PARTIAL_ENRICHMENT_FAILURE.value, reason)
            return None
        return dataclasses.replace(place, details=result.value)

    async def _from_generator(self, request: AggregationRequest, observed_at: datetime) -> List[Recommendation]:
        if self.providers.ai is None:
            return []
        result = await generate_recommendations(
            self.providers.ai,
            request.location_query,
            request.preferences,
            timeout=self._timeout,
        )
        if isinstance(result, Err):
            return []
        return self._normalize_batch(result.value, observed_at)

    def _normalize_batch(self, records: Iterable[ProviderRecord], observed_at: datetime) -> List[Recommendation]:
        out: List[Recommendation] = []
        for record in records:
            try:
                out.append(normalize(record, observed_at=observed_at))
            except (KeyError, TypeError, ValueError, OverflowError) as exc:
                logger.warning("Skipping %s record that failed normalization: %s", record.kind, exc)
        return dedupe_by_id(out)
