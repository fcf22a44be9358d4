from __future__ import annotations

import hashlib
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..schemas.recommend import Location, Recommendation
from ..sources.records import (
    GeneratedRecord,
    PlaceRecord,
    ProviderRecord,
    TrendingContentRecord,
    TrendingVenueRecord,
)
from .vibes import vibe_tags_for

SYNTHETIC_SCORE_FLOOR = 70
SYNTHETIC_SCORE_CEILING = 100


def clamp_score(value: Any) -> int:
    score = float(value)
    if not math.isfinite(score):
        raise ValueError(f"trend score is not finite: {value!r}")
    return max(0, min(100, int(round(score))))


def synthesize_trend_score(key: str) -> int:
    """Stable placeholder score in [70, 100] for sources that report none."""
    digest = hashlib.blake2b(key.encode("utf-8"), digest_size=8).digest()
    span = SYNTHETIC_SCORE_CEILING - SYNTHETIC_SCORE_FLOOR + 1
    return SYNTHETIC_SCORE_FLOOR + int.from_bytes(digest, byteorder="big") % span


def _timestamp(observed_at: Optional[datetime]) -> str:
    return (observed_at or datetime.now(timezone.utc)).isoformat()


def _from_trending_venue(record: TrendingVenueRecord, observed_at: Optional[datetime]) -> Recommendation:
    rec_id = f"venue-{record.id}"
    analysis = record.analysis
    terms = list(record.categories) + list(analysis.keywords if analysis else ())
    description = record.description or (analysis.summary if analysis else "")
    score = clamp_score(record.trend_score) if record.trend_score is not None else synthesize_trend_score(rec_id)
    return Recommendation(
        id=rec_id,
        title=record.title or record.name,
        description=description,
        venue_name=record.name,
        location=Location(lat=record.lat, lng=record.lng),
        social_media_url=record.social_url,
        image_url=record.image_url,
        video_url=record.video_url,
        trend_score=score,
        vibe_tags=vibe_tags_for(terms),
        timestamp=_timestamp(observed_at),
    )


def _place_description(record: PlaceRecord) -> str:
    parts = []
    details = record.details
    if details is not None and details.rating is not None:
        parts.append(f"Rated {details.rating:.1f} from {details.ratings_total:,} reviews")
    if record.vicinity:
        parts.append(record.vicinity)
    return " · ".join(parts)


def _from_place(record: PlaceRecord, observed_at: Optional[datetime]) -> Recommendation:
    rec_id = f"place-{record.place_id}"
    return Recommendation(
        id=rec_id,
        title=record.name,
        description=_place_description(record),
        venue_name=record.name,
        location=Location(lat=record.lat, lng=record.lng),
        social_media_url="",
        image_url=record.photo_url,
        video_url="",
        trend_score=synthesize_trend_score(rec_id),
        vibe_tags=vibe_tags_for(record.types),
        timestamp=_timestamp(observed_at),
    )


def _from_trending_content(record: TrendingContentRecord, observed_at: Optional[datetime]) -> Recommendation:
    if record.lat is None or record.lng is None:
        raise ValueError(f"trending content {record.id} has no coordinates")
    rec_id = f"content-{record.id}"
    # engagement is a raw interaction count; 100 interactions per score point
    score = clamp_score(record.engagement / 100) if record.engagement else synthesize_trend_score(rec_id)
    return Recommendation(
        id=rec_id,
        title=record.venue,
        description=f"Trending on {record.platform}" if record.platform else "",
        venue_name=record.venue,
        location=Location(lat=record.lat, lng=record.lng),
        social_media_url=record.url,
        image_url="",
        video_url=record.url,
        trend_score=score,
        vibe_tags=vibe_tags_for(record.hashtags),
        timestamp=_timestamp(observed_at),
    )


def _pick(payload: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return value
    return default


def _from_generated(record: GeneratedRecord, observed_at: Optional[datetime]) -> Recommendation:
    payload = record.payload
    title = str(_pick(payload, "title", "venue_name", "venueName", default=""))
    if not title:
        raise ValueError("generated recommendation without a title")
    raw_id = _pick(payload, "recommendationId", "id")
    rec_id = f"ai-{raw_id}" if raw_id is not None else f"ai-{hashlib.blake2b(title.encode('utf-8'), digest_size=6).hexdigest()}"
    location = payload.get("location")
    if not isinstance(location, dict):
        raise ValueError("generated recommendation without location")
    raw_score = _pick(payload, "trend_score", "trendScore")
    tags = _pick(payload, "vibe_tags", "vibeTags", default=[])
    return Recommendation(
        id=rec_id,
        title=title,
        description=str(_pick(payload, "description", default="")),
        venue_name=str(_pick(payload, "venue_name", "venueName", default=title)),
        location=Location(lat=float(location["lat"]), lng=float(location["lng"])),
        social_media_url=str(_pick(payload, "social_media_url", "socialMediaUrl", default="")),
        image_url=str(_pick(payload, "image_url", "imageUrl", default="")),
        video_url=str(_pick(payload, "video_url", "videoUrl", default="")),
        trend_score=clamp_score(raw_score) if raw_score is not None else synthesize_trend_score(rec_id),
        vibe_tags=[str(tag) for tag in tags] if isinstance(tags, list) else [],
        timestamp=str(_pick(payload, "timestamp", default="")) or _timestamp(observed_at),
    )


def normalize(record: ProviderRecord, *, observed_at: Optional[datetime] = None) -> Recommendation:
    """Turn any provider record into a canonical recommendation.

    Raises ``ValueError`` when the record cannot satisfy the recommendation
    invariants (for example coordinates out of range) and ``TypeError`` for an
    unknown record variant.
    """
    if isinstance(record, TrendingVenueRecord):
        return _from_trending_venue(record, observed_at)
    if isinstance(record, PlaceRecord):
        return _from_place(record, observed_at)
    if isinstance(record, TrendingContentRecord):
        return _from_trending_content(record, observed_at)
    if isinstance(record, GeneratedRecord):
        return _from_generated(record, observed_at)
    raise TypeError(f"unsupported provider record: {type(record).__name__}")
