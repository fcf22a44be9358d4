"""Provider records, one variant per source kind.

Each variant carries only the fields its provider guarantees; the normalizer
turns any of them into a :class:`~vibefinder.schemas.recommend.Recommendation`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Tuple, Union


@dataclass(frozen=True, slots=True)
class Sentiment:
    positive: float = 0.0
    neutral: float = 0.0
    negative: float = 0.0

    @property
    def positive_ratio(self) -> float:
        total = self.positive + self.neutral + self.negative
        return self.positive / total if total > 0 else 0.0


@dataclass(frozen=True, slots=True)
class VideoAnalysis:
    summary: str = ""
    sentiment: Sentiment = field(default_factory=Sentiment)
    keywords: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TrendingContentRecord:
    kind: ClassVar[str] = "trending_content"

    id: str
    platform: str
    url: str
    venue: str
    location_name: str = ""
    hashtags: Tuple[str, ...] = ()
    engagement: int = 0
    lat: Optional[float] = None
    lng: Optional[float] = None


@dataclass(frozen=True, slots=True)
class TrendingVenueRecord:
    kind: ClassVar[str] = "trending_venue"

    id: str
    name: str
    lat: float
    lng: float
    title: str = ""
    description: str = ""
    address: str = ""
    social_url: str = ""
    video_url: str = ""
    image_url: str = ""
    trend_score: Optional[float] = None
    categories: Tuple[str, ...] = ()
    analysis: Optional[VideoAnalysis] = None


@dataclass(frozen=True, slots=True)
class PlaceDetail:
    website: str = ""
    phone: str = ""
    rating: Optional[float] = None
    ratings_total: int = 0
    price_level: Optional[int] = None
    open_now: Optional[bool] = None


@dataclass(frozen=True, slots=True)
class PlaceRecord:
    kind: ClassVar[str] = "place"

    place_id: str
    name: str
    lat: float
    lng: float
    vicinity: str = ""
    types: Tuple[str, ...] = ()
    photo_url: str = ""
    details: Optional[PlaceDetail] = None


@dataclass(frozen=True, slots=True)
class GeneratedRecord:
    kind: ClassVar[str] = "generated"

    payload: Dict[str, Any]


ProviderRecord = Union[TrendingContentRecord, TrendingVenueRecord, PlaceRecord, GeneratedRecord]
