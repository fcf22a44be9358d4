from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

FALLBACK_TAG = "Trending"


def dedupe_tags(tags: List[str]) -> List[str]:
    """Strip, drop blanks and keep the first spelling of each tag (case-insensitive)."""
    seen: set[str] = set()
    out: List[str] = []
    for tag in tags:
        clean = str(tag).strip()
        key = clean.lower()
        if not clean or key in seen:
            continue
        seen.add(key)
        out.append(clean)
    return out


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(_CamelModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class Recommendation(_CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    venue_name: str
    location: Location
    social_media_url: str = ""
    image_url: str = ""
    video_url: str = ""
    trend_score: int = Field(..., ge=0, le=100)
    vibe_tags: List[str] = Field(..., min_length=1)
    timestamp: str

    @field_validator("vibe_tags", mode="before")
    @classmethod
    def _unique_tags(cls, value: List[str]) -> List[str]:
        tags = dedupe_tags(list(value or []))
        return tags or [FALLBACK_TAG]

    @field_validator("social_media_url", "image_url", "video_url", mode="before")
    @classmethod
    def _empty_url(cls, value: Optional[str]) -> str:
        return value or ""

    @field_validator("timestamp", mode="before")
    @classmethod
    def _iso_timestamp(cls, value: str | datetime) -> str:
        if isinstance(value, datetime):
            return value.isoformat()
        return value


class VenueSummary(_CamelModel):
    id: str
    name: str
    address: str = ""
    location: Location
    categories: List[str] = []


class RecommendRequest(_CamelModel):
    location: str = Field(..., min_length=1, description="Free-text location, e.g. a city name")
    preferences: List[str] = Field(default_factory=list)

    @field_validator("location")
    @classmethod
    def _strip_location(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("location must not be blank")
        return value

    @field_validator("preferences")
    @classmethod
    def _clean_preferences(cls, value: List[str]) -> List[str]:
        return dedupe_tags(value)


class RecommendResponse(_CamelModel):
    recommendations: List[Recommendation] = []


class HealthResponse(_CamelModel):
    ok: bool = True
    fallback_version: str
    offline_providers: List[str] = []


class TrendingKeywordsResponse(_CamelModel):
    location: str
    keywords: List[str] = []


class SentimentBreakdown(_CamelModel):
    positive: float = 0.0
    neutral: float = 0.0
    negative: float = 0.0


class EngagementMetrics(_CamelModel):
    views: int = 0
    likes: int = 0
    comments: int = 0
    shares: int = 0
    engagement_rate: float = 0.0


class TrendInsightsResponse(_CamelModel):
    url: str
    sentiment: SentimentBreakdown
    keywords: List[str] = []
    engagement: EngagementMetrics
    trend_score: int = Field(..., ge=0, le=100)


InteractionKind = Literal["view", "save", "click"]
