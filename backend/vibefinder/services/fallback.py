from __future__ import annotations

from typing import List, Optional

from ..schemas.recommend import Location, Recommendation

FALLBACK_VERSION = "2024-08-30.1"

_FALLBACK_RECOMMENDATIONS = (
    Recommendation(
        id="fallback-1",
        title="Cozy Coffee Spot",
        description="Trending cafe with chill vibes and great lattes.",
        venue_name="Blue Bottle Coffee",
        location=Location(lat=37.7749, lng=-122.4194),
        social_media_url="https://instagram.com/bluebottle",
        trend_score=85,
        vibe_tags=["Chill", "Cozy", "Foodie"],
        image_url="https://via.placeholder.com/400x300?text=Coffee",
        video_url="https://example.com/video.mp4",
        timestamp="2024-08-30T00:00:00+00:00",
    ),
    Recommendation(
        id="fallback-2",
        title="Rooftop Cocktail Bar",
        description="Elegant rooftop bar with stunning city views and craft cocktails.",
        venue_name="Skyline Lounge",
        location=Location(lat=37.7833, lng=-122.4167),
        social_media_url="https://instagram.com/skylinelounge",
        trend_score=92,
        vibe_tags=["Elegant", "Romantic", "Trendy"],
        image_url="https://via.placeholder.com/400x300?text=Cocktails",
        video_url="https://example.com/video2.mp4",
        timestamp="2024-08-30T00:00:00+00:00",
    ),
    Recommendation(
        id="fallback-3",
        title="Underground Jazz Club",
        description="Hidden jazz venue with live music and intimate atmosphere.",
        venue_name="Blue Note SF",
        location=Location(lat=37.7694, lng=-122.4248),
        social_media_url="https://instagram.com/bluenotesf",
        trend_score=78,
        vibe_tags=["Intimate", "Chill", "Artsy"],
        image_url="https://via.placeholder.com/400x300?text=Jazz",
        video_url="https://example.com/video3.mp4",
        timestamp="2024-08-29T00:00:00+00:00",
    ),
    Recommendation(
        id="fallback-4",
        title="Artisanal Food Market",
        description="Bustling market with local vendors and gourmet food stalls.",
        venue_name="Ferry Building Marketplace",
        location=Location(lat=37.7955, lng=-122.3937),
        social_media_url="https://instagram.com/ferrybuilding",
        trend_score=88,
        vibe_tags=["Energetic", "Foodie", "Vibrant"],
        image_url="https://via.placeholder.com/400x300?text=Market",
        video_url="https://example.com/video4.mp4",
        timestamp="2024-08-30T00:00:00+00:00",
    ),
    Recommendation(
        id="fallback-5",
        title="Vintage Arcade Bar",
        description="Retro gaming bar with classic arcade machines and themed drinks.",
        venue_name="Coin-Op Game Room",
        location=Location(lat=37.7765, lng=-122.4130),
        social_media_url="https://instagram.com/coinopgameroom",
        trend_score=82,
        vibe_tags=["Retro", "Energetic", "Quirky"],
        image_url="https://via.placeholder.com/400x300?text=Arcade",
        video_url="https://example.com/video5.mp4",
        timestamp="2024-08-28T00:00:00+00:00",
    ),
)


def fallback_recommendations() -> List[Recommendation]:
    """Static recommendations served whenever no live source produced anything."""
    return list(_FALLBACK_RECOMMENDATIONS)


def fallback_by_id(recommendation_id: str) -> Optional[Recommendation]:
    return next((rec for rec in _FALLBACK_RECOMMENDATIONS if rec.id == recommendation_id), None)
