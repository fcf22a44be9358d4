"""Offline provider catalogs, served when a provider has no API key configured."""
from __future__ import annotations

from typing import Any, Dict, List

CITY_COORDINATES: Dict[str, Dict[str, float]] = {
    "san francisco": {"lat": 37.7749, "lng": -122.4194},
    "new york": {"lat": 40.7128, "lng": -74.0060},
    "los angeles": {"lat": 34.0522, "lng": -118.2437},
    "chicago": {"lat": 41.8781, "lng": -87.6298},
    "miami": {"lat": 25.7617, "lng": -80.1918},
    "seattle": {"lat": 47.6062, "lng": -122.3321},
    "austin": {"lat": 30.2672, "lng": -97.7431},
    "denver": {"lat": 39.7392, "lng": -104.9903},
    "boston": {"lat": 42.3601, "lng": -71.0589},
    "portland": {"lat": 45.5152, "lng": -122.6784},
}

TRENDING_CONTENT: List[Dict[str, Any]] = [
    {
        "id": "tt-1",
        "platform": "tiktok",
        "url": "https://tiktok.com/video1",
        "hashtags": ["foodie", "sanfrancisco", "brunch"],
        "engagement": 5000,
        "location": "San Francisco",
        "venue": "Tartine Bakery",
    },
    {
        "id": "ig-1",
        "platform": "instagram",
        "url": "https://instagram.com/p/123456",
        "hashtags": ["nightlife", "sanfrancisco", "cocktails"],
        "engagement": 3500,
        "location": "San Francisco",
        "venue": "Emporium Arcade Bar",
    },
    {
        "id": "ig-2",
        "platform": "instagram",
        "url": "https://instagram.com/p/234567",
        "hashtags": ["rooftop", "cocktails", "sunset"],
        "engagement": 2300,
        "location": "San Francisco",
        "venue": "Skyline Lounge",
    },
]

TRENDING_VENUES: List[Dict[str, Any]] = [
    {
        "id": "1",
        "name": "Blue Bottle Coffee",
        "title": "Cozy Coffee Spot",
        "description": "Trending cafe with chill vibes and great lattes.",
        "address": "123 Main St, San Francisco, CA",
        "latitude": 37.7749,
        "longitude": -122.4194,
        "social_url": "https://instagram.com/bluebottle",
        "video_url": "https://example.com/video1.mp4",
        "image_url": "https://via.placeholder.com/400x300?text=Coffee",
        "trend_score": 85,
        "categories": ["Coffee", "Cafe", "Breakfast"],
    },
    {
        "id": "2",
        "name": "Skyline Lounge",
        "title": "Rooftop Cocktail Bar",
        "description": "Elegant rooftop bar with stunning city views and craft cocktails.",
        "address": "456 Market St, San Francisco, CA",
        "latitude": 37.7833,
        "longitude": -122.4167,
        "social_url": "https://instagram.com/skylinelounge",
        "video_url": "https://example.com/video2.mp4",
        "image_url": "https://via.placeholder.com/400x300?text=Cocktails",
        "trend_score": 92,
        "categories": ["Bar", "Nightlife", "Cocktails"],
    },
    {
        "id": "3",
        "name": "Blue Note SF",
        "title": "Underground Jazz Club",
        "description": "Hidden jazz venue with live music and intimate atmosphere.",
        "address": "789 Mission St, San Francisco, CA",
        "latitude": 37.7694,
        "longitude": -122.4248,
        "social_url": "https://instagram.com/bluenotesf",
        "video_url": "https://example.com/video3.mp4",
        "image_url": "https://via.placeholder.com/400x300?text=Jazz",
        "categories": ["Music", "Bar"],
    },
]

PLACES: List[Dict[str, Any]] = [
    {
        "place_id": "place1",
        "name": "Blue Bottle Coffee",
        "vicinity": "123 Main St, San Francisco, CA",
        "geometry": {"location": {"lat": 37.7749, "lng": -122.4194}},
        "types": ["cafe", "food", "point_of_interest", "establishment"],
        "photos": [{"photo_reference": "photo_ref_1", "width": 400, "height": 300}],
    },
    {
        "place_id": "place2",
        "name": "Skyline Lounge",
        "vicinity": "456 Market St, San Francisco, CA",
        "geometry": {"location": {"lat": 37.7833, "lng": -122.4167}},
        "types": ["bar", "restaurant", "food", "point_of_interest", "establishment"],
        "photos": [{"photo_reference": "photo_ref_2", "width": 400, "height": 300}],
    },
    {
        "place_id": "place3",
        "name": "Blue Note SF",
        "vicinity": "789 Mission St, San Francisco, CA",
        "geometry": {"location": {"lat": 37.7694, "lng": -122.4248}},
        "types": ["night_club", "bar", "music_venue", "point_of_interest", "establishment"],
        "photos": [{"photo_reference": "photo_ref_3", "width": 400, "height": 300}],
    },
    {
        "place_id": "place4",
        "name": "Ferry Building Marketplace",
        "vicinity": "1 Ferry Building, San Francisco, CA",
        "geometry": {"location": {"lat": 37.7955, "lng": -122.3937}},
        "types": ["shopping_mall", "food", "point_of_interest", "establishment"],
        "photos": [{"photo_reference": "photo_ref_4", "width": 400, "height": 300}],
    },
    {
        "place_id": "place5",
        "name": "Coin-Op Game Room",
        "vicinity": "508 4th St, San Francisco, CA",
        "geometry": {"location": {"lat": 37.7765, "lng": -122.4130}},
        "types": ["bar", "entertainment", "point_of_interest", "establishment"],
        "photos": [{"photo_reference": "photo_ref_5", "width": 400, "height": 300}],
    },
]

PLACE_DETAIL_EXTRAS: Dict[str, Any] = {
    "website": "https://example.com",
    "formatted_phone_number": "+1 (555) 123-4567",
    "opening_hours": {"open_now": True},
    "price_level": 2,
    "rating": 4.5,
    "user_ratings_total": 1234,
}

VIDEO_SUMMARY: Dict[str, Any] = {
    "summary": (
        "This video showcases a popular local cafe with a cozy atmosphere and delicious coffee. "
        "The place is bustling with people enjoying their drinks and conversations."
    ),
    "duration": 45,
    "language": "en",
}

VIDEO_SENTIMENT: Dict[str, float] = {"positive": 75, "neutral": 20, "negative": 5}

VIDEO_KEYWORDS: List[str] = ["coffee", "cozy", "cafe", "downtown", "atmosphere", "trendy"]

VIDEO_ENGAGEMENT: Dict[str, Any] = {
    "views": 8500,
    "likes": 1200,
    "comments": 45,
    "shares": 30,
    "engagement_rate": 0.07,
}
