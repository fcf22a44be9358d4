from __future__ import annotations

from typing import Dict, Iterable, List

from ..schemas.recommend import FALLBACK_TAG, dedupe_tags

VIBE_CATEGORIES: List[str] = [
    "Chill", "Energetic", "Romantic", "Adventurous", "Cozy", "Elegant",
    "Hipster", "Trendy", "Family-friendly", "Artsy", "Luxurious", "Casual",
    "Retro", "Modern", "Intimate", "Lively", "Quirky", "Sophisticated",
    "Rustic", "Vibrant", "Foodie", "Nightlife",
]

_CANONICAL: Dict[str, str] = {tag.lower(): tag for tag in VIBE_CATEGORIES}

# provider vocabulary (place types, venue categories, video keywords) -> vibe tag
TERM_TAGS: Dict[str, str] = {
    "cafe": "Chill",
    "coffee": "Chill",
    "bakery": "Cozy",
    "breakfast": "Foodie",
    "brunch": "Foodie",
    "food": "Foodie",
    "foodie": "Foodie",
    "restaurant": "Foodie",
    "market": "Foodie",
    "bar": "Nightlife",
    "night_club": "Nightlife",
    "nightclub": "Nightlife",
    "cocktails": "Nightlife",
    "nightlife": "Nightlife",
    "music": "Artsy",
    "music_venue": "Artsy",
    "jazz": "Artsy",
    "art_gallery": "Artsy",
    "museum": "Artsy",
    "park": "Chill",
    "rooftop": "Romantic",
    "shopping_mall": "Vibrant",
    "entertainment": "Energetic",
    "amusement_park": "Adventurous",
    "arcade": "Retro",
    "spa": "Luxurious",
}


def vibe_tags_for(terms: Iterable[str]) -> List[str]:
    """Map provider terms onto known vibe tags, falling back to ``Trending``."""
    tags: List[str] = []
    for term in terms:
        key = str(term).strip().lower()
        tag = _CANONICAL.get(key) or TERM_TAGS.get(key)
        if tag:
            tags.append(tag)
    return dedupe_tags(tags) or [FALLBACK_TAG]
