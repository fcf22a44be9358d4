from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from . import fixtures
from .base import MalformedPayloadError, ProviderClient

logger = logging.getLogger("providers.ensemble")


def _items(payload: Any) -> List[Dict[str, Any]]:
    if isinstance(payload, dict):
        payload = payload.get("data", payload.get("items", []))
    if not isinstance(payload, list):
        raise MalformedPayloadError("ensembledata payload is not a list")
    return [item for item in payload if isinstance(item, dict)]


@dataclass(slots=True)
class EnsembleDataClient(ProviderClient):
    """Social content scraping: trending posts and trending venues."""

    def _auth_params(self) -> Dict[str, Any]:
        return {"token": self.api_key}

    async def get_trending_content(self, location: str, hashtags: Sequence[str] = (), *, limit: int = 10) -> List[Dict[str, Any]]:
        if self.offline:
            logger.debug("Serving offline trending content for %s", location)
            wanted = {tag.lower().lstrip("#") for tag in hashtags if tag}
            items = [
                item for item in fixtures.TRENDING_CONTENT
                if not wanted or wanted.intersection(item["hashtags"])
            ]
            return copy.deepcopy(items[:limit])
        payload = await self._request(
            "GET",
            "/social/trending-content",
            params={"location": location, "hashtags": ",".join(hashtags) or None, "limit": limit},
        )
        return _items(payload)[:limit]

    async def get_trending_venues(self, lat: float, lng: float, *, radius_km: int = 10, limit: int = 10) -> List[Dict[str, Any]]:
        if self.offline:
            logger.debug("Serving offline trending venues near %.4f,%.4f", lat, lng)
            return copy.deepcopy(fixtures.TRENDING_VENUES[:limit])
        payload = await self._request(
            "GET",
            "/social/trending-venues",
            params={"lat": lat, "lng": lng, "radius": radius_km, "limit": limit},
        )
        return _items(payload)[:limit]
