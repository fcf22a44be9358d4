from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from . import fixtures
from .base import MalformedPayloadError, ProviderClient, ProviderError

logger = logging.getLogger("providers.google_maps")

DETAIL_FIELDS = (
    "place_id,name,vicinity,geometry,types,photos,website,formatted_phone_number,"
    "opening_hours,price_level,rating,user_ratings_total"
)
_EMPTY_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}


def _check_status(payload: Any) -> str:
    if not isinstance(payload, dict):
        raise MalformedPayloadError("google maps payload is not an object")
    status = payload.get("status", "OK")
    if status != "OK" and status not in _EMPTY_STATUSES:
        raise ProviderError(f"google maps status {status}: {payload.get('error_message', '')}")
    return status


@dataclass(slots=True)
class GoogleMapsClient(ProviderClient):
    """Geocoding, nearby search and place details."""

    def _auth_params(self) -> Dict[str, Any]:
        return {"key": self.api_key}

    def photo_url(self, photo_reference: str, *, max_width: int = 400) -> str:
        if not photo_reference:
            return ""
        base = str(self.base_url).rstrip("/")
        return f"{base}/place/photo?maxwidth={max_width}&photo_reference={photo_reference}"

    async def geocode(self, address: str) -> Dict[str, float] | None:
        if self.offline:
            lowered = address.lower()
            for city, coords in fixtures.CITY_COORDINATES.items():
                if city in lowered:
                    return dict(coords)
            return None
        payload = await self._request("GET", "/geocode/json", params={"address": address})
        if _check_status(payload) in _EMPTY_STATUSES:
            return None
        results = payload.get("results") or []
        if not results:
            return None
        location = results[0].get("geometry", {}).get("location", {})
        if "lat" not in location or "lng" not in location:
            raise MalformedPayloadError("geocode result without coordinates")
        return {"lat": float(location["lat"]), "lng": float(location["lng"])}

    async def search_nearby_places(
        self,
        lat: float,
        lng: float,
        radius: int = 5000,
        *,
        place_type: str | None = None,
        keyword: str | None = None,
    ) -> List[Dict[str, Any]]:
        if self.offline:
            return copy.deepcopy(fixtures.PLACES)
        payload = await self._request(
            "GET",
            "/place/nearbysearch/json",
            params={"location": f"{lat},{lng}", "radius": radius, "type": place_type, "keyword": keyword},
        )
        if _check_status(payload) in _EMPTY_STATUSES:
            return []
        results = payload.get("results")
        if not isinstance(results, list):
            raise MalformedPayloadError("nearby search without results list")
        return results

    async def get_place_details(self, place_id: str) -> Dict[str, Any] | None:
        if self.offline:
            place = next((p for p in fixtures.PLACES if p["place_id"] == place_id), None)
            if place is None:
                return None
            return {**copy.deepcopy(place), **copy.deepcopy(fixtures.PLACE_DETAIL_EXTRAS)}
        payload = await self._request(
            "GET",
            "/place/details/json",
            params={"place_id": place_id, "fields": DETAIL_FIELDS},
        )
        if _check_status(payload) in _EMPTY_STATUSES:
            return None
        result = payload.get("result")
        return result if isinstance(result, dict) else None
