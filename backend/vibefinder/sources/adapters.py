from __future__ import annotations

import asyncio
import json
import logging
import math
import re
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from ..cache.redis import KeyValueCache, get_json, set_json
from ..providers.base import MalformedPayloadError, ProviderError
from ..providers.ensemble import EnsembleDataClient
from ..providers.google_maps import GoogleMapsClient
from ..providers.openrouter import OpenRouterClient
from ..providers.socialkit import SocialKitClient
from .records import (
    GeneratedRecord,
    PlaceDetail,
    PlaceRecord,
    Sentiment,
    TrendingContentRecord,
    TrendingVenueRecord,
)
from .result import Err, ErrorKind, Ok, Result

T = TypeVar("T")
P = TypeVar("P")

logger = logging.getLogger("sources")

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)


async def _call(label: str, awaitable: Awaitable[T], timeout: float | None) -> Result[T]:
    try:
        if timeout:
            value = await asyncio.wait_for(awaitable, timeout)
        else:
            value = await awaitable
    except MalformedPayloadError as exc:
        logger.warning("%s returned a malformed payload: %s", label, exc)
        return Err(ErrorKind.MALFORMED_RESPONSE, str(exc))
    except ProviderError as exc:
        logger.warning("%s unavailable: %s", label, exc)
        return Err(ErrorKind.PROVIDER_UNAVAILABLE, str(exc))
    except asyncio.TimeoutError:
        logger.warning("%s timed out after %.1fs", label, timeout or 0.0)
        return Err(ErrorKind.PROVIDER_UNAVAILABLE, f"{label} timed out")
    except Exception as exc:
        logger.exception("%s failed unexpectedly", label)
        return Err(ErrorKind.PROVIDER_UNAVAILABLE, str(exc))
    return Ok(value)


def _parse_all(label: str, items: Iterable[Dict[str, Any]], parser: Callable[[Dict[str, Any]], P]) -> List[P]:
    out: List[P] = []
    for item in items:
        try:
            out.append(parser(item))
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            logger.debug("Skipping unparseable %s item: %s", label, exc)
    return out


def _strings(values: Any) -> Tuple[str, ...]:
    if not isinstance(values, (list, tuple)):
        return ()
    return tuple(str(v) for v in values if v)


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number


def _coordinates(lat: Any, lng: Any) -> Tuple[float, float]:
    lat_f, lng_f = float(lat), float(lng)
    if not (-90.0 <= lat_f <= 90.0 and -180.0 <= lng_f <= 180.0):
        raise ValueError(f"coordinate out of range: {lat_f},{lng_f}")
    return lat_f, lng_f


def parse_trending_content(item: Dict[str, Any]) -> TrendingContentRecord:
    location = item.get("location")
    lat = lng = None
    location_name = ""
    if isinstance(location, dict):
        location_name = str(location.get("name") or "")
        if location.get("latitude") is not None and location.get("longitude") is not None:
            lat, lng = _coordinates(location["latitude"], location["longitude"])
    elif location:
        location_name = str(location)
    return TrendingContentRecord(
        id=str(item["id"]),
        platform=str(item.get("platform") or ""),
        url=str(item.get("url") or item.get("social_url") or ""),
        venue=str(item.get("venue") or location_name),
        location_name=location_name,
        hashtags=tuple(tag.lower().lstrip("#") for tag in _strings(item.get("hashtags"))),
        engagement=int(item.get("engagement") or 0),
        lat=lat,
        lng=lng,
    )


def parse_trending_venue(item: Dict[str, Any]) -> TrendingVenueRecord:
    lat, lng = _coordinates(item["latitude"], item["longitude"])
    return TrendingVenueRecord(
        id=str(item["id"]),
        name=str(item["name"]),
        lat=lat,
        lng=lng,
        title=str(item.get("title") or ""),
        description=str(item.get("description") or ""),
        address=str(item.get("address") or ""),
        social_url=str(item.get("social_url") or ""),
        video_url=str(item.get("video_url") or ""),
        image_url=str(item.get("image_url") or item.get("thumbnail_url") or ""),
        trend_score=_optional_float(item.get("trend_score")),
        categories=_strings(item.get("categories")),
    )


def parse_place(item: Dict[str, Any], photo_url: Callable[[str], str] = lambda ref: "") -> PlaceRecord:
    location = item["geometry"]["location"]
    lat, lng = _coordinates(location["lat"], location["lng"])
    photos = item.get("photos") or []
    reference = photos[0].get("photo_reference", "") if photos and isinstance(photos[0], dict) else ""
    return PlaceRecord(
        place_id=str(item["place_id"]),
        name=str(item["name"]),
        lat=lat,
        lng=lng,
        vicinity=str(item.get("vicinity") or item.get("formatted_address") or ""),
        types=_strings(item.get("types")),
        photo_url=photo_url(reference) if reference else "",
    )


def parse_place_detail(item: Dict[str, Any]) -> PlaceDetail:
    hours = item.get("opening_hours") or {}
    price_level = item.get("price_level")
    return PlaceDetail(
        website=str(item.get("website") or ""),
        phone=str(item.get("formatted_phone_number") or item.get("phone_number") or ""),
        rating=_optional_float(item.get("rating")),
        ratings_total=int(item.get("user_ratings_total") or 0),
        price_level=int(price_level) if price_level is not None else None,
        open_now=hours.get("open_now") if isinstance(hours, dict) else None,
    )


def parse_generated_payload(text: str) -> List[GeneratedRecord]:
    """Decode the AI generator's JSON array; raises ``ValueError`` when it is not one."""
    cleaned = _FENCE_RE.sub("", text or "").strip()
    if not cleaned:
        raise ValueError("empty completion")
    data = json.loads(cleaned)
    if isinstance(data, dict):
        data = data.get("recommendations", data.get("items"))
    if not isinstance(data, list):
        raise ValueError("completion is not a JSON array")
    return [GeneratedRecord(payload=item) for item in data if isinstance(item, dict)]


async def fetch_trending_content(
    client: EnsembleDataClient,
    location: str,
    hashtags: Sequence[str] = (),
    *,
    timeout: float | None = None,
) -> Result[List[TrendingContentRecord]]:
    result = await _call("trending content", client.get_trending_content(location, hashtags), timeout)
    if isinstance(result, Err):
        return result
    return Ok(_parse_all("trending content", result.value, parse_trending_content))


async def fetch_trending_venues(
    client: EnsembleDataClient,
    lat: float,
    lng: float,
    *,
    radius_km: int = 10,
    limit: int = 10,
    timeout: float | None = None,
) -> Result[List[TrendingVenueRecord]]:
    result = await _call("trending venues", client.get_trending_venues(lat, lng, radius_km=radius_km, limit=limit), timeout)
    if isinstance(result, Err):
        return result
    return Ok(_parse_all("trending venue", result.value, parse_trending_venue))


async def fetch_nearby_places(
    client: GoogleMapsClient,
    lat: float,
    lng: float,
    radius: int = 5000,
    *,
    timeout: float | None = None,
) -> Result[List[PlaceRecord]]:
    result = await _call("nearby places", client.search_nearby_places(lat, lng, radius), timeout)
    if isinstance(result, Err):
        return result
    return Ok(_parse_all("place", result.value, lambda item: parse_place(item, client.photo_url)))


async def fetch_place_details(
    client: GoogleMapsClient,
    place_id: str,
    *,
    timeout: float | None = None,
) -> Result[Optional[PlaceDetail]]:
    result = await _call(f"place details {place_id}", client.get_place_details(place_id), timeout)
    if isinstance(result, Err) or result.value is None:
        return result
    try:
        return Ok(parse_place_detail(result.value))
    except (TypeError, ValueError, OverflowError) as exc:
        return Err(ErrorKind.MALFORMED_RESPONSE, str(exc))


def _geocode_key(query: str) -> str:
    return f"geocode:{' '.join(query.lower().split())}"


async def geocode_location(
    client: GoogleMapsClient,
    query: str,
    *,
    cache: KeyValueCache | None = None,
    cache_ttl: int = 86400,
    timeout: float | None = None,
) -> Result[Tuple[float, float]]:
    key = _geocode_key(query)
    cached = await get_json(cache, key)
    if isinstance(cached, list) and len(cached) == 2:
        return Ok((float(cached[0]), float(cached[1])))

    result = await _call(f"geocode '{query}'", client.geocode(query), timeout)
    if isinstance(result, Err):
        return Err(ErrorKind.GEOCODE_FAILURE, result.detail)
    if not result.value:
        return Err(ErrorKind.GEOCODE_FAILURE, f"no match for '{query}'")
    try:
        coords = _coordinates(result.value["lat"], result.value["lng"])
    except (KeyError, TypeError, ValueError) as exc:
        return Err(ErrorKind.GEOCODE_FAILURE, str(exc))
    await set_json(cache, key, list(coords), ttl=cache_ttl)
    return Ok(coords)


async def fetch_video_summary(client: SocialKitClient, video_url: str, *, timeout: float | None = None) -> Result[str]:
    result = await _call("video summary", client.get_video_summary(video_url), timeout)
    if isinstance(result, Err):
        return result
    value = result.value
    summary = value.get("summary") if isinstance(value, dict) else value
    return Ok(str(summary or ""))


async def fetch_video_sentiment(client: SocialKitClient, video_url: str, *, timeout: float | None = None) -> Result[Sentiment]:
    result = await _call("video sentiment", client.analyze_video_sentiment(video_url), timeout)
    if isinstance(result, Err):
        return result
    values = result.value
    try:
        return Ok(Sentiment(
            positive=float(values.get("positive", 0.0)),
            neutral=float(values.get("neutral", 0.0)),
            negative=float(values.get("negative", 0.0)),
        ))
    except (AttributeError, TypeError, ValueError) as exc:
        return Err(ErrorKind.MALFORMED_RESPONSE, str(exc))


async def fetch_video_keywords(client: SocialKitClient, video_url: str, *, timeout: float | None = None) -> Result[Tuple[str, ...]]:
    result = await _call("video keywords", client.extract_keywords(video_url), timeout)
    if isinstance(result, Err):
        return result
    return Ok(tuple(result.value))


async def fetch_engagement_metrics(client: SocialKitClient, video_url: str, *, timeout: float | None = None) -> Result[Dict[str, Any]]:
    return await _call("video engagement", client.get_engagement_metrics(video_url), timeout)


async def generate_recommendations(
    client: OpenRouterClient,
    location: str,
    preferences: Sequence[str],
    *,
    timeout: float | None = None,
) -> Result[List[GeneratedRecord]]:
    result = await _call("ai generator", client.generate_recommendations(location, preferences), timeout)
    if isinstance(result, Err):
        return result
    try:
        return Ok(parse_generated_payload(result.value))
    except ValueError as exc:
        logger.warning("AI generator returned unusable output: %s", exc)
        return Err(ErrorKind.MALFORMED_RESPONSE, str(exc))
