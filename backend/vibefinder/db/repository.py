from __future__ import annotations

import hashlib
import logging
import math
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.recommend import Location, Recommendation, VenueSummary
from . import models

logger = logging.getLogger("repository")

KM_PER_DEGREE = 111.0


class RecommendationRepository(Protocol):
    async def find_by_location(self, lat: float, lng: float, *, radius_km: float = 10.0, limit: int = 20) -> List[Recommendation]:
        ...

    async def find_by_tags(self, tags: Sequence[str], *, limit: int = 20) -> List[Recommendation]:
        ...

    async def upsert_many(self, recommendations: Sequence[Recommendation], *, source: str) -> int:
        ...


FALLBACK_SOURCE = "fallback"


def to_schema(row: models.Recommendation) -> Recommendation:
    venue = row.venue
    return Recommendation(
        id=row.id,
        title=row.title,
        description=row.description or "",
        venue_name=venue.name,
        location=Location(lat=venue.latitude, lng=venue.longitude),
        social_media_url=row.social_media_url,
        image_url=row.image_url,
        video_url=row.video_url,
        trend_score=max(0, min(100, int(row.trend_score or 0))),
        vibe_tags=list(row.vibe_tags or []),
        timestamp=row.created_at or datetime.now().astimezone(),
    )


def venue_to_schema(row: models.Venue) -> VenueSummary:
    return VenueSummary(
        id=row.id,
        name=row.name,
        address=row.address or "",
        location=Location(lat=row.latitude, lng=row.longitude),
        categories=list(row.categories or []),
    )


def venue_key(name: str, lat: float, lng: float) -> str:
    """Stable venue id shared by every recommendation at the same named spot."""
    raw = f"{name.strip().lower()}|{lat:.5f}|{lng:.5f}"
    return f"v-{hashlib.blake2b(raw.encode('utf-8'), digest_size=8).hexdigest()}"


def _observed_at(rec: Recommendation) -> datetime:
    try:
        value = datetime.fromisoformat(rec.timestamp)
    except ValueError:
        return datetime.now(timezone.utc)
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def bounding_box(lat: float, lng: float, radius_km: float) -> tuple[float, float, float, float]:
    lat_delta = radius_km / KM_PER_DEGREE
    cos_lat = max(math.cos(math.radians(lat)), 1e-6)
    lng_delta = radius_km / (KM_PER_DEGREE * cos_lat)
    return lat - lat_delta, lat + lat_delta, lng - lng_delta, lng + lng_delta


class SqlRecommendationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_location(self, lat: float, lng: float, *, radius_km: float = 10.0, limit: int = 20) -> List[Recommendation]:
        min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius_km)
        stmt = (
            select(models.Recommendation)
            .join(models.Venue)
            .where(
                models.Venue.latitude.between(min_lat, max_lat),
                models.Venue.longitude.between(min_lng, max_lng),
                models.Recommendation.source != FALLBACK_SOURCE,
            )
            .order_by(models.Recommendation.trend_score.desc(), models.Recommendation.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [to_schema(row) for row in result.scalars().all()]

    async def find_by_tags(self, tags: Sequence[str], *, limit: int = 20) -> List[Recommendation]:
        wanted = {tag.lower() for tag in tags if tag}
        if not wanted:
            return []
        # tag containment is evaluated in Python so the query stays portable across dialects
        stmt = (
            select(models.Recommendation)
            .where(models.Recommendation.source != FALLBACK_SOURCE)
            .order_by(models.Recommendation.trend_score.desc(), models.Recommendation.id)
        )
        result = await self.session.execute(stmt)
        out: List[Recommendation] = []
        for row in result.scalars():
            if any(str(tag).lower() in wanted for tag in (row.vibe_tags or [])):
                out.append(to_schema(row))
                if len(out) >= limit:
                    break
        return out

    async def get(self, recommendation_id: str) -> Optional[Recommendation]:
        row = await self.session.get(models.Recommendation, recommendation_id)
        return to_schema(row) if row is not None else None

    async def upsert_many(self, recommendations: Sequence[Recommendation], *, source: str) -> int:
        """Store served recommendations (and their venues) so they can be saved by id later."""
        count = 0
        for rec in recommendations:
            venue_id = venue_key(rec.venue_name, rec.location.lat, rec.location.lng)
            venue = await self.session.get(models.Venue, venue_id)
            if venue is None:
                venue = models.Venue(
                    id=venue_id,
                    name=rec.venue_name,
                    latitude=rec.location.lat,
                    longitude=rec.location.lng,
                    categories=list(rec.vibe_tags),
                    created_at=_observed_at(rec),
                )
                self.session.add(venue)

            row = await self.session.get(models.Recommendation, rec.id)
            if row is None:
                row = models.Recommendation(id=rec.id, created_at=_observed_at(rec))
                self.session.add(row)
            row.title = rec.title
            row.description = rec.description
            row.venue = venue
            row.social_media_url = rec.social_media_url
            row.image_url = rec.image_url
            row.video_url = rec.video_url
            row.trend_score = rec.trend_score
            row.vibe_tags = list(rec.vibe_tags)
            row.source = source
            count += 1
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        return count


class VenueRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, venue_id: str) -> Optional[VenueSummary]:
        row = await self.session.get(models.Venue, venue_id)
        return venue_to_schema(row) if row is not None else None

    async def search(self, query: str, *, limit: int = 20) -> List[VenueSummary]:
        """Venues whose name or address contains ``query``, case-insensitively."""
        term = query.strip()
        if not term:
            return []
        pattern = f"%{term}%"
        stmt = (
            select(models.Venue)
            .where(or_(models.Venue.name.ilike(pattern), models.Venue.address.ilike(pattern)))
            .order_by(models.Venue.name, models.Venue.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [venue_to_schema(row) for row in result.scalars().all()]

    async def by_category(self, category: str, *, limit: int = 20) -> List[VenueSummary]:
        wanted = category.strip().lower()
        if not wanted:
            return []
        stmt = select(models.Venue).order_by(models.Venue.name, models.Venue.id)
        result = await self.session.execute(stmt)
        out: List[VenueSummary] = []
        for row in result.scalars():
            if any(str(cat).lower() == wanted for cat in (row.categories or [])):
                out.append(venue_to_schema(row))
                if len(out) >= limit:
                    break
        return out


class UserNotFound(LookupError):
    pass


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: str) -> Optional[models.User]:
        return await self.session.get(models.User, user_id)

    async def require(self, user_id: str) -> models.User:
        user = await self.get(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    async def update_preferences(self, user_id: str, preferences: Sequence[str]) -> models.User:
        user = await self.require(user_id)
        user.preferences = list(preferences)
        await self.session.commit()
        return user

    async def complete_onboarding(self, user_id: str) -> models.User:
        user = await self.require(user_id)
        user.onboarding_complete = True
        await self.session.commit()
        return user

    async def update_subscription(self, user_id: str, tier: str, expires_at: datetime | None = None) -> models.User:
        user = await self.require(user_id)
        user.subscription_tier = tier
        user.subscription_expires_at = expires_at
        await self.session.commit()
        return user

    async def save_recommendation(self, user_id: str, recommendation_id: str) -> bool:
        await self.require(user_id)
        if await self.session.get(models.Recommendation, recommendation_id) is None:
            logger.warning("Cannot save unknown recommendation %s for %s", recommendation_id, user_id)
            return False
        existing = await self.session.execute(
            select(models.SavedRecommendation.id).where(
                models.SavedRecommendation.user_id == user_id,
                models.SavedRecommendation.recommendation_id == recommendation_id,
            )
        )
        if existing.first() is not None:
            return True
        self.session.add(models.SavedRecommendation(user_id=user_id, recommendation_id=recommendation_id))
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            logger.warning("Saving %s for %s failed: %s", recommendation_id, user_id, exc)
            return False
        return True

    async def get_saved(self, user_id: str) -> List[Recommendation]:
        result = await self.session.execute(
            select(models.SavedRecommendation)
            .where(models.SavedRecommendation.user_id == user_id)
            .order_by(models.SavedRecommendation.created_at.desc(), models.SavedRecommendation.id.desc())
        )
        return [to_schema(saved.recommendation) for saved in result.scalars().all()]
