from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache.redis import get_redis
from ..core.config import Settings, get_settings
from ..db.repository import SqlRecommendationRepository, UserRepository, VenueRepository
from ..db.session import get_session
from ..providers.registry import ProviderSet, build_providers
from ..services.aggregator import Aggregator
from ..services.recommendations import RecommendationService
from ..services.subscription import SubscriptionManager


async def get_settings_dep() -> Settings:
    return get_settings()


async def get_db_session() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


async def get_redis_dep() -> AsyncIterator[Redis]:
    async for client in get_redis():
        yield client


async def get_providers(settings: Settings = Depends(get_settings_dep)) -> AsyncIterator[ProviderSet]:
    providers = build_providers(settings)
    try:
        yield providers
    finally:
        await providers.close()


async def get_recommendation_repository(session: AsyncSession = Depends(get_db_session)) -> SqlRecommendationRepository:
    return SqlRecommendationRepository(session)


async def get_venue_repository(session: AsyncSession = Depends(get_db_session)) -> VenueRepository:
    return VenueRepository(session)


async def get_recommendation_service(
    repository: SqlRecommendationRepository = Depends(get_recommendation_repository),
    redis: Redis = Depends(get_redis_dep),
    providers: ProviderSet = Depends(get_providers),
    settings: Settings = Depends(get_settings_dep),
) -> RecommendationService:
    aggregator = Aggregator(repository, providers, settings, cache=redis)
    return RecommendationService(aggregator, settings)


async def get_user_repository(session: AsyncSession = Depends(get_db_session)) -> UserRepository:
    return UserRepository(session)


async def get_subscription_manager(users: UserRepository = Depends(get_user_repository)) -> SubscriptionManager:
    return SubscriptionManager(users)
