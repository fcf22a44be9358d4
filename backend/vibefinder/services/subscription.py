from __future__ import annotations

import enum
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from ..db import models
from ..db.repository import UserRepository

logger = logging.getLogger("subscription")

FREE_PREFERENCE_LIMIT = 3
SUBSCRIPTION_PERIOD = timedelta(days=30)


class SubscriptionTier(str, enum.Enum):
    FREE = "free"
    PREMIUM = "premium"


SUBSCRIPTION_FEATURES: Dict[SubscriptionTier, List[str]] = {
    SubscriptionTier.FREE: [
        "Basic recommendations",
        "Interactive map view",
        "Up to 3 vibe filters",
        "Save favorite spots",
    ],
    SubscriptionTier.PREMIUM: [
        "All free features",
        "Unlimited vibe filters",
        "Personalized recommendations",
        "Detailed trend insights",
        "Social media analytics",
        "Advanced search options",
    ],
}

TREND_INSIGHTS_FEATURE = "Detailed trend insights"

SUBSCRIPTION_PRICING: Dict[SubscriptionTier, int] = {
    SubscriptionTier.FREE: 0,
    SubscriptionTier.PREMIUM: 5,
}


class PreferenceLimitExceeded(ValueError):
    def __init__(self, limit: int, requested: int) -> None:
        super().__init__(f"free tier allows {limit} vibe preferences, got {requested}")
        self.limit = limit
        self.requested = requested


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def is_premium(user: models.User, *, now: Optional[datetime] = None) -> bool:
    if user.subscription_tier != SubscriptionTier.PREMIUM.value:
        return False
    if user.subscription_expires_at is None:
        return True
    now = now or datetime.now(timezone.utc)
    return _aware(user.subscription_expires_at) > now


def preference_limit(premium: bool) -> Optional[int]:
    return None if premium else FREE_PREFERENCE_LIMIT


def apply_preference_limit(preferences: Sequence[str], premium: bool) -> List[str]:
    limit = preference_limit(premium)
    return list(preferences) if limit is None else list(preferences)[:limit]


def check_preference_limit(preferences: Sequence[str], premium: bool) -> None:
    limit = preference_limit(premium)
    if limit is not None and len(preferences) > limit:
        raise PreferenceLimitExceeded(limit, len(preferences))


def is_feature_available(feature: str, premium: bool) -> bool:
    if feature in SUBSCRIPTION_FEATURES[SubscriptionTier.FREE]:
        return True
    if feature in SUBSCRIPTION_FEATURES[SubscriptionTier.PREMIUM]:
        return premium
    return False


class SubscriptionManager:
    def __init__(self, users: UserRepository) -> None:
        self.users = users

    async def get_current_user(self, user_id: Optional[str]) -> Optional[models.User]:
        if not user_id:
            return None
        return await self.users.get(user_id)

    async def has_premium_subscription(self, user_id: str) -> bool:
        user = await self.users.get(user_id)
        return user is not None and is_premium(user)

    async def subscribe(self, user_id: str, *, now: Optional[datetime] = None) -> models.User:
        expires_at = (now or datetime.now(timezone.utc)) + SUBSCRIPTION_PERIOD
        user = await self.users.update_subscription(user_id, SubscriptionTier.PREMIUM.value, expires_at)
        logger.info("User %s subscribed to premium until %s", user_id, expires_at.isoformat())
        return user

    async def cancel(self, user_id: str) -> models.User:
        user = await self.users.update_subscription(user_id, SubscriptionTier.FREE.value, None)
        logger.info("User %s cancelled premium", user_id)
        return user

    async def update_preferences(self, user_id: str, preferences: Sequence[str]) -> models.User:
        user = await self.users.require(user_id)
        check_preference_limit(preferences, is_premium(user))
        return await self.users.update_preferences(user_id, preferences)
