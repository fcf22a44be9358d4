from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ...core.security import require_user_id, verify_service_token
from ...db import models
from ...db.repository import FALLBACK_SOURCE, SqlRecommendationRepository, UserNotFound, UserRepository
from ...schemas.recommend import Recommendation
from ...schemas.user import (
    InteractionRequest,
    PreferencesUpdate,
    SaveRecommendationRequest,
    SaveRecommendationResponse,
    SubscriptionTiersResponse,
    UserProfile,
)
from ...services.fallback import fallback_by_id
from ...services.ranking import learn_from_interaction
from ...services.subscription import (
    SUBSCRIPTION_FEATURES,
    SUBSCRIPTION_PRICING,
    PreferenceLimitExceeded,
    SubscriptionManager,
    apply_preference_limit,
    is_premium,
)
from ..deps import get_recommendation_repository, get_subscription_manager, get_user_repository

router = APIRouter(prefix="/v1", tags=["users"], dependencies=[Depends(verify_service_token)])


def _profile(user: models.User) -> UserProfile:
    expires = user.subscription_expires_at
    return UserProfile(
        id=user.id,
        email=user.email,
        preferences=list(user.preferences or []),
        onboarding_complete=bool(user.onboarding_complete),
        subscription_tier=user.subscription_tier or "free",
        subscription_expires_at=expires.isoformat() if expires else None,
        is_premium=is_premium(user),
    )


async def _current_user(
    user_id: str = Depends(require_user_id),
    users: UserRepository = Depends(get_user_repository),
) -> models.User:
    try:
        return await users.require(user_id)
    except UserNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"unknown user {user_id}") from exc


@router.get("/users/me", response_model=UserProfile)
async def get_me(user: models.User = Depends(_current_user)) -> UserProfile:
    return _profile(user)


@router.put("/users/me/preferences", response_model=UserProfile)
async def update_preferences(
    payload: PreferencesUpdate,
    user: models.User = Depends(_current_user),
    subscriptions: SubscriptionManager = Depends(get_subscription_manager),
) -> UserProfile:
    try:
        updated = await subscriptions.update_preferences(user.id, payload.preferences)
    except PreferenceLimitExceeded as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return _profile(updated)


@router.post("/users/me/onboarding", response_model=UserProfile)
async def complete_onboarding(
    user: models.User = Depends(_current_user),
    users: UserRepository = Depends(get_user_repository),
) -> UserProfile:
    return _profile(await users.complete_onboarding(user.id))


@router.get("/users/me/saved", response_model=List[Recommendation])
async def list_saved(
    user: models.User = Depends(_current_user),
    users: UserRepository = Depends(get_user_repository),
) -> List[Recommendation]:
    return await users.get_saved(user.id)


@router.post("/users/me/saved", response_model=SaveRecommendationResponse)
async def save_recommendation(
    payload: SaveRecommendationRequest,
    user: models.User = Depends(_current_user),
    users: UserRepository = Depends(get_user_repository),
    recommendations: SqlRecommendationRepository = Depends(get_recommendation_repository),
) -> SaveRecommendationResponse:
    fallback = fallback_by_id(payload.recommendation_id)
    if fallback is not None and await recommendations.get(fallback.id) is None:
        await recommendations.upsert_many([fallback], source=FALLBACK_SOURCE)
    saved = await users.save_recommendation(user.id, payload.recommendation_id)
    return SaveRecommendationResponse(saved=saved)


@router.post("/users/me/interactions", response_model=UserProfile)
async def record_interaction(
    payload: InteractionRequest,
    user: models.User = Depends(_current_user),
    users: UserRepository = Depends(get_user_repository),
) -> UserProfile:
    learned = learn_from_interaction(user.preferences or [], payload.vibe_tags, payload.kind)
    learned = apply_preference_limit(learned, is_premium(user))
    if learned == list(user.preferences or []):
        return _profile(user)
    return _profile(await users.update_preferences(user.id, learned))


@router.post("/users/me/subscription", response_model=UserProfile)
async def subscribe(
    user: models.User = Depends(_current_user),
    subscriptions: SubscriptionManager = Depends(get_subscription_manager),
) -> UserProfile:
    return _profile(await subscriptions.subscribe(user.id))


@router.delete("/users/me/subscription", response_model=UserProfile)
async def cancel_subscription(
    user: models.User = Depends(_current_user),
    subscriptions: SubscriptionManager = Depends(get_subscription_manager),
) -> UserProfile:
    return _profile(await subscriptions.cancel(user.id))


@router.get("/subscription/tiers", response_model=SubscriptionTiersResponse)
async def get_tiers() -> SubscriptionTiersResponse:
    return SubscriptionTiersResponse(
        features={tier.value: list(features) for tier, features in SUBSCRIPTION_FEATURES.items()},
        pricing={tier.value: price for tier, price in SUBSCRIPTION_PRICING.items()},
    )
