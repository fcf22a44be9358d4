from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from ...core.security import optional_user_id, verify_service_token
from ...db.repository import SqlRecommendationRepository
from ...schemas.recommend import Recommendation, RecommendRequest, RecommendResponse
from ...services.recommendations import RecommendationService
from ...services.subscription import SubscriptionManager, apply_preference_limit
from ..deps import get_recommendation_repository, get_recommendation_service, get_subscription_manager

logger = logging.getLogger("api.recommend")

router = APIRouter(prefix="/v1", tags=["recommendations"], dependencies=[Depends(verify_service_token)])


@router.post("/recommendations", response_model=RecommendResponse)
async def create_recommendations(
    payload: RecommendRequest,
    *,
    user_id: Optional[str] = Depends(optional_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
    subscriptions: SubscriptionManager = Depends(get_subscription_manager),
) -> RecommendResponse:
    premium = False
    if user_id:
        try:
            premium = await subscriptions.has_premium_subscription(user_id)
        except SQLAlchemyError as exc:
            logger.warning("Subscription lookup failed for %s, applying free tier: %s", user_id, exc)
    preferences = apply_preference_limit(payload.preferences, premium)
    recommendations = await service.get_recommendations(payload.location, preferences)
    return RecommendResponse(recommendations=recommendations)


@router.get("/recommendations/{recommendation_id}", response_model=Recommendation)
async def get_recommendation(
    recommendation_id: str,
    repository: SqlRecommendationRepository = Depends(get_recommendation_repository),
) -> Recommendation:
    rec = await repository.get(recommendation_id)
    if rec is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"unknown recommendation {recommendation_id}")
    return rec
