from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.config import Settings
from ...core.security import optional_user_id, verify_service_token
from ...providers.registry import ProviderSet
from ...schemas.recommend import TrendingKeywordsResponse, TrendInsightsResponse
from ...services.subscription import TREND_INSIGHTS_FEATURE, SubscriptionManager, is_feature_available, is_premium
from ...services.trends import analyze_trends, trending_keywords
from ..deps import get_providers, get_settings_dep, get_subscription_manager

router = APIRouter(prefix="/v1/trends", tags=["trends"], dependencies=[Depends(verify_service_token)])


@router.get("/keywords", response_model=TrendingKeywordsResponse)
async def get_trending_keywords(
    location: str = Query(..., min_length=1),
    providers: ProviderSet = Depends(get_providers),
    settings: Settings = Depends(get_settings_dep),
) -> TrendingKeywordsResponse:
    keywords = await trending_keywords(providers.ensemble, location, timeout=settings.adapter_timeout_seconds)
    return TrendingKeywordsResponse(location=location, keywords=keywords)


@router.get("/video", response_model=TrendInsightsResponse)
async def get_video_insights(
    url: str = Query(..., min_length=1),
    user_id: Optional[str] = Depends(optional_user_id),
    subscriptions: SubscriptionManager = Depends(get_subscription_manager),
    providers: ProviderSet = Depends(get_providers),
    settings: Settings = Depends(get_settings_dep),
) -> TrendInsightsResponse:
    user = await subscriptions.get_current_user(user_id)
    premium = user is not None and is_premium(user)
    if not is_feature_available(TREND_INSIGHTS_FEATURE, premium):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="trend insights require a premium subscription")
    return await analyze_trends(providers.socialkit, url, timeout=settings.adapter_timeout_seconds)
