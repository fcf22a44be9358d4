from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import List, Sequence

from ..providers.ensemble import EnsembleDataClient
from ..providers.socialkit import SocialKitClient
from ..schemas.recommend import EngagementMetrics, SentimentBreakdown, TrendInsightsResponse
from ..sources.adapters import (
    fetch_engagement_metrics,
    fetch_trending_content,
    fetch_video_keywords,
    fetch_video_sentiment,
)
from ..sources.records import Sentiment
from ..sources.result import Err, Ok

logger = logging.getLogger("trends")

DEFAULT_SENTIMENT = Sentiment(positive=70, neutral=20, negative=10)
DEFAULT_KEYWORDS = ("trending", "local", "popular", "weekend", "nightlife", "food")
DEFAULT_ENGAGEMENT = EngagementMetrics(views=1000, likes=100, comments=10)
TRENDING_KEYWORD_COUNT = 5


def calculate_trend_score(views: float, likes: float, comments: float, positive_ratio: float) -> int:
    """Engagement contributes up to 80 points, positive sentiment up to 20."""
    engagement = (
        min(views / 10000, 1.0) * 30
        + min(likes / 1000, 1.0) * 30
        + min(comments / 100, 1.0) * 20
    )
    sentiment = max(0.0, min(positive_ratio, 1.0)) * 20
    return max(0, min(100, round(engagement + sentiment)))


async def analyze_trends(client: SocialKitClient, video_url: str, *, timeout: float | None = None) -> TrendInsightsResponse:
    sentiment_res, keywords_res, engagement_res = await asyncio.gather(
        fetch_video_sentiment(client, video_url, timeout=timeout),
        fetch_video_keywords(client, video_url, timeout=timeout),
        fetch_engagement_metrics(client, video_url, timeout=timeout),
    )

    sentiment = sentiment_res.value if isinstance(sentiment_res, Ok) else DEFAULT_SENTIMENT
    keywords = list(keywords_res.value) if isinstance(keywords_res, Ok) else list(DEFAULT_KEYWORDS)
    engagement = DEFAULT_ENGAGEMENT
    if isinstance(engagement_res, Ok):
        try:
            engagement = EngagementMetrics.model_validate(engagement_res.value)
        except ValueError as exc:
            logger.warning("Ignoring malformed engagement metrics for %s: %s", video_url, exc)
    for res in (sentiment_res, keywords_res, engagement_res):
        if isinstance(res, Err):
            logger.info("Using default trend insight for %s (%s)", video_url, res.kind.value)

    return TrendInsightsResponse(
        url=video_url,
        sentiment=SentimentBreakdown(
            positive=sentiment.positive,
            neutral=sentiment.neutral,
            negative=sentiment.negative,
        ),
        keywords=keywords,
        engagement=engagement,
        trend_score=calculate_trend_score(
            engagement.views, engagement.likes, engagement.comments, sentiment.positive_ratio
        ),
    )


async def trending_keywords(
    client: EnsembleDataClient,
    location: str,
    hashtags: Sequence[str] = (),
    *,
    timeout: float | None = None,
    limit: int = TRENDING_KEYWORD_COUNT,
) -> List[str]:
    """Most frequent hashtags across trending content, ignoring the location's own tag."""
    result = await fetch_trending_content(client, location, hashtags, timeout=timeout)
    if isinstance(result, Err):
        return []
    place_tag = "".join(location.lower().split())
    counts: Counter[str] = Counter()
    for record in result.value:
        counts.update(tag for tag in record.hashtags if tag and tag != place_tag)
    return [tag for tag, _ in counts.most_common(limit)]
