from __future__ import annotations

import asyncio

from stubs import StubEnsemble, StubSocialKit
from vibefinder.providers.ensemble import EnsembleDataClient
from vibefinder.services.trends import (
    DEFAULT_KEYWORDS,
    analyze_trends,
    calculate_trend_score,
    trending_keywords,
)


def test_trend_score_caps_each_component():
    assert calculate_trend_score(10000, 1000, 100, 1.0) == 100
    assert calculate_trend_score(1_000_000, 50_000, 9_000, 0.0) == 80
    assert calculate_trend_score(0, 0, 0, 0.5) == 10
    assert calculate_trend_score(5000, 500, 50, 0.7) == 54


def test_analyze_trends_combines_video_signals():
    insights = asyncio.run(analyze_trends(StubSocialKit(), "https://example.com/v.mp4"))

    assert insights.keywords == ["cozy", "coffee"]
    assert insights.sentiment.positive == 80
    assert insights.engagement.views == 10000
    assert insights.trend_score == 96


def test_analyze_trends_falls_back_to_defaults():
    insights = asyncio.run(analyze_trends(StubSocialKit(fail=True), "https://example.com/v.mp4"))

    assert insights.keywords == list(DEFAULT_KEYWORDS)
    assert insights.engagement.views == 1000
    assert insights.trend_score == calculate_trend_score(1000, 100, 10, 0.7)


def test_trending_keywords_counts_hashtags():
    ensemble = StubEnsemble(content=[
        {"id": "1", "hashtags": ["#Foodie", "sanfrancisco", "brunch"]},
        {"id": "2", "hashtags": ["foodie", "nightlife"]},
        {"id": "3", "hashtags": ["nightlife", "foodie", "SanFrancisco"]},
    ])

    keywords = asyncio.run(trending_keywords(ensemble, "San Francisco"))

    assert keywords[:2] == ["foodie", "nightlife"]
    assert "sanfrancisco" not in keywords
    assert len(keywords) == 3


def test_trending_keywords_empty_when_provider_down():
    assert asyncio.run(trending_keywords(StubEnsemble(fail=True), "San Francisco")) == []


def test_offline_catalog_keywords():
    async def run():
        client = EnsembleDataClient()
        try:
            return await trending_keywords(client, "San Francisco", limit=2)
        finally:
            await client.close()

    assert asyncio.run(run()) == ["cocktails", "foodie"]
