from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

pytest.importorskip("aiosqlite")

from stubs import make_recommendation
from vibefinder.db import models
from vibefinder.db.base import Base
from vibefinder.db.repository import (
    FALLBACK_SOURCE,
    SqlRecommendationRepository,
    UserNotFound,
    UserRepository,
    VenueRepository,
    bounding_box,
    venue_key,
)
from vibefinder.services.subscription import (
    FREE_PREFERENCE_LIMIT,
    PreferenceLimitExceeded,
    SubscriptionManager,
    apply_preference_limit,
    is_feature_available,
    is_premium,
)


async def _make_maker():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    maker = async_sessionmaker(engine, expire_on_commit=False)

    async with maker() as session:
        session.add_all([
            models.Venue(id="v-sf", name="Blue Bottle Coffee", address="66 Mint St, San Francisco", latitude=37.7749,
                         longitude=-122.4194, categories=["Cafe", "Coffee"]),
            models.Venue(id="v-mission", name="Tartine", latitude=37.7614, longitude=-122.4241, categories=["Bakery", "cafe"]),
            models.Venue(id="v-ny", name="Joe's Pizza", latitude=40.7306, longitude=-73.9866),
            models.User(id="u-1", email="ana@example.com"),
        ])
        await session.flush()
        session.add_all([
            models.Recommendation(id="r-coffee", title="Coffee", venue_id="v-sf", trend_score=85, vibe_tags=["Chill", "Cozy"]),
            models.Recommendation(id="r-bakery", title="Bakery", venue_id="v-mission", trend_score=91, vibe_tags=["Foodie"]),
            models.Recommendation(id="r-pizza", title="Pizza", venue_id="v-ny", trend_score=99, vibe_tags=["Foodie", "Casual"]),
        ])
        await session.commit()
    return engine, maker


def _run(flow):
    async def wrapper():
        engine, maker = await _make_maker()
        try:
            return await flow(maker)
        finally:
            await engine.dispose()

    return asyncio.run(wrapper())


def test_find_by_location_uses_radius_and_score_order():
    async def flow(maker):
        async with maker() as session:
            return await SqlRecommendationRepository(session).find_by_location(37.7749, -122.4194, radius_km=10)

    recs = _run(flow)

    assert [r.id for r in recs] == ["r-bakery", "r-coffee"]
    assert recs[1].venue_name == "Blue Bottle Coffee"
    assert recs[1].location.lat == pytest.approx(37.7749)
    assert recs[1].timestamp


def test_find_by_tags_is_case_insensitive():
    async def flow(maker):
        async with maker() as session:
            repo = SqlRecommendationRepository(session)
            return await repo.find_by_tags(["foodie"]), await repo.find_by_tags(["cozy"], limit=1), await repo.find_by_tags([])

    foodie, cozy, empty = _run(flow)

    assert [r.id for r in foodie] == ["r-pizza", "r-bakery"]
    assert [r.id for r in cozy] == ["r-coffee"]
    assert empty == []


def test_bounding_box_contains_center():
    min_lat, max_lat, min_lng, max_lng = bounding_box(37.77, -122.42, 10)
    assert min_lat < 37.77 < max_lat
    assert min_lng < -122.42 < max_lng
    assert max_lat - min_lat == pytest.approx(20 / 111.0)


def test_saving_is_idempotent_and_ignores_unknown_ids():
    async def flow(maker):
        async with maker() as session:
            users = UserRepository(session)
            first = await users.save_recommendation("u-1", "r-coffee")
            again = await users.save_recommendation("u-1", "r-coffee")
            missing = await users.save_recommendation("u-1", "r-unknown")
        async with maker() as session:
            saved = await UserRepository(session).get_saved("u-1")
        return first, again, missing, saved

    first, again, missing, saved = _run(flow)

    assert (first, again, missing) == (True, True, False)
    assert [r.id for r in saved] == ["r-coffee"]


def test_unknown_user_raises():
    async def flow(maker):
        async with maker() as session:
            await UserRepository(session).update_preferences("ghost", ["Chill"])

    with pytest.raises(UserNotFound):
        _run(flow)


def test_free_tier_preference_limit():
    async def flow(maker):
        async with maker() as session:
            manager = SubscriptionManager(UserRepository(session))
            user = await manager.update_preferences("u-1", ["Chill", "Cozy", "Artsy"])
            stored = list(user.preferences)
            try:
                await manager.update_preferences("u-1", ["Chill", "Cozy", "Artsy", "Retro"])
            except PreferenceLimitExceeded as exc:
                return stored, exc.limit
        return stored, None

    stored, limit = _run(flow)

    assert stored == ["Chill", "Cozy", "Artsy"]
    assert limit == FREE_PREFERENCE_LIMIT


def test_premium_lifts_preference_limit_until_cancelled():
    async def flow(maker):
        async with maker() as session:
            manager = SubscriptionManager(UserRepository(session))
            await manager.subscribe("u-1")
            premium = await manager.has_premium_subscription("u-1")
            user = await manager.update_preferences("u-1", ["Chill", "Cozy", "Artsy", "Retro", "Quirky"])
            count = len(user.preferences)
            await manager.cancel("u-1")
            after_cancel = await manager.has_premium_subscription("u-1")
            anonymous = await manager.get_current_user(None)
        return premium, count, after_cancel, anonymous

    premium, count, after_cancel, anonymous = _run(flow)

    assert premium is True
    assert count == 5
    assert after_cancel is False
    assert anonymous is None


def test_expired_premium_is_not_premium():
    now = datetime(2024, 8, 30, tzinfo=timezone.utc)
    user = models.User(id="u", email="u@example.com", subscription_tier="premium")
    user.subscription_expires_at = now - timedelta(days=1)
    assert is_premium(user, now=now) is False
    user.subscription_expires_at = (now + timedelta(days=1)).replace(tzinfo=None)
    assert is_premium(user, now=now) is True


def test_feature_gating_and_truncation():
    assert is_feature_available("Basic recommendations", premium=False)
    assert not is_feature_available("Detailed trend insights", premium=False)
    assert is_feature_available("Detailed trend insights", premium=True)
    assert not is_feature_available("Teleportation", premium=True)
    assert apply_preference_limit(["a", "b", "c", "d"], premium=False) == ["a", "b", "c"]
    assert apply_preference_limit(["a", "b", "c", "d"], premium=True) == ["a", "b", "c", "d"]


def test_upserted_batches_are_stored_once_and_fallback_rows_stay_hidden():
    live = make_recommendation("venue-1", ["Nightlife"], score=95, lat=37.7750, lng=-122.4190)
    fallback = make_recommendation("fallback-1", ["Chill"], score=99, lat=37.7751, lng=-122.4191)

    async def flow(maker):
        async with maker() as session:
            repo = SqlRecommendationRepository(session)
            first = await repo.upsert_many([live], source="trending")
            again = await repo.upsert_many([live.model_copy(update={"trend_score": 96})], source="trending")
            await repo.upsert_many([fallback], source=FALLBACK_SOURCE)
        async with maker() as session:
            repo = SqlRecommendationRepository(session)
            nearby = await repo.find_by_location(37.7749, -122.4194, radius_km=10)
            tagged = await repo.find_by_tags(["chill"])
            stored_live = await repo.get("venue-1")
            stored_fallback = await repo.get("fallback-1")
            venue = await session.get(models.Venue, venue_key(live.venue_name, live.location.lat, live.location.lng))
            sources = {row.id: row.source for row in (await session.execute(select(models.Recommendation))).scalars()}
        return first, again, nearby, tagged, stored_live, stored_fallback, venue, sources

    first, again, nearby, tagged, stored_live, stored_fallback, venue, sources = _run(flow)

    assert (first, again) == (1, 1)
    assert [r.id for r in nearby] == ["venue-1", "r-bakery", "r-coffee"]
    assert [r.id for r in tagged] == ["r-coffee"]
    assert stored_live.trend_score == 96
    assert stored_live.venue_name == "Venue venue-1"
    assert stored_fallback is not None and stored_fallback.vibe_tags == ["Chill"]
    assert venue is not None and venue.categories == ["Nightlife"]
    assert sources["venue-1"] == "trending"
    assert sources["fallback-1"] == FALLBACK_SOURCE
    assert sources["r-coffee"] == "stored"


def test_served_recommendation_can_be_saved_after_upsert():
    async def flow(maker):
        async with maker() as session:
            await SqlRecommendationRepository(session).upsert_many(
                [make_recommendation("place-abc", ["Foodie"])], source="places"
            )
            saved = await UserRepository(session).save_recommendation("u-1", "place-abc")
        async with maker() as session:
            listing = await UserRepository(session).get_saved("u-1")
        return saved, listing

    saved, listing = _run(flow)

    assert saved is True
    assert [r.id for r in listing] == ["place-abc"]


def test_venue_key_is_stable_per_name_and_position():
    assert venue_key("Tartine", 37.7614, -122.4241) == venue_key("Tartine", 37.7614, -122.4241)
    assert venue_key("Tartine", 37.7614, -122.4241) != venue_key("Tartine", 37.7615, -122.4241)
    assert venue_key("Tartine", 37.7614, -122.4241).startswith("v-")
    assert len(venue_key("x" * 500, 0.0, 0.0)) <= 64


def test_recommendation_lookup_by_id():
    async def flow(maker):
        async with maker() as session:
            repo = SqlRecommendationRepository(session)
            return await repo.get("r-coffee"), await repo.get("r-nowhere")

    found, missing = _run(flow)

    assert found.title == "Coffee"
    assert found.venue_name == "Blue Bottle Coffee"
    assert missing is None


def test_venue_lookups():
    async def flow(maker):
        async with maker() as session:
            venues = VenueRepository(session)
            return (
                await venues.get("v-sf"),
                await venues.get("v-nowhere"),
                await venues.search("BLUE"),
                await venues.search("mint st"),
                await venues.search("   "),
                await venues.by_category("cafe"),
                await venues.by_category("cafe", limit=1),
                await venues.by_category("Laundromat"),
            )

    by_id, missing, by_name, by_address, blank, cafes, first_cafe, none = _run(flow)

    assert by_id.name == "Blue Bottle Coffee"
    assert by_id.address == "66 Mint St, San Francisco"
    assert by_id.categories == ["Cafe", "Coffee"]
    assert missing is None
    assert [v.id for v in by_name] == ["v-sf"]
    assert [v.id for v in by_address] == ["v-sf"]
    assert blank == []
    assert [v.id for v in cafes] == ["v-sf", "v-mission"]
    assert [v.id for v in first_cafe] == ["v-sf"]
    assert none == []
