from __future__ import annotations

import asyncio
import json

from stubs import (
    SF,
    StubAI,
    StubEnsemble,
    StubMaps,
    StubRepository,
    StubSocialKit,
    make_providers,
    make_recommendation,
    make_settings,
    place_payload,
    venue_payload,
)
from vibefinder.services.aggregator import AggregationRequest, Aggregator, dedupe_by_id

FALLBACK_IDS = {f"fallback-{i}" for i in range(1, 6)}


def _aggregate(repository=None, *, query="San Francisco", preferences=(), settings=None, **providers):
    aggregator = Aggregator(repository or StubRepository(), make_providers(**providers), settings or make_settings())
    request = AggregationRequest(location_query=query, preferences=list(preferences), min_results=5)
    return asyncio.run(aggregator.aggregate(request))


def test_database_short_circuits_when_enough_rows():
    stored = [make_recommendation(f"db-{i}", ["Chill"]) for i in range(6)]
    ensemble = StubEnsemble(venues=[venue_payload(1)])

    result = _aggregate(StubRepository(by_location=stored), ensemble=ensemble)

    assert result.source == "database"
    assert [r.id for r in result.recommendations] == [f"db-{i}" for i in range(6)]
    assert ensemble.calls == []


def test_preferences_query_stored_rows_by_tag():
    repository = StubRepository(by_tags=[make_recommendation(f"db-{i}", ["Cozy"]) for i in range(5)])

    result = _aggregate(repository, preferences=["Cozy"])

    assert result.source == "database"
    assert repository.calls == [("tags", ["Cozy"])]


def test_too_few_stored_rows_fall_through_to_trending():
    repository = StubRepository(by_location=[make_recommendation("db-1", ["Chill"])])
    ensemble = StubEnsemble(venues=[venue_payload(i) for i in range(1, 8)])

    result = _aggregate(repository, ensemble=ensemble)

    assert result.source == "trending"
    assert [r.id for r in result.recommendations] == [f"venue-{i}" for i in range(1, 6)]
    assert ensemble.calls == [("venues", SF["lat"], SF["lng"], 5)]


def test_trending_batch_is_bounded_by_available_venues():
    result = _aggregate(ensemble=StubEnsemble(venues=[venue_payload(1), venue_payload(2)]))

    assert result.source == "trending"
    assert len(result.recommendations) == 2


def test_enriched_venue_carries_video_analysis():
    socialkit = StubSocialKit(keywords=["rooftop"])

    result = _aggregate(ensemble=StubEnsemble(venues=[venue_payload(1)]), socialkit=socialkit)

    rec = result.recommendations[0]
    assert rec.vibe_tags == ["Nightlife", "Romantic"]
    assert {kind for kind, _ in socialkit.calls} == {"summary", "sentiment", "keywords"}


def test_failed_enrichment_drops_only_that_venue():
    socialkit = StubSocialKit(failing_urls={"https://example.com/video2.mp4"})
    venues = [venue_payload(1), venue_payload(2), venue_payload(3, video=False)]

    result = _aggregate(ensemble=StubEnsemble(venues=venues), socialkit=socialkit)

    assert result.source == "trending"
    assert [r.id for r in result.recommendations] == ["venue-1", "venue-3"]
    assert all(url != "" for kind, url in socialkit.calls)


def test_places_used_when_trending_is_unavailable():
    maps = StubMaps(
        places=[place_payload(i) for i in range(1, 5)],
        details={"place1": {"rating": 4.2}, "place2": {"rating": 3.9}, "place4": {"rating": 4.8}},
        failing_details={"place2"},
    )

    result = _aggregate(ensemble=StubEnsemble(fail=True), maps=maps)

    assert result.source == "places"
    assert [r.id for r in result.recommendations] == ["place-place1", "place-place4"]
    assert all(r.video_url == "" and r.social_media_url == "" for r in result.recommendations)


def test_generator_used_when_live_sources_are_empty():
    text = json.dumps([
        {"recommendationId": "1", "title": "Dolores Park", "location": {"lat": 37.76, "lng": -122.43}, "vibe_tags": ["Chill"]},
        {"title": "No location"},
    ])
    ai = StubAI(text=text)

    result = _aggregate(ai=ai, preferences=["Chill"])

    assert result.source == "generated"
    assert [r.id for r in result.recommendations] == ["ai-1"]
    assert ai.calls == [("San Francisco", ["Chill"])]


def test_malformed_generator_output_serves_fallback():
    result = _aggregate(ai=StubAI(text="Sorry, I cannot help with that."))

    assert result.source == "fallback"
    assert {r.id for r in result.recommendations} == FALLBACK_IDS


def test_every_source_failing_serves_fallback():
    result = _aggregate(
        StubRepository(fail=True),
        ensemble=StubEnsemble(fail=True),
        maps=StubMaps(fail=True),
        socialkit=StubSocialKit(fail=True),
        ai=StubAI(fail=True),
    )

    assert result.source == "fallback"
    assert {r.id for r in result.recommendations} == FALLBACK_IDS


def test_unknown_location_uses_reference_coordinate():
    ensemble = StubEnsemble(venues=[venue_payload(1)])
    settings = make_settings(default_latitude=40.0, default_longitude=-70.0)

    result = _aggregate(query="Atlantis", settings=settings, ensemble=ensemble, maps=StubMaps(coords={}))

    assert result.source == "trending"
    assert ensemble.calls[0][1:3] == (40.0, -70.0)


def test_slow_sources_hit_the_aggregation_budget():
    settings = make_settings(aggregation_timeout_seconds=0.2)

    result = _aggregate(settings=settings, ensemble=StubEnsemble(venues=[venue_payload(1)], delay=1.0))

    assert result.source == "fallback"
    assert {r.id for r in result.recommendations} == FALLBACK_IDS


def test_duplicate_provider_ids_are_collapsed():
    venues = [venue_payload(1), venue_payload(1), venue_payload(2)]

    result = _aggregate(ensemble=StubEnsemble(venues=venues))

    assert [r.id for r in result.recommendations] == ["venue-1", "venue-2"]


def test_dedupe_by_id_keeps_first_occurrence():
    first = make_recommendation("a", ["Chill"], score=10)
    second = make_recommendation("a", ["Cozy"], score=90)
    assert dedupe_by_id([first, second, make_recommendation("b", ["Retro"])]) == [first, make_recommendation("b", ["Retro"])]


def test_infinite_score_drops_only_that_venue():
    venues = [venue_payload(1), venue_payload(2, score=float("inf")), venue_payload(3)]

    result = _aggregate(ensemble=StubEnsemble(venues=venues))

    assert result.source == "trending"
    assert [r.id for r in result.recommendations] == ["venue-1", "venue-3"]


def test_infinite_generated_score_drops_only_that_item():
    text = json.dumps([
        {"recommendationId": "1", "title": "Dolores Park", "location": {"lat": 37.76, "lng": -122.43}, "trendScore": float("inf")},
        {"recommendationId": "2", "title": "Crissy Field", "location": {"lat": 37.80, "lng": -122.46}, "trendScore": 75},
    ])

    result = _aggregate(ai=StubAI(text=text))

    assert result.source == "generated"
    assert [r.id for r in result.recommendations] == ["ai-2"]


def test_live_batches_are_written_back_to_the_repository():
    repository = StubRepository()

    result = _aggregate(repository, ensemble=StubEnsemble(venues=[venue_payload(1), venue_payload(2)]))

    assert result.source == "trending"
    assert repository.stored == [("trending", "venue-1"), ("trending", "venue-2")]


def test_fallback_batches_are_not_written_back():
    repository = StubRepository()

    result = _aggregate(repository, ai=StubAI(text="not json"))

    assert result.source == "fallback"
    assert repository.stored == []


def test_write_back_failure_still_serves_the_live_batch():
    repository = StubRepository()
    repository.fail = True

    result = _aggregate(repository, ensemble=StubEnsemble(venues=[venue_payload(1)]))

    assert result.source == "trending"
    assert [r.id for r in result.recommendations] == ["venue-1"]
