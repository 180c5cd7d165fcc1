from datetime import datetime

from hazard_hotspots.domain.dedupe import deduplicate_hotspots
from hazard_hotspots.domain.geo import haversine_m
from hazard_hotspots.domain.models import Hotspot

NOW = datetime(2026, 2, 10, 12, 0, 0)


def make_hotspot(score, lon=0.0, lat=0.0, label="x"):
    return Hotspot(
        lon=lon,
        lat=lat,
        score=score,
        report_count=3,
        hazard_summary={label: 3},
        last_reported_at=NOW,
    )


def test_keeps_highest_score_within_separation():
    weak = make_hotspot(5.0, lon=0.001, label="weak")
    strong = make_hotspot(9.0, label="strong")
    kept = deduplicate_hotspots([weak, strong], 2000)
    assert kept == [strong]


def test_distant_hotspots_all_kept_in_score_order():
    a = make_hotspot(3.0, lon=0.0)
    b = make_hotspot(7.0, lon=0.1)
    c = make_hotspot(5.0, lon=0.2)
    assert deduplicate_hotspots([a, b, c], 2000) == [b, c, a]


def test_ties_keep_seed_order():
    first = make_hotspot(4.0, label="first")
    second = make_hotspot(4.0, lon=0.0001, label="second")
    kept = deduplicate_hotspots([first, second], 2000)
    assert [h.hazard_summary for h in kept] == [{"first": 3}]


def test_exact_separation_is_allowed():
    a = make_hotspot(2.0, lat=0.0)
    b = make_hotspot(1.0, lat=0.02)
    separation = haversine_m(0.02, 0.0, 0.0, 0.0)
    assert len(deduplicate_hotspots([a, b], separation)) == 2


def test_suppressed_candidate_does_not_suppress_others():
    # b is suppressed by a; c is close to b but far enough from a
    a = make_hotspot(10.0, lon=0.0)
    b = make_hotspot(8.0, lon=0.015)
    c = make_hotspot(6.0, lon=0.03)
    assert deduplicate_hotspots([a, b, c], 2000) == [a, c]


def test_empty_input():
    assert deduplicate_hotspots([], 2000) == []
