from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import MetaData, Column, Integer, Table, create_engine, func, insert, select
from sqlalchemy.exc import SQLAlchemyError

from hazard_hotspots.domain.models import Hotspot
from hazard_hotspots.infra.db import hotspots_repository as hotspots_module
from hazard_hotspots.infra.db.hotspots_repository import HotspotsRepository
from hazard_hotspots.infra.db.observations_repository import ObservationsRepository
from hazard_hotspots.infra.db.tables import hotspots_table, metadata

NOW = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'repos.db'}", future=True)
    metadata.create_all(engine)
    return engine


def make_hotspot(score, lon=0.0):
    return Hotspot(
        lon=lon,
        lat=0.0,
        score=score,
        report_count=3,
        hazard_summary={"tsunami": 2, "flooding": 1},
        last_reported_at=NOW,
        radius_m=5000.0,
    )


def test_list_since_filters_by_observed_at(engine):
    repo = ObservationsRepository(engine)
    repo.insert_many(
        [
            {"hazard_type": "tsunami", "lon": 1.0, "lat": 2.0, "observed_at": NOW - timedelta(days=1)},
            {"hazard_type": "flooding", "lon": 1.0, "lat": 2.0, "observed_at": NOW - timedelta(days=9)},
            {"hazard_type": "other", "lon": None, "lat": None, "observed_at": NOW, "source": "social"},
        ]
    )
    rows = repo.list_since(NOW - timedelta(days=7))
    assert [row["hazard_type"] for row in rows] == ["tsunami", "other"]
    assert rows[0]["source"] == "report"
    assert rows[1]["source"] == "social"


def test_insert_many_accepts_naive_as_utc(engine):
    repo = ObservationsRepository(engine)
    repo.insert_many([{"hazard_type": "tsunami", "lon": 0.0, "lat": 0.0, "observed_at": datetime(2026, 2, 10, 11)}])
    assert len(repo.list_since(datetime(2026, 2, 10, 10, 59, tzinfo=timezone.utc))) == 1
    assert repo.list_since(datetime(2026, 2, 10, 11, 1, tzinfo=timezone.utc)) == []


def test_replace_all_swaps_generation(engine):
    repo = HotspotsRepository(engine)
    repo.replace_all([make_hotspot(1.0), make_hotspot(2.0, lon=1.0)], generated_at=NOW)
    repo.replace_all([make_hotspot(5.0, lon=2.0)], generated_at=NOW + timedelta(hours=1))
    rows = repo.list_by_score()
    assert len(rows) == 1
    assert rows[0]["score"] == 5.0
    assert rows[0]["hazard_summary"] == {"tsunami": 2, "flooding": 1}


def test_replace_with_empty_clears(engine):
    repo = HotspotsRepository(engine)
    repo.replace_all([make_hotspot(1.0)])
    assert repo.replace_all([]) == 0
    assert repo.list_by_score() == []


def test_list_by_score_descending_with_limit(engine):
    repo = HotspotsRepository(engine)
    repo.replace_all([make_hotspot(1.0), make_hotspot(9.0, lon=1.0), make_hotspot(4.0, lon=2.0)])
    assert [row["score"] for row in repo.list_by_score()] == [9.0, 4.0, 1.0]
    assert [row["score"] for row in repo.list_by_score(limit=2)] == [9.0, 4.0]


def test_failed_insert_keeps_previous_generation(engine, monkeypatch):
    repo = HotspotsRepository(engine)
    repo.replace_all([make_hotspot(3.0)])

    missing = Table("missing_hotspots", MetaData(), Column("id", Integer, primary_key=True))
    monkeypatch.setattr(hotspots_module, "insert", lambda table: insert(missing))

    with pytest.raises(SQLAlchemyError):
        repo.replace_all([make_hotspot(7.0)])

    with engine.begin() as conn:
        count = conn.execute(select(func.count()).select_from(hotspots_table)).scalar()
    assert count == 1
    assert repo.list_by_score()[0]["score"] == 3.0
