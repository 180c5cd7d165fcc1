from __future__ import annotations

import pytest
from sqlalchemy import create_engine

from hazard_hotspots.jobs import run_scheduler as scheduler_module


def test_scheduler_survives_failed_tick(tmp_path, monkeypatch):
    calls: list[int] = []

    def fake_generate(**kwargs):
        calls.append(len(calls))
        if len(calls) == 2:
            raise RuntimeError("store unavailable")
        return {"status": "ok", "hotspots": 4}

    sleeps: list[float] = []
    monkeypatch.setattr(scheduler_module, "generate_hotspots", fake_generate)
    engine = create_engine(f"sqlite:///{tmp_path / 'sched.db'}", future=True)

    summaries = scheduler_module.run_scheduler(
        interval_minutes=60,
        max_runs=3,
        engine=engine,
        sleep=sleeps.append,
    )

    assert [s["status"] for s in summaries] == ["ok", "error", "ok"]
    assert sleeps == [3600, 3600]
    assert len(calls) == 3


def test_scheduler_passes_shared_engine_and_config(tmp_path, monkeypatch):
    seen = []
    monkeypatch.setattr(scheduler_module, "generate_hotspots", lambda **kwargs: seen.append(kwargs) or {"status": "ok"})
    engine = create_engine(f"sqlite:///{tmp_path / 'shared.db'}", future=True)
    scheduler_module.run_scheduler(interval_minutes=1, max_runs=2, engine=engine, sleep=lambda s: None)
    assert [kw["engine"] for kw in seen] == [engine, engine]
    assert seen[0]["config"] is seen[1]["config"]


def test_scheduler_rejects_non_positive_interval(tmp_path):
    with pytest.raises(ValueError):
        scheduler_module.run_scheduler(interval_minutes=0, max_runs=1)


def test_scheduler_keeps_running_while_store_is_down(tmp_path):
    sleeps: list[float] = []
    unopenable = tmp_path / "missing_dir" / "hot.db"
    summaries = scheduler_module.run_scheduler(
        interval_minutes=5,
        max_runs=2,
        database_url=f"sqlite:///{unopenable}",
        sleep=sleeps.append,
    )
    assert [s["status"] for s in summaries] == ["error", "error"]
    assert sleeps == [300]
