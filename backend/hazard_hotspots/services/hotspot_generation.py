from __future__ import annotations

import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from hazard_hotspots.domain.config import HotspotConfig
from hazard_hotspots.domain.models import Observation
from hazard_hotspots.domain.pipeline import compute_generation
from hazard_hotspots.infra.db.hotspots_repository import HotspotsRepository
from hazard_hotspots.infra.db.observations_repository import ObservationsRepository

logger = logging.getLogger(__name__)

# One generation at a time per process; overlapping triggers are skipped
RUN_LOCK = Lock()


def rows_to_observations(rows: Iterable[Dict[str, Any]]) -> Tuple[List[Observation], int]:
    observations: List[Observation] = []
    skipped = 0
    for row in rows:
        try:
            observations.append(
                Observation(
                    id=str(row["id"]) if row.get("id") is not None else None,
                    lon=row.get("lon"),
                    lat=row.get("lat"),
                    hazard_type=row.get("hazard_type"),
                    observed_at=row.get("observed_at"),
                    source=row.get("source"),
                )
            )
        except ValueError as exc:
            skipped += 1
            logger.debug("[generate_hotspots] skipping observation id=%s: %s", row.get("id"), exc)
    return observations, skipped


class HotspotGenerationService:
    def __init__(self, engine: Engine, config: Optional[HotspotConfig] = None):
        if engine is None:
            raise ValueError("engine is required")
        self.engine = engine
        self.config = config or HotspotConfig()
        self.observations = ObservationsRepository(engine)
        self.hotspots = HotspotsRepository(engine)

    def run(self, now: Optional[datetime] = None) -> dict:
        if not RUN_LOCK.acquire(blocking=False):
            logger.warning("[generate_hotspots] previous run still in progress; skipping")
            return {"status": "skipped", "hotspots": 0}
        try:
            return self._run_locked(now or datetime.now(timezone.utc))
        finally:
            RUN_LOCK.release()

    def _run_locked(self, now: datetime) -> dict:
        summary: Dict[str, Any] = {
            "status": "ok",
            "now": now,
            "fetched": 0,
            "skipped_malformed": 0,
            "windowed": 0,
            "candidates": 0,
            "hotspots": 0,
            "insufficient_data": False,
        }
        try:
            rows = self.observations.list_since(now - self.config.window)
        except SQLAlchemyError:
            logger.exception("[generate_hotspots] failed to fetch observations; hotspots left untouched")
            summary.update(status="error", stage="fetch")
            return summary

        observations, skipped = rows_to_observations(rows)
        summary["fetched"] = len(rows)
        summary["skipped_malformed"] = skipped
        if skipped:
            logger.warning("[generate_hotspots] skipped %d malformed observations", skipped)

        result = compute_generation(observations, now, self.config)
        summary["windowed"] = result.windowed
        summary["candidates"] = result.candidates
        summary["insufficient_data"] = result.insufficient_data
        if result.insufficient_data:
            logger.info(
                "[generate_hotspots] only %d observations in window (< %d); clearing hotspots",
                result.windowed,
                self.config.min_cluster_size,
            )

        try:
            written = self.hotspots.replace_all(result.hotspots, generated_at=now)
        except SQLAlchemyError:
            logger.exception("[generate_hotspots] failed to write hotspots")
            summary.update(status="error", stage="write")
            return summary

        summary["hotspots"] = written
        logger.info(
            "[generate_hotspots] now=%s fetched=%d skipped=%d windowed=%d candidates=%d hotspots=%d",
            now.isoformat(),
            summary["fetched"],
            skipped,
            result.windowed,
            result.candidates,
            written,
        )
        return summary
