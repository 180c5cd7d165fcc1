from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from sqlalchemy import insert, select
from sqlalchemy.engine import Engine

from .tables import observations_table

OBSERVATION_COLUMNS = ["source", "external_id", "hazard_type", "lon", "lat", "observed_at"]


def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class ObservationsRepository:
    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine is required")
        self.engine = engine

    def insert_many(self, observations: Iterable[Dict[str, Any]]) -> int:
        now = datetime.now(timezone.utc)
        rows = []
        for obs in observations:
            payload = {col: obs.get(col) for col in OBSERVATION_COLUMNS}
            payload["source"] = payload["source"] or "report"
            payload["observed_at"] = _to_utc(payload["observed_at"])
            payload["created_at"] = now
            rows.append(payload)
        if not rows:
            return 0
        with self.engine.begin() as conn:
            conn.execute(insert(observations_table), rows)
        return len(rows)

    def list_since(self, since: datetime) -> List[Dict[str, Any]]:
        with self.engine.begin() as conn:
            rows = conn.execute(
                select(observations_table)
                .where(observations_table.c.observed_at >= _to_utc(since))
                .order_by(observations_table.c.id)
            ).mappings().all()
        return [dict(row) for row in rows]
