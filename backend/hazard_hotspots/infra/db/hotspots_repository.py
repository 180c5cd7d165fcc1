from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine

from hazard_hotspots.domain.models import Hotspot

from .tables import hotspots_table


def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class HotspotsRepository:
    def __init__(self, engine: Engine):
        if engine is None:
            raise ValueError("engine is required")
        self.engine = engine

    def replace_all(self, hotspots: Iterable[Hotspot], generated_at: Optional[datetime] = None) -> int:
        """Swap the whole collection for ``hotspots``.

        Delete and insert share one transaction: readers see either the
        previous generation or the new one, and a failed insert rolls the
        delete back.
        """
        generated_at = _to_utc(generated_at or datetime.now(timezone.utc))
        rows = []
        for hotspot in hotspots:
            record = hotspot.to_record()
            record["last_reported_at"] = _to_utc(record["last_reported_at"])
            record["generated_at"] = generated_at
            rows.append(record)
        with self.engine.begin() as conn:
            conn.execute(delete(hotspots_table))
            if rows:
                conn.execute(insert(hotspots_table), rows)
        return len(rows)

    def list_by_score(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        stmt = select(hotspots_table).order_by(hotspots_table.c.score.desc(), hotspots_table.c.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.engine.begin() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [dict(row) for row in rows]
