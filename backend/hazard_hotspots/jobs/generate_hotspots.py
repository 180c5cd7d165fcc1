from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import typer
from sqlalchemy.exc import SQLAlchemyError

from hazard_hotspots.domain.config import HotspotConfig
from hazard_hotspots.infra.database import resolve_engine
from hazard_hotspots.services.hotspot_generation import HotspotGenerationService

logger = logging.getLogger(__name__)


def generate_hotspots(
    *,
    engine=None,
    database_url: Optional[str] = None,
    config: Optional[HotspotConfig] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Run one generation cycle: read the window, cluster, score, dedupe, replace."""
    try:
        engine = resolve_engine(engine, database_url)
    except SQLAlchemyError:
        logger.exception("[generate_hotspots] hotspot store unavailable; hotspots left untouched")
        return {"status": "error", "stage": "fetch", "hotspots": 0}
    config = config or HotspotConfig.from_env()
    return HotspotGenerationService(engine, config).run(now=now)


def generate_cli(
    database_url: Optional[str] = typer.Option(None, help="DATABASE_URL override"),
    now: Optional[str] = typer.Option(None, help="Reference time (ISO 8601); defaults to current UTC time"),
):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    reference = datetime.fromisoformat(now) if now else None
    summary = generate_hotspots(database_url=database_url, now=reference)
    typer.echo(f"status={summary['status']} hotspots={summary['hotspots']}")
    if summary["status"] == "error":
        raise typer.Exit(code=1)


if __name__ == "__main__":
    typer.run(generate_cli)
