from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import typer

from hazard_hotspots.domain.config import HotspotConfig
from hazard_hotspots.infra.database import build_engine
from hazard_hotspots.jobs.generate_hotspots import generate_hotspots

logger = logging.getLogger(__name__)

app = typer.Typer(help="Runs hotspot generation on a fixed interval")


def run_scheduler(
    *,
    interval_minutes: float = 60.0,
    max_runs: Optional[int] = None,
    engine=None,
    database_url: Optional[str] = None,
    config: Optional[HotspotConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[dict]:
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be > 0")
    # no connection yet; an unreachable store only fails the tick that uses it
    engine = engine if engine is not None else build_engine(database_url)
    config = config or HotspotConfig.from_env()
    summaries: list[dict] = []
    runs = 0
    while max_runs is None or runs < max_runs:
        logger.info("[run_scheduler] running scheduled job: hotspot generation")
        try:
            summary = generate_hotspots(engine=engine, config=config)
        except Exception:
            # a broken tick must not stop the schedule; next tick retries
            logger.exception("[run_scheduler] hotspot generation failed")
            summary = {"status": "error", "stage": "run", "hotspots": 0}
        summaries.append(summary)
        runs += 1
        if max_runs is not None and runs >= max_runs:
            break
        sleep(interval_minutes * 60)
    return summaries


@app.command()
def cli(
    interval_minutes: float = typer.Option(60.0, help="Minutes between runs"),
    max_runs: Optional[int] = typer.Option(None, help="Stop after N runs (runs forever when omitted)"),
    database_url: Optional[str] = typer.Option(None, help="DATABASE_URL override"),
):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    run_scheduler(interval_minutes=interval_minutes, max_runs=max_runs, database_url=database_url)


if __name__ == "__main__":
    app()
