import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import typer

from hazard_hotspots.domain.config import HotspotConfig
from hazard_hotspots.domain.pipeline import compute_generation
from hazard_hotspots.infra.database import resolve_engine
from hazard_hotspots.infra.db.hotspots_repository import HotspotsRepository
from hazard_hotspots.jobs.generate_hotspots import generate_hotspots
from hazard_hotspots.services.hotspot_generation import rows_to_observations

app = typer.Typer(help="CLI to operate coastal hazard hotspots")

_EXAMPLE_DATA = Path(__file__).parent / "sample_observations.json"


def _parse_timestamp(value) -> Optional[datetime]:
    # unparseable values become None so the row is skipped like any malformed one
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _build_config(
    window_days: Optional[float],
    radius_m: Optional[float],
    min_cluster_size: Optional[int],
    min_separation_m: Optional[float],
) -> HotspotConfig:
    return HotspotConfig.from_env().with_overrides(
        window=timedelta(days=window_days) if window_days is not None else None,
        radius_m=radius_m,
        min_cluster_size=min_cluster_size,
        min_separation_m=min_separation_m,
    )


def _load_rows(path: Optional[Path]) -> list[dict]:
    source = path or _EXAMPLE_DATA
    payload = json.loads(source.read_text())
    rows = []
    for idx, item in enumerate(payload):
        rows.append(
            {
                "id": item.get("id", idx),
                "lon": item.get("lon"),
                "lat": item.get("lat"),
                "hazard_type": item.get("hazard_type"),
                "observed_at": _parse_timestamp(item.get("observed_at")),
                "source": item.get("source"),
            }
        )
    return rows


@app.command("generate")
def cli_generate(
    database_url: Optional[str] = typer.Option(None, help="DATABASE_URL override"),
    window_days: Optional[float] = typer.Option(None, help="Look-back window in days"),
    radius_m: Optional[float] = typer.Option(None, help="Cluster radius in meters"),
    min_cluster_size: Optional[int] = typer.Option(None, help="Minimum reports per hotspot"),
    min_separation_m: Optional[float] = typer.Option(None, help="Minimum distance between hotspots in meters"),
):
    logging.basicConfig(level=logging.INFO)
    config = _build_config(window_days, radius_m, min_cluster_size, min_separation_m)
    summary = generate_hotspots(database_url=database_url, config=config)
    typer.echo(
        f"status={summary['status']} windowed={summary.get('windowed', 0)} "
        f"skipped={summary.get('skipped_malformed', 0)} hotspots={summary['hotspots']}"
    )
    if summary["status"] == "error":
        raise typer.Exit(code=1)


@app.command("list")
def cli_list(
    limit: Optional[int] = typer.Option(None, help="Maximum number of hotspots"),
    database_url: Optional[str] = typer.Option(None, help="DATABASE_URL override"),
):
    repo = HotspotsRepository(resolve_engine(database_url=database_url))
    rows = repo.list_by_score(limit=limit)
    if not rows:
        typer.echo("No hotspots generated")
        raise typer.Exit(code=0)
    typer.echo("lon\tlat\tscore\treports\thazards")
    for row in rows:
        hazards = ",".join(f"{k}:{v}" for k, v in sorted(row["hazard_summary"].items()))
        typer.echo(f"{row['lon']:.5f}\t{row['lat']:.5f}\t{row['score']:.3f}\t{row['report_count']}\t{hazards}")


@app.command("preview")
def cli_preview(
    file: Optional[Path] = typer.Option(None, help="JSON list of observations"),
    now: Optional[str] = typer.Option(None, help="Reference time; defaults to the newest observation"),
    window_days: Optional[float] = typer.Option(None, help="Look-back window in days"),
    radius_m: Optional[float] = typer.Option(None, help="Cluster radius in meters"),
    min_cluster_size: Optional[int] = typer.Option(None, help="Minimum reports per hotspot"),
    min_separation_m: Optional[float] = typer.Option(None, help="Minimum distance between hotspots in meters"),
):
    """Compute hotspots from a file without touching the database."""
    observations, skipped = rows_to_observations(_load_rows(file))
    if now:
        reference = datetime.fromisoformat(now)
    elif observations:
        reference = max(obs.observed_at for obs in observations)
    else:
        reference = datetime.now(timezone.utc)
    config = _build_config(window_days, radius_m, min_cluster_size, min_separation_m)
    result = compute_generation(observations, reference, config)
    if skipped:
        typer.echo(f"Skipped {skipped} malformed observations")
    if not result.hotspots:
        typer.echo("No hotspots found")
        raise typer.Exit(code=0)
    typer.echo("lon\tlat\tscore\treports")
    for hs in result.hotspots:
        typer.echo(f"{hs.lon:.5f}\t{hs.lat:.5f}\t{hs.score:.3f}\t{hs.report_count}")


if __name__ == "__main__":
    app()
