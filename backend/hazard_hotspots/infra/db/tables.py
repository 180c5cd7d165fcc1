from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Float, Index, Integer, MetaData, Table, Text

metadata = MetaData()

# Written by the report and social-media collaborators; read-only for the engine.
# Coordinates are nullable because upstream rows are not validated before landing here.
observations_table = Table(
    "observations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("source", Text, nullable=False, default="report"),
    Column("external_id", Text),
    Column("hazard_type", Text),
    Column("lon", Float),
    Column("lat", Float),
    Column("observed_at", DateTime(timezone=True), nullable=False),
    Column("created_at", DateTime(timezone=True)),
    Index("ix_observations_observed_at", "observed_at"),
)

hotspots_table = Table(
    "hotspots",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("lon", Float, nullable=False),
    Column("lat", Float, nullable=False),
    Column("score", Float, nullable=False),
    Column("report_count", Integer, nullable=False),
    Column("hazard_summary", JSON, nullable=False),
    Column("last_reported_at", DateTime(timezone=True), nullable=False),
    Column("radius_m", Float, nullable=False),
    Column("generated_at", DateTime(timezone=True), nullable=False),
    Index("ix_hotspots_score", "score"),
)
