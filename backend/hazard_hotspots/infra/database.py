from __future__ import annotations

import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from hazard_hotspots.infra.db.tables import metadata


def build_engine(database_url: Optional[str] = None) -> Engine:
    """Create the engine without connecting; the first query opens the store."""
    if database_url is None:
        database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL required if engine not provided")
    return create_engine(database_url, future=True)


def resolve_engine(engine: Optional[Engine] = None, database_url: Optional[str] = None) -> Engine:
    if engine is None:
        engine = build_engine(database_url)
    metadata.create_all(engine)
    return engine
