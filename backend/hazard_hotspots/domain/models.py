from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional


def to_utc_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _valid_coord(value, limit: float) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and -limit <= value <= limit


@dataclass(frozen=True)
class Observation:
    lon: float
    lat: float
    hazard_type: str
    observed_at: datetime
    id: Optional[str] = None
    source: Optional[str] = None

    def __post_init__(self):
        if not _valid_coord(self.lon, 180.0) or not _valid_coord(self.lat, 90.0):
            raise ValueError(f"invalid coordinates lon={self.lon!r} lat={self.lat!r}")
        if self.hazard_type is not None and not isinstance(self.hazard_type, str):
            raise ValueError(f"invalid hazard_type {self.hazard_type!r}")
        if not isinstance(self.observed_at, datetime):
            raise ValueError("observed_at is required")
        # all engine arithmetic runs on naive UTC
        object.__setattr__(self, "observed_at", to_utc_naive(self.observed_at))
        object.__setattr__(self, "hazard_type", (self.hazard_type or "unknown").strip() or "unknown")


@dataclass(frozen=True)
class Hotspot:
    lon: float
    lat: float
    score: float
    report_count: int
    hazard_summary: Dict[str, int] = field(default_factory=dict)
    last_reported_at: Optional[datetime] = None
    radius_m: float = 5000.0

    def to_record(self) -> dict:
        return {
            "lon": self.lon,
            "lat": self.lat,
            "score": self.score,
            "report_count": self.report_count,
            "hazard_summary": dict(self.hazard_summary),
            "last_reported_at": self.last_reported_at,
            "radius_m": self.radius_m,
        }
