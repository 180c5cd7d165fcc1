from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import HotspotConfig, normalize_hazard_type
from .models import Hotspot, Observation, to_utc_naive


def hazard_weight(observation: Observation, config: HotspotConfig) -> int:
    return config.weight_for(observation.hazard_type)


def recency_factor(observed_at: datetime, now: datetime, window: timedelta) -> float:
    age = (to_utc_naive(now) - to_utc_naive(observed_at)).total_seconds()
    factor = 1.0 - age / window.total_seconds()
    return max(0.0, min(1.0, factor))


def weighted_centroid(members: Sequence[Observation], config: HotspotConfig) -> Tuple[float, float]:
    """Severity-weighted arithmetic mean of (lon, lat); not a geodesic centroid."""
    total_lon = 0.0
    total_lat = 0.0
    total_weight = 0
    for obs in members:
        weight = hazard_weight(obs, config)
        total_lon += obs.lon * weight
        total_lat += obs.lat * weight
        total_weight += weight
    return total_lon / total_weight, total_lat / total_weight


def score_cluster(members: Sequence[Observation], now: datetime, config: HotspotConfig) -> Optional[Hotspot]:
    if len(members) < config.min_cluster_size:
        return None
    score = 0.0
    for obs in members:
        score += hazard_weight(obs, config) * recency_factor(obs.observed_at, now, config.window)
    lon, lat = weighted_centroid(members, config)
    # counted under the same normalised key the weight lookup uses
    summary = Counter(normalize_hazard_type(obs.hazard_type) for obs in members)
    return Hotspot(
        lon=lon,
        lat=lat,
        score=score,
        report_count=len(members),
        hazard_summary=dict(summary),
        last_reported_at=max(obs.observed_at for obs in members),
        radius_m=config.radius_m,
    )


def score_clusters(
    clusters: Iterable[Sequence[Observation]], now: datetime, config: HotspotConfig
) -> List[Hotspot]:
    hotspots: List[Hotspot] = []
    for members in clusters:
        hotspot = score_cluster(members, now, config)
        if hotspot is not None:
            hotspots.append(hotspot)
    return hotspots
