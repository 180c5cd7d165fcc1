from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List

from .clustering import neighbor_clusters, select_window
from .config import HotspotConfig
from .dedupe import deduplicate_hotspots
from .models import Hotspot, Observation
from .scoring import score_clusters


@dataclass(frozen=True)
class GenerationResult:
    windowed: int
    candidates: int
    hotspots: List[Hotspot] = field(default_factory=list)
    insufficient_data: bool = False


def compute_generation(
    observations: Iterable[Observation], now: datetime, config: HotspotConfig
) -> GenerationResult:
    windowed = select_window(observations, now, config.window)
    if len(windowed) < config.min_cluster_size:
        return GenerationResult(windowed=len(windowed), candidates=0, insufficient_data=True)
    clusters = neighbor_clusters(windowed, config.radius_m)
    candidates = score_clusters(clusters, now, config)
    hotspots = deduplicate_hotspots(candidates, config.min_separation_m)
    return GenerationResult(windowed=len(windowed), candidates=len(candidates), hotspots=hotspots)
