from __future__ import annotations

from typing import Iterable, List

from .geo import haversine_m
from .models import Hotspot


def deduplicate_hotspots(candidates: Iterable[Hotspot], min_separation_m: float) -> List[Hotspot]:
    """Greedy suppression by descending score.

    ``sorted`` is stable, so equal scores keep their seed order and the first
    seed wins. A candidate is kept when it lies at least ``min_separation_m``
    from every hotspot already kept.
    """
    ranked = sorted(candidates, key=lambda h: h.score, reverse=True)
    kept: List[Hotspot] = []
    for candidate in ranked:
        if all(
            haversine_m(candidate.lat, candidate.lon, other.lat, other.lon) >= min_separation_m
            for other in kept
        ):
            kept.append(candidate)
    return kept
