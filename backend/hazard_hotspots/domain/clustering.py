from __future__ import annotations

import math
from bisect import bisect_left, bisect_right
from datetime import datetime, timedelta
from typing import Iterable, List, Sequence

from .geo import EARTH_RADIUS_M, haversine_m
from .models import Observation, to_utc_naive

# Slack added to the latitude band so float rounding never drops a true neighbour
_BAND_SLACK_DEG = 1e-9


def select_window(observations: Iterable[Observation], now: datetime, window: timedelta) -> List[Observation]:
    cutoff = to_utc_naive(now) - window
    return [obs for obs in observations if obs.observed_at >= cutoff]


class LatitudeIndex:
    """Observations sorted by latitude.

    Great-circle distance is never shorter than the latitude arc between two
    points, so every neighbour within ``radius_m`` sits inside a latitude band
    of ``radius_m / R`` radians around the seed. The band is cut with bisect
    and each candidate is then confirmed with the exact Haversine distance,
    which gives the same membership as checking every pair.
    """

    def __init__(self, observations: Sequence[Observation]):
        self._observations = observations
        self._order = sorted(range(len(observations)), key=lambda idx: observations[idx].lat)
        self._lats = [observations[idx].lat for idx in self._order]

    def within(self, seed: Observation, radius_m: float) -> List[int]:
        band = math.degrees(radius_m / EARTH_RADIUS_M) + _BAND_SLACK_DEG
        lo = bisect_left(self._lats, seed.lat - band)
        hi = bisect_right(self._lats, seed.lat + band)
        hits = []
        for pos in range(lo, hi):
            idx = self._order[pos]
            other = self._observations[idx]
            if haversine_m(seed.lat, seed.lon, other.lat, other.lon) <= radius_m:
                hits.append(idx)
        # input order keeps float sums identical between runs
        hits.sort()
        return hits


def neighbor_clusters(observations: Sequence[Observation], radius_m: float) -> List[List[Observation]]:
    """One candidate cluster per seed, seed included, in seed order."""
    index = LatitudeIndex(observations)
    return [[observations[idx] for idx in index.within(seed, radius_m)] for seed in observations]
