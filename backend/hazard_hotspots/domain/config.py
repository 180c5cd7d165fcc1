from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from datetime import timedelta
from pathlib import Path
from typing import Dict, Mapping, Optional

# Relative severity per hazard type; unknown types fall back to default_weight
DEFAULT_HAZARD_WEIGHTS = {
    "tsunami": 10,
    "high waves": 8,
    "storm surge": 8,
    "flooding": 7,
    "rip current": 6,
    "water pollution": 5,
    "coastal erosion": 4,
    "unusual tides": 3,
    "other": 2,
}

DEFAULT_WINDOW = timedelta(days=7)
DEFAULT_RADIUS_M = 5000.0
DEFAULT_MIN_CLUSTER_SIZE = 3
DEFAULT_MIN_SEPARATION_M = 2000.0
DEFAULT_WEIGHT = 1


def normalize_hazard_type(hazard_type: Optional[str]) -> str:
    return (hazard_type or "").strip().lower()


@dataclass(frozen=True)
class HotspotConfig:
    window: timedelta = DEFAULT_WINDOW
    radius_m: float = DEFAULT_RADIUS_M
    min_cluster_size: int = DEFAULT_MIN_CLUSTER_SIZE
    min_separation_m: float = DEFAULT_MIN_SEPARATION_M
    hazard_weights: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_HAZARD_WEIGHTS))
    default_weight: int = DEFAULT_WEIGHT

    def __post_init__(self):
        if self.window.total_seconds() <= 0:
            raise ValueError("window must be positive")
        if self.radius_m <= 0:
            raise ValueError("radius_m must be > 0")
        if self.min_cluster_size < 1:
            raise ValueError("min_cluster_size must be >= 1")
        if self.min_separation_m < 0:
            raise ValueError("min_separation_m must be >= 0")
        if self.default_weight <= 0:
            raise ValueError("default_weight must be > 0")
        normalized: Dict[str, int] = {}
        for key, weight in self.hazard_weights.items():
            if weight <= 0:
                raise ValueError(f"weight for {key!r} must be > 0")
            normalized[normalize_hazard_type(key)] = weight
        object.__setattr__(self, "hazard_weights", normalized)

    def weight_for(self, hazard_type: Optional[str]) -> int:
        return self.hazard_weights.get(normalize_hazard_type(hazard_type), self.default_weight)

    def with_overrides(self, **overrides) -> "HotspotConfig":
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HotspotConfig":
        env = os.environ if environ is None else environ
        kwargs = {}
        if env.get("HOTSPOT_WINDOW_DAYS"):
            kwargs["window"] = timedelta(days=float(env["HOTSPOT_WINDOW_DAYS"]))
        if env.get("HOTSPOT_RADIUS_M"):
            kwargs["radius_m"] = float(env["HOTSPOT_RADIUS_M"])
        if env.get("HOTSPOT_MIN_CLUSTER_SIZE"):
            kwargs["min_cluster_size"] = int(env["HOTSPOT_MIN_CLUSTER_SIZE"])
        if env.get("HOTSPOT_MIN_SEPARATION_M"):
            kwargs["min_separation_m"] = float(env["HOTSPOT_MIN_SEPARATION_M"])
        if env.get("HOTSPOT_WEIGHTS_FILE"):
            kwargs["hazard_weights"] = load_weights(Path(env["HOTSPOT_WEIGHTS_FILE"]))
        return cls(**kwargs)


def load_weights(path: Path) -> Dict[str, int]:
    payload = json.loads(Path(path).read_text())
    if not isinstance(payload, dict):
        raise ValueError(f"weights file {path} must contain a JSON object")
    weights: Dict[str, int] = {}
    for key, value in payload.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value != int(value):
            raise ValueError(f"weight for {key!r} must be a whole number, got {value!r}")
        weights[str(key)] = int(value)
    return weights
