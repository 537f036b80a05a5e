from __future__ import annotations
import os
from dataclasses import asdict, dataclass, replace
from datetime import tzinfo
from pathlib import Path
from typing import Any, Dict, Optional

from ..timeparse import DEFAULT_TZ, resolve_tz

DEFAULT_LATERAL_THRESHOLD_M = 1_000.0
DEFAULT_RANGE_THRESHOLD_KM = 100.0
DEFAULT_FORWARD_PROGRESS_RATIO = 0.6
DEFAULT_ROUTES_API_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"

def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name, str(default)).strip().lower()
    return v in ("1", "true", "yes", "y", "on")

def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except Exception:
        return float(default)

def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    return v.strip()


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class PlannerConfig:
    """Everything the selection core needs, passed in explicitly."""
    lateral_threshold_m: float = DEFAULT_LATERAL_THRESHOLD_M
    range_threshold_km: float = DEFAULT_RANGE_THRESHOLD_KM
    forward_progress_ratio: float = DEFAULT_FORWARD_PROGRESS_RATIO
    tz_name: str = DEFAULT_TZ

    @property
    def tz(self) -> tzinfo:
        return resolve_tz(self.tz_name)

    def with_overrides(self, **overrides: Any) -> "PlannerConfig":
        values = {k: v for k, v in overrides.items() if v is not None}
        if not values:
            return self
        return replace(self, **values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RoutesConfig:
    api_key: Optional[str]
    base_url: str = DEFAULT_ROUTES_API_URL
    timeout_sec: float = 30.0

    def require_key(self) -> str:
        if not self.api_key:
            raise ConfigError("GOOGLE_MAPS_API_KEY is not set")
        return self.api_key


def load_planner_config() -> PlannerConfig:
    return PlannerConfig(
        lateral_threshold_m=_env_float("LATERAL_THRESHOLD_M", DEFAULT_LATERAL_THRESHOLD_M),
        range_threshold_km=_env_float("RANGE_THRESHOLD_KM", DEFAULT_RANGE_THRESHOLD_KM),
        forward_progress_ratio=_env_float("FORWARD_PROGRESS_RATIO", DEFAULT_FORWARD_PROGRESS_RATIO),
        tz_name=_env_str("PLANNER_TZ", DEFAULT_TZ) or DEFAULT_TZ,
    )

def load_routes_config() -> RoutesConfig:
    return RoutesConfig(
        api_key=_env_str("GOOGLE_MAPS_API_KEY"),
        base_url=_env_str("ROUTES_API_URL", DEFAULT_ROUTES_API_URL) or DEFAULT_ROUTES_API_URL,
        timeout_sec=_env_float("ROUTES_TIMEOUT_SEC", 30.0),
    )

def fleet_source() -> str:
    """
    Where the fleet CSVs live: FLEET_DATA_URL (http base) wins over
    FLEET_DATA_DIR (local directory, default ./data).
    """
    url = _env_str("FLEET_DATA_URL")
    if url:
        return url
    return str(Path(_env_str("FLEET_DATA_DIR", "./data") or "./data").expanduser().resolve())

def debug_api() -> bool:
    return _env_bool("DEBUG_API", True)
