"""
Dispatch Desk configuration.

All tunables live in one dataclass so the desk, the simulation timers and the
API read the same values. Defaults match the dashboard the desk replaces;
every field can be overridden from a ``DISPATCH_DESK_*`` environment variable.
"""

import os
from dataclasses import dataclass, field
from typing import Tuple


ENV_PREFIX = "DISPATCH_DESK_"

DEFAULT_RANKS: Tuple[str, ...] = (
    "Private",
    "Lance Corporal",
    "Sergeant",
    "Senior Sergeant",
    "Warrant Officer",
    "Lieutenant",
    "Captain",
    "Major",
    "Colonel",
    "General",
)


def _env_int(name: str, default: int) -> int:
    """Read an int env var; missing, empty or malformed values give ``default``."""
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (ValueError, TypeError):
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except (ValueError, TypeError):
        return default


def _env_bool(name: str, default: bool) -> bool:
    """Accepts 1/true/yes/on as True."""
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    return raw.lower().strip() in ("1", "true", "yes", "on")


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    """Comma separated list; blank items are dropped."""
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


@dataclass
class DeskConfig:
    """Tunables for the dispatch desk."""
    # Seed data
    seed_zone_count: int = 425
    seed_guarded_ratio: float = 0.68

    # Simulation timers
    alarm_interval_sec: float = 600.0   # 10 minutes
    drain_interval_sec: float = 30.0
    drain_step: int = 5
    simulation_enabled: bool = True

    # Operator actions
    discharge_step: int = 20

    # Derived views
    low_battery_threshold: int = 20

    # Staff & statuses
    ranks: Tuple[str, ...] = field(default_factory=lambda: DEFAULT_RANKS)
    default_status_color: str = "#3b82f6"

    @classmethod
    def from_env(cls) -> "DeskConfig":
        """Build a config from ``DISPATCH_DESK_*`` environment variables."""
        defaults = cls()
        return cls(
            seed_zone_count=_env_int("SEED_ZONE_COUNT", defaults.seed_zone_count),
            seed_guarded_ratio=_env_float("SEED_GUARDED_RATIO", defaults.seed_guarded_ratio),
            alarm_interval_sec=_env_float("ALARM_INTERVAL_SEC", defaults.alarm_interval_sec),
            drain_interval_sec=_env_float("DRAIN_INTERVAL_SEC", defaults.drain_interval_sec),
            drain_step=_env_int("DRAIN_STEP", defaults.drain_step),
            simulation_enabled=_env_bool("SIMULATION_ENABLED", defaults.simulation_enabled),
            discharge_step=_env_int("DISCHARGE_STEP", defaults.discharge_step),
            low_battery_threshold=_env_int("LOW_BATTERY_THRESHOLD", defaults.low_battery_threshold),
            ranks=_env_list("RANKS", defaults.ranks),
            default_status_color=os.getenv(
                ENV_PREFIX + "DEFAULT_STATUS_COLOR", defaults.default_status_color
            ),
        )
