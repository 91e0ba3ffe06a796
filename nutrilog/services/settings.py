from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from nutrilog.services.goal_service import default_goals_from_config
from nutrilog.services.streak_service import DEFAULT_MAX_LOOKBACK


@dataclass(frozen=True)
class EngineSettings:
    """Engine knobs taken from Flask config; engine code never reads config itself."""

    timezone: str = "UTC"
    streak_max_lookback: Optional[int] = DEFAULT_MAX_LOOKBACK
    water_min_interval_ms: int = 500
    default_goals: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "EngineSettings":
        lookback = config.get("STREAK_MAX_LOOKBACK_DAYS", DEFAULT_MAX_LOOKBACK)
        if lookback is not None and int(lookback) < 0:
            lookback = None
        return cls(
            timezone=config.get("NUTRILOG_TIMEZONE") or "UTC",
            streak_max_lookback=int(lookback) if lookback is not None else None,
            water_min_interval_ms=int(config.get("WATER_SET_MIN_INTERVAL_MS", 500)),
            default_goals=default_goals_from_config(config),
        )
