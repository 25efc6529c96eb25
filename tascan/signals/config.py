"""
Weight configuration for signal scoring.

WeightConfig maps each scoring indicator to a non-negative multiplier.
It is passed explicitly to the scorer; indicator math never reads it.
Config validation runs at construction time (fail fast with clear errors).
"""
from dataclasses import dataclass, asdict
from typing import Dict, Mapping, Optional


INDICATOR_KEYS = ('sma', 'rsi', 'macd', 'stoch', 'qqe')


@dataclass(frozen=True)
class WeightConfig:
    """Per-indicator weights. Unset indicators weigh 1.0."""
    sma: float = 1.0
    rsi: float = 1.0
    macd: float = 1.0
    stoch: float = 1.0
    qqe: float = 1.0

    def __post_init__(self):
        for key in INDICATOR_KEYS:
            value = getattr(self, key)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError(f"Weight '{key}' must be a number, got {value!r}")
            if value < 0:
                raise ValueError(f"Weight '{key}' must be >= 0, got {value}")

    @classmethod
    def from_dict(cls, weights: Optional[Mapping[str, float]]) -> "WeightConfig":
        """
        Build from a mapping; missing keys keep their default.

        Raises:
            ValueError: On unknown keys or invalid values
        """
        if not weights:
            return cls()
        unknown = set(weights) - set(INDICATOR_KEYS)
        if unknown:
            raise ValueError(
                f"Unknown weight keys: {sorted(unknown)}. Valid keys: {list(INDICATOR_KEYS)}"
            )
        return cls(**{k: float(v) for k, v in weights.items()})

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def with_weight(self, key: str, value: float) -> "WeightConfig":
        """Copy with one weight replaced."""
        if key not in INDICATOR_KEYS:
            raise ValueError(f"Unknown weight key '{key}'. Valid keys: {list(INDICATOR_KEYS)}")
        values = self.to_dict()
        values[key] = float(value)
        return WeightConfig(**values)


BALANCED_WEIGHTS = WeightConfig()

BUILTIN_PROFILES: Dict[str, WeightConfig] = {
    "Conservative": WeightConfig(sma=1.2, rsi=0.8, macd=0.6, stoch=0.4),
    "Balanced": BALANCED_WEIGHTS,
    "Aggressive": WeightConfig(sma=0.8, rsi=1.2, macd=1.4, stoch=1.2),
}


def get_profile(name: str, profiles: Optional[Mapping[str, WeightConfig]] = None) -> WeightConfig:
    """Look up a named profile (built-in profiles when none are given)."""
    profiles = BUILTIN_PROFILES if profiles is None else profiles
    if name not in profiles:
        raise ValueError(f"Unknown weight profile '{name}'. Available: {list(profiles)}")
    return profiles[name]
