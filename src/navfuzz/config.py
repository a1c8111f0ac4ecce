"""
Configuration for fuzzing sessions and logging.

Values come from keyword arguments first, then NAVFUZZ_* environment
variables, then the defaults below.
"""

import os
from dataclasses import dataclass, asdict, fields
from typing import Dict, Optional, Any, Mapping


# Reference rates. They shape coverage and crash discovery, so reports
# always record the values a session ran with.
DEFAULT_CRASH_RATE = 0.01
DEFAULT_BACKTRACK_RATE = 0.5

ENV_PREFIX = "NAVFUZZ_"


@dataclass(frozen=True)
class FuzzingConfig:
    """Configuration for a fuzzing session."""
    max_depth: int = 10
    max_iterations: int = 1000

    # Seed for reproducibility; generated per session when None
    seed: Optional[int] = None

    crash_rate: float = DEFAULT_CRASH_RATE  # SimulatedExecutor only
    backtrack_rate: float = DEFAULT_BACKTRACK_RATE

    # Simulated navigation latency bounds, in seconds
    min_latency: float = 1e-5
    max_latency: float = 1e-4

    parallel_walks: int = 1

    def __post_init__(self):
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {self.max_iterations}")
        if self.seed is not None:
            # Seeds wrap to the 64-bit generator state
            object.__setattr__(self, "seed", self.seed % 2 ** 64)
        for name in ("crash_rate", "backtrack_rate"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.min_latency < 0 or self.max_latency < self.min_latency:
            raise ValueError(
                f"latency bounds must satisfy 0 <= min <= max, got "
                f"({self.min_latency}, {self.max_latency})"
            )
        if self.parallel_walks < 1:
            raise ValueError(f"parallel_walks must be >= 1, got {self.parallel_walks}")

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    format: str = "console"  # "console" or "json"

    def __post_init__(self):
        if self.format not in ("console", "json"):
            raise ValueError(f"log format must be 'console' or 'json', got {self.format!r}")


_CASTS = {int: int, float: float, str: str}


def _from_env(cls, env: Mapping[str, str], prefix: str, overrides: Dict[str, Any]) -> Any:
    values: Dict[str, Any] = {}
    for f in fields(cls):
        if overrides.get(f.name) is not None:
            values[f.name] = overrides[f.name]
            continue
        var = f"{prefix}{f.name.upper()}"
        raw = env.get(var)
        if raw is None or raw.strip() == "":
            continue
        # Optional[int] only appears for the seed
        cast = int if f.name == "seed" else _CASTS.get(f.type, str)
        try:
            values[f.name] = cast(raw.strip())
        except ValueError:
            raise ValueError(f"Invalid value for {var}: {raw!r}") from None
    return cls(**values)


def load_fuzzing_config(env: Optional[Mapping[str, str]] = None, **overrides) -> FuzzingConfig:
    """Build a FuzzingConfig from NAVFUZZ_* variables and explicit overrides."""
    env = os.environ if env is None else env
    return _from_env(FuzzingConfig, env, ENV_PREFIX, overrides)


def load_logging_config(env: Optional[Mapping[str, str]] = None, **overrides) -> LoggingConfig:
    """Build a LoggingConfig from NAVFUZZ_LOG_* variables and explicit overrides."""
    env = os.environ if env is None else env
    return _from_env(LoggingConfig, env, f"{ENV_PREFIX}LOG_", overrides)
