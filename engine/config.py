"""Round timing configuration.

Defaults come from core.constants. RoundConfig.from_env() lets a
deployment override them through environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from core.constants import (
    ROUND_DURATION_SEC,
    COUNTDOWN_INTERVAL_MS,
    REVEAL_INTERVAL_MS,
    REVEAL_STEPS,
    REVEAL_FINISH_DELAY_MS,
)


@dataclass(frozen=True)
class RoundConfig:
    """Timing of a single round.

    Attributes:
        duration_sec: Countdown length; every start resets to this.
        countdown_interval_ms: Time between countdown ticks.
        reveal_interval_ms: Time between score reveal increments.
        reveal_steps: Approximate number of reveal increments.
        finish_delay_ms: Hold on the final value before finishing.
    """

    duration_sec: int = ROUND_DURATION_SEC
    countdown_interval_ms: int = COUNTDOWN_INTERVAL_MS
    reveal_interval_ms: int = REVEAL_INTERVAL_MS
    reveal_steps: int = REVEAL_STEPS
    finish_delay_ms: int = REVEAL_FINISH_DELAY_MS

    def __post_init__(self):
        if self.duration_sec < 1:
            raise ValueError(f"duration_sec must be at least 1, got {self.duration_sec}")
        if self.countdown_interval_ms <= 0:
            raise ValueError(
                f"countdown_interval_ms must be positive, got {self.countdown_interval_ms}"
            )
        if self.reveal_interval_ms <= 0:
            raise ValueError(f"reveal_interval_ms must be positive, got {self.reveal_interval_ms}")
        if self.reveal_steps < 1:
            raise ValueError(f"reveal_steps must be at least 1, got {self.reveal_steps}")
        if self.finish_delay_ms < 0:
            raise ValueError(f"finish_delay_ms must be non-negative, got {self.finish_delay_ms}")

    @classmethod
    def from_env(cls) -> RoundConfig:
        """Build a config with environment variable overrides."""
        return cls(
            duration_sec=int(os.environ.get("CITY_ROUND_DURATION_SEC", ROUND_DURATION_SEC)),
            reveal_interval_ms=int(os.environ.get("CITY_REVEAL_INTERVAL_MS", REVEAL_INTERVAL_MS)),
            reveal_steps=int(os.environ.get("CITY_REVEAL_STEPS", REVEAL_STEPS)),
            finish_delay_ms=int(os.environ.get("CITY_FINISH_DELAY_MS", REVEAL_FINISH_DELAY_MS)),
        )


DEFAULT_ROUND_CONFIG = RoundConfig()
