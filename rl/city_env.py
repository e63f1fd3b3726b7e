"""Gymnasium environment for the Ten-Second City puzzle.

Provides a single-agent interface for RL training with:
- A real RoundEngine running on a VirtualScheduler
- Each step selects and places one building, then lets virtual time pass
- Dense reward: the change in board score, so the episode return
  equals the round's final score
- Action masking compatible with MaskablePPO from sb3-contrib
"""

from __future__ import annotations

from typing import Optional, Any, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from core.board import Board
from core.constants import Phase
from core.rules import RuleSet
from data.loader import load_default_rules
from engine.driver import RoundRenderer
from engine.round_engine import RoundEngine
from engine.scheduler import VirtualScheduler
from engine.scoring import score

from .config import (
    ObservationConfig,
    ActionSpaceConfig,
    EnvConfig,
    DEFAULT_OBS_CONFIG,
    DEFAULT_ACTION_CONFIG,
    DEFAULT_ENV_CONFIG,
)
from .observation import ObservationEncoder
from .action_space import ActionMapping
from .action_masking import ActionMaskGenerator


class CityEnv(gym.Env):
    """Gymnasium environment for one timed round.

    The episode ends when the round reaches FINISHED: either the countdown
    ran out or the board filled up and the clock was run out.

    Compatible with stable-baselines3's MaskablePPO via the action_masks() method.
    """

    metadata = {"render_modes": ["ansi"], "render_fps": 1}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        rules: Optional[RuleSet] = None,
        env_config: EnvConfig = DEFAULT_ENV_CONFIG,
        obs_config: ObservationConfig = DEFAULT_OBS_CONFIG,
        action_config: ActionSpaceConfig = DEFAULT_ACTION_CONFIG,
    ):
        """Initialize the environment.

        Args:
            render_mode: Rendering mode ("ansi" or None).
            rules: Scoring rules. Defaults to the bundled rules.
            env_config: Round and think-time configuration.
            obs_config: Observation encoding configuration.
            action_config: Action space configuration.
        """
        super().__init__()

        self.render_mode = render_mode
        self._rules = rules if rules is not None else load_default_rules()
        self._env_config = env_config

        self._obs_encoder = ObservationEncoder(
            obs_config, duration_sec=env_config.round_config.duration_sec
        )
        self._action_mapping = ActionMapping(action_config)
        self._mask_generator = ActionMaskGenerator(action_config)
        self._renderer = RoundRenderer(self._rules)

        self._scheduler: Optional[VirtualScheduler] = None
        self._engine: Optional[RoundEngine] = None
        self._step_count = 0

        self.observation_space = spaces.Box(
            low=0.0,
            high=1.0,
            shape=(obs_config.total_observation_dim,),
            dtype=np.float32,
        )
        self.action_space = spaces.Discrete(action_config.total_actions)

    @property
    def engine(self) -> RoundEngine:
        if self._engine is None:
            raise RuntimeError("Environment not initialized. Call reset() first.")
        return self._engine

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[dict] = None,
    ) -> Tuple[np.ndarray, dict]:
        """Start a fresh round.

        Returns:
            Tuple of (observation, info).
        """
        super().reset(seed=seed)

        if self._engine is not None:
            self._engine.close()

        self._scheduler = VirtualScheduler()
        self._engine = RoundEngine(
            self._scheduler, self._env_config.round_config, self._rules
        )
        self._engine.start()
        self._step_count = 0

        return self._get_observation(), self._get_info()

    def step(self, action: int) -> Tuple[np.ndarray, SupportsFloat, bool, bool, dict]:
        """Place one building and let the think time elapse.

        Args:
            action: Flat action index (0 to total_actions-1).

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        engine = self.engine
        if engine.phase != Phase.RUNNING:
            raise RuntimeError("Episode has ended. Call reset() first.")

        building_type, cell = self._action_mapping.index_to_action(int(action))
        before = score(Board(engine.board), self._rules)

        engine.select(building_type)
        placed = engine.place(cell)
        after = score(Board(engine.board), self._rules)
        self._step_count += 1

        self._scheduler.advance(self._env_config.think_time_ms)
        if engine.phase != Phase.RUNNING or Board(engine.board).is_full():
            self._run_out_clock()

        terminated = engine.phase == Phase.FINISHED
        info = self._get_info()
        info["placed"] = placed
        if terminated:
            info["final_score"] = engine.final_score

        return self._get_observation(), float(after - before), terminated, False, info

    def _run_out_clock(self) -> None:
        while self.engine.phase != Phase.FINISHED:
            self._scheduler.advance(self._env_config.drain_step_ms)

    def action_masks(self) -> np.ndarray:
        """Boolean mask of legal actions for MaskablePPO."""
        return self._mask_generator.generate_mask(self.engine.snapshot())

    def render(self) -> Optional[str]:
        if self.render_mode != "ansi" or self._engine is None:
            return None
        snapshot = self._engine.snapshot()
        return f"{self._renderer.format_status(snapshot)}\n{self._renderer.format_board(snapshot)}"

    def close(self) -> None:
        if self._engine is not None:
            self._engine.close()

    def _get_observation(self) -> np.ndarray:
        return self._obs_encoder.encode(self.engine.snapshot())

    def _get_info(self) -> dict[str, Any]:
        engine = self.engine
        return {
            "phase": engine.phase.value,
            "remaining_seconds": engine.remaining_seconds,
            "step_count": self._step_count,
        }


def make_city_env(**kwargs) -> CityEnv:
    """Factory function for creating CityEnv instances."""
    return CityEnv(**kwargs)
