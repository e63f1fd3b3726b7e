"""Tests for rl/city_env.py - Gymnasium environment for the timed round."""

import numpy as np
import pytest

from core.constants import BuildingType, Phase, NUM_CELLS
from engine.config import RoundConfig
from rl.action_space import ActionMapping
from rl.city_env import CityEnv, make_city_env
from rl.config import DEFAULT_OBS_CONFIG, DEFAULT_ACTION_CONFIG, EnvConfig


@pytest.fixture
def env():
    """Create a CityEnv instance."""
    env = CityEnv(render_mode="ansi")
    yield env
    env.close()


@pytest.fixture
def reset_env(env):
    """Create and reset a CityEnv instance."""
    env.reset(seed=0)
    return env


@pytest.fixture
def mapping():
    return ActionMapping()


class TestCityEnvInit:
    """Tests for CityEnv initialization."""

    def test_observation_space_shape(self, env):
        assert env.observation_space.shape == (DEFAULT_OBS_CONFIG.total_observation_dim,)

    def test_observation_space_bounds(self, env):
        assert env.observation_space.low[0] == 0.0
        assert env.observation_space.high[0] == 1.0

    def test_action_space_size(self, env):
        assert env.action_space.n == DEFAULT_ACTION_CONFIG.total_actions

    def test_engine_requires_reset(self, env):
        with pytest.raises(RuntimeError):
            env.engine

    def test_make_city_env_factory(self):
        env = make_city_env(render_mode="ansi")
        assert isinstance(env, CityEnv)
        assert env.render_mode == "ansi"


class TestCityEnvReset:
    """Tests for reset."""

    def test_reset_returns_observation(self, env):
        obs, info = env.reset()
        assert isinstance(obs, np.ndarray)
        assert obs.shape == env.observation_space.shape
        assert env.observation_space.contains(obs)

    def test_reset_starts_running(self, env):
        _, info = env.reset()
        assert env.engine.phase == Phase.RUNNING
        assert info["phase"] == "running"
        assert info["remaining_seconds"] == 10
        assert info["step_count"] == 0

    def test_reset_clears_board(self, reset_env, mapping):
        reset_env.step(mapping.action_to_index(BuildingType.HOUSE, 0))
        reset_env.reset()
        assert reset_env.engine.board == (None,) * NUM_CELLS


class TestCityEnvStep:
    """Tests for step."""

    def test_reward_is_score_delta(self, reset_env, mapping):
        _, reward, terminated, truncated, info = reset_env.step(
            mapping.action_to_index(BuildingType.PARK, 4)
        )
        assert reward == 5.0
        assert not terminated
        assert not truncated
        assert info["placed"]

    def test_think_time_passes(self, reset_env, mapping):
        _, _, _, _, info = reset_env.step(mapping.action_to_index(BuildingType.HOUSE, 0))
        assert info["remaining_seconds"] == 9

    def test_occupied_cell_is_noop(self, reset_env, mapping):
        reset_env.step(mapping.action_to_index(BuildingType.HOUSE, 0))
        _, reward, _, _, info = reset_env.step(mapping.action_to_index(BuildingType.PARK, 0))
        assert reward == 0.0
        assert not info["placed"]
        assert reset_env.engine.board[0] == BuildingType.HOUSE

    def test_mask_tracks_board(self, reset_env, mapping):
        reset_env.step(mapping.action_to_index(BuildingType.HOUSE, 0))
        mask = reset_env.action_masks()
        assert not mask[mapping.action_to_index(BuildingType.OFFICE, 0)]
        assert mask[mapping.action_to_index(BuildingType.OFFICE, 1)]

    def test_invalid_action_index(self, reset_env):
        with pytest.raises(ValueError):
            reset_env.step(DEFAULT_ACTION_CONFIG.total_actions)

    def test_full_board_terminates(self, reset_env, mapping):
        """Filling every cell runs the clock out and returns the final score."""
        total = 0.0
        terminated = False
        for cell in range(NUM_CELLS):
            assert not terminated
            _, reward, terminated, _, info = reset_env.step(
                mapping.action_to_index(BuildingType.HOUSE, cell)
            )
            total += reward

        assert terminated
        assert info["final_score"] == 81
        assert total == 81.0
        assert reset_env.engine.phase == Phase.FINISHED

    def test_timeout_terminates(self, mapping):
        config = EnvConfig(round_config=RoundConfig(duration_sec=2), think_time_ms=1000)
        env = CityEnv(env_config=config)
        env.reset()
        _, _, terminated, _, _ = env.step(mapping.action_to_index(BuildingType.PARK, 0))
        assert not terminated
        _, _, terminated, _, info = env.step(mapping.action_to_index(BuildingType.PARK, 1))
        assert terminated
        assert info["final_score"] == 5 + 5 + 2 + 2
        env.close()

    def test_step_after_end_raises(self, mapping):
        env = CityEnv(env_config=EnvConfig(round_config=RoundConfig(duration_sec=1)))
        env.reset()
        env.step(0)
        with pytest.raises(RuntimeError):
            env.step(1)
        env.close()

    def test_random_episode_return_equals_final_score(self, env):
        """Episode return always equals the round's final score."""
        rng = np.random.default_rng(5)
        for _ in range(5):
            env.reset()
            total = 0.0
            terminated = False
            while not terminated:
                valid = np.flatnonzero(env.action_masks())
                _, reward, terminated, _, info = env.step(int(rng.choice(valid)))
                total += reward
            assert total == float(info["final_score"])


class TestCityEnvRender:
    """Tests for ansi rendering."""

    def test_render_ansi(self, reset_env, mapping):
        reset_env.step(mapping.action_to_index(BuildingType.HOUSE, 0))
        text = reset_env.render()
        assert text.startswith("Time left: 9s")
        assert len(text.splitlines()) == 4

    def test_render_disabled(self):
        env = CityEnv()
        env.reset()
        assert env.render() is None
        env.close()
