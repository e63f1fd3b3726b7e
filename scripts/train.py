"""Training script for Ten-Second City placement agents using MaskablePPO.

This script initializes the CityEnv environment, trains a MaskablePPO
agent with checkpoints and evaluation, and compares the trained agent's
mean final score with the greedy baseline.

Usage:
    python scripts/train.py --total-timesteps 200000 --n-envs 4
"""

import os
import sys
import argparse
from datetime import datetime

# Add project root to sys.path to allow importing from rl module
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import torch
from sb3_contrib.common.maskable.callbacks import MaskableEvalCallback
from sb3_contrib.common.maskable.utils import get_action_masks
from sb3_contrib.ppo_mask import MaskablePPO
from stable_baselines3.common.callbacks import CheckpointCallback
from stable_baselines3.common.monitor import Monitor
from stable_baselines3.common.vec_env import DummyVecEnv, SubprocVecEnv

from engine.driver import GreedyPlacer
from rl.action_space import ActionMapping
from rl.city_env import CityEnv


def make_env(rank: int):
    """Create a factory for a monitored CityEnv."""
    def _init():
        env = CityEnv()
        env.reset(seed=rank)
        return Monitor(env)
    return _init


def run_episodes(env: CityEnv, choose_action, n_episodes: int) -> list[int]:
    """Play episodes with a policy function and collect final scores."""
    scores = []
    for _ in range(n_episodes):
        obs, info = env.reset()
        terminated = False
        while not terminated:
            action = choose_action(env, obs)
            obs, reward, terminated, truncated, info = env.step(action)
        scores.append(info["final_score"])
    return scores


def train(args):
    """Run training for the placement agent."""

    os.makedirs("logs", exist_ok=True)
    run_name = f"ppo_city_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    log_dir = os.path.join("logs", run_name)
    os.makedirs(log_dir, exist_ok=True)

    env_factories = [make_env(i) for i in range(args.n_envs)]
    if args.n_envs > 1:
        env = SubprocVecEnv(env_factories)
        print(f"Using SubprocVecEnv ({args.n_envs} parallel envs)")
    else:
        env = DummyVecEnv(env_factories)

    eval_env = DummyVecEnv([make_env(10_000)])

    callbacks = [
        CheckpointCallback(
            save_freq=max(args.save_freq // args.n_envs, 1),
            save_path=os.path.join(log_dir, "checkpoints"),
            name_prefix="city_model",
        ),
        MaskableEvalCallback(
            eval_env,
            best_model_save_path=os.path.join(log_dir, "best_model"),
            log_path=log_dir,
            eval_freq=max(args.eval_freq // args.n_envs, 1),
            n_eval_episodes=args.n_eval_episodes,
            deterministic=True,
            render=False,
        ),
    ]

    device = args.device
    if device == "auto":
        device = "cuda" if torch.cuda.is_available() else "cpu"

    model = MaskablePPO(
        "MlpPolicy",
        env,
        verbose=1,
        learning_rate=args.lr,
        n_steps=args.n_steps,
        batch_size=args.batch_size,
        gamma=args.gamma,
        ent_coef=args.ent_coef,
        tensorboard_log=os.path.join(log_dir, "tb"),
        device=device,
        seed=args.seed,
    )

    print(f"Training for {args.total_timesteps} timesteps, logs in {log_dir}")
    model.learn(total_timesteps=args.total_timesteps, callback=callbacks)
    model.save(os.path.join(log_dir, "final_model"))

    # Compare with the greedy baseline
    comparison_env = CityEnv()
    mapping = ActionMapping()
    greedy = GreedyPlacer()

    def agent_action(env, obs):
        masks = get_action_masks(env)
        action, _ = model.predict(obs, action_masks=masks, deterministic=True)
        return int(action)

    def greedy_action(env, obs):
        building_type, cell = greedy.choose(env.engine.snapshot())
        return mapping.action_to_index(building_type, cell)

    agent_scores = run_episodes(comparison_env, agent_action, args.n_compare_episodes)
    greedy_scores = run_episodes(comparison_env, greedy_action, args.n_compare_episodes)

    print(f"Agent mean final score:  {np.mean(agent_scores):.2f}")
    print(f"Greedy mean final score: {np.mean(greedy_scores):.2f}")

    env.close()
    eval_env.close()
    comparison_env.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Train a Ten-Second City placement agent")

    parser.add_argument("--total-timesteps", type=int, default=200_000,
                        help="Total training timesteps")
    parser.add_argument("--n-envs", type=int, default=1,
                        help="Number of parallel environments")
    parser.add_argument("--lr", type=float, default=3e-4,
                        help="Learning rate")
    parser.add_argument("--n-steps", type=int, default=512,
                        help="Rollout length per environment")
    parser.add_argument("--batch-size", type=int, default=64,
                        help="Minibatch size")
    parser.add_argument("--gamma", type=float, default=1.0,
                        help="Discount factor (episodes are short)")
    parser.add_argument("--ent-coef", type=float, default=0.01,
                        help="Entropy coefficient")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed")

    parser.add_argument("--save-freq", type=int, default=50_000,
                        help="Save frequency")
    parser.add_argument("--eval-freq", type=int, default=10_000,
                        help="Eval frequency")
    parser.add_argument("--n-eval-episodes", type=int, default=5,
                        help="Number of eval episodes")
    parser.add_argument("--n-compare-episodes", type=int, default=20,
                        help="Episodes for the greedy baseline comparison")
    parser.add_argument("--device", type=str, default="auto",
                        help="torch device")

    args = parser.parse_args()
    train(args)
