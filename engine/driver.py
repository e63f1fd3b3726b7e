"""Headless real-time driver for the Ten-Second City puzzle.

This module plays one round on a real clock with an automated placer
and prints the round as it unfolds. It serves as a reference for how a
front end drives the round engine:
- RoundRenderer handles all display logic (can be swapped for a GUI)
- Placer decides what to place next (can be swapped for user input)
- RoundDriver forwards select/place intents and waits for the round to end

Usage:
    python -m engine.driver --policy greedy

Or from code:
    from engine.driver import RoundDriver, GreedyPlacer
    asyncio.run(RoundDriver(GreedyPlacer()).run())
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Optional

from core.board import Board, CellIndex
from core.constants import BuildingType, Phase, GRID_SIZE
from core.round_state import RoundSnapshot
from core.rules import RuleSet
from data.loader import load_default_rules

from .config import RoundConfig
from .round_engine import RoundEngine
from .scheduler import AsyncioScheduler
from .scoring import score

logger = logging.getLogger(__name__)

Placement = tuple[BuildingType, CellIndex]


# =============================================================================
# Placers
# =============================================================================


class Placer(ABC):
    """Chooses the next building and cell for a running round."""

    @abstractmethod
    def choose(self, snapshot: RoundSnapshot) -> Optional[Placement]:
        """Return (building_type, cell_index), or None to place nothing."""
        pass


class RandomPlacer(Placer):
    """Places a random building on a random empty cell."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def choose(self, snapshot: RoundSnapshot) -> Optional[Placement]:
        empty = [i for i, cell in enumerate(snapshot.board) if cell is None]
        if not empty:
            return None
        return self._rng.choice(list(BuildingType)), self._rng.choice(empty)


class GreedyPlacer(Placer):
    """Places whichever building and cell raises the board score the most.

    Ties go to the first candidate in (cell, building type) order.
    """

    def __init__(self, rules: Optional[RuleSet] = None):
        self._rules = rules if rules is not None else load_default_rules()

    def choose(self, snapshot: RoundSnapshot) -> Optional[Placement]:
        board = Board(snapshot.board)
        best: Optional[Placement] = None
        best_score: Optional[int] = None

        for index in board.empty_indices():
            for building_type in BuildingType:
                candidate = board.clone()
                candidate.place(index, building_type)
                value = score(candidate, self._rules)
                if best_score is None or value > best_score:
                    best, best_score = (building_type, index), value

        return best


# =============================================================================
# Rendering
# =============================================================================


class RoundRenderer:
    """Plain text renderer for round snapshots."""

    def __init__(self, rules: Optional[RuleSet] = None):
        self._rules = rules if rules is not None else load_default_rules()
        self._last_key: Optional[tuple] = None

    def format_board(self, snapshot: RoundSnapshot) -> str:
        """Format the board as a 3x3 grid of glyphs ('.' for empty)."""
        rows = []
        for r in range(GRID_SIZE):
            cells = snapshot.board[r * GRID_SIZE:(r + 1) * GRID_SIZE]
            rows.append(" ".join(self._rules.glyph(cell) or "." for cell in cells))
        return "\n".join(rows)

    def format_status(self, snapshot: RoundSnapshot) -> str:
        """One-line summary of the round."""
        if snapshot.phase == Phase.RUNNING:
            return f"Time left: {snapshot.remaining_seconds}s"
        if snapshot.phase == Phase.CALCULATING:
            return f"Calculating... {snapshot.display_score}"
        if snapshot.phase == Phase.FINISHED:
            return f"Final score: {snapshot.final_score}"
        return "Press start"

    def render(self, snapshot: RoundSnapshot) -> None:
        """Print the snapshot if anything visible changed."""
        key = (snapshot.phase, snapshot.board, snapshot.remaining_seconds, snapshot.display_score)
        if key == self._last_key:
            return
        self._last_key = key

        print(self.format_status(snapshot))
        if snapshot.phase in (Phase.RUNNING, Phase.FINISHED):
            print(self.format_board(snapshot))
            print()


# =============================================================================
# Driver
# =============================================================================


class RoundDriver:
    """Plays a single round in real time on the asyncio event loop."""

    def __init__(
        self,
        placer: Placer,
        config: Optional[RoundConfig] = None,
        renderer: Optional[RoundRenderer] = None,
        think_ms: int = 800,
    ):
        """Initialize the driver.

        Args:
            placer: Chooses each placement.
            config: Round timing. Defaults to RoundConfig.from_env().
            renderer: Output renderer. None disables output.
            think_ms: Delay between placements.
        """
        self._placer = placer
        self._config = config if config is not None else RoundConfig.from_env()
        self._renderer = renderer
        self._think_ms = think_ms

    async def run(self) -> int:
        """Play a round to completion.

        Returns:
            The round's final score.
        """
        engine = RoundEngine(AsyncioScheduler(), self._config)
        finished = asyncio.Event()

        def on_change(snapshot: RoundSnapshot) -> None:
            if self._renderer is not None:
                self._renderer.render(snapshot)
            if snapshot.phase == Phase.FINISHED:
                finished.set()

        engine.add_listener(on_change)
        try:
            engine.start()
            while engine.phase == Phase.RUNNING:
                await asyncio.sleep(self._think_ms / 1000.0)
                if engine.phase != Phase.RUNNING:
                    break
                choice = self._placer.choose(engine.snapshot())
                if choice is None:
                    continue
                building_type, index = choice
                engine.select(building_type)
                engine.place(index)
                logger.debug("Placed %s at %d", building_type.value, index)

            await finished.wait()
            return engine.final_score
        finally:
            engine.close()


def main() -> None:
    """Main entry point for the headless driver."""
    parser = argparse.ArgumentParser(description="Play one Ten-Second City round")
    parser.add_argument("--policy", choices=["greedy", "random"], default="greedy",
                        help="Placement policy")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random policy")
    parser.add_argument("--duration", type=int, default=None,
                        help="Round length in seconds (overrides CITY_ROUND_DURATION_SEC)")
    parser.add_argument("--think-ms", type=int, default=800, help="Delay between placements")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = RoundConfig.from_env()
    if args.duration is not None:
        config = replace(config, duration_sec=args.duration)

    placer: Placer = GreedyPlacer() if args.policy == "greedy" else RandomPlacer(args.seed)
    driver = RoundDriver(placer, config=config, renderer=RoundRenderer(), think_ms=args.think_ms)
    asyncio.run(driver.run())


if __name__ == "__main__":
    main()
