"""
RandomAgent - Baseline that wanders with uniformly random legal steps.

Used as a yardstick for the personality brains and as a cheap driver in
runner tests. It trades with the BaseAgent default (pay if affordable).
"""

import random
from typing import TYPE_CHECKING, Any, Dict, Optional

from survival.core.snapshot import GameSnapshot

from ..base_agent import BaseAgent
from ..brain.strategies import MoveDecision, possible_moves
from ..registry import register_agent

if TYPE_CHECKING:
    from survival.environment import StepInfo


@register_agent("random")
class RandomAgent(BaseAgent):
    """Picks one of the walkable neighbours at random every turn."""

    def __init__(self, name: Optional[str] = None, seed: Optional[int] = None, **_: Any):
        """
        Args:
            name: Display name (default: class name)
            seed: Seed for the move RNG; None draws from system entropy
        """
        super().__init__(name)
        self.seed = seed
        self.rng = random.Random(seed)

    def get_action(
        self,
        state: Dict[str, Any],
        step_info: Optional["StepInfo"] = None,
        **kwargs: Any,
    ) -> tuple[Optional[MoveDecision], Dict[str, Any]]:
        snapshot: GameSnapshot = state["snapshot"]
        options = possible_moves(snapshot)
        if not options:
            return None, {"policy": "random", "options": 0}

        step = self.rng.choice(options)
        return (
            MoveDecision(dx=step.dx, dy=step.dy, reason="RANDOM: Random move"),
            {"policy": "random", "options": len(options), "injections": dict(kwargs)},
        )
