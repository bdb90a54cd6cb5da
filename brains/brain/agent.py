"""
BrainAgent - Runs a personality Brain inside the GameRunner.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any, Dict, Optional

from survival.core.snapshot import GameSnapshot
from survival.core.types import StartingResources, TradeItem

from ..base_agent import BaseAgent, TradeDecision
from ..registry import register_agent
from .brain import Brain
from .strategies import MoveDecision, Personality

if TYPE_CHECKING:
    from survival.entities.merchant import TradeOffer
    from survival.environment import StepInfo
    from survival.mechanics.trading import TradeResult

HAGGLE_DISCOUNT = 1


@register_agent("brain")
class BrainAgent(BaseAgent):
    """
    Agent driven by a personality Brain.

    Trading: one haggle at ``asking - 1`` for goods the agent can use, then
    pay the asking price if affordable; otherwise walk away.
    """

    def __init__(
        self,
        name: str | None = None,
        personality: Personality | str = Personality.COLLECTOR,
        seed: Optional[int] = None,
        starting_food: Optional[int] = None,
        starting_water: Optional[int] = None,
        **_: Any,
    ):
        """
        Args:
            name: Agent name (default: "BrainAgent")
            personality: Personality enum, value or legacy alias
            seed: Seed for the brain's tie-breaking RNG (None = random)
            starting_food, starting_water: Threshold base (None = infer
                from the map size)
        """
        super().__init__(name)
        starting = None
        if starting_food is not None and starting_water is not None:
            starting = StartingResources(food=starting_food, water=starting_water)
        self.brain = Brain(personality, rng=random.Random(seed), starting=starting)
        self._last_snapshot: Optional[GameSnapshot] = None

    @property
    def personality(self) -> Personality:
        return self.brain.personality

    def get_action(
        self,
        state: Dict[str, Any],
        step_info: Optional["StepInfo"] = None,
        **kwargs: Any,
    ) -> tuple[Optional[MoveDecision], Dict[str, Any]]:
        snapshot: GameSnapshot = state["snapshot"]
        self._last_snapshot = snapshot
        decision = self.brain.calculate_best_move(snapshot)
        metadata = {
            "policy": "brain",
            "personality": self.personality.value,
            "reason": decision.reason if decision else "no legal move",
            "visited": len(self.brain.visited),
        }
        return decision, metadata

    def decide_trade(
        self,
        offer: "TradeOffer",
        gold: int,
        attempt: int,
        last_result: Optional["TradeResult"] = None,
    ) -> TradeDecision:
        if not self._wants(offer):
            return TradeDecision.walk_away()
        if attempt == 0 and offer.asking_price > HAGGLE_DISCOUNT:
            bid = offer.asking_price - HAGGLE_DISCOUNT
            if bid <= gold:
                return TradeDecision.counter(bid)
        if gold >= offer.asking_price:
            return TradeDecision.accept()
        return TradeDecision.walk_away()

    def _wants(self, offer: "TradeOffer") -> bool:
        if offer.item == TradeItem.LIFE:
            return True
        snapshot = self._last_snapshot
        if snapshot is None:
            return True
        if offer.item == TradeItem.FOOD:
            return snapshot.food <= snapshot.water
        return snapshot.water <= snapshot.food
