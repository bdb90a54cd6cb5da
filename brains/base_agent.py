"""
Base agent interface for the survival simulator.

All agents must implement this interface to be driven by the GameRunner.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from survival.entities.merchant import TradeOffer
    from survival.environment import StepInfo
    from survival.mechanics.trading import TradeResult

    from .brain.strategies import MoveDecision


class TradeAction(Enum):
    ACCEPT = "accept"
    COUNTER = "counter"
    WALK_AWAY = "walk_away"


@dataclass(frozen=True)
class TradeDecision:
    """What an agent does with a standing offer (``gold`` only for COUNTER)."""

    action: TradeAction
    gold: Optional[int] = None

    @classmethod
    def accept(cls) -> TradeDecision:
        return cls(TradeAction.ACCEPT)

    @classmethod
    def counter(cls, gold: int) -> TradeDecision:
        return cls(TradeAction.COUNTER, gold)

    @classmethod
    def walk_away(cls) -> TradeDecision:
        return cls(TradeAction.WALK_AWAY)

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action.value, "gold": self.gold}


class BaseAgent(ABC):
    """
    Abstract base class for all agents.

    Agents observe the per-turn snapshot and return one move. When the
    move lands on a merchant, the runner asks ``decide_trade`` what to do
    until the negotiation closes.

    Subclasses must implement:
    - get_action(): Produce the move for this turn

    Attributes:
        name: Agent name for logging/identification
    """

    def __init__(self, name: str | None = None):
        self.name = name or self.__class__.__name__

    @abstractmethod
    def get_action(
        self,
        state: Dict[str, Any],
        step_info: Optional["StepInfo"] = None,
        **kwargs: Any,
    ) -> tuple[Optional["MoveDecision"], Dict[str, Any]]:
        """
        Decide this turn's move.

        State structure:
            {
                "snapshot": GameSnapshot,  # read-only view for this turn
            }

        Args:
            state: Current state from the environment
            step_info: Resolution info from the previous step (None on turn 1)
            **kwargs: Reserved for runner injections

        Returns:
            Tuple of:
                - MoveDecision, or None when no legal move exists
                - Metadata dict (reasoning/logs/etc.)
        """

    def decide_trade(
        self,
        offer: "TradeOffer",
        gold: int,
        attempt: int,
        last_result: Optional["TradeResult"] = None,
    ) -> TradeDecision:
        """
        React to a merchant's standing offer.

        Default: pay the asking price when affordable, otherwise leave.

        Args:
            offer: Current standing offer
            gold: Player's gold
            attempt: Number of exchanges already made with this merchant
            last_result: Result of the previous exchange, if any
        """
        if gold >= offer.asking_price:
            return TradeDecision.accept()
        return TradeDecision.walk_away()

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"
