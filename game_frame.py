from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from brains.brain.strategies import MoveDecision
from survival.core.snapshot import GameSnapshot
from survival.environment import StepInfo
from survival.mechanics.trading import TradeResult


@dataclass
class Frame:
    """
    One played turn: what the agent saw, what it chose, and what happened.

    ``snapshot`` is the state the agent decided from; ``step_info`` is the
    resolution of that decision and ``trades`` lists every negotiation call
    the runner made on the agent's behalf afterwards.
    """

    snapshot: GameSnapshot
    decision: Optional[MoveDecision] = None
    action_metadata: Optional[Mapping[str, Any]] = None
    step_info: Optional[StepInfo] = None
    trades: List[TradeResult] = field(default_factory=list)
    done: bool = False

    @property
    def turn(self) -> int:
        return self.snapshot.turn

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-friendly view of the turn.

        Tiles are left out; the per-turn player counters are enough to
        replay an episode summary.
        """
        data: Dict[str, Any] = {
            "turn": self.turn,
            "player": self.snapshot.summary(),
            "done": self.done,
        }
        if self.decision is not None:
            data["decision"] = self.decision.to_dict()
        if self.action_metadata is not None:
            data["action_metadata"] = dict(self.action_metadata)
        if self.step_info is not None:
            data["step_info"] = self.step_info.to_dict()
        if self.trades:
            data["trades"] = [trade.to_dict() for trade in self.trades]
        return data
