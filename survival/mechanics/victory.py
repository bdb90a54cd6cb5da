"""
VictoryConditions - End-of-episode checks.

An episode ends when the goal is reached, the player runs out of lives,
the agent has no legal move, or the optional turn cap is hit.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .movement import MoveResult


class EndReason(Enum):
    GOAL_REACHED = "goal_reached"
    OUT_OF_LIVES = "out_of_lives"
    NO_LEGAL_MOVE = "no_legal_move"
    MAX_TURNS = "max_turns"


@dataclass
class VictoryResult:
    is_game_over: bool = False
    won: bool = False
    reason: Optional[EndReason] = None

    @classmethod
    def in_progress(cls) -> VictoryResult:
        return cls()

    @classmethod
    def ended(cls, reason: EndReason) -> VictoryResult:
        return cls(is_game_over=True, won=reason == EndReason.GOAL_REACHED, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_game_over": self.is_game_over,
            "won": self.won,
            "reason": self.reason.value if self.reason else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> VictoryResult:
        reason = data.get("reason")
        return cls(
            is_game_over=data.get("is_game_over", False),
            won=data.get("won", False),
            reason=EndReason(reason) if reason else None,
        )


class VictoryConditions:
    """
    Checks whether the episode is over after a step.

    Args:
        max_turns: Optional hard cap on turns (None = unlimited)
    """

    def __init__(self, max_turns: Optional[int] = None):
        if max_turns is not None and max_turns < 1:
            raise ValueError(f"max_turns must be >= 1: {max_turns}")
        self.max_turns = max_turns

    def check(self, move: MoveResult, turn: int) -> VictoryResult:
        if move.game_won:
            return VictoryResult.ended(EndReason.GOAL_REACHED)
        if move.game_over:
            return VictoryResult.ended(EndReason.OUT_OF_LIVES)
        if self.max_turns is not None and turn >= self.max_turns:
            return VictoryResult.ended(EndReason.MAX_TURNS)
        return VictoryResult.in_progress()
