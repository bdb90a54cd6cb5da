"""
Game mechanics: vision/pathfinding, movement, negotiation and end checks.
"""

from .movement import MovementResolver, MoveResult
from .trading import (
    OFFER_POOL,
    Outcome,
    TradeNegotiator,
    TradeResult,
    Transition,
    acceptance_probability,
    generate_offer,
    transition,
)
from .victory import EndReason, VictoryConditions, VictoryResult
from .vision import (
    PathStep,
    Vision,
    VisionResult,
    manhattan,
    nearest_resource_of_kind,
    shortest_path,
    visible_tiles,
)

__all__ = [
    "EndReason",
    "MoveResult",
    "MovementResolver",
    "OFFER_POOL",
    "Outcome",
    "PathStep",
    "TradeNegotiator",
    "TradeResult",
    "Transition",
    "VictoryConditions",
    "VictoryResult",
    "Vision",
    "VisionResult",
    "acceptance_probability",
    "generate_offer",
    "manhattan",
    "nearest_resource_of_kind",
    "shortest_path",
    "transition",
    "visible_tiles",
]
