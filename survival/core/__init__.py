"""Core value types shared by the simulator."""

from .snapshot import GameSnapshot
from .tiles import Resource, Tile, TileView
from .types import (
    DIFFICULTY_CONFIG,
    Difficulty,
    GridPos,
    MerchantState,
    MerchantVariant,
    MoveCost,
    MoveDir,
    ResourceKind,
    StartingResources,
    TerrainType,
    TradeItem,
    VisionType,
    round_half_up,
    starting_resources_for,
)

__all__ = [
    "DIFFICULTY_CONFIG",
    "Difficulty",
    "GameSnapshot",
    "GridPos",
    "MerchantState",
    "MerchantVariant",
    "MoveCost",
    "MoveDir",
    "Resource",
    "ResourceKind",
    "StartingResources",
    "TerrainType",
    "Tile",
    "TileView",
    "TradeItem",
    "VisionType",
    "round_half_up",
    "starting_resources_for",
]
