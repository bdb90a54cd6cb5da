"""
GameSnapshot - the per-turn, read-only view handed to vision and brains.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from .tiles import TileView
from .types import GridPos


@dataclass(frozen=True)
class GameSnapshot:
    """
    Everything a decision needs for one turn.

    Built fresh by the environment each turn from detached tile copies, so
    a snapshot kept around still shows the turn it was taken on.

    Attributes:
        x, y: Agent position
        food, water, gold, lives: Player counters at the start of the turn
        width, height: Map dimensions
        vision_radius: Circular sight radius (in tiles)
        tiles: Row-major grid, ``tiles[y][x]``
        turn: Turn counter (used for merchant cooldowns)
    """

    x: int
    y: int
    food: int
    water: int
    gold: int
    width: int
    height: int
    vision_radius: int
    tiles: Sequence[Sequence[TileView]]
    lives: int = 0
    turn: int = 0

    def __post_init__(self):
        if self.vision_radius < 0:
            raise ValueError(f"Vision radius cannot be negative: {self.vision_radius}")
        if len(self.tiles) != self.height or any(len(row) != self.width for row in self.tiles):
            raise ValueError(
                f"Tile grid does not match dimensions {self.width}x{self.height}"
            )

    @property
    def position(self) -> GridPos:
        return (self.x, self.y)

    @property
    def map_size(self) -> int:
        """Edge length used by center-biased scoring (maps are square in practice)."""
        return max(self.width, self.height)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def tile_at(self, x: int, y: int) -> Optional[TileView]:
        if not self.in_bounds(x, y):
            return None
        return self.tiles[y][x]

    def summary(self) -> Dict[str, Any]:
        """Counters only (no tiles) for logs and frames."""
        return {
            "turn": self.turn,
            "position": [self.x, self.y],
            "food": self.food,
            "water": self.water,
            "gold": self.gold,
            "lives": self.lives,
            "vision_radius": self.vision_radius,
        }
