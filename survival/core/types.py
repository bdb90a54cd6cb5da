"""
Core enums, value types and tuning tables shared by every subsystem.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

GridPos = Tuple[int, int]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (round(12.5) == 13, unlike bankers' rounding)."""
    return int(math.floor(value + 0.5))


class MoveDir(Enum):
    """Cardinal moves. Declaration order (N, E, S, W) is the search order."""

    N = (0, -1)
    E = (1, 0)
    S = (0, 1)
    W = (-1, 0)

    @property
    def delta(self) -> GridPos:
        return self.value

    @classmethod
    def from_delta(cls, dx: int, dy: int) -> "MoveDir":
        for direction in cls:
            if direction.value == (dx, dy):
                return direction
        raise ValueError(f"Not a single-axis unit move: ({dx}, {dy})")


class TerrainType(Enum):
    GRASS = "grass"
    DESERT = "desert"
    FOREST = "forest"
    MOUNTAIN = "mountain"
    SWAMP = "swamp"
    WALL = "wall"


class ResourceKind(Enum):
    """What can occupy a tile."""

    FOOD = "animal"
    WATER = "spring"
    GOLD = "gold"
    GOAL = "trophy"
    MERCHANT = "trader"

    @property
    def collectible(self) -> bool:
        """Resources a collector brain goes after (not the goal, not merchants)."""
        return self not in (ResourceKind.GOAL, ResourceKind.MERCHANT)


class MerchantVariant(Enum):
    STANDARD = "regular"
    VOLATILE = "impatient"
    RESERVED = "generous"


class MerchantState(Enum):
    IDLE = "idle"
    AWAITING_OFFER = "awaitOffer"
    UNAVAILABLE = "unavailable"


class TradeItem(Enum):
    FOOD = "food"
    WATER = "water"
    LIFE = "life"


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class VisionType(Enum):
    FOCUSED = "focused"
    CAUTIOUS = "cautious"
    KEEN_EYED = "keen-eyed"
    FAR_SIGHT = "far-sight"


@dataclass(frozen=True)
class MoveCost:
    """Food and water spent to step onto a tile."""

    food: int
    water: int

    @property
    def total(self) -> int:
        return self.food + self.water

    def __add__(self, other: "MoveCost") -> "MoveCost":
        return MoveCost(self.food + other.food, self.water + other.water)

    def to_dict(self) -> Dict[str, int]:
        return {"food": self.food, "water": self.water}

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "MoveCost":
        return cls(food=data["food"], water=data["water"])


@dataclass(frozen=True)
class StartingResources:
    food: int
    water: int


@dataclass(frozen=True)
class DifficultyConfig:
    size: int
    food: int
    water: int

    @property
    def starting(self) -> StartingResources:
        return StartingResources(food=self.food, water=self.water)


# =============================================================================
# TUNING TABLES
# =============================================================================

TERRAIN_COSTS: Dict[TerrainType, MoveCost] = {
    TerrainType.GRASS: MoveCost(1, 1),
    TerrainType.DESERT: MoveCost(1, 3),
    TerrainType.FOREST: MoveCost(2, 1),
    TerrainType.MOUNTAIN: MoveCost(3, 2),
    TerrainType.SWAMP: MoveCost(2, 2),
    TerrainType.WALL: MoveCost(0, 0),  # impassable
}

DIFFICULTY_CONFIG: Dict[Difficulty, DifficultyConfig] = {
    Difficulty.EASY: DifficultyConfig(size=12, food=100, water=100),
    Difficulty.MEDIUM: DifficultyConfig(size=16, food=75, water=75),
    Difficulty.HARD: DifficultyConfig(size=20, food=50, water=50),
}

VISION_RADIUS_CONFIG: Dict[VisionType, int] = {
    VisionType.FOCUSED: 3,
    VisionType.CAUTIOUS: 4,
    VisionType.KEEN_EYED: 5,
    VisionType.FAR_SIGHT: 8,
}

DEFAULT_VISION_RADIUS = 5
DEFAULT_PLAYER_LIVES = 3
MAX_RECENT_POSITIONS = 4


def starting_resources_for(map_size: int) -> StartingResources:
    """Infer starting food/water from the map size; unknown sizes use easy."""
    for config in DIFFICULTY_CONFIG.values():
        if config.size == map_size:
            return config.starting
    return DIFFICULTY_CONFIG[Difficulty.EASY].starting
