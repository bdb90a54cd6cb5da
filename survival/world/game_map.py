"""
GameMap - The tile grid, its generator and its ASCII layout format.

Layouts are lists of equal-length strings, one character per tile:

    Terrain:   .  grass     d  desert    f  forest
               m  mountain  s  swamp     #  wall
    Occupants (on grass):
               A  animal (food)          S  spring (water)
               $  gold                   *  trophy (goal)
               M  regular trader         V  impatient trader
               G  generous trader
    Start:     @  player start (grass)

Example:
    layout = [
        "#####",
        "#@.A#",
        "#.#*#",
        "#####",
    ]
    game_map = GameMap.from_layout(layout)
"""

from __future__ import annotations

import random
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from ..core.tiles import Resource, Tile
from ..core.types import Difficulty, GridPos, MerchantVariant, ResourceKind, TerrainType

TERRAIN_CHARS: Dict[str, TerrainType] = {
    ".": TerrainType.GRASS,
    "d": TerrainType.DESERT,
    "f": TerrainType.FOREST,
    "m": TerrainType.MOUNTAIN,
    "s": TerrainType.SWAMP,
    "#": TerrainType.WALL,
}
_TERRAIN_TO_CHAR = {terrain: char for char, terrain in TERRAIN_CHARS.items()}

RESOURCE_CHARS: Dict[str, Tuple[ResourceKind, Optional[MerchantVariant]]] = {
    "A": (ResourceKind.FOOD, None),
    "S": (ResourceKind.WATER, None),
    "$": (ResourceKind.GOLD, None),
    "*": (ResourceKind.GOAL, None),
    "M": (ResourceKind.MERCHANT, MerchantVariant.STANDARD),
    "V": (ResourceKind.MERCHANT, MerchantVariant.VOLATILE),
    "G": (ResourceKind.MERCHANT, MerchantVariant.RESERVED),
}
_RESOURCE_TO_CHAR = {value: char for char, value in RESOURCE_CHARS.items()}

START_CHAR = "@"
DEFAULT_START: GridPos = (1, 1)

# Cumulative terrain thresholds for the interior.
TERRAIN_MIX: Tuple[Tuple[float, TerrainType], ...] = (
    (0.40, TerrainType.GRASS),
    (0.60, TerrainType.DESERT),
    (0.75, TerrainType.FOREST),
    (0.85, TerrainType.MOUNTAIN),
    (1.00, TerrainType.SWAMP),
)

SPAWN_RATES: Dict[Difficulty, Dict[ResourceKind, float]] = {
    Difficulty.EASY: {
        ResourceKind.MERCHANT: 0.02,
        ResourceKind.WATER: 0.05,
        ResourceKind.FOOD: 0.06,
        ResourceKind.GOLD: 0.06,
    },
    Difficulty.MEDIUM: {
        ResourceKind.MERCHANT: 0.015,
        ResourceKind.WATER: 0.035,
        ResourceKind.FOOD: 0.045,
        ResourceKind.GOLD: 0.045,
    },
    Difficulty.HARD: {
        ResourceKind.MERCHANT: 0.01,
        ResourceKind.WATER: 0.025,
        ResourceKind.FOOD: 0.035,
        ResourceKind.GOLD: 0.035,
    },
}

MERCHANT_MIX: Tuple[Tuple[float, MerchantVariant], ...] = (
    (0.33, MerchantVariant.STANDARD),
    (0.66, MerchantVariant.VOLATILE),
    (1.00, MerchantVariant.RESERVED),
)


class GameMap:
    """
    Square-or-rectangular tile grid addressed as ``tiles[y][x]``.

    Attributes:
        tiles: Row-major tile grid
        width, height: Grid dimensions
        start: Player spawn position
    """

    def __init__(self, tiles: List[List[Tile]], start: GridPos = DEFAULT_START):
        if not tiles or not tiles[0]:
            raise ValueError("Map must have at least one tile")
        width = len(tiles[0])
        if any(len(row) != width for row in tiles):
            raise ValueError("All map rows must have the same width")

        self.tiles = tiles
        self.width = width
        self.height = len(tiles)

        if not self.in_bounds(*start):
            raise ValueError(f"Start position {start} is outside the map")
        if not self.tile_at(*start).is_walkable():
            raise ValueError(f"Start position {start} is not walkable")
        self.start = start

    # ------------------------------------------------------------------#
    # Construction
    # ------------------------------------------------------------------#
    @classmethod
    def generate(
        cls,
        size: int,
        difficulty: Difficulty = Difficulty.EASY,
        rng: random.Random | None = None,
        start: GridPos = DEFAULT_START,
    ) -> GameMap:
        """
        Build a random walled map with one trophy in the interior.

        The start tile is always plain grass with no occupant, and the
        trophy never lands on it.
        """
        if size < 4:
            raise ValueError(f"Map size must be at least 4: {size}")
        rng = rng if rng is not None else random.Random()

        goal = start
        while goal == start:
            goal = (rng.randint(1, size - 2), rng.randint(1, size - 2))

        rates = SPAWN_RATES[difficulty]
        tiles: List[List[Tile]] = []
        for y in range(size):
            row: List[Tile] = []
            for x in range(size):
                if x in (0, size - 1) or y in (0, size - 1):
                    row.append(Tile(TerrainType.WALL))
                elif (x, y) == start:
                    row.append(Tile(TerrainType.GRASS))
                elif (x, y) == goal:
                    row.append(Tile(_roll_terrain(rng), Resource.goal()))
                else:
                    row.append(Tile(_roll_terrain(rng), _roll_resource(rng, rates)))
            tiles.append(row)
        return cls(tiles, start=start)

    @classmethod
    def from_layout(cls, layout: Sequence[str]) -> GameMap:
        """
        Parse an ASCII layout (see module docstring).

        Raises:
            ValueError: On ragged rows, unknown characters or a missing or
                duplicated start marker
        """
        rows = [row for row in layout if row]
        if not rows:
            raise ValueError("Layout is empty")

        tiles: List[List[Tile]] = []
        start: Optional[GridPos] = None
        for y, row in enumerate(rows):
            tile_row: List[Tile] = []
            for x, char in enumerate(row):
                if char == START_CHAR:
                    if start is not None:
                        raise ValueError(f"Layout has more than one start marker: {start} and {(x, y)}")
                    start = (x, y)
                    tile_row.append(Tile(TerrainType.GRASS))
                elif char in TERRAIN_CHARS:
                    tile_row.append(Tile(TERRAIN_CHARS[char]))
                elif char in RESOURCE_CHARS:
                    kind, variant = RESOURCE_CHARS[char]
                    resource = Resource.trader(variant) if variant is not None else Resource(kind)
                    tile_row.append(Tile(TerrainType.GRASS, resource))
                else:
                    raise ValueError(f"Unknown layout character {char!r} at {(x, y)}")
            tiles.append(tile_row)

        return cls(tiles, start=start if start is not None else DEFAULT_START)

    # ------------------------------------------------------------------#
    # Queries
    # ------------------------------------------------------------------#
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def tile_at(self, x: int, y: int) -> Tile:
        if not self.in_bounds(x, y):
            raise IndexError(f"Tile {(x, y)} is outside the {self.width}x{self.height} map")
        return self.tiles[y][x]

    def iter_tiles(self) -> Iterator[Tuple[int, int, Tile]]:
        for y, row in enumerate(self.tiles):
            for x, tile in enumerate(row):
                yield x, y, tile

    def positions_of(self, kind: ResourceKind) -> List[GridPos]:
        return [(x, y) for x, y, tile in self.iter_tiles() if tile.has(kind)]

    def goal_position(self) -> Optional[GridPos]:
        goals = self.positions_of(ResourceKind.GOAL)
        return goals[0] if goals else None

    def count(self, kind: ResourceKind) -> int:
        return len(self.positions_of(kind))

    # ------------------------------------------------------------------#
    # Mutation
    # ------------------------------------------------------------------#
    def remove_resource(self, x: int, y: int) -> Optional[Resource]:
        return self.tile_at(x, y).remove_resource()

    # ------------------------------------------------------------------#
    # Serialization
    # ------------------------------------------------------------------#
    def to_layout(self) -> List[str]:
        """
        Render back to the ASCII layout.

        Occupants on non-grass terrain are written as their occupant char,
        so generated maps round-trip occupants but not the terrain under them.
        Merchant negotiation state is not part of the layout.
        """
        rows: List[str] = []
        for y, row in enumerate(self.tiles):
            chars: List[str] = []
            for x, tile in enumerate(row):
                if (x, y) == self.start:
                    chars.append(START_CHAR)
                elif tile.resource is not None:
                    merchant = tile.resource.merchant
                    key = (tile.resource.kind, merchant.variant if merchant else None)
                    chars.append(_RESOURCE_TO_CHAR[key])
                else:
                    chars.append(_TERRAIN_TO_CHAR[tile.terrain])
            rows.append("".join(chars))
        return rows

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "start": list(self.start),
            "tiles": [[tile.to_dict() for tile in row] for row in self.tiles],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> GameMap:
        tiles = [[Tile.from_dict(cell) for cell in row] for row in data["tiles"]]
        return cls(tiles, start=tuple(data.get("start", DEFAULT_START)))

    def clone(self) -> GameMap:
        return GameMap.from_dict(self.to_dict())

    def __str__(self) -> str:
        return "\n".join(self.to_layout())


def _roll_terrain(rng: random.Random) -> TerrainType:
    roll = rng.random()
    for threshold, terrain in TERRAIN_MIX:
        if roll < threshold:
            return terrain
    return TERRAIN_MIX[-1][1]


def _roll_resource(rng: random.Random, rates: Dict[ResourceKind, float]) -> Optional[Resource]:
    roll = rng.random()
    cumulative = 0.0
    # Order matters: merchants, springs, animals, then gold.
    for kind in (ResourceKind.MERCHANT, ResourceKind.WATER, ResourceKind.FOOD, ResourceKind.GOLD):
        cumulative += rates[kind]
        if roll < cumulative:
            if kind == ResourceKind.MERCHANT:
                return Resource.trader(_roll_merchant_variant(rng))
            return Resource(kind)
    return None


def _roll_merchant_variant(rng: random.Random) -> MerchantVariant:
    roll = rng.random()
    for threshold, variant in MERCHANT_MIX:
        if roll < threshold:
            return variant
    return MERCHANT_MIX[-1][1]
