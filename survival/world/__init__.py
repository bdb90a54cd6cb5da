"""Map state: the tile grid, its generator and ASCII layouts."""

from .game_map import DEFAULT_START, RESOURCE_CHARS, SPAWN_RATES, TERRAIN_CHARS, GameMap

__all__ = ["DEFAULT_START", "GameMap", "RESOURCE_CHARS", "SPAWN_RATES", "TERRAIN_CHARS"]
