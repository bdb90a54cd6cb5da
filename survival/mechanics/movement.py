"""
MovementResolver - Applies a single step to the player and the map.

This module handles:
- Validating the destination (bounds, walkability)
- Spending the destination's terrain cost (or losing a life when short)
- Collecting whatever occupies the destination tile
- Reporting merchant encounters (negotiation itself lives in trading.py)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from infra.logger import get_logger

from ..core.types import Difficulty, GridPos, MoveCost, MoveDir, ResourceKind
from ..entities.player import Player

if TYPE_CHECKING:
    from ..world.game_map import GameMap

logger = get_logger(__name__)


COLLECT_GAIN: Dict[Difficulty, int] = {
    Difficulty.EASY: 20,
    Difficulty.MEDIUM: 15,
    Difficulty.HARD: 10,
}
GOLD_GAIN = 10
GOAL_REWARD = {"food": 10, "water": 10, "gold": 5}
RESPAWN_BONUS = 5


@dataclass
class MoveResult:
    """
    Outcome of one attempted step.

    Attributes:
        moved: Player position changed
        message: Human-readable summary
        blocked: Destination off-grid or not walkable (turn still consumed)
        cost: Resources spent (None if nothing was spent)
        lost_life: Player could not afford the tile and lost a life instead
        game_over: Player could not afford the tile with no lives left
        game_won: Player reached the goal
        collected: Resource kind collected on arrival
        merchant_at: Destination holds a merchant (engagement is the caller's job)
    """

    moved: bool
    message: str = ""
    blocked: bool = False
    cost: Optional[MoveCost] = None
    lost_life: bool = False
    game_over: bool = False
    game_won: bool = False
    collected: Optional[ResourceKind] = None
    merchant_at: Optional[GridPos] = None

    @classmethod
    def blocked_move(cls, message: str) -> MoveResult:
        return cls(moved=False, blocked=True, message=message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize move result to a plain dict."""
        return {
            "moved": self.moved,
            "message": self.message,
            "blocked": self.blocked,
            "cost": self.cost.to_dict() if self.cost else None,
            "lost_life": self.lost_life,
            "game_over": self.game_over,
            "game_won": self.game_won,
            "collected": self.collected.value if self.collected else None,
            "merchant_at": list(self.merchant_at) if self.merchant_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MoveResult:
        """Deserialize move result from a dict."""
        cost = data.get("cost")
        collected = data.get("collected")
        merchant_at = data.get("merchant_at")
        return cls(
            moved=data["moved"],
            message=data.get("message", ""),
            blocked=data.get("blocked", False),
            cost=MoveCost.from_dict(cost) if cost else None,
            lost_life=data.get("lost_life", False),
            game_over=data.get("game_over", False),
            game_won=data.get("game_won", False),
            collected=ResourceKind(collected) if collected else None,
            merchant_at=tuple(merchant_at) if merchant_at else None,
        )


class MovementResolver:
    """
    Resolves one player step against the map.

    Collectibles are removed from the map here; the goal tile is left in
    place and merchants are only reported.
    """

    def __init__(self, difficulty: Difficulty = Difficulty.EASY):
        self.difficulty = difficulty

    def resolve(self, game_map: "GameMap", player: Player, dx: int, dy: int) -> MoveResult:
        """
        Move ``player`` by (dx, dy).

        Raises:
            ValueError: If (dx, dy) is not a single-axis unit step
        """
        MoveDir.from_delta(dx, dy)

        nx, ny = player.x + dx, player.y + dy
        if not game_map.in_bounds(nx, ny):
            return MoveResult.blocked_move("You can't move off the map.")
        tile = game_map.tile_at(nx, ny)
        if not tile.is_walkable():
            return MoveResult.blocked_move("A wall blocks your way.")

        cost = tile.move_cost()
        if not player.can_afford(cost):
            return self._starve(player)

        player.spend(cost)
        player.move_to(nx, ny)

        resource = tile.resource
        if resource is None:
            return MoveResult(moved=True, cost=cost)

        if resource.kind == ResourceKind.GOAL:
            player.food += GOAL_REWARD["food"]
            player.water += GOAL_REWARD["water"]
            player.gold += GOAL_REWARD["gold"]
            logger.info("Goal reached at %s", player.pos)
            return MoveResult(
                moved=True,
                cost=cost,
                game_won=True,
                collected=ResourceKind.GOAL,
                message="Trophy collected! +10 Food, +10 Water, +5 Gold!",
            )

        if resource.kind == ResourceKind.MERCHANT:
            return MoveResult(moved=True, cost=cost, merchant_at=(nx, ny))

        message = self._collect(player, resource.kind)
        game_map.remove_resource(nx, ny)
        return MoveResult(moved=True, cost=cost, collected=resource.kind, message=message)

    def _collect(self, player: Player, kind: ResourceKind) -> str:
        gain = COLLECT_GAIN[self.difficulty]
        if kind == ResourceKind.WATER:
            player.water += gain
            return f"+{gain} Water from spring!"
        if kind == ResourceKind.FOOD:
            player.food += gain
            return f"+{gain} Food from hunting!"
        player.gold += GOLD_GAIN
        return f"+{GOLD_GAIN} Gold!"

    def _starve(self, player: Player) -> MoveResult:
        if player.lives > 0:
            player.lives -= 1
            player.food += RESPAWN_BONUS
            player.water += RESPAWN_BONUS
            logger.info("Player lost a life at %s (%d left)", player.pos, player.lives)
            return MoveResult(
                moved=False,
                lost_life=True,
                message=(
                    "Not enough resources! Lost a life. Respawned with +5 food and +5 water. "
                    f"{player.lives} lives remaining."
                ),
            )
        logger.info("Player ran out of lives at %s", player.pos)
        return MoveResult(
            moved=False,
            game_over=True,
            message="Game Over! No lives or resources remaining!",
        )
