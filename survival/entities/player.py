from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from ..core.types import DEFAULT_PLAYER_LIVES, DEFAULT_VISION_RADIUS, GridPos, MoveCost, TradeItem
from .merchant import TradeOffer


@dataclass
class Player:
    """
    The agent's body: position plus the resource counters that moves and
    trades read and write.
    """

    x: int
    y: int
    food: int
    water: int
    gold: int = 0
    vision_radius: int = DEFAULT_VISION_RADIUS
    lives: int = DEFAULT_PLAYER_LIVES

    def __post_init__(self):
        if self.vision_radius < 0:
            raise ValueError(f"Vision radius cannot be negative: {self.vision_radius}")
        for name in ("food", "water", "gold", "lives"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative: {getattr(self, name)}")

    @property
    def pos(self) -> GridPos:
        return (self.x, self.y)

    def move_to(self, x: int, y: int) -> None:
        self.x, self.y = x, y

    def can_afford(self, cost: MoveCost) -> bool:
        return self.food >= cost.food and self.water >= cost.water

    def spend(self, cost: MoveCost) -> None:
        self.food -= cost.food
        self.water -= cost.water

    def apply_trade(self, offer: TradeOffer, gold_paid: int) -> None:
        """Pay for an accepted trade and receive the goods."""
        self.gold -= gold_paid
        if offer.item == TradeItem.FOOD:
            self.food += offer.amount
        elif offer.item == TradeItem.WATER:
            self.water += offer.amount
        elif offer.item == TradeItem.LIFE:
            self.lives += offer.amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pos": [self.x, self.y],
            "food": self.food,
            "water": self.water,
            "gold": self.gold,
            "vision_radius": self.vision_radius,
            "lives": self.lives,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Player:
        x, y = data["pos"]
        return cls(
            x=x,
            y=y,
            food=data["food"],
            water=data["water"],
            gold=data.get("gold", 0),
            vision_radius=data.get("vision_radius", DEFAULT_VISION_RADIUS),
            lives=data.get("lives", DEFAULT_PLAYER_LIVES),
        )

    def __str__(self) -> str:
        return (
            f"Player at {self.pos} [food={self.food}, water={self.water}, "
            f"gold={self.gold}, lives={self.lives}]"
        )
