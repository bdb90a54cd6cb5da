"""
Tiles and their occupants.

The pathfinder and the brains only read tiles through the ``TileView``
surface (walkability, move cost, resource). Removing a resource is the
environment's job once a collection or a merchant departure is reported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol

from .types import MerchantVariant, MoveCost, ResourceKind, TerrainType, TERRAIN_COSTS

if TYPE_CHECKING:
    from ..entities.merchant import Merchant


class TileView(Protocol):
    """Read-only tile surface the core depends on."""

    resource: Optional["Resource"]

    def is_walkable(self) -> bool: ...

    def move_cost(self) -> MoveCost: ...


@dataclass
class Resource:
    """
    A single tile occupant.

    Only the kind matters to pathfinding and policies; merchant occupants
    additionally carry their negotiation record.
    """

    kind: ResourceKind
    merchant: Optional["Merchant"] = None

    def __post_init__(self):
        if self.kind == ResourceKind.MERCHANT and self.merchant is None:
            raise ValueError("Merchant resources need a Merchant record")
        if self.kind != ResourceKind.MERCHANT and self.merchant is not None:
            raise ValueError(f"{self.kind.name} resources cannot carry a merchant")

    @classmethod
    def food(cls) -> Resource:
        return cls(ResourceKind.FOOD)

    @classmethod
    def water(cls) -> Resource:
        return cls(ResourceKind.WATER)

    @classmethod
    def gold(cls) -> Resource:
        return cls(ResourceKind.GOLD)

    @classmethod
    def goal(cls) -> Resource:
        return cls(ResourceKind.GOAL)

    @classmethod
    def trader(cls, variant: MerchantVariant = MerchantVariant.STANDARD) -> Resource:
        from ..entities.merchant import Merchant

        return cls(ResourceKind.MERCHANT, merchant=Merchant(variant=variant))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind.value}
        if self.merchant is not None:
            data["merchant"] = self.merchant.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Resource:
        merchant = None
        if data.get("merchant") is not None:
            from ..entities.merchant import Merchant

            merchant = Merchant.from_dict(data["merchant"])
        return cls(kind=ResourceKind(data["kind"]), merchant=merchant)


@dataclass
class Tile:
    terrain: TerrainType = TerrainType.GRASS
    resource: Optional[Resource] = field(default=None)

    def is_walkable(self) -> bool:
        return self.terrain != TerrainType.WALL

    def move_cost(self) -> MoveCost:
        return TERRAIN_COSTS[self.terrain]

    def has(self, kind: ResourceKind) -> bool:
        return self.resource is not None and self.resource.kind == kind

    def remove_resource(self) -> Optional[Resource]:
        removed, self.resource = self.resource, None
        return removed

    def copy(self) -> Tile:
        """Detached copy, merchant record included."""
        return Tile.from_dict(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "terrain": self.terrain.value,
            "resource": self.resource.to_dict() if self.resource else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Tile:
        resource = data.get("resource")
        return cls(
            terrain=TerrainType(data["terrain"]),
            resource=Resource.from_dict(resource) if resource else None,
        )
