"""
Vision - Sight radius and pathfinding queries.

This module handles:
- Computing which tiles the agent can see (circular radius)
- Breadth-first shortest paths over walkable tiles
- "Where is the nearest X" queries used by the brains

All queries are read-only against a GameSnapshot.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional, Set, Tuple

from ..core.snapshot import GameSnapshot
from ..core.tiles import TileView
from ..core.types import GridPos, MoveCost, MoveDir, ResourceKind

VisibleTile = Tuple[int, int, TileView]


@dataclass(frozen=True)
class PathStep:
    """
    One edge of a route.

    Attributes:
        x, y: Tile reached by this step
        dx, dy: Single-axis direction taken
        cost: Move cost of the tile entered
        total_cost: Food + water spent from the agent's tile up to here
    """

    x: int
    y: int
    dx: int
    dy: int
    cost: MoveCost
    total_cost: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "dx": self.dx,
            "dy": self.dy,
            "cost": self.cost.to_dict(),
            "total_cost": self.total_cost,
        }


@dataclass(frozen=True)
class VisionResult:
    """
    A reachable target and the route to it.

    Attributes:
        target: Target tile coordinates
        path: Steps from the agent to the target (empty if already there)
        total_cost: Food + water spent along the whole path
        distance: Manhattan distance from the agent to the target
    """

    target: GridPos
    path: List[PathStep]
    total_cost: int
    distance: int

    @property
    def first_step(self) -> Optional[PathStep]:
        return self.path[0] if self.path else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": list(self.target),
            "path": [step.to_dict() for step in self.path],
            "total_cost": self.total_cost,
            "distance": self.distance,
        }


def manhattan(a: GridPos, b: GridPos) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class Vision:
    """
    Visibility and pathfinding view over one snapshot.

    The visible set is computed once per instance; build a new Vision each
    turn (snapshots are per-turn anyway).
    """

    def __init__(self, snapshot: GameSnapshot):
        self.snapshot = snapshot
        self._visible: Optional[List[VisibleTile]] = None

    # ------------------------------------------------------------------#
    # Visibility
    # ------------------------------------------------------------------#
    def visible_tiles(self, include_blocked: bool = False) -> List[VisibleTile]:
        """
        Tiles within the sight circle, in row-major order.

        Args:
            include_blocked: Also return non-walkable terrain (walls). These
                are never valid path targets, so the default leaves them out.

        Returns:
            List of (x, y, tile) for every in-bounds tile with
            dx² + dy² <= radius²
        """
        if include_blocked:
            return self._scan(include_blocked=True)
        if self._visible is None:
            self._visible = self._scan(include_blocked=False)
        return list(self._visible)

    def _scan(self, include_blocked: bool) -> List[VisibleTile]:
        snap = self.snapshot
        radius = snap.vision_radius
        radius_sq = radius * radius
        visible: List[VisibleTile] = []

        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                x, y = snap.x + dx, snap.y + dy
                if not snap.in_bounds(x, y):
                    continue
                if dx * dx + dy * dy > radius_sq:
                    continue
                tile = snap.tiles[y][x]
                if tile is None:
                    continue
                if include_blocked or tile.is_walkable():
                    visible.append((x, y, tile))
        return visible

    def can_see(self, x: int, y: int) -> bool:
        dx, dy = x - self.snapshot.x, y - self.snapshot.y
        radius = self.snapshot.vision_radius
        return self.snapshot.in_bounds(x, y) and dx * dx + dy * dy <= radius * radius

    # ------------------------------------------------------------------#
    # Pathfinding
    # ------------------------------------------------------------------#
    def shortest_path(self, target_x: int, target_y: int) -> Optional[List[PathStep]]:
        """
        Breadth-first search from the agent to (target_x, target_y).

        Neighbors are expanded N, E, S, W so ties resolve deterministically.
        Off-grid and non-walkable tiles are pruned and no coordinate is
        queued twice.

        Returns:
            The first path found (fewest steps), [] when the target is the
            agent's own tile, or None when it cannot be reached
        """
        snap = self.snapshot
        start = snap.position
        queue: Deque[Tuple[int, int, List[PathStep], int]] = deque([(start[0], start[1], [], 0)])
        visited: Set[GridPos] = {start}

        while queue:
            x, y, path, total_cost = queue.popleft()
            if x == target_x and y == target_y:
                return path

            for direction in MoveDir:
                dx, dy = direction.delta
                nx, ny = x + dx, y + dy
                if not snap.in_bounds(nx, ny) or (nx, ny) in visited:
                    continue
                tile = snap.tiles[ny][nx]
                if tile is None or not tile.is_walkable():
                    continue

                cost = tile.move_cost()
                new_total = total_cost + cost.total
                visited.add((nx, ny))
                step = PathStep(x=nx, y=ny, dx=dx, dy=dy, cost=cost, total_cost=new_total)
                queue.append((nx, ny, path + [step], new_total))

        return None

    def route_to(self, target_x: int, target_y: int) -> Optional[VisionResult]:
        """Shortest path wrapped with its total cost and Manhattan distance."""
        path = self.shortest_path(target_x, target_y)
        if path is None:
            return None
        return VisionResult(
            target=(target_x, target_y),
            path=path,
            total_cost=path[-1].total_cost if path else 0,
            distance=manhattan(self.snapshot.position, (target_x, target_y)),
        )

    # ------------------------------------------------------------------#
    # Resource queries
    # ------------------------------------------------------------------#
    def nearest_resource_of_kind(self, kind: ResourceKind, rank: int = 1) -> Optional[VisionResult]:
        """
        Route to the rank-th nearest visible resource of ``kind``.

        Candidates are ordered by Manhattan distance, then by the move cost
        of the target tile, then by x descending (eastward progress wins).

        Args:
            kind: Resource kind to look for
            rank: 1 = nearest, 2 = second nearest, ...

        Returns:
            VisionResult, or None if fewer than ``rank`` matches are visible
            or the chosen tile has no route
        """
        if rank < 1:
            raise ValueError(f"Rank must be >= 1: {rank}")

        candidates = self.ranked_resources(kind)
        if len(candidates) < rank:
            return None

        x, y = candidates[rank - 1]
        return self.route_to(x, y)

    def ranked_resources(self, kind: ResourceKind) -> List[GridPos]:
        """Visible tiles holding ``kind``, in nearest-first order."""
        origin = self.snapshot.position
        matches = []
        for x, y, tile in self.visible_tiles():
            resource = tile.resource
            if resource is None or resource.kind != kind:
                continue
            matches.append((manhattan(origin, (x, y)), tile.move_cost().total, -x, x, y))
        matches.sort(key=lambda m: (m[0], m[1], m[2]))
        return [(x, y) for *_, x, y in matches]

    def closest_food(self) -> Optional[VisionResult]:
        return self.nearest_resource_of_kind(ResourceKind.FOOD)

    def closest_water(self) -> Optional[VisionResult]:
        return self.nearest_resource_of_kind(ResourceKind.WATER)

    def closest_gold(self) -> Optional[VisionResult]:
        return self.nearest_resource_of_kind(ResourceKind.GOLD)

    def closest_merchant(self) -> Optional[VisionResult]:
        return self.nearest_resource_of_kind(ResourceKind.MERCHANT)

    def second_closest_food(self) -> Optional[VisionResult]:
        return self.nearest_resource_of_kind(ResourceKind.FOOD, 2)

    def second_closest_water(self) -> Optional[VisionResult]:
        return self.nearest_resource_of_kind(ResourceKind.WATER, 2)

    def second_closest_gold(self) -> Optional[VisionResult]:
        return self.nearest_resource_of_kind(ResourceKind.GOLD, 2)

    def second_closest_merchant(self) -> Optional[VisionResult]:
        return self.nearest_resource_of_kind(ResourceKind.MERCHANT, 2)

    def find_goal(self) -> Optional[GridPos]:
        """Coordinates of the goal tile if it is in sight."""
        for x, y, tile in self.visible_tiles():
            if tile.resource is not None and tile.resource.kind == ResourceKind.GOAL:
                return (x, y)
        return None

    def easiest_path(self) -> Optional[VisionResult]:
        """
        The visible tile that is cheapest to reach (ties: shorter distance).
        The agent's own tile is skipped.
        """
        best: Optional[VisionResult] = None
        origin = self.snapshot.position
        for x, y, _tile in self.visible_tiles():
            if (x, y) == origin:
                continue
            route = self.route_to(x, y)
            if route is None:
                continue
            if best is None or (route.total_cost, route.distance) < (best.total_cost, best.distance):
                best = route
        return best

    def scan_area(self) -> Dict[ResourceKind, List[Dict[str, int]]]:
        """Visible resources bucketed by kind, each bucket nearest-first."""
        origin = self.snapshot.position
        buckets: Dict[ResourceKind, List[Dict[str, int]]] = {
            kind: [] for kind in ResourceKind if kind != ResourceKind.GOAL
        }
        for x, y, tile in self.visible_tiles():
            resource = tile.resource
            if resource is None or resource.kind not in buckets:
                continue
            buckets[resource.kind].append({"x": x, "y": y, "distance": manhattan(origin, (x, y))})
        for entries in buckets.values():
            entries.sort(key=lambda e: e["distance"])
        return buckets


# =============================================================================
# Module-level call surface
# =============================================================================

def visible_tiles(snapshot: GameSnapshot, include_blocked: bool = False) -> List[VisibleTile]:
    return Vision(snapshot).visible_tiles(include_blocked=include_blocked)


def shortest_path(snapshot: GameSnapshot, target_x: int, target_y: int) -> Optional[List[PathStep]]:
    return Vision(snapshot).shortest_path(target_x, target_y)


def nearest_resource_of_kind(
    snapshot: GameSnapshot,
    kind: ResourceKind,
    rank: int = 1,
) -> Optional[VisionResult]:
    return Vision(snapshot).nearest_resource_of_kind(kind, rank)
