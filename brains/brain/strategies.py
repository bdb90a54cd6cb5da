"""
Brain personalities.

Each personality is a frozen profile (thresholds, fallback weights and a
decide function) picked by ``create_strategy``. The three decide functions
share one step-priority shape:

1. Pursue a concrete target (resource or goal) via the first BFS step
2. If no target applies or no route exists, score every legal neighbor
   with the personality's fallback weights and take the best one
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from survival.core.snapshot import GameSnapshot
from survival.core.types import GridPos, MoveDir, StartingResources, round_half_up
from survival.mechanics.vision import Vision, VisionResult, manhattan


@dataclass(frozen=True)
class MoveDecision:
    dx: int
    dy: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"dx": self.dx, "dy": self.dy, "reason": self.reason}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MoveDecision:
        return cls(dx=data["dx"], dy=data["dy"], reason=data.get("reason", ""))


@dataclass(frozen=True)
class CandidateMove:
    dx: int
    dy: int
    x: int
    y: int


@dataclass
class DecisionContext:
    """
    Inputs to one decision.

    ``visited`` and ``recent`` are the brain's own memory; decide functions
    only read them (the Brain records the chosen destination afterwards).
    ``recent`` is ordered most-recent first.
    """

    snapshot: GameSnapshot
    vision: Vision
    goal: Optional[GridPos]
    food: int
    water: int
    starting: StartingResources
    visited: Set[GridPos]
    recent: Sequence[GridPos]
    rng: random.Random


@dataclass(frozen=True)
class FallbackWeights:
    """
    Exploration scoring for one personality.

    score = -terrain_weight * (food + water cost)
            + unvisited_bonus                            (never visited)
            + visited_penalty - (recency_base - recency_step * rank)
                                                         (visited; rank term only if recent)
            + center_weight * (map_size - distance to center)
            + U[0, jitter)

    When ``terrain_cutoff`` is set, the terrain term only applies while food
    or water is below it.
    """

    terrain_weight: float
    unvisited_bonus: float
    visited_penalty: float
    recency_base: float
    recency_step: float
    jitter: float
    center_weight: float = 0.0
    terrain_cutoff: Optional[int] = None


DecideFn = Callable[[DecisionContext, "PersonalityProfile"], Optional[MoveDecision]]


@dataclass(frozen=True)
class PersonalityProfile:
    """
    Thresholds are fractions of the starting amount, applied to food and
    water independently and rounded half-up.
    """

    personality: "Personality"
    label: str
    weights: FallbackWeights
    decide: DecideFn
    safe_ratio: Optional[float] = None
    critical_ratio: Optional[float] = None
    minimum_ratio: Optional[float] = None

    def threshold(self, ratio: Optional[float], starting_amount: int) -> int:
        if ratio is None:
            return 0
        return round_half_up(starting_amount * ratio)


class Personality(Enum):
    COLLECTOR = "collector"
    BALANCED = "balanced"
    RISK_TAKING = "risk-taking"

    @classmethod
    def parse(cls, value: "Personality | str") -> "Personality":
        """Accept enum members, values, member names and the legacy aliases."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "-")
        if key in _ALIASES:
            return _ALIASES[key]
        for member in cls:
            if key in (member.value, member.name.lower().replace("_", "-")):
                return member
        raise ValueError(f"Unknown personality: {value!r}")


_ALIASES = {
    "greedy": Personality.COLLECTOR,
    "explorer": Personality.BALANCED,
    "aggressive": Personality.RISK_TAKING,
    "risk": Personality.RISK_TAKING,
}


# =============================================================================
# SHARED HELPERS
# =============================================================================

def possible_moves(snapshot: GameSnapshot) -> List[CandidateMove]:
    """Legal single steps from the agent, in N, E, S, W order."""
    moves: List[CandidateMove] = []
    for direction in MoveDir:
        dx, dy = direction.delta
        x, y = snapshot.x + dx, snapshot.y + dy
        tile = snapshot.tile_at(x, y)
        if tile is not None and tile.is_walkable():
            moves.append(CandidateMove(dx=dx, dy=dy, x=x, y=y))
    return moves


def step_toward(vision: Vision, x: int, y: int, reason: str) -> Optional[MoveDecision]:
    """First BFS step toward (x, y), or None if unreachable or already there."""
    path = vision.shortest_path(x, y)
    if not path:
        return None
    return MoveDecision(dx=path[0].dx, dy=path[0].dy, reason=reason)


def _first_step(route: Optional[VisionResult], reason: str) -> Optional[MoveDecision]:
    if route is None or route.first_step is None:
        return None
    step = route.first_step
    return MoveDecision(dx=step.dx, dy=step.dy, reason=reason)


def _critical_resource_move(
    ctx: DecisionContext,
    tag: str,
    flavor: str,
    food_critical: bool,
    water_critical: bool,
) -> Optional[MoveDecision]:
    """
    Head for whichever resource is below its own critical line.

    When both are critical the scarcer one is tried first (ties go to
    water), then the other. A resource above its line is never chased here.
    """
    if food_critical and water_critical:
        order = ("food", "water") if ctx.food < ctx.water else ("water", "food")
    elif food_critical:
        order = ("food",)
    elif water_critical:
        order = ("water",)
    else:
        return None

    for resource in order:
        route = ctx.vision.closest_food() if resource == "food" else ctx.vision.closest_water()
        decision = _first_step(route, f"{tag}: Critical {resource} need - {flavor}")
        if decision is not None:
            return decision
    return None


def score_moves(
    ctx: DecisionContext,
    weights: FallbackWeights,
) -> List[tuple[float, CandidateMove]]:
    """Score every legal move; highest first."""
    snap = ctx.snapshot
    recent = list(ctx.recent)
    center = snap.map_size / 2
    apply_terrain = weights.terrain_cutoff is None or (
        ctx.food < weights.terrain_cutoff or ctx.water < weights.terrain_cutoff
    )

    scored: List[tuple[float, CandidateMove]] = []
    for move in possible_moves(snap):
        score = 0.0
        pos = (move.x, move.y)

        if apply_terrain:
            cost = snap.tiles[move.y][move.x].move_cost()
            score -= weights.terrain_weight * cost.total

        if pos not in ctx.visited:
            score += weights.unvisited_bonus
        else:
            score += weights.visited_penalty
            if pos in recent:
                rank = recent.index(pos)
                score -= weights.recency_base - weights.recency_step * rank

        if weights.center_weight:
            dist_to_center = abs(move.x - center) + abs(move.y - center)
            score += weights.center_weight * (snap.map_size - dist_to_center)

        score += ctx.rng.random() * weights.jitter
        scored.append((score, move))

    scored.sort(key=lambda item: item[0], reverse=True)
    return scored


def fallback_move(ctx: DecisionContext, weights: FallbackWeights, reason: str) -> Optional[MoveDecision]:
    scored = score_moves(ctx, weights)
    if not scored:
        return None
    _score, best = scored[0]
    return MoveDecision(dx=best.dx, dy=best.dy, reason=reason)


# =============================================================================
# PERSONALITIES
# =============================================================================

def decide_collector(ctx: DecisionContext, profile: PersonalityProfile) -> Optional[MoveDecision]:
    """Grab every visible collectible before even looking at the goal."""
    origin = ctx.snapshot.position
    resources = []
    for x, y, tile in ctx.vision.visible_tiles():
        resource = tile.resource
        if resource is not None and resource.kind.collectible:
            resources.append((manhattan(origin, (x, y)), x, y, resource.kind))

    if resources:
        # Stable sort keeps row-major order among equal distances.
        resources.sort(key=lambda r: r[0])
        _distance, x, y, kind = resources[0]
        decision = step_toward(ctx.vision, x, y, f"{profile.label}: Collecting {kind.value} resource")
        if decision is not None:
            return decision
    elif ctx.goal is not None:
        decision = step_toward(
            ctx.vision, ctx.goal[0], ctx.goal[1], f"{profile.label}: No resources visible, pursuing trophy"
        )
        if decision is not None:
            return decision

    return fallback_move(ctx, profile.weights, f"{profile.label}: Exploring to find resources")


def decide_balanced(ctx: DecisionContext, profile: PersonalityProfile) -> Optional[MoveDecision]:
    """Keep both resources above half the starting amount; take the goal when safe."""
    start = ctx.starting
    food_safe = profile.threshold(profile.safe_ratio, start.food)
    water_safe = profile.threshold(profile.safe_ratio, start.water)
    food_critical = profile.threshold(profile.critical_ratio, start.food)
    water_critical = profile.threshold(profile.critical_ratio, start.water)

    decision = _critical_resource_move(
        ctx, profile.label, "emergency", ctx.food < food_critical, ctx.water < water_critical
    )
    if decision is not None:
        return decision

    if ctx.goal is not None:
        decision = step_toward(
            ctx.vision, ctx.goal[0], ctx.goal[1], f"{profile.label}: Trophy visible, pursuing it"
        )
        if decision is not None:
            return decision

    if ctx.food < food_safe:
        decision = _first_step(ctx.vision.closest_food(), f"{profile.label}: Maintaining food at 50% threshold")
        if decision is not None:
            return decision

    if ctx.water < water_safe:
        decision = _first_step(ctx.vision.closest_water(), f"{profile.label}: Maintaining water at 50% threshold")
        if decision is not None:
            return decision

    return fallback_move(
        ctx, profile.weights, f"{profile.label}: Moving conservatively, avoiding expensive terrain"
    )


def decide_risk_taking(ctx: DecisionContext, profile: PersonalityProfile) -> Optional[MoveDecision]:
    """Race for the goal; only stop for supplies when critically low."""
    start = ctx.starting
    food_minimum = profile.threshold(profile.minimum_ratio, start.food)
    water_minimum = profile.threshold(profile.minimum_ratio, start.water)
    food_critical = profile.threshold(profile.critical_ratio, start.food)
    water_critical = profile.threshold(profile.critical_ratio, start.water)

    if ctx.goal is not None and ctx.food >= food_minimum and ctx.water >= water_minimum:
        decision = step_toward(
            ctx.vision, ctx.goal[0], ctx.goal[1], f"{profile.label}: Trophy in sight - going for it!"
        )
        if decision is not None:
            return decision

    decision = _critical_resource_move(
        ctx, profile.label, "must survive", ctx.food < food_critical, ctx.water < water_critical
    )
    if decision is not None:
        return decision

    return fallback_move(ctx, profile.weights, f"{profile.label}: Searching for trophy")


# =============================================================================
# FACTORY
# =============================================================================

_PROFILES: Dict[Personality, PersonalityProfile] = {
    Personality.COLLECTOR: PersonalityProfile(
        personality=Personality.COLLECTOR,
        label="COLLECTOR",
        weights=FallbackWeights(
            terrain_weight=10,
            unvisited_bonus=150,
            visited_penalty=-50,
            recency_base=200,
            recency_step=50,
            jitter=5,
        ),
        decide=decide_collector,
    ),
    Personality.BALANCED: PersonalityProfile(
        personality=Personality.BALANCED,
        label="BALANCED",
        weights=FallbackWeights(
            terrain_weight=40,
            unvisited_bonus=20,
            visited_penalty=-30,
            recency_base=150,
            recency_step=30,
            jitter=3,
        ),
        decide=decide_balanced,
        safe_ratio=0.5,
        critical_ratio=0.25,
    ),
    Personality.RISK_TAKING: PersonalityProfile(
        personality=Personality.RISK_TAKING,
        label="RISK-TAKING",
        weights=FallbackWeights(
            terrain_weight=10,
            unvisited_bonus=100,
            visited_penalty=-30,
            recency_base=100,
            recency_step=25,
            jitter=5,
            center_weight=2,
            terrain_cutoff=30,
        ),
        decide=decide_risk_taking,
        critical_ratio=0.15,
        minimum_ratio=0.10,
    ),
}


def create_strategy(personality: Personality | str) -> PersonalityProfile:
    """Return the profile for ``personality`` (enum, value or alias)."""
    return _PROFILES[Personality.parse(personality)]
