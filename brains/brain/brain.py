"""
Brain - A personality plus its movement memory.

One Brain per agent: the visited set and the recent-position buffer live on
the instance, so several brains can run side by side without sharing state.
"""

from __future__ import annotations

import random
from collections import deque
from typing import Deque, Optional, Sequence, Set

from infra.logger import get_logger
from survival.core.snapshot import GameSnapshot
from survival.core.types import MAX_RECENT_POSITIONS, GridPos, StartingResources, starting_resources_for
from survival.mechanics.vision import Vision

from .strategies import (
    DecisionContext,
    MoveDecision,
    Personality,
    PersonalityProfile,
    create_strategy,
    possible_moves,
)

logger = get_logger(__name__)


class Brain:
    """
    Chooses one move per turn for a single agent.

    Attributes:
        profile: Personality profile (thresholds, weights, decide function)
        visited: Every destination this brain has chosen
        recent: Last few destinations, most recent first
    """

    def __init__(
        self,
        personality: Personality | str = Personality.COLLECTOR,
        rng: random.Random | None = None,
        starting: StartingResources | None = None,
    ):
        """
        Args:
            personality: Personality enum, value or legacy alias
            rng: Random source for fallback tie-breaking
            starting: Starting food/water used for thresholds (None = infer
                from the map size each turn)
        """
        self.profile: PersonalityProfile = create_strategy(personality)
        self.rng = rng if rng is not None else random.Random()
        self.starting = starting
        self.visited: Set[GridPos] = set()
        self.recent: Deque[GridPos] = deque(maxlen=MAX_RECENT_POSITIONS)

    @property
    def personality(self) -> Personality:
        return self.profile.personality

    def reset(self) -> None:
        self.visited.clear()
        self.recent.clear()

    def select_move(
        self,
        snapshot: GameSnapshot,
        vision: Vision,
        goal: Optional[GridPos],
        food: int,
        water: int,
        starting_food: int,
        starting_water: int,
        visited: Set[GridPos],
        recent: Deque[GridPos],
    ) -> Optional[MoveDecision]:
        """
        Run the personality against explicit inputs and record the result.

        The chosen destination is added to ``visited`` and pushed onto
        ``recent`` (oldest evicted) before returning.

        Returns:
            MoveDecision, or None when the agent has no legal move
        """
        if not possible_moves(snapshot):
            return None

        ctx = DecisionContext(
            snapshot=snapshot,
            vision=vision,
            goal=goal,
            food=food,
            water=water,
            starting=StartingResources(food=starting_food, water=starting_water),
            visited=visited,
            recent=tuple(recent),
            rng=self.rng,
        )
        decision = self.profile.decide(ctx, self.profile)
        if decision is None:
            decision = self._basic_move(snapshot)

        destination = (snapshot.x + decision.dx, snapshot.y + decision.dy)
        visited.add(destination)
        recent.appendleft(destination)
        return decision

    def calculate_best_move(self, snapshot: GameSnapshot) -> Optional[MoveDecision]:
        """Convenience entrypoint: build the vision and use this brain's memory."""
        vision = Vision(snapshot)
        starting = self.starting or starting_resources_for(snapshot.map_size)
        decision = self.select_move(
            snapshot,
            vision,
            vision.find_goal(),
            snapshot.food,
            snapshot.water,
            starting.food,
            starting.water,
            self.visited,
            self.recent,
        )
        if decision is None:
            logger.debug("No legal move from %s", snapshot.position)
        else:
            logger.debug("Turn %d: (%d, %d) %s", snapshot.turn, decision.dx, decision.dy, decision.reason)
        return decision

    def _basic_move(self, snapshot: GameSnapshot) -> MoveDecision:
        moves = possible_moves(snapshot)
        move = moves[self.rng.randrange(len(moves))]
        return MoveDecision(dx=move.dx, dy=move.dy, reason=f"{self.profile.label}: Random move")

    def recent_positions(self) -> Sequence[GridPos]:
        return tuple(self.recent)
