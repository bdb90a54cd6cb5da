"""
SurvivalEnv - Main environment interface.

This is the primary API for the survival simulator. It provides a gym-like
interface: reset with a Scenario, then step one move at a time.

Usage:
    from survival import SurvivalEnv
    from survival.scenario import create_default_scenario

    env = SurvivalEnv()
    state = env.reset(create_default_scenario())

    while not done:
        decision, _metadata = agent.get_action(state)
        state, done, info = env.step(decision.dx, decision.dy)
        if env.has_trader():
            env.accept_current_offer()

State Structure:
    {
        "snapshot": GameSnapshot  # read-only view for this turn
    }
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from infra.logger import get_logger

from .core.snapshot import GameSnapshot
from .core.types import GridPos, MoveDir, ResourceKind
from .entities.merchant import Merchant, TradeOffer
from .entities.player import Player
from .mechanics import (
    EndReason,
    MovementResolver,
    MoveResult,
    TradeNegotiator,
    TradeResult,
    VictoryConditions,
    VictoryResult,
)
from .scenario import Scenario
from .world.game_map import GameMap

logger = get_logger(__name__)


@dataclass
class StepInfo:
    """
    Per-step metadata returned at the end of each step.

    Attributes:
        turn: Turn counter after this step
        move: Movement resolution
        trade: Merchant engagement or walk-away result, if any
        victory: End-of-episode check
    """

    turn: int
    move: MoveResult
    victory: VictoryResult
    trade: Optional[TradeResult] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize step info to a plain dict."""
        return {
            "turn": self.turn,
            "move": self.move.to_dict(),
            "trade": self.trade.to_dict() if self.trade else None,
            "victory": self.victory.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> StepInfo:
        """Deserialize step info from a dict."""
        trade = data.get("trade")
        return cls(
            turn=data["turn"],
            move=MoveResult.from_dict(data["move"]),
            victory=VictoryResult.from_dict(data["victory"]),
            trade=TradeResult.from_dict(trade) if trade else None,
        )


class SurvivalEnv:
    """
    Survival Environment - Main simulation interface.

    The environment manages:
    - The map and the player
    - Movement resolution and collection
    - The open merchant negotiation (at most one at a time)
    - Turn counter and end-of-episode checks

    Attributes:
        game_map: Current map
        player: Current player
        turn: Current turn number
        verbose: Log each step at INFO instead of DEBUG
    """

    def __init__(self, verbose: bool = False, rng: random.Random | None = None):
        """
        Initialize the environment.

        Args:
            verbose: Log each step at INFO (default: DEBUG)
            rng: Random source overriding the scenario seed (tests)
        """
        self.verbose = verbose
        self._rng_override = rng

        self.game_map: Optional[GameMap] = None
        self.player: Optional[Player] = None
        self.turn = 0
        self.game_over = False
        self.result: Optional[VictoryResult] = None
        self._scenario: Optional[Scenario] = None

        self._movement = MovementResolver()
        self._negotiator = TradeNegotiator()
        self._victory_checker = VictoryConditions()
        self._trader_pos: Optional[GridPos] = None

    # ------------------------------------------------------------------#
    # Lifecycle
    # ------------------------------------------------------------------#
    def reset(self, scenario: Scenario | Dict[str, Any]) -> Dict[str, Any]:
        """
        Reset the environment with a scenario.

        Args:
            scenario: Scenario instance or dict from Scenario.to_dict()

        Returns:
            Initial state (same structure as step())

        Raises:
            ValueError: If the scenario dict has no config or its layout is invalid
        """
        if isinstance(scenario, Scenario):
            scenario_obj = scenario.clone()
        else:
            if "config" not in scenario:
                raise ValueError("Scenario must contain 'config' dictionary")
            scenario_obj = Scenario.from_dict(scenario)
        self._scenario = scenario_obj

        rng = self._rng_override if self._rng_override is not None else random.Random(scenario_obj.seed)

        if scenario_obj.layout is not None:
            self.game_map = GameMap.from_layout(scenario_obj.layout)
        else:
            self.game_map = GameMap.generate(scenario_obj.map_size, scenario_obj.difficulty, rng)

        starting = scenario_obj.starting_resources
        start_x, start_y = self.game_map.start
        self.player = Player(
            x=start_x,
            y=start_y,
            food=starting.food,
            water=starting.water,
            gold=scenario_obj.starting_gold,
            vision_radius=scenario_obj.vision_radius,
            lives=scenario_obj.starting_lives,
        )

        self.turn = 0
        self.game_over = False
        self.result = None
        self._trader_pos = None
        self._movement = MovementResolver(scenario_obj.difficulty)
        self._negotiator = TradeNegotiator(rng)
        self._victory_checker = VictoryConditions(max_turns=scenario_obj.max_turns)

        logger.info(
            "Reset %s: %dx%d map, start=%s, goal=%s",
            scenario_obj,
            self.game_map.width,
            self.game_map.height,
            self.game_map.start,
            self.game_map.goal_position(),
        )
        return self._build_state()

    def step(self, dx: int, dy: int) -> Tuple[Dict[str, Any], bool, StepInfo]:
        """
        Execute one turn: move the player by (dx, dy).

        Game loop order:
        1. Walk away from any open negotiation
        2. Resolve the move (cost, lives, collection)
        3. Engage a merchant on the destination tile
        4. Check end-of-episode conditions

        Returns:
            Tuple of (state, done, info)

        Raises:
            RuntimeError: If reset() hasn't been called or the episode is over
            ValueError: If (dx, dy) is not a single-axis unit step
        """
        self._require_running()
        MoveDir.from_delta(dx, dy)

        self.turn += 1
        walk_away: Optional[TradeResult] = None
        if self._trader_pos is not None:
            walk_away = self.reject_current_trade()

        move = self._movement.resolve(self.game_map, self.player, dx, dy)

        trade = walk_away
        if move.merchant_at is not None:
            trade = self._engage(move.merchant_at)
            if not trade.success:
                move.message = trade.error or ""
            else:
                move.message = trade.message

        victory = self._victory_checker.check(move, self.turn)
        self._finish_if_over(victory)

        info = StepInfo(turn=self.turn, move=move, victory=victory, trade=trade)
        log = logger.info if self.verbose else logger.debug
        log("Turn %d: move=(%d, %d) %s -> %s", self.turn, dx, dy, move.message or "ok", self.player)
        return self._build_state(), self.game_over, info

    def stall(self) -> Tuple[Dict[str, Any], bool, StepInfo]:
        """
        End the episode because the agent reported no legal move.
        """
        self._require_running()
        move = MoveResult(moved=False, message="No legal move available.")
        victory = VictoryResult.ended(EndReason.NO_LEGAL_MOVE)
        self._finish_if_over(victory)
        return self._build_state(), True, StepInfo(turn=self.turn, move=move, victory=victory)

    def snapshot(self) -> GameSnapshot:
        """Read-only view for the current turn."""
        if self.game_map is None or self.player is None:
            raise RuntimeError("Must call reset() before requesting a snapshot")
        player = self.player
        return GameSnapshot(
            x=player.x,
            y=player.y,
            food=player.food,
            water=player.water,
            gold=player.gold,
            width=self.game_map.width,
            height=self.game_map.height,
            vision_radius=player.vision_radius,
            tiles=tuple(tuple(tile.copy() for tile in row) for row in self.game_map.tiles),
            lives=player.lives,
            turn=self.turn,
        )

    # ------------------------------------------------------------------#
    # Trading
    # ------------------------------------------------------------------#
    def has_trader(self) -> bool:
        return self._trader_pos is not None

    @property
    def active_merchant(self) -> Optional[Merchant]:
        if self._trader_pos is None or self.game_map is None:
            return None
        resource = self.game_map.tile_at(*self._trader_pos).resource
        return resource.merchant if resource is not None else None

    @property
    def active_offer(self) -> Optional[TradeOffer]:
        merchant = self.active_merchant
        return merchant.offer if merchant is not None else None

    def submit_counter_offer(self, gold: Any) -> TradeResult:
        """Counter the standing offer with ``gold``; never raises."""
        merchant = self.active_merchant
        if merchant is None or self.player is None:
            return TradeResult.fail("No trader nearby!")
        result = self._negotiator.submit_counter_offer(merchant, self.player, gold, self.turn)
        self._after_trade(result)
        if result.success:
            self._trader_pos = None
        return result

    def accept_current_offer(self) -> TradeResult:
        """Pay the asking price; never raises."""
        merchant = self.active_merchant
        if merchant is None or self.player is None:
            return TradeResult.fail("No trader nearby!")
        result = self._negotiator.accept_current_offer(merchant, self.player, self.turn)
        self._after_trade(result)
        if result.success:
            self._trader_pos = None
        return result

    def reject_current_trade(self) -> TradeResult:
        """Walk away from the open negotiation; never raises."""
        merchant = self.active_merchant
        if merchant is None:
            self._trader_pos = None
            return TradeResult.fail("No trader nearby!")
        result = self._negotiator.reject_current_offer(merchant, self.turn)
        self._trader_pos = None
        return result

    # ------------------------------------------------------------------#
    # Helpers
    # ------------------------------------------------------------------#
    def _engage(self, pos: GridPos) -> TradeResult:
        resource = self.game_map.tile_at(*pos).resource
        if resource is None or resource.kind != ResourceKind.MERCHANT:
            return TradeResult.fail("No trader nearby!")
        result = self._negotiator.engage(resource.merchant, self.turn)
        if result.success:
            self._trader_pos = pos
        return result

    def _after_trade(self, result: TradeResult) -> None:
        if not result.trader_departed:
            return
        if result.remove_from_tile and self._trader_pos is not None:
            self.game_map.remove_resource(*self._trader_pos)
            logger.info("Merchant at %s removed from the map", self._trader_pos)
        self._trader_pos = None

    def _finish_if_over(self, victory: VictoryResult) -> None:
        if victory.is_game_over:
            self.game_over = True
            self.result = victory
            self._trader_pos = None
            logger.info("Episode over on turn %d: %s", self.turn, victory.reason.value)

    def _require_running(self) -> None:
        if self.game_map is None or self.player is None:
            raise RuntimeError("Must call reset() before calling step()")
        if self.game_over:
            raise RuntimeError("Episode is over; call reset() to start again")

    def _build_state(self) -> Dict[str, Any]:
        return {"snapshot": self.snapshot()}

    @property
    def scenario(self) -> Optional[Scenario]:
        return self._scenario

    @property
    def is_game_over(self) -> bool:
        return self.game_over

    @property
    def won(self) -> bool:
        return self.result is not None and self.result.won
