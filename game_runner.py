from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from brains import BaseAgent, PreparedAgent, TradeAction, create_agent_from_spec
from infra.logger import get_logger
from survival import SurvivalEnv
from survival.environment import StepInfo
from survival.mechanics.trading import TradeResult
from survival.scenario import Scenario

from game_frame import Frame

logger = get_logger(__name__)

# Exchanges allowed with one merchant per turn before the runner stops asking.
MAX_TRADE_EXCHANGES = 10


@dataclass
class EpisodeSummary:
    """Outcome of one finished episode."""

    won: bool
    reason: Optional[str]
    turns: int
    food: int
    water: int
    gold: int
    lives: int
    trades_completed: int = 0
    frames: List[Frame] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "won": self.won,
            "reason": self.reason,
            "turns": self.turns,
            "food": self.food,
            "water": self.water,
            "gold": self.gold,
            "lives": self.lives,
            "trades_completed": self.trades_completed,
        }


class GameRunner:
    """
    Step-by-step game runner that returns replay-friendly frames.

    Each step asks the agent for a move, applies it, and if the move opened
    a negotiation, keeps asking the agent's ``decide_trade`` until the
    merchant is done with it.
    """

    def __init__(
        self,
        scenario: Scenario,
        agent: BaseAgent | None = None,
        verbose: bool = False,
    ):
        """
        Args:
            scenario: Scenario to play (cloned)
            agent: Agent instance overriding the scenario's AgentSpec
            verbose: Log every step at INFO
        """
        self.scenario = scenario.clone()
        self.verbose = verbose

        self.env = SurvivalEnv(verbose=verbose)
        self._state = self.env.reset(self.scenario)

        if agent is not None:
            self._agent = agent
        else:
            self._agent = self._agent_from_scenario(self.scenario).agent

        self._done = False
        self._last_info: StepInfo | None = None
        self._trades_completed = 0

    # ------------------------------------------------------------------#
    # Properties
    # ------------------------------------------------------------------#
    @property
    def state(self) -> Dict[str, Any]:
        return self._state

    @property
    def done(self) -> bool:
        return self._done

    @property
    def turn(self) -> int:
        return self.env.turn

    @property
    def agent(self) -> BaseAgent:
        return self._agent

    # ------------------------------------------------------------------#
    # Core API
    # ------------------------------------------------------------------#
    def step(self, injections: Optional[Dict[str, Any]] = None) -> Frame:
        """
        Execute one turn of the game and return a frame.

        Args:
            injections: Optional kwargs forwarded to the agent's get_action
        """
        if self._done:
            raise RuntimeError("Game is already finished")

        snapshot_before = self._state["snapshot"]
        decision, metadata = self._agent.get_action(
            self._state,
            step_info=self._last_info,
            **(injections or {}),
        )

        if decision is None:
            self._state, self._done, self._last_info = self.env.stall()
        else:
            self._state, self._done, self._last_info = self.env.step(decision.dx, decision.dy)

        trades: List[TradeResult] = []
        if not self._done and self.env.has_trader():
            trades = self._negotiate()
            self._state = {"snapshot": self.env.snapshot()}

        return Frame(
            snapshot=snapshot_before,
            decision=decision,
            action_metadata=metadata,
            step_info=self._last_info,
            trades=trades,
            done=self._done,
        )

    def run(self, *, include_history: bool = False) -> Frame | list[Frame]:
        """
        Run the full episode to completion.

        Returns the final frame, or the full frame history if include_history
        is True.
        """
        frames: list[Frame] = []
        while True:
            frame = self.step()
            frames.append(frame)
            if frame.done:
                break

        return frames if include_history else frames[-1]

    def summary(self, frames: Optional[List[Frame]] = None) -> EpisodeSummary:
        player = self.env.player
        result = self.env.result
        return EpisodeSummary(
            won=self.env.won,
            reason=result.reason.value if result and result.reason else None,
            turns=self.env.turn,
            food=player.food,
            water=player.water,
            gold=player.gold,
            lives=player.lives,
            trades_completed=self._trades_completed,
            frames=list(frames or []),
        )

    # ------------------------------------------------------------------#
    # Helpers
    # ------------------------------------------------------------------#
    def _negotiate(self) -> List[TradeResult]:
        results: List[TradeResult] = []
        last: Optional[TradeResult] = None
        for attempt in range(MAX_TRADE_EXCHANGES):
            offer = self.env.active_offer
            if offer is None:
                break
            choice = self._agent.decide_trade(offer, self.env.player.gold, attempt, last)

            if choice.action == TradeAction.ACCEPT:
                last = self.env.accept_current_offer()
            elif choice.action == TradeAction.COUNTER:
                last = self.env.submit_counter_offer(choice.gold)
            else:
                last = self.env.reject_current_trade()

            results.append(last)
            if last.success and last.gold_paid:
                self._trades_completed += 1
            if not self.env.has_trader():
                break
            if choice.action != TradeAction.COUNTER and not last.success:
                # Accept failed (not enough gold): nothing else to try.
                results.append(self.env.reject_current_trade())
                break
        return results

    def _agent_from_scenario(self, scenario: Scenario) -> PreparedAgent:
        if scenario.agent is None:
            raise ValueError("Scenario is missing an agent spec.")
        return create_agent_from_spec(scenario.agent)


def run_single_game(
    scenario: Scenario,
    verbose: bool = False,
    max_turns: Optional[int] = None,
    include_history: bool = False,
) -> EpisodeSummary:
    """
    Play one episode of ``scenario`` with its AgentSpec.

    Args:
        scenario: Scenario to play
        verbose: Log every step at INFO
        max_turns: Override the scenario's turn cap
        include_history: Keep every Frame on the summary
    """
    if max_turns is not None:
        scenario = scenario.clone()
        scenario.max_turns = max_turns
    runner = GameRunner(scenario, verbose=verbose)
    frames = runner.run(include_history=True)
    summary = runner.summary(frames if include_history else None)
    logger.info(
        "Episode finished: won=%s reason=%s turns=%d food=%d water=%d gold=%d lives=%d",
        summary.won,
        summary.reason,
        summary.turns,
        summary.food,
        summary.water,
        summary.gold,
        summary.lives,
    )
    return summary


def run_multiple_games(
    scenario: Scenario,
    num_games: int,
    verbose: bool = False,
) -> List[EpisodeSummary]:
    """
    Play ``num_games`` episodes; seeded scenarios use seed, seed+1, ...
    """
    if num_games < 1:
        raise ValueError(f"num_games must be >= 1: {num_games}")
    results: List[EpisodeSummary] = []
    for index in range(num_games):
        game = scenario.clone()
        if game.seed is not None:
            game.seed += index
        results.append(run_single_game(game, verbose=verbose))

    wins = sum(1 for r in results if r.won)
    logger.info("Played %d games: %d won (%.1f%%)", num_games, wins, 100.0 * wins / num_games)
    return results
