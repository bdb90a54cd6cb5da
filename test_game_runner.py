"""
GameRunner, agent factory, settings and CLI tests.
"""

import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from typing import Any, Dict, Optional

from pydantic import ValidationError

from brains import AgentSpec, BaseAgent, BrainAgent, RandomAgent, TradeAction, create_agent_from_spec
from brains.brain.strategies import MoveDecision
from game_runner import GameRunner, run_multiple_games, run_single_game
from infra.settings import load_settings
from main import main
from survival.core.types import ResourceKind, TradeItem
from survival.entities.merchant import TradeOffer
from survival.scenario import Scenario


class EastAgent(BaseAgent):
    """Always walks east; trades with the default accept-if-affordable policy."""

    def get_action(self, state: Dict[str, Any], step_info: Optional[Any] = None, **kwargs: Any):
        return MoveDecision(dx=1, dy=0, reason="east"), {"policy": "east"}


MARKET_STREET = [
    "######",
    "#@M.*#",
    "######",
]


class TestGameRunner(unittest.TestCase):
    def test_trade_then_win(self) -> None:
        scenario = Scenario(layout=MARKET_STREET, starting_gold=20, seed=5)
        runner = GameRunner(scenario, agent=EastAgent())
        frames = runner.run(include_history=True)
        summary = runner.summary(frames)

        self.assertTrue(summary.won)
        self.assertEqual(summary.reason, "goal_reached")
        self.assertEqual(summary.turns, 3)
        self.assertEqual(summary.trades_completed, 1)
        self.assertEqual(len(frames), 3)
        self.assertEqual(frames[0].trades[0].outcome.value, "accepted")
        self.assertTrue(frames[-1].done)
        self.assertEqual(frames[0].to_dict()["decision"]["reason"], "east")

        with self.assertRaises(RuntimeError):
            runner.step()

    def test_frames_keep_the_map_of_their_turn(self) -> None:
        scenario = Scenario(
            layout=["#####", "#@A*#", "#####"],
            agent=AgentSpec(type="brain", init_params={"personality": "collector", "seed": 0}),
        )
        runner = GameRunner(scenario)
        frames = runner.run(include_history=True)

        self.assertTrue(runner.summary().won)
        self.assertEqual(len(frames), 2)
        early = frames[0].snapshot.tiles[1][2].resource
        self.assertIsNotNone(early)
        self.assertEqual(early.kind, ResourceKind.FOOD)
        self.assertIsNone(frames[1].snapshot.tiles[1][2].resource)
        self.assertIsNone(runner.env.game_map.tile_at(2, 1).resource)

    def test_broke_player_walks_past(self) -> None:
        runner = GameRunner(Scenario(layout=MARKET_STREET, seed=5), agent=EastAgent())
        first = runner.step()

        self.assertEqual(len(first.trades), 1)
        self.assertEqual(first.trades[0].message, "You leave the trader.")
        self.assertFalse(runner.env.has_trader())
        self.assertEqual(runner.summary().trades_completed, 0)

    def test_boxed_in_agent_stalls(self) -> None:
        scenario = Scenario(
            layout=["###", "#@#", "###"],
            agent=AgentSpec(type="brain", init_params={"personality": "balanced", "seed": 1}),
        )
        summary = run_single_game(scenario)
        self.assertFalse(summary.won)
        self.assertEqual(summary.reason, "no_legal_move")
        self.assertEqual(summary.turns, 0)

    def test_random_agent_respects_turn_cap(self) -> None:
        scenario = Scenario(seed=1, agent=AgentSpec(type="random", init_params={"seed": 1}))
        summary = run_single_game(scenario, max_turns=15, include_history=True)

        self.assertLessEqual(summary.turns, 15)
        self.assertIsNotNone(summary.reason)
        self.assertEqual(len(summary.frames), summary.turns)

    def test_multiple_games(self) -> None:
        scenario = Scenario(seed=2, max_turns=10, agent=AgentSpec(type="brain", init_params={"seed": 2}))
        results = run_multiple_games(scenario, num_games=3)
        self.assertEqual(len(results), 3)
        with self.assertRaises(ValueError):
            run_multiple_games(scenario, num_games=0)

    def test_missing_agent(self) -> None:
        with self.assertRaises(ValueError):
            GameRunner(Scenario(layout=MARKET_STREET))


class TestAgentFactory(unittest.TestCase):
    def test_builds_registered_types(self) -> None:
        prepared = create_agent_from_spec(AgentSpec(type="brain", name="Scout", init_params={"personality": "explorer"}))
        self.assertIsInstance(prepared.agent, BrainAgent)
        self.assertEqual(prepared.agent.name, "Scout")
        self.assertEqual(prepared.agent.personality.value, "balanced")

        self.assertIsInstance(create_agent_from_spec(AgentSpec(type="RANDOM")).agent, RandomAgent)

    def test_unknown_type(self) -> None:
        with self.assertRaises(ValueError):
            create_agent_from_spec(AgentSpec(type="oracle"))
        with self.assertRaises(ValueError):
            AgentSpec(type="")


class TestBrainTrading(unittest.TestCase):
    def test_haggles_once_then_accepts(self) -> None:
        agent = BrainAgent(personality="collector", seed=0)
        offer = TradeOffer(TradeItem.LIFE, 1, 14)

        first = agent.decide_trade(offer, gold=20, attempt=0)
        self.assertEqual(first.action, TradeAction.COUNTER)
        self.assertEqual(first.gold, 13)

        second = agent.decide_trade(offer, gold=20, attempt=1)
        self.assertEqual(second.action, TradeAction.ACCEPT)

        self.assertEqual(agent.decide_trade(offer, gold=5, attempt=0).action, TradeAction.WALK_AWAY)


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = load_settings(environ={})
        self.assertEqual(settings.log_level, "INFO")
        self.assertFalse(settings.log_json)
        self.assertIsNone(settings.seed)
        self.assertEqual(settings.max_turns, 500)

    def test_reads_prefixed_variables(self) -> None:
        settings = load_settings(
            environ={
                "SURVIVAL_LOG_LEVEL": "debug",
                "SURVIVAL_LOG_JSON": "true",
                "SURVIVAL_SEED": "9",
                "SURVIVAL_MAX_TURNS": "50",
                "LOG_LEVEL": "ERROR",
            }
        )
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertTrue(settings.log_json)
        self.assertEqual(settings.seed, 9)
        self.assertEqual(settings.max_turns, 50)

    def test_rejects_bad_values(self) -> None:
        with self.assertRaises(ValidationError):
            load_settings(environ={"SURVIVAL_LOG_LEVEL": "loud"})
        with self.assertRaises(ValidationError):
            load_settings(environ={"SURVIVAL_MAX_TURNS": "0"})


class TestCli(unittest.TestCase):
    def test_plays_and_saves(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "run.json")
            out = io.StringIO()
            with redirect_stdout(out):
                code = main(
                    [
                        "--difficulty", "medium",
                        "--personality", "risk-taking",
                        "--seed", "4",
                        "--max-turns", "25",
                        "--games", "2",
                        "--save-scenario", path,
                    ]
                )
            self.assertEqual(code, 0)
            self.assertTrue(os.path.exists(path))
            self.assertEqual(Scenario.load_json(path).seed, 4)

        self.assertIn("Won", out.getvalue())


if __name__ == "__main__":
    unittest.main()
