"""
Scenario serialization and configuration tests.
"""

import json
import tempfile
import unittest
from pathlib import Path

from brains.spec import AgentSpec
from survival.core.types import Difficulty, VisionType
from survival.scenario import Scenario, create_default_scenario, create_trading_post_scenario


class TestScenarioConfig(unittest.TestCase):
    def test_difficulty_defaults(self) -> None:
        expected = {
            Difficulty.EASY: (12, 100),
            Difficulty.MEDIUM: (16, 75),
            Difficulty.HARD: (20, 50),
        }
        for difficulty, (size, supplies) in expected.items():
            scenario = Scenario(difficulty=difficulty)
            self.assertEqual(scenario.map_size, size)
            self.assertEqual(scenario.starting_resources.food, supplies)
            self.assertEqual(scenario.starting_resources.water, supplies)

    def test_vision_radius(self) -> None:
        radii = {"focused": 3, "cautious": 4, "keen-eyed": 5, "far-sight": 8}
        for vision, radius in radii.items():
            self.assertEqual(Scenario(vision_type=vision).vision_radius, radius)

    def test_starting_overrides(self) -> None:
        scenario = Scenario(difficulty="hard", starting_food=80)
        self.assertEqual(scenario.starting_resources.food, 80)
        self.assertEqual(scenario.starting_resources.water, 50)

    def test_invalid_values(self) -> None:
        with self.assertRaises(ValueError):
            Scenario(difficulty="nightmare")
        with self.assertRaises(ValueError):
            Scenario(vision_type="x-ray")
        with self.assertRaises(ValueError):
            Scenario(max_turns=0)
        with self.assertRaises(ValueError):
            Scenario(starting_gold=-1)

    def test_next_level_carries_resources(self) -> None:
        scenario = create_default_scenario(difficulty="medium", seed=10)
        following = scenario.next_level(food=30, water=40, gold=25, lives=2)

        self.assertEqual(following.level, 2)
        self.assertEqual(following.seed, 11)
        self.assertEqual(following.difficulty, Difficulty.MEDIUM)
        self.assertEqual((following.starting_food, following.starting_water), (30, 40))
        self.assertEqual((following.starting_gold, following.starting_lives), (25, 2))
        self.assertEqual(following.agent, scenario.agent)


class TestScenarioSerialization(unittest.TestCase):
    def test_json_round_trip(self) -> None:
        scenario = create_trading_post_scenario()
        with tempfile.TemporaryDirectory() as tmp:
            path = scenario.save_json(Path(tmp) / "post.json")
            with open(path) as f:
                raw = json.load(f)
            loaded = Scenario.load_json(path)

        self.assertEqual(raw["agent"]["type"], "brain")
        self.assertEqual(raw["config"]["starting_gold"], 20)
        self.assertEqual(loaded.to_json_dict(), scenario.to_json_dict())
        self.assertEqual(loaded.layout, scenario.layout)

    def test_to_dict_keeps_agent_object(self) -> None:
        scenario = create_default_scenario(personality="balanced")
        data = scenario.to_dict()
        self.assertIsInstance(data["agent"], AgentSpec)

        rebuilt = Scenario.from_dict(data)
        self.assertEqual(rebuilt.agent, scenario.agent)
        self.assertIsNot(rebuilt.agent, scenario.agent)

    def test_clone_is_independent(self) -> None:
        scenario = create_trading_post_scenario()
        copy = scenario.clone()
        copy.layout[1] = "#@.........#"
        copy.agent.init_params["personality"] = "risk-taking"

        self.assertEqual(scenario.layout[1], "#@..M......#")
        self.assertEqual(scenario.agent.init_params["personality"], "balanced")

    def test_bad_agent_definition(self) -> None:
        with self.assertRaises(TypeError):
            Scenario.from_dict({"config": {}, "agent": "brain"})

    def test_default_builder(self) -> None:
        scenario = create_default_scenario(difficulty=Difficulty.HARD, personality="risk-taking", seed=3)
        self.assertEqual(scenario.vision_type, VisionType.KEEN_EYED)
        self.assertEqual(scenario.max_turns, 500)
        self.assertEqual(scenario.agent.type, "brain")
        self.assertEqual(scenario.agent.init_params, {"personality": "risk-taking", "seed": 3})


if __name__ == "__main__":
    unittest.main()
