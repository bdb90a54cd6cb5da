"""
Scenario system for creating and managing game setups.

Provides type-safe Python definitions for scenarios and JSON serialization.
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from brains.spec import AgentSpec
from infra.logger import get_logger
from infra.paths import PROJECT_ROOT, SCENARIO_STORAGE_DIR

from .core.types import (
    DEFAULT_PLAYER_LIVES,
    DEFAULT_VISION_RADIUS,
    DIFFICULTY_CONFIG,
    VISION_RADIUS_CONFIG,
    Difficulty,
    StartingResources,
    VisionType,
)

logger = get_logger(__name__)


class Scenario:
    """
    A complete, self-contained game definition.

    A scenario includes EVERYTHING needed to initialize an environment:
    - Difficulty (map size and starting food/water)
    - Vision type (sight radius)
    - Random seed (map generation, merchant offers, acceptance rolls)
    - Optional fixed ASCII layout instead of a generated map
    - Optional starting overrides (carrying resources into a next level)
    - The agent that plays it

    Example:
        scenario = Scenario(
            difficulty=Difficulty.MEDIUM,
            vision_type=VisionType.CAUTIOUS,
            seed=7,
            agent=AgentSpec(type="brain", init_params={"personality": "balanced"}),
        )
        scenario.save_json("my_scenario.json")
        scenario = Scenario.load_json("my_scenario.json")
    """

    def __init__(
        self,
        difficulty: Difficulty | str = Difficulty.EASY,
        vision_type: VisionType | str = VisionType.KEEN_EYED,
        seed: Optional[int] = None,
        max_turns: Optional[int] = None,
        layout: Optional[Sequence[str]] = None,
        agent: Optional[AgentSpec] = None,
        starting_food: Optional[int] = None,
        starting_water: Optional[int] = None,
        starting_gold: int = 0,
        starting_lives: int = DEFAULT_PLAYER_LIVES,
        level: int = 1,
    ):
        """
        Initialize a scenario.

        Args:
            difficulty: Map size and default starting food/water
            vision_type: Sight radius preset
            seed: Random seed for reproducibility (None = random)
            max_turns: Optional hard cap on turns
            layout: Optional ASCII layout (see survival.world.game_map)
            agent: Optional AgentSpec for the GameRunner
            starting_food, starting_water: Override difficulty defaults
            starting_gold, starting_lives: Player's initial gold and lives
            level: Level number (informational, carried across levels)
        """
        self.difficulty = Difficulty(difficulty)
        self.vision_type = VisionType(vision_type)
        self.seed = seed
        self.max_turns = max_turns
        self.layout: Optional[List[str]] = list(layout) if layout is not None else None
        self.agent = agent
        self.starting_food = starting_food
        self.starting_water = starting_water
        self.starting_gold = starting_gold
        self.starting_lives = starting_lives
        self.level = level

        if max_turns is not None and max_turns < 1:
            raise ValueError(f"max_turns must be >= 1: {max_turns}")
        if starting_gold < 0 or starting_lives < 0:
            raise ValueError("Starting gold and lives cannot be negative")

    # ------------------------------------------------------------------#
    # Derived configuration
    # ------------------------------------------------------------------#
    @property
    def map_size(self) -> int:
        return DIFFICULTY_CONFIG[self.difficulty].size

    @property
    def vision_radius(self) -> int:
        return VISION_RADIUS_CONFIG.get(self.vision_type, DEFAULT_VISION_RADIUS)

    @property
    def starting_resources(self) -> StartingResources:
        """Food/water the player starts with (and brains base thresholds on)."""
        base = DIFFICULTY_CONFIG[self.difficulty].starting
        return StartingResources(
            food=base.food if self.starting_food is None else self.starting_food,
            water=base.water if self.starting_water is None else self.starting_water,
        )

    def next_level(self, food: int, water: int, gold: int, lives: int) -> Scenario:
        """Scenario for the following level, carrying the player's resources."""
        return Scenario(
            difficulty=self.difficulty,
            vision_type=self.vision_type,
            seed=None if self.seed is None else self.seed + 1,
            max_turns=self.max_turns,
            agent=self.agent,
            starting_food=food,
            starting_water=water,
            starting_gold=gold,
            starting_lives=lives,
            level=self.level + 1,
        )

    def clone(self) -> Scenario:
        """Create a deep copy of this scenario."""
        return Scenario.from_json_dict(self.to_json_dict())

    # ------------------------------------------------------------------#
    # Serialization
    # ------------------------------------------------------------------#
    def _config(self) -> Dict[str, Any]:
        return {
            "difficulty": self.difficulty.value,
            "vision_type": self.vision_type.value,
            "seed": self.seed,
            "max_turns": self.max_turns,
            "starting_food": self.starting_food,
            "starting_water": self.starting_water,
            "starting_gold": self.starting_gold,
            "starting_lives": self.starting_lives,
            "level": self.level,
        }

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format for env.reset().

        Returns:
            Dict with config, optional layout and the AgentSpec object
        """
        data: Dict[str, Any] = {"config": self._config()}
        if self.layout is not None:
            data["layout"] = list(self.layout)
        if self.agent is not None:
            data["agent"] = self.agent
        return data

    def to_json_dict(self) -> Dict[str, Any]:
        """
        Serialize to JSON-compatible dictionary.

        Returns:
            JSON-serializable dictionary
        """
        data = self.to_dict()
        if self.agent is not None:
            data["agent"] = self.agent.to_dict()
        return data

    @classmethod
    def from_json_dict(cls, data: Dict[str, Any]) -> Scenario:
        """
        Deserialize from JSON-compatible dictionary.

        Args:
            data: Dictionary from to_json_dict()

        Returns:
            Reconstructed Scenario
        """
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Scenario:
        """
        Deserialize from either to_dict() or to_json_dict() output.

        The agent may be an AgentSpec or its dict form.
        """
        config = data.get("config", {})
        return cls(
            difficulty=config.get("difficulty", Difficulty.EASY.value),
            vision_type=config.get("vision_type", VisionType.KEEN_EYED.value),
            seed=config.get("seed"),
            max_turns=config.get("max_turns"),
            layout=data.get("layout"),
            agent=cls._deserialize_agent(data.get("agent")),
            starting_food=config.get("starting_food"),
            starting_water=config.get("starting_water"),
            starting_gold=config.get("starting_gold", 0),
            starting_lives=config.get("starting_lives", DEFAULT_PLAYER_LIVES),
            level=config.get("level", 1),
        )

    @staticmethod
    def _deserialize_agent(data: Any) -> Optional[AgentSpec]:
        if data is None:
            return None
        if isinstance(data, AgentSpec):
            return AgentSpec.from_dict(data.to_dict())
        if isinstance(data, dict):
            return AgentSpec.from_dict(data)
        raise TypeError(f"Agent definition must be AgentSpec or dict, got {type(data)}")

    def save_json(self, filepath: str | Path | None = None, indent: int = 2) -> Path:
        """
        Save scenario to JSON file.

        Args:
            filepath: Path to save to. If None, saves under storage/scenarios with a timestamped name.
            indent: JSON indentation (default: 2)

        Returns:
            The path written
        """
        if filepath is None:
            base_dir = SCENARIO_STORAGE_DIR
            base_dir.mkdir(parents=True, exist_ok=True)
            timestamp = time.strftime("%Y%m%d_%H%M%S")
            filepath = base_dir / f"scenario_{timestamp}.json"
        else:
            filepath = Path(filepath)
            if not filepath.is_absolute():
                filepath = PROJECT_ROOT / filepath
            filepath.parent.mkdir(parents=True, exist_ok=True)

        logger.info("Saving scenario JSON to %s", filepath)
        with open(filepath, "w") as f:
            json.dump(self.to_json_dict(), f, indent=indent, ensure_ascii=False)
        return filepath

    @classmethod
    def load_json(cls, filepath: str | Path) -> Scenario:
        """
        Load scenario from JSON file.

        Args:
            filepath: Path to load from

        Returns:
            Loaded Scenario
        """
        with open(filepath, "r") as f:
            data = json.load(f)
        return cls.from_json_dict(data)

    def __str__(self) -> str:
        source = "layout" if self.layout is not None else f"seed={self.seed}"
        return f"Scenario({self.difficulty.value}, {self.vision_type.value}, {source})"

    def __repr__(self) -> str:
        return (
            f"Scenario(difficulty={self.difficulty}, vision_type={self.vision_type}, "
            f"seed={self.seed}, max_turns={self.max_turns}, agent={self.agent})"
        )


# =============================================================================
# SCENARIO BUILDERS (Examples/Templates)
# =============================================================================

def create_default_scenario(
    difficulty: Difficulty | str = Difficulty.EASY,
    personality: str = "collector",
    seed: Optional[int] = 42,
    vision_type: VisionType | str = VisionType.KEEN_EYED,
    max_turns: Optional[int] = 500,
) -> Scenario:
    """Generated map driven by a personality brain."""
    return Scenario(
        difficulty=difficulty,
        vision_type=vision_type,
        seed=seed,
        max_turns=max_turns,
        agent=AgentSpec(
            type="brain",
            name=f"{personality.title()} Brain",
            init_params={"personality": personality, "seed": seed},
        ),
    )


def create_trading_post_scenario() -> Scenario:
    """
    Small fixed map with one merchant of each variant on the way to the goal.
    """
    return Scenario(
        difficulty=Difficulty.EASY,
        vision_type=VisionType.KEEN_EYED,
        seed=7,
        max_turns=100,
        starting_gold=20,
        layout=[
            "############",
            "#@..M......#",
            "#.##.####..#",
            "#..A.....V.#",
            "#.#####.##.#",
            "#..S...$...#",
            "#.####.###.#",
            "#...G......#",
            "#.##.#####.#",
            "#..d.f.m..*#",
            "#.........s#",
            "############",
        ],
        agent=AgentSpec(type="brain", name="Trader Brain", init_params={"personality": "balanced", "seed": 7}),
    )


if __name__ == "__main__":
    # Can be run via python -m survival.scenario
    from infra.logger import configure_logging

    configure_logging(level="INFO", json=True)
    create_default_scenario().save_json()
