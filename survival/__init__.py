"""
Survival - A turn-based, partially observable grid survival simulation.

An agent crosses a walled map toward a trophy while food and water drain
with every step, picking up supplies and haggling with merchants on the way.

Quick Start:
    from survival import SurvivalEnv, create_default_scenario
    from survival.mechanics import Vision

    env = SurvivalEnv()
    state = env.reset(create_default_scenario(seed=7))

    vision = Vision(state["snapshot"])
    route = vision.closest_water()
    if route is not None and route.first_step is not None:
        state, done, info = env.step(route.first_step.dx, route.first_step.dy)
"""

__version__ = "1.0.0"

# Main environment interface
from .environment import StepInfo, SurvivalEnv

# Scenario system
from .scenario import (
    Scenario,
    create_default_scenario,
    create_trading_post_scenario,
)

# Core types available at package level
from .core import (
    Difficulty,
    GameSnapshot,
    GridPos,
    MerchantState,
    MerchantVariant,
    MoveDir,
    ResourceKind,
    TerrainType,
    VisionType,
)

__all__ = [
    # Main interface
    "SurvivalEnv",
    "StepInfo",

    # Scenario system
    "Scenario",
    "create_default_scenario",
    "create_trading_post_scenario",

    # Core types
    "Difficulty",
    "GameSnapshot",
    "GridPos",
    "MerchantState",
    "MerchantVariant",
    "MoveDir",
    "ResourceKind",
    "TerrainType",
    "VisionType",
]
