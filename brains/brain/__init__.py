"""Personality-driven brains: strategies, memory and the runner-facing agent."""

from .agent import BrainAgent
from .brain import Brain
from .strategies import (
    CandidateMove,
    DecisionContext,
    FallbackWeights,
    MoveDecision,
    Personality,
    PersonalityProfile,
    create_strategy,
    possible_moves,
)

__all__ = [
    "Brain",
    "BrainAgent",
    "CandidateMove",
    "DecisionContext",
    "FallbackWeights",
    "MoveDecision",
    "Personality",
    "PersonalityProfile",
    "create_strategy",
    "possible_moves",
]
