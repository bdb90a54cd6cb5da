"""
Agent interface and implementations for the survival simulator.

This module provides:
- BaseAgent: Abstract interface for all agents
- BrainAgent: Personality-driven brain (collector, balanced, risk-taking)
- RandomAgent: Random legal moves, for baselines and tests
"""

from .base_agent import BaseAgent, TradeAction, TradeDecision
from .factory import PreparedAgent, create_agent_from_spec
from .registry import register_agent, registered_agent_types, resolve_agent_class
from .spec import AgentSpec
from .brain import Brain, BrainAgent, MoveDecision, Personality, create_strategy
from .random_agent import RandomAgent

__all__ = [
    "AgentSpec",
    "BaseAgent",
    "Brain",
    "BrainAgent",
    "MoveDecision",
    "Personality",
    "PreparedAgent",
    "RandomAgent",
    "TradeAction",
    "TradeDecision",
    "create_agent_from_spec",
    "create_strategy",
    "register_agent",
    "registered_agent_types",
    "resolve_agent_class",
]
