"""
Agent registry: maps spec type strings to agent classes.
"""

from __future__ import annotations

from typing import Callable, Dict, Type, TypeVar

from .base_agent import BaseAgent

AgentT = TypeVar("AgentT", bound=Type[BaseAgent])

_REGISTRY: Dict[str, Type[BaseAgent]] = {}


def register_agent(name: str) -> Callable[[AgentT], AgentT]:
    """Class decorator registering an agent under ``name``."""

    def decorator(cls: AgentT) -> AgentT:
        key = name.strip().lower()
        existing = _REGISTRY.get(key)
        if existing is not None and existing is not cls:
            raise ValueError(f"Agent type '{key}' already registered to {existing.__name__}")
        _REGISTRY[key] = cls
        return cls

    return decorator


def resolve_agent_class(name: str) -> Type[BaseAgent]:
    key = name.strip().lower()
    try:
        return _REGISTRY[key]
    except KeyError:
        known = ", ".join(sorted(_REGISTRY)) or "<none>"
        raise ValueError(f"Unknown agent type '{name}'. Registered: {known}") from None


def registered_agent_types() -> list[str]:
    return sorted(_REGISTRY)
