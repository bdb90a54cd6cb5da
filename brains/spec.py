"""
AgentSpec - Serializable description of which agent drives an episode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class AgentSpec:
    """
    Agent type plus constructor parameters.

    Example:
        AgentSpec(type="brain", name="Careful", init_params={"personality": "balanced", "seed": 7})

    Attributes:
        type: Registry key (see register_agent)
        name: Optional display name
        init_params: Keyword arguments passed to the agent constructor
    """

    type: str
    name: Optional[str] = None
    init_params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.type:
            raise ValueError("AgentSpec.type must be a non-empty registry key")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "init_params": dict(self.init_params),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AgentSpec:
        return cls(
            type=data["type"],
            name=data.get("name"),
            init_params=dict(data.get("init_params") or {}),
        )
