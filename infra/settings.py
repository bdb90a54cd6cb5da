"""Runtime settings read from the process environment (and a local .env file)."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "SURVIVAL_"

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseModel):
    log_level: str = Field(
        default="INFO",
        description="Root logging level for entrypoints.",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines instead of plain text.",
    )
    seed: Optional[int] = Field(
        default=None,
        description="Default RNG seed for scenarios that do not set one.",
    )
    max_turns: int = Field(
        default=500,
        ge=1,
        description="Turn cap applied when a scenario does not set max_turns.",
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LEVELS:
            raise ValueError(f"Unknown log level: {value!r}")
        return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from SURVIVAL_* variables.

    When ``environ`` is omitted, a .env file in the working directory is
    loaded first (existing variables win) and os.environ is read.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    values = {}
    for field_name in Settings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if raw is not None and raw != "":
            values[field_name] = raw
    return Settings.model_validate(values)
