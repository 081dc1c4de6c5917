from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator


ENV_PREFIX = "CHESS_RULES_"


class Settings(BaseModel):
    """Runtime configuration, read from ``CHESS_RULES_*`` environment variables."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = "INFO"
    book_path: Optional[str] = Field(default=None, description="JSON opening book for /ai-move")
    seed: Optional[int] = Field(default=None, description="Seed for the random fallback")

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"unknown log level: {v!r}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for name in ("host", "port", "log_level", "book_path", "seed"):
            raw = env.get(ENV_PREFIX + name.upper())
            if raw not in (None, ""):
                values[name] = raw
        return cls(**values)
