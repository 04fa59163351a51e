"""Runtime settings read from the environment."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "RCALC_"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    log_level: str = Field("WARNING", description="Level for the rcalc package logger")
    strict: bool = Field(False, description="Abort searches on expression evaluation errors")
    max_results: Optional[int] = Field(None, ge=1, description="Cap on listed matches")

    @field_validator("log_level")
    @classmethod
    def _level_name(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got '{v}'")
        return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from RCALC_* variables.

    Unset variables keep their defaults; malformed values raise
    pydantic.ValidationError.
    """
    env = os.environ if environ is None else environ
    raw = {}
    for field_name in Settings.model_fields:
        value = env.get(ENV_PREFIX + field_name.upper())
        if value is not None and value != "":
            raw[field_name] = value
    return Settings(**raw)
