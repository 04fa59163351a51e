"""Pydantic models for search requests and reports."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from rcalc.candidate import MAX_SLOTS
from rcalc.series import E_SERIES


# --- Requests ---

class SearchRequest(BaseModel):
    """A complete search: one series name per slot plus textual bounds."""
    slots: list[str] = Field(default_factory=list, max_length=MAX_SLOTS, description="Series name per slot (R1 first)")
    constraints: list[str] = Field(default_factory=list, description="Bounds of the form 'expr op target'")
    strict: bool = Field(False, description="Abort on expression evaluation errors instead of rejecting")
    limit: Optional[int] = Field(None, ge=1, description="Maximum number of matches to report")
    best_only: bool = Field(False, description="Report only the matches sharing the lowest error")

    @field_validator("slots")
    @classmethod
    def _known_series(cls, v: list[str]) -> list[str]:
        names = []
        for name in v:
            key = name.strip().upper()
            if key not in E_SERIES:
                raise ValueError(f"Unknown series '{name}'. Must be one of: {list(E_SERIES.keys())}")
            names.append(key)
        return names


# --- Reports ---

class MatchRecord(BaseModel):
    rank: int = Field(..., ge=1)
    error: float = Field(..., ge=0, description="Composite error")
    error_ppb: int = Field(..., ge=0, description="Error in parts per billion, used for ranking")
    values: list[float]
    display: str = ""


class SearchReport(BaseModel):
    """Outcome of a search that accepted at least one candidate."""
    slots: list[str]
    constraints: list[str]
    combinations: int
    accepted: int
    best_error: float
    matches: list[MatchRecord]
