"""Movie Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - MovieWrite.name: 1-500 chars after stripping
    - MovieWrite.time: non-empty list of show times; a lone string becomes [string]
    - MovieWrite.rating: required finite number (form bodies send it as a string)
    - MovieResponse serializes ids and timestamps as strings

Design Decisions:
    - One write model for create and update: PUT replaces the whole movie
    - field_validator for side-effect-free transforms (strip, wrap) — keeps models pure
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MovieWrite(BaseModel):
    """Movie create/replace payload."""
    name: str = Field(min_length=1, max_length=500)
    time: list[str] = Field(min_length=1)
    rating: float = Field(allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v

    @field_validator("time", mode="before")
    @classmethod
    def wrap_single_time(cls, v):
        if isinstance(v, str):
            return [v]
        return v


class MovieResponse(BaseModel):
    """Movie response — public-facing movie data."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    time: list[str]
    rating: float
    created_at: datetime
    updated_at: datetime
