"""Canonical player models shared across ingestion and optimizer layers."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


_DEFENSE_POSITIONS = {"DEF", "DST", "D/ST", "D", "DEFENSE"}


def normalize_position(position: str) -> str:
    text = (position or "").strip().upper()
    if text in _DEFENSE_POSITIONS:
        return "DEF"
    return text


class RosterPlayer(BaseModel):
    """A rostered player with the slot they currently occupy."""

    player_id: str = Field(..., min_length=1)
    name: str
    position: str
    team: str = ""
    projection_key: Optional[str] = None
    lineup_slot: Optional[str] = None
    is_starter: bool = False

    model_config = ConfigDict(frozen=True)

    @field_validator("position", mode="before")
    @classmethod
    def _canonical_position(cls, value: str) -> str:
        return normalize_position(value)


class AvailablePlayer(BaseModel):
    """Unrostered player offered by a waiver pool."""

    player_key: str = Field(..., min_length=1)
    name: str
    position: str
    team: str = "FA"
    projected_points: float

    model_config = ConfigDict(frozen=True)

    @field_validator("position", mode="before")
    @classmethod
    def _canonical_position(cls, value: str) -> str:
        return normalize_position(value)


class TeamSnapshot(BaseModel):
    """Roster plus league lineup settings for a single team and week."""

    team_name: str = ""
    roster: List[RosterPlayer] = Field(default_factory=list)
    roster_positions: Optional[List[str]] = None

    model_config = ConfigDict(frozen=True)
