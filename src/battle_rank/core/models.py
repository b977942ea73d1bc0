"""
Pydantic models for match records.

MatchRecord is the validated, immutable form of one externally supplied
match payload. Field aliases follow the payload keys (playerA, raceA, ...).
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Identifier = str
RecordId = Union[int, str]
# Timestamps and seasons are echoed as given (ISO string, epoch number, "S3", 2024, ...)
Stamp = Union[int, float, str]


class MatchRecord(BaseModel):
    """One completed match between two players."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    id: RecordId
    player_a: Identifier = Field(alias="playerA", min_length=1)
    player_b: Identifier = Field(alias="playerB", min_length=1)
    race_a: Identifier = Field(alias="raceA", min_length=1)
    race_b: Identifier = Field(alias="raceB", min_length=1)
    winner: Identifier = Field(min_length=1)
    region: Identifier = Field(min_length=1)
    timestamp: Optional[Stamp] = None
    season: Optional[Stamp] = None

    @model_validator(mode="after")
    def _check_participants(self) -> "MatchRecord":
        if self.player_a == self.player_b:
            raise ValueError("playerA and playerB must be different players")
        if self.winner not in (self.player_a, self.player_b):
            raise ValueError("winner must be playerA or playerB")
        return self
