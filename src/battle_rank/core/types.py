"""
Core types for the aggregate tables.

This module provides:
- MatchResult enum
- StatLine, the atomic total/wins/losses counter with derived win rate
- PlayerEntity, FactionEntity and RegionEntity aggregates
- LeaderboardEntry and the StatsTables container

Player, faction ("race") and region identifiers are opaque strings; the
set of each is open-ended and comes from the input records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from .models import RecordId, Stamp


class MatchResult(str, Enum):
    """Outcome of a match from one participant's side."""

    win = "win"
    loss = "loss"


@dataclass
class StatLine:
    """Win/loss counters. ``total == wins + losses`` always holds."""

    total: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0

    def record(self, result: MatchResult) -> None:
        self.total += 1
        if result is MatchResult.win:
            self.wins += 1
        else:
            self.losses += 1


@dataclass(frozen=True)
class MatchHistoryEntry:
    """One match as seen by a single player."""

    match_id: RecordId
    opponent: str
    player_race: str
    opponent_race: str
    region: str
    result: MatchResult
    timestamp: Optional[Stamp] = None
    season: Optional[Stamp] = None


@dataclass
class PlayerEntity:
    player: str
    summary: StatLine = field(default_factory=StatLine)
    by_race: dict[str, StatLine] = field(default_factory=dict)
    by_region: dict[str, StatLine] = field(default_factory=dict)
    matches: list[MatchHistoryEntry] = field(default_factory=list)

    def stat_lines(self) -> Iterator[StatLine]:
        yield self.summary
        yield from self.by_race.values()
        yield from self.by_region.values()


@dataclass
class FactionEntity:
    race: str
    summary: StatLine = field(default_factory=StatLine)
    by_region: dict[str, StatLine] = field(default_factory=dict)

    def stat_lines(self) -> Iterator[StatLine]:
        yield self.summary
        yield from self.by_region.values()


@dataclass
class RegionEntity:
    region: str
    summary: StatLine = field(default_factory=StatLine)
    players: dict[str, StatLine] = field(default_factory=dict)
    races: dict[str, StatLine] = field(default_factory=dict)

    def stat_lines(self) -> Iterator[StatLine]:
        yield self.summary
        yield from self.players.values()
        yield from self.races.values()


@dataclass(frozen=True)
class LeaderboardEntry:
    player: str
    stats: StatLine


@dataclass
class StatsTables:
    """
    The three aggregate tables produced by one run.

    Keys are entity identifiers; dict order is first-appearance order in the input.
    """

    players: dict[str, PlayerEntity] = field(default_factory=dict)
    factions: dict[str, FactionEntity] = field(default_factory=dict)
    regions: dict[str, RegionEntity] = field(default_factory=dict)

    def stat_lines(self) -> Iterator[StatLine]:
        """Every StatLine reachable from the three tables."""
        for table in (self.players, self.factions, self.regions):
            for entity in table.values():
                yield from entity.stat_lines()
