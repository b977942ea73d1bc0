"""
Match statistics accumulator.

Folds normalized match records into three cross-tabulated tables:
players, factions ("races") and regions. Every match is expanded into two
participations, one per side, and both are counted the same way, so total
wins always equal total losses and each region counts two participations
per match.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from ..core.models import MatchRecord, RecordId, Stamp
from ..core.types import (
    FactionEntity,
    MatchHistoryEntry,
    MatchResult,
    PlayerEntity,
    RegionEntity,
    StatLine,
    StatsTables,
)

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class Participation:
    """One side's view of a match."""

    match_id: RecordId
    player: str
    opponent: str
    race: str
    opponent_race: str
    region: str
    result: MatchResult
    timestamp: Stamp | None = None
    season: Stamp | None = None


def upsert(table: dict[K, V], key: K, factory: Callable[[], V]) -> V:
    """Return ``table[key]``, inserting ``factory()`` first if absent."""
    value = table.get(key)
    if value is None:
        value = table[key] = factory()
    return value


def participations(record: MatchRecord) -> tuple[Participation, Participation]:
    """Expand a match into its two participations, side A first."""
    sides = (
        (record.player_a, record.player_b, record.race_a, record.race_b),
        (record.player_b, record.player_a, record.race_b, record.race_a),
    )
    return tuple(
        Participation(
            match_id=record.id,
            player=player,
            opponent=opponent,
            race=race,
            opponent_race=opponent_race,
            region=record.region,
            result=MatchResult.win if player == record.winner else MatchResult.loss,
            timestamp=record.timestamp,
            season=record.season,
        )
        for player, opponent, race, opponent_race in sides
    )


def add_participation(tables: StatsTables, p: Participation) -> None:
    """Count one participation in every table it touches."""
    player = upsert(tables.players, p.player, lambda: PlayerEntity(p.player))
    player.summary.record(p.result)
    upsert(player.by_race, p.race, StatLine).record(p.result)
    upsert(player.by_region, p.region, StatLine).record(p.result)
    player.matches.append(
        MatchHistoryEntry(
            match_id=p.match_id,
            opponent=p.opponent,
            player_race=p.race,
            opponent_race=p.opponent_race,
            region=p.region,
            result=p.result,
            timestamp=p.timestamp,
            season=p.season,
        )
    )

    faction = upsert(tables.factions, p.race, lambda: FactionEntity(p.race))
    faction.summary.record(p.result)
    upsert(faction.by_region, p.region, StatLine).record(p.result)

    region = upsert(tables.regions, p.region, lambda: RegionEntity(p.region))
    region.summary.record(p.result)
    upsert(region.players, p.player, StatLine).record(p.result)
    upsert(region.races, p.race, StatLine).record(p.result)


def accumulate(records: Iterable[MatchRecord]) -> StatsTables:
    """
    Build fresh aggregate tables from a sequence of match records.

    Records are processed in input order; the order only affects player
    match history and dict insertion order, never counter values. Record ids
    are not checked for uniqueness.
    """
    tables = StatsTables()
    for record in records:
        for p in participations(record):
            add_participation(tables, p)
    return tables
