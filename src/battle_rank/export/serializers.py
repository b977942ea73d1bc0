"""
Output document shapes.

Downstream display code reads these documents, so the key names and
nesting here are a public contract:

    player:      {player, summary, byRace, byRegion, matches: [...]}
    race:        {race, summary, byRegion}
    region:      {region, summary, players: [...], races}
    leaderboard: {updatedAt, players: [...]}
"""

from __future__ import annotations

from typing import Any, Iterable

from ..aggregators.leaderboard import rank_stat_lines
from ..core.types import (
    FactionEntity,
    LeaderboardEntry,
    MatchHistoryEntry,
    PlayerEntity,
    RegionEntity,
    StatLine,
)


def stat_line_to_dict(stat: StatLine) -> dict[str, Any]:
    return {
        "total": stat.total,
        "wins": stat.wins,
        "losses": stat.losses,
        "winRate": stat.win_rate,
    }


def _stat_map(lines: dict[str, StatLine]) -> dict[str, dict[str, Any]]:
    return {key: stat_line_to_dict(stat) for key, stat in lines.items()}


def _ranked_row(player: str, stat: StatLine) -> dict[str, Any]:
    return {"player": player, **stat_line_to_dict(stat)}


def history_entry_to_dict(entry: MatchHistoryEntry) -> dict[str, Any]:
    return {
        "id": entry.match_id,
        "opponent": entry.opponent,
        "playerRace": entry.player_race,
        "opponentRace": entry.opponent_race,
        "region": entry.region,
        "result": entry.result.value,
        "timestamp": entry.timestamp,
        "season": entry.season,
    }


def player_to_dict(player: PlayerEntity) -> dict[str, Any]:
    return {
        "player": player.player,
        "summary": stat_line_to_dict(player.summary),
        "byRace": _stat_map(player.by_race),
        "byRegion": _stat_map(player.by_region),
        "matches": [history_entry_to_dict(m) for m in player.matches],
    }


def faction_to_dict(faction: FactionEntity) -> dict[str, Any]:
    return {
        "race": faction.race,
        "summary": stat_line_to_dict(faction.summary),
        "byRegion": _stat_map(faction.by_region),
    }


def region_to_dict(region: RegionEntity) -> dict[str, Any]:
    """Region players are listed in leaderboard order."""
    return {
        "region": region.region,
        "summary": stat_line_to_dict(region.summary),
        "players": [_ranked_row(p, s) for p, s in rank_stat_lines(region.players)],
        "races": _stat_map(region.races),
    }


def leaderboard_to_dict(entries: Iterable[LeaderboardEntry], updated_at: str) -> dict[str, Any]:
    return {
        "updatedAt": updated_at,
        "players": [_ranked_row(e.player, e.stats) for e in entries],
    }
