"""
Global leaderboard ranking.

Players are ordered by descending win rate; equal win rates fall back to
ascending player identifier so the persisted order is reproducible.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from ..core.types import LeaderboardEntry, PlayerEntity, StatLine


def ranking_key(player: str, stats: StatLine) -> tuple[float, str]:
    return (-stats.win_rate, player)


def rank_stat_lines(lines: Mapping[str, StatLine]) -> list[tuple[str, StatLine]]:
    """Order (identifier, StatLine) pairs by the leaderboard ranking."""
    return sorted(lines.items(), key=lambda item: ranking_key(*item))


def build_leaderboard(
    players: Mapping[str, PlayerEntity] | Iterable[PlayerEntity],
    min_games: int = 0,
) -> list[LeaderboardEntry]:
    """
    Rank players from a finalized player table.

    Args:
        players: Player table (or its entities); win rates must be finalized
        min_games: Leave out players with fewer overall games than this

    Returns:
        Leaderboard entries, best first
    """
    entities = players.values() if isinstance(players, Mapping) else players
    entries = [
        LeaderboardEntry(player=entity.player, stats=entity.summary)
        for entity in entities
        if entity.summary.total >= min_games
    ]
    entries.sort(key=lambda e: ranking_key(e.player, e.stats))
    return entries
