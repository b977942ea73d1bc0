"""
Battle Rank Statistics

Builds win/loss statistics from a collection of match-result records. Each
record names two players, their races (factions), the region of play and
the winner. A rebuild produces:

- one document per player (overall, by race, by region, match history)
- one document per race (overall, by region)
- one document per region (overall, per player, per race)
- a global leaderboard ordered by win rate

Usage:
    from battle_rank import build_stats, run_rebuild
    from battle_rank.providers import get_source
    from battle_rank.export import JsonDirectoryStore

    result = await run_rebuild(get_source("github_issues"), JsonDirectoryStore("data"))
"""

from .aggregators import accumulate, build_leaderboard, finalize, normalize_payload
from .core import MatchRecord, StatLine, StatsTables
from .pipeline import RebuildResult, build_stats, run_rebuild

__version__ = "1.0.0"

__all__ = [
    # Pipeline
    "build_stats",
    "run_rebuild",
    "RebuildResult",
    # Aggregation
    "normalize_payload",
    "accumulate",
    "finalize",
    "build_leaderboard",
    # Types
    "MatchRecord",
    "StatLine",
    "StatsTables",
]
