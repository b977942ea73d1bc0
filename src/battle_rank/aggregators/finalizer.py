"""
Win-rate finalization.

Win rates are ``wins / total`` rounded half away from zero to three
decimals, computed on the exact ratio with ``decimal`` so that ties like
0.3125 always round up regardless of binary float representation.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ..core.types import StatLine, StatsTables

WIN_RATE_PLACES = Decimal("0.001")


def compute_win_rate(wins: int, total: int) -> float:
    """Return wins/total rounded to 3 decimals, or 0.0 when total is 0."""
    if total == 0:
        return 0.0
    ratio = Decimal(wins) / Decimal(total)
    return float(ratio.quantize(WIN_RATE_PLACES, rounding=ROUND_HALF_UP))


def finalize_stat_line(stat: StatLine) -> StatLine:
    stat.win_rate = compute_win_rate(stat.wins, stat.total)
    return stat


def finalize(tables: StatsTables) -> StatsTables:
    """Set win_rate on every StatLine in the tables, in place. Idempotent."""
    for stat in tables.stat_lines():
        finalize_stat_line(stat)
    return tables
