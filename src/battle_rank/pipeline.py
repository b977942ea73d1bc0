"""
Full rebuild pipeline.

    source.fetch_payloads -> normalize -> accumulate -> finalize
        -> build_leaderboard -> materialize -> store.persist

Retrieval completes before aggregation starts. Every run starts from empty
tables; nothing is read back from previous output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from .aggregators import accumulate, build_leaderboard, finalize, normalize_payloads
from .core.types import LeaderboardEntry, StatsTables
from .export.writer import EntityStore, materialize
from .providers.base import RawPayload, RecordSourceProtocol

logger = logging.getLogger(__name__)


@dataclass
class RebuildResult:
    """Summary of one rebuild."""

    payloads: int
    records: int
    skipped: dict[str, int] = field(default_factory=dict)
    tables: StatsTables = field(default_factory=StatsTables)
    leaderboard: list[LeaderboardEntry] = field(default_factory=list)
    documents_written: int = 0
    updated_at: str = ""

    @property
    def skipped_total(self) -> int:
        return sum(self.skipped.values())


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_stats(
    payloads: Iterable[RawPayload],
    *,
    min_games: int = 0,
    skipped: Optional[dict[str, int]] = None,
) -> tuple[StatsTables, list[LeaderboardEntry], int]:
    """
    Run the in-memory part of the pipeline.

    Returns:
        (finalized tables, leaderboard, number of records admitted)
    """
    records = list(normalize_payloads(payloads, skipped))
    tables = finalize(accumulate(records))
    leaderboard = build_leaderboard(tables.players, min_games=min_games)
    return tables, leaderboard, len(records)


async def run_rebuild(
    source: RecordSourceProtocol,
    store: EntityStore,
    *,
    min_games: int = 0,
    clock: Callable[[], datetime] | None = None,
) -> RebuildResult:
    """
    Fetch all records, rebuild every aggregate and persist the output.

    Raises:
        RecordSourceError: Retrieval failed; nothing is written
        PersistenceError: Output could not be written
    """
    try:
        payloads = await source.fetch_payloads()
    finally:
        await source.close()
    logger.info("Retrieved %d payloads from %s", len(payloads), source.source_name)

    skipped: dict[str, int] = {}
    tables, leaderboard, record_count = build_stats(payloads, min_games=min_games, skipped=skipped)
    logger.info("Admitted %d match records, skipped %d", record_count, sum(skipped.values()))
    for reason, count in sorted(skipped.items()):
        logger.info("  skipped %d payloads: %s", count, reason)
    logger.info(
        "Aggregated %d players, %d races, %d regions",
        len(tables.players),
        len(tables.factions),
        len(tables.regions),
    )

    updated_at = utc_timestamp(clock() if clock else None)
    bundle = materialize(tables, leaderboard, updated_at)
    written = store.persist(bundle)

    return RebuildResult(
        payloads=len(payloads),
        records=record_count,
        skipped=skipped,
        tables=tables,
        leaderboard=leaderboard,
        documents_written=written,
        updated_at=updated_at,
    )
