"""
Match statistics aggregators.

These turn raw match payloads into finalized aggregate tables:

    normalize_payloads -> accumulate -> finalize -> build_leaderboard

Design: pure, in-memory functions; nothing here performs I/O.
"""

from .accumulator import accumulate
from .finalizer import compute_win_rate, finalize
from .leaderboard import build_leaderboard
from .normalizer import NormalizeResult, SkipReason, normalize_payload, normalize_payloads

__all__ = [
    "NormalizeResult",
    "SkipReason",
    "normalize_payload",
    "normalize_payloads",
    "accumulate",
    "compute_win_rate",
    "finalize",
    "build_leaderboard",
]
