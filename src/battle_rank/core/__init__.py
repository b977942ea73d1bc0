"""
Core module for battle rank.

This module provides the foundational components:
- Configuration management (config.py)
- Match record model (models.py)
- Aggregate table types (types.py)
- Shared HTTP client infrastructure (http.py)

Usage:
    from battle_rank.core import Settings, get_settings
    from battle_rank.core import MatchRecord, StatLine, StatsTables
    from battle_rank.core.http import BaseApiClient, ExternalAPIError
"""

# Configuration
from .config import Settings, get_settings

# Models
from .models import MatchRecord

# Types
from .types import (
    FactionEntity,
    LeaderboardEntry,
    MatchHistoryEntry,
    MatchResult,
    PlayerEntity,
    RegionEntity,
    StatLine,
    StatsTables,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Models
    "MatchRecord",
    # Types
    "MatchResult",
    "StatLine",
    "MatchHistoryEntry",
    "PlayerEntity",
    "FactionEntity",
    "RegionEntity",
    "LeaderboardEntry",
    "StatsTables",
]
