"""
Output materialization.

``materialize`` decides what documents a run emits; an ``EntityStore``
decides where they go. ``JsonDirectoryStore`` lays them out as:

    <root>/players/<player>.json
    <root>/races/<race>.json
    <root>/regions/<region>.json
    <root>/leaderboard.json

All files are written to a staging directory first and swapped into place
only once every write has succeeded, so a failed run leaves the previous
output intact.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable
from urllib.parse import quote

from ..core.types import LeaderboardEntry, StatsTables
from .serializers import faction_to_dict, leaderboard_to_dict, player_to_dict, region_to_dict

logger = logging.getLogger(__name__)

PLAYERS_DIR = "players"
RACES_DIR = "races"
REGIONS_DIR = "regions"
LEADERBOARD_FILE = "leaderboard.json"

# Encoded names stay well under the common 255-byte file name limit
MAX_NAME_LENGTH = 200
DIGEST_LENGTH = 16


class PersistenceError(Exception):
    """Raised when output documents cannot be written."""
    pass


@dataclass
class OutputBundle:
    """Every document produced by one run, keyed by entity identifier."""

    players: dict[str, dict[str, Any]] = field(default_factory=dict)
    races: dict[str, dict[str, Any]] = field(default_factory=dict)
    regions: dict[str, dict[str, Any]] = field(default_factory=dict)
    leaderboard: dict[str, Any] = field(default_factory=dict)

    @property
    def document_count(self) -> int:
        return len(self.players) + len(self.races) + len(self.regions) + 1


def materialize(
    tables: StatsTables,
    leaderboard: Iterable[LeaderboardEntry],
    updated_at: str,
) -> OutputBundle:
    """Serialize finalized tables and the leaderboard into output documents."""
    return OutputBundle(
        players={key: player_to_dict(p) for key, p in tables.players.items()},
        races={key: faction_to_dict(f) for key, f in tables.factions.items()},
        regions={key: region_to_dict(r) for key, r in tables.regions.items()},
        leaderboard=leaderboard_to_dict(leaderboard, updated_at),
    )


def entity_filename(identifier: str) -> str:
    """
    File name for an entity; any identifier maps to a distinct, safe name.

    Identifiers are percent-encoded. Encoded names longer than
    MAX_NAME_LENGTH are cut short and suffixed with ``+`` and a digest of
    the full identifier; ``quote`` always encodes ``+``, so shortened names
    never collide with plain ones.
    """
    name = quote(identifier, safe="")
    if name in (".", ".."):
        name = name.replace(".", "%2E")
    if len(name) > MAX_NAME_LENGTH:
        digest = hashlib.sha256(identifier.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]
        stem = name[: MAX_NAME_LENGTH - DIGEST_LENGTH - 1]
        # don't leave half an escape sequence behind
        partial = stem.find("%", len(stem) - 2)
        if partial != -1:
            stem = stem[:partial]
        name = f"{stem}+{digest}"
    return f"{name}.json"


class EntityStore(ABC):
    """Persistence capability for output documents."""

    @abstractmethod
    def persist(self, bundle: OutputBundle) -> int:
        """
        Persist every document in the bundle.

        Returns:
            Number of documents written

        Raises:
            PersistenceError: If any document cannot be written
        """
        ...


class JsonDirectoryStore(EntityStore):
    """Write documents as JSON files under a root directory."""

    def __init__(self, root: str | Path, indent: int = 2):
        self.root = Path(root)
        self.indent = indent

    def _write_json(self, path: Path, document: dict[str, Any]) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=self.indent, ensure_ascii=False)

    def _write_group(self, directory: Path, documents: dict[str, dict[str, Any]]) -> None:
        directory.mkdir()
        for identifier, document in documents.items():
            self._write_json(directory / entity_filename(identifier), document)

    def _swap_in(self, staging: Path, names: list[str]) -> None:
        """Replace each target with its staged copy, restoring on failure."""
        backup = staging / ".previous"
        backup.mkdir()
        moved: list[str] = []
        try:
            for name in names:
                target = self.root / name
                if target.exists():
                    os.replace(target, backup / name)
                moved.append(name)
                os.replace(staging / name, target)
        except OSError:
            for name in moved:
                target = self.root / name
                if target.is_dir():
                    shutil.rmtree(target)
                elif target.exists():
                    target.unlink()
                if (backup / name).exists():
                    os.replace(backup / name, target)
            raise

    def persist(self, bundle: OutputBundle) -> int:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=".staging-", dir=self.root))
        except OSError as e:
            raise PersistenceError(f"Cannot prepare output directory {self.root}: {e}") from e

        try:
            self._write_group(staging / PLAYERS_DIR, bundle.players)
            self._write_group(staging / RACES_DIR, bundle.races)
            self._write_group(staging / REGIONS_DIR, bundle.regions)
            self._write_json(staging / LEADERBOARD_FILE, bundle.leaderboard)
            self._swap_in(staging, [PLAYERS_DIR, RACES_DIR, REGIONS_DIR, LEADERBOARD_FILE])
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Writing output to {self.root} failed: {e}") from e
        finally:
            shutil.rmtree(staging, ignore_errors=True)

        count = bundle.document_count
        logger.info(
            "Wrote %d documents to %s (%d players, %d races, %d regions)",
            count,
            self.root,
            len(bundle.players),
            len(bundle.races),
            len(bundle.regions),
        )
        return count


def load_leaderboard(root: str | Path) -> dict[str, Any]:
    """Read a persisted leaderboard document."""
    path = Path(root) / LEADERBOARD_FILE
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise PersistenceError(f"Cannot read leaderboard {path}: {e}") from e
