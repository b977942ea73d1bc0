"""
Local JSON file record source.

Accepts a JSON list whose items are either raw payloads (objects or JSON
text) or wrappers of the form {"id": ..., "body": ...}. Items without an id
are numbered sequentially from 1.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .base import RawPayload, RecordSourceError, RecordSourceProtocol

logger = logging.getLogger(__name__)


def _is_wrapper(item: Any) -> bool:
    return isinstance(item, dict) and "body" in item


class JsonFileSource(RecordSourceProtocol):
    """Read match payloads from a JSON file on disk."""

    source_name = "json_file"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> list[RawPayload]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise RecordSourceError(f"Cannot read {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise RecordSourceError(f"{self.path} is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise RecordSourceError(
                f"Expected a JSON list in {self.path}, got {type(data).__name__}"
            )

        payloads = []
        for index, item in enumerate(data, start=1):
            if _is_wrapper(item):
                payloads.append(
                    RawPayload(
                        id=item.get("id", index),
                        body=item["body"],
                        created_at=item.get("created_at"),
                    )
                )
            else:
                payloads.append(RawPayload(id=index, body=item))

        logger.info("Loaded %d payloads from %s", len(payloads), self.path)
        return payloads

    async def fetch_payloads(self) -> list[RawPayload]:
        return self.load()
