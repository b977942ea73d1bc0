"""
Base record source protocol and types.

Defines the interface that all match record sources must implement.
A source is responsible only for retrieving raw payloads; validation
happens in the normalizer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


class RecordSourceError(Exception):
    """
    Raised when records cannot be retrieved or have an unexpected shape.

    Always fatal to a rebuild: aggregating a partial record set would
    silently corrupt the cross-tabulated totals.
    """
    pass


@dataclass(frozen=True)
class RawPayload:
    """
    One unvalidated match payload.

    Attributes:
        id: Record identifier used in player match history (e.g. issue number)
        body: Mapping, or text expected to decode into one
        created_at: Source-side creation time, used when the payload has no timestamp
    """
    id: int | str
    body: Any
    created_at: Optional[str] = None


class RecordSourceProtocol(ABC):
    """
    Abstract interface for match record sources.

    ``fetch_payloads`` buffers the complete record set before returning;
    aggregation never starts on a partial result.
    """

    source_name: str = ""

    @abstractmethod
    async def fetch_payloads(self) -> list[RawPayload]:
        """
        Retrieve every raw payload.

        Returns:
            Payloads in a stable order

        Raises:
            RecordSourceError: If retrieval fails or the response is malformed
        """
        ...

    async def close(self) -> None:
        """Release any held resources."""
        return None
