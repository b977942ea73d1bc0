"""
Match payload normalizer.

Turns one raw payload into a MatchRecord, or a tagged skip. Malformed
payloads are never an error for the run as a whole; they are excluded from
aggregation and the reason is reported back to the caller.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Optional

from pydantic import ValidationError

from ..core.models import MatchRecord
from ..providers.base import RawPayload

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("playerA", "playerB", "raceA", "raceB", "winner", "region")

# ```json ... ``` as commonly pasted into issue bodies
_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?\s*```$", re.DOTALL)


class SkipReason:
    """Reasons a payload is excluded."""

    UNPARSEABLE = "unparseable"
    NOT_AN_OBJECT = "not_an_object"
    MISSING_FIELD = "missing_field"
    INVALID_FIELD = "invalid_field"
    SAME_PLAYER = "same_player"
    WINNER_MISMATCH = "winner_mismatch"


@dataclass(frozen=True)
class NormalizeResult:
    """Either a record or the reason the payload was skipped."""

    record: Optional[MatchRecord] = None
    reason: Optional[str] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.record is not None


def _skip(reason: str, detail: str = "") -> NormalizeResult:
    return NormalizeResult(reason=reason, detail=detail)


def decode_body(body: Any) -> Any:
    """Decode text payloads to JSON; mappings pass through unchanged."""
    if isinstance(body, Mapping):
        return body
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    if not isinstance(body, str):
        raise ValueError(f"unsupported payload type {type(body).__name__}")

    text = body.strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1).strip()
    return json.loads(text)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _classify(error: ValidationError) -> tuple[str, str]:
    messages = "; ".join(
        f"{'.'.join(str(p) for p in e['loc']) or 'record'}: {e['msg']}"
        for e in error.errors()
    )
    if "winner must be" in messages:
        return SkipReason.WINNER_MISMATCH, messages
    if "must be different players" in messages:
        return SkipReason.SAME_PLAYER, messages
    return SkipReason.INVALID_FIELD, messages


def normalize_payload(payload: RawPayload) -> NormalizeResult:
    """
    Validate one payload and extract its canonical match fields.

    Args:
        payload: Raw payload from a record source

    Returns:
        NormalizeResult carrying the MatchRecord, or a skip reason
    """
    try:
        data = decode_body(payload.body)
    except (ValueError, UnicodeDecodeError, RecursionError) as e:
        return _skip(SkipReason.UNPARSEABLE, str(e))

    if not isinstance(data, Mapping):
        return _skip(SkipReason.NOT_AN_OBJECT, type(data).__name__)

    missing = [key for key in REQUIRED_FIELDS if _is_blank(data.get(key))]
    if missing:
        return _skip(SkipReason.MISSING_FIELD, ", ".join(missing))

    fields = dict(data)
    fields["id"] = payload.id
    if _is_blank(fields.get("timestamp")):
        fields["timestamp"] = payload.created_at

    try:
        record = MatchRecord.model_validate(fields)
    except ValidationError as e:
        reason, detail = _classify(e)
        return _skip(reason, detail)

    return NormalizeResult(record=record)


def normalize_payloads(
    payloads: Iterable[RawPayload],
    skipped: Optional[dict[str, int]] = None,
) -> Iterator[MatchRecord]:
    """
    Yield a MatchRecord for every valid payload, in input order.

    Args:
        payloads: Raw payloads
        skipped: Optional dict updated in place with skip counts per reason
    """
    for payload in payloads:
        result = normalize_payload(payload)
        if result.ok:
            yield result.record
            continue
        logger.debug("Skipping payload %s (%s): %s", payload.id, result.reason, result.detail)
        if skipped is not None:
            skipped[result.reason] = skipped.get(result.reason, 0) + 1
