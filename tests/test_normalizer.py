"""
Tests for match payload normalization.

Malformed payloads must come back as tagged skips, never exceptions.
"""

import json

import pytest
from pydantic import ValidationError

from battle_rank.aggregators.normalizer import (
    SkipReason,
    decode_body,
    normalize_payload,
    normalize_payloads,
)
from battle_rank.providers.base import RawPayload


class TestDecodeBody:
    def test_mapping_passes_through(self):
        body = {"playerA": "Alice"}
        assert decode_body(body) is body

    def test_json_text(self):
        assert decode_body('{"a": 1}') == {"a": 1}

    def test_code_fenced_json(self):
        text = '```json\n{"playerA": "Alice"}\n```'
        assert decode_body(text) == {"playerA": "Alice"}

    def test_bare_fence(self):
        assert decode_body('```\n{"a": 2}\n```') == {"a": 2}

    def test_none_is_rejected(self):
        with pytest.raises(ValueError):
            decode_body(None)


class TestNormalizePayload:
    """Valid payloads become MatchRecords with every canonical field."""

    def test_valid_mapping(self, payload_factory):
        result = normalize_payload(payload_factory(id=7, season="S1", timestamp="2024-01-01"))
        assert result.ok
        record = result.record
        assert record.id == 7
        assert (record.player_a, record.player_b) == ("Alice", "Bob")
        assert (record.race_a, record.race_b) == ("Human", "Orc")
        assert record.winner == "Alice"
        assert record.region == "NA"
        assert record.season == "S1"
        assert record.timestamp == "2024-01-01"

    def test_valid_json_text(self):
        body = json.dumps({
            "playerA": "A", "playerB": "B", "raceA": "X", "raceB": "Y",
            "winner": "B", "region": "EU",
        })
        result = normalize_payload(RawPayload(id=3, body=body))
        assert result.ok
        assert result.record.winner == "B"

    def test_numeric_season_kept(self, payload_factory):
        result = normalize_payload(payload_factory(season=2024))
        assert result.record.season == 2024

    def test_optional_fields_default_to_none(self, payload_factory):
        record = normalize_payload(payload_factory()).record
        assert record.timestamp is None
        assert record.season is None

    def test_created_at_fills_missing_timestamp(self, payload_factory):
        payload = payload_factory()
        payload = RawPayload(id=payload.id, body=payload.body, created_at="2024-05-01T10:00:00Z")
        assert normalize_payload(payload).record.timestamp == "2024-05-01T10:00:00Z"

    def test_payload_timestamp_wins_over_created_at(self, payload_factory):
        payload = payload_factory(timestamp="2023-01-01")
        payload = RawPayload(id=1, body=payload.body, created_at="2024-05-01T10:00:00Z")
        assert normalize_payload(payload).record.timestamp == "2023-01-01"

    def test_whitespace_is_stripped(self, payload_factory):
        result = normalize_payload(payload_factory(playerA=" Alice ", winner="Alice "))
        assert result.ok
        assert result.record.player_a == "Alice"

    def test_unknown_keys_ignored(self, payload_factory):
        assert normalize_payload(payload_factory(notes="gg")).ok

    def test_record_is_immutable(self, payload_factory):
        record = normalize_payload(payload_factory()).record
        with pytest.raises(ValidationError):
            record.winner = "Bob"


class TestNormalizeRejects:
    """Each malformed shape is skipped with a reason."""

    def test_unparseable_text(self):
        result = normalize_payload(RawPayload(id=1, body="{not json"))
        assert not result.ok
        assert result.reason == SkipReason.UNPARSEABLE

    @pytest.mark.parametrize("body", ["[" * 60000, '{"playerA": ' + "[" * 60000])
    def test_deeply_nested_text(self, body):
        result = normalize_payload(RawPayload(id=1, body=body))
        assert not result.ok
        assert result.reason == SkipReason.UNPARSEABLE

    def test_empty_body(self):
        result = normalize_payload(RawPayload(id=1, body=None))
        assert result.reason == SkipReason.UNPARSEABLE

    def test_json_array(self):
        result = normalize_payload(RawPayload(id=1, body="[1, 2]"))
        assert result.reason == SkipReason.NOT_AN_OBJECT

    @pytest.mark.parametrize("field", ["playerA", "playerB", "raceA", "raceB", "winner", "region"])
    def test_missing_required_field(self, payload_factory, field):
        payload = payload_factory()
        body = dict(payload.body)
        del body[field]
        result = normalize_payload(RawPayload(id=1, body=body))
        assert result.reason == SkipReason.MISSING_FIELD
        assert field in result.detail

    def test_blank_field(self, payload_factory):
        result = normalize_payload(payload_factory(raceB="  "))
        assert result.reason == SkipReason.MISSING_FIELD

    def test_winner_not_a_participant(self, payload_factory):
        result = normalize_payload(payload_factory(winner="Carol"))
        assert result.reason == SkipReason.WINNER_MISMATCH

    def test_same_player_on_both_sides(self, payload_factory):
        result = normalize_payload(payload_factory(playerB="Alice"))
        assert result.reason == SkipReason.SAME_PLAYER

    def test_non_string_identifier(self, payload_factory):
        result = normalize_payload(payload_factory(region=42))
        assert result.reason == SkipReason.INVALID_FIELD


class TestNormalizePayloads:
    def test_keeps_order_and_counts_skips(self, mixed_payloads):
        skipped = {}
        records = list(normalize_payloads(mixed_payloads, skipped))

        assert [r.id for r in records] == [1, 2]
        assert skipped == {
            SkipReason.UNPARSEABLE: 1,
            SkipReason.WINNER_MISMATCH: 1,
            SkipReason.MISSING_FIELD: 2,
            SkipReason.NOT_AN_OBJECT: 1,
            SkipReason.SAME_PLAYER: 1,
        }

    def test_skip_counts_optional(self, mixed_payloads):
        assert len(list(normalize_payloads(mixed_payloads))) == 2
