"""
Pytest configuration for battle-rank tests.
"""

import pytest

from battle_rank.providers.base import RawPayload


def make_payload(
    id=1,
    playerA="Alice",
    playerB="Bob",
    raceA="Human",
    raceB="Orc",
    winner="Alice",
    region="NA",
    **extra,
) -> RawPayload:
    """Build a RawPayload whose body is a match mapping."""
    body = {
        "playerA": playerA,
        "playerB": playerB,
        "raceA": raceA,
        "raceB": raceB,
        "winner": winner,
        "region": region,
        **extra,
    }
    return RawPayload(id=id, body=body)


@pytest.fixture
def payload_factory():
    return make_payload


@pytest.fixture
def scenario_payloads():
    """Alice beats Bob in NA, then loses to Carol in EU."""
    return [
        make_payload(id=1, playerA="Alice", playerB="Bob", raceA="Human", raceB="Orc",
                     winner="Alice", region="NA"),
        make_payload(id=2, playerA="Alice", playerB="Carol", raceA="Human", raceB="Elf",
                     winner="Carol", region="EU"),
    ]


@pytest.fixture
def mixed_payloads(scenario_payloads):
    """Scenario payloads plus a spread of malformed ones."""
    return scenario_payloads + [
        RawPayload(id=3, body="{not json"),
        make_payload(id=4, winner="Dave"),
        make_payload(id=5, winner=None),
        RawPayload(id=6, body="[1, 2, 3]"),
        make_payload(id=7, playerB="Alice"),
        make_payload(id=8, region="   "),
    ]
