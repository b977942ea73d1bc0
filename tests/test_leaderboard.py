"""
Tests for leaderboard ranking.
"""

from battle_rank.aggregators.accumulator import accumulate
from battle_rank.aggregators.finalizer import finalize
from battle_rank.aggregators.leaderboard import build_leaderboard, rank_stat_lines
from battle_rank.aggregators.normalizer import normalize_payloads
from battle_rank.core.types import PlayerEntity, StatLine

from conftest import make_payload


def _player(name, wins, losses):
    total = wins + losses
    rate = round(wins / total, 3) if total else 0.0
    return PlayerEntity(name, summary=StatLine(total, wins, losses, rate))


class TestBuildLeaderboard:
    def test_scenario_order(self, scenario_payloads):
        tables = finalize(accumulate(normalize_payloads(scenario_payloads)))
        board = build_leaderboard(tables.players)

        # Bob lost the only match played and ranks last at 0.0
        assert [e.player for e in board] == ["Carol", "Alice", "Bob"]
        assert [e.stats.win_rate for e in board] == [1.0, 0.5, 0.0]

    def test_ties_break_on_player_id(self):
        players = {
            p.player: p
            for p in [_player("zed", 1, 0), _player("Bob", 2, 0), _player("carol", 3, 0), _player("amy", 1, 1)]
        }
        board = build_leaderboard(players)
        assert [e.player for e in board] == ["Bob", "carol", "zed", "amy"]

    def test_order_independent_of_table_order(self):
        players = [_player("b", 1, 1), _player("a", 1, 1), _player("c", 2, 0)]
        forward = build_leaderboard(players)
        backward = build_leaderboard(list(reversed(players)))
        assert [e.player for e in forward] == [e.player for e in backward] == ["c", "a", "b"]

    def test_descending_total_order(self):
        payloads = [
            make_payload(id=i, playerA=f"p{i % 5}", playerB=f"p{(i + 2) % 5}",
                         winner=f"p{i % 5}" if i % 3 else f"p{(i + 2) % 5}")
            for i in range(30)
        ]
        tables = finalize(accumulate(normalize_payloads(payloads)))
        board = build_leaderboard(tables.players)
        keys = [(-e.stats.win_rate, e.player) for e in board]
        assert keys == sorted(keys)
        assert len(board) == len(tables.players)

    def test_min_games_filter(self):
        players = [_player("vet", 3, 2), _player("rookie", 1, 0)]
        board = build_leaderboard(players, min_games=2)
        assert [e.player for e in board] == ["vet"]

    def test_entries_share_summary(self):
        alice = _player("Alice", 1, 0)
        (entry,) = build_leaderboard([alice])
        assert entry.stats is alice.summary

    def test_empty(self):
        assert build_leaderboard({}) == []


class TestRankStatLines:
    def test_region_players_ranked(self):
        lines = {
            "b": StatLine(2, 1, 1, 0.5),
            "a": StatLine(2, 1, 1, 0.5),
            "c": StatLine(1, 1, 0, 1.0),
        }
        assert [name for name, _ in rank_stat_lines(lines)] == ["c", "a", "b"]
