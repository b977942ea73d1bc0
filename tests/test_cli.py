"""
Tests for the command-line interface.

Only local-file commands are exercised; GitHub retrieval is covered in
test_sources.py.
"""

import json

import pytest

from battle_rank.cli import build_parser, main


@pytest.fixture
def matches_file(tmp_path, scenario_payloads):
    path = tmp_path / "matches.json"
    bodies = [p.body for p in scenario_payloads] + ['{"playerA": "x"}', "not json"]
    path.write_text(json.dumps(bodies), encoding="utf-8")
    return path


class TestParser:
    def test_rebuild_options(self):
        args = build_parser().parse_args(
            ["rebuild", "--input", "m.json", "--output", "out", "--min-games", "3"]
        )
        assert args.command == "rebuild"
        assert args.input == "m.json"
        assert args.output == "out"
        assert args.min_games == 3

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "rebuild" in capsys.readouterr().out


class TestRebuildCommand:
    def test_rebuild_from_file(self, matches_file, tmp_path, capsys):
        out = tmp_path / "out"
        code = main(["rebuild", "--input", str(matches_file), "--output", str(out)])

        assert code == 0
        assert (out / "players" / "Alice.json").exists()
        assert (out / "leaderboard.json").exists()
        printed = capsys.readouterr().out
        assert "Records admitted: 2" in printed
        assert "Records skipped: 2" in printed

    def test_missing_input_fails(self, tmp_path):
        out = tmp_path / "out"
        code = main(["rebuild", "--input", str(tmp_path / "nope.json"), "--output", str(out)])
        assert code == 1
        assert not out.exists()

    def test_bad_repo_fails(self, tmp_path, caplog):
        out = tmp_path / "out"
        code = main(["rebuild", "--repo", "no-slash", "--output", str(out)])
        assert code == 1
        assert "Invalid configuration" in caplog.text
        assert not out.exists()

    def test_errors_during_run_are_not_configuration_errors(self, matches_file, tmp_path, monkeypatch):
        async def broken_rebuild(*args, **kwargs):
            raise ValueError("unexpected")

        monkeypatch.setattr("battle_rank.cli.run_rebuild", broken_rebuild)
        with pytest.raises(ValueError, match="unexpected"):
            main(["rebuild", "--input", str(matches_file), "--output", str(tmp_path / "out")])


class TestLeaderboardCommand:
    def test_prints_rows(self, matches_file, tmp_path, capsys):
        out = tmp_path / "out"
        main(["rebuild", "--input", str(matches_file), "--output", str(out)])
        capsys.readouterr()

        assert main(["leaderboard", "--output", str(out), "--limit", "2"]) == 0
        printed = capsys.readouterr().out
        assert "Carol" in printed
        assert "Alice" in printed
        assert "Bob" not in printed

    def test_missing_output(self, tmp_path):
        assert main(["leaderboard", "--output", str(tmp_path)]) == 1


class TestValidateCommand:
    def test_reports_skips(self, matches_file, capsys):
        assert main(["validate", str(matches_file)]) == 0
        printed = capsys.readouterr().out
        assert "2 of 4 payloads admitted, 2 skipped" in printed
        assert "skip 3: missing_field" in printed
        assert "skip 4: unparseable" in printed
