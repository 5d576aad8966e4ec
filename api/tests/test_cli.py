"""Tests for the management CLI."""

from unittest.mock import patch

import pytest

import cli

pytestmark = pytest.mark.unit


class TestMigrateCommand:
    @pytest.mark.parametrize(
        ("argv", "func", "revision"),
        [
            (["migrate"], "upgrade", "head"),
            (["migrate", "downgrade"], "downgrade", "-1"),
            (["migrate", "upgrade", "0001"], "upgrade", "0001"),
        ],
    )
    def test_dispatches_to_alembic(self, argv, func, revision):
        with patch(f"alembic.command.{func}") as mock_command:
            assert cli.main(argv) == 0

        cfg, target = mock_command.call_args.args
        assert target == revision
        assert cfg.get_main_option("script_location") == str(cli.API_DIR / "alembic")

    def test_current(self):
        with patch("alembic.command.current") as mock_current:
            assert cli.main(["migrate", "current"]) == 0

        mock_current.assert_called_once()


class TestStatsCommand:
    def test_prints_counts(self, capsys):
        counts = {"total_series": 2, "unique_genres": 1, "total_characters": 5}

        with patch("cli._collect_stats"), patch("cli.asyncio.run", return_value=counts):
            assert cli.main(["stats"]) == 0

        assert capsys.readouterr().out.splitlines() == [
            "total_series: 2",
            "unique_genres: 1",
            "total_characters: 5",
        ]


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert "migrate" in capsys.readouterr().out
