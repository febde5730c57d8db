"""Tests for the writing-service CLI."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from click.testing import CliRunner
from sqlalchemy.exc import OperationalError

from writing_service.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def database(monkeypatch):
    mocks = {
        "check_database": AsyncMock(),
        "create_tables": AsyncMock(return_value=["doc_versions", "google_docs"]),
        "close_database": AsyncMock(),
    }
    for name, mock in mocks.items():
        monkeypatch.setattr(f"writing_service.infra.database.{name}", mock)
    return mocks


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "1.0.0" in result.output


class TestDatabaseCommands:
    def test_check(self, runner, database):
        result = runner.invoke(cli, ["db", "check"])

        assert result.exit_code == 0
        assert "Database connected successfully!" in result.output
        database["check_database"].assert_awaited_once()
        database["close_database"].assert_awaited_once()

    def test_check_failure_exits_nonzero(self, runner, database):
        database["check_database"].side_effect = OperationalError(
            "SELECT 1", {}, Exception("refused")
        )

        result = runner.invoke(cli, ["db", "check"])

        assert result.exit_code == 1
        database["close_database"].assert_awaited_once()

    def test_create_tables_lists_tables(self, runner, database):
        result = runner.invoke(cli, ["db", "create-tables"])

        assert result.exit_code == 0
        assert "doc_versions" in result.output
        assert "2 tables ready" in result.output

    def test_target_is_sqlite_when_postgres_unconfigured(self, runner, database):
        result = runner.invoke(cli, ["db", "check"])

        assert "sqlite+aiosqlite:///:memory:" in result.output


class TestServerCommands:
    def test_dev_passes_options_to_uvicorn(self, runner, monkeypatch):
        run = MagicMock()
        monkeypatch.setattr("writing_service.cli.commands.server.uvicorn.run", run)

        result = runner.invoke(cli, ["server", "dev", "--port", "9001", "--no-reload"])

        assert result.exit_code == 0
        args, kwargs = run.call_args
        assert args == ("writing_service.app.main:app",)
        assert kwargs["port"] == 9001
        assert kwargs["reload"] is False
        assert kwargs["log_level"] == "info"
