"""Unit tests for the command-line interface."""

from __future__ import annotations

import pytest

from mail_search.cli import main
from mail_search.config import get_settings


@pytest.fixture
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path, populated_repository):
    """Point the CLI at the populated SQLite store with a known session."""
    monkeypatch.setenv("MAIL_SEARCH_DATABASE_URL", f"sqlite:///{tmp_path / 'mail.sqlite3'}")
    monkeypatch.setenv("MAIL_SEARCH_SESSION_TOKENS", '{"token-alice": "alice"}')
    monkeypatch.setenv("MAIL_SEARCH_LOG_LEVEL", "ERROR")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_search_prints_ranked_threads(cli_env, capsys) -> None:
    exit_code = main(["search", "project", "--session-token", "token-alice"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Project Update" in out
    assert "Project Kickoff" not in out


def test_search_without_session_fails(cli_env, capsys) -> None:
    exit_code = main(["search", "project"])

    assert exit_code == 1
    assert "Authentication required" in capsys.readouterr().err


def test_invalid_date_fails(cli_env, capsys) -> None:
    exit_code = main(
        ["search", "project", "--start-date", "2025-01-01", "--session-token", "token-alice"]
    )

    assert exit_code == 1
    assert "startDate and endDate" in capsys.readouterr().err


def test_stats(cli_env, capsys) -> None:
    assert main(["stats", "--session-token", "token-alice"]) == 0

    out = capsys.readouterr().out
    assert "Total emails: 3" in out
    assert "Total threads: 2" in out


def test_threads_list_and_show(cli_env, capsys) -> None:
    assert main(["threads", "list", "--folder", "sent", "--session-token", "token-alice"]) == 0
    assert "Lunch order" in capsys.readouterr().out

    assert main(["threads", "show", "bob-1", "--session-token", "token-alice"]) == 1


def test_db_init(tmp_path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setenv("MAIL_SEARCH_DATABASE_URL", f"sqlite:///{tmp_path / 'fresh.sqlite3'}")
    get_settings.cache_clear()
    try:
        assert main(["db", "init"]) == 0
    finally:
        get_settings.cache_clear()

    assert "Mail schema ready" in capsys.readouterr().out
    assert (tmp_path / "fresh.sqlite3").exists()
