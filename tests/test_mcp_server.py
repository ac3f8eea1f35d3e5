"""Tests for the MCP server tool functions."""
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from hours_rank.db import Database
from hours_rank.errors import DataUnavailable
from hours_rank.mcp_server import get_leaderboard, get_running_entry, get_stats
from hours_rank.models import RequestContext

T0 = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def seeded_db(tmp_path):
    """A database path with two users and a running session for 'me'."""
    db_path = tmp_path / "mcp.db"
    db = Database(db_path=db_path)
    for user, hours in [("me", 2), ("rival", 4)]:
        db.create_profile(user, user.title())
        entry = db.start_entry(user, "work", now=T0)
        db.stop_entry(user, entry.id, now=T0 + timedelta(hours=hours))
    db.start_entry("me", "evening", now=T0 + timedelta(hours=8))
    db.close()
    return db_path


class TestGetStats:
    @patch("hours_rank.mcp_server.get_caller", return_value=RequestContext())
    def test_no_user_configured(self, mock_get_caller):
        result = get_stats()
        assert "error" in result

    @patch("hours_rank.mcp_server.get_db_path")
    @patch("hours_rank.mcp_server.get_caller", return_value=RequestContext(caller_id="me"))
    def test_defaults_to_caller(self, mock_get_caller, mock_db_path, seeded_db):
        mock_db_path.return_value = seeded_db
        result = get_stats()
        assert result["id"] == "me"
        assert result["name"] == "Me"
        assert result["total_hours"] == 2.0
        assert result["total_sessions"] == 1
        assert result["rank"] == 2
        assert result["active_days"] == 1
        assert result["last_active_date"] == "2026-01-05"

    @patch("hours_rank.mcp_server.get_db_path")
    @patch("hours_rank.mcp_server.get_caller", return_value=RequestContext(caller_id="me"))
    def test_explicit_user(self, mock_get_caller, mock_db_path, seeded_db):
        mock_db_path.return_value = seeded_db
        result = get_stats(user_id="rival")
        assert result["id"] == "rival"
        assert result["rank"] == 1

    @patch("hours_rank.mcp_server._get_db")
    @patch("hours_rank.mcp_server.get_caller", return_value=RequestContext(caller_id="me"))
    def test_store_failure_returns_error(self, mock_get_caller, mock_get_db):
        mock_db = MagicMock()
        mock_db.entries_for_user.side_effect = DataUnavailable("db down")
        mock_get_db.return_value = mock_db
        result = get_stats()
        assert result == {"error": "db down"}
        mock_db.close.assert_called_once()


class TestGetLeaderboard:
    @patch("hours_rank.mcp_server.get_db_path")
    @patch("hours_rank.mcp_server.get_caller", return_value=RequestContext(caller_id="me"))
    def test_entries_and_your_rank(self, mock_get_caller, mock_db_path, seeded_db):
        mock_db_path.return_value = seeded_db
        result = get_leaderboard()
        assert result["count"] == 2
        assert [e["user_id"] for e in result["entries"]] == ["rival", "me"]
        assert result["your_rank"] == 2

    @patch("hours_rank.mcp_server.get_db_path")
    @patch("hours_rank.mcp_server.get_caller", return_value=RequestContext())
    def test_anonymous_has_no_rank(self, mock_get_caller, mock_db_path, seeded_db):
        mock_db_path.return_value = seeded_db
        assert get_leaderboard()["your_rank"] is None


class TestGetRunningEntry:
    @patch("hours_rank.mcp_server.get_db_path")
    @patch("hours_rank.mcp_server.get_caller", return_value=RequestContext(caller_id="me"))
    def test_running(self, mock_get_caller, mock_db_path, seeded_db):
        mock_db_path.return_value = seeded_db
        result = get_running_entry()
        assert result["running"] is True
        assert result["entry"]["project_name"] == "evening"

    @patch("hours_rank.mcp_server.get_db_path")
    @patch("hours_rank.mcp_server.get_caller", return_value=RequestContext(caller_id="rival"))
    def test_not_running(self, mock_get_caller, mock_db_path, seeded_db):
        mock_db_path.return_value = seeded_db
        assert get_running_entry() == {"running": False, "entry": None}

    @patch("hours_rank.mcp_server._get_db")
    @patch("hours_rank.mcp_server.get_caller", return_value=RequestContext(caller_id="me"))
    def test_store_failure_returns_error(self, mock_get_caller, mock_get_db):
        mock_db = MagicMock()
        mock_db.running_entry.side_effect = DataUnavailable("db down")
        mock_get_db.return_value = mock_db
        assert get_running_entry() == {"error": "db down"}
        mock_db.close.assert_called_once()
