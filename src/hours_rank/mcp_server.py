"""MCP server for hours-rank.

Exposes hours-rank stats as MCP tools so an assistant can query them mid-conversation.
Run via: python3 -m hours_rank.mcp_server
"""
from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from hours_rank.config import get_caller, get_db_path
from hours_rank.errors import HoursRankError

mcp = FastMCP(name="hours-rank")


def _get_db():
    from hours_rank.db import Database
    return Database(get_db_path())


@mcp.tool()
def get_stats(user_id: str = "") -> dict[str, Any]:
    """Get profile stats: total hours, sessions, streak, rank and level.

    user_id: whose stats to read. If empty, uses the configured user.
    """
    from hours_rank.stats import profile_stats

    ctx = get_caller()
    target = user_id or ctx.caller_id
    if not target:
        return {"error": "No user configured. Run: hours-rank init --user-id <id> --name <name>"}
    db = _get_db()
    try:
        return profile_stats(db, target, resolver=db, ctx=ctx).to_dict()
    except HoursRankError as exc:
        return {"error": str(exc)}
    finally:
        db.close()


@mcp.tool()
def get_leaderboard() -> dict[str, Any]:
    """Get the top 5 users by total tracked hours."""
    from hours_rank.leaderboard import build_leaderboard

    ctx = get_caller()
    db = _get_db()
    try:
        rows = [row.to_dict() for row in build_leaderboard(db, db, ctx)]
    except HoursRankError as exc:
        return {"error": str(exc)}
    finally:
        db.close()

    your_rank = next((r["rank"] for r in rows if r["is_current_user"]), None)
    return {"entries": rows, "count": len(rows), "your_rank": your_rank}


@mcp.tool()
def get_running_entry() -> dict[str, Any]:
    """Get the configured user's running session, if any."""
    ctx = get_caller()
    if not ctx.caller_id:
        return {"error": "No user configured. Run: hours-rank init --user-id <id> --name <name>"}
    db = _get_db()
    try:
        entry = db.running_entry(ctx.caller_id)
    except HoursRankError as exc:
        return {"error": str(exc)}
    finally:
        db.close()
    return {"running": entry is not None, "entry": entry.to_dict() if entry else None}


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
