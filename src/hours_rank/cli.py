"""CLI commands for hours-rank."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime

from rich.logging import RichHandler

from hours_rank.config import get_caller, get_db_path, set_caller
from hours_rank.db import DEFAULT_PAGE_LIMIT, Database
from hours_rank.display import (
    console,
    print_entries,
    print_entry_result,
    print_error,
    print_leaderboard,
    print_not_configured_message,
    print_project_result,
    print_projects,
    print_stats,
)
from hours_rank.errors import EntryNotFound, HoursRankError, InvalidEntry, ProfileExists
from hours_rank.leaderboard import build_leaderboard
from hours_rank.models import RequestContext
from hours_rank.stats import profile_stats

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="hours-rank",
        description="Track your hours and see how you stack up",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    init_p = subparsers.add_parser("init", help="Configure your user id and create your profile")
    init_p.add_argument("--user-id", required=True, help="Your user id")
    init_p.add_argument("--name", required=True, help="Your display name")
    init_p.add_argument("--email", default=None, help="Your email address")

    start_p = subparsers.add_parser("start", help="Start a timed session")
    start_p.add_argument("project", help="Project name")
    start_p.add_argument("--description", "-d", default="", help="What you are working on")
    start_p.add_argument("--project-id", default=None, help="Tag the session to one of your projects")

    stop_p = subparsers.add_parser("stop", help="Stop a session (default: the running one)")
    stop_p.add_argument("entry_id", nargs="?", default=None)

    edit_p = subparsers.add_parser("edit", help="Edit a time entry")
    edit_p.add_argument("entry_id")
    edit_p.add_argument("--project", "-p", default=None)
    edit_p.add_argument("--description", "-d", default=None)
    edit_p.add_argument("--end", default=None, help="End time, ISO-8601")

    delete_p = subparsers.add_parser("delete", help="Delete a time entry")
    delete_p.add_argument("entry_id")

    entries_p = subparsers.add_parser("entries", help="List your time entries")
    entries_p.add_argument("--page", type=int, default=1)
    entries_p.add_argument("--limit", type=int, default=DEFAULT_PAGE_LIMIT)

    stats_p = subparsers.add_parser("stats", help="Show profile stats")
    stats_p.add_argument("--user", default=None, help="User id (default: you)")

    subparsers.add_parser("leaderboard", help="Show the top 5")

    pic_p = subparsers.add_parser("picture", help="Set or clear your profile picture URL")
    pic_group = pic_p.add_mutually_exclusive_group(required=True)
    pic_group.add_argument("url", nargs="?", default=None)
    pic_group.add_argument("--clear", action="store_true")

    proj_p = subparsers.add_parser("projects", help="Manage your projects")
    proj_sub = proj_p.add_subparsers(dest="project_command", required=True)

    proj_create = proj_sub.add_parser("create", help="Create a project")
    proj_create.add_argument("name")
    proj_create.add_argument("--description", "-d", default="")
    proj_create.add_argument("--color", default=None, help="Hex color, e.g. #3B82F6")

    proj_list = proj_sub.add_parser("list", help="List your projects")
    proj_list.add_argument("--page", type=int, default=1)
    proj_list.add_argument("--limit", type=int, default=DEFAULT_PAGE_LIMIT)

    proj_show = proj_sub.add_parser("show", help="Show one project")
    proj_show.add_argument("project_id")

    proj_edit = proj_sub.add_parser("edit", help="Edit a project")
    proj_edit.add_argument("project_id")
    proj_edit.add_argument("--name", default=None)
    proj_edit.add_argument("--description", "-d", default=None)
    proj_edit.add_argument("--color", default=None)

    proj_delete = proj_sub.add_parser("delete", help="Delete a project (its entries are kept)")
    proj_delete.add_argument("project_id")
    return parser


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose)],
        force=True,
    )


def main(argv: list[str] | None = None) -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    command = args.command or "stats"

    db = Database(get_db_path())
    ctx = get_caller()

    try:
        if command == "init":
            do_init(db, user_id=args.user_id, name=args.name, email=args.email)
        elif command == "start":
            do_start(db, ctx, project=args.project, description=args.description,
                     project_id=args.project_id)
        elif command == "stop":
            do_stop(db, ctx, entry_id=args.entry_id)
        elif command == "edit":
            do_edit(db, ctx, entry_id=args.entry_id, project=args.project,
                    description=args.description, end=args.end)
        elif command == "delete":
            do_delete(db, ctx, entry_id=args.entry_id)
        elif command == "entries":
            do_entries(db, ctx, page=args.page, limit=args.limit)
        elif command == "stats":
            do_stats(db, ctx, user_id=getattr(args, "user", None))
        elif command == "leaderboard":
            do_leaderboard(db, ctx)
        elif command == "picture":
            do_picture(db, ctx, url=args.url, clear=args.clear)
        elif command == "projects":
            _run_projects(db, ctx, args)
    except HoursRankError as exc:
        logger.debug("command %s failed", command, exc_info=True)
        print_error(str(exc))
        sys.exit(1)
    finally:
        db.close()


def _not_configured() -> dict:
    print_not_configured_message()
    return {"ok": False, "reason": "not_configured"}


def do_init(db: Database, user_id: str, name: str, email: str | None = None) -> dict:
    """Save the local identity and create its profile if missing."""
    set_caller(user_id, email)
    created = True
    try:
        db.create_profile(user_id, name, email)
    except ProfileExists:
        created = False
    if created:
        console.print(f"[green]Profile created for [bold]{name}[/] ({user_id})[/]")
    else:
        console.print(f"[yellow]Profile for {user_id} already exists; identity saved.[/]")
    return {"ok": True, "user_id": user_id, "created": created}


def do_start(
    db: Database,
    ctx: RequestContext,
    project: str,
    description: str = "",
    project_id: str | None = None,
) -> dict:
    """Start a new session for the caller."""
    if not ctx.is_authenticated:
        return _not_configured()
    running = db.running_entry(ctx.caller_id)
    if running is not None:
        logger.info("entry %s is still running", running.id)
    entry = db.start_entry(ctx.caller_id, project, description, project_id=project_id)
    result = entry.to_dict()
    print_entry_result("Session Started", result)
    return {"ok": True, "entry": result}


def do_stop(db: Database, ctx: RequestContext, entry_id: str | None = None) -> dict:
    """Stop the given entry, or the caller's running one."""
    if not ctx.is_authenticated:
        return _not_configured()
    if entry_id is None:
        running = db.running_entry(ctx.caller_id)
        if running is None:
            raise EntryNotFound("No running session")
        entry_id = running.id
    entry = db.stop_entry(ctx.caller_id, entry_id)
    result = entry.to_dict()
    print_entry_result("Session Stopped", result)
    return {"ok": True, "entry": result}


def do_edit(
    db: Database,
    ctx: RequestContext,
    entry_id: str,
    project: str | None = None,
    description: str | None = None,
    end: str | None = None,
) -> dict:
    """Edit project, description or end time of an entry."""
    if not ctx.is_authenticated:
        return _not_configured()
    end_time = None
    if end:
        try:
            end_time = datetime.fromisoformat(end)
        except ValueError as exc:
            raise InvalidEntry(f"Invalid end time format: {end}") from exc
    entry = db.update_entry(
        ctx.caller_id, entry_id, project_name=project, description=description, end_time=end_time
    )
    result = entry.to_dict()
    print_entry_result("Entry Updated", result)
    return {"ok": True, "entry": result}


def do_delete(db: Database, ctx: RequestContext, entry_id: str) -> dict:
    if not ctx.is_authenticated:
        return _not_configured()
    db.delete_entry(ctx.caller_id, entry_id)
    console.print(f"[green]Deleted entry {entry_id}[/]")
    return {"ok": True, "entry_id": entry_id}


def do_entries(db: Database, ctx: RequestContext, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> dict:
    """Show one page of the caller's entries."""
    if not ctx.is_authenticated:
        return _not_configured()
    result = db.list_entries(ctx.caller_id, page=page, limit=limit).to_dict()
    print_entries(result)
    return {"ok": True, **result}


def do_stats(db: Database, ctx: RequestContext, user_id: str | None = None) -> dict:
    """Show stats for user_id, defaulting to the caller."""
    target = user_id or ctx.caller_id
    if target is None:
        return _not_configured()
    data = profile_stats(db, target, resolver=db, ctx=ctx).to_dict()
    print_stats(data)
    return {"ok": True, **data}


def do_leaderboard(db: Database, ctx: RequestContext) -> dict:
    rows = [row.to_dict() for row in build_leaderboard(db, db, ctx)]
    print_leaderboard(rows)
    return {"ok": True, "entries": rows, "count": len(rows)}


def do_picture(db: Database, ctx: RequestContext, url: str | None = None, clear: bool = False) -> dict:
    """Set or clear the caller's profile picture URL."""
    if not ctx.is_authenticated:
        return _not_configured()
    profile = db.set_profile_picture(ctx.caller_id, None if clear else url)
    if profile.profile_picture_url:
        console.print(f"[green]Profile picture set: {profile.profile_picture_url}[/]")
    else:
        console.print("[green]Profile picture cleared[/]")
    return {"ok": True, "profile_picture_url": profile.profile_picture_url}


def _run_projects(db: Database, ctx: RequestContext, args: argparse.Namespace) -> None:
    sub = args.project_command
    if sub == "create":
        do_project_create(db, ctx, name=args.name, description=args.description, color=args.color)
    elif sub == "list":
        do_project_list(db, ctx, page=args.page, limit=args.limit)
    elif sub == "show":
        do_project_show(db, ctx, project_id=args.project_id)
    elif sub == "edit":
        do_project_edit(db, ctx, project_id=args.project_id, name=args.name,
                        description=args.description, color=args.color)
    elif sub == "delete":
        do_project_delete(db, ctx, project_id=args.project_id)


def do_project_create(
    db: Database,
    ctx: RequestContext,
    name: str,
    description: str = "",
    color: str | None = None,
) -> dict:
    if not ctx.is_authenticated:
        return _not_configured()
    result = db.create_project(ctx.caller_id, name, description, color).to_dict()
    print_project_result("Project Created", result)
    return {"ok": True, "project": result}


def do_project_list(db: Database, ctx: RequestContext, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> dict:
    if not ctx.is_authenticated:
        return _not_configured()
    result = db.list_projects(ctx.caller_id, page=page, limit=limit).to_dict()
    print_projects(result)
    return {"ok": True, **result}


def do_project_show(db: Database, ctx: RequestContext, project_id: str) -> dict:
    if not ctx.is_authenticated:
        return _not_configured()
    result = db.get_project(ctx.caller_id, project_id).to_dict()
    print_project_result("Project", result)
    return {"ok": True, "project": result}


def do_project_edit(
    db: Database,
    ctx: RequestContext,
    project_id: str,
    name: str | None = None,
    description: str | None = None,
    color: str | None = None,
) -> dict:
    """Update the given project fields; omitted fields keep their value."""
    if not ctx.is_authenticated:
        return _not_configured()
    project = db.update_project(ctx.caller_id, project_id, name=name, description=description, color=color)
    result = project.to_dict()
    print_project_result("Project Updated", result)
    return {"ok": True, "project": result}


def do_project_delete(db: Database, ctx: RequestContext, project_id: str) -> dict:
    """Delete a project. Its time entries stay, untagged."""
    if not ctx.is_authenticated:
        return _not_configured()
    untagged = db.delete_project(ctx.caller_id, project_id)
    console.print(f"[green]Deleted project {project_id}[/] ({untagged} entries untagged)")
    return {"ok": True, "project_id": project_id, "untagged_entries": untagged}
