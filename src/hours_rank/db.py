"""SQLite database layer for hours-rank."""

from __future__ import annotations

import logging
import math
import re
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path

from hours_rank.errors import (
    DataUnavailable,
    EntryAlreadyStopped,
    EntryNotFound,
    IdentityUnresolved,
    InvalidEntry,
    InvalidProfile,
    InvalidProject,
    ProfileExists,
    ProfileNotFound,
    ProjectNotFound,
)
from hours_rank.models import EntryPage, Identity, Profile, Project, ProjectPage, TimeEntry

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".hours-rank" / "data.db"
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100
DEFAULT_PROJECT_COLOR = "#3B82F6"
RESERVED_PROJECT_NAME = "General"
_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _parse_ts(value: str | None) -> datetime | None:
    if value is None:
        return None
    return _as_utc(datetime.fromisoformat(value))


def _row_to_entry(row: sqlite3.Row) -> TimeEntry:
    return TimeEntry(
        id=row["id"],
        user_id=row["user_id"],
        project_name=row["project_name"],
        description=row["description"] or "",
        start_time=_parse_ts(row["start_time"]),
        end_time=_parse_ts(row["end_time"]),
        duration_seconds=row["duration"] or 0,
        created_at=_parse_ts(row["created_at"]),
        project_id=row["project_id"],
    )


def _row_to_project(row: sqlite3.Row) -> Project:
    return Project(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        description=row["description"] or "",
        color=row["color"] or DEFAULT_PROJECT_COLOR,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _check_project_fields(name: str | None, color: str | None) -> None:
    if name == RESERVED_PROJECT_NAME:
        raise InvalidProject(f"Project name '{RESERVED_PROJECT_NAME}' is reserved")
    if color and not _HEX_COLOR.match(color):
        raise InvalidProject(f"Invalid color, expected #RRGGBB: {color}")


def _page_bounds(page: int, limit: int) -> tuple[int, int]:
    """page < 1 falls back to 1; limit outside 1..100 falls back to 10."""
    if page < 1:
        page = 1
    if not 0 < limit <= MAX_PAGE_LIMIT:
        limit = DEFAULT_PAGE_LIMIT
    return page, limit


class Database:
    """SQLite database manager with WAL mode.

    Serves as the entry store and identity resolver for the stats engine,
    and owns every write to time entries, profiles and projects.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.init_db()

    def init_db(self) -> None:
        """Create tables if they do not exist."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS profiles (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT,
                profile_picture_url TEXT,
                created_at TEXT,
                updated_at TEXT
            );

            CREATE TABLE IF NOT EXISTS time_entries (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                project_name TEXT NOT NULL,
                description TEXT DEFAULT '',
                start_time TEXT NOT NULL,
                end_time TEXT,
                duration INTEGER DEFAULT 0,
                created_at TEXT,
                project_id TEXT
            );

            CREATE TABLE IF NOT EXISTS projects (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                name TEXT NOT NULL,
                description TEXT DEFAULT '',
                color TEXT DEFAULT '#3B82F6',
                created_at TEXT,
                updated_at TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_time_entries_user_id
                ON time_entries (user_id);
            CREATE INDEX IF NOT EXISTS idx_projects_user_id
                ON projects (user_id);
        """)
        # Databases created before projects existed lack the link column.
        columns = {row["name"] for row in self.conn.execute("PRAGMA table_info(time_entries)")}
        if "project_id" not in columns:
            self.conn.execute("ALTER TABLE time_entries ADD COLUMN project_id TEXT")
        self.conn.commit()

    # ── Reads used by the stats engine ────────────────────────────────────

    def entries_for_user(self, user_id: str) -> list[TimeEntry]:
        """Qualifying entries (duration > 0) for a user, newest first."""
        try:
            rows = self.conn.execute(
                "SELECT * FROM time_entries WHERE user_id = ? AND duration > 0 "
                "ORDER BY start_time DESC",
                (user_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise DataUnavailable(f"Failed to fetch time entries: {exc}") from exc
        return [_row_to_entry(row) for row in rows]

    def total_duration_per_user(self) -> dict[str, int]:
        """Sum of qualifying durations in seconds for every user who has any."""
        try:
            rows = self.conn.execute(
                "SELECT user_id, SUM(duration) AS total FROM time_entries "
                "WHERE duration > 0 GROUP BY user_id"
            ).fetchall()
        except sqlite3.Error as exc:
            raise DataUnavailable(f"Failed to aggregate durations: {exc}") from exc
        return {row["user_id"]: row["total"] for row in rows}

    def resolve_identity(self, user_id: str) -> Identity:
        try:
            profile = self.get_profile(user_id)
        except sqlite3.Error as exc:
            raise IdentityUnresolved(f"Profile lookup failed for {user_id}: {exc}") from exc
        if profile is None:
            raise IdentityUnresolved(f"No profile for {user_id}")
        return Identity(
            display_name=profile.name,
            profile_picture_url=profile.profile_picture_url,
            member_since=profile.created_at,
        )

    # ── Profiles ──────────────────────────────────────────────────────────

    def get_profile(self, user_id: str) -> Profile | None:
        row = self.conn.execute(
            "SELECT * FROM profiles WHERE id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None
        return Profile(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            profile_picture_url=row["profile_picture_url"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def create_profile(self, user_id: str, name: str, email: str | None = None) -> Profile:
        """Create a profile. Raises ProfileExists if the user already has one."""
        if not name:
            raise InvalidProfile("Profile name is required")
        if self.get_profile(user_id) is not None:
            raise ProfileExists(f"Profile already exists for {user_id}")
        now = _utcnow().isoformat()
        self.conn.execute(
            "INSERT INTO profiles (id, name, email, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (user_id, name, email, now, now),
        )
        self.conn.commit()
        logger.info("created profile for %s", user_id)
        return self.get_profile(user_id)

    def set_profile_picture(self, user_id: str, url: str | None) -> Profile:
        """Store or clear (url=None) the profile picture URL.

        Clearing a profile that has no picture raises InvalidProfile.
        """
        profile = self.get_profile(user_id)
        if profile is None:
            raise ProfileNotFound(f"Profile not found for {user_id}")
        if url is None and not profile.profile_picture_url:
            raise InvalidProfile("No profile picture to delete")
        self.conn.execute(
            "UPDATE profiles SET profile_picture_url = ?, updated_at = ? WHERE id = ?",
            (url, _utcnow().isoformat(), user_id),
        )
        self.conn.commit()
        return self.get_profile(user_id)

    # ── Time entries ──────────────────────────────────────────────────────

    def get_entry(self, user_id: str, entry_id: str) -> TimeEntry:
        row = self.conn.execute(
            "SELECT * FROM time_entries WHERE id = ? AND user_id = ?",
            (entry_id, user_id),
        ).fetchone()
        if row is None:
            raise EntryNotFound(f"Time entry not found: {entry_id}")
        return _row_to_entry(row)

    def start_entry(
        self,
        user_id: str,
        project_name: str,
        description: str = "",
        now: datetime | None = None,
        project_id: str | None = None,
    ) -> TimeEntry:
        """Open a new running entry starting at now.

        project_id optionally tags the entry to one of the user's projects.
        """
        if not project_name:
            raise InvalidEntry("Project name is required")
        if project_id is not None:
            self.get_project(user_id, project_id)
        start = _as_utc(now or _utcnow())
        entry_id = uuid.uuid4().hex
        self.conn.execute(
            "INSERT INTO time_entries "
            "(id, user_id, project_id, project_name, description, start_time, end_time, duration, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, NULL, 0, ?)",
            (entry_id, user_id, project_id, project_name, description,
             start.isoformat(), _utcnow().isoformat()),
        )
        self.conn.commit()
        logger.debug("started entry %s for %s on %s", entry_id, user_id, project_name)
        return self.get_entry(user_id, entry_id)

    def stop_entry(self, user_id: str, entry_id: str, now: datetime | None = None) -> TimeEntry:
        """Close a running entry at now and record its duration."""
        entry = self.get_entry(user_id, entry_id)
        if entry.end_time is not None:
            raise EntryAlreadyStopped(f"Time entry already stopped: {entry_id}")
        end = _as_utc(now or _utcnow())
        if end < entry.start_time:
            raise InvalidEntry("End time cannot be before start time")
        self._set_end(entry, end)
        return self.get_entry(user_id, entry_id)

    def update_entry(
        self,
        user_id: str,
        entry_id: str,
        project_name: str | None = None,
        description: str | None = None,
        end_time: datetime | None = None,
    ) -> TimeEntry:
        """Patch an entry. A new end_time recomputes the duration."""
        entry = self.get_entry(user_id, entry_id)
        end = _as_utc(end_time) if end_time is not None else None
        if end is not None and end < entry.start_time:
            raise InvalidEntry("End time cannot be before start time")
        if project_name:
            self.conn.execute(
                "UPDATE time_entries SET project_name = ? WHERE id = ?",
                (project_name, entry_id),
            )
        if description is not None:
            self.conn.execute(
                "UPDATE time_entries SET description = ? WHERE id = ?",
                (description, entry_id),
            )
        if end is not None:
            self._set_end(entry, end)
        self.conn.commit()
        return self.get_entry(user_id, entry_id)

    def _set_end(self, entry: TimeEntry, end: datetime) -> None:
        duration = int((end - entry.start_time).total_seconds())
        self.conn.execute(
            "UPDATE time_entries SET end_time = ?, duration = ? WHERE id = ?",
            (end.isoformat(), duration, entry.id),
        )
        self.conn.commit()

    def delete_entry(self, user_id: str, entry_id: str) -> None:
        cursor = self.conn.execute(
            "DELETE FROM time_entries WHERE id = ? AND user_id = ?",
            (entry_id, user_id),
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            raise EntryNotFound(f"Time entry not found: {entry_id}")

    def running_entry(self, user_id: str) -> TimeEntry | None:
        """Most recently started entry that has no end time."""
        try:
            row = self.conn.execute(
                "SELECT * FROM time_entries WHERE user_id = ? AND end_time IS NULL "
                "ORDER BY start_time DESC LIMIT 1",
                (user_id,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise DataUnavailable(f"Failed to fetch running entry: {exc}") from exc
        return _row_to_entry(row) if row else None

    def list_entries(self, user_id: str, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> EntryPage:
        """Page through all of a user's entries, newest first.

        page < 1 falls back to 1; limit outside 1..100 falls back to 10.
        """
        page, limit = _page_bounds(page, limit)
        offset = (page - 1) * limit

        total = self.conn.execute(
            "SELECT COUNT(*) FROM time_entries WHERE user_id = ?", (user_id,)
        ).fetchone()[0]
        rows = self.conn.execute(
            "SELECT * FROM time_entries WHERE user_id = ? "
            "ORDER BY created_at DESC, start_time DESC LIMIT ? OFFSET ?",
            (user_id, limit, offset),
        ).fetchall()
        logger.debug("list_entries page=%d limit=%d offset=%d", page, limit, offset)
        return EntryPage(
            entries=[_row_to_entry(row) for row in rows],
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
        )

    # ── Projects ──────────────────────────────────────────────────────────

    def get_project(self, user_id: str, project_id: str) -> Project:
        row = self.conn.execute(
            "SELECT * FROM projects WHERE id = ? AND user_id = ?",
            (project_id, user_id),
        ).fetchone()
        if row is None:
            raise ProjectNotFound(f"Project not found: {project_id}")
        return _row_to_project(row)

    def create_project(
        self,
        user_id: str,
        name: str,
        description: str = "",
        color: str | None = None,
    ) -> Project:
        """Create a project. The name 'General' is reserved."""
        if not name:
            raise InvalidProject("Project name is required")
        _check_project_fields(name, color)
        project_id = uuid.uuid4().hex
        now = _utcnow().isoformat()
        self.conn.execute(
            "INSERT INTO projects (id, user_id, name, description, color, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (project_id, user_id, name, description, color or DEFAULT_PROJECT_COLOR, now, now),
        )
        self.conn.commit()
        logger.debug("created project %s for %s", project_id, user_id)
        return self.get_project(user_id, project_id)

    def list_projects(self, user_id: str, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> ProjectPage:
        """Page through a user's projects, newest first. Same fallbacks as list_entries."""
        page, limit = _page_bounds(page, limit)
        offset = (page - 1) * limit

        total = self.conn.execute(
            "SELECT COUNT(*) FROM projects WHERE user_id = ?", (user_id,)
        ).fetchone()[0]
        rows = self.conn.execute(
            "SELECT * FROM projects WHERE user_id = ? "
            "ORDER BY created_at DESC, name ASC LIMIT ? OFFSET ?",
            (user_id, limit, offset),
        ).fetchall()
        return ProjectPage(
            projects=[_row_to_project(row) for row in rows],
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
        )

    def update_project(
        self,
        user_id: str,
        project_id: str,
        name: str | None = None,
        description: str | None = None,
        color: str | None = None,
    ) -> Project:
        """Patch a project. Empty or missing fields are left unchanged."""
        self.get_project(user_id, project_id)
        _check_project_fields(name, color)
        updates = {"name": name, "description": description, "color": color}
        for column, value in updates.items():
            if value:
                self.conn.execute(
                    f"UPDATE projects SET {column} = ? WHERE id = ?",
                    (value, project_id),
                )
        self.conn.execute(
            "UPDATE projects SET updated_at = ? WHERE id = ?",
            (_utcnow().isoformat(), project_id),
        )
        self.conn.commit()
        return self.get_project(user_id, project_id)

    def delete_project(self, user_id: str, project_id: str) -> int:
        """Delete a project and untag its entries in one transaction.

        Returns how many entries were untagged. The entries themselves stay.
        """
        self.get_project(user_id, project_id)
        with self.conn:
            cursor = self.conn.execute(
                "UPDATE time_entries SET project_id = NULL WHERE project_id = ? AND user_id = ?",
                (project_id, user_id),
            )
            untagged = cursor.rowcount
            self.conn.execute(
                "DELETE FROM projects WHERE id = ? AND user_id = ?",
                (project_id, user_id),
            )
        logger.info("deleted project %s, untagged %d entries", project_id, untagged)
        return untagged

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()
