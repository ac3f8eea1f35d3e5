"""Data types shared by the stats engine and its collaborators."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Protocol


@dataclass
class TimeEntry:
    id: str
    user_id: str
    start_time: datetime
    end_time: datetime | None = None  # None while the session is running
    duration_seconds: int = 0
    project_name: str = ""
    description: str = ""
    created_at: datetime | None = None
    project_id: str | None = None  # set when tagged to a Project

    @property
    def is_running(self) -> bool:
        return self.end_time is None

    @property
    def qualifies(self) -> bool:
        """Only entries with a positive duration count towards statistics."""
        return self.duration_seconds > 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "description": self.description,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration": self.duration_seconds,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class Profile:
    id: str
    name: str
    email: str | None = None
    profile_picture_url: str | None = None
    created_at: str | None = None  # ISO-8601
    updated_at: str | None = None


@dataclass
class Identity:
    display_name: str
    profile_picture_url: str | None = None
    member_since: str | None = None


@dataclass
class RequestContext:
    """Who is asking. Both fields are None for an unauthenticated caller."""

    caller_id: str | None = None
    caller_email: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.caller_id is not None


@dataclass
class UserStats:
    user_id: str
    total_hours: float
    total_sessions: int
    daily_average_hours: float
    current_streak: int
    rank: int
    level: str
    level_color: str
    active_days: int = 0
    last_active_date: str | None = None  # YYYY-MM-DD
    next_level: str | None = None  # None at the top tier
    seconds_to_next_level: int | None = None
    display_name: str | None = None
    email: str | None = None
    profile_picture_url: str | None = None
    member_since: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.display_name,
            "email": self.email,
            "profile_picture_url": self.profile_picture_url,
            "total_hours": self.total_hours,
            "total_sessions": self.total_sessions,
            "current_streak": self.current_streak,
            "active_days": self.active_days,
            "last_active_date": self.last_active_date,
            "daily_avg": self.daily_average_hours,
            "rank": self.rank,
            "level": self.level,
            "level_color": self.level_color,
            "next_level": self.next_level,
            "seconds_to_next_level": self.seconds_to_next_level,
            "created_at": self.member_since,
        }


@dataclass
class LeaderboardEntry:
    user_id: str
    display_name: str
    profile_picture_url: str | None
    total_hours: float
    level: str
    level_color: str
    rank: int
    current_streak: int
    is_current_user: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["name"] = data.pop("display_name")
        return data


@dataclass
class EntryPage:
    entries: list[TimeEntry]
    page: int
    limit: int
    total: int
    total_pages: int

    def to_dict(self) -> dict:
        return {
            "data": [e.to_dict() for e in self.entries],
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
        }


@dataclass
class Project:
    id: str
    user_id: str
    name: str
    description: str = ""
    color: str = "#3B82F6"
    created_at: str | None = None  # ISO-8601
    updated_at: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ProjectPage:
    projects: list[Project]
    page: int
    limit: int
    total: int
    total_pages: int

    def to_dict(self) -> dict:
        return {
            "data": [p.to_dict() for p in self.projects],
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
        }


class EntryStore(Protocol):
    """Read side of the time entry storage used by the stats engine."""

    def entries_for_user(self, user_id: str) -> list[TimeEntry]:
        """Qualifying entries (duration > 0) for one user, any order."""
        ...

    def total_duration_per_user(self) -> dict[str, int]:
        """Sum of qualifying durations in seconds, keyed by user id."""
        ...


class IdentityResolver(Protocol):
    def resolve_identity(self, user_id: str) -> Identity:
        """Raise IdentityUnresolved when the user has no profile."""
        ...
