"""Read-only leaderboards: all-time from users.total_score, weekly from score events in a rolling window."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.core.config import settings
from nadfeud.models.user import User
from nadfeud.repositories import leaderboard_repository


@dataclass
class LeaderboardEntry:
    id: str
    discord_id: str
    username: str
    nickname: str | None
    avatar_url: str | None
    total_score: int
    questions_participated: int


def _has_role(user: User, role_id: str | None) -> bool:
    if not role_id:
        return True
    return role_id in (user.discord_roles or [])


def _entry(user: User, score: int, participated: int) -> LeaderboardEntry:
    return LeaderboardEntry(
        id=user.id,
        discord_id=user.discord_id,
        username=user.username,
        nickname=user.nickname,
        avatar_url=user.avatar_url,
        total_score=score,
        questions_participated=participated,
    )


def _rank(entries: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
    # sorted() is stable, ties keep user creation order
    return sorted(entries, key=lambda e: e.total_score, reverse=True)


async def get_leaderboard(db: AsyncSession, role_id: str | None = None) -> list[LeaderboardEntry]:
    users = await leaderboard_repository.list_users(db)
    participation = await leaderboard_repository.get_participation_counts(db)
    return _rank([
        _entry(u, u.total_score or 0, participation.get(u.id, 0))
        for u in users
        if _has_role(u, role_id)
    ])


async def get_weekly_leaderboard(
    db: AsyncSession,
    role_id: str | None = None,
    now: datetime | None = None,
) -> list[LeaderboardEntry]:
    """Points and participation recomputed from the last LEADERBOARD_WINDOW_DAYS only."""
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=settings.leaderboard_window_days)
    users = await leaderboard_repository.list_users(db)
    points = await leaderboard_repository.get_points_since(db, since)
    participation = await leaderboard_repository.get_participation_counts(db, since=since)
    return _rank([
        _entry(u, points.get(u.id, 0), participation.get(u.id, 0))
        for u in users
        if _has_role(u, role_id) and (u.id in points or u.id in participation)
    ])
