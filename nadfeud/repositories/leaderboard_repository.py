"""Aggregate queries behind the leaderboards."""
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.models.answer import Answer
from nadfeud.models.score_event import ScoreEvent
from nadfeud.models.user import User


async def list_users(db: AsyncSession) -> list[User]:
    """All users in creation order, scores re-read from the database."""
    result = await db.execute(
        select(User)
        .order_by(User.created_at.asc(), User.id.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_participation_counts(db: AsyncSession, since: datetime | None = None) -> dict[str, int]:
    """Distinct questions answered per user, optionally only answers created at or after `since`."""
    stmt = select(Answer.user_id, func.count(func.distinct(Answer.question_id))).group_by(Answer.user_id)
    if since is not None:
        stmt = stmt.where(Answer.created_at >= since)
    result = await db.execute(stmt)
    return {row[0]: row[1] for row in result.all()}


async def get_points_since(db: AsyncSession, since: datetime) -> dict[str, int]:
    """Sum of score event points per user from `since` on."""
    result = await db.execute(
        select(ScoreEvent.user_id, func.sum(ScoreEvent.points))
        .where(ScoreEvent.created_at >= since)
        .group_by(ScoreEvent.user_id)
    )
    return {row[0]: int(row[1] or 0) for row in result.all()}
