"""Score increments, score events and the reset of game data."""
import uuid

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.models.answer import Answer
from nadfeud.models.grouped_answer import GroupedAnswer
from nadfeud.models.score_event import ScoreEvent
from nadfeud.models.user import User


async def increment_user_score(
    db: AsyncSession,
    *,
    user_id: str,
    question_id: str,
    points: int,
) -> bool:
    """
    Atomically add points to users.total_score and record a score event, in one commit.
    Returns False (and rolls back) when the user row does not exist.
    """
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(total_score=User.total_score + points)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        return False
    db.add(ScoreEvent(id=str(uuid.uuid4()), user_id=user_id, question_id=question_id, points=points))
    await db.commit()
    return True


async def get_scored_user_ids(db: AsyncSession, question_id: str) -> set[str]:
    """Users that already received points for this question."""
    result = await db.execute(select(ScoreEvent.user_id).where(ScoreEvent.question_id == question_id))
    return {row[0] for row in result.all()}


async def reset_game_data(db: AsyncSession) -> None:
    """Delete answers, groups and score events and zero every score."""
    await db.execute(delete(ScoreEvent))
    await db.execute(delete(GroupedAnswer))
    await db.execute(delete(Answer))
    await db.execute(update(User).values(total_score=0).execution_options(synchronize_session=False))
    await db.commit()
