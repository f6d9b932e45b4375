"""Question suggestion data access."""
import uuid

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.models.suggestion import Suggestion
from nadfeud.models.user import User


async def create_suggestion(db: AsyncSession, *, user_id: str, text: str) -> Suggestion:
    suggestion = Suggestion(id=str(uuid.uuid4()), user_id=user_id, text=text)
    db.add(suggestion)
    await db.commit()
    await db.refresh(suggestion)
    return suggestion


async def list_suggestions(db: AsyncSession) -> list[tuple[Suggestion, User | None]]:
    """All suggestions newest first, with the submitting user."""
    result = await db.execute(
        select(Suggestion, User)
        .outerjoin(User, User.id == Suggestion.user_id)
        .order_by(Suggestion.created_at.desc())
    )
    return [(row[0], row[1]) for row in result.all()]


async def get_suggestions_by_ids(db: AsyncSession, suggestion_ids: list[str]) -> list[Suggestion]:
    if not suggestion_ids:
        return []
    result = await db.execute(select(Suggestion).where(Suggestion.id.in_(suggestion_ids)))
    return list(result.scalars().all())


async def set_categories(db: AsyncSession, categories: dict[str, str]) -> None:
    """Store {suggestion_id: category} and commit."""
    for suggestion_id, category in categories.items():
        await db.execute(
            update(Suggestion)
            .where(Suggestion.id == suggestion_id)
            .values(category=category)
            .execution_options(synchronize_session=False)
        )
    await db.commit()


async def delete_suggestion_by_id(db: AsyncSession, suggestion_id: str) -> bool:
    result = await db.execute(delete(Suggestion).where(Suggestion.id == suggestion_id))
    await db.commit()
    return result.rowcount > 0
