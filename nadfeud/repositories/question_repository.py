"""Question, Answer and GroupedAnswer data access."""
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.models.answer import Answer
from nadfeud.models.grouped_answer import GroupedAnswer
from nadfeud.models.question import Question
from nadfeud.models.user import User


async def get_question_by_id(
    db: AsyncSession,
    question_id: str,
    *,
    for_update: bool = False,
    shared: bool = False,
) -> Question | None:
    """
    Load a question by id, optionally locking the row (no-op on SQLite).
    for_update takes an exclusive lock, shared a FOR SHARE lock that only conflicts with it.
    """
    stmt = select(Question).where(Question.id == question_id)
    if for_update:
        stmt = stmt.with_for_update()
    elif shared:
        stmt = stmt.with_for_update(read=True)
    result = await db.execute(stmt)
    return result.scalars().first()


async def create_question(
    db: AsyncSession,
    *,
    question_text: str,
    image_url: str | None = None,
    created_by: str | None = None,
    status: str = "pending",
) -> Question:
    question = Question(
        id=str(uuid.uuid4()),
        question_text=question_text,
        image_url=image_url,
        status=status,
        created_by=created_by,
    )
    db.add(question)
    await db.commit()
    await db.refresh(question)
    return question


async def list_questions_by_status(
    db: AsyncSession,
    status: str,
    *,
    newest_first: bool = False,
) -> list[Question]:
    order = Question.created_at.desc() if newest_first else Question.created_at.asc()
    result = await db.execute(select(Question).where(Question.status == status).order_by(order))
    return list(result.scalars().all())


async def set_question_status(db: AsyncSession, question: Question, status: str) -> None:
    """Change the status in the current transaction (no commit)."""
    question.status = status
    await db.flush()


async def delete_question_cascade(db: AsyncSession, question_id: str) -> None:
    """Delete grouped answers, answers, then the question itself."""
    await db.execute(delete(GroupedAnswer).where(GroupedAnswer.question_id == question_id))
    await db.execute(delete(Answer).where(Answer.question_id == question_id))
    await db.execute(delete(Question).where(Question.id == question_id))
    await db.commit()


# ---------- answers ----------


async def get_answers_by_question_id(db: AsyncSession, question_id: str) -> list[Answer]:
    """All answers of a question in submission order."""
    result = await db.execute(
        select(Answer)
        .where(Answer.question_id == question_id)
        .order_by(Answer.created_at.asc(), Answer.id.asc())
    )
    return list(result.scalars().all())


async def get_user_answer(db: AsyncSession, question_id: str, user_id: str) -> Answer | None:
    result = await db.execute(
        select(Answer).where(Answer.question_id == question_id, Answer.user_id == user_id)
    )
    return result.scalars().first()


async def add_answer(
    db: AsyncSession,
    *,
    question_id: str,
    user_id: str,
    answer_text: str,
) -> Answer:
    """Insert an answer and commit. IntegrityError bubbles up on a duplicate (user, question)."""
    answer = Answer(
        id=str(uuid.uuid4()),
        question_id=question_id,
        user_id=user_id,
        answer_text=answer_text,
    )
    db.add(answer)
    await db.commit()
    await db.refresh(answer)
    return answer


async def get_answered_question_ids(
    db: AsyncSession,
    user_id: str,
    question_ids: list[str],
) -> set[str]:
    if not question_ids:
        return set()
    result = await db.execute(
        select(Answer.question_id).where(Answer.user_id == user_id, Answer.question_id.in_(question_ids))
    )
    return {row[0] for row in result.all()}


async def get_answer_history(db: AsyncSession, user_id: str) -> list[tuple[Answer, str | None]]:
    """A user's answers newest first, paired with the question text."""
    result = await db.execute(
        select(Answer, Question.question_text)
        .outerjoin(Question, Question.id == Answer.question_id)
        .where(Answer.user_id == user_id)
        .order_by(Answer.created_at.desc())
    )
    return [(row[0], row[1]) for row in result.all()]


async def list_answers_with_details(db: AsyncSession) -> list[tuple[Answer, Question | None, User | None]]:
    """Every answer with its question and author, newest first (admin view)."""
    result = await db.execute(
        select(Answer, Question, User)
        .outerjoin(Question, Question.id == Answer.question_id)
        .outerjoin(User, User.id == Answer.user_id)
        .order_by(Answer.created_at.desc())
    )
    return [(row[0], row[1], row[2]) for row in result.all()]


async def count_answers(db: AsyncSession, question_id: str) -> int:
    result = await db.execute(select(func.count()).select_from(Answer).where(Answer.question_id == question_id))
    return result.scalar_one() or 0


# ---------- grouped answers ----------


async def replace_grouped_answers(
    db: AsyncSession,
    question_id: str,
    groups: list[dict],
) -> list[GroupedAnswer]:
    """
    Delete the question's existing groups and add the given ones in order.
    Does not commit, so the caller can mark the question ended in the same transaction.
    """
    await db.execute(delete(GroupedAnswer).where(GroupedAnswer.question_id == question_id))
    rows = []
    for position, group in enumerate(groups):
        row = GroupedAnswer(
            id=str(uuid.uuid4()),
            question_id=question_id,
            group_text=group["group_text"],
            count=group["count"],
            percentage=group["percentage"],
            position=position,
        )
        db.add(row)
        rows.append(row)
    await db.flush()
    return rows


async def get_grouped_answers(db: AsyncSession, question_id: str) -> list[GroupedAnswer]:
    """Groups of one question, count descending then classifier order."""
    result = await db.execute(
        select(GroupedAnswer)
        .where(GroupedAnswer.question_id == question_id)
        .order_by(GroupedAnswer.count.desc(), GroupedAnswer.position.asc())
    )
    return list(result.scalars().all())


async def get_grouped_answers_by_question_ids(
    db: AsyncSession,
    question_ids: list[str],
) -> dict[str, list[GroupedAnswer]]:
    """Batch variant of get_grouped_answers. Returns {question_id: [groups]}."""
    if not question_ids:
        return {}
    result = await db.execute(
        select(GroupedAnswer)
        .where(GroupedAnswer.question_id.in_(question_ids))
        .order_by(GroupedAnswer.count.desc(), GroupedAnswer.position.asc())
    )
    out: dict[str, list[GroupedAnswer]] = {qid: [] for qid in question_ids}
    for group in result.scalars().all():
        out[group.question_id].append(group)
    return out
