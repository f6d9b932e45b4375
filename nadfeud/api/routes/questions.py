"""Player-facing question endpoints: live and ended questions, answering."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.api.deps import get_current_session, get_optional_session
from nadfeud.core.auth import AuthSession
from nadfeud.core.db import get_db
from nadfeud.models.question import Question
from nadfeud.schemas.questions import (
    AnswerItem,
    EndedQuestionItem,
    GroupItem,
    LiveQuestionItem,
    QuestionItem,
    SubmitAnswerRequest,
)
from nadfeud.services import question_service
from nadfeud.services.question_service import QuestionLifecycle, get_lifecycle

router = APIRouter()


def question_to_item(q: Question) -> QuestionItem:
    return QuestionItem(
        id=q.id,
        question_text=q.question_text,
        image_url=q.image_url,
        status=q.status,
        created_at=q.created_at,
    )


@router.get("/live", response_model=list[LiveQuestionItem])
async def live_questions(
    db: AsyncSession = Depends(get_db),
    session: AuthSession | None = Depends(get_optional_session),
):
    """The live question(s), flagged with whether the caller already answered."""
    rows = await question_service.list_live_questions(db, session.user_id if session else None)
    return [LiveQuestionItem(**question_to_item(q).model_dump(), answered=answered) for q, answered in rows]


@router.get("/ended", response_model=list[EndedQuestionItem])
async def ended_questions(db: AsyncSession = Depends(get_db)):
    rows = await question_service.list_ended_questions(db)
    return [
        EndedQuestionItem(
            question=question_to_item(q),
            groups=[GroupItem(group_text=g.group_text, count=g.count, percentage=g.percentage) for g in groups],
        )
        for q, groups in rows
    ]


@router.post("/{question_id}/answers", response_model=AnswerItem, status_code=201)
async def submit_answer(
    question_id: str,
    body: SubmitAnswerRequest,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
    lifecycle: QuestionLifecycle = Depends(get_lifecycle),
):
    answer = await lifecycle.submit_answer(db, session, question_id, body.answer_text)
    return AnswerItem(
        id=answer.id,
        question_id=answer.question_id,
        user_id=answer.user_id,
        answer_text=answer.answer_text,
        created_at=answer.created_at,
    )
