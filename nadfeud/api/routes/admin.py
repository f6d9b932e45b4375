"""Admin endpoints: question authoring and lifecycle, suggestions, data reset.

Ending a question (`/end` or `/groups`) calls the grouping model and can take
tens of seconds; clients should allow at least CLASSIFIER_TIMEOUT_SECONDS.
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.api.deps import get_current_session
from nadfeud.api.routes.questions import question_to_item
from nadfeud.core.auth import AuthSession
from nadfeud.core.config import settings
from nadfeud.core.db import get_db
from nadfeud.schemas.questions import (
    AnswerDetailItem,
    EndQuestionResponse,
    GroupItem,
    ManualGroupsRequest,
    QuestionCreateRequest,
    QuestionItem,
    ScoreFailureItem,
)
from nadfeud.schemas.suggestions import CategorizeRequest, CategorizeResponse, SuggestionItem
from nadfeud.services import question_service, suggestion_service
from nadfeud.services.question_service import EndResult, QuestionLifecycle, get_lifecycle

router = APIRouter()


def _end_result_to_response(result: EndResult) -> EndQuestionResponse:
    return EndQuestionResponse(
        question=question_to_item(result.question),
        groups=[GroupItem(**g.model_dump()) for g in result.groups],
        awarded=dict(result.scoring.awarded),
        failed=[ScoreFailureItem(user_id=f.user_id, points=f.points, reason=f.message) for f in result.scoring.failed],
    )


# ---------- questions ----------


@router.get("/questions", response_model=list[QuestionItem])
async def list_questions(
    status: str = Query("pending", description="pending / live / ended"),
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    return [question_to_item(q) for q in await question_service.list_questions(db, session, status)]


@router.post("/questions", response_model=QuestionItem, status_code=201)
async def create_question(
    body: QuestionCreateRequest,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    question = await question_service.create_question(db, session, body.question_text, body.image_url)
    return question_to_item(question)


@router.put("/questions/{question_id}", response_model=QuestionItem)
async def update_question(
    question_id: str,
    body: QuestionCreateRequest,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    question = await question_service.update_question(db, session, question_id, body.question_text, body.image_url)
    return question_to_item(question)


@router.delete("/questions/{question_id}", status_code=204)
async def delete_question(
    question_id: str,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    await question_service.delete_question(db, session, question_id)


@router.delete("/questions/{question_id}/live", status_code=204)
async def delete_live_question(
    question_id: str,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
    lifecycle: QuestionLifecycle = Depends(get_lifecycle),
):
    """Remove a live question and its answers without scoring."""
    await lifecycle.delete_live_question(db, session, question_id)


@router.post("/questions/{question_id}/start", response_model=QuestionItem)
async def start_question(
    question_id: str,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
    lifecycle: QuestionLifecycle = Depends(get_lifecycle),
):
    """Make a pending question live. The currently live question is ended (grouped and scored) first."""
    question = await lifecycle.start_question(db, session, question_id)
    return question_to_item(question)


@router.post("/questions/{question_id}/end", response_model=EndQuestionResponse)
async def end_question(
    question_id: str,
    response: Response,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
    lifecycle: QuestionLifecycle = Depends(get_lifecycle),
):
    """
    Group the answers with the model, store the groups, end the question and award points.
    On a grouping failure the question stays live and the call can simply be repeated.
    """
    response.headers["X-Recommended-Client-Timeout"] = str(int(settings.classifier_timeout_seconds * 1000))
    result = await lifecycle.end_question(db, session, question_id)
    return _end_result_to_response(result)


@router.put("/questions/{question_id}/groups", response_model=EndQuestionResponse)
async def set_manual_groups(
    question_id: str,
    body: ManualGroupsRequest,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
    lifecycle: QuestionLifecycle = Depends(get_lifecycle),
):
    """End (or re-group) a question with hand-written groups instead of the model."""
    result = await lifecycle.set_manual_grouped_answers(db, session, question_id, body.groups)
    return _end_result_to_response(result)


@router.get("/answers", response_model=list[AnswerDetailItem])
async def list_answers(
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    rows = await question_service.list_answers_with_details(db, session)
    return [
        AnswerDetailItem(
            id=a.id,
            answer_text=a.answer_text,
            created_at=a.created_at,
            question_id=a.question_id,
            question_text=q.question_text if q else "Unknown Question",
            question_status=q.status if q else "unknown",
            user_id=a.user_id,
            username=u.username if u else "Unknown User",
            avatar_url=u.avatar_url if u else None,
            discord_role=u.discord_role if u else None,
        )
        for a, q, u in rows
    ]


@router.post("/reset", status_code=204)
async def reset_all_data(
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    """Delete all answers, groups and score events and zero every score."""
    await question_service.reset_all_data(db, session)


# ---------- suggestions ----------


@router.get("/suggestions", response_model=list[SuggestionItem])
async def list_suggestions(
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    rows = await suggestion_service.list_suggestions(db, session)
    return [
        SuggestionItem(
            id=s.id,
            text=s.text,
            category=s.category,
            created_at=s.created_at,
            user_id=s.user_id,
            username=u.username if u else None,
            avatar_url=u.avatar_url if u else None,
        )
        for s, u in rows
    ]


@router.delete("/suggestions/{suggestion_id}", status_code=204)
async def delete_suggestion(
    suggestion_id: str,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    await suggestion_service.delete_suggestion(db, session, suggestion_id)


@router.post("/suggestions/categorize", response_model=CategorizeResponse)
async def categorize_suggestions(
    body: CategorizeRequest,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    categories = await suggestion_service.categorize_suggestions(db, session, body.suggestion_ids)
    return CategorizeResponse(categories=categories)
