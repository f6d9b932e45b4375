from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.api.deps import get_current_session
from nadfeud.core.auth import AuthSession
from nadfeud.core.db import get_db
from nadfeud.schemas.suggestions import SuggestionCreateRequest, SuggestionItem
from nadfeud.services import suggestion_service

router = APIRouter()


@router.post("", response_model=SuggestionItem, status_code=201)
async def submit_suggestion(
    body: SuggestionCreateRequest,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    """Suggest a question for a future round."""
    s = await suggestion_service.submit_suggestion(db, session, body.text)
    return SuggestionItem(id=s.id, text=s.text, category=s.category, created_at=s.created_at, user_id=s.user_id)
