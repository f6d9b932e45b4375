"""Session endpoint: POST /auth/session (development only)."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.core.config import settings
from nadfeud.core.db import get_db
from nadfeud.core.security import create_access_token
from nadfeud.repositories.user_repository import upsert_discord_user
from nadfeud.schemas.auth import DiscordProfileRequest, SessionResponse, SessionUser

router = APIRouter()


@router.post("/session", response_model=SessionResponse)
async def create_session(body: DiscordProfileRequest, db: AsyncSession = Depends(get_db)):
    """
    Store a Discord profile and return a bearer token for it.
    Trusts the payload, so it is only served in development; production tokens come from the Discord login.
    """
    if settings.environment != "development":
        raise HTTPException(status_code=404, detail="Not Found")
    user = await upsert_discord_user(
        db,
        discord_id=body.discord_id,
        username=body.username,
        nickname=body.nickname,
        avatar_url=body.avatar_url,
        banner_url=body.banner_url,
        discord_roles=body.discord_roles,
        discord_role=body.discord_role,
        can_vote=body.can_vote,
        is_admin=body.is_admin,
    )
    return SessionResponse(
        token=create_access_token(user.id),
        user=SessionUser(id=user.id, username=user.nickname or user.username, can_vote=user.can_vote, is_admin=user.is_admin),
    )
