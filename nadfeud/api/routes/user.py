"""Signed-in user: GET /user/profile, answer history and wallets."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.api.deps import get_current_session
from nadfeud.core.auth import AuthSession
from nadfeud.core.db import get_db
from nadfeud.models.wallet import Wallet
from nadfeud.schemas.questions import AnswerHistoryItem
from nadfeud.schemas.user import UserProfileResponse, WalletCreateRequest, WalletItem
from nadfeud.services import question_service, user_service

router = APIRouter()


def _wallet_to_item(wallet: Wallet) -> WalletItem:
    return WalletItem(id=wallet.id, address=wallet.address, created_at=wallet.created_at)


@router.get("/profile", response_model=UserProfileResponse)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    user = await user_service.get_profile(db, session)
    return UserProfileResponse(
        id=user.id,
        discord_id=user.discord_id,
        username=user.username,
        nickname=user.nickname,
        avatar_url=user.avatar_url,
        banner_url=user.banner_url,
        total_score=user.total_score or 0,
        discord_roles=list(user.discord_roles or []),
        discord_role=user.discord_role,
        can_vote=user.can_vote,
        is_admin=user.is_admin,
    )


@router.get("/answers", response_model=list[AnswerHistoryItem])
async def answer_history(
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    """The caller's answers, newest first."""
    rows = await question_service.get_answer_history(db, session.user_id)
    return [
        AnswerHistoryItem(answer_text=a.answer_text, created_at=a.created_at, question_text=question_text)
        for a, question_text in rows
    ]


@router.get("/wallets", response_model=list[WalletItem])
async def list_wallets(
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    return [_wallet_to_item(w) for w in await user_service.list_wallets(db, session)]


@router.post("/wallets", response_model=WalletItem, status_code=201)
async def add_wallet(
    body: WalletCreateRequest,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    return _wallet_to_item(await user_service.add_wallet(db, session, body.address))


@router.delete("/wallets/{wallet_id}", status_code=204)
async def delete_wallet(
    wallet_id: str,
    db: AsyncSession = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
):
    await user_service.delete_wallet(db, session, wallet_id)
