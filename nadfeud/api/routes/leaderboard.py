"""Leaderboard: GET /leaderboard?period=all|weekly&roleId=..."""
from dataclasses import asdict
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.core.db import get_db
from nadfeud.schemas.leaderboard import LeaderboardItem, LeaderboardResponse
from nadfeud.services.leaderboard_service import get_leaderboard, get_weekly_leaderboard

router = APIRouter()


@router.get("", response_model=LeaderboardResponse)
async def leaderboard(
    period: Literal["all", "weekly"] = Query("all"),
    role_id: str | None = Query(None, alias="roleId", description="Only users holding this Discord role"),
    db: AsyncSession = Depends(get_db),
):
    if period == "weekly":
        entries = await get_weekly_leaderboard(db, role_id=role_id)
    else:
        entries = await get_leaderboard(db, role_id=role_id)
    return LeaderboardResponse(period=period, items=[LeaderboardItem(**asdict(e)) for e in entries])
