"""Leaderboard response models."""
from pydantic import BaseModel, Field


class LeaderboardItem(BaseModel):
    id: str
    discord_id: str
    username: str
    nickname: str | None = None
    avatar_url: str | None = None
    total_score: int = 0
    questions_participated: int = 0


class LeaderboardResponse(BaseModel):
    period: str = Field(..., description="all / weekly")
    items: list[LeaderboardItem] = Field(default_factory=list)
