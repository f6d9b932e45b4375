"""Profile and wallet models."""
from datetime import datetime

from pydantic import BaseModel, Field


class UserProfileResponse(BaseModel):
    id: str
    discord_id: str
    username: str
    nickname: str | None = None
    avatar_url: str | None = None
    banner_url: str | None = None
    total_score: int = 0
    discord_roles: list[str] = Field(default_factory=list)
    discord_role: str | None = None
    can_vote: bool = False
    is_admin: bool = False


class WalletCreateRequest(BaseModel):
    address: str = Field(..., description="EVM address, 0x followed by 40 hex characters")


class WalletItem(BaseModel):
    id: str
    address: str
    created_at: datetime
