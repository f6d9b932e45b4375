"""Session request/response models."""
from pydantic import BaseModel, Field


class DiscordProfileRequest(BaseModel):
    """Profile as delivered by the Discord login; the OAuth exchange itself happens upstream."""
    discord_id: str = Field(..., min_length=1, description="Discord user id")
    username: str = Field(..., min_length=1, description="Discord username")
    nickname: str | None = Field(None, description="Server nickname")
    avatar_url: str | None = Field(None, description="Avatar URL")
    banner_url: str | None = Field(None, description="Banner URL")
    discord_roles: list[str] = Field(default_factory=list, description="Guild role ids")
    discord_role: str | None = Field(None, description="Display role name")
    can_vote: bool = Field(False, description="May answer questions")
    is_admin: bool = Field(False, description="May manage questions")


class SessionUser(BaseModel):
    id: str = Field(..., description="User id")
    username: str = Field(..., description="Display name")
    can_vote: bool = False
    is_admin: bool = False


class SessionResponse(BaseModel):
    token: str = Field(..., description="Bearer token")
    user: SessionUser = Field(..., description="Signed-in user")
