"""Suggestion models."""
from datetime import datetime

from pydantic import BaseModel, Field


class SuggestionCreateRequest(BaseModel):
    text: str = Field(..., description="Suggested question")


class SuggestionItem(BaseModel):
    id: str
    text: str
    category: str | None = None
    created_at: datetime
    user_id: str
    username: str | None = None
    avatar_url: str | None = None


class CategorizeRequest(BaseModel):
    suggestion_ids: list[str] | None = Field(None, description="Defaults to every suggestion")


class CategorizeResponse(BaseModel):
    categories: dict[str, str] = Field(default_factory=dict, description="Category per suggestion id")
