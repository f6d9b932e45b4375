"""Question, answer and grouping request/response models."""
from datetime import datetime

from pydantic import BaseModel, Field


# ----- questions -----
class QuestionCreateRequest(BaseModel):
    question_text: str = Field(..., description="Prompt shown to players")
    image_url: str | None = Field(None, description="Optional illustration URL")


class QuestionItem(BaseModel):
    id: str
    question_text: str
    image_url: str | None = None
    status: str = Field(..., description="pending / live / ended")
    created_at: datetime


class LiveQuestionItem(QuestionItem):
    answered: bool = Field(False, description="Whether the current user already answered")


class GroupItem(BaseModel):
    group_text: str
    count: int
    percentage: float


class EndedQuestionItem(BaseModel):
    question: QuestionItem
    groups: list[GroupItem] = Field(default_factory=list)


# ----- answers -----
class SubmitAnswerRequest(BaseModel):
    answer_text: str = Field(..., description="Free-text answer")


class AnswerItem(BaseModel):
    id: str
    question_id: str
    user_id: str
    answer_text: str
    created_at: datetime


class AnswerHistoryItem(BaseModel):
    answer_text: str
    created_at: datetime
    question_text: str | None = None


class AnswerDetailItem(BaseModel):
    id: str
    answer_text: str
    created_at: datetime
    question_id: str
    question_text: str
    question_status: str
    user_id: str
    username: str
    avatar_url: str | None = None
    discord_role: str | None = None


# ----- ending -----
class ManualGroupEntry(BaseModel):
    group_text: str = Field(..., description="Group label")
    percentage: float = Field(..., description="Share of answers, 0-100")


class ManualGroupsRequest(BaseModel):
    groups: list[ManualGroupEntry] = Field(default_factory=list)


class ScoreFailureItem(BaseModel):
    user_id: str
    points: int
    reason: str


class EndQuestionResponse(BaseModel):
    question: QuestionItem
    groups: list[GroupItem] = Field(default_factory=list)
    awarded: dict[str, int] = Field(default_factory=dict, description="Points per user id")
    failed: list[ScoreFailureItem] = Field(default_factory=list, description="Increments that could not be applied")
