"""API request/response models, one module per area."""
from nadfeud.schemas.auth import DiscordProfileRequest, SessionResponse, SessionUser
from nadfeud.schemas.health import HealthResponse
from nadfeud.schemas.leaderboard import LeaderboardItem, LeaderboardResponse
from nadfeud.schemas.questions import (
    AnswerDetailItem,
    AnswerHistoryItem,
    AnswerItem,
    EndedQuestionItem,
    EndQuestionResponse,
    GroupItem,
    LiveQuestionItem,
    ManualGroupEntry,
    ManualGroupsRequest,
    QuestionCreateRequest,
    QuestionItem,
    ScoreFailureItem,
    SubmitAnswerRequest,
)
from nadfeud.schemas.suggestions import (
    CategorizeRequest,
    CategorizeResponse,
    SuggestionCreateRequest,
    SuggestionItem,
)
from nadfeud.schemas.user import UserProfileResponse, WalletCreateRequest, WalletItem

__all__ = [
    "DiscordProfileRequest",
    "SessionResponse",
    "SessionUser",
    "HealthResponse",
    "LeaderboardItem",
    "LeaderboardResponse",
    "AnswerDetailItem",
    "AnswerHistoryItem",
    "AnswerItem",
    "EndedQuestionItem",
    "EndQuestionResponse",
    "GroupItem",
    "LiveQuestionItem",
    "ManualGroupEntry",
    "ManualGroupsRequest",
    "QuestionCreateRequest",
    "QuestionItem",
    "ScoreFailureItem",
    "SubmitAnswerRequest",
    "CategorizeRequest",
    "CategorizeResponse",
    "SuggestionCreateRequest",
    "SuggestionItem",
    "UserProfileResponse",
    "WalletCreateRequest",
    "WalletItem",
]
