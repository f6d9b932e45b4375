from nadfeud.core.db import Base
from nadfeud.models.base import TimestampMixin
from nadfeud.models.user import User
from nadfeud.models.question import Question
from nadfeud.models.answer import Answer
from nadfeud.models.grouped_answer import GroupedAnswer
from nadfeud.models.score_event import ScoreEvent
from nadfeud.models.suggestion import Suggestion
from nadfeud.models.wallet import Wallet

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "Question",
    "Answer",
    "GroupedAnswer",
    "ScoreEvent",
    "Suggestion",
    "Wallet",
]
