from sqlalchemy import Column, ForeignKey, Integer, String

from nadfeud.models.base import TimestampMixin
from nadfeud.core.db import Base


class ScoreEvent(Base, TimestampMixin):
    """One applied score increment. Feeds the weekly leaderboard."""
    __tablename__ = "score_events"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    question_id = Column(String(36), ForeignKey("questions.id"), nullable=False, index=True)
    points = Column(Integer, nullable=False)
