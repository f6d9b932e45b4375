from sqlalchemy import Column, ForeignKey, String, Text

from nadfeud.models.base import TimestampMixin
from nadfeud.core.db import Base

QUESTION_STATUS_PENDING = "pending"
QUESTION_STATUS_LIVE = "live"
QUESTION_STATUS_ENDED = "ended"


class Question(Base, TimestampMixin):
    __tablename__ = "questions"

    id = Column(String(36), primary_key=True)
    question_text = Column(Text, nullable=False)
    image_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=QUESTION_STATUS_PENDING, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)
