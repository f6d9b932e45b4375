from sqlalchemy import Column, ForeignKey, String, Text, UniqueConstraint

from nadfeud.models.base import TimestampMixin
from nadfeud.core.db import Base


class Answer(Base, TimestampMixin):
    __tablename__ = "answers"
    __table_args__ = (UniqueConstraint("user_id", "question_id", name="uq_answers_user_question"),)

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    question_id = Column(String(36), ForeignKey("questions.id"), nullable=False, index=True)
    answer_text = Column(Text, nullable=False)
