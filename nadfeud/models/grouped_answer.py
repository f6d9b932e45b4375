from sqlalchemy import Column, Float, ForeignKey, Integer, String

from nadfeud.models.base import TimestampMixin
from nadfeud.core.db import Base


class GroupedAnswer(Base, TimestampMixin):
    __tablename__ = "grouped_answers"

    id = Column(String(36), primary_key=True)
    question_id = Column(String(36), ForeignKey("questions.id"), nullable=False, index=True)
    group_text = Column(String(255), nullable=False)
    count = Column(Integer, nullable=False)
    percentage = Column(Float, nullable=False)
    # classifier output order, used to break count ties when reading back
    position = Column(Integer, nullable=False, default=0)
