from sqlalchemy import Column, ForeignKey, String, Text

from nadfeud.models.base import TimestampMixin
from nadfeud.core.db import Base


class Suggestion(Base, TimestampMixin):
    __tablename__ = "suggestions"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    category = Column(String(50), nullable=True)
