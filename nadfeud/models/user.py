from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON

from nadfeud.models.base import TimestampMixin
from nadfeud.core.db import Base


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    discord_id = Column(String(64), unique=True, nullable=False)
    username = Column(String(100), nullable=False)
    nickname = Column(String(100), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    banner_url = Column(String(500), nullable=True)
    # only ever changed through score_repository.increment_user_score
    total_score = Column(Integer, nullable=False, default=0, server_default="0")
    discord_roles = Column(JSONB().with_variant(JSON(), "sqlite"), nullable=True)
    discord_role = Column(String(100), nullable=True)
    can_vote = Column(Boolean, nullable=False, default=False)
    is_admin = Column(Boolean, nullable=False, default=False)
