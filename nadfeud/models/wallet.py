from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

from nadfeud.models.base import TimestampMixin
from nadfeud.core.db import Base


class Wallet(Base, TimestampMixin):
    __tablename__ = "wallets"
    __table_args__ = (UniqueConstraint("user_id", "address", name="uq_wallets_user_address"),)

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    address = Column(String(128), nullable=False)
