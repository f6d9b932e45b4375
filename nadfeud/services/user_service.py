"""Player profile and wallet management."""
import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.core.auth import AuthSession
from nadfeud.core.config import settings
from nadfeud.core.errors import NotFound, PermissionDenied, ValidationError
from nadfeud.models.user import User
from nadfeud.models.wallet import Wallet
from nadfeud.repositories import user_repository

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


async def get_profile(db: AsyncSession, session: AuthSession) -> User:
    user = await user_repository.get_user_by_id(db, session.user_id)
    if user is None:
        raise NotFound("user not found")
    return user


async def list_wallets(db: AsyncSession, session: AuthSession) -> list[Wallet]:
    return await user_repository.list_wallets(db, session.user_id)


async def add_wallet(db: AsyncSession, session: AuthSession, address: str) -> Wallet:
    """Link an EVM address. At most WALLET_LIMIT per user, no duplicates."""
    address = (address or "").strip()
    if not _ADDRESS_RE.match(address):
        raise ValidationError("wallet address must be a 0x-prefixed 40 hex character address")
    if await user_repository.count_wallets(db, session.user_id) >= settings.wallet_limit:
        raise ValidationError(f"at most {settings.wallet_limit} wallets can be linked")
    try:
        return await user_repository.add_wallet(db, user_id=session.user_id, address=address)
    except IntegrityError as e:
        await db.rollback()
        raise ValidationError("this wallet is already linked") from e


async def delete_wallet(db: AsyncSession, session: AuthSession, wallet_id: str) -> None:
    wallet = await user_repository.get_wallet_by_id(db, wallet_id)
    if wallet is None:
        raise NotFound("wallet not found")
    if wallet.user_id != session.user_id:
        raise PermissionDenied("this wallet belongs to another user")
    await user_repository.delete_wallet_by_id(db, wallet_id)
    logger.info("[wallets] user_id=%s removed wallet_id=%s", session.user_id, wallet_id)
