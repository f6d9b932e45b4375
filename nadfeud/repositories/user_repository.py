import uuid
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.models.user import User
from nadfeud.models.wallet import Wallet


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Load a user by id, or None."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalars().first()


async def get_user_by_discord_id(db: AsyncSession, discord_id: str) -> User | None:
    result = await db.execute(select(User).where(User.discord_id == discord_id))
    return result.scalars().first()


async def upsert_discord_user(
    db: AsyncSession,
    *,
    discord_id: str,
    username: str,
    nickname: str | None = None,
    avatar_url: str | None = None,
    banner_url: str | None = None,
    discord_roles: list[str] | None = None,
    discord_role: str | None = None,
    can_vote: bool = False,
    is_admin: bool = False,
) -> User:
    """Create the user for a Discord profile, or refresh its profile fields. total_score is never touched."""
    user = await get_user_by_discord_id(db, discord_id)
    if user is None:
        user = User(id=str(uuid.uuid4()), discord_id=discord_id, total_score=0)
        db.add(user)
    user.username = username
    user.nickname = nickname
    user.avatar_url = avatar_url
    user.banner_url = banner_url
    user.discord_roles = list(discord_roles or [])
    user.discord_role = discord_role
    user.can_vote = can_vote
    user.is_admin = is_admin
    await db.commit()
    await db.refresh(user)
    return user


# ---------- wallets ----------


async def list_wallets(db: AsyncSession, user_id: str) -> list[Wallet]:
    result = await db.execute(select(Wallet).where(Wallet.user_id == user_id).order_by(Wallet.created_at.asc()))
    return list(result.scalars().all())


async def count_wallets(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(select(func.count()).select_from(Wallet).where(Wallet.user_id == user_id))
    return result.scalar_one() or 0


async def get_wallet_by_id(db: AsyncSession, wallet_id: str) -> Wallet | None:
    result = await db.execute(select(Wallet).where(Wallet.id == wallet_id))
    return result.scalars().first()


async def add_wallet(db: AsyncSession, *, user_id: str, address: str) -> Wallet:
    wallet = Wallet(id=str(uuid.uuid4()), user_id=user_id, address=address)
    db.add(wallet)
    await db.commit()
    await db.refresh(wallet)
    return wallet


async def delete_wallet_by_id(db: AsyncSession, wallet_id: str) -> None:
    await db.execute(delete(Wallet).where(Wallet.id == wallet_id))
    await db.commit()
