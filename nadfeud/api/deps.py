"""API dependencies: bearer token -> AuthSession."""
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from nadfeud.core.auth import AuthSession
from nadfeud.core.db import get_db
from nadfeud.core.security import decode_access_token
from nadfeud.repositories.user_repository import get_user_by_id

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_optional_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthSession | None:
    """Session for a valid token, None for anonymous callers or a bad token."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    user_id = decode_access_token(credentials.credentials)
    if not user_id:
        return None
    user = await get_user_by_id(db, user_id)
    if not user:
        return None
    return AuthSession.from_user(user)


async def get_current_session(
    session: AuthSession | None = Depends(get_optional_session),
) -> AuthSession:
    """Resolve Authorization: Bearer <token> to the signed-in user's session."""
    if session is None:
        raise HTTPException(status_code=401, detail="not signed in or token invalid")
    return session
