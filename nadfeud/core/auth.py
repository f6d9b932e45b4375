"""The caller identity handed to the services. Built by the API layer from the bearer token."""
from dataclasses import dataclass

from nadfeud.core.errors import PermissionDenied


@dataclass(frozen=True)
class AuthSession:
    user_id: str
    can_vote: bool = False
    is_admin: bool = False
    roles: tuple[str, ...] = ()

    @classmethod
    def from_user(cls, user) -> "AuthSession":
        return cls(
            user_id=user.id,
            can_vote=bool(user.can_vote),
            is_admin=bool(user.is_admin),
            roles=tuple(user.discord_roles or ()),
        )


def require_admin(session: AuthSession) -> None:
    if not session.is_admin:
        raise PermissionDenied("admin access required")
