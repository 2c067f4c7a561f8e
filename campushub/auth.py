"""
Bearer-token dependencies for the API routes.

Tokens are minted by the campus identity service with the user's UUID as
``sub``; this module only checks them and loads the matching account.
"""
import uuid
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from campushub.db.session import get_session
from campushub.db.models.user import User, RoleEnum
from campushub.db.repositories import get_user
from campushub.core.security import decode_token, is_token_revoked

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> User:
    """
    Resolve the bearer token to a user.

    Raises:
        HTTPException: 401 if the token is revoked, invalid, not an access
            token, or names a user that does not exist
    """
    token = credentials.credentials

    if await is_token_revoked(token):
        raise _unauthorized("Token has been revoked")

    try:
        payload = decode_token(token)
    except ValueError:
        raise _unauthorized("Could not validate credentials")

    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")

    try:
        user_id = uuid.UUID(str(payload["sub"]))
    except ValueError:
        raise _unauthorized("Could not validate credentials")

    user = await get_user(session, user_id)
    if user is None:
        raise _unauthorized("Could not validate credentials")
    return user


def role_required(*roles: RoleEnum):
    """
    Dependency that admits only the given roles. Admins are always admitted.

    Usage:
        user=Depends(role_required(RoleEnum.organizer))
    """
    allowed = set(roles) | {RoleEnum.admin}

    async def role_checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user
    return role_checker
