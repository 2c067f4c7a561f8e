"""
JWT access tokens and the Redis-backed revocation list.

Accounts are provisioned by the campus identity service; this module only
validates the bearer tokens the API accepts.
"""
from datetime import datetime, timezone
from typing import Dict
from jose import jwt, JWTError
from campushub.core.config import settings
from campushub.cache.redis_client import cache


def decode_token(token: str) -> Dict:
    """
    Decode and validate a JWT token.

    Raises:
        ValueError: If token is invalid, expired or has no subject
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise ValueError("Token has expired")
    except JWTError as e:
        raise ValueError(f"Invalid token: {str(e)}")

    if "sub" not in payload:
        raise ValueError("Invalid token payload: missing 'sub' field")

    return payload


async def revoke_token(token: str) -> bool:
    """
    Add token to the revocation list until it would have expired anyway.

    Returns:
        True if the token was stored, False if it is invalid or already expired
    """
    try:
        payload = decode_token(token)
    except ValueError:
        return False

    ttl = int(payload["exp"]) - int(datetime.now(timezone.utc).timestamp())
    if ttl <= 0:
        return False
    return await cache.set_flag(f"revoked_token:{token}", ttl)


async def is_token_revoked(token: str) -> bool:
    return await cache.exists(f"revoked_token:{token}")
