"""Session routes for bearer-token holders: identity lookup and logout."""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from campushub.schemas import UserOut
from campushub.db.models.user import User
from campushub.auth import get_current_user
from campushub.core.security import revoke_token
from campushub.core.logging import logger

router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer()


@router.get("/me", response_model=UserOut)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """
    Get current user information from JWT token.

    Returns:
        Current user details
    """
    return current_user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    current_user: User = Depends(get_current_user),
):
    """
    Logout user by revoking their current token.
    Requires valid access token in Authorization header.

    Raises:
        HTTPException: 503 if the revocation list is unreachable
    """
    if not await revoke_token(credentials.credentials):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not revoke token, try again later",
        )
    logger.info(f"User {current_user.id} logged out")
    return None
