"""
Session endpoints.

Sign-in itself happens against the identity provider; these routes only read
and complete the profile behind a verified token.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.api.deps import get_current_user
from campusbuddy.core.database import get_db
from campusbuddy.core.logging_config import logger
from campusbuddy.schemas.common import ApiResponse
from campusbuddy.schemas.user import RegisterComplete, UserOut
from campusbuddy.services import users
from campusbuddy.services.users import Caller

router = APIRouter()


@router.get("/me", response_model=ApiResponse[UserOut])
async def me(current_user: Caller = Depends(get_current_user)):
    """Current profile (created on first contact)"""
    return ApiResponse(data=current_user.profile)


@router.post("/register-complete", response_model=ApiResponse[UserOut])
async def register_complete(
    payload: RegisterComplete,
    current_user: Caller = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Set name and batch after the first sign-in"""
    profile = await users.complete_registration(db, current_user, payload)
    return ApiResponse(data=profile, message="Registration completed")


@router.post("/logout", response_model=ApiResponse)
async def logout(current_user: Caller = Depends(get_current_user)):
    # Tokens are held client-side; nothing to revoke here
    logger.log_auth_event("logout", True, uid=current_user.id)
    return ApiResponse(message="Logged out successfully")
