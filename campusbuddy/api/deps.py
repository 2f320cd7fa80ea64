from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.database import get_db
from campusbuddy.core.exceptions import AuthenticationError, AuthorizationError, TokenMissingError
from campusbuddy.core.logging_config import logger, set_user_id
from campusbuddy.core.security import VerifiedIdentity, get_identity_verifier
from campusbuddy.models.user import UserRole
from campusbuddy.services.realtime import RealtimeGateway, get_gateway
from campusbuddy.services.users import Caller, resolve_caller

security = HTTPBearer(auto_error=False)


def verify_identity(token: Optional[str]) -> VerifiedIdentity:
    """
    Check a bearer token with the identity provider.
    Shared by the REST dependency and the realtime handshake.
    """
    if not token:
        logger.log_auth_event("verify_token", False, reason=TokenMissingError.reason)
        raise TokenMissingError()

    try:
        return get_identity_verifier().verify(token)
    except AuthenticationError as e:
        logger.log_auth_event("verify_token", False, reason=e.reason)
        raise


async def authenticate_token(session: AsyncSession, token: Optional[str]) -> Caller:
    """Verify a bearer token and resolve the caller's profile"""
    caller = await resolve_caller(session, verify_identity(token))
    set_user_id(caller.id)
    return caller


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Caller:
    """Get current authenticated user"""
    token = credentials.credentials if credentials else None
    caller = await authenticate_token(db, token)
    request.state.user_id = caller.id
    return caller


def require_roles(*roles: UserRole):
    """Dependency factory: caller must hold one of `roles`"""
    async def _check(current_user: Caller = Depends(get_current_user)) -> Caller:
        if not current_user.has_role(*roles):
            raise AuthorizationError("Insufficient permissions")
        return current_user

    return _check


def get_realtime() -> RealtimeGateway:
    return get_gateway()
