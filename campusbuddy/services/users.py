"""
Profiles: first-contact resolution, lookups, leaderboard, search.
"""
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.exceptions import AuthorizationError, DependencyUnavailableError, ResourceNotFoundError
from campusbuddy.core.logging_config import logger
from campusbuddy.core.security import VerifiedIdentity
from campusbuddy.core.types import now_ms
from campusbuddy.models.user import User, UserRole
from campusbuddy.schemas.common import PaginatedResponse, build_page
from campusbuddy.schemas.user import UserOut, ProfileUpdate, RegisterComplete
from campusbuddy.services.effects import run_effect
from campusbuddy.services.validation import page_params, require_choice, require_text, validate_batch, coerce_int


@dataclass(frozen=True)
class Caller:
    """Snapshot of the authenticated profile, detached from the session"""
    id: str
    name: str
    email: str
    batch: str
    role: UserRole
    profile: UserOut

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles

    def require_self_or_admin(self, user_id: str, message: str) -> None:
        if user_id != self.id and not self.is_admin:
            raise AuthorizationError(message)

    @classmethod
    def from_profile(cls, profile: UserOut) -> "Caller":
        return cls(
            id=profile.id,
            name=profile.name,
            email=profile.email,
            batch=profile.batch,
            role=profile.role,
            profile=profile,
        )


def synthesize_profile(identity: VerifiedIdentity) -> User:
    """Minimal profile for a verified identity with no stored document"""
    return User(
        id=identity.uid,
        name=identity.display_name,
        email=identity.email,
        batch="",
        role=UserRole.STUDENT,
        points=0,
        badges=[],
        is_online=False,
        profile_picture=identity.claims.get("picture"),
        joined_at=now_ms(),
    )


async def resolve_caller(session: AsyncSession, identity: VerifiedIdentity) -> Caller:
    """
    Load the caller's profile, creating it on first contact.

    The store being down does not block authentication: the profile is then
    synthesised from the token claims and used for this request only.
    """
    try:
        user = await session.get(User, identity.uid)
    except SQLAlchemyError as e:
        logger.log_effect_failure("load_profile", e, target_user=identity.uid)
        await session.rollback()
        user = None

    if user is not None:
        return Caller.from_profile(UserOut.model_validate(user))

    user = synthesize_profile(identity)
    profile = UserOut.model_validate(user)

    async def _persist():
        session.add(user)

    if await run_effect(session, "create_profile", _persist, target_user=identity.uid):
        logger.info(f"Created profile on first contact: {identity.uid}")

    return Caller.from_profile(profile)


async def get_user(session: AsyncSession, user_id: str) -> UserOut:
    try:
        user = await session.get(User, user_id)
    except SQLAlchemyError as e:
        logger.log_error_with_context(e, "get_user")
        raise DependencyUnavailableError("Server temporarily unavailable")
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    return UserOut.model_validate(user)


async def list_users(
    session: AsyncSession,
    page=None,
    limit=None,
    batch: Optional[str] = None,
    role: Optional[str] = None,
) -> PaginatedResponse:
    page, limit = page_params(page, limit, default_limit=20)

    filters = []
    if batch:
        filters.append(User.batch == batch)
    if role:
        filters.append(User.role == require_choice(role, UserRole, "Invalid role", "role"))

    try:
        total = await session.scalar(select(func.count()).select_from(User).where(*filters))
        result = await session.execute(
            select(User)
            .where(*filters)
            .order_by(User.points.desc(), User.name)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        users = [UserOut.model_validate(u) for u in result.scalars().all()]
    except SQLAlchemyError as e:
        logger.log_effect_failure("list_users", e)
        return build_page([], 0, page, limit)

    return build_page(users, total or 0, page, limit)


async def leaderboard(session: AsyncSession, limit=None) -> List[UserOut]:
    limit = min(coerce_int(limit, 10), 100)
    try:
        result = await session.execute(
            select(User).order_by(User.points.desc(), User.joined_at).limit(limit)
        )
    except SQLAlchemyError as e:
        logger.log_effect_failure("leaderboard", e)
        return []
    return [UserOut.model_validate(u) for u in result.scalars().all()]


async def search_users(session: AsyncSession, query: str, limit=None) -> List[UserOut]:
    """Name prefix search"""
    limit = min(coerce_int(limit, 10), 100)
    prefix = query.strip()
    if not prefix:
        return []
    try:
        result = await session.execute(
            select(User)
            .where(User.name.startswith(prefix, autoescape=True))
            .order_by(User.name)
            .limit(limit)
        )
    except SQLAlchemyError as e:
        logger.log_effect_failure("search_users", e)
        return []
    return [UserOut.model_validate(u) for u in result.scalars().all()]


async def _load_or_create(session: AsyncSession, caller: Caller) -> User:
    user = await session.get(User, caller.id)
    if user is None:
        user = User(
            id=caller.id,
            name=caller.name,
            email=caller.email,
            batch=caller.batch,
            role=caller.role,
            points=0,
            badges=[],
            is_online=False,
            joined_at=now_ms(),
        )
        session.add(user)
    return user


async def update_profile(session: AsyncSession, caller: Caller, payload: ProfileUpdate) -> UserOut:
    name = None
    if payload.name is not None:
        name = require_text(payload.name, "Name cannot be empty", "name")

    try:
        user = await _load_or_create(session, caller)
        if name is not None:
            user.name = name
        if payload.profile_picture is not None:
            user.profile_picture = payload.profile_picture.strip() or None
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_error_with_context(e, "update_profile")
        raise DependencyUnavailableError("Server temporarily unavailable")

    return UserOut.model_validate(user)


async def complete_registration(session: AsyncSession, caller: Caller, payload: RegisterComplete) -> UserOut:
    """Set name and batch after the first sign-in"""
    name = require_text(payload.name, "Name and batch are required", "name")
    batch = validate_batch(payload.batch)

    try:
        user = await _load_or_create(session, caller)
        user.name = name
        user.batch = batch
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_error_with_context(e, "complete_registration")
        raise DependencyUnavailableError("Server temporarily unavailable")

    logger.log_auth_event("register_complete", True, uid=caller.id)
    return UserOut.model_validate(user)
