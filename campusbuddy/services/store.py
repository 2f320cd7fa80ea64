"""Document store access helpers shared by the resource services"""
from typing import Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusbuddy.core.exceptions import DependencyUnavailableError, ResourceNotFoundError
from campusbuddy.core.logging_config import logger

M = TypeVar("M")

UNAVAILABLE = "Server temporarily unavailable"


async def fetch(session: AsyncSession, model: Type[M], object_id: str) -> Optional[M]:
    """Point read; a store failure here cannot degrade"""
    try:
        return await session.get(model, object_id)
    except SQLAlchemyError as e:
        logger.log_error_with_context(e, f"fetch {model.__name__}")
        await session.rollback()
        raise DependencyUnavailableError(UNAVAILABLE)


async def fetch_or_404(session: AsyncSession, model: Type[M], object_id: str, label: str) -> M:
    obj = await fetch(session, model, object_id)
    if obj is None:
        raise ResourceNotFoundError(label, object_id)
    return obj


async def commit(session: AsyncSession, context: str) -> None:
    """Commit a primary write, surfacing store failures as 503"""
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_error_with_context(e, context)
        raise DependencyUnavailableError(UNAVAILABLE)


async def delete_with(session: AsyncSession, obj, *batched, context: str) -> None:
    """Delete `obj` together with batched dependent rows in one commit"""
    try:
        for statement in batched:
            await session.execute(statement)
        await session.delete(obj)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.log_error_with_context(e, context)
        raise DependencyUnavailableError(UNAVAILABLE)
