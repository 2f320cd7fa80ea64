"""Envelope and base schemas shared by every resource"""
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; readable from ORM rows"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Uniform envelope: {success, data?, error?, message?}"""
    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None


class PaginatedResponse(CamelModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    limit: int
    has_more: bool


def build_page(items: List[T], total: int, page: int, limit: int) -> PaginatedResponse[T]:
    """Wrap one page of items; hasMore follows from what was actually returned"""
    return PaginatedResponse(
        data=items,
        total=total,
        page=page,
        limit=limit,
        has_more=(page - 1) * limit + len(items) < total,
    )
