"""
Input checks shared by REST handlers and the realtime gateway.

Keeping them here (instead of as pydantic constraints on the request models)
means both entry points reject bad input with the same messages.
"""
import re
from enum import Enum
from typing import Any, Optional, Tuple, Type, TypeVar

from campusbuddy.core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

BATCH_PATTERN = re.compile(r"^\d{2}[A-Z]-\d{4}$")
MAX_PAGE_SIZE = 100


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_text(value: Any, message: str, field: Optional[str] = None) -> str:
    """Present and non-empty after trimming; returns the trimmed text"""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message, field)
    return value.strip()


def require_fields(message: str, **values: Any) -> None:
    """All named values present and non-blank"""
    missing = [name for name, value in values.items() if is_blank(value)]
    if missing:
        raise ValidationError(message, missing[0])


def require_choice(value: Any, enum_cls: Type[E], message: str, field: Optional[str] = None) -> E:
    """Enumeration membership by value"""
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(message, field)


def optional_choice(value: Any, enum_cls: Type[E], default: E, message: str,
                    field: Optional[str] = None) -> E:
    if is_blank(value):
        return default
    return require_choice(value, enum_cls, message, field)


def coerce_int(value: Any, default: int) -> int:
    """Numeric query coercion; anything unparsable or non-positive falls back"""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def page_params(page: Any, limit: Any, default_limit: int = 20) -> Tuple[int, int]:
    """(page, limit) with page >= 1 and limit capped at MAX_PAGE_SIZE"""
    return coerce_int(page, 1), min(coerce_int(limit, default_limit), MAX_PAGE_SIZE)


def validate_batch(value: Any) -> str:
    """Batch codes look like 22L-6619"""
    batch = require_text(value, "Batch is required", "batch")
    if not BATCH_PATTERN.match(batch):
        raise ValidationError("Batch must be in format XXY-XXXX (e.g., 22L-6619)", "batch")
    return batch


def enum_list(enum_cls: Type[Enum]) -> str:
    return ", ".join(member.value for member in enum_cls)
