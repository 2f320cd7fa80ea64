"""Id and timestamp helpers shared by models and services"""
import time
import uuid


def generate_id() -> str:
    """Generate an opaque document id"""
    return str(uuid.uuid4())


def now_ms() -> int:
    """Current time as epoch milliseconds (the wire timestamp format)"""
    return int(time.time() * 1000)


def temporary_id(kind: str) -> str:
    """Locally synthesised id returned when a create could not be persisted"""
    return f"temp_{kind}_{now_ms()}"


def is_temporary_id(value: str) -> bool:
    return value.startswith("temp_")
