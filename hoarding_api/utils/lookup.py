import uuid
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api.utils.exceptions import AppException

T = TypeVar("T")


def validate_id(value: str, label: str) -> str:
    try:
        uuid.UUID(str(value))
    except ValueError:
        raise AppException(f"Invalid {label} ID format", status_code=400)
    return value


async def get_or_404(db: AsyncSession, model: type[T], record_id: Any, label: str) -> T:
    """Load a record by primary key, 400 on a malformed id and 404 when absent."""
    validate_id(record_id, label.lower())
    record = await db.get(model, record_id)
    if record is None:
        raise AppException(f"{label} not found", status_code=404)
    return record
